"""Boundary to the external NLP solver.

The controller only describes the problem (evaluators plus bounds) and
hands it to a :class:`NonlinearSolver`.  :class:`IpoptSolver` is the
production implementation: CasADi traces the evaluators into a symbolic
graph, differentiates it and solves with IPOPT.  Tests substitute their
own solver to check the problem formulation without IPOPT.
"""

import abc
import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence

import casadi as ca
import numpy as np

from pathmpc.bounds import Bounds

logger = logging.getLogger(__name__)


class SolverStatus(enum.Enum):
    SUCCESS = 'success'
    ACCEPTABLE = 'acceptable'
    INFEASIBLE = 'infeasible'
    TIME_LIMIT = 'time_limit'
    MAX_ITERATIONS = 'max_iterations'
    NUMERICAL_FAILURE = 'numerical_failure'
    INVALID_PROBLEM = 'invalid_problem'
    UNKNOWN = 'unknown'


# IPOPT return_status strings as reported by CasADi
IPOPT_STATUS = {
    'Solve_Succeeded': SolverStatus.SUCCESS,
    'Solved_To_Acceptable_Level': SolverStatus.ACCEPTABLE,
    'Feasible_Point_Found': SolverStatus.ACCEPTABLE,
    'Infeasible_Problem_Detected': SolverStatus.INFEASIBLE,
    'Not_Enough_Degrees_Of_Freedom': SolverStatus.INFEASIBLE,
    'Maximum_CpuTime_Exceeded': SolverStatus.TIME_LIMIT,
    'Maximum_WallTime_Exceeded': SolverStatus.TIME_LIMIT,
    'Maximum_Iterations_Exceeded': SolverStatus.MAX_ITERATIONS,
    'Restoration_Failed': SolverStatus.NUMERICAL_FAILURE,
    'Error_In_Step_Computation': SolverStatus.NUMERICAL_FAILURE,
    'Invalid_Number_Detected': SolverStatus.NUMERICAL_FAILURE,
    'Search_Direction_Becomes_Too_Small': SolverStatus.NUMERICAL_FAILURE,
    'Diverging_Iterates': SolverStatus.NUMERICAL_FAILURE,
    'Invalid_Problem_Definition': SolverStatus.INVALID_PROBLEM,
    'Invalid_Option': SolverStatus.INVALID_PROBLEM,
}


@dataclass(eq=False)
class NLPProblem:
    """A constrained NLP ``min f(x) s.t. lbg <= g(x) <= ubg, lbx <= x <= ubx``.

    Attributes:
        n_vars: Length of the decision vector.
        n_constraints: Length of the constraint vector.
        objective: ``values -> scalar``.
        constraints: ``values -> sequence`` of length ``n_constraints``.
        variable_bounds: Bounds on ``x``.
        constraint_bounds: Bounds on ``g(x)``.
    """
    n_vars: int
    n_constraints: int
    objective: Callable[[Sequence], Any]
    constraints: Callable[[Sequence], Sequence]
    variable_bounds: Bounds
    constraint_bounds: Bounds


@dataclass(eq=False)
class SolveResult:
    """Outcome of one solver call.  ``info`` holds the raw solver statistics."""
    status: SolverStatus
    objective_value: float
    solution: np.ndarray
    return_status: str = ''
    iterations: int = 0
    solve_time: float = 0.0
    info: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.status is SolverStatus.SUCCESS


class NonlinearSolver(abc.ABC):
    """Capability interface of an external constrained optimiser."""

    @abc.abstractmethod
    def solve(self, problem: NLPProblem,
              initial_guess: Optional[np.ndarray] = None,
              time_budget: Optional[float] = None) -> SolveResult:
        """Solve ``problem`` starting from ``initial_guess`` (zeros if None).

        Must return within roughly ``time_budget`` seconds, reporting a
        non-success status if it could not converge in time.
        """
        raise NotImplementedError


class IpoptSolver(NonlinearSolver):
    """CasADi ``nlpsol`` with the IPOPT plugin.

    Args:
        print_level: IPOPT verbosity (0 is silent).
        options: Extra ``nlpsol`` options passed through untouched, e.g.
            ``{'ipopt.tol': 1e-6}``.  They override the defaults below.
    """

    DEFAULTS = {
        'print_time': False,
        'ipopt.sb': 'yes',
    }

    def __init__(self, print_level: int = 0, options: Optional[Dict[str, Any]] = None):
        self._options = dict(self.DEFAULTS)
        self._options['ipopt.print_level'] = print_level
        if options is not None:
            self._options.update(options)

    @property
    def options(self) -> Dict[str, Any]:
        return dict(self._options)

    def options_for(self, time_budget: Optional[float] = None) -> Dict[str, Any]:
        """Options of one solve.  ``time_budget`` becomes ``ipopt.max_cpu_time``
        unless that option was given explicitly."""
        opts = dict(self._options)
        if time_budget is not None:
            opts.setdefault('ipopt.max_cpu_time', float(time_budget))
        return opts

    def solve(self, problem: NLPProblem,
              initial_guess: Optional[np.ndarray] = None,
              time_budget: Optional[float] = None) -> SolveResult:
        if initial_guess is None:
            initial_guess = np.zeros(problem.n_vars)

        x = ca.SX.sym('x', problem.n_vars)
        f = problem.objective(x)
        g = ca.vertcat(*problem.constraints(x))

        opts = self.options_for(time_budget)

        vb = problem.variable_bounds
        cb = problem.constraint_bounds

        start = time.perf_counter()
        try:
            solver = ca.nlpsol('mpc', 'ipopt', {'x': x, 'f': f, 'g': g}, opts)
            sol = solver(x0=initial_guess, lbx=vb.lower, ubx=vb.upper,
                         lbg=cb.lower, ubg=cb.upper)
        except RuntimeError as e:
            # CasADi rejects ill-posed problems (e.g. lbx > ubx) before IPOPT runs
            solve_time = time.perf_counter() - start
            logger.warning("NLP solver rejected the problem: %s", e)
            return SolveResult(
                status=SolverStatus.INVALID_PROBLEM,
                objective_value=float('nan'),
                solution=np.full(problem.n_vars, np.nan),
                return_status=str(e).strip().splitlines()[-1] if str(e).strip() else '',
                solve_time=solve_time,
            )
        solve_time = time.perf_counter() - start

        stats = solver.stats()
        return_status = stats.get('return_status', '')
        status = IPOPT_STATUS.get(return_status, SolverStatus.UNKNOWN)
        if status is SolverStatus.UNKNOWN and stats.get('success', False):
            status = SolverStatus.SUCCESS

        result = SolveResult(
            status=status,
            objective_value=float(sol['f']),
            solution=np.asarray(sol['x'].full()).ravel(),
            return_status=return_status,
            iterations=int(stats.get('iter_count', 0)),
            solve_time=solve_time,
            info=dict(stats),
        )
        logger.debug("IPOPT %s after %d iterations in %.3fs (cost %.3f)",
                     return_status, result.iterations, solve_time, result.objective_value)
        return result
