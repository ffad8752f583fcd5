"""Decoding of a solver result into the command to apply."""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from pathmpc.bounds import Bounds
from pathmpc.errors import ConvergenceFailure
from pathmpc.layout import DecisionLayout
from pathmpc.solver import SolveResult, SolverStatus
from pathmpc.state import ActuatorCommand

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class MPCSolution:
    """Command for this cycle plus the predicted path.

    Attributes:
        command: Steering and acceleration to apply now.
        trajectory_x, trajectory_y: Predicted positions at steps 1..N-1.
        cost: Objective value of the solution.
        status: Solver status of the cycle.  A fallback command produced by
            the controller keeps the failed status here.
    """
    command: ActuatorCommand
    trajectory_x: np.ndarray
    trajectory_y: np.ndarray
    cost: float
    status: SolverStatus

    @property
    def trajectory(self) -> np.ndarray:
        """(N-1, 2) array of predicted ``(x, y)``."""
        return np.column_stack([self.trajectory_x, self.trajectory_y])

    @property
    def is_fallback(self) -> bool:
        return self.status is not SolverStatus.SUCCESS


def extract(result: SolveResult, layout: DecisionLayout,
            variable_bounds: Optional[Bounds] = None) -> MPCSolution:
    """Read the first control and the predicted trajectory from ``result``.

    IPOPT relaxes variable bounds slightly while iterating, so a converged
    command can sit a hair outside its box.  When ``variable_bounds`` is
    given the command is clipped back into it.

    Raises:
        ConvergenceFailure: if the solver did not succeed, or the decoded
            values are not finite.
    """
    if not result.success:
        raise ConvergenceFailure(
            f"Solver finished with status {result.status.value} "
            f"({result.return_status or 'no status'})", result)

    solution = np.asarray(result.solution, dtype=float)
    if solution.shape != (layout.n_vars,):
        raise ConvergenceFailure(
            f"Solution has shape {solution.shape}, expected ({layout.n_vars},)", result,
            status=SolverStatus.UNKNOWN)

    delta, a = layout.control(solution, 0)
    xs = layout.segment(solution, 'x')[1:]
    ys = layout.segment(solution, 'y')[1:]

    if not (np.isfinite([delta, a, result.objective_value]).all()
            and np.isfinite(xs).all() and np.isfinite(ys).all()):
        raise ConvergenceFailure("Solver returned non-finite values", result,
                                 status=SolverStatus.NUMERICAL_FAILURE)

    if variable_bounds is not None:
        i_delta, i_a = layout.index('delta', 0), layout.index('a', 0)
        delta = np.clip(delta, variable_bounds.lower[i_delta], variable_bounds.upper[i_delta])
        a = np.clip(a, variable_bounds.lower[i_a], variable_bounds.upper[i_a])

    return MPCSolution(
        command=ActuatorCommand(delta=float(delta), a=float(a)),
        trajectory_x=np.array(xs),
        trajectory_y=np.array(ys),
        cost=float(result.objective_value),
        status=result.status,
    )
