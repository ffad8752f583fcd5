"""Receding-horizon path tracking controller.

Each call to :meth:`MPC.solve` builds a fresh NLP from the current vehicle
state and reference polynomial, solves it, and returns only the first
control of the optimal sequence together with the predicted path.
"""

import logging
from typing import Optional, Sequence, Union

import numpy as np

from pathmpc import bounds, constraints, cost, extractor
from pathmpc.config import MPCConfig
from pathmpc.errors import ConfigurationError, ConvergenceFailure
from pathmpc.extractor import MPCSolution
from pathmpc.layout import DecisionLayout
from pathmpc.solver import IpoptSolver, NLPProblem, NonlinearSolver, SolverStatus
from pathmpc.state import ActuatorCommand, PathCoefficients, VehicleState

logger = logging.getLogger(__name__)

class MPC:
    """Model predictive controller for path tracking.

    The optimisation itself is stateless: no solution is carried between
    cycles and the initial guess is always zero.  The only state kept here
    is the last successful command, used by the ``'hold'`` failure policy.

    Args:
        config: Controller configuration; defaults to ``MPCConfig()``.
        solver: NLP solver; defaults to an :class:`IpoptSolver` configured
            from ``config``.
    """

    def __init__(self,
                 config: Optional[MPCConfig] = None,
                 solver: Optional[NonlinearSolver] = None):
        self._config = config if config is not None else MPCConfig()
        self._layout = DecisionLayout(self._config.horizon)
        if solver is None:
            solver = IpoptSolver(print_level=self._config.print_level,
                                 options=self._config.solver_options)
        self._solver = solver
        self._last_command: Optional[ActuatorCommand] = None

    @property
    def config(self) -> MPCConfig:
        return self._config

    @property
    def layout(self) -> DecisionLayout:
        return self._layout

    @property
    def last_command(self) -> Optional[ActuatorCommand]:
        return self._last_command

    @property
    def stop_command(self) -> ActuatorCommand:
        """Straight wheels and full braking within the configured limit."""
        return ActuatorCommand(delta=0.0, a=-self._config.accel_limit)

    def reset(self):
        self._last_command = None

    def build_problem(self, state: VehicleState, coeffs: PathCoefficients) -> NLPProblem:
        """Assemble the NLP for one cycle."""
        layout = self._layout
        config = self._config
        return NLPProblem(
            n_vars=layout.n_vars,
            n_constraints=layout.n_constraints,
            objective=lambda values: cost.objective(values, layout, config),
            constraints=lambda values: constraints.constraints(values, layout, coeffs, config),
            variable_bounds=bounds.variable_bounds(layout, config),
            constraint_bounds=bounds.constraint_bounds(layout, state),
        )

    def solve(self,
              state: Union[VehicleState, Sequence[float]],
              coeffs: Union[PathCoefficients, Sequence[float]]) -> MPCSolution:
        """Compute the command for this cycle.

        Args:
            state: Current ``(x, y, psi, v, cte, epsi)``.
            coeffs: Reference path polynomial, lowest order first.

        Returns:
            The first actuator command and the predicted trajectory.

        Raises:
            ConfigurationError: on malformed input, before solving.
            ConvergenceFailure: if the solve fails and the failure policy
                is ``'raise'``.
        """
        if not isinstance(state, VehicleState):
            state = VehicleState.from_sequence(state)
        if not isinstance(coeffs, PathCoefficients):
            coeffs = PathCoefficients(coeffs)
        if not state.is_finite():
            raise ConfigurationError(f"Vehicle state must be finite: {state}")

        problem = self.build_problem(state, coeffs)
        result = self._solver.solve(problem,
                                    initial_guess=np.zeros(problem.n_vars),
                                    time_budget=self._config.time_budget)
        try:
            solution = extractor.extract(result, self._layout, problem.variable_bounds)
        except ConvergenceFailure as e:
            logger.warning("MPC solve failed: %s", e)
            return self._handle_failure(e)

        logger.debug("Cost %.4f  delta=%.4f a=%.4f", solution.cost,
                     solution.command.delta, solution.command.a)
        self._last_command = solution.command
        return solution

    def _handle_failure(self, error: ConvergenceFailure) -> MPCSolution:
        policy = self._config.on_failure
        if policy == 'raise':
            raise error

        if policy == 'hold' and self._last_command is not None:
            command = self._last_command
        else:
            command = self.stop_command
        logger.info("Applying fallback command %s (policy %r)", command, policy)

        status = error.status if error.status is not None else SolverStatus.UNKNOWN
        return MPCSolution(
            command=command,
            trajectory_x=np.empty(0),
            trajectory_y=np.empty(0),
            cost=float('nan'),
            status=status,
        )
