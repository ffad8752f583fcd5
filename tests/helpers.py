"""Deterministic stand-ins for the NLP solver and trajectory helpers."""

from typing import List, Optional

import numpy as np

from pathmpc import dynamics
from pathmpc.config import MPCConfig
from pathmpc.layout import DecisionLayout, STATE_SEGMENTS
from pathmpc.solver import NLPProblem, NonlinearSolver, SolveResult, SolverStatus
from pathmpc.state import PathCoefficients, VehicleState


def rollout(layout: DecisionLayout, state: VehicleState, coeffs: PathCoefficients,
            config: MPCConfig, delta: float = 0.0, a: float = 0.0) -> np.ndarray:
    """Decision vector obtained by applying constant controls from ``state``."""
    values = np.zeros(layout.n_vars)
    current = state.as_tuple()
    for t in range(layout.horizon):
        for name, value in zip(STATE_SEGMENTS, current):
            values[layout.index(name, t)] = value
        if t < layout.horizon - 1:
            values[layout.index('delta', t)] = delta
            values[layout.index('a', t)] = a
            current = dynamics.predict(current, (delta, a), coeffs, config.dt, config.lf)
    return values


class RolloutSolver(NonlinearSolver):
    """Returns the trajectory of constant controls from the pinned initial state.

    The initial state is read back from the constraint bounds, so the
    returned vector satisfies every constraint of a correctly built problem.
    """

    def __init__(self, coeffs: PathCoefficients, config: MPCConfig,
                 delta: float = 0.05, a: float = 0.5):
        self.coeffs = coeffs
        self.config = config
        self.delta = delta
        self.a = a
        self.problems: List[NLPProblem] = []

    def solve(self, problem, initial_guess=None, time_budget=None):
        self.problems.append(problem)
        layout = DecisionLayout(self.config.horizon)
        pinned = problem.constraint_bounds.lower[:len(STATE_SEGMENTS)]
        state = VehicleState.from_sequence(pinned)
        values = rollout(layout, state, self.coeffs, self.config, self.delta, self.a)
        return SolveResult(
            status=SolverStatus.SUCCESS,
            objective_value=float(problem.objective(values)),
            solution=values,
            return_status='Solve_Succeeded',
        )


class ScriptedSolver(NonlinearSolver):
    """Replays a fixed sequence of results."""

    def __init__(self, results: List[SolveResult]):
        self._results = list(results)
        self.calls = 0

    def solve(self, problem, initial_guess=None, time_budget=None):
        self.calls += 1
        return self._results.pop(0)


def make_result(layout: DecisionLayout, status: SolverStatus = SolverStatus.SUCCESS,
                delta: float = 0.1, a: float = 0.2,
                solution: Optional[np.ndarray] = None) -> SolveResult:
    if solution is None:
        solution = np.arange(layout.n_vars, dtype=float)
        solution[layout.index('delta', 0)] = delta
        solution[layout.index('a', 0)] = a
    return SolveResult(status=status, objective_value=12.5, solution=solution,
                       return_status=status.value)


