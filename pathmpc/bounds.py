"""Variable and constraint bounds of the tracking NLP."""

import logging
from dataclasses import dataclass

import numpy as np

from pathmpc.config import MPCConfig
from pathmpc.layout import DecisionLayout, STATE_SEGMENTS
from pathmpc.state import VehicleState

logger = logging.getLogger(__name__)

# Treated as infinity by the solver.
UNBOUNDED = float(np.finfo(np.float32).max)


@dataclass(frozen=True, eq=False)
class Bounds:
    """Parallel lower/upper bound arrays."""
    lower: np.ndarray
    upper: np.ndarray

    def __len__(self):
        return len(self.lower)


def variable_bounds(layout: DecisionLayout, config: MPCConfig) -> Bounds:
    """Box bounds on the decision vector.

    States are left unbounded, steering is limited to the configured angle
    and acceleration to ``[-accel_limit, accel_limit]``.
    """
    lower = np.full(layout.n_vars, -UNBOUNDED)
    upper = np.full(layout.n_vars, UNBOUNDED)

    max_steer = config.max_steer_radians
    if max_steer < 0:
        logger.warning("Negative steering limit %.3f rad makes the problem infeasible", max_steer)
    steer = layout.segment_slice('delta')
    lower[steer] = -max_steer
    upper[steer] = max_steer

    accel = layout.segment_slice('a')
    lower[accel] = -config.accel_limit
    upper[accel] = config.accel_limit

    return Bounds(lower, upper)


def constraint_bounds(layout: DecisionLayout, state: VehicleState) -> Bounds:
    """Zero for every dynamics residual; the initial state is pinned to ``state``."""
    lower = np.zeros(layout.n_constraints)
    upper = np.zeros(layout.n_constraints)
    for name, value in zip(STATE_SEGMENTS, state):
        idx = layout.constraint_index(name, 0)
        lower[idx] = value
        upper[idx] = value
    return Bounds(lower, upper)
