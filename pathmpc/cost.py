"""Weighted objective over the prediction horizon."""

from typing import Sequence

from pathmpc.config import MPCConfig
from pathmpc.layout import DecisionLayout


def objective(values: Sequence, layout: DecisionLayout, config: MPCConfig):
    """Scalar cost of a decision vector.

    Sum of three groups of penalties:

    * tracking: cross-track error, heading error and speed error at every step;
    * actuator magnitude: steering and acceleration at every control step;
    * actuator smoothness: change between consecutive control steps.

    Only ``+``, ``-``, ``*`` and ``**`` are used, so ``values`` may be a
    numeric array or a symbolic vector.
    """
    w = config.weights
    N = layout.horizon
    cost = 0.0

    for t in range(N):
        cost += w.cte * (layout.state_at(values, 'cte', t) - config.cte_ref) ** 2
        cost += w.epsi * (layout.state_at(values, 'epsi', t) - config.epsi_ref) ** 2
        cost += w.v * (layout.state_at(values, 'v', t) - config.v_ref) ** 2

    for t in range(N - 1):
        cost += w.actuator * layout.control_at(values, 'delta', t) ** 2
        cost += w.actuator * layout.control_at(values, 'a', t) ** 2

    for t in range(N - 2):
        d_delta = layout.control_at(values, 'delta', t + 1) - layout.control_at(values, 'delta', t)
        d_accel = layout.control_at(values, 'a', t + 1) - layout.control_at(values, 'a', t)
        cost += w.delta_rate * d_delta ** 2
        cost += w.accel_rate * d_accel ** 2

    return cost
