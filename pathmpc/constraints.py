"""Equality constraints of the tracking NLP."""

from typing import List, Sequence

from pathmpc import dynamics
from pathmpc.config import MPCConfig
from pathmpc.layout import DecisionLayout
from pathmpc.state import PathCoefficients


def constraints(values: Sequence, layout: DecisionLayout,
                coeffs: PathCoefficients, config: MPCConfig) -> List:
    """Constraint vector of length 6N, ordered step-major.

    Entries ``0..5`` are the initial state itself, to be pinned to the
    measured state by the constraint bounds.  Entries ``6t..6t+5`` hold the
    dynamics residual of the transition from step ``t-1`` to step ``t``.
    """
    g = list(layout.state(values, 0))
    for t in range(1, layout.horizon):
        g.extend(dynamics.residual(
            layout.state(values, t - 1),
            layout.control(values, t - 1),
            layout.state(values, t),
            coeffs, config.dt, config.lf,
        ))
    return g
