"""Kinematic bicycle model with reference-path error terms.

State ``[x, y, psi, v, cte, epsi]``, control ``[delta, a]``::

    x1    = x0 + v0 * cos(psi0) * dt
    y1    = y0 + v0 * sin(psi0) * dt
    psi1  = psi0 - v0 / Lf * delta0 * dt
    v1    = v0 + a0 * dt
    cte1  = (f(x0) - y0) + v0 * sin(epsi0) * dt
    epsi1 = (psi0 - atan(f'(x0))) - v0 / Lf * delta0 * dt

A positive steering angle turns the vehicle right (heading decreases).
The same functions evaluate plain floats and CasADi symbols; the
trigonometric functions are picked from the argument types.
"""

import math
from typing import Sequence, Tuple

import casadi as ca

from pathmpc.state import PathCoefficients

_SYMBOLIC_TYPES = (ca.SX, ca.MX, ca.DM)


def _math_for(*values):
    """``casadi`` if any value is symbolic, else the ``math`` module."""
    if any(isinstance(value, _SYMBOLIC_TYPES) for value in values):
        return ca
    return math


def predict(state: Sequence, control: Sequence, coeffs: PathCoefficients,
            dt: float, lf: float) -> Tuple:
    """Advance ``state`` by one step of ``dt`` under ``control``.

    Args:
        state: ``(x, y, psi, v, cte, epsi)`` at step t-1.
        control: ``(delta, a)`` applied during the step.
        coeffs: Reference path polynomial.
        dt: Step duration (s).
        lf: Centre of gravity to front axle distance (m).

    Returns:
        The predicted ``(x, y, psi, v, cte, epsi)`` at step t.
    """
    x0, y0, psi0, v0, cte0, epsi0 = state
    delta0, a0 = control
    m = _math_for(x0, psi0, epsi0)

    f0 = coeffs.evaluate(x0)
    psides0 = m.atan(coeffs.derivative(x0))
    yaw_change = v0 / lf * delta0 * dt

    return (
        x0 + v0 * m.cos(psi0) * dt,
        y0 + v0 * m.sin(psi0) * dt,
        psi0 - yaw_change,
        v0 + a0 * dt,
        (f0 - y0) + v0 * m.sin(epsi0) * dt,
        (psi0 - psides0) - yaw_change,
    )


def residual(state: Sequence, control: Sequence, next_state: Sequence,
             coeffs: PathCoefficients, dt: float, lf: float) -> Tuple:
    """``predict(state, control) - next_state``; zero when the model holds."""
    predicted = predict(state, control, coeffs, dt, lf)
    return tuple(p - n for p, n in zip(predicted, next_state))
