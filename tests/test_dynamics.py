"""Tests for the kinematic bicycle model."""

import math

import casadi as ca
import numpy as np
import pytest

from pathmpc import dynamics
from pathmpc.state import PathCoefficients

DT = 0.1
LF = 2.67


class TestPredict:
    def test_straight_line_at_constant_speed(self):
        flat = PathCoefficients([0.0, 0.0, 0.0, 0.0])
        nxt = dynamics.predict((0.0, 0.0, 0.0, 10.0, 0.0, 0.0), (0.0, 0.0), flat, DT, LF)
        assert nxt == pytest.approx((1.0, 0.0, 0.0, 10.0, 0.0, 0.0))

    def test_formulas(self):
        coeffs = PathCoefficients([1.0, 0.2, 0.03, -0.004])
        x0, y0, psi0, v0, cte0, epsi0 = 2.0, 0.5, 0.1, 8.0, 0.3, -0.2
        delta0, a0 = 0.05, 0.7

        f0 = 1.0 + 0.2 * x0 + 0.03 * x0 ** 2 - 0.004 * x0 ** 3
        psides0 = math.atan(0.2 + 2 * 0.03 * x0 - 3 * 0.004 * x0 ** 2)
        expected = (
            x0 + v0 * math.cos(psi0) * DT,
            y0 + v0 * math.sin(psi0) * DT,
            psi0 - v0 / LF * delta0 * DT,
            v0 + a0 * DT,
            (f0 - y0) + v0 * math.sin(epsi0) * DT,
            (psi0 - psides0) - v0 / LF * delta0 * DT,
        )
        result = dynamics.predict((x0, y0, psi0, v0, cte0, epsi0), (delta0, a0), coeffs, DT, LF)
        assert result == pytest.approx(expected)

    def test_positive_steering_turns_right(self):
        flat = PathCoefficients([0.0, 0.0, 0.0, 0.0])
        nxt = dynamics.predict((0.0, 0.0, 0.0, 10.0, 0.0, 0.0), (0.2, 0.0), flat, DT, LF)
        psi1 = nxt[2]
        assert psi1 < 0.0

    def test_no_yaw_change_when_stationary(self):
        flat = PathCoefficients([0.0, 0.0, 0.0, 0.0])
        nxt = dynamics.predict((0.0, 0.0, 0.3, 0.0, 0.0, 0.0), (0.4, 1.0), flat, DT, LF)
        assert nxt[2] == pytest.approx(0.3)
        assert nxt[3] == pytest.approx(0.1)


class TestResidual:
    def test_zero_at_model_prediction(self):
        coeffs = PathCoefficients([0.5, -0.1, 0.02, 0.001])
        state = (1.0, -0.4, 0.2, 15.0, 0.9, 0.1)
        control = (-0.1, 0.5)
        nxt = dynamics.predict(state, control, coeffs, DT, LF)
        res = dynamics.residual(state, control, nxt, coeffs, DT, LF)
        assert res == pytest.approx((0.0,) * 6, abs=1e-12)

    def test_sign_is_predicted_minus_actual(self):
        coeffs = PathCoefficients([0.0, 0.0, 0.0, 0.0])
        state = (0.0, 0.0, 0.0, 10.0, 0.0, 0.0)
        nxt = list(dynamics.predict(state, (0.0, 0.0), coeffs, DT, LF))
        nxt[0] += 0.25
        res = dynamics.residual(state, (0.0, 0.0), nxt, coeffs, DT, LF)
        assert res[0] == pytest.approx(-0.25)
        assert res[1:] == pytest.approx((0.0,) * 5)


class TestSymbolic:
    def test_symbolic_matches_numeric(self):
        coeffs = PathCoefficients([0.3, 0.05, -0.01, 0.002])
        s = ca.SX.sym('s', 6)
        u = ca.SX.sym('u', 2)
        predicted = dynamics.predict([s[i] for i in range(6)], [u[0], u[1]], coeffs, DT, LF)
        fn = ca.Function('f', [s, u], [ca.vertcat(*predicted)])

        state = (1.5, 0.2, -0.1, 9.0, 0.4, 0.05)
        control = (0.08, -0.3)
        symbolic = np.asarray(fn(state, control)).ravel()
        numeric = dynamics.predict(state, control, coeffs, DT, LF)
        np.testing.assert_allclose(symbolic, numeric, rtol=1e-12, atol=1e-12)

    def test_numeric_inputs_return_floats(self):
        coeffs = PathCoefficients([0.0, 0.1, 0.0, 0.0])
        result = dynamics.predict((0.0, 0.0, 0.0, 1.0, 0.0, 0.0), (0.0, 0.0), coeffs, DT, LF)
        assert all(isinstance(value, float) for value in result)
