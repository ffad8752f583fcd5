"""Tests for the per-cycle value types."""

import math

import pytest

from pathmpc.errors import ConfigurationError
from pathmpc.state import ActuatorCommand, PathCoefficients, VehicleState


class TestPathCoefficients:
    @pytest.mark.parametrize("coeffs", [[], [1.0, 2.0, 3.0], [0.0] * 5])
    def test_wrong_count(self, coeffs):
        with pytest.raises(ConfigurationError):
            PathCoefficients(coeffs)

    def test_non_finite(self):
        with pytest.raises(ConfigurationError):
            PathCoefficients([0.0, float('inf'), 0.0, 0.0])

    def test_evaluate_and_derivative(self):
        path = PathCoefficients([1.0, -2.0, 0.5, 0.25])
        assert path.evaluate(2.0) == pytest.approx(1.0 - 4.0 + 2.0 + 2.0)
        assert path.derivative(2.0) == pytest.approx(-2.0 + 2.0 + 3.0)

    def test_sequence_behaviour(self):
        path = PathCoefficients((1, 2, 3, 4))
        assert len(path) == 4
        assert list(path) == [1.0, 2.0, 3.0, 4.0]
        assert path[3] == 4.0
        assert path == PathCoefficients([1.0, 2.0, 3.0, 4.0])


class TestVehicleState:
    def test_iteration_order(self):
        state = VehicleState(x=1.0, y=2.0, psi=3.0, v=4.0, cte=5.0, epsi=6.0)
        assert list(state) == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]

    def test_from_sequence(self):
        assert VehicleState.from_sequence([0, 1, 2, 3, 4, 5]).v == 3.0
        with pytest.raises(ConfigurationError):
            VehicleState.from_sequence([0, 1, 2])

    def test_is_finite(self):
        assert VehicleState(0, 0, 0, 0, 0, 0).is_finite()
        assert not VehicleState(0, 0, math.nan, 0, 0, 0).is_finite()


def test_command_tuple():
    assert ActuatorCommand(delta=0.1, a=-0.5).as_tuple() == (0.1, -0.5)
