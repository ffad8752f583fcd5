"""Shared fixtures."""

import pytest

from pathmpc.config import MPCConfig
from pathmpc.layout import DecisionLayout
from pathmpc.state import PathCoefficients, VehicleState


@pytest.fixture
def config():
    return MPCConfig()


@pytest.fixture
def layout(config):
    return DecisionLayout(config.horizon)


@pytest.fixture
def curved_path():
    return PathCoefficients([0.5, 0.1, -0.02, 0.001])


@pytest.fixture
def moving_state():
    return VehicleState(x=0.0, y=0.0, psi=0.05, v=12.0, cte=0.5, epsi=-0.05)
