"""Value types exchanged with the controller each cycle."""

import math
from dataclasses import dataclass, astuple
from typing import Iterator, Sequence, Tuple

from pathmpc.errors import ConfigurationError

# Degree of the reference polynomial.
PATH_DEGREE = 3


@dataclass(frozen=True)
class VehicleState:
    """Estimated vehicle pose and tracking errors at one instant.

    Attributes:
        x, y: Position in the vehicle's local frame.
        psi: Heading (rad).
        v: Speed.
        cte: Cross-track error.
        epsi: Heading error (rad).
    """
    x: float
    y: float
    psi: float
    v: float
    cte: float
    epsi: float

    def __iter__(self) -> Iterator[float]:
        return iter(astuple(self))

    def as_tuple(self) -> Tuple[float, ...]:
        return astuple(self)

    def is_finite(self) -> bool:
        return all(math.isfinite(value) for value in self)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> 'VehicleState':
        if len(values) != 6:
            raise ConfigurationError(f"VehicleState needs 6 values, got {len(values)}")
        return cls(*(float(value) for value in values))


@dataclass(frozen=True)
class ActuatorCommand:
    """Steering angle (rad, positive turns right) and normalised acceleration."""
    delta: float
    a: float

    def as_tuple(self) -> Tuple[float, float]:
        return self.delta, self.a


class PathCoefficients:
    """Cubic reference path ``y = c0 + c1*x + c2*x^2 + c3*x^3``.

    Coefficients are ordered lowest power first and expressed in the
    vehicle's local frame.  Evaluation only uses ``+`` and ``*`` so it works
    on floats as well as on symbolic solver variables.
    """

    def __init__(self, coefficients: Sequence[float]):
        coefficients = tuple(float(c) for c in coefficients)
        if len(coefficients) != PATH_DEGREE + 1:
            raise ConfigurationError(
                f"Expected {PATH_DEGREE + 1} path coefficients, got {len(coefficients)}")
        if not all(math.isfinite(c) for c in coefficients):
            raise ConfigurationError(f"Path coefficients must be finite: {coefficients}")
        self._coefficients = coefficients

    @property
    def coefficients(self) -> Tuple[float, ...]:
        return self._coefficients

    def __len__(self):
        return len(self._coefficients)

    def __iter__(self):
        return iter(self._coefficients)

    def __getitem__(self, item):
        return self._coefficients[item]

    def __eq__(self, other):
        if not isinstance(other, PathCoefficients):
            return NotImplemented
        return self._coefficients == other._coefficients

    def __hash__(self):
        return hash(self._coefficients)

    def __repr__(self):
        return f"PathCoefficients({list(self._coefficients)})"

    def evaluate(self, x):
        """Reference lateral position at ``x``."""
        c0, c1, c2, c3 = self._coefficients
        return c0 + c1 * x + c2 * x * x + c3 * x * x * x

    def derivative(self, x):
        """Slope of the reference path at ``x``."""
        _, c1, c2, c3 = self._coefficients
        return c1 + 2 * c2 * x + 3 * c3 * x * x
