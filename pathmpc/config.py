"""Controller configuration.

A single immutable :class:`MPCConfig` is passed explicitly to every
component.  Defaults reproduce the tuning the controller was calibrated
with (10 steps of 0.1 s, Lf = 2.67 m, 25 degree steering limit).
"""

import dataclasses
import json
import logging
import math
import numbers
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping

from pathmpc.errors import ConfigurationError

logger = logging.getLogger(__name__)

FAILURE_POLICIES = ('raise', 'hold', 'stop')


def _check_number(name: str, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


@dataclass(frozen=True)
class CostWeights:
    """Weights of the individual cost terms."""
    # Tracking
    cte: float = 1500.0
    epsi: float = 2000.0
    v: float = 1.0

    # Actuator magnitude (shared by steering and acceleration)
    actuator: float = 10.0

    # Actuator smoothness between consecutive steps
    delta_rate: float = 1000.0
    accel_rate: float = 10.0

    def __post_init__(self):
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            _check_number(f"Cost weight {f.name!r}", value)
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(
                    f"Cost weight {f.name!r} must be finite and non-negative, got {value}")


@dataclass(frozen=True)
class MPCConfig:
    """Configuration of the tracking controller.

    Args:
        horizon: Number of predicted steps N (at least 2).
        dt: Duration of one step (s).
        lf: Distance from the centre of gravity to the front axle (m).
        max_steer_degrees: Steering limit; delta is bounded to +/- this.
        accel_limit: Acceleration is bounded to [-accel_limit, accel_limit].
        v_ref: Target speed.
        cte_ref: Target cross-track error.
        epsi_ref: Target heading error.
        weights: Cost term weights.
        time_budget: Solver CPU time limit per cycle (s).
        print_level: IPOPT verbosity.
        solver_options: Extra options handed to the solver untouched.  Stored
            read-only and left out of the hash.
        on_failure: Caller-level policy when a solve fails; one of
            ``'raise'``, ``'hold'`` or ``'stop'``.
    """
    horizon: int = 10
    dt: float = 0.1
    lf: float = 2.67

    max_steer_degrees: float = 25.0
    accel_limit: float = 1.0

    v_ref: float = 130.0
    cte_ref: float = 0.0
    epsi_ref: float = 0.0

    weights: CostWeights = field(default_factory=CostWeights)

    time_budget: float = 0.5
    print_level: int = 0
    solver_options: Mapping[str, Any] = field(default_factory=dict, hash=False)

    on_failure: str = 'raise'

    def __post_init__(self):
        if isinstance(self.horizon, bool) or not isinstance(self.horizon, int) or self.horizon < 2:
            raise ConfigurationError(f"Horizon must be an integer >= 2, got {self.horizon!r}")
        for name in ('dt', 'lf', 'time_budget', 'accel_limit', 'max_steer_degrees',
                     'v_ref', 'cte_ref', 'epsi_ref'):
            _check_number(name, getattr(self, name))
        for name in ('dt', 'lf', 'time_budget', 'accel_limit'):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")
        if not math.isfinite(self.max_steer_degrees):
            raise ConfigurationError("max_steer_degrees must be finite")
        if self.on_failure not in FAILURE_POLICIES:
            raise ConfigurationError(
                f"Unknown failure policy {self.on_failure!r}; "
                f"expected one of {FAILURE_POLICIES}")
        if not isinstance(self.weights, CostWeights):
            raise ConfigurationError("weights must be a CostWeights instance")
        if isinstance(self.print_level, bool) or not isinstance(self.print_level, int):
            raise ConfigurationError(f"print_level must be an integer, got {self.print_level!r}")
        if not isinstance(self.solver_options, Mapping):
            raise ConfigurationError("solver_options must be a mapping")
        object.__setattr__(self, 'solver_options', MappingProxyType(dict(self.solver_options)))

    @property
    def max_steer_radians(self) -> float:
        return math.radians(self.max_steer_degrees)

    def replace(self, **changes) -> 'MPCConfig':
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> 'MPCConfig':
        """Build a configuration from a (possibly nested) mapping.

        Keys missing from ``params`` keep their defaults.  A ``weights``
        entry may itself be a mapping of weight names.
        """
        params = dict(params)
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(params) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")

        weights = params.pop('weights', None)
        if isinstance(weights, Mapping):
            weight_names = {f.name for f in dataclasses.fields(CostWeights)}
            bad = set(weights) - weight_names
            if bad:
                raise ConfigurationError(f"Unknown cost weights: {sorted(bad)}")
            params['weights'] = CostWeights(**weights)
        elif weights is not None:
            params['weights'] = weights
        return cls(**params)

    @classmethod
    def from_json(cls, path: str) -> 'MPCConfig':
        """Load a configuration from a JSON file."""
        with open(path, 'r') as f:
            params = json.load(f)
        logger.debug("Loaded controller configuration from %s", path)
        return cls.from_dict(params)

    def to_dict(self) -> Dict[str, Any]:
        params = {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}
        params['weights'] = dataclasses.asdict(self.weights)
        params['solver_options'] = dict(self.solver_options)
        return params
