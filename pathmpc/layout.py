"""Index scheme of the flat decision vector.

The optimiser works on a single vector holding every predicted state and
control over the horizon::

    [ x_0..x_{N-1} | y | psi | v | cte | epsi | delta_0..delta_{N-2} | a ]

Every component reads and writes the vector through one
:class:`DecisionLayout`, so the cost, constraints, bounds and the decoder
always agree on the offsets.
"""

from typing import Dict, Sequence, Tuple

from pathmpc.errors import ConfigurationError

STATE_SEGMENTS = ('x', 'y', 'psi', 'v', 'cte', 'epsi')
CONTROL_SEGMENTS = ('delta', 'a')
SEGMENTS = STATE_SEGMENTS + CONTROL_SEGMENTS


class DecisionLayout:
    """Offsets of the state and control segments for a horizon of N steps.

    State segments hold N entries, control segments N-1.  The constraint
    vector is ordered step-major: six entries per step, the first six being
    the initial state.

    Args:
        horizon: Number of predicted steps N (at least 2).
    """

    def __init__(self, horizon: int):
        if horizon < 2:
            raise ConfigurationError(f"Horizon must be at least 2, got {horizon}")
        self._horizon = horizon

        self._lengths: Dict[str, int] = {}
        self._offsets: Dict[str, int] = {}
        offset = 0
        for name in SEGMENTS:
            length = horizon if name in STATE_SEGMENTS else horizon - 1
            self._offsets[name] = offset
            self._lengths[name] = length
            offset += length
        self._n_vars = offset

    def __repr__(self):
        return f"DecisionLayout(horizon={self._horizon})"

    def __eq__(self, other):
        if not isinstance(other, DecisionLayout):
            return NotImplemented
        return self._horizon == other._horizon

    def __hash__(self):
        return hash(self._horizon)

    @property
    def horizon(self) -> int:
        return self._horizon

    @property
    def n_vars(self) -> int:
        """Length of the decision vector, ``6N + 2(N-1)``."""
        return self._n_vars

    @property
    def n_constraints(self) -> int:
        """Length of the constraint vector, ``6N``."""
        return len(STATE_SEGMENTS) * self._horizon

    @property
    def offsets(self) -> Dict[str, int]:
        return dict(self._offsets)

    def offset(self, name: str) -> int:
        return self._offsets[name]

    def length(self, name: str) -> int:
        return self._lengths[name]

    def index(self, name: str, t: int) -> int:
        """Position of entry ``t`` of segment ``name`` in the decision vector."""
        length = self._lengths[name]
        if not 0 <= t < length:
            raise IndexError(f"Step {t} out of range for segment {name!r} of length {length}")
        return self._offsets[name] + t

    def segment_slice(self, name: str) -> slice:
        start = self._offsets[name]
        return slice(start, start + self._lengths[name])

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def state_at(self, values: Sequence, name: str, t: int):
        if name not in STATE_SEGMENTS:
            raise KeyError(f"{name!r} is not a state segment")
        return values[self.index(name, t)]

    def control_at(self, values: Sequence, name: str, t: int):
        if name not in CONTROL_SEGMENTS:
            raise KeyError(f"{name!r} is not a control segment")
        return values[self.index(name, t)]

    def state(self, values: Sequence, t: int) -> Tuple:
        """The six state entries at step ``t``."""
        return tuple(self.state_at(values, name, t) for name in STATE_SEGMENTS)

    def control(self, values: Sequence, t: int) -> Tuple:
        """``(delta, a)`` at step ``t``."""
        return tuple(self.control_at(values, name, t) for name in CONTROL_SEGMENTS)

    def segment(self, values: Sequence, name: str):
        return values[self.segment_slice(name)]

    def constraint_index(self, name: str, t: int) -> int:
        """Position of state ``name`` at step ``t`` in the constraint vector."""
        if name not in STATE_SEGMENTS:
            raise KeyError(f"{name!r} is not a state segment")
        if not 0 <= t < self._horizon:
            raise IndexError(f"Step {t} out of range for horizon {self._horizon}")
        return len(STATE_SEGMENTS) * t + STATE_SEGMENTS.index(name)
