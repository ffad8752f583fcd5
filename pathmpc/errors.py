"""Exception types raised by the controller."""

from typing import Optional


class MPCError(Exception):
    """Base class for all controller errors."""


class ConfigurationError(MPCError, ValueError):
    """Invalid configuration or malformed per-cycle input.

    Always raised before the solver is invoked.
    """


class ConvergenceFailure(MPCError, RuntimeError):
    """The solver did not produce a usable solution.

    Args:
        message: Human readable description.
        result: The SolveResult that was rejected, if any.
        status: Failure classification; defaults to the status of ``result``.
    """

    def __init__(self, message: str, result=None, status=None):
        super().__init__(message)
        self.result = result
        self._status = status

    @property
    def status(self) -> Optional[object]:
        if self._status is not None:
            return self._status
        return self.result.status if self.result is not None else None
