"""Exceptions raised by the PRZ core."""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .guard import GuardResult


class PrzError(Exception):
    """Base class for PRZ errors."""


class LoopDetectedError(PrzError):
    """The loop guard refused the initial request of a pipeline run."""

    def __init__(self, guard: "GuardResult", message: Optional[str] = None):
        self.guard = guard
        super().__init__(message or guard.reason or "GOOSEGUARD blocked the action.")

    @property
    def suggested_pivot(self) -> Optional[str]:
        return self.guard.suggested_pivot


class InvalidResonanceInputError(PrzError, ValueError):
    """Resonance inputs outside their declared [0, 1] / 2D contract."""


class InvalidFeedbackError(PrzError, ValueError):
    """Feedback confidence or intensity outside [0, 1]."""
