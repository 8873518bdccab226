from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..timeclock.model import ClockInRejection


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist (or is not visible)."""


class ClockInRejected(ValidationError):
    """Raised when a clock-in attempt fails geofence, window or shift checks."""

    def __init__(self, rejection: "ClockInRejection"):
        super().__init__(rejection.message)
        self.rejection = rejection

    @property
    def code(self) -> str:
        return self.rejection.code.value
