from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization checks."""

    EMPLOYEE = "EMPLOYEE"
    DUTY_MANAGER = "DUTY_MANAGER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


MANAGER_ROLES = frozenset({Role.DUTY_MANAGER, Role.MANAGER, Role.ADMIN})


class PaymentType(str, Enum):
    HOURLY = "HOURLY"
    MONTHLY = "MONTHLY"


class ShiftStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TimeEntryStatus(str, Enum):
    """Manager review state of a time entry."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class BreakCalculationMode(str, Enum):
    """How break rules apply when forecasting: per shift, or per assignee-day total."""

    PER_SHIFT = "PER_SHIFT"
    PER_DAY = "PER_DAY"


class ClockInRejectionCode(str, Enum):
    """Stable rejection codes consumed by the UI for user-facing messaging."""

    LOCATION_REQUIRED = "LOCATION_REQUIRED"
    TOO_FAR = "TOO_FAR"
    TOO_EARLY = "TOO_EARLY"
    SHIFT_ENDED = "SHIFT_ENDED"
    NO_SHIFT = "NO_SHIFT"
