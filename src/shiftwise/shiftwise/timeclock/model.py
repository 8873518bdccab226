from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ClockInRejectionCode, TimeEntryStatus


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class ClockInAttempt:
    """Ephemeral clock-in request; becomes a TimeEntry only when accepted."""

    timestamp: datetime
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    shift_id: Optional[int] = None

    @property
    def position(self) -> Optional[GeoPoint]:
        if self.latitude is None or self.longitude is None:
            return None
        return GeoPoint(self.latitude, self.longitude)


@dataclass(frozen=True)
class ClockInRejection:
    code: ClockInRejectionCode
    message: str


@dataclass(frozen=True)
class ClockInDecision:
    rejection: Optional[ClockInRejection] = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None

    @classmethod
    def accept(cls) -> "ClockInDecision":
        return cls()

    @classmethod
    def reject(cls, rejection: ClockInRejection) -> "ClockInDecision":
        return cls(rejection=rejection)


@dataclass(frozen=True)
class TimeEntry:
    """Domain entity: one clock-in/clock-out record."""

    time_entry_id: int
    user_id: int
    clock_in: datetime
    shift_id: Optional[int] = None
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    total_break_minutes: int = 0
    status: TimeEntryStatus = TimeEntryStatus.PENDING
    clock_in_latitude: Optional[float] = None
    clock_in_longitude: Optional[float] = None
    notes: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None

    def to_dict(self) -> dict:
        return {
            "id": self.time_entry_id,
            "userId": self.user_id,
            "shiftId": self.shift_id,
            "clockIn": self.clock_in.isoformat(),
            "clockOut": self.clock_out.isoformat() if self.clock_out else None,
            "breakStart": self.break_start.isoformat() if self.break_start else None,
            "totalBreak": self.total_break_minutes,
            "status": self.status.value,
            "clockInLatitude": self.clock_in_latitude,
            "clockInLongitude": self.clock_in_longitude,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class ClockOutResult:
    entry: TimeEntry
    warning: Optional[str] = None
