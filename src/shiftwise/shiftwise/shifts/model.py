from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ShiftStatus


@dataclass(frozen=True)
class Shift:
    """Domain entity: a scheduled shift. Invariant: ``end_time > start_time``."""

    shift_id: int
    organization_id: int
    title: str
    start_time: datetime
    end_time: datetime
    status: ShiftStatus = ShiftStatus.SCHEDULED
    assigned_to_id: Optional[int] = None
    location_id: Optional[int] = None
    category_id: Optional[int] = None
    scheduled_break_minutes: int = 0
    description: Optional[str] = None

    @property
    def duration_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60

    def to_dict(self) -> dict:
        return {
            "id": self.shift_id,
            "title": self.title,
            "description": self.description,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "status": self.status.value,
            "assignedToId": self.assigned_to_id,
            "locationId": self.location_id,
            "categoryId": self.category_id,
            "scheduledBreakMinutes": self.scheduled_break_minutes,
        }


@dataclass(frozen=True)
class ShiftCategory:
    category_id: int
    organization_id: int
    name: str
    hourly_rate: float
    is_active: bool = True
