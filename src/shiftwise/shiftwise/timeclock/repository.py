from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import TimeEntryStatus
from .model import TimeEntry


class TimeEntryRepository(Protocol):
    def get_by_id(self, time_entry_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def get_open_for_user(self, user_id: int) -> Optional[TimeEntry]:
        """The user's entry with no clock-out, if any."""

        raise NotImplementedError

    def create_clock_in(
        self,
        *,
        user_id: int,
        shift_id: Optional[int],
        clock_in: datetime,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> int:
        raise NotImplementedError

    def set_clock_out(self, *, time_entry_id: int, clock_out: datetime) -> bool:
        raise NotImplementedError

    def set_break_start(self, *, time_entry_id: int, break_start: Optional[datetime]) -> bool:
        raise NotImplementedError

    def finish_break(self, *, time_entry_id: int, total_break_minutes: int) -> bool:
        """Clear ``break_start`` and store the new running total."""

        raise NotImplementedError

    def get_user_organization_id(self, user_id: int) -> Optional[int]:
        """Organization of a user; ``None`` for an unknown user."""

        raise NotImplementedError

    def create_manual(
        self,
        *,
        user_id: int,
        shift_id: Optional[int],
        clock_in: datetime,
        clock_out: datetime,
        total_break_minutes: int,
        status: TimeEntryStatus,
        notes: Optional[str],
    ) -> int:
        raise NotImplementedError

    def update_review(
        self,
        *,
        time_entry_id: int,
        status: TimeEntryStatus,
        clock_in: datetime,
        clock_out: Optional[datetime],
        notes: Optional[str],
    ) -> bool:
        raise NotImplementedError
