from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Shift


class ShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def create(
        self,
        *,
        organization_id: int,
        title: str,
        description: Optional[str],
        start_time: datetime,
        end_time: datetime,
        assigned_to_id: Optional[int],
        created_by_id: int,
        location_id: Optional[int],
        category_id: Optional[int],
        scheduled_break_minutes: int,
    ) -> int:
        raise NotImplementedError

    def list_scheduled_for_user(
        self,
        *,
        user_id: int,
        starts_before: datetime,
        ends_after: datetime,
    ) -> Sequence[Shift]:
        """SCHEDULED shifts assigned to the user overlapping the given bounds, earliest first."""

        raise NotImplementedError

    def list_for_organization(
        self,
        *,
        organization_id: int,
        start: datetime,
        end: datetime,
        location_id: Optional[int] = None,
    ) -> Sequence[Shift]:
        """Shifts starting in [start, end)."""

        raise NotImplementedError
