from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import TimeEntryStatus
from ..shifts.model import ShiftCategory
from .model import StaffMember, TimeEntryCostRow, UserRate


class PayrollRepository(Protocol):
    def list_staff(self, organization_id: int, *, location_id: Optional[int] = None) -> Sequence[StaffMember]:
        """Users of the organization with their rate overrides; ``location_id`` filters on primary location."""

        raise NotImplementedError

    def get_staff_member(self, *, organization_id: int, user_id: int) -> Optional[StaffMember]:
        raise NotImplementedError

    def list_entry_rows(
        self,
        *,
        organization_id: int,
        start: datetime,
        end: datetime,
        status: Optional[TimeEntryStatus] = None,
        shift_location_id: Optional[int] = None,
        primary_location_id: Optional[int] = None,
    ) -> Sequence[TimeEntryCostRow]:
        """Completed entries with ``start <= clock_in <= end``, ordered by user name then clock in."""

        raise NotImplementedError

    def list_categories(self, organization_id: int, *, active_only: bool = True) -> Sequence[ShiftCategory]:
        """Categories, oldest first."""

        raise NotImplementedError

    def list_user_rates(self, user_id: int) -> Sequence[UserRate]:
        raise NotImplementedError

    def upsert_user_rate(self, *, user_id: int, category_id: int, hourly_rate: float) -> None:
        raise NotImplementedError

    def delete_user_rate(self, *, user_id: int, category_id: int) -> None:
        raise NotImplementedError
