from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

import pytest

from src.shiftwise.shiftwise.core.enums import PaymentType, Role, ShiftStatus, TimeEntryStatus
from src.shiftwise.shiftwise.organizations.model import Location, OrganizationSettings
from src.shiftwise.shiftwise.payroll.model import StaffMember, TimeEntryCostRow, UserRate
from src.shiftwise.shiftwise.shifts.model import Shift, ShiftCategory
from src.shiftwise.shiftwise.timeclock.model import TimeEntry


@dataclass
class InMemoryOrganizations:
    settings: dict[int, OrganizationSettings] = field(default_factory=dict)
    locations: dict[int, Location] = field(default_factory=dict)

    def get_settings(self, organization_id: int) -> Optional[OrganizationSettings]:
        return self.settings.get(organization_id)

    def get_location(self, location_id: int) -> Optional[Location]:
        return self.locations.get(location_id)

    def list_locations(self, organization_id: int, *, active_only: bool = True):
        items = [loc for loc in self.locations.values() if loc.organization_id == organization_id]
        if active_only:
            items = [loc for loc in items if loc.is_active]
        return sorted(items, key=lambda loc: loc.name)

    def update_break_rules(self, *, organization_id: int, break_rules: str, break_calculation_mode=None) -> bool:
        current = self.settings[organization_id]
        changes = {"break_rules": break_rules}
        if break_calculation_mode is not None:
            changes["break_calculation_mode"] = break_calculation_mode
        self.settings[organization_id] = replace(current, **changes)
        return True

    def update_location_break_rules(self, *, location_id: int, break_rules: Optional[str]) -> bool:
        self.locations[location_id] = replace(self.locations[location_id], break_rules=break_rules)
        return True


class InMemoryShifts:
    def __init__(self, shifts: Optional[list[Shift]] = None):
        self.shifts: dict[int, Shift] = {s.shift_id: s for s in shifts or []}

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        return self.shifts.get(shift_id)

    def create(self, *, organization_id, title, description, start_time, end_time, assigned_to_id,
               created_by_id, location_id, category_id, scheduled_break_minutes) -> int:
        shift_id = max(self.shifts, default=0) + 1
        self.shifts[shift_id] = Shift(
            shift_id=shift_id,
            organization_id=organization_id,
            title=title,
            description=description,
            start_time=start_time,
            end_time=end_time,
            assigned_to_id=assigned_to_id,
            location_id=location_id,
            category_id=category_id,
            scheduled_break_minutes=scheduled_break_minutes,
        )
        return shift_id

    def list_scheduled_for_user(self, *, user_id: int, starts_before: datetime, ends_after: datetime):
        return sorted(
            (
                s
                for s in self.shifts.values()
                if s.assigned_to_id == user_id
                and s.status == ShiftStatus.SCHEDULED
                and s.start_time <= starts_before
                and s.end_time >= ends_after
            ),
            key=lambda s: s.start_time,
        )

    def list_for_organization(self, *, organization_id: int, start: datetime, end: datetime, location_id=None):
        return sorted(
            (
                s
                for s in self.shifts.values()
                if s.organization_id == organization_id
                and start <= s.start_time < end
                and (location_id is None or s.location_id == location_id)
            ),
            key=lambda s: s.start_time,
        )


class InMemoryTimeEntries:
    def __init__(self, user_organizations: Optional[dict[int, int]] = None):
        self.entries: dict[int, TimeEntry] = {}
        self.user_organizations = dict(user_organizations or {})

    def get_by_id(self, time_entry_id: int) -> Optional[TimeEntry]:
        return self.entries.get(time_entry_id)

    def get_open_for_user(self, user_id: int) -> Optional[TimeEntry]:
        for e in self.entries.values():
            if e.user_id == user_id and e.clock_out is None:
                return e
        return None

    def create_clock_in(self, *, user_id: int, shift_id, clock_in: datetime, latitude=None, longitude=None) -> int:
        entry_id = len(self.entries) + 1
        self.entries[entry_id] = TimeEntry(
            time_entry_id=entry_id,
            user_id=user_id,
            shift_id=shift_id,
            clock_in=clock_in,
            clock_in_latitude=latitude,
            clock_in_longitude=longitude,
        )
        return entry_id

    def set_clock_out(self, *, time_entry_id: int, clock_out: datetime) -> bool:
        entry = self.entries.get(time_entry_id)
        if not entry or entry.clock_out is not None:
            return False
        self.entries[time_entry_id] = replace(entry, clock_out=clock_out)
        return True

    def set_break_start(self, *, time_entry_id: int, break_start) -> bool:
        self.entries[time_entry_id] = replace(self.entries[time_entry_id], break_start=break_start)
        return True

    def finish_break(self, *, time_entry_id: int, total_break_minutes: int) -> bool:
        self.entries[time_entry_id] = replace(
            self.entries[time_entry_id], break_start=None, total_break_minutes=total_break_minutes
        )
        return True

    def get_user_organization_id(self, user_id: int) -> Optional[int]:
        return self.user_organizations.get(user_id)

    def create_manual(self, *, user_id, shift_id, clock_in, clock_out, total_break_minutes, status, notes) -> int:
        entry_id = len(self.entries) + 1
        self.entries[entry_id] = TimeEntry(
            time_entry_id=entry_id,
            user_id=user_id,
            shift_id=shift_id,
            clock_in=clock_in,
            clock_out=clock_out,
            total_break_minutes=total_break_minutes,
            status=status,
            notes=notes,
        )
        return entry_id

    def update_review(self, *, time_entry_id, status, clock_in, clock_out, notes) -> bool:
        self.entries[time_entry_id] = replace(
            self.entries[time_entry_id], status=status, clock_in=clock_in, clock_out=clock_out, notes=notes
        )
        return True


@dataclass
class InMemoryPayroll:
    staff: list[StaffMember] = field(default_factory=list)
    rows: list[TimeEntryCostRow] = field(default_factory=list)
    categories: list[ShiftCategory] = field(default_factory=list)
    primary_locations: dict[int, int] = field(default_factory=dict)

    def list_staff(self, organization_id: int, *, location_id=None):
        items = list(self.staff)
        if location_id is not None:
            items = [s for s in items if self.primary_locations.get(s.user_id) == location_id]
        return items

    def get_staff_member(self, *, organization_id: int, user_id: int):
        for s in self.staff:
            if s.user_id == user_id:
                return s
        return None

    def list_entry_rows(self, *, organization_id, start, end, status=None, shift_location_id=None,
                        primary_location_id=None):
        out = []
        for r in self.rows:
            if not (start <= r.clock_in <= end) or r.clock_out is None:
                continue
            if status is not None and r.status != status:
                continue
            if shift_location_id is not None and r.location_id != shift_location_id:
                continue
            if primary_location_id is not None and self.primary_locations.get(r.user_id) != primary_location_id:
                continue
            out.append(r)
        return sorted(out, key=lambda r: (r.user_name, r.clock_in))

    def list_categories(self, organization_id: int, *, active_only: bool = True):
        return [c for c in self.categories if c.is_active or not active_only]

    def list_user_rates(self, user_id: int):
        member = self.get_staff_member(organization_id=0, user_id=user_id)
        return list(member.rates) if member else []

    def _set_rates(self, user_id: int, rates: list[UserRate]) -> None:
        self.staff = [replace(s, rates=tuple(rates)) if s.user_id == user_id else s for s in self.staff]

    def upsert_user_rate(self, *, user_id: int, category_id: int, hourly_rate: float) -> None:
        rates = [r for r in self.list_user_rates(user_id) if r.category_id != category_id]
        rates.append(UserRate(user_id=user_id, category_id=category_id, hourly_rate=hourly_rate))
        self._set_rates(user_id, rates)

    def delete_user_rate(self, *, user_id: int, category_id: int) -> None:
        self._set_rates(user_id, [r for r in self.list_user_rates(user_id) if r.category_id != category_id])


@pytest.fixture
def organizations() -> InMemoryOrganizations:
    return InMemoryOrganizations(
        settings={1: OrganizationSettings(organization_id=1, name="Boulder Barn", latitude=51.5, longitude=-0.12)},
        locations={
            10: Location(location_id=10, organization_id=1, name="North Wall"),
            11: Location(
                location_id=11,
                organization_id=1,
                name="South Wall",
                break_rules='[{"minHours":5,"breakMinutes":20}]',
            ),
        },
    )


@pytest.fixture
def time_entries() -> InMemoryTimeEntries:
    # Users 1-9 work for organization 1; user 20 for another organization.
    return InMemoryTimeEntries({**{user_id: 1 for user_id in range(1, 10)}, 20: 2})


@pytest.fixture
def approved_row():
    def _make(**overrides) -> TimeEntryCostRow:
        values = dict(
            time_entry_id=1,
            user_id=1,
            user_name="Ana",
            user_email="ana@example.com",
            role=Role.EMPLOYEE,
            payment_type=PaymentType.HOURLY,
            clock_in=datetime(2025, 5, 6, 9, 0),
            clock_out=datetime(2025, 5, 6, 17, 0),
            total_break_minutes=0,
            status=TimeEntryStatus.APPROVED,
        )
        values.update(overrides)
        return TimeEntryCostRow(**values)

    return _make


@pytest.fixture
def make_shifts():
    return InMemoryShifts


@pytest.fixture
def make_payroll():
    return InMemoryPayroll
