from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from ..common.datetime_utils import parse_iso_datetime
from ..common.money import round_half_up
from ..core.enums import MANAGER_ROLES, Role, TimeEntryStatus
from ..core.exceptions import AuthorizationError, ClockInRejected, NotFoundError, ValidationError
from ..organizations.model import OrganizationSettings
from ..organizations.repository import OrganizationRepository
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from .factory import ShiftPolicyFactory
from .model import ClockInAttempt, ClockOutResult, TimeEntry
from .repository import TimeEntryRepository
from .validator import check_geofence, check_window, is_within_window

logger = logging.getLogger(__name__)

MANUAL_ENTRY_PREFIX = "[Manual Entry]"


class TimeClockService:
    """Use cases: clock in, clock out, start/end a break, manager review and manual entries."""

    def __init__(
        self,
        time_entries: TimeEntryRepository,
        shifts: ShiftRepository,
        organizations: OrganizationRepository,
        *,
        policy_factory: ShiftPolicyFactory | None = None,
    ):
        self._entries = time_entries
        self._shifts = shifts
        self._organizations = organizations
        self._policies = policy_factory or ShiftPolicyFactory()

    def _settings(self, organization_id: int) -> OrganizationSettings:
        settings = self._organizations.get_settings(organization_id)
        if not settings:
            raise NotFoundError("Organization not found")
        return settings

    def find_clock_in_shift(self, *, user_id: int, now: datetime, window_minutes: int) -> Optional[Shift]:
        """Earliest SCHEDULED shift of the user whose clock-in window contains ``now``."""
        candidates = self._shifts.list_scheduled_for_user(
            user_id=user_id,
            starts_before=now + timedelta(minutes=window_minutes),
            ends_after=now,
        )
        matching = [s for s in candidates if is_within_window(now, s, window_minutes)]
        if not matching:
            return None
        return min(matching, key=lambda s: s.start_time)

    def clock_in(self, *, user_id: int, organization_id: int, attempt: ClockInAttempt) -> TimeEntry:
        now = attempt.timestamp

        if self._entries.get_open_for_user(user_id):
            raise ValidationError("Already clocked in")

        settings = self._settings(organization_id)
        window = settings.clock_in_window_minutes

        rejection = check_geofence(
            attempt.position,
            settings.geofence,
            require_geolocation=settings.require_geolocation,
        )
        if rejection:
            logger.info("Clock-in rejected for user %s: %s", user_id, rejection.code.value)
            raise ClockInRejected(rejection)

        shift: Optional[Shift]
        if attempt.shift_id:
            shift = self._shifts.get_by_id(attempt.shift_id)
            if not shift or shift.organization_id != organization_id:
                raise NotFoundError("Shift not found")
            if shift.assigned_to_id != user_id:
                raise AuthorizationError("This shift is not assigned to you")
            rejection = check_window(now, shift, window)
        else:
            shift = self.find_clock_in_shift(user_id=user_id, now=now, window_minutes=window)
            if shift is None:
                policy = self._policies.for_settings(require_scheduled_shift=settings.require_scheduled_shift)
                rejection = policy.on_missing_shift(now=now, window_minutes=window)

        if rejection:
            logger.info("Clock-in rejected for user %s: %s", user_id, rejection.code.value)
            raise ClockInRejected(rejection)

        entry_id = self._entries.create_clock_in(
            user_id=user_id,
            shift_id=shift.shift_id if shift else None,
            clock_in=now,
            latitude=attempt.latitude,
            longitude=attempt.longitude,
        )
        logger.info("User %s clocked in (entry %s, shift %s)", user_id, entry_id, shift.shift_id if shift else None)
        return self._get_entry(entry_id)

    def clock_out(
        self,
        *,
        user_id: int,
        organization_id: int,
        time_entry_id: int,
        now: datetime | None = None,
    ) -> ClockOutResult:
        now = now or datetime.now()
        entry = self._get_open_entry(user_id=user_id, time_entry_id=time_entry_id)

        if entry.break_start is not None:
            raise ValidationError("End your break before clocking out")

        warning = None
        if entry.shift_id:
            shift = self._shifts.get_by_id(entry.shift_id)
            if shift:
                grace = self._settings(organization_id).clock_out_grace_minutes
                if now > shift.end_time + timedelta(minutes=grace):
                    warning = (
                        f"You are clocking out more than {grace} minutes after your shift ended. "
                        "This may be flagged for manager review."
                    )

        if not self._entries.set_clock_out(time_entry_id=entry.time_entry_id, clock_out=now):
            raise ValidationError("No active time entry found")

        logger.info("User %s clocked out (entry %s)%s", user_id, entry.time_entry_id, " late" if warning else "")
        return ClockOutResult(entry=self._get_entry(entry.time_entry_id), warning=warning)

    def start_break(self, *, user_id: int, time_entry_id: int, now: datetime | None = None) -> TimeEntry:
        now = now or datetime.now()
        entry = self._get_open_entry(user_id=user_id, time_entry_id=time_entry_id)
        if entry.break_start is not None:
            raise ValidationError("Already on break")

        self._entries.set_break_start(time_entry_id=entry.time_entry_id, break_start=now)
        return self._get_entry(entry.time_entry_id)

    def end_break(self, *, user_id: int, time_entry_id: int, now: datetime | None = None) -> TimeEntry:
        now = now or datetime.now()
        entry = self._get_open_entry(user_id=user_id, time_entry_id=time_entry_id)
        if entry.break_start is None:
            raise ValidationError("Not on break")

        minutes = int(round_half_up((now - entry.break_start).total_seconds() / 60, 0))
        self._entries.finish_break(
            time_entry_id=entry.time_entry_id,
            total_break_minutes=entry.total_break_minutes + max(minutes, 0),
        )
        return self._get_entry(entry.time_entry_id)

    def create_manual_entry(
        self,
        *,
        current_role: Role,
        organization_id: int,
        user_id: int,
        clock_in: datetime,
        clock_out: datetime,
        total_break_minutes: int = 0,
        notes: Optional[str] = None,
        shift_id: Optional[int] = None,
    ) -> TimeEntry:
        """Record time a manager vouches for; saved already APPROVED."""
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("Forbidden")
        if clock_out <= clock_in:
            raise ValidationError("Clock out time must be after clock in time")
        if total_break_minutes < 0:
            raise ValidationError("totalBreak must be at least 0")

        if self._entries.get_user_organization_id(user_id) != organization_id:
            raise NotFoundError("User not found")
        if shift_id is not None:
            shift = self._shifts.get_by_id(shift_id)
            if not shift or shift.organization_id != organization_id:
                raise NotFoundError("Shift not found")

        notes = notes.strip() if notes else None
        entry_id = self._entries.create_manual(
            user_id=user_id,
            shift_id=shift_id,
            clock_in=clock_in,
            clock_out=clock_out,
            total_break_minutes=total_break_minutes,
            status=TimeEntryStatus.APPROVED,
            notes=f"{MANUAL_ENTRY_PREFIX} {notes}" if notes else MANUAL_ENTRY_PREFIX,
        )
        logger.info("Manual entry %s added for user %s", entry_id, user_id)
        return self._get_entry(entry_id)

    def review_entry(
        self,
        *,
        current_role: Role,
        organization_id: int,
        time_entry_id: int,
        changes: dict[str, Any],
    ) -> TimeEntry:
        """Approve/reject an entry or correct its times and notes.

        Only keys present in ``changes`` are applied; ``clockOut: null`` reopens
        the entry and ``notes: null`` clears them.
        """
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("Forbidden")

        entry = self._entries.get_by_id(time_entry_id)
        if not entry or self._entries.get_user_organization_id(entry.user_id) != organization_id:
            raise NotFoundError("Entry not found")

        status = entry.status
        if changes.get("status") is not None:
            try:
                status = TimeEntryStatus(changes["status"])
            except ValueError as exc:
                raise ValidationError("status must be PENDING, APPROVED or REJECTED") from exc

        clock_in = entry.clock_in
        if "clockIn" in changes:
            clock_in = parse_iso_datetime(changes["clockIn"], "clockIn")

        clock_out = entry.clock_out
        if "clockOut" in changes:
            raw = changes["clockOut"]
            clock_out = parse_iso_datetime(raw, "clockOut") if raw else None

        if clock_out is not None and clock_out <= clock_in:
            raise ValidationError("Clock out time must be after clock in time")

        notes = entry.notes
        if "notes" in changes:
            raw = changes["notes"]
            notes = (str(raw).strip() or None) if raw is not None else None

        self._entries.update_review(
            time_entry_id=entry.time_entry_id,
            status=status,
            clock_in=clock_in,
            clock_out=clock_out,
            notes=notes,
        )
        logger.info("Entry %s reviewed: %s", entry.time_entry_id, status.value)
        return self._get_entry(entry.time_entry_id)

    def _get_open_entry(self, *, user_id: int, time_entry_id: int) -> TimeEntry:
        entry = self._entries.get_by_id(time_entry_id)
        if not entry or entry.user_id != user_id or not entry.is_open:
            raise ValidationError("No active time entry found")
        return entry

    def _get_entry(self, time_entry_id: int) -> TimeEntry:
        entry = self._entries.get_by_id(time_entry_id)
        if not entry:
            raise NotFoundError("Time entry not found")
        return entry
