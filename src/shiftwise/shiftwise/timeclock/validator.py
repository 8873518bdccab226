"""Clock-in validation: geofence first, then the shift's clock-in window.

All checks are pure; the first failing check wins.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional, Protocol

from ..common.money import round_half_up
from ..core.enums import ClockInRejectionCode
from ..organizations.model import SiteLocation
from .geo import haversine_metres
from .model import ClockInDecision, ClockInRejection, GeoPoint


class ShiftWindow(Protocol):
    start_time: datetime
    end_time: datetime


def earliest_clock_in(shift_start: datetime, window_minutes: int) -> datetime:
    return shift_start - timedelta(minutes=window_minutes)


def is_within_window(now: datetime, shift: ShiftWindow, window_minutes: int) -> bool:
    return earliest_clock_in(shift.start_time, window_minutes) <= now <= shift.end_time


def check_geofence(
    user_location: Optional[GeoPoint],
    site_location: Optional[SiteLocation],
    *,
    require_geolocation: bool = True,
) -> Optional[ClockInRejection]:
    if not require_geolocation or site_location is None:
        return None

    if user_location is None:
        return ClockInRejection(
            ClockInRejectionCode.LOCATION_REQUIRED,
            "Please enable location services to clock in",
        )

    distance = haversine_metres(user_location, GeoPoint(site_location.latitude, site_location.longitude))
    if distance > site_location.radius_metres:
        return ClockInRejection(
            ClockInRejectionCode.TOO_FAR,
            f"You must be within {site_location.radius_metres:.0f}m of the site to clock in. "
            f"You are currently {round_half_up(distance, 0):.0f}m away.",
        )
    return None


def check_window(now: datetime, shift: ShiftWindow, window_minutes: int) -> Optional[ClockInRejection]:
    earliest = earliest_clock_in(shift.start_time, window_minutes)

    if now < earliest:
        # Round up so the user is never told to wait less than required.
        minutes_until = math.ceil((earliest - now).total_seconds() / 60)
        return ClockInRejection(
            ClockInRejectionCode.TOO_EARLY,
            f"You can only clock in within {window_minutes} minutes of your shift start time. "
            f"Please wait {minutes_until} more minutes.",
        )

    if now > shift.end_time:
        return ClockInRejection(
            ClockInRejectionCode.SHIFT_ENDED,
            "This shift has already ended. Please contact your manager.",
        )
    return None


def validate_clock_in(
    now: datetime,
    shift: Optional[ShiftWindow],
    clock_in_window_minutes: int,
    user_location: Optional[GeoPoint] = None,
    site_location: Optional[SiteLocation] = None,
    *,
    require_geolocation: bool = True,
) -> ClockInDecision:
    """Accept or reject a clock-in.

    ``shift=None`` is an unassociated clock-in: only the geofence applies.
    """
    rejection = check_geofence(user_location, site_location, require_geolocation=require_geolocation)
    if rejection is None and shift is not None:
        rejection = check_window(now, shift, clock_in_window_minutes)

    if rejection is not None:
        return ClockInDecision.reject(rejection)
    return ClockInDecision.accept()
