from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import (
    DEFAULT_BREAK_RULES_JSON,
    DEFAULT_CLOCK_IN_RADIUS_METRES,
    DEFAULT_CLOCK_IN_WINDOW_MINUTES,
    DEFAULT_CLOCK_OUT_GRACE_MINUTES,
)
from ..core.enums import BreakCalculationMode


@dataclass(frozen=True)
class SiteLocation:
    """Geofence centre and radius a clock-in must fall inside."""

    latitude: float
    longitude: float
    radius_metres: float


@dataclass(frozen=True)
class OrganizationSettings:
    """Domain entity: per-organization scheduling and time-clock settings.

    ``break_rules`` is kept as the stored JSON text; it is parsed at the boundary
    (see ``breaks.parsing``) so old malformed values never block a request.
    """

    organization_id: int
    name: str
    break_rules: str = DEFAULT_BREAK_RULES_JSON
    break_calculation_mode: BreakCalculationMode = BreakCalculationMode.PER_SHIFT
    clock_in_window_minutes: int = DEFAULT_CLOCK_IN_WINDOW_MINUTES
    clock_out_grace_minutes: int = DEFAULT_CLOCK_OUT_GRACE_MINUTES
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    clock_in_radius_metres: int = DEFAULT_CLOCK_IN_RADIUS_METRES
    require_geolocation: bool = True
    require_scheduled_shift: bool = False

    @property
    def geofence(self) -> Optional[SiteLocation]:
        if self.latitude is None or self.longitude is None:
            return None
        return SiteLocation(
            latitude=self.latitude,
            longitude=self.longitude,
            radius_metres=self.clock_in_radius_metres,
        )


@dataclass(frozen=True)
class Location:
    """Domain entity: a physical site. ``break_rules`` overrides the organization's when set."""

    location_id: int
    organization_id: int
    name: str
    break_rules: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    clock_in_radius_metres: int = DEFAULT_CLOCK_IN_RADIUS_METRES
    is_active: bool = True
