from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import BreakCalculationMode
from .model import Location, OrganizationSettings


class OrganizationRepository(Protocol):
    def get_settings(self, organization_id: int) -> Optional[OrganizationSettings]:
        raise NotImplementedError

    def get_location(self, location_id: int) -> Optional[Location]:
        raise NotImplementedError

    def list_locations(self, organization_id: int, *, active_only: bool = True) -> Sequence[Location]:
        raise NotImplementedError

    def update_break_rules(
        self,
        *,
        organization_id: int,
        break_rules: str,
        break_calculation_mode: Optional[BreakCalculationMode] = None,
    ) -> bool:
        raise NotImplementedError

    def update_location_break_rules(self, *, location_id: int, break_rules: Optional[str]) -> bool:
        """Store a location override; ``None`` clears it back to organization rules."""

        raise NotImplementedError
