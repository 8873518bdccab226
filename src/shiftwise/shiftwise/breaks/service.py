from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from ..core.enums import MANAGER_ROLES, BreakCalculationMode, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..organizations.repository import OrganizationRepository
from .model import BreakRule
from .parsing import dump_break_rules, parse_break_rules, validate_break_rules
from .resolver import resolve_break_minutes

logger = logging.getLogger(__name__)


class BreakRuleService:
    """Use case: look up the break rules in force and apply them to shifts."""

    def __init__(self, organizations: OrganizationRepository):
        self._organizations = organizations

    def rules_for(self, *, organization_id: int, location_id: Optional[int] = None) -> list[BreakRule]:
        """Location rules replace (not merge with) organization rules when present."""
        if location_id:
            location = self._organizations.get_location(location_id)
            if location and location.organization_id == organization_id:
                rules = parse_break_rules(location.break_rules)
                if rules:
                    return rules

        settings = self._organizations.get_settings(organization_id)
        if not settings:
            return []
        return parse_break_rules(settings.break_rules)

    def scheduled_break_minutes(
        self,
        *,
        organization_id: int,
        start_time: datetime,
        end_time: datetime,
        location_id: Optional[int] = None,
    ) -> int:
        rules = self.rules_for(organization_id=organization_id, location_id=location_id)
        return resolve_break_minutes(start_time, end_time, rules)

    def update_organization_rules(
        self,
        *,
        current_role: Role,
        organization_id: int,
        rules: Any,
        break_calculation_mode: Optional[str] = None,
    ) -> list[BreakRule]:
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("Forbidden")

        mode = None
        if break_calculation_mode:
            try:
                mode = BreakCalculationMode(break_calculation_mode)
            except ValueError as exc:
                raise ValidationError("breakCalculationMode must be PER_SHIFT or PER_DAY") from exc

        if not self._organizations.get_settings(organization_id):
            raise NotFoundError("Organization not found")

        validated = validate_break_rules(rules)
        self._organizations.update_break_rules(
            organization_id=organization_id,
            break_rules=dump_break_rules(validated),
            break_calculation_mode=mode,
        )
        logger.info("Organization %s break rules updated (%d rules)", organization_id, len(validated))
        return validated

    def update_location_rules(
        self,
        *,
        current_role: Role,
        organization_id: int,
        location_id: int,
        rules: Any,
    ) -> list[BreakRule]:
        """Save a location override. ``None`` or an empty list reverts to organization rules."""
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("Forbidden")

        location = self._organizations.get_location(location_id)
        if not location or location.organization_id != organization_id:
            raise NotFoundError("Location not found")

        validated = validate_break_rules(rules) if rules is not None else []
        stored = dump_break_rules(validated) if validated else None
        self._organizations.update_location_break_rules(location_id=location_id, break_rules=stored)
        logger.info("Location %s break rules updated (%d rules)", location_id, len(validated))
        return validated
