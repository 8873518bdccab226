from __future__ import annotations

import logging

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .rates import parse_rate_changes, rates_with_defaults
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


class RateService:
    """Admin-only management of per-user hourly rate overrides."""

    def __init__(self, payroll: PayrollRepository):
        self._payroll = payroll

    def _require_admin(self, current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Forbidden")

    def list_rates(self, *, current_role: Role, organization_id: int, user_id: int) -> list[dict]:
        self._require_admin(current_role)
        member = self._payroll.get_staff_member(organization_id=organization_id, user_id=user_id)
        if not member:
            raise NotFoundError("User not found")

        categories = sorted(self._payroll.list_categories(organization_id), key=lambda c: c.name)
        return rates_with_defaults(categories, member.rates)

    def update_rates(self, *, current_role: Role, organization_id: int, user_id: int, rates: object) -> list[dict]:
        self._require_admin(current_role)
        if not self._payroll.get_staff_member(organization_id=organization_id, user_id=user_id):
            raise NotFoundError("User not found")

        changes = parse_rate_changes(rates)
        known = {c.category_id for c in self._payroll.list_categories(organization_id, active_only=False)}
        unknown = [category_id for category_id, _ in changes if category_id not in known]
        if unknown:
            raise ValidationError(f"Unknown category {unknown[0]}")

        for category_id, hourly_rate in changes:
            if hourly_rate is None:
                self._payroll.delete_user_rate(user_id=user_id, category_id=category_id)
            else:
                self._payroll.upsert_user_rate(user_id=user_id, category_id=category_id, hourly_rate=hourly_rate)

        logger.info("Rates updated for user %s (%d changes)", user_id, len(changes))
        return self.list_rates(current_role=current_role, organization_id=organization_id, user_id=user_id)
