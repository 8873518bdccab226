from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..breaks.service import BreakRuleService
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Shift
from .repository import ShiftRepository

logger = logging.getLogger(__name__)


class ShiftService:
    """Use case: managers create shifts; the unpaid break is stamped at creation."""

    def __init__(self, shifts: ShiftRepository, break_rules: BreakRuleService):
        self._shifts = shifts
        self._break_rules = break_rules

    def create_shift(
        self,
        *,
        current_role: Role,
        organization_id: int,
        created_by_id: int,
        title: str,
        start_time: datetime,
        end_time: datetime,
        description: Optional[str] = None,
        assigned_to_id: Optional[int] = None,
        location_id: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> Shift:
        if current_role == Role.EMPLOYEE:
            raise AuthorizationError("Forbidden")

        title = require_non_empty(title, "Title")
        if end_time <= start_time:
            raise ValidationError("End time must be after start time")

        break_minutes = self._break_rules.scheduled_break_minutes(
            organization_id=organization_id,
            start_time=start_time,
            end_time=end_time,
            location_id=location_id,
        )

        description = description.strip() if description else None
        shift_id = self._shifts.create(
            organization_id=organization_id,
            title=title,
            description=description,
            start_time=start_time,
            end_time=end_time,
            assigned_to_id=assigned_to_id,
            created_by_id=created_by_id,
            location_id=location_id,
            category_id=category_id,
            scheduled_break_minutes=break_minutes,
        )
        logger.info("Shift %s created for org %s (break %d min)", shift_id, organization_id, break_minutes)

        shift = self._shifts.get_by_id(shift_id)
        if not shift:
            raise NotFoundError("Shift not found")
        return shift
