from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Optional

from ..breaks.resolver import break_minutes_for_hours
from ..breaks.service import BreakRuleService
from ..common.datetime_utils import now_local, start_of_day
from ..common.money import round_money
from ..core.constants import DEFAULT_HOURLY_RATE, WEEKS_PER_MONTH
from ..core.enums import MANAGER_ROLES, BreakCalculationMode, PaymentType, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..organizations.repository import OrganizationRepository
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from .model import StaffMember
from .rates import get_effective_hourly_rate
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


def monday_of(day: date) -> date:
    return day - timedelta(days=day.weekday())


def _percent(part: float, whole: float) -> float:
    return round_money(part / whole * 100) if whole > 0 else 0.0


class WeeklyForecastService:
    """Contracted vs scheduled labour hours and cost for one Monday-based week.

    ``PER_SHIFT`` mode uses the break stamped on each shift. ``PER_DAY`` mode
    applies the break rules to each assignee's total scheduled time per day, so
    two 3h shifts on one day earn the break of a 6h shift.
    """

    def __init__(
        self,
        payroll: PayrollRepository,
        shifts: ShiftRepository,
        organizations: OrganizationRepository,
        break_rules: BreakRuleService,
    ):
        self._payroll = payroll
        self._shifts = shifts
        self._organizations = organizations
        self._break_rules = break_rules

    def build_forecast(
        self,
        *,
        current_role: Role,
        organization_id: int,
        week_start: Optional[date] = None,
        location_id: Optional[int] = None,
    ) -> dict:
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("Forbidden")

        settings = self._organizations.get_settings(organization_id)
        if not settings:
            raise NotFoundError("Organization not found")

        start = start_of_day(week_start or monday_of(now_local().date()))
        end = start + timedelta(days=7)

        staff = self._payroll.list_staff(organization_id, location_id=location_id)
        shifts = self._shifts.list_for_organization(
            organization_id=organization_id, start=start, end=end, location_id=location_id
        )
        categories = self._payroll.list_categories(organization_id, active_only=False)
        active = [c for c in categories if c.is_active]
        default_rate = active[0].hourly_rate if active else DEFAULT_HOURLY_RATE
        category_rates = {c.category_id: c.hourly_rate for c in categories}

        contracted = self._contracted(staff, default_rate)

        by_id = {s.user_id: s for s in staff}
        if settings.break_calculation_mode == BreakCalculationMode.PER_DAY:
            rules = self._break_rules.rules_for(organization_id=organization_id, location_id=location_id)
            scheduled = self._scheduled_per_day(shifts, by_id, rules, category_rates, default_rate)
        else:
            scheduled = self._scheduled_per_shift(shifts, by_id, category_rates, default_rate)
        scheduled_hours, scheduled_cost, per_staff = scheduled

        hours_variance = scheduled_hours - contracted["totalHours"]
        cost_variance = scheduled_cost - contracted["totalCost"]

        logger.info(
            "Weekly forecast built for organization %s, week of %s (%s): %d shifts",
            organization_id,
            start.date().isoformat(),
            settings.break_calculation_mode.value,
            len(shifts),
        )
        return {
            "weekStart": start.isoformat(),
            "weekEnd": end.isoformat(),
            "breakCalculationMode": settings.break_calculation_mode.value,
            "contracted": {
                "totalHours": round_money(contracted["totalHours"]),
                "totalCost": round_money(contracted["totalCost"]),
                "staffCount": len(contracted["staff"]),
                "staff": contracted["staff"],
            },
            "scheduled": {
                "totalHours": round_money(scheduled_hours),
                "totalCost": round_money(scheduled_cost),
                "shiftCount": len(shifts),
                "staff": [
                    {
                        **row,
                        "scheduledHours": round_money(row["scheduledHours"]),
                        "estimatedCost": round_money(row["estimatedCost"]),
                    }
                    for row in per_staff.values()
                ],
            },
            "variance": {
                "hours": round_money(hours_variance),
                "cost": round_money(cost_variance),
                "hoursPercent": _percent(hours_variance, contracted["totalHours"]),
                "costPercent": _percent(cost_variance, contracted["totalCost"]),
            },
        }

    def _contracted(self, staff: list[StaffMember], default_rate: float) -> dict:
        total_hours = 0.0
        total_cost = 0.0
        rows = []
        for member in staff:
            if not member.contracted_hours or member.contracted_hours <= 0:
                continue

            cost = 0.0
            if member.payment_type == PaymentType.HOURLY:
                rate = member.rates[0].hourly_rate if member.rates else default_rate
                cost = member.contracted_hours * rate
            elif member.monthly_salary:
                cost = member.monthly_salary / WEEKS_PER_MONTH

            total_hours += member.contracted_hours
            total_cost += cost
            rows.append(
                {
                    "userId": member.user_id,
                    "name": member.name,
                    "contractedHours": member.contracted_hours,
                    "estimatedCost": round_money(cost),
                }
            )
        return {"totalHours": total_hours, "totalCost": total_cost, "staff": rows}

    @staticmethod
    def _hourly_rate(
        shift: Shift,
        assignee: Optional[StaffMember],
        category_rates: dict[int, float],
        default_rate: float,
    ) -> float:
        category_rate = category_rates.get(shift.category_id, default_rate) if shift.category_id else default_rate
        if assignee and assignee.payment_type == PaymentType.HOURLY:
            return get_effective_hourly_rate(category_rate, assignee.rates, shift.category_id)
        return category_rate

    def _scheduled_per_shift(self, shifts, by_id, category_rates, default_rate):
        total_hours = 0.0
        total_cost = 0.0
        per_staff: dict[int, dict] = {}
        for shift in shifts:
            net_hours = (shift.duration_minutes - shift.scheduled_break_minutes) / 60
            assignee = by_id.get(shift.assigned_to_id) if shift.assigned_to_id else None
            rate = self._hourly_rate(shift, assignee, category_rates, default_rate)
            # Salaried staff cost nothing extra per shift.
            cost = 0.0 if assignee and assignee.payment_type == PaymentType.MONTHLY else net_hours * rate

            total_hours += net_hours
            total_cost += cost
            if assignee:
                row = per_staff.setdefault(
                    assignee.user_id,
                    {"userId": assignee.user_id, "name": assignee.name, "scheduledHours": 0.0, "estimatedCost": 0.0},
                )
                row["scheduledHours"] += net_hours
                row["estimatedCost"] += cost
        return total_hours, total_cost, per_staff

    def _scheduled_per_day(self, shifts, by_id, rules, category_rates, default_rate):
        total_hours = 0.0
        total_cost = 0.0
        per_staff: dict[int, dict] = {}

        days: dict[tuple[int, date], list[Shift]] = defaultdict(list)
        for shift in shifts:
            if shift.assigned_to_id:
                days[(shift.assigned_to_id, shift.start_time.date())].append(shift)
            else:
                # Unassigned shifts count towards hours only, with their stamped break.
                total_hours += (shift.duration_minutes - shift.scheduled_break_minutes) / 60

        for (user_id, _day), day_shifts in days.items():
            assignee = by_id.get(user_id)
            if not assignee:
                continue

            gross_hours = 0.0
            day_cost = 0.0
            for shift in day_shifts:
                hours = shift.duration_minutes / 60
                gross_hours += hours
                if assignee.payment_type != PaymentType.MONTHLY:
                    day_cost += hours * self._hourly_rate(shift, assignee, category_rates, default_rate)

            break_hours = break_minutes_for_hours(gross_hours, rules) / 60
            net_hours = gross_hours - break_hours
            if assignee.payment_type != PaymentType.MONTHLY and gross_hours > 0:
                # Deduct the break at the day's average rate.
                day_cost -= break_hours * (day_cost / gross_hours)

            total_hours += net_hours
            total_cost += day_cost
            row = per_staff.setdefault(
                user_id,
                {"userId": user_id, "name": assignee.name, "scheduledHours": 0.0, "estimatedCost": 0.0},
            )
            row["scheduledHours"] += net_hours
            row["estimatedCost"] += day_cost
        return total_hours, total_cost, per_staff
