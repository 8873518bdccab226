from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import parse_month, previous_month_start
from ..common.money import round_money
from ..core.enums import MANAGER_ROLES, PaymentType, Role, TimeEntryStatus
from ..core.exceptions import AuthorizationError
from ..organizations.repository import OrganizationRepository
from .calculator.base import PayrollCalculator, worked_hours
from .calculator.uk_calculator import UKPayrollCalculator
from .model import TimeEntryCostRow, UserRate
from .rates import get_effective_hourly_rate
from .repository import PayrollRepository
from .tax_tables import table_for_date

logger = logging.getLogger(__name__)

UNASSIGNED_LOCATION = "unassigned"


class StaffCostReportService:
    """Monthly staff-cost analytics: pay, NI, holiday accrual and variance.

    Salaried staff are costed on their monthly salary whether or not they clocked
    any hours. Hourly staff are costed on APPROVED, completed time entries at the
    effective hourly rate of each entry's shift category.
    """

    def __init__(
        self,
        payroll: PayrollRepository,
        organizations: OrganizationRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payroll = payroll
        self._organizations = organizations
        # None: each report uses the NI table in force for its month.
        self._calculator = calculator

    def _calculator_for(self, period_end: date) -> PayrollCalculator:
        if self._calculator is not None:
            return self._calculator
        return UKPayrollCalculator(table_for_date(period_end))

    def _entry_pay(self, entry: TimeEntryCostRow, rates: Sequence[UserRate]) -> tuple[float, float]:
        hours = worked_hours(entry.clock_in, entry.clock_out, entry.total_break_minutes)
        rate = get_effective_hourly_rate(entry.category_rate or 0.0, rates, entry.category_id)
        return hours, hours * rate

    def build_monthly_report(
        self,
        *,
        current_role: Role,
        organization_id: int,
        month: str,
        location_id: Optional[int] = None,
    ) -> dict:
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("Forbidden")

        start, end = parse_month(month)
        prev_start = previous_month_start(start)
        prev_end = start - timedelta(microseconds=1)
        calculator = self._calculator_for(end.date())

        staff = self._payroll.list_staff(organization_id)
        rates_by_user = {s.user_id: s.rates for s in staff}

        current = self._payroll.list_entry_rows(
            organization_id=organization_id,
            start=start,
            end=end,
            status=TimeEntryStatus.APPROVED,
            shift_location_id=location_id,
        )
        previous = self._payroll.list_entry_rows(
            organization_id=organization_id,
            start=prev_start,
            end=prev_end,
            status=TimeEntryStatus.APPROVED,
            shift_location_id=location_id,
        )
        locations = self._organizations.list_locations(organization_id)

        staff_costs: dict[int, dict] = {}
        for member in staff:
            if member.payment_type == PaymentType.MONTHLY and member.monthly_salary:
                costs = calculator.calculate_staff_cost(member.monthly_salary, PaymentType.MONTHLY)
                staff_costs[member.user_id] = {
                    "userId": member.user_id,
                    "name": member.name,
                    "role": member.role.value,
                    "paymentType": member.payment_type.value,
                    "hours": 0.0,
                    **costs.to_dict(),
                    "locationBreakdown": defaultdict(lambda: {"hours": 0.0, "grossPay": 0.0}),
                }

        for entry in current:
            loc_key = str(entry.location_id) if entry.location_id else UNASSIGNED_LOCATION
            hours, gross = self._entry_pay(entry, rates_by_user.get(entry.user_id, ()))

            if entry.payment_type == PaymentType.HOURLY:
                row = staff_costs.get(entry.user_id)
                if row is None:
                    row = staff_costs[entry.user_id] = {
                        "userId": entry.user_id,
                        "name": entry.user_name,
                        "role": entry.role.value,
                        "paymentType": entry.payment_type.value,
                        "hours": 0.0,
                        "grossPay": 0.0,
                        "holidayAccrual": 0.0,
                        "employeeNI": 0.0,
                        "employerNI": 0.0,
                        "totalCost": 0.0,
                        "locationBreakdown": defaultdict(lambda: {"hours": 0.0, "grossPay": 0.0}),
                    }
                row["hours"] += hours
                row["grossPay"] += gross
                row["locationBreakdown"][loc_key]["hours"] += hours
                row["locationBreakdown"][loc_key]["grossPay"] += gross
            elif entry.user_id in staff_costs:
                # Salaried: pay is fixed, only the hours are tracked.
                row = staff_costs[entry.user_id]
                row["hours"] += hours
                row["locationBreakdown"][loc_key]["hours"] += hours

        # NI thresholds apply to the monthly total, not per entry.
        for row in staff_costs.values():
            if row["paymentType"] == PaymentType.HOURLY.value:
                row.update(calculator.calculate_staff_cost(row["grossPay"], PaymentType.HOURLY).to_dict())
            row["hours"] = round_money(row["hours"])
            row["locationBreakdown"] = dict(row["locationBreakdown"])

        staff_list = list(staff_costs.values())
        totals = {
            key: round_money(sum(s[key] for s in staff_list))
            for key in ("hours", "grossPay", "holidayAccrual", "employeeNI", "employerNI", "totalCost")
        }

        previous_calculator = self._calculator_for(prev_end.date())
        previous_total = round_money(self._previous_month_total(previous_calculator, staff, previous, rates_by_user))
        variance = {
            "amount": round_money(totals["totalCost"] - previous_total),
            "percentage": (
                round_money((totals["totalCost"] - previous_total) / previous_total * 100)
                if previous_total > 0
                else 0.0
            ),
            "previousMonthTotal": previous_total,
        }

        location_costs = self._location_breakdown(calculator, staff_list, locations)

        visible = staff_list
        if current_role != Role.ADMIN:
            visible = [s for s in staff_list if s["role"] == Role.EMPLOYEE.value]
        visible.sort(key=lambda s: s["totalCost"], reverse=True)

        logger.info(
            "Staff cost report built for organization %s, %s: %d staff, total %.2f",
            organization_id,
            month,
            len(staff_list),
            totals["totalCost"],
        )
        return {
            "period": {"month": month, "startDate": start.isoformat(), "endDate": end.isoformat()},
            "totals": totals,
            "variance": variance,
            "staff": visible,
            "locations": [loc for loc in location_costs if loc["hours"] > 0],
            "allLocations": [{"id": loc.location_id, "name": loc.name} for loc in locations],
        }

    def _previous_month_total(
        self,
        calculator: PayrollCalculator,
        staff,
        previous: Sequence[TimeEntryCostRow],
        rates_by_user,
    ) -> float:
        # Salaries are assumed unchanged month to month.
        total = 0.0
        for member in staff:
            if member.payment_type == PaymentType.MONTHLY and member.monthly_salary:
                total += calculator.calculate_staff_cost(member.monthly_salary, PaymentType.MONTHLY).total_cost

        hourly_gross: dict[int, float] = defaultdict(float)
        for entry in previous:
            if entry.payment_type != PaymentType.HOURLY:
                continue
            _, gross = self._entry_pay(entry, rates_by_user.get(entry.user_id, ()))
            hourly_gross[entry.user_id] += gross

        for gross in hourly_gross.values():
            total += calculator.calculate_staff_cost(gross, PaymentType.HOURLY).total_cost
        return total

    def _location_breakdown(self, calculator: PayrollCalculator, staff_list: list[dict], locations) -> list[dict]:
        """Per-location estimate, costed as if the location's pay were one hourly employee."""
        by_id: dict[str, dict] = {
            str(loc.location_id): {
                "locationId": loc.location_id,
                "locationName": loc.name,
                "hours": 0.0,
                "grossPay": 0.0,
                "holidayAccrual": 0.0,
                "employerNI": 0.0,
                "totalCost": 0.0,
            }
            for loc in locations
        }

        for row in staff_list:
            for loc_key, data in row["locationBreakdown"].items():
                if loc_key in by_id:
                    by_id[loc_key]["hours"] += data["hours"]
                    by_id[loc_key]["grossPay"] += data["grossPay"]

        for loc in by_id.values():
            costs = calculator.calculate_staff_cost(loc["grossPay"], PaymentType.HOURLY)
            loc["grossPay"] = costs.gross_pay
            loc["holidayAccrual"] = costs.holiday_accrual
            loc["employerNI"] = costs.employer_ni
            loc["totalCost"] = costs.total_cost
            loc["hours"] = round_money(loc["hours"])
        return list(by_id.values())
