from __future__ import annotations

from typing import Optional

from ...common.money import round_money
from ...core.enums import PaymentType
from ..model import NICalculation, StaffCostCalculation
from ..tax_tables import NITable, get_tax_table
from .base import PayrollCalculator


class UKPayrollCalculator(PayrollCalculator):
    """UK employee/employer National Insurance, holiday accrual and total employer cost.

    Monthly pay periods only. The table is a frozen value, so one instance is
    safe to share.
    """

    def __init__(self, table: Optional[NITable] = None):
        self.table = table or get_tax_table()

    def calculate_monthly_ni(self, monthly_gross: float) -> NICalculation:
        t = self.table
        gross = float(monthly_gross)

        employee = 0.0
        if gross > t.primary_threshold:
            main_band = min(gross, t.upper_earnings_limit) - t.primary_threshold
            employee += main_band * t.employee_main_rate
        if gross > t.upper_earnings_limit:
            employee += (gross - t.upper_earnings_limit) * t.employee_additional_rate

        employer = 0.0
        if gross > t.secondary_threshold:
            employer = (gross - t.secondary_threshold) * t.employer_rate

        return NICalculation(employee_ni=round_money(employee), employer_ni=round_money(employer))

    def calculate_holiday_accrual(self, gross_pay: float, payment_type: PaymentType) -> float:
        # Salaried staff are paid through their holiday; only hourly staff accrue.
        if payment_type != PaymentType.HOURLY:
            return 0.0
        return round_money(float(gross_pay) * self.table.holiday_accrual_rate)

    def calculate_staff_cost(self, gross_pay: float, payment_type: PaymentType) -> StaffCostCalculation:
        gross = round_money(gross_pay)
        holiday = self.calculate_holiday_accrual(gross_pay, payment_type)
        ni = self.calculate_monthly_ni(gross_pay)
        return StaffCostCalculation(
            gross_pay=gross,
            holiday_accrual=holiday,
            employee_ni=ni.employee_ni,
            employer_ni=ni.employer_ni,
            total_cost=round_money(gross + holiday + ni.employer_ni),
        )


def calculate_monthly_ni(monthly_gross: float, *, table: Optional[NITable] = None) -> NICalculation:
    return UKPayrollCalculator(table).calculate_monthly_ni(monthly_gross)


def calculate_holiday_accrual(
    gross_pay: float,
    payment_type: PaymentType,
    *,
    table: Optional[NITable] = None,
) -> float:
    return UKPayrollCalculator(table).calculate_holiday_accrual(gross_pay, payment_type)


def calculate_staff_cost(
    gross_pay: float,
    payment_type: PaymentType,
    *,
    table: Optional[NITable] = None,
) -> StaffCostCalculation:
    return UKPayrollCalculator(table).calculate_staff_cost(gross_pay, payment_type)
