from datetime import date, datetime

import pytest

from src.shiftwise.shiftwise.common.money import round_half_up
from src.shiftwise.shiftwise.core.enums import PaymentType
from src.shiftwise.shiftwise.core.exceptions import ValidationError
from src.shiftwise.shiftwise.payroll.calculator.uk_calculator import (
    UKPayrollCalculator,
    calculate_holiday_accrual,
    calculate_monthly_ni,
    calculate_staff_cost,
)
from src.shiftwise.shiftwise.payroll.model import UserRate
from src.shiftwise.shiftwise.payroll.rates import get_effective_hourly_rate
from src.shiftwise.shiftwise.payroll.tax_tables import (
    TAX_YEAR_2024_25,
    TAX_YEAR_2025_26,
    get_tax_table,
    table_for_date,
)


def test_no_employee_ni_at_primary_threshold():
    assert calculate_monthly_ni(1048).employee_ni == 0


def test_ni_across_all_bands():
    ni = calculate_monthly_ni(5000)
    # (4189 - 1048) * 8% + (5000 - 4189) * 2%
    assert ni.employee_ni == 267.50
    # (5000 - 417) * 15%
    assert ni.employer_ni == 687.45


def test_employer_ni_starts_at_secondary_threshold():
    assert calculate_monthly_ni(417).employer_ni == 0
    assert calculate_monthly_ni(0).to_dict() == {"employeeNI": 0, "employerNI": 0}


def test_2024_25_table_uses_weekly_thresholds():
    ni = calculate_monthly_ni(2000, table=TAX_YEAR_2024_25)
    assert ni.employee_ni == round_half_up((2000 - 242 * 52 / 12) * 0.08)
    assert ni.employer_ni == round_half_up((2000 - 175 * 52 / 12) * 0.138)


def test_holiday_accrual_only_for_hourly():
    assert calculate_holiday_accrual(1000, PaymentType.HOURLY) == 120.70
    assert calculate_holiday_accrual(1000, PaymentType.MONTHLY) == 0
    assert calculate_holiday_accrual(1000, "HOURLY") == 120.70


def test_staff_cost_total_excludes_employee_ni():
    cost = calculate_staff_cost(2000, PaymentType.HOURLY)

    assert cost.gross_pay == 2000
    assert cost.holiday_accrual == 241.40
    assert cost.employee_ni == 76.16
    assert cost.employer_ni == 237.45
    assert cost.total_cost == 2478.85
    assert set(cost.to_dict()) == {"grossPay", "holidayAccrual", "employeeNI", "employerNI", "totalCost"}


def test_money_rounds_the_cent_value_half_away_from_zero():
    assert round_half_up(0.125) == 0.13
    assert round_half_up(-0.125) == -0.13
    assert round_half_up(2.5, 0) == 3
    assert round_half_up(-2.5, 0) == -3
    # 1.005 and 1.015 sit just below the half cent as floats.
    assert round_half_up(1.005) == 1.0
    assert round_half_up(1.015) == 1.01
    assert round_half_up(2.675) == 2.67
    assert round_half_up(-1.005) == -1.0


def test_huge_amounts_do_not_raise():
    ni = calculate_monthly_ni(1e28)
    assert ni.employee_ni == pytest.approx(2e26)
    assert ni.employer_ni == pytest.approx(1.5e27)
    assert calculate_staff_cost(1e300, PaymentType.HOURLY).gross_pay == 1e300
    assert round_half_up(-1e300) == -1e300


def test_worked_hours_subtracts_break_and_floors_at_zero():
    calc = UKPayrollCalculator()
    start = datetime(2025, 5, 1, 9, 0)

    assert calc.worked_hours(start, datetime(2025, 5, 1, 17, 0), 30) == 7.5
    assert calc.worked_hours(start, datetime(2025, 5, 1, 9, 10), 30) == 0
    assert calc.worked_hours(start, None, 0) == 0


def test_tax_table_lookup():
    assert get_tax_table() is TAX_YEAR_2025_26
    assert get_tax_table("2024/25") is TAX_YEAR_2024_25
    with pytest.raises(ValidationError):
        get_tax_table("1999/00")


@pytest.mark.parametrize(
    "on, expected",
    [
        (date(2025, 4, 5), TAX_YEAR_2024_25),
        (date(2025, 4, 6), TAX_YEAR_2025_26),
        (date(2020, 1, 1), TAX_YEAR_2024_25),
    ],
)
def test_table_for_date(on, expected):
    assert table_for_date(on) is expected


def test_user_override_wins_for_its_category_only():
    rates = [UserRate(user_id=1, category_id=7, hourly_rate=14.5)]

    assert get_effective_hourly_rate(12.0, rates, 7) == 14.5
    assert get_effective_hourly_rate(12.0, rates, 8) == 12.0
    assert get_effective_hourly_rate(12.0, [], 7) == 12.0
    assert get_effective_hourly_rate(12.0, rates, None) == 12.0
