from datetime import datetime

import pytest

from src.shiftwise.shiftwise.core.enums import PaymentType, Role, TimeEntryStatus
from src.shiftwise.shiftwise.core.exceptions import AuthorizationError, ValidationError
from src.shiftwise.shiftwise.payroll.calculator.uk_calculator import UKPayrollCalculator, calculate_staff_cost
from src.shiftwise.shiftwise.payroll.model import StaffMember, UserRate
from src.shiftwise.shiftwise.payroll.service import StaffCostReportService
from src.shiftwise.shiftwise.payroll.tax_tables import TAX_YEAR_2024_25, TAX_YEAR_2025_26


@pytest.fixture
def payroll(make_payroll, approved_row):
    staff = [
        StaffMember(1, "Ana", Role.EMPLOYEE, PaymentType.HOURLY, rates=(UserRate(1, 7, 15.0),)),
        StaffMember(2, "Ben", Role.MANAGER, PaymentType.MONTHLY, monthly_salary=3000),
        StaffMember(3, "Cat", Role.EMPLOYEE, PaymentType.HOURLY),
    ]
    rows = [
        # May: Ana 8h at her 15/h override, Cat 4h at the category rate, Ben's hours tracked only.
        approved_row(time_entry_id=1, category_id=7, category_rate=12.0, location_id=10),
        approved_row(
            time_entry_id=2,
            user_id=3,
            user_name="Cat",
            clock_in=datetime(2025, 5, 7, 10, 0),
            clock_out=datetime(2025, 5, 7, 14, 0),
            category_id=8,
            category_rate=11.0,
            location_id=11,
        ),
        approved_row(
            time_entry_id=3,
            user_id=2,
            user_name="Ben",
            role=Role.MANAGER,
            payment_type=PaymentType.MONTHLY,
            category_id=7,
            category_rate=12.0,
            location_id=10,
        ),
        # Not approved yet: ignored.
        approved_row(time_entry_id=4, status=TimeEntryStatus.PENDING, clock_in=datetime(2025, 5, 8, 9, 0),
                     clock_out=datetime(2025, 5, 8, 17, 0), category_id=7, category_rate=12.0),
        # April: Ana 9h.
        approved_row(time_entry_id=5, clock_in=datetime(2025, 4, 10, 8, 0), clock_out=datetime(2025, 4, 10, 17, 0),
                     category_id=7, category_rate=12.0, location_id=10),
    ]
    return make_payroll(staff=staff, rows=rows)


def test_monthly_report_costs_each_staff_member(payroll, organizations):
    svc = StaffCostReportService(payroll, organizations)
    report = svc.build_monthly_report(current_role=Role.ADMIN, organization_id=1, month="2025-05")

    by_name = {s["name"]: s for s in report["staff"]}
    assert [s["name"] for s in report["staff"]] == ["Ben", "Ana", "Cat"]

    assert by_name["Ana"]["hours"] == 8
    assert by_name["Ana"]["grossPay"] == 120
    assert by_name["Ana"]["holidayAccrual"] == 14.48
    assert by_name["Ana"]["totalCost"] == 134.48

    assert by_name["Cat"]["grossPay"] == 44
    assert by_name["Cat"]["totalCost"] == 49.31

    assert by_name["Ben"]["hours"] == 8
    assert by_name["Ben"]["grossPay"] == 3000
    assert by_name["Ben"]["holidayAccrual"] == 0
    assert by_name["Ben"]["employeeNI"] == 156.16
    assert by_name["Ben"]["employerNI"] == 387.45

    assert report["totals"]["hours"] == 20
    assert report["totals"]["totalCost"] == 3571.24
    assert report["period"]["month"] == "2025-05"


def test_variance_against_previous_month(payroll, organizations):
    svc = StaffCostReportService(payroll, organizations)
    report = svc.build_monthly_report(current_role=Role.ADMIN, organization_id=1, month="2025-05")

    # April: Ben's salary cost plus Ana's 9h * 15 with holiday accrual.
    assert report["variance"]["previousMonthTotal"] == 3538.74
    assert report["variance"]["amount"] == 32.5
    assert report["variance"]["percentage"] == 0.92


def test_location_breakdown(payroll, organizations):
    svc = StaffCostReportService(payroll, organizations)
    report = svc.build_monthly_report(current_role=Role.ADMIN, organization_id=1, month="2025-05")

    locations = {loc["locationName"]: loc for loc in report["locations"]}
    assert locations["North Wall"]["hours"] == 16
    assert locations["North Wall"]["grossPay"] == 120
    assert locations["South Wall"]["totalCost"] == 49.31
    assert [loc["name"] for loc in report["allLocations"]] == ["North Wall", "South Wall"]


def test_non_admins_only_see_employees(payroll, organizations):
    svc = StaffCostReportService(payroll, organizations)
    report = svc.build_monthly_report(current_role=Role.MANAGER, organization_id=1, month="2025-05")

    assert {s["name"] for s in report["staff"]} == {"Ana", "Cat"}
    # Totals still include everyone.
    assert report["totals"]["totalCost"] == 3571.24


def test_report_requires_manager_and_valid_month(payroll, organizations):
    svc = StaffCostReportService(payroll, organizations)
    with pytest.raises(AuthorizationError):
        svc.build_monthly_report(current_role=Role.EMPLOYEE, organization_id=1, month="2025-05")
    with pytest.raises(ValidationError, match="YYYY-MM"):
        svc.build_monthly_report(current_role=Role.ADMIN, organization_id=1, month="May")


def test_each_month_is_priced_with_the_table_in_force(make_payroll, organizations):
    payroll = make_payroll(staff=[StaffMember(2, "Ben", Role.MANAGER, PaymentType.MONTHLY, monthly_salary=2000)])
    svc = StaffCostReportService(payroll, organizations)

    march = svc.build_monthly_report(current_role=Role.ADMIN, organization_id=1, month="2025-03")
    april = svc.build_monthly_report(current_role=Role.ADMIN, organization_id=1, month="2025-04")

    old = calculate_staff_cost(2000, PaymentType.MONTHLY, table=TAX_YEAR_2024_25)
    new = calculate_staff_cost(2000, PaymentType.MONTHLY, table=TAX_YEAR_2025_26)
    assert march["staff"][0]["employerNI"] == old.employer_ni
    assert april["staff"][0]["employerNI"] == new.employer_ni == 237.45
    assert old.employer_ni != new.employer_ni

    # April's variance compares against March at March's rates.
    assert april["variance"]["previousMonthTotal"] == march["totals"]["totalCost"]


def test_pinned_calculator_overrides_dated_tables(make_payroll, organizations):
    payroll = make_payroll(staff=[StaffMember(2, "Ben", Role.MANAGER, PaymentType.MONTHLY, monthly_salary=2000)])
    svc = StaffCostReportService(payroll, organizations, calculator=UKPayrollCalculator(TAX_YEAR_2025_26))

    march = svc.build_monthly_report(current_role=Role.ADMIN, organization_id=1, month="2025-03")

    assert march["staff"][0]["employerNI"] == 237.45
