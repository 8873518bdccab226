from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .breaks.service import BreakRuleService
from .database.connection import DBConfig, DatabaseConnection
from .organizations.mysql_organization_repository import MySQLOrganizationRepository
from .organizations.repository import OrganizationRepository
from .payroll.calculator.uk_calculator import UKPayrollCalculator
from .payroll.export import TimesheetExportService
from .payroll.forecast import WeeklyForecastService
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.rate_service import RateService
from .payroll.repository import PayrollRepository
from .payroll.service import StaffCostReportService
from .payroll.tax_tables import get_tax_table
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.service import ShiftService
from .timeclock.factory import ShiftPolicyFactory
from .timeclock.mysql_time_entry_repository import MySQLTimeEntryRepository
from .timeclock.repository import TimeEntryRepository
from .timeclock.service import TimeClockService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    organizations_repo: OrganizationRepository
    shifts_repo: ShiftRepository
    time_entries_repo: TimeEntryRepository
    payroll_repo: PayrollRepository

    break_rule_service: BreakRuleService
    shift_service: ShiftService
    time_clock_service: TimeClockService
    staff_cost_service: StaffCostReportService
    forecast_service: WeeklyForecastService
    export_service: TimesheetExportService
    rate_service: RateService


def assemble(
    *,
    organizations_repo: OrganizationRepository,
    shifts_repo: ShiftRepository,
    time_entries_repo: TimeEntryRepository,
    payroll_repo: PayrollRepository,
    tax_year: Optional[str] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over the given repositories (MySQL in the app, in-memory in tests)."""
    # No pinned year: reports price each month with the table in force then.
    calculator = UKPayrollCalculator(get_tax_table(tax_year)) if tax_year else None

    break_rule_service = BreakRuleService(organizations_repo)
    return Container(
        conn=conn,
        organizations_repo=organizations_repo,
        shifts_repo=shifts_repo,
        time_entries_repo=time_entries_repo,
        payroll_repo=payroll_repo,
        break_rule_service=break_rule_service,
        shift_service=ShiftService(shifts_repo, break_rule_service),
        time_clock_service=TimeClockService(
            time_entries_repo,
            shifts_repo,
            organizations_repo,
            policy_factory=ShiftPolicyFactory(),
        ),
        staff_cost_service=StaffCostReportService(payroll_repo, organizations_repo, calculator=calculator),
        forecast_service=WeeklyForecastService(payroll_repo, shifts_repo, organizations_repo, break_rule_service),
        export_service=TimesheetExportService(payroll_repo, calculator=calculator),
        rate_service=RateService(payroll_repo),
    )


def build_container(*, db_config: dict, tax_year: Optional[str] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return assemble(
        organizations_repo=MySQLOrganizationRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
        time_entries_repo=MySQLTimeEntryRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        tax_year=tax_year,
        conn=conn,
    )
