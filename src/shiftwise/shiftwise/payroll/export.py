from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

import pandas as pd
from openpyxl.utils import get_column_letter

from ..common.datetime_utils import end_of_day, start_of_day
from ..common.money import round_money
from ..core.enums import MANAGER_ROLES, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .calculator.base import PayrollCalculator
from .calculator.uk_calculator import UKPayrollCalculator
from .rates import get_effective_hourly_rate
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MIMETYPE = "text/csv"

TIMESHEET_COLUMNS = {
    "Employee Name": 20,
    "Employee Email": 25,
    "Location": 18,
    "Date": 12,
    "Clock In": 12,
    "Clock Out": 12,
    "Break Duration (min)": 18,
    "Gross Hours": 12,
    "Net Hours": 12,
    "Shift Category": 18,
    "Hourly Rate (£)": 14,
    "Total Pay (£)": 14,
    "Status": 10,
    "Notes": 30,
}
SUMMARY_COLUMNS = {"Employee Name": 20, "Total Net Hours": 15, "Total Pay (£)": 15}


@dataclass(frozen=True)
class ExportFile:
    content: bytes
    filename: str
    mimetype: str


def _set_widths(worksheet, widths: dict[str, int]) -> None:
    for idx, width in enumerate(widths.values(), start=1):
        worksheet.column_dimensions[get_column_letter(idx)].width = width


class TimesheetExportService:
    """Completed time entries for a date range, as an Excel workbook or CSV."""

    def __init__(self, payroll: PayrollRepository, *, calculator: Optional[PayrollCalculator] = None):
        self._payroll = payroll
        self._calculator = calculator or UKPayrollCalculator()

    def build_frames(
        self,
        *,
        organization_id: int,
        start_date: date,
        end_date: date,
        location_id: Optional[int] = None,
    ) -> tuple[pd.DataFrame, pd.DataFrame]:
        entries = self._payroll.list_entry_rows(
            organization_id=organization_id,
            start=start_of_day(start_date),
            end=end_of_day(end_date),
            primary_location_id=location_id,
        )
        rates_by_user = {s.user_id: s.rates for s in self._payroll.list_staff(organization_id)}

        rows = []
        for e in entries:
            gross_hours = (e.clock_out - e.clock_in).total_seconds() / 3600 if e.clock_out else 0.0
            net_hours = self._calculator.worked_hours(e.clock_in, e.clock_out, e.total_break_minutes)
            rate = get_effective_hourly_rate(e.category_rate or 0.0, rates_by_user.get(e.user_id, ()), e.category_id)
            rows.append(
                {
                    "Employee Name": e.user_name,
                    "Employee Email": e.user_email,
                    "Location": e.primary_location_name or e.location_name or "Unassigned",
                    "Date": e.clock_in.strftime("%Y-%m-%d"),
                    "Clock In": e.clock_in.strftime("%H:%M:%S"),
                    "Clock Out": e.clock_out.strftime("%H:%M:%S") if e.clock_out else "",
                    "Break Duration (min)": e.total_break_minutes,
                    "Gross Hours": round_money(gross_hours),
                    "Net Hours": round_money(net_hours),
                    "Shift Category": e.category_name or "Uncategorized",
                    "Hourly Rate (£)": rate,
                    "Total Pay (£)": round_money(net_hours * rate),
                    "Status": e.status.value,
                    "Notes": e.notes or "",
                    # Unrounded values for the summary sheet.
                    "_net": net_hours,
                    "_pay": net_hours * rate,
                }
            )

        df = pd.DataFrame(rows, columns=[*TIMESHEET_COLUMNS, "_net", "_pay"])
        if df.empty:
            summary = pd.DataFrame(columns=list(SUMMARY_COLUMNS))
        else:
            summary = (
                df.groupby("Employee Name", sort=False)[["_net", "_pay"]]
                .sum()
                .reset_index()
                .rename(columns={"_net": "Total Net Hours", "_pay": "Total Pay (£)"})
            )
            summary["Total Net Hours"] = summary["Total Net Hours"].map(round_money)
            summary["Total Pay (£)"] = summary["Total Pay (£)"].map(round_money)

        return df.drop(columns=["_net", "_pay"]), summary

    def export(
        self,
        *,
        current_role: Role,
        organization_id: int,
        start_date: Optional[date],
        end_date: Optional[date],
        location_id: Optional[int] = None,
        fmt: str = "xlsx",
    ) -> ExportFile:
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("Forbidden")
        if not start_date or not end_date:
            raise ValidationError("Start date and end date are required")
        if end_date < start_date:
            raise ValidationError("End date must not be before start date")
        fmt = (fmt or "xlsx").lower()
        if fmt not in ("xlsx", "csv"):
            raise ValidationError("format must be xlsx or csv")

        timesheet, summary = self.build_frames(
            organization_id=organization_id,
            start_date=start_date,
            end_date=end_date,
            location_id=location_id,
        )
        filename = f"timesheet_{start_date.isoformat()}_to_{end_date.isoformat()}.{fmt}"
        logger.info("Timesheet export for organization %s: %d entries (%s)", organization_id, len(timesheet), fmt)

        if fmt == "csv":
            return ExportFile(
                content=timesheet.to_csv(index=False).encode("utf-8"),
                filename=filename,
                mimetype=CSV_MIMETYPE,
            )

        out = io.BytesIO()
        with pd.ExcelWriter(out, engine="openpyxl") as writer:
            timesheet.to_excel(writer, index=False, sheet_name="Timesheet")
            summary.to_excel(writer, index=False, sheet_name="Summary")
            _set_widths(writer.sheets["Timesheet"], TIMESHEET_COLUMNS)
            _set_widths(writer.sheets["Summary"], SUMMARY_COLUMNS)
        return ExportFile(content=out.getvalue(), filename=filename, mimetype=XLSX_MIMETYPE)
