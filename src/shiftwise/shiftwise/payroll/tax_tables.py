"""UK National Insurance tables, one per tax year.

Thresholds are monthly amounts. Tables change every April by law, so they are
looked up by tax year (or by date) rather than hard-wired into the calculator.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.constants import HOLIDAY_ACCRUAL_RATE
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class NITable:
    tax_year: str
    effective_from: date
    primary_threshold: float
    upper_earnings_limit: float
    secondary_threshold: float
    employee_main_rate: float
    employee_additional_rate: float
    employer_rate: float
    holiday_accrual_rate: float = HOLIDAY_ACCRUAL_RATE


# Weekly thresholds (£242 / £967 / £175) converted to monthly with 52/12.
TAX_YEAR_2024_25 = NITable(
    tax_year="2024/25",
    effective_from=date(2024, 4, 6),
    primary_threshold=242 * 52 / 12,
    upper_earnings_limit=967 * 52 / 12,
    secondary_threshold=175 * 52 / 12,
    employee_main_rate=0.08,
    employee_additional_rate=0.02,
    employer_rate=0.138,
)

TAX_YEAR_2025_26 = NITable(
    tax_year="2025/26",
    effective_from=date(2025, 4, 6),
    primary_threshold=1048,
    upper_earnings_limit=4189,
    secondary_threshold=417,
    employee_main_rate=0.08,
    employee_additional_rate=0.02,
    employer_rate=0.15,
)

TAX_TABLES: dict[str, NITable] = {t.tax_year: t for t in (TAX_YEAR_2024_25, TAX_YEAR_2025_26)}

CURRENT_TAX_YEAR = TAX_YEAR_2025_26.tax_year


def get_tax_table(tax_year: Optional[str] = None) -> NITable:
    """Table for ``tax_year`` (``"2025/26"`` style); the current table when omitted."""
    key = tax_year or CURRENT_TAX_YEAR
    try:
        return TAX_TABLES[key]
    except KeyError:
        known = ", ".join(sorted(TAX_TABLES))
        raise ValidationError(f"Unknown tax year {key!r} (known: {known})") from None


def table_for_date(on: date) -> NITable:
    """Table in force on ``on``; the oldest table for dates before any we hold."""
    ordered = sorted(TAX_TABLES.values(), key=lambda t: t.effective_from)
    chosen = ordered[0]
    for table in ordered:
        if table.effective_from <= on:
            chosen = table
    return chosen
