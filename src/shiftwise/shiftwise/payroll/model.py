from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import PaymentType, Role, TimeEntryStatus


@dataclass(frozen=True)
class NICalculation:
    employee_ni: float
    employer_ni: float

    def to_dict(self) -> dict:
        return {"employeeNI": self.employee_ni, "employerNI": self.employer_ni}


@dataclass(frozen=True)
class StaffCostCalculation:
    """Cost of one employee. ``total_cost`` excludes employee NI (a deduction, not a cost)."""

    gross_pay: float
    holiday_accrual: float
    employee_ni: float
    employer_ni: float
    total_cost: float

    def to_dict(self) -> dict:
        return {
            "grossPay": self.gross_pay,
            "holidayAccrual": self.holiday_accrual,
            "employeeNI": self.employee_ni,
            "employerNI": self.employer_ni,
            "totalCost": self.total_cost,
        }


@dataclass(frozen=True)
class UserRate:
    """Per-user hourly override for one shift category."""

    user_id: int
    category_id: int
    hourly_rate: float


@dataclass(frozen=True)
class StaffMember:
    """Payroll view of a user."""

    user_id: int
    name: str
    role: Role
    payment_type: PaymentType
    monthly_salary: Optional[float] = None
    contracted_hours: Optional[float] = None
    rates: tuple[UserRate, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TimeEntryCostRow:
    """Read-model for cost reports and exports (time entry joined with user/shift/category)."""

    time_entry_id: int
    user_id: int
    user_name: str
    user_email: str
    role: Role
    payment_type: PaymentType
    clock_in: datetime
    clock_out: Optional[datetime]
    total_break_minutes: int
    status: TimeEntryStatus
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    category_rate: Optional[float] = None
    location_id: Optional[int] = None
    location_name: Optional[str] = None
    primary_location_name: Optional[str] = None
    notes: Optional[str] = None
