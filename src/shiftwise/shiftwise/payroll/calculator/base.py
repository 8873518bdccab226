from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ...core.enums import PaymentType
from ..model import NICalculation, StaffCostCalculation


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate_monthly_ni(self, monthly_gross: float) -> NICalculation:
        raise NotImplementedError

    @abstractmethod
    def calculate_holiday_accrual(self, gross_pay: float, payment_type: PaymentType) -> float:
        raise NotImplementedError

    @abstractmethod
    def calculate_staff_cost(self, gross_pay: float, payment_type: PaymentType) -> StaffCostCalculation:
        raise NotImplementedError

    def worked_hours(self, clock_in: datetime, clock_out: Optional[datetime], break_minutes: int) -> float:
        return worked_hours(clock_in, clock_out, break_minutes)


def worked_hours(clock_in: datetime, clock_out: Optional[datetime], break_minutes: int) -> float:
    """(out - in) - break, not below 0. Open entries count as 0."""
    if not clock_out:
        return 0.0
    minutes = (clock_out - clock_in).total_seconds() / 60 - int(break_minutes or 0)
    return max(minutes, 0.0) / 60
