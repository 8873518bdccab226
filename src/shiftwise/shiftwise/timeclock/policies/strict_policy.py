from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import ClockInRejectionCode
from ..model import ClockInRejection
from .base import ShiftAssociationPolicy


class StrictShiftPolicy(ShiftAssociationPolicy):
    """Clock-in requires a scheduled shift whose window contains now."""

    def on_missing_shift(self, *, now: datetime, window_minutes: int) -> Optional[ClockInRejection]:
        return ClockInRejection(
            ClockInRejectionCode.NO_SHIFT,
            f"No scheduled shift found. You can clock in from {window_minutes} minutes "
            "before a shift you are assigned to until it ends.",
        )
