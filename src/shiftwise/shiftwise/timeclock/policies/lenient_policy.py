from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..model import ClockInRejection
from .base import ShiftAssociationPolicy


class LenientShiftPolicy(ShiftAssociationPolicy):
    """Unassociated clock-in allowed (entry saved without a shift)."""

    def on_missing_shift(self, *, now: datetime, window_minutes: int) -> Optional[ClockInRejection]:
        return None
