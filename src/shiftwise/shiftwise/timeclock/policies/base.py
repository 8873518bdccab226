from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..model import ClockInRejection


class ShiftAssociationPolicy(ABC):
    """Strategy Pattern: what to do when a clock-in matches no scheduled shift."""

    @abstractmethod
    def on_missing_shift(self, *, now: datetime, window_minutes: int) -> Optional[ClockInRejection]:
        raise NotImplementedError
