from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BreakRule:
    """One step of the duration -> unpaid break step function.

    A shift lasting at least ``min_hours`` earns ``break_minutes`` of unpaid break,
    unless a rule with a higher qualifying threshold applies.
    """

    min_hours: float
    break_minutes: int

    def to_dict(self) -> dict:
        return {"minHours": self.min_hours, "breakMinutes": self.break_minutes}
