from __future__ import annotations

from datetime import datetime
from typing import Iterable

from ..common.datetime_utils import hours_between
from .model import BreakRule


def break_minutes_for_hours(hours: float, rules: Iterable[BreakRule]) -> int:
    """Highest qualifying threshold wins; 0 when no rule qualifies."""
    best: BreakRule | None = None
    for rule in rules:
        if hours >= rule.min_hours and (best is None or rule.min_hours > best.min_hours):
            best = rule
    return int(best.break_minutes) if best else 0


def resolve_break_minutes(start_time: datetime, end_time: datetime, rules: Iterable[BreakRule]) -> int:
    """Unpaid break for a shift running from ``start_time`` to ``end_time``.

    Callers guarantee ``end_time > start_time``.
    """
    return break_minutes_for_hours(hours_between(start_time, end_time), rules)
