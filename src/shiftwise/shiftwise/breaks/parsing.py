"""Break rule (de)serialization at the storage/API boundary.

Rules are stored as a JSON text column. Reads are lenient so that rows written
before validation existed keep working; writes are strict.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Optional

from ..common.validators import require_int, require_number
from ..core.exceptions import ValidationError
from .model import BreakRule

logger = logging.getLogger(__name__)


def parse_break_rules(raw: Any) -> list[BreakRule]:
    """Parse stored break rules, falling back to no rules on any problem.

    Accepts JSON text or an already decoded list. Entries missing a numeric
    ``minHours``/``breakMinutes`` are skipped.
    """
    if raw is None:
        return []

    data = raw
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring break rules that are not valid JSON: %.80r", raw)
            return []

    if not isinstance(data, list):
        logger.warning("Ignoring break rules that are not a list: %.80r", raw)
        return []

    rules: list[BreakRule] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        min_hours = item.get("minHours")
        minutes = item.get("breakMinutes")
        if not _is_number(min_hours) or not _is_number(minutes):
            logger.warning("Skipping malformed break rule: %r", item)
            continue
        rules.append(BreakRule(min_hours=float(min_hours), break_minutes=int(minutes)))
    return rules


def validate_break_rules(payload: Any) -> list[BreakRule]:
    """Strict validation used when settings are saved."""
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise ValidationError("Break rules must be valid JSON") from exc

    if not isinstance(payload, list):
        raise ValidationError("Break rules must be a list")

    rules: list[BreakRule] = []
    seen: set[float] = set()
    for index, item in enumerate(payload, start=1):
        if not isinstance(item, dict):
            raise ValidationError(f"Break rule #{index} must be an object")
        min_hours = require_number(item.get("minHours"), f"Break rule #{index} minHours", minimum=0)
        minutes = require_int(item.get("breakMinutes"), f"Break rule #{index} breakMinutes", minimum=0)
        if min_hours in seen:
            raise ValidationError(f"Duplicate break rule for {min_hours:g} hours")
        seen.add(min_hours)
        rules.append(BreakRule(min_hours=min_hours, break_minutes=minutes))

    return sorted(rules, key=lambda r: r.min_hours)


def dump_break_rules(rules: Iterable[BreakRule]) -> str:
    ordered = sorted(rules, key=lambda r: r.min_hours)
    return json.dumps([_compact(r) for r in ordered], separators=(",", ":"))


def _compact(rule: BreakRule) -> dict:
    # 4.0 -> 4 so stored JSON matches what the settings form sends.
    min_hours: Optional[float] = rule.min_hours
    if float(min_hours).is_integer():
        min_hours = int(min_hours)
    return {"minHours": min_hours, "breakMinutes": int(rule.break_minutes)}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
