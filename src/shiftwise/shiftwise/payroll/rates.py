from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..common.validators import require_int, require_number
from ..core.exceptions import ValidationError
from ..shifts.model import ShiftCategory
from .model import UserRate


def get_effective_hourly_rate(
    category_rate: float,
    user_rates: Iterable[UserRate],
    category_id: Optional[int],
) -> float:
    """User override for ``category_id`` if one exists, else the category default."""
    for rate in user_rates:
        if rate.category_id == category_id:
            return rate.hourly_rate
    return category_rate


def rates_with_defaults(categories: Sequence[ShiftCategory], user_rates: Sequence[UserRate]) -> list[dict]:
    """One row per category with the default, the override (if any) and the effective rate."""
    by_category = {r.category_id: r for r in user_rates}
    rows = []
    for category in categories:
        override = by_category.get(category.category_id)
        rows.append(
            {
                "categoryId": category.category_id,
                "categoryName": category.name,
                "defaultRate": category.hourly_rate,
                "userRate": override.hourly_rate if override else None,
                "effectiveRate": override.hourly_rate if override else category.hourly_rate,
                "hasCustomRate": override is not None,
            }
        )
    return rows


def parse_rate_changes(payload: object) -> list[tuple[int, Optional[float]]]:
    """Validate ``[{categoryId, hourlyRate}]`` into ``(category_id, rate)`` pairs.

    A null or empty ``hourlyRate`` removes the override (``rate`` is None).
    At most one change per category.
    """
    if not isinstance(payload, list):
        raise ValidationError("rates must be a list")

    changes: list[tuple[int, Optional[float]]] = []
    seen: set[int] = set()
    for item in payload:
        if not isinstance(item, dict):
            raise ValidationError("Each rate must be an object")
        category_id = require_int(item.get("categoryId"), "categoryId", minimum=1)
        if category_id in seen:
            raise ValidationError(f"Duplicate rate for category {category_id}")
        seen.add(category_id)

        raw = item.get("hourlyRate")
        if raw is None or raw == "":
            changes.append((category_id, None))
        else:
            changes.append((category_id, require_number(raw, "hourlyRate", minimum=0)))
    return changes
