from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_number(value: Any, field_name: str, *, minimum: Optional[float] = None) -> float:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be a number")
    if minimum is not None and value < minimum:
        raise ValidationError(f"{field_name} must be at least {minimum:g}")
    return float(value)


def require_int(value: Any, field_name: str, *, minimum: Optional[int] = None) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a whole number")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise ValidationError(f"{field_name} must be a whole number")
    if minimum is not None and value < minimum:
        raise ValidationError(f"{field_name} must be at least {minimum}")
    return value


def optional_coordinate(value: Any, field_name: str, *, limit: float) -> Optional[float]:
    """Latitude/longitude from a request body; ``None`` when absent."""
    if value is None:
        return None
    number = require_number(value, field_name)
    if not -limit <= number <= limit:
        raise ValidationError(f"{field_name} must be between -{limit:g} and {limit:g}")
    return number
