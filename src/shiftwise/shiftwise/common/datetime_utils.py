from __future__ import annotations

from datetime import date, datetime, timedelta

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str, field_name: str = "datetime") -> datetime:
    """Parse an ISO-8601 timestamp sent by the browser.

    A trailing ``Z`` is accepted. Aware values are converted to naive UTC so they
    compare with the naive DATETIME columns we store.
    """
    if not value or not isinstance(value, str):
        raise ValidationError(f"Invalid {field_name} format")
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError(f"Invalid {field_name} format") from exc
    if parsed.tzinfo is not None:
        parsed = (parsed - parsed.utcoffset()).replace(tzinfo=None)
    return parsed


def parse_month(value: str) -> tuple[datetime, datetime]:
    """Return [first instant, last instant] of a ``YYYY-MM`` month."""
    try:
        first = datetime.strptime(value, "%Y-%m")
    except (TypeError, ValueError) as exc:
        raise ValidationError("Month parameter is required (format: YYYY-MM)") from exc
    return first, next_month_start(first) - timedelta(microseconds=1)


def next_month_start(value: datetime) -> datetime:
    if value.month == 12:
        return value.replace(year=value.year + 1, month=1, day=1)
    return value.replace(month=value.month + 1, day=1)


def previous_month_start(value: datetime) -> datetime:
    if value.month == 1:
        return value.replace(year=value.year - 1, month=12, day=1)
    return value.replace(month=value.month - 1, day=1)


def start_of_day(value: date) -> datetime:
    return datetime(value.year, value.month, value.day)


def end_of_day(value: date) -> datetime:
    return start_of_day(value) + timedelta(days=1) - timedelta(microseconds=1)


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
