"""General utility helpers shared across modules."""

from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Any


def to_utc_aware(value: datetime) -> datetime:
    """Return ``value`` as a UTC-aware datetime (naive values are taken as UTC)."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 string (or datetime/date) into a UTC-aware datetime.

    Returns ``None`` for anything that cannot be interpreted, so callers can
    drop malformed rows instead of failing the whole batch.
    """

    if isinstance(value, datetime):
        return to_utc_aware(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return to_utc_aware(parsed)


def parse_epoch_ms(value: Any) -> datetime | None:
    """Parse epoch milliseconds (number or digit string) into UTC.

    Falls back to ISO parsing for string values that are not numeric.
    """

    if isinstance(value, bool):
        return None
    number: float | None = None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return parse_iso_datetime(value)
    else:
        return parse_iso_datetime(value)
    if not math.isfinite(number):
        return None
    try:
        return datetime.fromtimestamp(number / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def coerce_date(value: Any) -> date | None:
    """Return the calendar date for a date, datetime or ISO string bound."""

    if isinstance(value, datetime):
        return to_utc_aware(value).date()
    if isinstance(value, date):
        return value
    parsed = parse_iso_datetime(value)
    return parsed.date() if parsed is not None else None


def coerce_float(value: Any) -> float | None:
    """Convert numbers and numeric strings to float; ``None`` otherwise."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return float(text)
        except ValueError:
            return None
    return None


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (``Math.round``)."""

    return int(math.floor(value + 0.5))


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end`` (naive values taken as UTC)."""

    delta = to_utc_aware(end) - to_utc_aware(start)
    return round_half_up(delta.total_seconds() / 60.0)
