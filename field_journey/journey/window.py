"""Date-range filtering for pings, meetings and expenses."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Iterable, List, Sequence, Tuple, TypeVar

from ..models import ExpenseRecord, Meeting, Ping
from ..utils import coerce_date, parse_iso_datetime

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
DateBound = date | datetime | str | None


def _item_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    return parse_iso_datetime(value)


def filter_by_date_range(
    items: Iterable[T],
    start: DateBound,
    end: DateBound,
    key: Callable[[T], Any],
) -> List[T]:
    """Return items whose UTC calendar date lies in ``[start, end]``, oldest first.

    ``key`` extracts the timestamp (datetime or ISO string). Items whose
    timestamp is missing or unparseable are dropped. A ``None`` bound leaves
    that side open. Equal timestamps keep their input order.
    """

    start_day = coerce_date(start) if start is not None else None
    end_day = coerce_date(end) if end is not None else None
    if start is not None and start_day is None:
        raise ValueError(f"Unparseable start date: {start!r}")
    if end is not None and end_day is None:
        raise ValueError(f"Unparseable end date: {end!r}")
    if start_day and end_day and start_day > end_day:
        LOGGER.warning("Inverted date range %s -> %s; nothing selected", start_day, end_day)
        return []

    kept: List[Tuple[datetime, T]] = []
    dropped = 0
    for item in items:
        ts = _item_timestamp(key(item))
        if ts is None:
            dropped += 1
            continue
        day = ts.date()
        if start_day is not None and day < start_day:
            continue
        if end_day is not None and day > end_day:
            continue
        kept.append((ts, item))
    if dropped:
        LOGGER.debug("Ignored %d item(s) without a usable timestamp", dropped)
    kept.sort(key=lambda pair: pair[0])
    return [item for _, item in kept]


def filter_pings(pings: Sequence[Ping], start: DateBound, end: DateBound) -> List[Ping]:
    return filter_by_date_range(pings, start, end, key=lambda p: p.timestamp)


def filter_meetings(
    meetings: Sequence[Meeting], start: DateBound, end: DateBound
) -> List[Meeting]:
    return filter_by_date_range(meetings, start, end, key=lambda m: m.start_time)


def filter_expenses(
    expenses: Sequence[ExpenseRecord], start: DateBound, end: DateBound
) -> List[ExpenseRecord]:
    return filter_by_date_range(expenses, start, end, key=lambda e: e.travel_date)


__all__ = [
    "DateBound",
    "filter_by_date_range",
    "filter_pings",
    "filter_meetings",
    "filter_expenses",
]
