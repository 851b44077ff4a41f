"""Merged activity timeline and live stats for a single agent."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Sequence

from ..geo import distance_km
from ..models import ExpenseRecord, LatLon, Meeting, Ping
from ..utils import minutes_between, to_utc_aware


class EventKind(str, Enum):
    LOCATION = "location"
    MEETING = "meeting"
    EXPENSE = "expense"


@dataclass(frozen=True, slots=True)
class TimelineEvent:
    kind: EventKind
    timestamp: datetime
    coordinate: LatLon | None
    payload: Ping | Meeting | ExpenseRecord


def build_timeline(
    pings: Sequence[Ping],
    meetings: Sequence[Meeting],
    expenses: Sequence[ExpenseRecord],
) -> List[TimelineEvent]:
    """Return all events newest first.

    Meetings without a start time or start coordinate are left out; expenses
    never carry a coordinate.
    """

    events: List[TimelineEvent] = [
        TimelineEvent(EventKind.LOCATION, to_utc_aware(ping.timestamp), ping.coordinate, ping)
        for ping in pings
    ]
    for meeting in meetings:
        if meeting.start_time is None or meeting.start_coordinate is None:
            continue
        events.append(
            TimelineEvent(
                EventKind.MEETING,
                to_utc_aware(meeting.start_time),
                meeting.start_coordinate,
                meeting,
            )
        )
    for expense in expenses:
        if expense.travel_date is None:
            continue
        events.append(
            TimelineEvent(
                EventKind.EXPENSE, to_utc_aware(expense.travel_date), None, expense
            )
        )
    events.sort(key=lambda e: e.timestamp, reverse=True)
    return events


def active_minutes(events: Sequence[TimelineEvent]) -> int:
    """Minutes between the oldest and newest event of a newest-first timeline."""

    if len(events) < 2:
        return 0
    return minutes_between(events[-1].timestamp, events[0].timestamp)


def current_speed_kmh(events: Sequence[TimelineEvent]) -> float:
    """Speed between the two most recent location events."""

    locations = [
        e for e in events if e.kind is EventKind.LOCATION and e.coordinate is not None
    ]
    if len(locations) < 2:
        return 0.0
    latest, previous = locations[0], locations[1]
    hours = (latest.timestamp - previous.timestamp).total_seconds() / 3600.0
    if hours <= 0:
        return 0.0
    km = distance_km(previous.coordinate, latest.coordinate)  # type: ignore[arg-type]
    return round(km / hours, 1)


__all__ = [
    "EventKind",
    "TimelineEvent",
    "build_timeline",
    "active_minutes",
    "current_speed_kmh",
]
