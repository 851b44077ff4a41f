"""Canonical value objects consumed and produced by the journey engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Tuple

import polyline

from .utils import minutes_between

LatLon = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class Ping:
    """One timestamped GPS observation from an agent's device."""

    timestamp: datetime
    latitude: float
    longitude: float
    accuracy: float | None = None
    battery: float | None = None
    region_code: str | None = None
    activity: str | None = None

    @property
    def coordinate(self) -> LatLon:
        return (self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class Meeting:
    """A scheduled client meeting as checked in by the agent.

    ``end_time`` is ``None`` while the meeting is still running.
    """

    id: str
    client_id: str | None
    client_name: str | None
    start_time: datetime | None
    end_time: datetime | None = None
    start_latitude: float | None = None
    start_longitude: float | None = None
    status: str | None = None
    comments: str | None = None
    attachments: Tuple[str, ...] = ()

    @property
    def start_coordinate(self) -> LatLon | None:
        if self.start_latitude is None or self.start_longitude is None:
            return None
        return (self.start_latitude, self.start_longitude)


@dataclass(frozen=True, slots=True)
class ClientLocation:
    id: str
    name: str | None
    latitude: float | None = None
    longitude: float | None = None
    status: str | None = None
    region_code: str | None = None
    created_at: datetime | None = None

    @property
    def has_coordinates(self) -> bool:
        """True when both coordinates are known (0.0 is a valid value)."""

        return self.latitude is not None and self.longitude is not None

    @property
    def coordinate(self) -> LatLon | None:
        if not self.has_coordinates:
            return None
        return (self.latitude, self.longitude)  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class ExpenseLeg:
    start_location: str | None = None
    end_location: str | None = None
    distance_km: float | None = None
    transport_mode: str | None = None


@dataclass(frozen=True, slots=True)
class ExpenseRecord:
    """A travel expense claim. Only used for aggregate totals."""

    id: str | None
    travel_date: datetime | None
    distance_km: float | None
    amount_spent: float | None
    transport_mode: str | None = None
    start_location: str | None = None
    end_location: str | None = None
    currency: str | None = None
    legs: Tuple[ExpenseLeg, ...] = ()
    receipt_urls: Tuple[str, ...] = ()


class VisitStatus(str, Enum):
    COMPLETED = "completed"
    IN_PROGRESS = "in-progress"


@dataclass(frozen=True, slots=True)
class VisitRecord:
    """A meeting paired with its nearest ping and verification outcome."""

    meeting: Meeting
    matched_client: ClientLocation | None
    closest_ping: Ping
    visit_status: VisitStatus
    distance_to_client_km: float | None
    verified: bool

    @property
    def client_name(self) -> str | None:
        if self.meeting.client_name:
            return self.meeting.client_name
        if self.matched_client is not None:
            return self.matched_client.name
        return None

    @property
    def duration_minutes(self) -> int | None:
        start, end = self.meeting.start_time, self.meeting.end_time
        if start is None or end is None:
            return None
        return minutes_between(start, end)


@dataclass(frozen=True, slots=True)
class JourneyMetrics:
    """Summary of one agent's journey over a date range."""

    total_distance_km: float
    total_duration_minutes: int
    start_ping: Ping | None
    end_ping: Ping | None
    visit_records: Tuple[VisitRecord, ...] = ()
    visited_count: int = 0
    planned_count: int = 0
    route_polyline: Tuple[LatLon, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "JourneyMetrics":
        """Zero-valued metrics for a range with no pings and no meetings."""

        return cls(
            total_distance_km=0.0,
            total_duration_minutes=0,
            start_ping=None,
            end_ping=None,
        )

    @property
    def verified_count(self) -> int:
        return sum(1 for record in self.visit_records if record.verified)

    @property
    def visit_rate(self) -> float:
        """Visited / planned as a percentage (0 when nothing was planned)."""

        if not self.planned_count:
            return 0.0
        return round(self.visited_count / self.planned_count * 100.0, 1)

    @property
    def encoded_route(self) -> str:
        """Route as a Google encoded polyline string."""

        if not self.route_polyline:
            return ""
        return polyline.encode(list(self.route_polyline))


__all__ = [
    "LatLon",
    "Ping",
    "Meeting",
    "ClientLocation",
    "ExpenseLeg",
    "ExpenseRecord",
    "VisitStatus",
    "VisitRecord",
    "JourneyMetrics",
]
