"""Journey reconstruction: window filtering, route distance, visit matching."""

from .distance import RouteSummary, accumulate_route
from .metrics import build_journey_metrics
from .timeline import EventKind, TimelineEvent, active_minutes, build_timeline, current_speed_kmh
from .visits import ClientIndex, PingTimeline, match_visits, verify_visit
from .window import filter_by_date_range, filter_expenses, filter_meetings, filter_pings

__all__ = [
    "RouteSummary",
    "accumulate_route",
    "build_journey_metrics",
    "EventKind",
    "TimelineEvent",
    "active_minutes",
    "build_timeline",
    "current_speed_kmh",
    "ClientIndex",
    "PingTimeline",
    "match_visits",
    "verify_visit",
    "filter_by_date_range",
    "filter_expenses",
    "filter_meetings",
    "filter_pings",
]
