"""Journey metrics aggregation.

Pure transformation: given pings, meetings and clients it produces one
``JourneyMetrics`` summary. No I/O; the service layer feeds it snapshots.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..config import VERIFICATION_RADIUS_KM
from ..models import ClientLocation, JourneyMetrics, Meeting, Ping, VisitStatus
from .distance import accumulate_route
from .visits import match_visits
from .window import DateBound, filter_meetings, filter_pings

LOGGER = logging.getLogger(__name__)


def build_journey_metrics(
    pings: Sequence[Ping],
    meetings: Sequence[Meeting],
    clients: Sequence[ClientLocation],
    start: DateBound = None,
    end: DateBound = None,
    *,
    radius_km: float = VERIFICATION_RADIUS_KM,
) -> JourneyMetrics:
    """Reconstruct the journey for one agent over ``[start, end]``.

    With no pings and no meetings the zero-valued metrics are returned. With
    meetings but no pings ``EmptyPingSetError`` propagates to the caller.
    """

    sorted_pings = filter_pings(pings, start, end)
    window_meetings = filter_meetings(meetings, start, end)

    if not sorted_pings and not window_meetings:
        LOGGER.debug("No pings or meetings between %s and %s", start, end)
        return JourneyMetrics.empty()

    visits = match_visits(window_meetings, sorted_pings, clients, radius_km=radius_km)
    route = accumulate_route(sorted_pings)
    visited = sum(1 for v in visits if v.visit_status is VisitStatus.COMPLETED)
    metrics = JourneyMetrics(
        total_distance_km=route.total_distance_km,
        total_duration_minutes=route.total_duration_minutes,
        start_ping=sorted_pings[0],
        end_ping=sorted_pings[-1],
        visit_records=tuple(visits),
        visited_count=visited,
        planned_count=len(window_meetings),
        route_polyline=route.route_polyline,
    )
    LOGGER.info(
        "Journey %s -> %s: %.1f km over %d min, %d/%d visits completed (%d verified)",
        start,
        end,
        metrics.total_distance_km,
        metrics.total_duration_minutes,
        metrics.visited_count,
        metrics.planned_count,
        metrics.verified_count,
    )
    return metrics


__all__ = ["build_journey_metrics"]
