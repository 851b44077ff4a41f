"""Distance and duration accumulation over a chronologically sorted ping run."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from ..geo import pairwise_distances_km
from ..models import LatLon, Ping
from ..utils import minutes_between


@dataclass(frozen=True, slots=True)
class RouteSummary:
    total_distance_km: float
    total_duration_minutes: int
    route_polyline: Tuple[LatLon, ...]


def accumulate_route(sorted_pings: Sequence[Ping]) -> RouteSummary:
    """Sum consecutive haversine distances over ``sorted_pings``.

    The input must already be in ascending timestamp order (one agent, one
    sequence). Distance is rounded to one decimal; duration is whole minutes
    between the first and last ping.
    """

    route = tuple(ping.coordinate for ping in sorted_pings)
    if len(sorted_pings) < 2:
        return RouteSummary(
            total_distance_km=0.0, total_duration_minutes=0, route_polyline=route
        )
    legs = pairwise_distances_km(
        [ping.latitude for ping in sorted_pings],
        [ping.longitude for ping in sorted_pings],
    )
    total = math.fsum(legs.tolist())
    duration = minutes_between(sorted_pings[0].timestamp, sorted_pings[-1].timestamp)
    return RouteSummary(
        total_distance_km=round(total, 1),
        total_duration_minutes=max(0, duration),
        route_polyline=route,
    )


__all__ = ["RouteSummary", "accumulate_route"]
