"""Field journey reconstruction and visit verification package."""

import logging

from .errors import DataUnavailableError, EmptyPingSet, EmptyPingSetError, InvalidCoordinateError
from .geo import distance_km
from .journey import accumulate_route, build_journey_metrics, match_visits
from .models import ClientLocation, ExpenseRecord, JourneyMetrics, Meeting, Ping, VisitRecord, VisitStatus


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logging for host scripts that have not done so."""

    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=level,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


__all__ = [
    "setup_logging",
    "DataUnavailableError",
    "EmptyPingSet",
    "EmptyPingSetError",
    "InvalidCoordinateError",
    "distance_km",
    "accumulate_route",
    "build_journey_metrics",
    "match_visits",
    "ClientLocation",
    "ExpenseRecord",
    "JourneyMetrics",
    "Meeting",
    "Ping",
    "VisitRecord",
    "VisitStatus",
]
