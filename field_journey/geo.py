"""Great-circle distance helpers.

Callers must pass finite coordinates; non-finite values are rejected at the
ingestion boundary (see ``normalize``) or through ``validate_coordinate``.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .config import EARTH_RADIUS_KM
from .errors import InvalidCoordinateError
from .models import LatLon

MetricArray = NDArray[np.float64]


def to_radians(degrees: float) -> float:
    return degrees * (math.pi / 180.0)


def distance_km(a: LatLon, b: LatLon) -> float:
    """Haversine distance in kilometres between two (lat, lon) points."""

    lat1, lon1 = a
    lat2, lon2 = b
    d_lat = to_radians(lat2 - lat1)
    d_lon = to_radians(lon2 - lon1)
    h = (
        math.sin(d_lat / 2.0) ** 2
        + math.cos(to_radians(lat1)) * math.cos(to_radians(lat2)) * math.sin(d_lon / 2.0) ** 2
    )
    # Rounding can push h a hair outside [0, 1] for antipodal/identical points.
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2.0 * math.atan2(math.sqrt(h), math.sqrt(1.0 - h))


def pairwise_distances_km(
    latitudes: Sequence[float], longitudes: Sequence[float]
) -> MetricArray:
    """Return haversine distances between consecutive points.

    The result has ``len(latitudes) - 1`` entries (empty for fewer than two
    points).
    """

    lats = np.radians(np.asarray(latitudes, dtype=float))
    lons = np.radians(np.asarray(longitudes, dtype=float))
    if lats.size < 2:
        return np.zeros(0, dtype=float)
    d_lat = np.diff(lats)
    d_lon = np.diff(lons)
    h = np.sin(d_lat / 2.0) ** 2 + np.cos(lats[:-1]) * np.cos(lats[1:]) * np.sin(d_lon / 2.0) ** 2
    h = np.clip(h, 0.0, 1.0)
    return EARTH_RADIUS_KM * 2.0 * np.arctan2(np.sqrt(h), np.sqrt(1.0 - h))


def is_valid_coordinate(latitude: object, longitude: object) -> bool:
    """True when both values are finite numbers within lat/lon ranges."""

    for value in (latitude, longitude):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if not math.isfinite(value):
            return False
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0  # type: ignore[operator]


def validate_coordinate(latitude: object, longitude: object) -> LatLon:
    """Return ``(lat, lon)`` as floats or raise ``InvalidCoordinateError``."""

    if not is_valid_coordinate(latitude, longitude):
        raise InvalidCoordinateError(
            f"Invalid coordinate lat={latitude!r} lon={longitude!r}"
        )
    return float(latitude), float(longitude)  # type: ignore[arg-type]


__all__ = [
    "to_radians",
    "distance_km",
    "pairwise_distances_km",
    "is_valid_coordinate",
    "validate_coordinate",
]
