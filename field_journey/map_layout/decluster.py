"""Spread co-located map markers into a ring around their shared coordinate.

The offset is applied straight to latitude/longitude degrees, which is only
a planar approximation. It is meant for high zoom levels where the ring is a
few metres wide; it is not geodesically exact.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterable, List, Tuple, TypeVar

from ..config import (
    COORDINATE_KEY_PRECISION,
    DECLUSTER_BASE_RADIUS_DEG,
    DECLUSTER_LARGE_GROUP_SIZE,
)
from ..models import LatLon

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PlacedMarker(Generic[T]):
    item: T
    original: LatLon
    position: LatLon


@dataclass(frozen=True, slots=True)
class MarkerGroup(Generic[T]):
    coordinate_key: str
    centroid: LatLon
    members: Tuple[PlacedMarker[T], ...]

    @property
    def size(self) -> int:
        return len(self.members)


def coordinate_key(coordinate: LatLon, precision: int = COORDINATE_KEY_PRECISION) -> str:
    lat, lon = coordinate
    # "+ 0.0" folds -0.0 into 0.0 so both land in the same bucket
    return f"{lat + 0.0:.{precision}f}_{lon + 0.0:.{precision}f}"


def offset_position(
    centroid: LatLon,
    index: int,
    total: int,
    base_radius: float = DECLUSTER_BASE_RADIUS_DEG,
) -> LatLon:
    """Position of member ``index`` out of ``total`` sharing ``centroid``."""

    if total <= 1:
        return centroid
    radius = base_radius * (2 if total > DECLUSTER_LARGE_GROUP_SIZE else 1)
    angle = 2.0 * math.pi * index / total
    lat, lon = centroid
    return (lat + radius * math.cos(angle), lon + radius * math.sin(angle))


def group_by_coordinate(
    items: Iterable[T],
    key: Callable[[T], LatLon | None],
    precision: int = COORDINATE_KEY_PRECISION,
) -> Dict[str, List[Tuple[T, LatLon]]]:
    """Bucket items by rounded coordinate; items without one are skipped."""

    groups: Dict[str, List[Tuple[T, LatLon]]] = {}
    for item in items:
        coordinate = key(item)
        if coordinate is None:
            continue
        groups.setdefault(coordinate_key(coordinate, precision), []).append(
            (item, coordinate)
        )
    return groups


def decluster(
    items: Iterable[T],
    key: Callable[[T], LatLon | None],
    *,
    base_radius: float = DECLUSTER_BASE_RADIUS_DEG,
    precision: int = COORDINATE_KEY_PRECISION,
) -> List[MarkerGroup[T]]:
    """Group co-located items and give each member a display position.

    Groups come back in first-seen order. The centroid of a group is the
    coordinate of its first member; a lone member keeps its own coordinate.
    """

    if base_radius < 0:
        raise ValueError("base_radius must be non-negative")
    result: List[MarkerGroup[T]] = []
    for group_key, members in group_by_coordinate(items, key, precision).items():
        centroid = members[0][1]
        total = len(members)
        placed = tuple(
            PlacedMarker(
                item=item,
                original=original,
                position=original
                if total == 1
                else offset_position(centroid, index, total, base_radius),
            )
            for index, (item, original) in enumerate(members)
        )
        result.append(MarkerGroup(coordinate_key=group_key, centroid=centroid, members=placed))
    return result


__all__ = [
    "PlacedMarker",
    "MarkerGroup",
    "coordinate_key",
    "offset_position",
    "group_by_coordinate",
    "decluster",
]
