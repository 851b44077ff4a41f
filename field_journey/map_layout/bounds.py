"""Viewport filtering for large geo-tagged collections."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence, TypeVar

import numpy as np

from ..models import LatLon

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Bounds:
    """Rectangular viewport in degrees.

    ``west > east`` describes a viewport crossing the antimeridian.
    """

    south: float
    west: float
    north: float
    east: float

    def __post_init__(self) -> None:
        if self.south > self.north:
            raise ValueError(
                f"south ({self.south}) must not exceed north ({self.north})"
            )

    @property
    def crosses_antimeridian(self) -> bool:
        return self.west > self.east

    def contains(self, coordinate: LatLon) -> bool:
        lat, lon = coordinate
        if not self.south <= lat <= self.north:
            return False
        if self.crosses_antimeridian:
            return lon >= self.west or lon <= self.east
        return self.west <= lon <= self.east

    @classmethod
    def around(cls, coordinates: Sequence[LatLon]) -> "Bounds":
        """Smallest viewport holding every coordinate (like a map ``fitBounds``)."""

        if not coordinates:
            raise ValueError("Cannot fit bounds around an empty coordinate list")
        lats = [lat for lat, _ in coordinates]
        lons = [lon for _, lon in coordinates]
        return cls(south=min(lats), west=min(lons), north=max(lats), east=max(lons))


def filter_within_bounds(
    items: Iterable[T],
    bounds: Bounds | None,
    key: Callable[[T], LatLon | None],
) -> List[T]:
    """Return items whose coordinate lies inside ``bounds`` (edges included).

    Items without a coordinate are dropped. With ``bounds=None`` (viewport
    not known yet) every located item is returned.
    """

    located = [(item, key(item)) for item in items]
    located = [(item, coord) for item, coord in located if coord is not None]
    if bounds is None or not located:
        return [item for item, _ in located]

    coords = np.asarray([coord for _, coord in located], dtype=float)
    lats, lons = coords[:, 0], coords[:, 1]
    mask = (lats >= bounds.south) & (lats <= bounds.north)
    if bounds.crosses_antimeridian:
        mask &= (lons >= bounds.west) | (lons <= bounds.east)
    else:
        mask &= (lons >= bounds.west) & (lons <= bounds.east)
    return [located[i][0] for i in np.flatnonzero(mask)]


__all__ = ["Bounds", "filter_within_bounds"]
