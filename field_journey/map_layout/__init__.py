"""Map-ready layouts: marker declustering and viewport filtering."""

from .bounds import Bounds, filter_within_bounds
from .decluster import MarkerGroup, PlacedMarker, coordinate_key, decluster, offset_position

__all__ = [
    "Bounds",
    "filter_within_bounds",
    "MarkerGroup",
    "PlacedMarker",
    "coordinate_key",
    "decluster",
    "offset_position",
]
