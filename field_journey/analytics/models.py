"""Dataclasses for dashboard summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True, slots=True)
class TrendBucket:
    """Client counts for one creation month.

    ``month`` is the display label ("Jan"); ``month_key`` keeps the sortable
    ``YYYY-MM`` form.
    """

    month: str
    month_key: str
    clients: int
    active: int
    with_location: int


@dataclass(frozen=True, slots=True)
class RegionBucket:
    region_code: str
    count: int


@dataclass(frozen=True, slots=True)
class ExpenseSummary:
    count: int
    total_amount: float
    average_amount: int
    total_distance_km: float
    by_transport_mode: Dict[str, float] = field(default_factory=dict)
