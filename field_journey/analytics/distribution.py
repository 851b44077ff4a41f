"""Client distribution across region codes."""

from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from ..config import DISTRIBUTION_TOP_N, UNKNOWN_LABEL
from ..models import ClientLocation
from .models import RegionBucket


def region_distribution(
    clients: Sequence[ClientLocation], top_n: int = DISTRIBUTION_TOP_N
) -> List[RegionBucket]:
    """Top ``top_n`` region codes by client count, largest first.

    Missing codes are counted under ``"Unknown"``. Equal counts keep the order
    in which the region was first seen.
    """

    counter: Counter[str] = Counter()
    for client in clients:
        code = (client.region_code or "").strip() or UNKNOWN_LABEL
        counter[code] += 1
    # Counter preserves insertion order and sorted() is stable
    ranked = sorted(counter.items(), key=lambda pair: -pair[1])
    return [RegionBucket(region_code=code, count=count) for code, count in ranked[: max(0, top_n)]]


def unique_region_count(clients: Sequence[ClientLocation]) -> int:
    """Number of distinct known region codes."""

    return len({c.region_code.strip() for c in clients if c.region_code and c.region_code.strip()})


__all__ = ["region_distribution", "unique_region_count"]
