"""Monthly client-creation trends for the dashboard."""

from __future__ import annotations

import calendar
import logging
from typing import Dict, List, Sequence

from ..config import TREND_MONTHS
from ..models import ClientLocation
from .models import TrendBucket

LOGGER = logging.getLogger(__name__)


def _month_label(month_key: str) -> str:
    month = int(month_key.split("-")[1])
    return calendar.month_abbr[month]


def monthly_client_trends(
    clients: Sequence[ClientLocation], months: int = TREND_MONTHS
) -> List[TrendBucket]:
    """Bucket clients by creation month and keep the ``months`` most recent.

    Buckets are returned oldest first. Clients without a usable
    ``created_at`` are skipped.
    """

    if months <= 0:
        return []
    counts: Dict[str, List[int]] = {}
    skipped = 0
    for client in clients:
        if client.created_at is None:
            skipped += 1
            continue
        key = f"{client.created_at.year:04d}-{client.created_at.month:02d}"
        bucket = counts.setdefault(key, [0, 0, 0])
        bucket[0] += 1
        if (client.status or "").strip().lower() == "active":
            bucket[1] += 1
        if client.has_coordinates:
            bucket[2] += 1
    if skipped:
        LOGGER.debug("Skipped %d client(s) without a creation date", skipped)

    recent = sorted(counts)[-months:]
    return [
        TrendBucket(
            month=_month_label(key),
            month_key=key,
            clients=counts[key][0],
            active=counts[key][1],
            with_location=counts[key][2],
        )
        for key in recent
    ]


def month_over_month_growth(trends: Sequence[TrendBucket]) -> float:
    """Percent change of the last bucket over the one before it (0 if unknown)."""

    if len(trends) < 2 or trends[-2].clients <= 0:
        return 0.0
    last, prev = trends[-1].clients, trends[-2].clients
    return round((last - prev) / prev * 100.0, 1)


__all__ = ["monthly_client_trends", "month_over_month_growth"]
