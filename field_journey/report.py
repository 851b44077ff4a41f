"""Journey report tables.

Builds the visit table and summary block as pandas objects; writing them to
CSV/Excel is left to the caller.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import List, Sequence, Tuple

import pandas as pd

from .config import REPORT_COLUMN_ORDER, REPORT_TIME_FORMAT, UNKNOWN_LABEL
from .models import JourneyMetrics, VisitRecord

NOT_AVAILABLE = "N/A"


def _format_time(value: datetime | None, tz: tzinfo | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    if tz is not None:
        value = value.astimezone(tz)
    return value.strftime(REPORT_TIME_FORMAT)


def _visit_row(record: VisitRecord, tz: tzinfo | None) -> dict:
    duration = record.duration_minutes
    return {
        "Client Name": record.client_name or UNKNOWN_LABEL,
        "Check-In Time": _format_time(record.meeting.start_time, tz),
        "Check-Out Time": _format_time(record.meeting.end_time, tz),
        "Duration (mins)": duration if duration is not None else NOT_AVAILABLE,
        "Status": record.visit_status.value,
        "Location Verified": "Yes" if record.verified else "No",
    }


def build_visit_report(
    visit_records: Sequence[VisitRecord], tz: tzinfo | None = None
) -> pd.DataFrame:
    """One row per visit with the report columns in their fixed order."""

    rows = [_visit_row(record, tz) for record in visit_records]
    return pd.DataFrame(rows, columns=REPORT_COLUMN_ORDER)


def build_summary_rows(metrics: JourneyMetrics) -> List[Tuple[str, object]]:
    """Label/value pairs printed above the visit table."""

    return [
        ("Total Distance (KM)", metrics.total_distance_km),
        ("Total Duration (mins)", metrics.total_duration_minutes),
        ("Planned Clients", metrics.planned_count),
        ("Visited Clients", metrics.visited_count),
        ("Verified Visits", metrics.verified_count),
        ("Visit Rate", f"{metrics.visit_rate:.1f}%"),
    ]


__all__ = ["NOT_AVAILABLE", "build_visit_report", "build_summary_rows"]
