"""Dashboard summaries derived from client and expense snapshots."""

from .distribution import region_distribution, unique_region_count
from .expenses import expense_distance_km, summarize_expenses
from .models import ExpenseSummary, RegionBucket, TrendBucket
from .trends import month_over_month_growth, monthly_client_trends

__all__ = [
    "region_distribution",
    "unique_region_count",
    "expense_distance_km",
    "summarize_expenses",
    "ExpenseSummary",
    "RegionBucket",
    "TrendBucket",
    "month_over_month_growth",
    "monthly_client_trends",
]
