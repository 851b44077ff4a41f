"""Travel expense totals.

Expenses are only aggregated, never matched against pings or meetings.
"""

from __future__ import annotations

import math
from typing import Dict, Sequence

from ..config import UNKNOWN_LABEL
from ..journey.window import DateBound, filter_expenses
from ..models import ExpenseRecord
from ..utils import round_half_up
from .models import ExpenseSummary


def _finite_or_zero(value: float | None) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return value


def expense_distance_km(expense: ExpenseRecord) -> float:
    """Claimed distance, falling back to the sum of the legs."""

    if expense.distance_km is not None and math.isfinite(expense.distance_km):
        return expense.distance_km
    return sum(_finite_or_zero(leg.distance_km) for leg in expense.legs)


def summarize_expenses(
    expenses: Sequence[ExpenseRecord],
    start: DateBound = None,
    end: DateBound = None,
) -> ExpenseSummary:
    """Totals over ``expenses``, optionally limited to a travel-date window.

    Missing or non-numeric amounts count as zero.
    """

    if start is not None or end is not None:
        expenses = filter_expenses(expenses, start, end)
    total_amount = 0.0
    total_distance = 0.0
    by_mode: Dict[str, float] = {}
    for expense in expenses:
        amount = _finite_or_zero(expense.amount_spent)
        total_amount += amount
        total_distance += expense_distance_km(expense)
        mode = (expense.transport_mode or "").strip() or UNKNOWN_LABEL
        by_mode[mode] = by_mode.get(mode, 0.0) + amount
    count = len(expenses)
    return ExpenseSummary(
        count=count,
        total_amount=round(total_amount, 2),
        average_amount=round_half_up(total_amount / count) if count else 0,
        total_distance_km=round(total_distance, 1),
        by_transport_mode=by_mode,
    )


__all__ = ["expense_distance_km", "summarize_expenses"]
