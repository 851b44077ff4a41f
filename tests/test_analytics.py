"""Tests for dashboard trends, region distribution and expense totals."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from conftest import make_client, make_expense
from field_journey.analytics import (
    expense_distance_km,
    month_over_month_growth,
    monthly_client_trends,
    region_distribution,
    summarize_expenses,
    unique_region_count,
)
from field_journey.models import ExpenseLeg


def _created(year, month):
    return datetime(year, month, 15, tzinfo=timezone.utc)


def test_trends_empty() -> None:
    assert monthly_client_trends([]) == []


def test_trends_keep_six_most_recent_months_ascending() -> None:
    clients = []
    for i, (year, month) in enumerate(
        [(2024, 11), (2024, 12), (2025, 1), (2025, 2), (2025, 3), (2025, 4), (2025, 5), (2025, 5)]
    ):
        clients.append(
            make_client(
                f"c{i}",
                lat=1.0 if i % 2 else None,
                lon=1.0 if i % 2 else None,
                status="Active" if i % 3 == 0 else "inactive",
                created_at=_created(year, month),
            )
        )
    clients.append(make_client("undated"))
    trends = monthly_client_trends(clients)
    assert len(trends) == 6
    assert [t.month_key for t in trends] == ["2024-12", "2025-01", "2025-02", "2025-03", "2025-04", "2025-05"]
    assert [t.month for t in trends] == ["Dec", "Jan", "Feb", "Mar", "Apr", "May"]
    may = trends[-1]
    assert may.clients == 2
    assert may.active == 1
    assert may.with_location == 1


def test_month_over_month_growth() -> None:
    clients = [make_client(f"a{i}", created_at=_created(2025, 1)) for i in range(4)]
    clients += [make_client(f"b{i}", created_at=_created(2025, 2)) for i in range(5)]
    trends = monthly_client_trends(clients)
    assert month_over_month_growth(trends) == pytest.approx(25.0)
    assert month_over_month_growth(trends[:1]) == 0.0


def test_distribution_top_five_descending_with_unknown() -> None:
    codes = ["A"] * 3 + ["B"] * 6 + [None] * 4 + ["C"] + ["D"] * 2 + ["E"] * 5 + ["F"] + ["  "]
    clients = [make_client(f"c{i}", region_code=code) for i, code in enumerate(codes)]
    buckets = region_distribution(clients)
    assert [(b.region_code, b.count) for b in buckets] == [
        ("B", 6),
        ("Unknown", 5),
        ("E", 5),
        ("A", 3),
        ("D", 2),
    ]
    assert unique_region_count(clients) == 6


def test_distribution_ties_keep_first_seen_order() -> None:
    clients = [make_client(f"c{i}", region_code=code) for i, code in enumerate(["X", "Y", "Y", "X", "Z"])]
    assert [b.region_code for b in region_distribution(clients)] == ["X", "Y", "Z"]
    assert region_distribution([]) == []


def test_expense_summary_totals() -> None:
    expenses = [
        make_expense(150, 12.5, mode="bike"),
        make_expense(45, 3.5, mode="auto"),
        make_expense(None, None, mode=None, legs=(ExpenseLeg(distance_km=2.0), ExpenseLeg(distance_km=1.5))),
        make_expense(10, 1.0, minutes=60 * 24 * 2, mode="bike"),
    ]
    summary = summarize_expenses(expenses, "2025-03-10", "2025-03-10")
    assert summary.count == 3
    assert summary.total_amount == pytest.approx(195.0)
    assert summary.average_amount == 65
    assert summary.total_distance_km == pytest.approx(19.5)
    assert summary.by_transport_mode == {"bike": 150.0, "auto": 45.0, "Unknown": 0.0}


def test_expense_summary_empty_and_unfiltered() -> None:
    empty = summarize_expenses([])
    assert (empty.count, empty.total_amount, empty.average_amount, empty.total_distance_km) == (0, 0.0, 0, 0.0)
    summary = summarize_expenses([make_expense(1, 1.0), make_expense(2, 1.0, minutes=60 * 24 * 30)])
    assert summary.count == 2
    assert summary.average_amount == 2


def test_expense_distance_prefers_claimed_value() -> None:
    expense = make_expense(0, 4.0, legs=(ExpenseLeg(distance_km=9.0),))
    assert expense_distance_km(expense) == 4.0
