"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable factories for pings,
meetings, clients and expenses so engine tests stay short.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from field_journey.models import ClientLocation, ExpenseRecord, Meeting, Ping


BASE_TIME = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


# --- Factory helpers -------------------------------------------------
def at(minutes: float) -> datetime:
    return BASE_TIME + timedelta(minutes=minutes)


def make_ping(minutes, lat, lon, **kwargs):
    return Ping(timestamp=at(minutes), latitude=lat, longitude=lon, **kwargs)


def make_meeting(meeting_id="m1", minutes=0, end_minutes=None, client_id="c1", client_name="Acme", **kwargs):
    return Meeting(
        id=meeting_id,
        client_id=client_id,
        client_name=client_name,
        start_time=at(minutes),
        end_time=at(end_minutes) if end_minutes is not None else None,
        **kwargs,
    )


def make_client(client_id="c1", name="Acme", lat=None, lon=None, **kwargs):
    return ClientLocation(id=client_id, name=name, latitude=lat, longitude=lon, **kwargs)


def make_expense(amount, distance, minutes=0, mode="bike", **kwargs):
    return ExpenseRecord(
        id=kwargs.pop("id", None),
        travel_date=at(minutes),
        distance_km=distance,
        amount_spent=amount,
        transport_mode=mode,
        **kwargs,
    )


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def two_ping_route():
    return [make_ping(0, 0.0, 0.0), make_ping(10, 0.0, 0.01)]


@pytest.fixture
def raw_backend_payloads():
    """Wire records as the admin backend returns them (mixed aliases)."""

    return {
        "pings": [
            {"latitude": 12.9716, "longitude": 77.5946, "timestamp": "2025-03-10T09:00:00Z", "battery": 80, "pincode": "560001"},
            {"latitude": "12.9720", "longitude": "77.5950", "timestamp": "2025-03-10T09:30:00Z"},
            {"latitude": 12.98, "longitude": 77.60, "timestamp": "2025-03-10T10:15:00Z", "activity": "walking"},
            {"latitude": 12.98, "longitude": 77.60, "timestamp": "not-a-date"},
        ],
        "meetings": [
            {
                "id": 1,
                "clientId": 7,
                "clientName": "Acme Stores",
                "startTime": "2025-03-10T09:28:00Z",
                "endTime": "2025-03-10T09:58:00Z",
                "startLatitude": "12.9720",
                "startLongitude": "77.5950",
                "status": "COMPLETED",
            },
            {
                "id": 2,
                "clientId": 99,
                "clientName": "Beta Traders",
                "startTime": "2025-03-10T10:10:00Z",
                "endTime": None,
                "status": "IN_PROGRESS",
            },
        ],
        "clients": [
            {"id": 7, "name": "Acme Stores", "latitude": 12.9721, "longitude": 77.5951, "status": "active", "pincode": "560001", "created_at": "2025-01-05T00:00:00Z"},
            {"id": 8, "name": "Beta Traders", "latitude": None, "longitude": None, "status": "inactive", "created_at": "2025-02-01T00:00:00Z"},
        ],
        "expenses": [
            {"id": "e1", "distanceKm": 12.5, "amountSpent": 150, "travelDate": 1741597200000, "transportMode": "bike"},
            {"id": "e2", "distance_km": "3.5", "amount_spent": "45", "travelDate": "1741600800000", "transportMode": "auto", "receiptUrls": ["https://x/r.jpg", ""]},
        ],
    }
