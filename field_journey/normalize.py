"""Ingestion adapter mapping backend wire records onto canonical models.

Every payload variant the backend has shipped (camelCase vs snake_case,
``receiptImages`` vs ``receiptUrls`` ...) is resolved here so the engine only
ever sees one field name per concept. Records that cannot be used are dropped
with a log line instead of failing the batch.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence, Tuple, TypeVar

from .geo import is_valid_coordinate
from .models import ClientLocation, ExpenseLeg, ExpenseRecord, Meeting, Ping
from .utils import coerce_float, parse_epoch_ms, parse_iso_datetime

LOGGER = logging.getLogger(__name__)

RawRecord = Mapping[str, Any]
T = TypeVar("T")

# canonical field -> accepted wire names, in priority order
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "latitude": ("latitude", "lat"),
    "longitude": ("longitude", "lng", "lon"),
    "timestamp": ("timestamp", "recorded_at", "recordedAt"),
    "accuracy": ("accuracy",),
    "battery": ("battery", "batteryLevel", "battery_level"),
    "region_code": ("pincode", "region_code", "regionCode"),
    "activity": ("activity",),
    "id": ("id", "_id"),
    "client_id": ("clientId", "client_id"),
    "client_name": ("clientName", "client_name"),
    "start_time": ("startTime", "start_time"),
    "end_time": ("endTime", "end_time"),
    "start_latitude": ("startLatitude", "start_latitude"),
    "start_longitude": ("startLongitude", "start_longitude"),
    "status": ("status",),
    "comments": ("comments", "comment"),
    "attachments": ("attachments", "attachmentUrls"),
    "name": ("name", "clientName"),
    "created_at": ("created_at", "createdAt"),
    "distance_km": ("distanceKm", "distance_km"),
    "amount_spent": ("amountSpent", "amount_spent"),
    "travel_date": ("travelDate", "travel_date"),
    "transport_mode": ("transportMode", "transport_mode"),
    "start_location": ("startLocation", "start_location", "from"),
    "end_location": ("endLocation", "end_location", "to"),
    "currency": ("currency",),
    "legs": ("legs",),
    "receipt_urls": ("receiptUrls", "receiptImages", "receipt_urls"),
}

# list envelope keys returned by the backend, per collection
ENVELOPE_KEYS: Dict[str, Tuple[str, ...]] = {
    "pings": ("logs", "locationLogs", "location_logs"),
    "meetings": ("meetings",),
    "clients": ("clients",),
    "expenses": ("expenses",),
    "users": ("users",),
}


def pick(raw: RawRecord, canonical: str) -> Any:
    """Return the first non-null value among the aliases of ``canonical``."""

    for name in FIELD_ALIASES.get(canonical, (canonical,)):
        value = raw.get(name)
        if value is not None:
            return value
    return None


def extract_records(payload: Any, collection: str) -> List[RawRecord]:
    """Pull the record list out of a response envelope.

    Accepts a bare list as well, since older endpoints return one.
    """

    if isinstance(payload, list):
        return [row for row in payload if isinstance(row, Mapping)]
    if not isinstance(payload, Mapping):
        return []
    for key in ENVELOPE_KEYS.get(collection, (collection,)):
        rows = payload.get(key)
        if isinstance(rows, list):
            return [row for row in rows if isinstance(row, Mapping)]
    return []


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _url_list(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(url).strip() for url in value if url and str(url).strip())


def _coordinate_pair(lat_raw: Any, lon_raw: Any) -> Tuple[float, float] | None:
    lat = coerce_float(lat_raw)
    lon = coerce_float(lon_raw)
    if lat is None or lon is None or not is_valid_coordinate(lat, lon):
        return None
    return lat, lon


def normalize_ping(raw: RawRecord) -> Ping | None:
    timestamp = parse_iso_datetime(pick(raw, "timestamp"))
    if timestamp is None:
        LOGGER.debug("Dropping ping with unparseable timestamp: %r", pick(raw, "timestamp"))
        return None
    coordinate = _coordinate_pair(pick(raw, "latitude"), pick(raw, "longitude"))
    if coordinate is None:
        LOGGER.debug(
            "Dropping ping at %s with invalid coordinate lat=%r lon=%r",
            timestamp,
            pick(raw, "latitude"),
            pick(raw, "longitude"),
        )
        return None
    return Ping(
        timestamp=timestamp,
        latitude=coordinate[0],
        longitude=coordinate[1],
        accuracy=coerce_float(pick(raw, "accuracy")),
        battery=coerce_float(pick(raw, "battery")),
        region_code=_text(pick(raw, "region_code")),
        activity=_text(pick(raw, "activity")),
    )


def normalize_meeting(raw: RawRecord) -> Meeting | None:
    meeting_id = _text(pick(raw, "id"))
    if meeting_id is None:
        LOGGER.debug("Dropping meeting without id: %r", raw)
        return None
    start = _coordinate_pair(pick(raw, "start_latitude"), pick(raw, "start_longitude"))
    return Meeting(
        id=meeting_id,
        client_id=_text(pick(raw, "client_id")),
        client_name=_text(pick(raw, "client_name")),
        start_time=parse_iso_datetime(pick(raw, "start_time")),
        end_time=parse_iso_datetime(pick(raw, "end_time")),
        start_latitude=start[0] if start else None,
        start_longitude=start[1] if start else None,
        status=_text(pick(raw, "status")),
        comments=_text(pick(raw, "comments")),
        attachments=_url_list(pick(raw, "attachments")),
    )


def normalize_client(raw: RawRecord) -> ClientLocation | None:
    client_id = _text(pick(raw, "id"))
    if client_id is None:
        LOGGER.debug("Dropping client without id: %r", raw)
        return None
    lat_raw, lon_raw = pick(raw, "latitude"), pick(raw, "longitude")
    coordinate = _coordinate_pair(lat_raw, lon_raw)
    if coordinate is None and (lat_raw is not None or lon_raw is not None):
        LOGGER.debug(
            "Client %s has unusable coordinates lat=%r lon=%r; verification disabled",
            client_id,
            lat_raw,
            lon_raw,
        )
    return ClientLocation(
        id=client_id,
        name=_text(pick(raw, "name")),
        latitude=coordinate[0] if coordinate else None,
        longitude=coordinate[1] if coordinate else None,
        status=_text(pick(raw, "status")),
        region_code=_text(pick(raw, "region_code")),
        created_at=parse_iso_datetime(pick(raw, "created_at")),
    )


def _normalize_leg(raw: Any) -> ExpenseLeg | None:
    if not isinstance(raw, Mapping):
        return None
    return ExpenseLeg(
        start_location=_text(pick(raw, "start_location")),
        end_location=_text(pick(raw, "end_location")),
        distance_km=coerce_float(pick(raw, "distance_km")),
        transport_mode=_text(pick(raw, "transport_mode") or raw.get("mode")),
    )


def normalize_expense(raw: RawRecord) -> ExpenseRecord:
    legs: List[ExpenseLeg] = []
    legs_raw = pick(raw, "legs")
    if isinstance(legs_raw, (list, tuple)):
        for item in legs_raw:
            leg = _normalize_leg(item)
            if leg is not None:
                legs.append(leg)
    travel_date = parse_epoch_ms(pick(raw, "travel_date"))
    if travel_date is None:
        travel_date = parse_iso_datetime(raw.get("createdAt") or raw.get("created_at"))
    return ExpenseRecord(
        id=_text(pick(raw, "id")),
        travel_date=travel_date,
        distance_km=coerce_float(pick(raw, "distance_km")),
        amount_spent=coerce_float(pick(raw, "amount_spent")),
        transport_mode=_text(pick(raw, "transport_mode")),
        start_location=_text(pick(raw, "start_location")),
        end_location=_text(pick(raw, "end_location")),
        currency=_text(pick(raw, "currency")),
        legs=tuple(legs),
        receipt_urls=_url_list(pick(raw, "receipt_urls")),
    )


def _normalize_all(
    records: Iterable[RawRecord],
    normalizer: Callable[[RawRecord], T | None],
    label: str,
) -> List[T]:
    out: List[T] = []
    dropped = 0
    for raw in records:
        item = normalizer(raw)
        if item is None:
            dropped += 1
            continue
        out.append(item)
    if dropped:
        LOGGER.warning("Dropped %d malformed %s record(s)", dropped, label)
    return out


def normalize_pings(records: Sequence[RawRecord]) -> List[Ping]:
    return _normalize_all(records, normalize_ping, "ping")


def normalize_meetings(records: Sequence[RawRecord]) -> List[Meeting]:
    return _normalize_all(records, normalize_meeting, "meeting")


def normalize_clients(records: Sequence[RawRecord]) -> List[ClientLocation]:
    return _normalize_all(records, normalize_client, "client")


def normalize_expenses(records: Sequence[RawRecord]) -> List[ExpenseRecord]:
    return _normalize_all(records, normalize_expense, "expense")


__all__ = [
    "FIELD_ALIASES",
    "extract_records",
    "pick",
    "normalize_ping",
    "normalize_meeting",
    "normalize_client",
    "normalize_expense",
    "normalize_pings",
    "normalize_meetings",
    "normalize_clients",
    "normalize_expenses",
]
