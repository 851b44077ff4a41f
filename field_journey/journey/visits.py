"""Meeting-to-ping matching and location verification."""

from __future__ import annotations

import logging
from bisect import bisect_left
from datetime import datetime
from typing import Dict, List, Sequence

from ..config import VERIFICATION_RADIUS_KM
from ..errors import EmptyPingSetError
from ..geo import distance_km
from ..models import ClientLocation, Meeting, Ping, VisitRecord, VisitStatus
from ..utils import to_utc_aware

LOGGER = logging.getLogger(__name__)


class ClientIndex:
    """Lookup of clients by id with a fallback on exact name.

    When several clients share an id or a name, the first one wins.
    """

    def __init__(self, clients: Sequence[ClientLocation]) -> None:
        self._by_id: Dict[str, ClientLocation] = {}
        self._by_name: Dict[str, ClientLocation] = {}
        for client in clients:
            self._by_id.setdefault(client.id, client)
            if client.name:
                self._by_name.setdefault(client.name, client)

    def resolve(self, meeting: Meeting) -> ClientLocation | None:
        if meeting.client_id is not None:
            client = self._by_id.get(meeting.client_id)
            if client is not None:
                return client
        if meeting.client_name:
            return self._by_name.get(meeting.client_name)
        return None


class PingTimeline:
    """Sorted pings with nearest-in-time lookup."""

    def __init__(self, sorted_pings: Sequence[Ping]) -> None:
        self._pings = list(sorted_pings)
        # naive timestamps are taken as UTC so mixed inputs stay comparable
        self._times = [to_utc_aware(ping.timestamp) for ping in self._pings]

    def __len__(self) -> int:
        return len(self._pings)

    def closest(self, moment: datetime) -> Ping:
        """Return the ping closest to ``moment``; ties go to the earlier ping."""

        if not self._pings:
            raise EmptyPingSetError("No pings available to match against")
        moment = to_utc_aware(moment)
        idx = bisect_left(self._times, moment)
        if idx == 0:
            return self._pings[0]
        if idx == len(self._times):
            return self._pings[self._first_at(idx - 1)]
        before = self._first_at(idx - 1)
        before_delta = moment - self._times[before]
        after_delta = self._times[idx] - moment
        if before_delta <= after_delta:
            return self._pings[before]
        return self._pings[idx]

    def _first_at(self, idx: int) -> int:
        # earliest index sharing the timestamp at ``idx``
        return bisect_left(self._times, self._times[idx])


def verify_visit(
    meeting: Meeting,
    closest_ping: Ping,
    client: ClientLocation | None,
    radius_km: float = VERIFICATION_RADIUS_KM,
) -> VisitRecord:
    distance: float | None = None
    if client is not None and client.coordinate is not None:
        distance = distance_km(closest_ping.coordinate, client.coordinate)
    status = VisitStatus.COMPLETED if meeting.end_time else VisitStatus.IN_PROGRESS
    return VisitRecord(
        meeting=meeting,
        matched_client=client,
        closest_ping=closest_ping,
        visit_status=status,
        distance_to_client_km=distance,
        verified=distance is not None and distance < radius_km,
    )


def match_visits(
    meetings: Sequence[Meeting],
    sorted_pings: Sequence[Ping],
    clients: Sequence[ClientLocation],
    *,
    radius_km: float = VERIFICATION_RADIUS_KM,
) -> List[VisitRecord]:
    """Pair every meeting with its nearest ping and verify it against the client.

    Raises:
        EmptyPingSetError: dated meetings are present but ``sorted_pings`` is empty.
    """

    dated: List[Meeting] = []
    for meeting in meetings:
        if meeting.start_time is None:
            LOGGER.warning("Skipping meeting %s without a start time", meeting.id)
            continue
        dated.append(meeting)
    if not dated:
        return []
    if not sorted_pings:
        raise EmptyPingSetError(
            f"Cannot match {len(dated)} meeting(s) without any pings"
        )
    timeline = PingTimeline(sorted_pings)
    index = ClientIndex(clients)
    records: List[VisitRecord] = []
    for meeting in dated:
        client = index.resolve(meeting)
        if client is None:
            LOGGER.debug(
                "No client found for meeting %s (client_id=%s name=%s)",
                meeting.id,
                meeting.client_id,
                meeting.client_name,
            )
        records.append(
            verify_visit(meeting, timeline.closest(meeting.start_time), client, radius_km)
        )
    return records


__all__ = ["ClientIndex", "PingTimeline", "verify_visit", "match_visits"]
