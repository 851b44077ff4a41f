"""Journey service (application layer).

Fetches the four source collections for an agent in parallel, waits for all
of them, and runs the pure engine over the joined snapshot. Every refresh is
tagged with a generation number; a refresh that finishes after a newer one
has started is discarded instead of overwriting newer state.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
import logging
import threading
from typing import Any, Callable, Dict, List, Tuple

from cachetools import LRUCache

from ..analytics import ExpenseSummary, summarize_expenses
from ..backend_client import BackendClient
from ..config import MAX_FETCH_WORKERS
from ..errors import DataUnavailableError
from ..journey import (
    TimelineEvent,
    active_minutes,
    build_journey_metrics,
    build_timeline,
    current_speed_kmh,
    filter_expenses,
    filter_meetings,
    filter_pings,
)
from ..journey.window import DateBound
from ..models import ClientLocation, JourneyMetrics
from ..normalize import (
    normalize_clients,
    normalize_expenses,
    normalize_meetings,
    normalize_pings,
)
from ..repository import ClientRepository

QueryKey = Tuple[str, str, str]


@dataclass(frozen=True, slots=True)
class JourneySnapshot:
    """Everything derived for one (agent, date range) refresh."""

    agent_id: str
    start: DateBound
    end: DateBound
    generation: int
    metrics: JourneyMetrics
    expenses: ExpenseSummary
    timeline: Tuple[TimelineEvent, ...]
    active_minutes: int
    current_speed_kmh: float
    clients: Tuple[ClientLocation, ...] = field(default_factory=tuple)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    degraded: bool = False
    clients_stale: bool = False


@dataclass(slots=True)
class JourneyServiceConfig:
    client: BackendClient | None = None
    client_repository: ClientRepository | None = None
    max_workers: int = MAX_FETCH_WORKERS
    logger: logging.Logger | None = None


class JourneyService:
    def __init__(self, config: JourneyServiceConfig | None = None):
        self.config = config or JourneyServiceConfig()
        self._client = self.config.client or BackendClient()
        self._clients = self.config.client_repository or ClientRepository(
            lambda: normalize_clients(self._client.fetch_clients())
        )
        if self.config.max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)
        self._lock = threading.Lock()
        self._generation = 0
        self._latest: JourneySnapshot | None = None
        self._last_good: LRUCache[QueryKey, JourneySnapshot] = LRUCache(maxsize=32)

    @property
    def latest(self) -> JourneySnapshot | None:
        """Most recent snapshot committed by a refresh that was still current."""

        with self._lock:
            return self._latest

    @property
    def client_repository(self) -> ClientRepository:
        return self._clients

    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _fetch_all(self, agent_id: str, force_refresh: bool) -> Dict[str, Any]:
        """Fetch pings, meetings, expenses and clients; raise on the first failure."""

        tasks: Dict[str, Callable[[], Any]] = {
            "pings": lambda: self._client.fetch_location_logs(agent_id),
            "meetings": lambda: self._client.fetch_meetings(agent_id),
            "expenses": lambda: self._client.fetch_expenses(agent_id),
            "clients": lambda: self._clients.fetch(force_refresh=force_refresh),
        }
        workers = min(self.config.max_workers, len(tasks))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures: Dict[str, Future] = {
                name: executor.submit(task) for name, task in tasks.items()
            }
        # executor exit joins every future; partial results are never used
        results: Dict[str, Any] = {}
        failures: List[Tuple[str, BaseException]] = []
        for name, future in futures.items():
            exc = future.exception()
            if exc is not None:
                failures.append((name, exc))
                continue
            results[name] = future.result()
        if failures:
            names = ", ".join(name for name, _ in failures)
            first = failures[0][1]
            raise DataUnavailableError(
                f"Fetch failed for agent {agent_id}: {names} ({first})"
            ) from first
        return results

    def compute(
        self,
        agent_id: str,
        start: DateBound,
        end: DateBound,
        generation: int,
        raw: Dict[str, Any],
    ) -> JourneySnapshot:
        """Run the engine over one joined fetch result."""

        pings = filter_pings(normalize_pings(raw["pings"]), start, end)
        meetings = filter_meetings(normalize_meetings(raw["meetings"]), start, end)
        expenses = filter_expenses(normalize_expenses(raw["expenses"]), start, end)
        client_snapshot = raw["clients"]
        clients = list(client_snapshot.items)

        metrics = build_journey_metrics(pings, meetings, clients)
        timeline = build_timeline(pings, meetings, expenses)
        return JourneySnapshot(
            agent_id=agent_id,
            start=start,
            end=end,
            generation=generation,
            metrics=metrics,
            expenses=summarize_expenses(expenses),
            timeline=tuple(timeline),
            active_minutes=active_minutes(timeline),
            current_speed_kmh=current_speed_kmh(timeline),
            clients=tuple(clients),
            clients_stale=client_snapshot.stale,
        )

    def refresh(
        self,
        agent_id: str,
        start: DateBound = None,
        end: DateBound = None,
        *,
        force_refresh: bool = False,
    ) -> JourneySnapshot | None:
        """Refresh the journey for ``agent_id``.

        Returns ``None`` when a newer refresh started while this one was in
        flight. On fetch failure the last good snapshot for the same query is
        returned with ``degraded=True``; without one ``DataUnavailableError``
        is raised. ``EmptyPingSetError`` from the engine propagates.
        """

        generation = self._next_generation()
        key: QueryKey = (str(agent_id), str(start), str(end))
        self._log.debug(
            "Refresh generation=%d agent=%s range=%s -> %s force=%s",
            generation,
            agent_id,
            start,
            end,
            force_refresh,
        )
        try:
            raw = self._fetch_all(agent_id, force_refresh)
        except DataUnavailableError as exc:
            with self._lock:
                previous = self._last_good.get(key)
            if previous is None:
                self._log.error("No cached journey for agent=%s: %s", agent_id, exc)
                raise
            self._log.warning(
                "Serving cached journey for agent=%s from %s: %s",
                agent_id,
                previous.fetched_at.isoformat(),
                exc,
            )
            snapshot = replace(previous, generation=generation, degraded=True)
            return snapshot if self._commit(snapshot, key, remember=False) else None

        if not self.is_current(generation):
            self._log.info(
                "Discarding stale fetch generation=%d for agent=%s", generation, agent_id
            )
            return None
        snapshot = self.compute(agent_id, start, end, generation, raw)
        return snapshot if self._commit(snapshot, key, remember=True) else None

    def _commit(self, snapshot: JourneySnapshot, key: QueryKey, *, remember: bool) -> bool:
        with self._lock:
            if snapshot.generation != self._generation:
                self._log.info(
                    "Discarding stale snapshot generation=%d (latest=%d)",
                    snapshot.generation,
                    self._generation,
                )
                return False
            self._latest = snapshot
            if remember:
                self._last_good[key] = snapshot
            return True


__all__ = ["JourneySnapshot", "JourneyService", "JourneyServiceConfig"]
