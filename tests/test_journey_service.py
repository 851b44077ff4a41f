"""Tests for JourneyService fetch/join, degraded mode and generation tagging."""

from __future__ import annotations

import copy
import logging
import threading
import time
from typing import Any

import pytest

from field_journey.errors import BackendAPIError, DataUnavailableError, EmptyPingSetError
from field_journey.services import JourneyService, JourneyServiceConfig, RefreshPoller


class FakeBackend:
    """Duck-typed stand-in for BackendClient serving canned wire records."""

    def __init__(self, payloads: dict[str, Any]) -> None:
        self.payloads = copy.deepcopy(payloads)
        self.failing: set[str] = set()
        self.calls: list[str] = []
        self.block_next_pings: threading.Event | None = None
        self.entered = threading.Event()
        self._lock = threading.Lock()

    def _serve(self, name: str) -> Any:
        with self._lock:
            self.calls.append(name)
        if name in self.failing:
            raise BackendAPIError(f"{name} unavailable")
        return copy.deepcopy(self.payloads[name])

    def fetch_location_logs(self, agent_id: str) -> Any:
        gate, self.block_next_pings = self.block_next_pings, None
        if gate is not None:
            self.entered.set()
            gate.wait(timeout=5)
        return self._serve("pings")

    def fetch_meetings(self, agent_id: str) -> Any:
        return self._serve("meetings")

    def fetch_expenses(self, agent_id: str) -> Any:
        return self._serve("expenses")

    def fetch_clients(self) -> Any:
        return self._serve("clients")


@pytest.fixture
def backend(raw_backend_payloads) -> FakeBackend:
    return FakeBackend(raw_backend_payloads)


@pytest.fixture
def service(backend) -> JourneyService:
    return JourneyService(JourneyServiceConfig(client=backend))


def test_refresh_builds_full_snapshot(service: JourneyService) -> None:
    snapshot = service.refresh("agent-1", "2025-03-10", "2025-03-10")
    assert snapshot is not None
    assert snapshot is service.latest
    assert snapshot.generation == 1
    assert snapshot.degraded is False
    assert snapshot.metrics.planned_count == 2
    assert snapshot.metrics.visited_count == 1
    assert snapshot.metrics.verified_count == 1
    assert snapshot.expenses.count == 2
    assert snapshot.expenses.total_amount == pytest.approx(195.0)
    assert snapshot.active_minutes == 75
    assert snapshot.current_speed_kmh > 0
    assert len(snapshot.clients) == 2
    assert snapshot.timeline[0].timestamp >= snapshot.timeline[-1].timestamp


def test_clients_are_cached_between_refreshes(service: JourneyService, backend: FakeBackend) -> None:
    service.refresh("agent-1")
    service.refresh("agent-1")
    assert backend.calls.count("clients") == 1
    assert backend.calls.count("pings") == 2
    service.refresh("agent-1", force_refresh=True)
    assert backend.calls.count("clients") == 2


def test_failed_fetch_without_cache_raises(service: JourneyService, backend: FakeBackend) -> None:
    backend.failing.add("meetings")
    with pytest.raises(DataUnavailableError):
        service.refresh("agent-1")
    assert service.latest is None


def test_failed_fetch_serves_degraded_snapshot(
    service: JourneyService, backend: FakeBackend, caplog: pytest.LogCaptureFixture
) -> None:
    good = service.refresh("agent-1", "2025-03-10", "2025-03-10")
    backend.failing.add("pings")
    with caplog.at_level(logging.WARNING, logger="JourneyService"):
        degraded = service.refresh("agent-1", "2025-03-10", "2025-03-10")
    assert degraded is not None
    assert degraded.degraded is True
    assert degraded.generation == good.generation + 1
    assert degraded.metrics == good.metrics
    assert service.latest is degraded
    assert "serving cached journey" in caplog.text.lower()


def test_degraded_cache_is_per_query(service: JourneyService, backend: FakeBackend) -> None:
    service.refresh("agent-1", "2025-03-10", "2025-03-10")
    backend.failing.add("expenses")
    with pytest.raises(DataUnavailableError):
        service.refresh("agent-1", "2025-03-11", "2025-03-11")


def test_stale_client_list_is_flagged(service: JourneyService, backend: FakeBackend) -> None:
    service.refresh("agent-1")
    backend.failing.add("clients")
    snapshot = service.refresh("agent-1", force_refresh=True)
    assert snapshot is not None
    assert snapshot.clients_stale is True
    assert snapshot.degraded is False
    assert len(snapshot.clients) == 2


def test_meetings_without_pings_propagate(service: JourneyService, backend: FakeBackend) -> None:
    backend.payloads["pings"] = []
    with pytest.raises(EmptyPingSetError):
        service.refresh("agent-1")


def test_superseded_refresh_is_discarded(service: JourneyService, backend: FakeBackend) -> None:
    gate = threading.Event()
    backend.block_next_pings = gate
    results: dict[str, Any] = {}

    def slow_refresh() -> None:
        results["slow"] = service.refresh("agent-1", "2025-03-10", "2025-03-10")

    worker = threading.Thread(target=slow_refresh)
    worker.start()
    assert backend.entered.wait(timeout=5)

    fast = service.refresh("agent-1", "2025-03-10", "2025-03-10")
    gate.set()
    worker.join(timeout=5)

    assert fast is not None and fast.generation == 2
    assert results["slow"] is None
    assert service.latest is fast
    assert service.is_current(2)
    assert not service.is_current(1)


def test_invalid_worker_count() -> None:
    with pytest.raises(ValueError):
        JourneyService(JourneyServiceConfig(client=object(), max_workers=0))


class StubService:
    def __init__(self, fail: bool = False) -> None:
        self.calls: list[tuple] = []
        self.fail = fail
        self.called = threading.Event()

    def refresh(self, agent_id, start, end, *, force_refresh=False):
        self.calls.append((agent_id, start, end, force_refresh))
        self.called.set()
        if self.fail:
            raise DataUnavailableError("offline")
        return f"snapshot-{len(self.calls)}"


def test_poller_runs_until_stopped() -> None:
    stub = StubService()
    delivered: list[Any] = []
    poller = RefreshPoller(stub, "agent-1", "2025-03-10", "2025-03-10", interval=0.01, on_snapshot=delivered.append)
    poller.start()
    assert stub.called.wait(timeout=5)
    poller.stop(timeout=5)
    assert not poller.running
    count = len(stub.calls)
    assert count >= 1
    assert delivered[0] == "snapshot-1"
    assert all(call[3] is False for call in stub.calls)
    # no further cycles once stopped
    threading.Event().wait(0.05)
    assert len(stub.calls) == count


def test_poller_manual_refresh_forces_reload() -> None:
    stub = StubService()
    poller = RefreshPoller(stub, "agent-1", interval=60)
    assert poller.refresh_now() == "snapshot-1"
    assert stub.calls == [("agent-1", None, None, True)]


def test_poller_reports_errors() -> None:
    stub = StubService(fail=True)
    errors: list[Exception] = []
    poller = RefreshPoller(stub, "agent-1", interval=60, on_error=errors.append)
    assert poller.refresh_now() is None
    assert isinstance(errors[0], DataUnavailableError)


def test_poller_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        RefreshPoller(StubService(), "agent-1", interval=0)


class SlowStubService:
    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.threads: list[threading.Thread] = []
        self.called = threading.Event()

    def refresh(self, agent_id, start, end, *, force_refresh=False):
        self.threads.append(threading.current_thread())
        self.called.set()
        time.sleep(self.delay)
        return None


def test_restart_after_timed_out_stop_keeps_single_loop() -> None:
    stub = SlowStubService(delay=0.3)
    poller = RefreshPoller(stub, "agent-1", interval=0.02)
    poller.start()
    assert stub.called.wait(timeout=5)
    first = stub.threads[0]

    # first loop is still inside its refresh when the restart happens
    poller.stop(timeout=0.01)
    poller.start()
    time.sleep(1.2)
    poller.stop(timeout=2)
    first.join(timeout=2)

    assert not first.is_alive()
    assert stub.threads.count(first) == 1
    later = [t for t in stub.threads if t is not first]
    assert len(later) >= 2
    assert len({id(t) for t in later}) == 1
