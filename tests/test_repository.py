"""Tests for the TTL-cached snapshot repository."""

from __future__ import annotations

import logging

import pytest

from conftest import make_client
from field_journey.errors import DataUnavailableError
from field_journey.repository import ClientRepository, SnapshotRepository


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class _Loader:
    def __init__(self, *results) -> None:
        self._results = list(results)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        result = self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def test_cached_within_ttl_and_reloaded_after() -> None:
    clock = _Clock()
    loader = _Loader([make_client("c1")], [make_client("c1"), make_client("c2")])
    repo = ClientRepository(loader, ttl_seconds=60, timer=clock)
    assert [c.id for c in repo.get()] == ["c1"]
    clock.now = 59
    assert [c.id for c in repo.get()] == ["c1"]
    assert loader.calls == 1
    clock.now = 61
    assert [c.id for c in repo.get()] == ["c1", "c2"]
    assert loader.calls == 2


def test_force_refresh_bypasses_cache() -> None:
    loader = _Loader([1], [2])
    repo = SnapshotRepository(loader, ttl_seconds=600, timer=_Clock())
    assert repo.get() == [1]
    assert repo.get(force_refresh=True) == [2]
    assert loader.calls == 2


def test_invalidate_forces_reload() -> None:
    loader = _Loader([1], [2])
    repo = SnapshotRepository(loader, ttl_seconds=600, timer=_Clock())
    repo.get()
    repo.invalidate()
    assert repo.get() == [2]


def test_zero_ttl_never_caches() -> None:
    loader = _Loader([1], [2])
    repo = SnapshotRepository(loader, ttl_seconds=0)
    assert repo.get() == [1]
    assert repo.get() == [2]


def test_failed_reload_serves_stale_copy(caplog: pytest.LogCaptureFixture) -> None:
    loader = _Loader([make_client("c1")], RuntimeError("backend down"))
    repo = ClientRepository(loader, ttl_seconds=600, timer=_Clock())
    fresh = repo.fetch()
    assert fresh.stale is False
    with caplog.at_level(logging.WARNING, logger="ClientRepository"):
        stale = repo.fetch(force_refresh=True)
    assert stale.stale is True
    assert stale.items == fresh.items
    assert stale.fetched_at == fresh.fetched_at
    assert "backend down" in caplog.text


def test_failure_without_cache_raises() -> None:
    repo = ClientRepository(_Loader(RuntimeError("backend down")))
    with pytest.raises(DataUnavailableError):
        repo.get()
