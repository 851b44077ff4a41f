"""Cached access to large, rarely-changing collections (the client list).

Cache policy: the list is kept for ``ttl_seconds`` across poll cycles.
``get(force_refresh=True)`` (manual refresh) always reloads. When a reload
fails the last good list is served and flagged stale; with nothing cached
the failure surfaces as ``DataUnavailableError``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import RLock
from typing import Callable, Generic, List, Sequence, TypeVar

from cachetools import TTLCache

from .config import CLIENT_CACHE_TTL_SECONDS
from .errors import DataUnavailableError
from .models import ClientLocation

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_CACHE_KEY = "snapshot"


@dataclass(frozen=True, slots=True)
class CachedSnapshot(Generic[T]):
    items: tuple[T, ...]
    fetched_at: datetime
    stale: bool = False


class SnapshotRepository(Generic[T]):
    """Thread-safe single-entry TTL cache around a loader callable."""

    def __init__(
        self,
        loader: Callable[[], Sequence[T]],
        *,
        ttl_seconds: float = CLIENT_CACHE_TTL_SECONDS,
        timer: Callable[[], float] = time.monotonic,
        name: str = "collection",
    ) -> None:
        self._loader = loader
        self._ttl = ttl_seconds
        self._cache: TTLCache[str, CachedSnapshot[T]] | None = (
            TTLCache(maxsize=1, ttl=ttl_seconds, timer=timer) if ttl_seconds > 0 else None
        )
        self._last_good: CachedSnapshot[T] | None = None
        self._lock = RLock()
        self._name = name
        self._log = logging.getLogger(self.__class__.__name__)

    def fetch(self, force_refresh: bool = False) -> CachedSnapshot[T]:
        with self._lock:
            if not force_refresh and self._cache is not None:
                cached = self._cache.get(_CACHE_KEY)
                if cached is not None:
                    self._log.debug(
                        "Using cached %s (%d items)", self._name, len(cached.items)
                    )
                    return cached
            try:
                items = tuple(self._loader())
            except Exception as exc:
                if self._last_good is None:
                    raise DataUnavailableError(
                        f"Unable to load {self._name} and no cached copy exists"
                    ) from exc
                self._log.warning(
                    "Reload of %s failed (%s); serving %d cached items from %s",
                    self._name,
                    exc,
                    len(self._last_good.items),
                    self._last_good.fetched_at.isoformat(),
                )
                return CachedSnapshot(
                    items=self._last_good.items,
                    fetched_at=self._last_good.fetched_at,
                    stale=True,
                )
            snapshot = CachedSnapshot(items=items, fetched_at=datetime.now(timezone.utc))
            self._last_good = snapshot
            if self._cache is not None:
                self._cache[_CACHE_KEY] = snapshot
            self._log.info(
                "Loaded %d %s (force_refresh=%s)", len(items), self._name, force_refresh
            )
            return snapshot

    def get(self, force_refresh: bool = False) -> List[T]:
        return list(self.fetch(force_refresh).items)

    def invalidate(self) -> None:
        """Drop the cached entry; the next ``get`` reloads."""

        with self._lock:
            if self._cache is not None:
                self._cache.clear()


class ClientRepository(SnapshotRepository[ClientLocation]):
    def __init__(
        self,
        loader: Callable[[], Sequence[ClientLocation]],
        *,
        ttl_seconds: float = CLIENT_CACHE_TTL_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(loader, ttl_seconds=ttl_seconds, timer=timer, name="clients")


__all__ = ["CachedSnapshot", "SnapshotRepository", "ClientRepository"]
