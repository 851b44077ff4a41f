"""Cancellable periodic refresh of one agent's journey."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from ..config import POLL_INTERVAL_SECONDS
from ..journey.window import DateBound
from .journey_service import JourneyService, JourneySnapshot

SnapshotCallback = Callable[[JourneySnapshot], None]
ErrorCallback = Callable[[Exception], None]


class RefreshPoller:
    """Runs ``JourneyService.refresh`` every ``interval`` seconds on a thread.

    ``stop()`` sets an event the loop waits on, so teardown never leaves an
    orphaned cycle behind. Snapshots discarded as stale are not delivered.
    """

    def __init__(
        self,
        service: JourneyService,
        agent_id: str,
        start: DateBound = None,
        end: DateBound = None,
        *,
        interval: float = POLL_INTERVAL_SECONDS,
        on_snapshot: SnapshotCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._service = service
        self._agent_id = agent_id
        self._start = start
        self._end = end
        self._interval = interval
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None
        self._log = logging.getLogger(self.__class__.__name__)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        # one event per run, so a loop outliving a timed-out stop still exits
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run,
            args=(stop_event,),
            name=f"journey-poller-{self._agent_id}",
            daemon=True,
        )
        self._thread.start()
        self._log.info(
            "Polling agent=%s every %.1fs", self._agent_id, self._interval
        )

    def stop(self, timeout: float | None = None) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
        self._log.info("Stopped polling agent=%s", self._agent_id)

    def refresh_now(self) -> JourneySnapshot | None:
        """Manual refresh: bypasses the client cache and supersedes any cycle in flight."""

        return self._cycle(force_refresh=True)

    def _cycle(self, force_refresh: bool) -> JourneySnapshot | None:
        try:
            snapshot = self._service.refresh(
                self._agent_id, self._start, self._end, force_refresh=force_refresh
            )
        except Exception as exc:
            self._log.error(
                "Refresh failed for agent=%s: %s", self._agent_id, exc, exc_info=True
            )
            if self._on_error is not None:
                self._on_error(exc)
            return None
        if snapshot is not None and self._on_snapshot is not None:
            self._on_snapshot(snapshot)
        return snapshot

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            self._cycle(force_refresh=False)
            if stop_event.wait(self._interval):
                break


__all__ = ["RefreshPoller"]
