"""
Branch Access Core - Session Cleanup Scheduler
================================================
Periodic expiry sweep, owned and started by the host.

tick(now) is the deterministic entry point: tests call it with explicit
times. start()/stop() run the same tick on a background thread for
long-lived processes.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Optional

from branch_access.sessions.registry import SessionRegistry
from branch_access.time.clock import Clock, SystemClock

logger = logging.getLogger("branch_access.sessions")

DEFAULT_CLEANUP_INTERVAL_SECONDS = 5 * 60


class CleanupScheduler:
    def __init__(
        self,
        registry: SessionRegistry,
        clock: Optional[Clock] = None,
        interval_seconds: float = DEFAULT_CLEANUP_INTERVAL_SECONDS,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive.")
        self._registry = registry
        self._clock = clock or SystemClock()
        self._interval = timedelta(seconds=interval_seconds)
        self._last_run: Optional[datetime] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def last_run(self) -> Optional[datetime]:
        return self._last_run

    def is_due(self, now: datetime) -> bool:
        return self._last_run is None or now - self._last_run >= self._interval

    def tick(self, now: datetime) -> int:
        """Run cleanup if an interval has passed since the last run."""
        if not self.is_due(now):
            return 0
        self._last_run = now
        return self._registry.cleanup_expired_sessions(now)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="branch-session-cleanup",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval.total_seconds()):
            try:
                self.tick(self._clock.now_utc())
            except Exception:
                logger.exception("Session cleanup tick failed")
