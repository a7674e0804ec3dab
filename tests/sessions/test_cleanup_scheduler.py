"""
Tests - Session Cleanup Scheduler
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from branch_access.config.settings import BranchSecurityConfig
from branch_access.sessions.registry import SessionRegistry
from branch_access.sessions.scheduler import CleanupScheduler
from branch_access.time.clock import FixedClock

T0 = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def _setup(interval_seconds: float = 300):
    clock = FixedClock(T0)
    registry = SessionRegistry(
        BranchSecurityConfig(session_timeout_minutes=10), clock=clock
    )
    scheduler = CleanupScheduler(registry, clock=clock, interval_seconds=interval_seconds)
    return registry, scheduler, clock


class TestCleanupScheduler:
    def test_rejects_non_positive_interval(self):
        registry = SessionRegistry(clock=FixedClock(T0))
        with pytest.raises(ValueError):
            CleanupScheduler(registry, interval_seconds=0)

    def test_first_tick_always_runs(self):
        registry, scheduler, _ = _setup()
        assert scheduler.is_due(T0) is True
        assert scheduler.tick(T0) == 0
        assert scheduler.last_run == T0

    def test_tick_removes_expired_sessions(self):
        registry, scheduler, _ = _setup()
        sid = registry.create_session("user-1", "br-1")
        removed = scheduler.tick(T0 + timedelta(minutes=10))
        assert removed == 1
        assert sid not in registry

    def test_tick_skips_until_interval_passes(self):
        registry, scheduler, _ = _setup(interval_seconds=300)
        scheduler.tick(T0)
        registry.create_session("user-1", "br-1")

        later = T0 + timedelta(minutes=4)
        assert scheduler.is_due(later) is False
        assert scheduler.tick(T0 + timedelta(minutes=4, seconds=59)) == 0
        assert scheduler.last_run == T0

        assert scheduler.is_due(T0 + timedelta(minutes=5)) is True

    def test_tick_after_interval_sweeps(self):
        registry, scheduler, _ = _setup(interval_seconds=300)
        scheduler.tick(T0)
        sid = registry.create_session("user-1", "br-1")
        assert scheduler.tick(T0 + timedelta(minutes=15)) == 1
        assert sid not in registry
        assert scheduler.last_run == T0 + timedelta(minutes=15)

    def test_start_and_stop(self):
        _, scheduler, _ = _setup(interval_seconds=3600)
        scheduler.start()
        scheduler.start()
        scheduler.stop(timeout=1)
        assert scheduler.last_run is None
