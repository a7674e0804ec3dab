"""
Branch Access Core - Rate Limiting
====================================
Fixed window rate limiter per (branch, user, operation).

Counters live in a pluggable CounterStore. Time is injected via the
Clock protocol or passed explicitly as `now`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from branch_access.errors import ConfigurationError
from branch_access.policy.result import Denied
from branch_access.security.counters import CounterStore, InMemoryCounterStore
from branch_access.time.clock import Clock, SystemClock
from branch_access.time.temporal import fixed_window_start

logger = logging.getLogger("branch_access.security")


# ══════════════════════════════════════════════════════════════
# RATE LIMIT CONFIGURATION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RateLimitConfig:
    max_requests: int = 100
    window_seconds: int = 60

    def __post_init__(self) -> None:
        if isinstance(self.max_requests, bool) or not isinstance(self.max_requests, int) or self.max_requests < 1:
            raise ConfigurationError("max_requests", "must be a positive integer")
        if isinstance(self.window_seconds, bool) or not isinstance(self.window_seconds, int) or self.window_seconds < 1:
            raise ConfigurationError("window_seconds", "must be a positive integer")

    @classmethod
    def from_django_settings(cls, settings_obj: Optional[Any] = None) -> RateLimitConfig:
        """Read settings.BRANCH_RATE_LIMIT; defaults when it is absent."""
        if settings_obj is None:
            from django.conf import settings as settings_obj
        values = getattr(settings_obj, "BRANCH_RATE_LIMIT", None) or {}
        unknown = set(values) - {"max_requests", "window_seconds"}
        if unknown:
            raise ConfigurationError(sorted(unknown)[0], "unknown option")
        return cls(**values)


# ══════════════════════════════════════════════════════════════
# RATE LIMIT RESULT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining_requests: int
    reset_time: datetime
    limit: int

    def retry_after_seconds(self, now: datetime) -> float:
        if self.allowed:
            return 0.0
        return max(0.0, (self.reset_time - now).total_seconds())


# ══════════════════════════════════════════════════════════════
# FIXED WINDOW RATE LIMITER
# ══════════════════════════════════════════════════════════════

class RateLimiter:
    """
    Fixed window limiter.

    Every check counts against the window, including rejected ones.
    The window resets at reset_time regardless of traffic.
    """

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        store: Optional[CounterStore] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = config or RateLimitConfig()
        self._store = store if store is not None else InMemoryCounterStore()
        self._clock = clock or SystemClock()

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    @staticmethod
    def bucket_key(branch_id: str, user_id: str, operation: str) -> str:
        return f"{branch_id}:{user_id}:{getattr(operation, 'value', operation)}"

    def check_rate_limit(
        self,
        branch_id: str,
        user_id: str,
        operation: str,
        now: Optional[datetime] = None,
    ) -> RateLimitResult:
        now = now or self._clock.now_utc()
        window_start = fixed_window_start(now, self._config.window_seconds)
        key = self.bucket_key(branch_id, user_id, operation)

        count = self._store.increment(key, window_start, self._config.window_seconds)
        limit = self._config.max_requests
        result = RateLimitResult(
            allowed=count <= limit,
            remaining_requests=max(0, limit - count),
            reset_time=window_start + timedelta(seconds=self._config.window_seconds),
            limit=limit,
        )

        if not result.allowed:
            logger.warning(
                f"Rate limit exceeded for {key}: {count}/{limit} "
                f"until {result.reset_time.isoformat()}"
            )
        return result

    def reset(
        self,
        branch_id: str,
        user_id: str,
        operation: str,
        now: Optional[datetime] = None,
    ) -> None:
        """Clear the current window for one key (admin action)."""
        now = now or self._clock.now_utc()
        window_start = fixed_window_start(now, self._config.window_seconds)
        self._store.reset(self.bucket_key(branch_id, user_id, operation), window_start)


# ══════════════════════════════════════════════════════════════
# RATE LIMIT DENIAL HELPER
# ══════════════════════════════════════════════════════════════

def rate_limit_denial(result: RateLimitResult) -> Optional[Denied]:
    """Convert an exhausted rate limit result into a Denied access result."""
    if result.allowed:
        return None
    return Denied(
        reason=(
            f"Rate limit exceeded ({result.limit} requests per window). "
            f"Retry after {result.reset_time.isoformat()}."
        ),
    )
