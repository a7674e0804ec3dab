"""
Branch Access Core - Rate Limit Counter Stores
================================================
Protocol + implementations for fixed-window request counters.

- InMemoryCounterStore: thread-safe, per-process, used in tests.
- DjangoCacheCounterStore: counters in a Django cache backend, shared
  by every process pointed at the same cache.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Dict, Protocol, Tuple


class CounterStore(Protocol):
    def increment(self, key: str, window_start: datetime, ttl_seconds: int) -> int:
        """Count one request in the window starting at window_start; return the new total."""
        ...  # pragma: no cover

    def reset(self, key: str, window_start: datetime) -> None:
        """Drop the counter for one key and window."""
        ...  # pragma: no cover


class InMemoryCounterStore:
    """
    One live window per key; a new window replaces the old counter.

    Counters whose window has ended are dropped on the next increment
    of any key.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # key -> (window_start, count, expires_at)
        self._counters: Dict[str, Tuple[datetime, int, datetime]] = {}

    def increment(self, key: str, window_start: datetime, ttl_seconds: int) -> int:
        with self._lock:
            self._drop_expired(window_start)
            current = self._counters.get(key)
            count = current[1] if current is not None and current[0] == window_start else 0
            count += 1
            self._counters[key] = (
                window_start,
                count,
                window_start + timedelta(seconds=ttl_seconds),
            )
            return count

    def reset(self, key: str, window_start: datetime) -> None:
        with self._lock:
            current = self._counters.get(key)
            if current is not None and current[0] == window_start:
                del self._counters[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._counters)

    def _drop_expired(self, now: datetime) -> None:
        expired = [key for key, entry in self._counters.items() if entry[2] <= now]
        for key in expired:
            del self._counters[key]


class DjangoCacheCounterStore:
    """
    Counters as cache entries keyed per window.

    Each entry expires with its window, so the cache never holds more
    than one live counter per key.
    """

    def __init__(self, cache_alias: str = "default", key_prefix: str = "bac:ratelimit") -> None:
        self._cache_alias = cache_alias
        self._key_prefix = key_prefix

    def _cache(self):
        from django.core.cache import caches

        return caches[self._cache_alias]

    def _cache_key(self, key: str, window_start: datetime) -> str:
        return f"{self._key_prefix}:{key}:{int(window_start.timestamp())}"

    def increment(self, key: str, window_start: datetime, ttl_seconds: int) -> int:
        cache = self._cache()
        cache_key = self._cache_key(key, window_start)
        cache.add(cache_key, 0, timeout=ttl_seconds)
        try:
            return cache.incr(cache_key)
        except ValueError:
            # Entry expired between add() and incr().
            cache.set(cache_key, 1, timeout=ttl_seconds)
            return 1

    def reset(self, key: str, window_start: datetime) -> None:
        self._cache().delete(self._cache_key(key, window_start))
