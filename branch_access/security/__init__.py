"""
Branch Access Core - Security Public API
==========================================
Rate limiting and counter stores.
"""

from branch_access.security.counters import (
    CounterStore,
    DjangoCacheCounterStore,
    InMemoryCounterStore,
)
from branch_access.security.ratelimit import (
    RateLimitConfig,
    RateLimiter,
    RateLimitResult,
    rate_limit_denial,
)

__all__ = [
    "RateLimitConfig",
    "RateLimiter",
    "RateLimitResult",
    "rate_limit_denial",
    "CounterStore",
    "InMemoryCounterStore",
    "DjangoCacheCounterStore",
]
