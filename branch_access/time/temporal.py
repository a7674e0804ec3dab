"""
Branch Access Core - Temporal Helpers
=======================================
Pure functions for time interval logic.
All functions take explicit datetime arguments - no hidden clock access.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


# ══════════════════════════════════════════════════════════════
# TIME WINDOW - Closed interval [start, end]
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TimeWindow:
    """
    A closed time interval [start, end].

    Used as the date range of analytics queries.
    Invariant: start <= end (enforced at construction).
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"TimeWindow start ({self.start}) must be <= end ({self.end})."
            )

    def contains(self, dt: datetime) -> bool:
        """Check if datetime falls within window (inclusive)."""
        return self.start <= dt <= self.end

    def duration(self) -> timedelta:
        return self.end - self.start


# ══════════════════════════════════════════════════════════════
# PURE TEMPORAL FUNCTIONS
# ══════════════════════════════════════════════════════════════

def has_elapsed(since: datetime, ttl: timedelta, now: datetime) -> bool:
    """
    True once `ttl` or more has passed since `since`.

    The boundary counts as elapsed: a session idle for exactly its
    timeout is expired.
    """
    return now - since >= ttl


def fixed_window_start(now: datetime, window_seconds: int) -> datetime:
    """Start of the fixed window of `window_seconds` that contains `now`."""
    epoch_seconds = int(now.timestamp())
    start = epoch_seconds - (epoch_seconds % window_seconds)
    return datetime.fromtimestamp(start, tz=now.tzinfo)
