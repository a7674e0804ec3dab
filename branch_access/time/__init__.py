"""
Branch Access Core - Time Public API
======================================
Explicit clock protocol and temporal helpers.
"""

from branch_access.time.clock import Clock, FixedClock, SystemClock
from branch_access.time.temporal import TimeWindow, fixed_window_start, has_elapsed

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "TimeWindow",
    "fixed_window_start",
    "has_elapsed",
]
