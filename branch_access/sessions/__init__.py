"""
Branch Access Core - Sessions Public API
==========================================
Session store, bounded access logs and the cleanup scheduler.
"""

from branch_access.sessions.models import AccessLogEntry, Session, SessionReport
from branch_access.sessions.registry import (
    MAX_ACCESS_LOG_ENTRIES,
    RETAINED_ACCESS_LOG_ENTRIES,
    SessionRegistry,
    generate_session_id,
)
from branch_access.sessions.scheduler import CleanupScheduler

__all__ = [
    "AccessLogEntry",
    "Session",
    "SessionReport",
    "SessionRegistry",
    "CleanupScheduler",
    "generate_session_id",
    "MAX_ACCESS_LOG_ENTRIES",
    "RETAINED_ACCESS_LOG_ENTRIES",
]
