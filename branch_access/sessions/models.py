"""
Branch Access Core - Session Models
=====================================
Per-user, per-branch sessions that accumulate a bounded audit trail.

Session is mutable and owned exclusively by SessionRegistry.
AccessLogEntry and SessionReport are frozen values handed to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional


# ══════════════════════════════════════════════════════════════
# ACCESS LOG ENTRY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AccessLogEntry:
    timestamp: datetime
    operation: str
    resource_type: str
    target_branch_id: Optional[str] = None
    success: bool = True


# ══════════════════════════════════════════════════════════════
# SESSION
# ══════════════════════════════════════════════════════════════

@dataclass
class Session:
    """
    Lifecycle: Active -> Inactive. There is no way back to Active;
    a returning user gets a freshly minted session id.
    """

    id: str
    user_id: str
    branch_id: str
    created_at: datetime
    last_activity: datetime
    is_active: bool = True
    access_log: List[AccessLogEntry] = field(default_factory=list)


# ══════════════════════════════════════════════════════════════
# SESSION REPORT (derived, never stored)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SessionReport:
    session_id: str
    user_id: str
    branch_id: str
    duration: timedelta
    total_operations: int
    operations_by_type: Dict[str, int]
    is_active: bool
    last_activity: datetime

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "branch_id": self.branch_id,
            "duration_ms": int(self.duration.total_seconds() * 1000),
            "total_operations": self.total_operations,
            "operations_by_type": dict(self.operations_by_type),
            "is_active": self.is_active,
            "last_activity": self.last_activity.isoformat(),
        }
