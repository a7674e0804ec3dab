"""
Branch Access Core - Access Audit Records
===========================================
Immutable record of one access decision, built here and persisted by
an external audit sink. Records are frozen; once built, never modified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class AccessAuditRecord:
    timestamp: datetime
    user_id: str
    branch_id: str
    operation: str
    resource_type: str
    access_granted: bool
    restriction_level: str
    reason: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.timestamp.tzinfo is None:
            raise ValueError("AccessAuditRecord timestamp must be timezone-aware.")
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "user_id": self.user_id,
            "branch_id": self.branch_id,
            "operation": self.operation,
            "resource_type": self.resource_type,
            "access_granted": self.access_granted,
            "restriction_level": self.restriction_level,
            "reason": self.reason,
            "metadata": dict(self.metadata),
        }
