"""
Branch Access Core - Audit Functions
======================================
Pure factory for access audit records. Returns new frozen objects,
never persists.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from branch_access.audit.models import AccessAuditRecord
from branch_access.policy.result import AccessResult

DEFAULT_AUDIT_METADATA: Mapping[str, Any] = {
    "user_agent": "server",
    "ip": None,
}


def create_audit_log(
    user_id: str,
    branch_id: str,
    operation: str,
    resource_type: str,
    access_result: AccessResult,
    occurred_at: datetime,
    metadata: Optional[Mapping[str, Any]] = None,
) -> AccessAuditRecord:
    """Build the audit record for one decision; caller metadata wins over defaults."""
    merged = dict(DEFAULT_AUDIT_METADATA)
    if metadata:
        merged.update(metadata)

    return AccessAuditRecord(
        timestamp=occurred_at,
        user_id=user_id,
        branch_id=branch_id,
        operation=str(getattr(operation, "value", operation)),
        resource_type=str(getattr(resource_type, "value", resource_type)),
        access_granted=access_result.allowed,
        restriction_level=access_result.restriction_level.value,
        reason=access_result.reason,
        metadata=merged,
    )
