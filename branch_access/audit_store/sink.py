"""
Branch Access Core - DB-backed Audit Sink
===========================================
Persists AccessAuditRecord values through the Django ORM.
"""

from __future__ import annotations

import logging

from branch_access.audit.models import AccessAuditRecord

logger = logging.getLogger("branch_access.audit")

REASON_MAX_LENGTH = 255


class DbAuditSink:
    def record(self, entry: AccessAuditRecord) -> None:
        from branch_access.audit_store.models import AccessAuditLog

        reason = entry.reason
        if len(reason) > REASON_MAX_LENGTH:
            logger.debug(
                f"Audit reason for user {entry.user_id} truncated from "
                f"{len(reason)} to {REASON_MAX_LENGTH} characters"
            )
            reason = reason[:REASON_MAX_LENGTH]

        row = AccessAuditLog.objects.create(
            occurred_at=entry.timestamp,
            user_id=entry.user_id,
            branch_id=entry.branch_id,
            operation=entry.operation,
            resource_type=entry.resource_type,
            access_granted=entry.access_granted,
            restriction_level=entry.restriction_level,
            reason=reason,
            metadata=dict(entry.metadata),
        )
        logger.debug(f"Audit row {row.pk} stored for user {entry.user_id}")

    def recent_for_user(self, user_id: str, limit: int = 50) -> tuple[AccessAuditRecord, ...]:
        """Newest-first audit records of one user, rebuilt as frozen values."""
        from branch_access.audit_store.models import AccessAuditLog

        rows = AccessAuditLog.objects.filter(user_id=user_id).order_by("-occurred_at", "-id")[:limit]
        return tuple(
            AccessAuditRecord(
                timestamp=row.occurred_at,
                user_id=row.user_id,
                branch_id=row.branch_id,
                operation=row.operation,
                resource_type=row.resource_type,
                access_granted=row.access_granted,
                restriction_level=row.restriction_level,
                reason=row.reason,
                metadata=row.metadata or {},
            )
            for row in rows
        )
