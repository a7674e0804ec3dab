"""
Branch Access Core - Audit Public API
=======================================
Immutable access audit records and pluggable sinks.
"""

from branch_access.audit.functions import DEFAULT_AUDIT_METADATA, create_audit_log
from branch_access.audit.models import AccessAuditRecord
from branch_access.audit.sinks import AuditSink, InMemoryAuditSink

__all__ = [
    "AccessAuditRecord",
    "create_audit_log",
    "DEFAULT_AUDIT_METADATA",
    "AuditSink",
    "InMemoryAuditSink",
]
