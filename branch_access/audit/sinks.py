"""
Branch Access Core - Audit Sinks
==================================
Protocol + InMemory implementation for audit record persistence.

The DB-backed sink lives in branch_access.audit_store (Django app).
"""

from __future__ import annotations

import threading
from typing import Protocol

from branch_access.audit.models import AccessAuditRecord


class AuditSink(Protocol):
    def record(self, entry: AccessAuditRecord) -> None:
        """Persist one audit record. Append-only."""
        ...  # pragma: no cover


class InMemoryAuditSink:
    """Thread-safe append-only sink for tests and local runs."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[AccessAuditRecord] = []

    def record(self, entry: AccessAuditRecord) -> None:
        with self._lock:
            self._records.append(entry)

    def all_records(self) -> tuple[AccessAuditRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
