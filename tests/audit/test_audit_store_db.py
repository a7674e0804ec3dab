"""
Tests - DB-backed Audit Sink
==============================
Round trip of access audit records through the Django ORM.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest

from branch_access.audit.functions import create_audit_log
from branch_access.audit_store.models import AccessAuditLog
from branch_access.audit_store.sink import REASON_MAX_LENGTH, DbAuditSink
from branch_access.policy.result import Allowed, Denied

pytestmark = pytest.mark.django_db(transaction=True)

T0 = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def _record(user_id="user-1", offset_seconds=0, result=None, metadata=None):
    return create_audit_log(
        user_id=user_id,
        branch_id="br-1",
        operation="view",
        resource_type="sales",
        access_result=result or Allowed(reason="Same branch access", audit_required=True),
        occurred_at=T0 + timedelta(seconds=offset_seconds),
        metadata=metadata,
    )


class TestDbAuditSink:
    def test_record_persists_row(self):
        DbAuditSink().record(_record(metadata={"session_id": "bs_1"}))
        row = AccessAuditLog.objects.get()
        assert row.user_id == "user-1"
        assert row.branch_id == "br-1"
        assert row.operation == "view"
        assert row.resource_type == "sales"
        assert row.access_granted is True
        assert row.restriction_level == "none"
        assert row.occurred_at == T0
        assert row.metadata == {"user_agent": "server", "ip": None, "session_id": "bs_1"}

    def test_long_reason_truncated_and_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="branch_access.audit"):
            DbAuditSink().record(_record(result=Denied(reason="x" * 400)))
        assert len(AccessAuditLog.objects.get().reason) == REASON_MAX_LENGTH
        assert "truncated from 400 to 255" in caplog.text

    def test_short_reason_not_reported(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="branch_access.audit"):
            DbAuditSink().record(_record())
        assert "truncated" not in caplog.text

    def test_recent_for_user_newest_first(self):
        sink = DbAuditSink()
        for offset in (0, 10, 5):
            sink.record(_record(offset_seconds=offset))
        sink.record(_record(user_id="user-2"))

        records = sink.recent_for_user("user-1")
        assert [r.timestamp for r in records] == [
            T0 + timedelta(seconds=10),
            T0 + timedelta(seconds=5),
            T0,
        ]
        assert records[0].metadata["user_agent"] == "server"

    def test_recent_for_user_limit(self):
        sink = DbAuditSink()
        for offset in range(5):
            sink.record(_record(offset_seconds=offset))
        assert len(sink.recent_for_user("user-1", limit=2)) == 2

    def test_str(self):
        DbAuditSink().record(_record(result=Denied(reason="Branch not accessible")))
        assert str(AccessAuditLog.objects.get()) == "user-1:view:sales:denied"
