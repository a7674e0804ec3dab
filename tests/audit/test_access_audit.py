"""
Tests - Access Audit Records & In-Memory Sink
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from branch_access.audit.functions import DEFAULT_AUDIT_METADATA, create_audit_log
from branch_access.audit.models import AccessAuditRecord
from branch_access.audit.sinks import InMemoryAuditSink
from branch_access.policy.result import AllowedPartial, Denied
from branch_access.policy.types import Operation, ResourceType, RestrictionLevel

T0 = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def _record(**overrides) -> AccessAuditRecord:
    kwargs = dict(
        user_id="user-1",
        branch_id="br-2",
        operation=Operation.UPDATE,
        resource_type=ResourceType.STOCK,
        access_result=Denied(
            reason="Requires approval for cross-branch operation",
            restriction_level=RestrictionLevel.PARTIAL,
            requires_approval=True,
        ),
        occurred_at=T0,
    )
    kwargs.update(overrides)
    return create_audit_log(**kwargs)


class TestCreateAuditLog:
    def test_fields_from_result(self):
        record = _record()
        assert record.timestamp == T0
        assert record.operation == "update"
        assert record.resource_type == "stock"
        assert record.access_granted is False
        assert record.restriction_level == "partial"
        assert record.reason == "Requires approval for cross-branch operation"

    def test_default_metadata(self):
        assert dict(_record().metadata) == dict(DEFAULT_AUDIT_METADATA)

    def test_metadata_merge(self):
        record = _record(metadata={"user_agent": "pos-terminal", "session_id": "bs_1"})
        assert dict(record.metadata) == {
            "user_agent": "pos-terminal",
            "ip": None,
            "session_id": "bs_1",
        }

    def test_granted_partial(self):
        record = _record(access_result=AllowedPartial(reason="Shared access - view allowed"))
        assert record.access_granted is True
        assert record.restriction_level == "partial"


class TestAccessAuditRecord:
    def test_is_immutable(self):
        record = _record()
        with pytest.raises(AttributeError):
            record.reason = "changed"
        with pytest.raises(TypeError):
            record.metadata["ip"] = "10.0.0.1"

    def test_metadata_copied_from_caller(self):
        caller_meta = {"trace": "t1"}
        record = _record(metadata=caller_meta)
        caller_meta["trace"] = "t2"
        assert record.metadata["trace"] == "t1"

    def test_requires_aware_timestamp(self):
        with pytest.raises(ValueError):
            _record(occurred_at=datetime(2025, 6, 1, 12, 0, 0))

    def test_to_dict(self):
        payload = _record().to_dict()
        assert payload["timestamp"] == T0.isoformat()
        assert payload["metadata"] == {"user_agent": "server", "ip": None}
        assert payload["access_granted"] is False


class TestInMemoryAuditSink:
    def test_append_only_order(self):
        sink = InMemoryAuditSink()
        first = _record(branch_id="br-1")
        second = _record(branch_id="br-2")
        sink.record(first)
        sink.record(second)
        assert len(sink) == 2
        assert sink.all_records() == (first, second)
