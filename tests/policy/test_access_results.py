"""
Tests - Access Result Variants & Policy Types
================================================
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from branch_access.policy.result import Allowed, AllowedPartial, Denied
from branch_access.policy.types import (
    AccessRequest,
    Branch,
    BranchDataContext,
    IsolationLevel,
    Operation,
    ResourceType,
    RestrictionLevel,
)

T0 = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestResultSurface:
    def test_allowed_surface(self):
        r = Allowed(reason="ok")
        assert r.allowed is True
        assert r.restriction_level == RestrictionLevel.NONE
        assert r.allowed_fields is None
        assert r.requires_approval is False

    def test_allowed_partial_freezes_fields(self):
        r = AllowedPartial(reason="partial", allowed_fields={"a", "b"})
        assert isinstance(r.allowed_fields, frozenset)
        assert r.restriction_level == RestrictionLevel.PARTIAL

    def test_denied_defaults_to_full(self):
        r = Denied(reason="no")
        assert r.allowed is False
        assert r.restriction_level == RestrictionLevel.FULL
        assert r.audit_required is False

    def test_denied_rejects_none_restriction(self):
        with pytest.raises(ValueError, match="none"):
            Denied(reason="no", restriction_level=RestrictionLevel.NONE)

    def test_denied_accepts_wire_string(self):
        r = Denied(reason="no", restriction_level="partial")
        assert r.restriction_level is RestrictionLevel.PARTIAL

    def test_frozen(self):
        r = Allowed(reason="ok")
        with pytest.raises(AttributeError):
            r.reason = "changed"


class TestResultSerialization:
    def test_partial_to_dict_sorted_fields(self):
        payload = AllowedPartial(
            reason="partial", allowed_fields={"b", "a"}, audit_required=True
        ).to_dict()
        assert payload == {
            "allowed": True,
            "reason": "partial",
            "restriction_level": "partial",
            "requires_approval": False,
            "audit_required": True,
            "allowed_fields": ["a", "b"],
        }

    def test_denied_to_dict_omits_fields(self):
        payload = Denied(reason="no", requires_approval=True).to_dict()
        assert "allowed_fields" not in payload
        assert payload["requires_approval"] is True
        assert payload["restriction_level"] == "full"


class TestPolicyTypes:
    def test_enums_match_wire_strings(self):
        assert Operation.VIEW == "view"
        assert ResourceType("stock") is ResourceType.STOCK

    def test_request_coerces_strings(self):
        req = AccessRequest(
            user_id="u",
            user_role="cashier",
            current_branch_id="a",
            target_branch_id="b",
            operation="transfer",
            resource_type="stock",
            timestamp=T0,
        )
        assert req.operation is Operation.TRANSFER
        assert req.resource_type is ResourceType.STOCK
        assert req.is_same_branch is False

    def test_request_rejects_unknown_operation(self):
        with pytest.raises(ValueError):
            AccessRequest("u", "r", "a", "b", "archive", "stock", T0)

    def test_request_rejects_naive_timestamp(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            AccessRequest("u", "r", "a", "b", "view", "stock", datetime(2025, 1, 1))

    def test_branch_requires_id(self):
        with pytest.raises(ValueError):
            Branch(id="", code="X", name="X")

    def test_branch_defaults_to_strict(self):
        assert Branch(id="b", code="B", name="B").isolation_level is IsolationLevel.STRICT

    def test_context_lookup_and_names(self):
        home = Branch(id="a", code="A", name="Alpha")
        other = Branch(id="b", code="B", name="Beta")
        ctx = BranchDataContext(current_branch=home, accessible_branches=[other])
        assert ctx.find_accessible("b") is other
        assert ctx.find_accessible("a") is None
        assert ctx.accessible_branch_ids() == ("b",)
        assert ctx.branch_names() == {"a": "Alpha", "b": "Beta"}
