"""
Branch Access Core - Access Results
=====================================
Tagged result variants of an access decision:

    Allowed         restriction none, data passes through
    AllowedPartial  restriction partial, optionally with a field whitelist
    Denied          restriction partial or full, caller receives no data

Every variant exposes the same read surface (allowed, reason,
restriction_level, allowed_fields, requires_approval, audit_required)
so callers never probe for optional attributes.

These are pure data structures. No side effects. No persistence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional, Union

from branch_access.policy.types import RestrictionLevel


@dataclass(frozen=True)
class Allowed:
    reason: str
    audit_required: bool = False

    allowed = True
    restriction_level = RestrictionLevel.NONE
    allowed_fields = None
    requires_approval = False

    def to_dict(self) -> dict:
        return _serialize(self)


@dataclass(frozen=True)
class AllowedPartial:
    """
    Allowed with partial restriction.

    allowed_fields is None when the resource type has no whitelist;
    the mediator then passes rows through unredacted.
    """

    reason: str
    allowed_fields: Optional[FrozenSet[str]] = None
    audit_required: bool = False

    allowed = True
    restriction_level = RestrictionLevel.PARTIAL
    requires_approval = False

    def __post_init__(self) -> None:
        if self.allowed_fields is not None:
            object.__setattr__(self, "allowed_fields", frozenset(self.allowed_fields))

    def to_dict(self) -> dict:
        return _serialize(self)


@dataclass(frozen=True)
class Denied:
    reason: str
    restriction_level: RestrictionLevel = RestrictionLevel.FULL
    requires_approval: bool = False

    allowed = False
    allowed_fields = None
    audit_required = False

    def __post_init__(self) -> None:
        level = RestrictionLevel(self.restriction_level)
        if level == RestrictionLevel.NONE:
            raise ValueError("Denied result cannot carry restriction level 'none'.")
        object.__setattr__(self, "restriction_level", level)

    def to_dict(self) -> dict:
        return _serialize(self)


AccessResult = Union[Allowed, AllowedPartial, Denied]


def _serialize(result: AccessResult) -> dict:
    payload = {
        "allowed": result.allowed,
        "reason": result.reason,
        "restriction_level": result.restriction_level.value,
        "requires_approval": result.requires_approval,
        "audit_required": result.audit_required,
    }
    if result.allowed_fields is not None:
        payload["allowed_fields"] = sorted(result.allowed_fields)
    return payload
