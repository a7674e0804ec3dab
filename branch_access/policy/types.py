"""
Branch Access Core - Policy Types
===================================
Closed vocabularies and immutable inputs of an access decision.

Every enum is a str subclass so values compare equal to the wire
strings used by the front end ("view", "stock", ...), while decision
tables match on members rather than on free-form strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional, Tuple


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class Operation(str, Enum):
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    TRANSFER = "transfer"
    REPORT = "report"


class ResourceType(str, Enum):
    SALES = "sales"
    STOCK = "stock"
    CUSTOMERS = "customers"
    EMPLOYEES = "employees"
    REPORTS = "reports"
    SETTINGS = "settings"


class IsolationLevel(str, Enum):
    """How visible a branch's data is to users working in another branch."""

    STRICT = "strict"
    PARTIAL = "partial"
    SHARED = "shared"


class RestrictionLevel(str, Enum):
    """How a decision is applied to data: as-is, redacted, or emptied."""

    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


SENSITIVE_OPERATIONS: FrozenSet[Operation] = frozenset(
    {Operation.DELETE, Operation.TRANSFER}
)

# Report category that opens view access on a shared branch.
REPORT_CATEGORY_ALL = "all"


# ══════════════════════════════════════════════════════════════
# BRANCH & CONTEXT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Branch:
    """
    A branch as seen by the policy engine.

    report_categories lists the report categories the branch shares;
    "all" makes every resource viewable under shared isolation.
    """

    id: str
    code: str
    name: str
    isolation_level: IsolationLevel = IsolationLevel.STRICT
    accessible_branch_ids: FrozenSet[str] = frozenset()
    report_categories: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.id or not isinstance(self.id, str):
            raise ValueError("Branch id must be a non-empty string.")
        object.__setattr__(self, "isolation_level", IsolationLevel(self.isolation_level))
        object.__setattr__(self, "accessible_branch_ids", frozenset(self.accessible_branch_ids))
        object.__setattr__(self, "report_categories", tuple(self.report_categories))

    def shares_all_reports(self) -> bool:
        return REPORT_CATEGORY_ALL in self.report_categories


@dataclass(frozen=True)
class UserPermissions:
    can_switch_branch: bool = False
    can_view_all_branches: bool = False
    can_manage_branches: bool = False
    allowed_operations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BranchDataContext:
    """
    The caller's branch context, supplied by the identity layer.

    Immutable for the duration of a decision.
    """

    current_branch: Branch
    accessible_branches: Tuple[Branch, ...] = ()
    user_permissions: UserPermissions = field(default_factory=UserPermissions)

    def __post_init__(self) -> None:
        object.__setattr__(self, "accessible_branches", tuple(self.accessible_branches))

    def find_accessible(self, branch_id: str) -> Optional[Branch]:
        for branch in self.accessible_branches:
            if branch.id == branch_id:
                return branch
        return None

    def accessible_branch_ids(self) -> Tuple[str, ...]:
        return tuple(branch.id for branch in self.accessible_branches)

    def branch_names(self) -> dict[str, str]:
        names = {branch.id: branch.name for branch in self.accessible_branches}
        names.setdefault(self.current_branch.id, self.current_branch.name)
        return names


# ══════════════════════════════════════════════════════════════
# ACCESS REQUEST
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AccessRequest:
    """One cross-branch data request. Built per query, never persisted."""

    user_id: str
    user_role: str
    current_branch_id: str
    target_branch_id: str
    operation: Operation
    resource_type: ResourceType
    timestamp: datetime

    def __post_init__(self) -> None:
        if not self.user_id or not isinstance(self.user_id, str):
            raise ValueError("user_id must be a non-empty string.")
        if self.timestamp.tzinfo is None:
            raise ValueError("AccessRequest timestamp must be timezone-aware.")
        object.__setattr__(self, "operation", Operation(self.operation))
        object.__setattr__(self, "resource_type", ResourceType(self.resource_type))

    @property
    def is_same_branch(self) -> bool:
        return self.current_branch_id == self.target_branch_id
