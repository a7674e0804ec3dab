"""
Branch Access Core - Policy Public API
========================================
Access decision types, result variants and the decision engine.
"""

from branch_access.policy.engine import (
    PARTIAL_ACCESS_FIELDS,
    AccessControlEngine,
    partial_access_fields,
    validate_branch_access,
)
from branch_access.policy.result import AccessResult, Allowed, AllowedPartial, Denied
from branch_access.policy.types import (
    AccessRequest,
    Branch,
    BranchDataContext,
    IsolationLevel,
    Operation,
    ResourceType,
    RestrictionLevel,
    UserPermissions,
)

__all__ = [
    # Engine
    "AccessControlEngine",
    "PARTIAL_ACCESS_FIELDS",
    "partial_access_fields",
    "validate_branch_access",
    # Results
    "AccessResult",
    "Allowed",
    "AllowedPartial",
    "Denied",
    # Types
    "AccessRequest",
    "Branch",
    "BranchDataContext",
    "IsolationLevel",
    "Operation",
    "ResourceType",
    "RestrictionLevel",
    "UserPermissions",
]
