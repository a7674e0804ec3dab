"""
Branch Access Core - Access Control Engine
============================================
Deterministic decision function for cross-branch data requests.

Decision order:
  1. Same branch                       -> Allowed
  2. View-all-branches permission      -> Allowed (audited)
  3. Cross-branch access disabled      -> Denied (full)
  4. Target not in accessible branches -> Denied (full)
  5. Target isolation level:
       strict  -> Denied (full), no override
       partial -> view of stock/reports is AllowedPartial with whitelist,
                  anything else Denied (partial), approval if configured
       shared  -> view with report category "all" is Allowed,
                  delete/transfer Denied pending approval,
                  anything else AllowedPartial without whitelist

The engine holds only its frozen config. It never logs, never reads the
clock and never mutates its inputs, so concurrent calls need no locking.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional

from branch_access.config.settings import BranchSecurityConfig
from branch_access.policy.result import AccessResult, Allowed, AllowedPartial, Denied
from branch_access.policy.types import (
    SENSITIVE_OPERATIONS,
    AccessRequest,
    Branch,
    BranchDataContext,
    IsolationLevel,
    Operation,
    ResourceType,
    RestrictionLevel,
    UserPermissions,
)


# ══════════════════════════════════════════════════════════════
# FIELD WHITELISTS (partial restriction)
# ══════════════════════════════════════════════════════════════

PARTIAL_ACCESS_FIELDS: Dict[ResourceType, FrozenSet[str]] = {
    ResourceType.STOCK: frozenset(
        {"productId", "productName", "quantity", "category", "status"}
    ),
    ResourceType.REPORTS: frozenset({"summary", "totals", "aggregated"}),
    ResourceType.CUSTOMERS: frozenset({"name", "totalPurchases", "status"}),
    ResourceType.EMPLOYEES: frozenset({"name", "position", "department"}),
    ResourceType.SALES: frozenset({"total", "date", "status"}),
}

PARTIAL_VIEW_RESOURCES: FrozenSet[ResourceType] = frozenset(
    {ResourceType.STOCK, ResourceType.REPORTS}
)


def partial_access_fields(resource_type: ResourceType) -> Optional[FrozenSet[str]]:
    """Whitelist for a resource type, or None when it defines none."""
    return PARTIAL_ACCESS_FIELDS.get(ResourceType(resource_type))


# ══════════════════════════════════════════════════════════════
# ENGINE
# ══════════════════════════════════════════════════════════════

class AccessControlEngine:
    """Pure policy evaluation over (request, branch context)."""

    def __init__(self, config: Optional[BranchSecurityConfig] = None) -> None:
        self._config = config or BranchSecurityConfig()

    @property
    def config(self) -> BranchSecurityConfig:
        return self._config

    def check_access(
        self,
        request: AccessRequest,
        context: BranchDataContext,
    ) -> AccessResult:
        if request.is_same_branch:
            return Allowed(
                reason="Same branch access",
                audit_required=self._config.audit_all_operations,
            )

        if context.user_permissions.can_view_all_branches:
            return Allowed(reason="Super admin access", audit_required=True)

        if not self._config.allow_cross_branch_access:
            return Denied(reason="Cross-branch access disabled")

        target = context.find_accessible(request.target_branch_id)
        if target is None:
            return Denied(reason="Branch not accessible")

        if target.isolation_level == IsolationLevel.STRICT:
            return Denied(reason="Strict data isolation enforced")
        if target.isolation_level == IsolationLevel.PARTIAL:
            return self._check_partial_access(request)
        if target.isolation_level == IsolationLevel.SHARED:
            return self._check_shared_access(request, target)

        # Unreachable while IsolationLevel stays closed; fail closed regardless.
        return Denied(reason="Unknown isolation level")

    def _check_partial_access(self, request: AccessRequest) -> AccessResult:
        if (
            request.operation == Operation.VIEW
            and request.resource_type in PARTIAL_VIEW_RESOURCES
        ):
            return AllowedPartial(
                reason="Partial access - view only for allowed resources",
                allowed_fields=partial_access_fields(request.resource_type),
                audit_required=True,
            )

        if self._config.require_approval_for_sensitive_operations:
            return Denied(
                reason="Requires approval for cross-branch operation",
                restriction_level=RestrictionLevel.PARTIAL,
                requires_approval=True,
            )

        return Denied(
            reason="Partial isolation - operation not allowed",
            restriction_level=RestrictionLevel.PARTIAL,
        )

    def _check_shared_access(self, request: AccessRequest, target: Branch) -> AccessResult:
        if request.operation == Operation.VIEW and target.shares_all_reports():
            return Allowed(reason="Shared access - view allowed", audit_required=True)

        if request.operation in SENSITIVE_OPERATIONS:
            return Denied(
                reason="Sensitive operation requires approval",
                restriction_level=RestrictionLevel.PARTIAL,
                requires_approval=True,
            )

        # Looser than the partial branch: non-sensitive writes on a shared
        # branch are allowed. Kept as-is pending policy review.
        return AllowedPartial(reason="Shared access allowed", audit_required=True)


# ══════════════════════════════════════════════════════════════
# STANDALONE HELPERS
# ══════════════════════════════════════════════════════════════

def validate_branch_access(
    user_branch_id: str,
    target_branch_id: str,
    permissions: UserPermissions,
    accessible_branch_ids: FrozenSet[str] = frozenset(),
) -> bool:
    """
    Coarse reachability check used before building a request.

    True for the user's own branch, for view-all users, or when the
    target is among the accessible branch ids. Isolation levels are
    not consulted; check_access is the authority.
    """
    if user_branch_id == target_branch_id:
        return True
    if permissions.can_view_all_branches:
        return True
    return target_branch_id in accessible_branch_ids
