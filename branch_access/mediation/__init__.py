"""
Branch Access Core - Mediation Public API
===========================================
Redaction, cross-branch summaries, response envelopes and query scoping.
"""

from branch_access.mediation.mediator import (
    AccessMetadata,
    BranchBucket,
    CrossBranchSummary,
    DataAccessMediator,
    DataAccessResponse,
    FilteredData,
    ResponseOptions,
    sanitize_record,
)
from branch_access.mediation.query import (
    Aggregate,
    AnalyticsQuery,
    BranchQuery,
    Condition,
    ConditionOp,
    QueryScopeBuilder,
)

__all__ = [
    # Mediator
    "DataAccessMediator",
    "AccessMetadata",
    "BranchBucket",
    "CrossBranchSummary",
    "DataAccessResponse",
    "FilteredData",
    "ResponseOptions",
    "sanitize_record",
    # Query scope
    "QueryScopeBuilder",
    "BranchQuery",
    "AnalyticsQuery",
    "Aggregate",
    "Condition",
    "ConditionOp",
]
