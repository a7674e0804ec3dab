"""
Branch Access Core - Data Access Mediator
===========================================
Applies an access decision to rows that were already fetched:

    denied                     -> no rows, counts and reason only
    restriction none           -> rows pass through unchanged
    partial with whitelist     -> every row projected to allowed keys
    partial without whitelist  -> rows pass through unchanged

Rows are mappings. The mediator builds new containers and never
mutates the rows it is given.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from branch_access.audit.functions import create_audit_log
from branch_access.audit.models import AccessAuditRecord
from branch_access.errors import InvalidRecordError
from branch_access.mediation.query import BranchQuery, FilterValue, QueryScopeBuilder
from branch_access.policy.result import AccessResult
from branch_access.policy.types import ResourceType, RestrictionLevel
from branch_access.time.clock import Clock, SystemClock

Record = Mapping[str, Any]

SUMMARY_BRANCH_FIELD = "branchId"
UNKNOWN_BRANCH_NAME = "Unknown"


# ══════════════════════════════════════════════════════════════
# RESULT SHAPES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BranchBucket:
    branch_id: str
    branch_name: str
    count: int
    items: Tuple[Record, ...]

    def to_dict(self) -> dict:
        return {
            "branch_id": self.branch_id,
            "branch_name": self.branch_name,
            "count": self.count,
            "items": [dict(item) for item in self.items],
        }


@dataclass(frozen=True)
class CrossBranchSummary:
    buckets: Tuple[BranchBucket, ...]
    total_branches: int
    total_items: int

    def to_dict(self) -> dict:
        return {
            "summary": [bucket.to_dict() for bucket in self.buckets],
            "total_branches": self.total_branches,
            "total_items": self.total_items,
        }


@dataclass(frozen=True)
class AccessMetadata:
    total_records: int
    filtered_records: int
    restricted_fields: Tuple[str, ...] = ()
    resource_type: Optional[str] = None
    reason: Optional[str] = None
    summary: Optional[CrossBranchSummary] = None

    def to_dict(self) -> dict:
        payload: Dict[str, Any] = {
            "total_records": self.total_records,
            "filtered_records": self.filtered_records,
            "restricted_fields": list(self.restricted_fields),
        }
        if self.resource_type is not None:
            payload["resource_type"] = self.resource_type
        if self.reason is not None:
            payload["reason"] = self.reason
        if self.summary is not None:
            payload.update(self.summary.to_dict())
        return payload


@dataclass(frozen=True)
class FilteredData:
    filtered_data: List[Record]
    metadata: AccessMetadata


@dataclass(frozen=True)
class ResponseOptions:
    include_summary: bool = False
    branch_names: Mapping[str, str] = field(default_factory=dict)
    sort_by: Optional[str] = None
    sort_order: str = "asc"

    def __post_init__(self) -> None:
        if self.sort_order not in ("asc", "desc"):
            raise ValueError(f"sort_order must be 'asc' or 'desc', got '{self.sort_order}'.")


@dataclass(frozen=True)
class DataAccessResponse:
    """
    Envelope returned upstream.

    data is None whenever access was denied, so a denied caller
    cannot read rows even by mistake.
    """

    success: bool
    data: Optional[List[Record]]
    access_result: AccessResult
    metadata: AccessMetadata

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "data": [dict(row) for row in self.data] if self.data is not None else None,
            "access_result": self.access_result.to_dict(),
            "metadata": self.metadata.to_dict(),
        }


# ══════════════════════════════════════════════════════════════
# PURE HELPERS
# ══════════════════════════════════════════════════════════════

def sanitize_record(record: Record, allowed_fields: Iterable[str]) -> Dict[str, Any]:
    """Project one row to the allowed keys it actually has."""
    allowed = allowed_fields if isinstance(allowed_fields, (set, frozenset)) else set(allowed_fields)
    return {key: value for key, value in record.items() if key in allowed}


def _checked_rows(data: Sequence[Any]) -> List[Record]:
    rows = list(data)
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise InvalidRecordError(index, type(row).__name__)
    return rows


def _sort_rows(rows: List[Record], sort_by: str, descending: bool) -> List[Record]:
    # Rows lacking the key (or holding None) always go last.
    present = [row for row in rows if row.get(sort_by) is not None]
    missing = [row for row in rows if row.get(sort_by) is None]
    try:
        ordered = sorted(present, key=lambda row: row[sort_by], reverse=descending)
    except TypeError:
        ordered = sorted(present, key=lambda row: _mixed_sort_key(row[sort_by]), reverse=descending)
    return ordered + missing


def _mixed_sort_key(value: Any) -> Tuple[int, Any]:
    # Numbers, then strings, then anything else as text.
    if isinstance(value, (int, float)):
        return (0, value)
    if isinstance(value, str):
        return (1, value)
    return (2, str(value))


def _resource_label(resource_type: Union[ResourceType, str, None]) -> Optional[str]:
    if resource_type is None:
        return None
    return str(getattr(resource_type, "value", resource_type))


# ══════════════════════════════════════════════════════════════
# MEDIATOR
# ══════════════════════════════════════════════════════════════

class DataAccessMediator:
    def __init__(
        self,
        query_builder: Optional[QueryScopeBuilder] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._query_builder = query_builder if query_builder is not None else QueryScopeBuilder()
        self._clock = clock or SystemClock()

    def filter_data_by_access(
        self,
        data: Sequence[Record],
        access_result: AccessResult,
        resource_type: Union[ResourceType, str, None] = None,
    ) -> FilteredData:
        label = _resource_label(resource_type)

        if not access_result.allowed:
            return FilteredData(
                filtered_data=[],
                metadata=AccessMetadata(
                    total_records=len(data),
                    filtered_records=0,
                    resource_type=label,
                    reason=access_result.reason,
                ),
            )

        rows = _checked_rows(data)
        allowed_fields: Optional[FrozenSet[str]] = access_result.allowed_fields

        if access_result.restriction_level == RestrictionLevel.PARTIAL and allowed_fields is not None:
            projected: List[Record] = [sanitize_record(row, allowed_fields) for row in rows]
            first_keys = list(rows[0].keys()) if rows else []
            restricted = tuple(key for key in first_keys if key not in allowed_fields)
            return FilteredData(
                filtered_data=projected,
                metadata=AccessMetadata(
                    total_records=len(rows),
                    filtered_records=len(projected),
                    restricted_fields=restricted,
                    resource_type=label,
                ),
            )

        # Restriction none, or partial without a whitelist: pass through.
        return FilteredData(
            filtered_data=rows,
            metadata=AccessMetadata(
                total_records=len(rows),
                filtered_records=len(rows),
                resource_type=label,
            ),
        )

    def create_cross_branch_summary(
        self,
        data: Iterable[Record],
        branch_names: Mapping[str, str],
    ) -> CrossBranchSummary:
        """Group rows carrying a branchId into per-branch buckets, first-seen order."""
        grouped: Dict[str, List[Record]] = {}
        for row in data:
            if SUMMARY_BRANCH_FIELD not in row:
                continue
            grouped.setdefault(row[SUMMARY_BRANCH_FIELD], []).append(row)

        buckets = tuple(
            BranchBucket(
                branch_id=branch_id,
                branch_name=branch_names.get(branch_id, UNKNOWN_BRANCH_NAME),
                count=len(items),
                items=tuple(items),
            )
            for branch_id, items in grouped.items()
        )
        return CrossBranchSummary(
            buckets=buckets,
            total_branches=len(buckets),
            total_items=sum(bucket.count for bucket in buckets),
        )

    def process_api_response(
        self,
        data: Sequence[Record],
        access_result: AccessResult,
        resource_type: Union[ResourceType, str, None] = None,
        options: Optional[ResponseOptions] = None,
    ) -> DataAccessResponse:
        options = options or ResponseOptions()
        filtered = self.filter_data_by_access(data, access_result, resource_type)

        rows = filtered.filtered_data
        if options.sort_by:
            rows = _sort_rows(rows, options.sort_by, options.sort_order == "desc")

        metadata = filtered.metadata
        if options.include_summary and access_result.allowed:
            metadata = replace(
                metadata,
                summary=self.create_cross_branch_summary(rows, options.branch_names),
            )

        return DataAccessResponse(
            success=access_result.allowed,
            data=rows if access_result.allowed else None,
            access_result=access_result,
            metadata=metadata,
        )

    def build_branch_query(
        self,
        branch_ids: Iterable[str],
        resource_type: Union[ResourceType, str, None],
        filters: Optional[Mapping[str, FilterValue]] = None,
    ) -> BranchQuery:
        return self._query_builder.build_branch_query(branch_ids, resource_type, filters)

    def create_audit_log(
        self,
        user_id: str,
        branch_id: str,
        operation: str,
        resource_type: Union[ResourceType, str],
        access_result: AccessResult,
        metadata: Optional[Mapping[str, Any]] = None,
        occurred_at: Optional[datetime] = None,
    ) -> AccessAuditRecord:
        return create_audit_log(
            user_id=user_id,
            branch_id=branch_id,
            operation=operation,
            resource_type=resource_type,
            access_result=access_result,
            occurred_at=occurred_at or self._clock.now_utc(),
            metadata=metadata,
        )
