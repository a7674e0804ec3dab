"""
Branch Access Core - Query Scope Builder
==========================================
Builds canonical scoping filters for the external query layer:
a branch scope (equality for one branch, membership for many) merged
with caller filters and per-resource default conditions.

The output is plain data. Nothing here executes a query.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from branch_access.errors import QueryScopeError
from branch_access.policy.types import ResourceType
from branch_access.time.temporal import TimeWindow

BRANCH_FIELD = "branch_id"
CREATED_AT_FIELD = "created_at"


# ══════════════════════════════════════════════════════════════
# CONDITIONS
# ══════════════════════════════════════════════════════════════

class ConditionOp(str, Enum):
    EQ = "eq"
    NE = "ne"
    IN = "in"
    GTE = "gte"
    BETWEEN = "between"


@dataclass(frozen=True)
class Condition:
    op: ConditionOp
    value: Any

    @classmethod
    def eq(cls, value: Any) -> Condition:
        return cls(ConditionOp.EQ, value)

    @classmethod
    def ne(cls, value: Any) -> Condition:
        return cls(ConditionOp.NE, value)

    @classmethod
    def one_of(cls, values: Iterable[Any]) -> Condition:
        return cls(ConditionOp.IN, tuple(values))

    @classmethod
    def gte(cls, value: Any) -> Condition:
        return cls(ConditionOp.GTE, value)

    @classmethod
    def within(cls, window: TimeWindow) -> Condition:
        return cls(ConditionOp.BETWEEN, window)

    def matches(self, candidate: Any) -> bool:
        """Evaluate against one value; lets callers pre-filter in memory."""
        if self.op == ConditionOp.EQ:
            return candidate == self.value
        if self.op == ConditionOp.NE:
            return candidate != self.value
        if self.op == ConditionOp.IN:
            return candidate in self.value
        if candidate is None:
            return False
        if self.op == ConditionOp.GTE:
            return candidate >= self.value
        return self.value.contains(candidate)

    def to_dict(self) -> dict:
        if self.op == ConditionOp.IN:
            return {self.op.value: list(self.value)}
        if self.op == ConditionOp.BETWEEN:
            return {self.op.value: [self.value.start.isoformat(), self.value.end.isoformat()]}
        return {self.op.value: self.value}


FilterValue = Union[Condition, Any]

DEFAULT_FILTERS: Dict[ResourceType, Dict[str, Condition]] = {
    ResourceType.SALES: {"status": Condition.ne("deleted")},
    ResourceType.STOCK: {"quantity": Condition.gte(0)},
    ResourceType.CUSTOMERS: {"status": Condition.eq("active")},
    ResourceType.EMPLOYEES: {"status": Condition.eq("active")},
}


# ══════════════════════════════════════════════════════════════
# QUERY SHAPES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BranchQuery:
    resource_type: Optional[ResourceType]
    conditions: Mapping[str, Condition]

    @property
    def branch_scope(self) -> Condition:
        return self.conditions[BRANCH_FIELD]

    def matches(self, record: Mapping[str, Any]) -> bool:
        return all(cond.matches(record.get(name)) for name, cond in self.conditions.items())

    def to_dict(self) -> dict:
        return {name: cond.to_dict() for name, cond in self.conditions.items()}


@dataclass(frozen=True)
class Aggregate:
    """
    One per-branch aggregate.

    func: count | sum | avg | sum_product (fields multiplied row-wise)
          | count_below (rows where fields[0] < fields[1])
    """

    name: str
    func: str
    fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AnalyticsQuery:
    resource_type: Optional[ResourceType]
    match: Mapping[str, Condition]
    group_by: Optional[str] = None
    aggregates: Tuple[Aggregate, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        stages: list[dict] = [
            {"match": {name: cond.to_dict() for name, cond in self.match.items()}}
        ]
        if self.group_by is not None:
            stages.append({
                "group": {
                    "by": self.group_by,
                    "aggregates": [
                        {"name": a.name, "func": a.func, "fields": list(a.fields)}
                        for a in self.aggregates
                    ],
                }
            })
        return {"pipeline": stages}


ANALYTICS_AGGREGATES: Dict[ResourceType, Tuple[Aggregate, ...]] = {
    ResourceType.SALES: (
        Aggregate("total_sales", "sum", ("total_amount",)),
        Aggregate("order_count", "count"),
        Aggregate("average_order_value", "avg", ("total_amount",)),
    ),
    ResourceType.STOCK: (
        Aggregate("total_products", "count"),
        Aggregate("total_value", "sum_product", ("quantity", "unit_price")),
        Aggregate("low_stock_items", "count_below", ("quantity", "min_stock")),
    ),
}


# ══════════════════════════════════════════════════════════════
# BUILDER
# ══════════════════════════════════════════════════════════════

def _coerce_resource_type(resource_type: Union[ResourceType, str, None]) -> Optional[ResourceType]:
    if resource_type is None:
        return None
    try:
        return ResourceType(resource_type)
    except ValueError:
        return None


def _branch_scope(branch_ids: Iterable[str]) -> Condition:
    unique = tuple(dict.fromkeys(branch_ids))
    if not unique:
        raise QueryScopeError("At least one branch id is required to scope a query.")
    if len(unique) == 1:
        return Condition.eq(unique[0])
    return Condition.one_of(unique)


class QueryScopeBuilder:
    """Produces branch-scoped query descriptions for the external query layer."""

    def build_branch_query(
        self,
        branch_ids: Iterable[str],
        resource_type: Union[ResourceType, str, None],
        filters: Optional[Mapping[str, FilterValue]] = None,
    ) -> BranchQuery:
        """
        Branch scope + caller filters + per-resource defaults.

        Caller filters win over defaults for the same field; a filter
        value of None counts as unspecified. The branch scope itself
        cannot be overridden by a caller filter.
        """
        filters = filters or {}
        if BRANCH_FIELD in filters:
            raise QueryScopeError(
                f"'{BRANCH_FIELD}' is set from the branch scope and cannot be filtered directly."
            )

        conditions: Dict[str, Condition] = {BRANCH_FIELD: _branch_scope(branch_ids)}
        for name, value in filters.items():
            if value is None:
                continue
            conditions[name] = value if isinstance(value, Condition) else Condition.eq(value)

        kind = _coerce_resource_type(resource_type)
        for name, default in DEFAULT_FILTERS.get(kind, {}).items():
            conditions.setdefault(name, default)

        return BranchQuery(resource_type=kind, conditions=conditions)

    def build_analytics_query(
        self,
        branch_ids: Iterable[str],
        date_range: TimeWindow,
        resource_type: Union[ResourceType, str, None],
    ) -> AnalyticsQuery:
        """Per-branch aggregation over a closed date range."""
        unique = tuple(dict.fromkeys(branch_ids))
        if not unique:
            raise QueryScopeError("At least one branch id is required to scope a query.")

        match = {
            BRANCH_FIELD: Condition.one_of(unique),
            CREATED_AT_FIELD: Condition.within(date_range),
        }
        kind = _coerce_resource_type(resource_type)
        aggregates = ANALYTICS_AGGREGATES.get(kind)
        if aggregates is None:
            return AnalyticsQuery(resource_type=kind, match=match)
        return AnalyticsQuery(
            resource_type=kind,
            match=match,
            group_by=BRANCH_FIELD,
            aggregates=aggregates,
        )
