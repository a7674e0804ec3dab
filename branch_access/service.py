"""
Branch Access Core - Branch Security Service
==============================================
Caller-facing surface for presentation-layer data fetchers and API
handlers. Holds one user's branch context and current session, and
wires the decision engine, session registry, mediator, rate limiter
and audit sink together.

Typical flow:
    service.establish_session(user_id)
    result = service.check_access(request)
    service.log_operation(None, request.operation, request.resource_type, ...)
    rows = <external fetch scoped by service.build_branch_query(...)>
    response = service.process_api_response(rows, result, resource_type)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from branch_access.audit.sinks import AuditSink
from branch_access.config.settings import BranchSecurityConfig
from branch_access.mediation.mediator import (
    DataAccessMediator,
    DataAccessResponse,
    FilteredData,
    Record,
    ResponseOptions,
)
from branch_access.mediation.query import BranchQuery, FilterValue
from branch_access.policy.engine import AccessControlEngine, validate_branch_access
from branch_access.policy.result import AccessResult
from branch_access.policy.types import AccessRequest, BranchDataContext, ResourceType
from branch_access.security.ratelimit import RateLimiter, RateLimitResult
from branch_access.sessions.models import SessionReport
from branch_access.sessions.registry import SessionRegistry
from branch_access.time.clock import Clock, SystemClock

logger = logging.getLogger("branch_access.policy")
audit_logger = logging.getLogger("branch_access.audit")


class BranchSecurityService:
    def __init__(
        self,
        context: BranchDataContext,
        config: Optional[BranchSecurityConfig] = None,
        *,
        registry: Optional[SessionRegistry] = None,
        engine: Optional[AccessControlEngine] = None,
        mediator: Optional[DataAccessMediator] = None,
        rate_limiter: Optional[RateLimiter] = None,
        audit_sink: Optional[AuditSink] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = config or BranchSecurityConfig()
        self._clock = clock or SystemClock()
        self._context = context
        self._registry = registry if registry is not None else SessionRegistry(self._config, clock=self._clock)
        self._engine = engine if engine is not None else AccessControlEngine(self._config)
        self._mediator = mediator if mediator is not None else DataAccessMediator(clock=self._clock)
        self._rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter(clock=self._clock)
        self._audit_sink = audit_sink
        self._user_id: Optional[str] = None
        self._session_id: Optional[str] = None

    @property
    def config(self) -> BranchSecurityConfig:
        return self._config

    @property
    def context(self) -> BranchDataContext:
        return self._context

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    # ── Session lifecycle ─────────────────────────────────────

    def establish_session(self, user_id: str) -> str:
        """Open a session at the current branch, replacing any session held."""
        self.end_session()
        self._session_id = self._registry.create_session(user_id, self._context.current_branch.id)
        self._user_id = user_id
        return self._session_id

    def end_session(self) -> bool:
        if self._session_id is None:
            return False
        ended = self._registry.end_session(self._session_id)
        self._session_id = None
        return ended

    def switch_branch(self, branch_id: str) -> bool:
        """
        Make another accessible branch current.

        Requires the switch-branch or view-all permission and a branch
        reachable from the current context. A held session is closed
        and a new one is opened at the new branch.
        """
        permissions = self._context.user_permissions
        if not (permissions.can_switch_branch or permissions.can_view_all_branches):
            logger.info(f"Branch switch to {branch_id} refused: no switch permission")
            return False

        current = self._context.current_branch
        if not validate_branch_access(
            current.id,
            branch_id,
            permissions,
            frozenset(self._context.accessible_branch_ids()),
        ):
            logger.info(f"Branch switch to {branch_id} refused: branch not accessible")
            return False

        target = self._context.find_accessible(branch_id)
        if target is None:
            # Same branch, or a view-all user naming a branch outside the list.
            if branch_id != current.id:
                logger.info(f"Branch switch to {branch_id} refused: branch details unknown")
                return False
            return True

        accessible = tuple(self._context.accessible_branches)
        if all(branch.id != current.id for branch in accessible):
            accessible = accessible + (current,)
        self._context = replace(self._context, current_branch=target, accessible_branches=accessible)

        if self._session_id is not None and self._user_id is not None:
            self.establish_session(self._user_id)
        logger.info(f"Switched current branch from {current.id} to {target.id}")
        return True

    # ── Decisions ─────────────────────────────────────────────

    def check_access(self, request: AccessRequest, metadata: Optional[Mapping[str, Any]] = None) -> AccessResult:
        result = self._engine.check_access(request, self._context)

        if result.allowed:
            logger.debug(
                f"Access granted to {request.user_id} for {request.operation.value} "
                f"{request.resource_type.value} on {request.target_branch_id}: {result.reason}"
            )
        else:
            logger.info(
                f"Access denied to {request.user_id} for {request.operation.value} "
                f"{request.resource_type.value} on {request.target_branch_id}: {result.reason}"
                + (" (approval required)" if result.requires_approval else "")
            )

        if result.audit_required or self._config.audit_all_operations:
            self._audit(request, result, metadata)
        return result

    def check_rate_limit(self, user_id: str, operation: str) -> RateLimitResult:
        return self._rate_limiter.check_rate_limit(self._context.current_branch.id, user_id, operation)

    def log_operation(
        self,
        session_id: Optional[str],
        operation: str,
        resource_type: Union[ResourceType, str],
        target_branch_id: Optional[str] = None,
    ) -> None:
        """Record an operation on a session (the current one when None). Never raises."""
        session_id = session_id or self._session_id
        if session_id is None:
            return
        self._registry.log_access(session_id, operation, resource_type, target_branch_id)

    # ── Data ──────────────────────────────────────────────────

    def filter_data_by_access(
        self,
        data: Sequence[Record],
        access_result: AccessResult,
        resource_type: Union[ResourceType, str, None] = None,
    ) -> FilteredData:
        return self._mediator.filter_data_by_access(data, access_result, resource_type)

    def process_api_response(
        self,
        data: Sequence[Record],
        access_result: AccessResult,
        resource_type: Union[ResourceType, str, None] = None,
        options: Optional[ResponseOptions] = None,
    ) -> DataAccessResponse:
        """Mediator response; branch names default to the context's branches."""
        options = options or ResponseOptions()
        if not options.branch_names:
            options = replace(options, branch_names=self._context.branch_names())
        return self._mediator.process_api_response(data, access_result, resource_type, options)

    def build_branch_query(
        self,
        resource_type: Union[ResourceType, str, None],
        filters: Optional[Mapping[str, FilterValue]] = None,
        branch_ids: Optional[Iterable[str]] = None,
    ) -> BranchQuery:
        """Scope to the given branches, or to the current branch when omitted."""
        ids = tuple(branch_ids) if branch_ids is not None else (self._context.current_branch.id,)
        return self._mediator.build_branch_query(ids, resource_type, filters)

    # ── Session reads ─────────────────────────────────────────

    def get_session_report(self, session_id: Optional[str] = None) -> Optional[SessionReport]:
        session_id = session_id or self._session_id
        if session_id is None:
            return None
        return self._registry.get_session_report(session_id)

    def is_session_valid(self, session_id: Optional[str] = None) -> bool:
        session_id = session_id or self._session_id
        if session_id is None:
            return False
        return self._registry.validate_session(session_id)

    # ── Internals ─────────────────────────────────────────────

    def _audit(
        self,
        request: AccessRequest,
        result: AccessResult,
        metadata: Optional[Mapping[str, Any]],
    ) -> None:
        if self._audit_sink is None:
            return
        extra = {
            "current_branch_id": request.current_branch_id,
            "user_role": request.user_role,
            "session_id": self._session_id,
        }
        if metadata:
            extra.update(metadata)
        record = self._mediator.create_audit_log(
            user_id=request.user_id,
            branch_id=request.target_branch_id,
            operation=request.operation,
            resource_type=request.resource_type,
            access_result=result,
            metadata=extra,
            occurred_at=request.timestamp,
        )
        try:
            self._audit_sink.record(record)
        except Exception:
            # Audit write failures never fail the decision.
            audit_logger.exception(
                f"Audit sink failed for user {request.user_id} on {request.target_branch_id}"
            )
