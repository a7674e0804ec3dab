"""
Branch Access Core - Security Configuration
=============================================
Policy switches, session timeout and session limit for the
branch access core. Values come from admin-configured data
(Django settings in the host project), not from engine code.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

from branch_access.errors import ConfigurationError


# Original camelCase option names, accepted for compatibility with
# configuration exported by the front end.
_CAMEL_CASE_ALIASES = {
    "enforceDataIsolation": "enforce_data_isolation",
    "allowCrossBranchAccess": "allow_cross_branch_access",
    "requireApprovalForSensitiveOperations": "require_approval_for_sensitive_operations",
    "auditAllOperations": "audit_all_operations",
    "sessionTimeout": "session_timeout_minutes",
    "maxConcurrentSessions": "max_concurrent_sessions",
}


# ══════════════════════════════════════════════════════════════
# BRANCH SECURITY CONFIG
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BranchSecurityConfig:
    """
    Recognized policy options.

    enforce_data_isolation is part of the configuration shape but no
    decision consults it. max_concurrent_sessions is enforced by the
    session registry at creation time.
    """

    enforce_data_isolation: bool = True
    allow_cross_branch_access: bool = True
    require_approval_for_sensitive_operations: bool = True
    audit_all_operations: bool = True
    session_timeout_minutes: float = 30
    max_concurrent_sessions: int = 3

    def __post_init__(self) -> None:
        for name in (
            "enforce_data_isolation",
            "allow_cross_branch_access",
            "require_approval_for_sensitive_operations",
            "audit_all_operations",
        ):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(name, "must be a bool")

        timeout = self.session_timeout_minutes
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigurationError(
                "session_timeout_minutes", "must be a positive number of minutes"
            )

        limit = self.max_concurrent_sessions
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ConfigurationError(
                "max_concurrent_sessions", "must be a positive integer"
            )

    @property
    def session_timeout_seconds(self) -> float:
        return float(self.session_timeout_minutes) * 60

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> BranchSecurityConfig:
        """Build a config from snake_case or camelCase keys."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            name = _CAMEL_CASE_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(key, "unknown option")
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def from_django_settings(cls, settings_obj: Optional[Any] = None) -> BranchSecurityConfig:
        """Read settings.BRANCH_SECURITY; defaults when it is absent."""
        if settings_obj is None:
            from django.conf import settings as settings_obj
        values = getattr(settings_obj, "BRANCH_SECURITY", None) or {}
        if not isinstance(values, Mapping):
            raise ConfigurationError("BRANCH_SECURITY", "must be a mapping")
        return cls.from_mapping(values)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}
