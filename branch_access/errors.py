"""
Branch Access Core - Exceptions
=================================
Structured errors for misuse and misconfiguration.

These are NOT access denials. A denied request is an ordinary
Denied result returned by the engine; callers branch on
`result.allowed`, they never catch an exception for it.
"""

from __future__ import annotations


class BranchAccessError(Exception):
    """Base error for the branch access core."""
    pass


class ConfigurationError(BranchAccessError):
    """A configuration value is missing, unknown or out of range."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid configuration for '{field}': {reason}")


class SessionLimitError(BranchAccessError):
    """User already holds the maximum number of concurrent sessions."""

    def __init__(self, user_id: str, limit: int):
        self.user_id = user_id
        self.limit = limit
        super().__init__(
            f"User '{user_id}' already has {limit} active session(s); "
            "end one before opening another."
        )


class QueryScopeError(BranchAccessError):
    """A scoping query cannot be built from the given inputs."""
    pass


class InvalidRecordError(BranchAccessError):
    """A data row handed to the mediator is not a mapping."""

    def __init__(self, index: int, value_type: str):
        self.index = index
        self.value_type = value_type
        super().__init__(
            f"Record at index {index} must be a mapping, got {value_type}."
        )
