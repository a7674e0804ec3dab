"""
Branch Access Core - Session Registry
=======================================
Explicit session store: holds the session map and an injected clock.
Passed by reference to whatever needs it; there is no module-level
instance.

Guarantees:
- Session ids are unique for the lifetime of the registry.
- Mutations (create, log, validate, end, cleanup) are serialized by
  a per-registry lock.
- The access log is capped: once it exceeds 100 entries only the
  most recent 50 are kept.
- Expiry is fail-safe: idle time equal to the timeout already counts
  as expired, and an expired session is never refreshed.
"""

from __future__ import annotations

import copy
import logging
import secrets
import string
import threading
from collections import Counter
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from branch_access.config.settings import BranchSecurityConfig
from branch_access.errors import SessionLimitError
from branch_access.sessions.models import AccessLogEntry, Session, SessionReport
from branch_access.time.clock import Clock, SystemClock
from branch_access.time.temporal import has_elapsed

logger = logging.getLogger("branch_access.sessions")

MAX_ACCESS_LOG_ENTRIES = 100
RETAINED_ACCESS_LOG_ENTRIES = 50

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_SUFFIX_LENGTH = 9

SessionIdFactory = Callable[[datetime], str]


def generate_session_id(now: datetime) -> str:
    """Time-based prefix plus a random base36 suffix: bs_<epoch ms>_<9 chars>."""
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
    return f"bs_{millis}_{suffix}"


class SessionRegistry:
    """Owner of all branch sessions for one process."""

    def __init__(
        self,
        config: Optional[BranchSecurityConfig] = None,
        clock: Optional[Clock] = None,
        id_factory: Optional[SessionIdFactory] = None,
    ) -> None:
        self._config = config or BranchSecurityConfig()
        self._clock = clock or SystemClock()
        self._id_factory = id_factory or generate_session_id
        self._timeout = timedelta(seconds=self._config.session_timeout_seconds)
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    @property
    def timeout(self) -> timedelta:
        return self._timeout

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    # ── Lifecycle ─────────────────────────────────────────────

    def create_session(self, user_id: str, branch_id: str) -> str:
        """
        Open a new active session and return its id.

        Raises SessionLimitError when the user already holds
        max_concurrent_sessions live sessions.
        """
        with self._lock:
            now = self._clock.now_utc()
            live = self._live_sessions_for_user(user_id, now)
            if live >= self._config.max_concurrent_sessions:
                logger.warning(
                    f"Session refused for user {user_id}: "
                    f"{live} live session(s), limit {self._config.max_concurrent_sessions}"
                )
                raise SessionLimitError(user_id, self._config.max_concurrent_sessions)

            session_id = self._mint_id(now)
            self._sessions[session_id] = Session(
                id=session_id,
                user_id=user_id,
                branch_id=branch_id,
                created_at=now,
                last_activity=now,
            )
            logger.info(f"Session {session_id} opened for user {user_id} at branch {branch_id}")

            self._cleanup_locked(now)
            return session_id

    def end_session(self, session_id: str) -> bool:
        """Explicit logout. Returns False for unknown or already inactive ids."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or not session.is_active:
                return False
            session.is_active = False
            logger.info(f"Session {session_id} ended by user {session.user_id}")
            return True

    def log_access(
        self,
        session_id: str,
        operation: str,
        resource_type: str,
        target_branch_id: Optional[str] = None,
        success: bool = True,
    ) -> None:
        """Append to the session's access log. Unknown or expired ids are ignored."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or not session.is_active:
                return

            now = self._clock.now_utc()
            if has_elapsed(session.last_activity, self._timeout, now):
                self._expire(session)
                return

            session.last_activity = now
            session.access_log.append(
                AccessLogEntry(
                    timestamp=now,
                    operation=str(getattr(operation, "value", operation)),
                    resource_type=str(getattr(resource_type, "value", resource_type)),
                    target_branch_id=target_branch_id,
                    success=success,
                )
            )

            if len(session.access_log) > MAX_ACCESS_LOG_ENTRIES:
                session.access_log = session.access_log[-RETAINED_ACCESS_LOG_ENTRIES:]
                logger.debug(
                    f"Session {session_id} access log truncated to "
                    f"{RETAINED_ACCESS_LOG_ENTRIES} entries"
                )

    def validate_session(self, session_id: str) -> bool:
        """True while the session exists, is active and has not idled out."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or not session.is_active:
                return False

            if has_elapsed(session.last_activity, self._timeout, self._clock.now_utc()):
                self._expire(session)
                return False

            return True

    def cleanup_expired_sessions(self, now: Optional[datetime] = None) -> int:
        """Remove idled-out sessions. Returns the number removed."""
        with self._lock:
            return self._cleanup_locked(now or self._clock.now_utc())

    # ── Reads ─────────────────────────────────────────────────

    def get_session_report(self, session_id: str) -> Optional[SessionReport]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None

            now = self._clock.now_utc()
            by_type = Counter(entry.resource_type for entry in session.access_log)
            return SessionReport(
                session_id=session.id,
                user_id=session.user_id,
                branch_id=session.branch_id,
                duration=now - session.created_at,
                total_operations=len(session.access_log),
                operations_by_type=dict(by_type),
                is_active=session.is_active,
                last_activity=session.last_activity,
            )

    def get_session(self, session_id: str) -> Optional[Session]:
        """Detached snapshot; mutating it does not touch the registry."""
        with self._lock:
            session = self._sessions.get(session_id)
            return copy.deepcopy(session) if session is not None else None

    def active_session_count(self, user_id: str) -> int:
        with self._lock:
            return self._live_sessions_for_user(user_id, self._clock.now_utc())

    # ── Internals (caller holds the lock) ─────────────────────

    def _mint_id(self, now: datetime) -> str:
        session_id = self._id_factory(now)
        while session_id in self._sessions:
            session_id = self._id_factory(now)
        return session_id

    def _live_sessions_for_user(self, user_id: str, now: datetime) -> int:
        return sum(
            1
            for s in self._sessions.values()
            if s.user_id == user_id
            and s.is_active
            and not has_elapsed(s.last_activity, self._timeout, now)
        )

    def _expire(self, session: Session) -> None:
        session.is_active = False
        logger.info(f"Session {session.id} expired after {self._timeout} idle")

    def _cleanup_locked(self, now: datetime) -> int:
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if has_elapsed(session.last_activity, self._timeout, now)
        ]
        for session_id in expired:
            self._sessions[session_id].is_active = False
            del self._sessions[session_id]

        if expired:
            logger.info(f"Cleanup removed {len(expired)} expired session(s)")
        return len(expired)
