import threading
from collections.abc import Callable
from datetime import datetime
from typing import Protocol, runtime_checkable

import structlog

from sessiongate.core.modules.session.models import Session, SessionId, SessionPolicy, generate_session_id
from sessiongate.errors import CapacityError
from sessiongate.utils import now

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]

# Attempts at drawing an unused id before giving up
MAX_ID_ATTEMPTS = 3


@runtime_checkable
class SessionStore(Protocol):
    """Persistence for live sessions.

    Every backend treats expired records as absent, even before they are swept,
    and applies mutations to a single id atomically.
    """

    async def open(self) -> None: ...

    async def close(self) -> None: ...

    async def create(self, subject_id: str) -> Session: ...

    async def get(self, session_id: SessionId) -> Session | None: ...

    async def touch(self, session_id: SessionId) -> Session | None: ...

    async def revoke(self, session_id: SessionId) -> None: ...

    async def sweep_expired(self) -> int: ...


class MemorySessionStore:
    """Process-local session table.

    All reads and writes hold one lock and never await while holding it, so the
    store is safe from both an event loop and worker threads.
    """

    def __init__(self, policy: SessionPolicy, clock: Clock = now) -> None:
        self.policy = policy
        self._clock = clock
        self._sessions: dict[SessionId, Session] = {}
        self._lock = threading.Lock()

    async def open(self) -> None:
        """Nothing to prepare for an in-memory table."""

    async def close(self) -> None:
        with self._lock:
            self._sessions.clear()

    async def create(self, subject_id: str) -> Session:
        created_at = self._clock()
        with self._lock:
            for _ in range(MAX_ID_ATTEMPTS):
                session_id = generate_session_id()
                existing = self._sessions.get(session_id)
                if existing is None or existing.is_expired(created_at):
                    break
            else:
                raise CapacityError("Could not allocate a session id")

            session = Session(
                id=session_id,
                subject_id=subject_id,
                created_at=created_at,
                expires_at=self.policy.initial_expiry(created_at),
            )
            self._sessions[session_id] = session
        logger.debug("session_created", subject_id=subject_id, expires_at=session.expires_at.isoformat())
        return session

    async def get(self, session_id: SessionId) -> Session | None:
        at = self._clock()
        with self._lock:
            return self._live(session_id, at)

    async def touch(self, session_id: SessionId) -> Session | None:
        at = self._clock()
        with self._lock:
            session = self._live(session_id, at)
            if session is None or not self.policy.sliding:
                return session
            touched = session.model_copy(update={"expires_at": self.policy.extended_expiry(session, at)})
            self._sessions[session_id] = touched
            return touched

    async def revoke(self, session_id: SessionId) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    async def sweep_expired(self) -> int:
        at = self._clock()
        with self._lock:
            expired = [sid for sid, session in self._sessions.items() if session.is_expired(at)]
            for sid in expired:
                del self._sessions[sid]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _live(self, session_id: SessionId, at: datetime) -> Session | None:
        # Caller holds the lock
        session = self._sessions.get(session_id)
        if session is None or session.is_expired(at):
            return None
        return session
