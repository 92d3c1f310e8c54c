"""Session registry for streaming connections.

Each open SSE connection owns one Session, keyed by an unguessable id.
The registry is the only shared mutable structure in the server; every
operation on it holds one lock, so open/lookup/close are linearizable.

The lock is a ``threading.Lock`` and no operation awaits while holding
it. ``close`` never suspends, so it runs to completion even in
connection teardown paths that are already being cancelled.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from .errors import SessionNotFound
from .transport.sse import SSEStreamTransport

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Session lifecycle states."""

    OPEN = "open"
    CLOSED = "closed"


@dataclass
class Session:
    """A server-tracked identity bound to one outbound stream."""

    session_id: str
    transport: SSEStreamTransport
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    state: SessionState = SessionState.OPEN


def new_session_id() -> str:
    """Generate a session id from the OS CSPRNG (UUID4)."""
    return str(uuid.uuid4())


class SessionRegistry:
    """Concurrency-safe store of active sessions.

    Provides:
    - open(): create a session and its transport
    - lookup(): resolve an id to an open transport
    - close(): idempotent teardown and removal
    - connect(): scoped open with guaranteed close
    """

    def __init__(self, keepalive_interval: float = 15.0) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self._keepalive_interval = keepalive_interval

    def open(self) -> tuple[str, SSEStreamTransport]:
        """Create and store a new open session.

        The session is fully built before it is published, so a concurrent
        lookup sees either nothing or a complete session.
        """
        while True:
            session_id = new_session_id()
            transport = SSEStreamTransport(session_id, self._keepalive_interval)
            session = Session(session_id=session_id, transport=transport)
            with self._lock:
                if session_id in self._sessions:
                    continue
                self._sessions[session_id] = session
                break

        # Transport closing on its own (e.g. stream torn down) deregisters too.
        transport.on_close(lambda: self.close(session_id))
        logger.info(f"Opened session {session_id}")
        return session_id, transport

    def lookup(self, session_id: str) -> SSEStreamTransport:
        """Return the transport for an open session.

        Raises:
            SessionNotFound: Unknown or closed session id
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.state is not SessionState.OPEN:
                raise SessionNotFound(session_id)
            return session.transport

    def close(self, session_id: str) -> bool:
        """Close and remove a session.

        Returns:
            True if this call closed the session, False if it was already gone
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                return False
            session.state = SessionState.CLOSED

        session.transport.close()
        logger.info(f"Closed session {session_id}")
        return True

    @contextmanager
    def connect(self) -> Iterator[tuple[str, SSEStreamTransport]]:
        """Open a session for the duration of a connection.

        Usage:
            with registry.connect() as (session_id, transport):
                async for frame in transport.frames():
                    ...
        """
        session_id, transport = self.open()
        try:
            yield session_id, transport
        finally:
            self.close(session_id)

    def close_all(self) -> int:
        """Close every session. Returns the number closed."""
        with self._lock:
            session_ids = list(self._sessions)
        closed = sum(1 for session_id in session_ids if self.close(session_id))
        if closed:
            logger.info(f"Closed {closed} sessions")
        return closed

    def list_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    @property
    def active_count(self) -> int:
        """Number of open sessions."""
        with self._lock:
            return len(self._sessions)
