"""Registry of open browser sessions and the active-session pointer."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..browser.base import BrowserProvider, BrowserSession
from ..errors import (
    NoActiveSessionError,
    SessionCloseError,
    SessionCreationError,
    SessionNotFoundError,
)

LOGGER = logging.getLogger(__name__)

CloseListener = Callable[[str], None]


@dataclass
class Session:
    """One browser page under control of the registry."""

    id: str
    handle: BrowserSession
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class SessionInfo:
    """Read-only view of a session used for listings."""

    id: str
    created_at: datetime
    active: bool


class SessionRegistry:
    """Track open sessions, which one is active, and their lifecycle.

    Every read and write of the session table and the active id happens under
    one lock, and the lock is never held across an ``await``. Opening and
    tearing down browser handles therefore runs outside the lock, after the
    table has been updated.
    """

    def __init__(self, provider: BrowserProvider) -> None:
        self._provider = provider
        self._lock = threading.Lock()
        self._sessions: Dict[str, Session] = {}
        self._closed: set[str] = set()
        self._active_id: Optional[str] = None
        self._close_listeners: List[CloseListener] = []

    def add_close_listener(self, listener: CloseListener) -> None:
        """Call ``listener(session_id)`` whenever a session is closed."""

        with self._lock:
            self._close_listeners.append(listener)

    @property
    def active_session_id(self) -> Optional[str]:
        with self._lock:
            return self._active_id

    async def create_session(self) -> str:
        """Open a new session; it becomes active if no session is active."""

        try:
            handle = await self._provider.open_session()
        except Exception as exc:
            LOGGER.exception("Failed to open browser session")
            raise SessionCreationError(f"Failed to create session: {exc}") from exc
        session = Session(id=uuid.uuid4().hex, handle=handle)
        with self._lock:
            self._sessions[session.id] = session
            if self._active_id is None:
                self._active_id = session.id
            became_active = self._active_id == session.id
        LOGGER.info("Created session %s (active=%s)", session.id, became_active)
        return session.id

    def list_sessions(self) -> List[str]:
        """Return live session ids in creation order."""

        with self._lock:
            return list(self._sessions)

    def sessions(self) -> List[SessionInfo]:
        with self._lock:
            return [
                SessionInfo(
                    id=session.id,
                    created_at=session.created_at,
                    active=session.id == self._active_id,
                )
                for session in self._sessions.values()
            ]

    def get_session(self, session_id: str) -> Session:
        with self._lock:
            return self._lookup(session_id)

    def activate_session(self, session_id: str) -> Session:
        """Mark ``session_id`` as the target of implicit-mode actions."""

        with self._lock:
            session = self._lookup(session_id)
            self._active_id = session.id
        LOGGER.info("Activated session %s", session_id)
        return session

    def resolve_session(self, explicit_id: Optional[str] = None) -> Session:
        """Return the explicitly addressed session, or the active one."""

        with self._lock:
            if explicit_id is not None:
                return self._lookup(explicit_id)
            if self._active_id is None:
                raise NoActiveSessionError()
            return self._sessions[self._active_id]

    async def close_session(self, session_id: str) -> None:
        """Close a session; closing an unknown or closed id is an error.

        The active id is cleared when the active session closes; no other
        session is promoted in its place.
        """

        with self._lock:
            session = self._lookup(session_id)
            del self._sessions[session_id]
            self._closed.add(session_id)
            if self._active_id == session_id:
                self._active_id = None
            listeners = list(self._close_listeners)
        for listener in listeners:
            try:
                listener(session_id)
            except Exception:
                LOGGER.exception("Close listener %s failed for session %s", listener, session_id)
        LOGGER.info("Closing session %s", session_id)
        try:
            await session.handle.stop()
        except Exception as exc:
            raise SessionCloseError(f"Failed to close session {session_id}: {exc}") from exc

    async def close_all(self) -> None:
        """Close every live session, e.g. on shutdown."""

        for session_id in self.list_sessions():
            try:
                await self.close_session(session_id)
            except SessionNotFoundError:
                continue
            except SessionCloseError:
                LOGGER.exception("Error while closing session %s", session_id)

    def _lookup(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id, closed=session_id in self._closed)
        return session
