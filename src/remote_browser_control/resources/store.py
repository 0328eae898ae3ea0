"""Per-session storage of captured screenshot resources."""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..errors import ResourceNotFoundError, SessionNotFoundError
from ..models import SCREENSHOT_MEDIA_TYPE

LOGGER = logging.getLogger(__name__)

URI_SCHEME = "screenshot"


def resource_uri(session_id: str, name: str) -> str:
    return f"{URI_SCHEME}://{session_id}/{name}"


def parse_resource_uri(uri: str) -> tuple[str, str]:
    """Split a ``screenshot://<session>/<name>`` URI into its parts."""

    prefix = f"{URI_SCHEME}://"
    if not uri.startswith(prefix):
        raise ResourceNotFoundError(uri)
    session_id, _, name = uri[len(prefix) :].partition("/")
    if not session_id or not name:
        raise ResourceNotFoundError(uri)
    return session_id, name


@dataclass(frozen=True)
class ScreenshotResource:
    """A captured screenshot owned by one session."""

    session_id: str
    name: str
    data: str
    mime_type: str = SCREENSHOT_MEDIA_TYPE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def uri(self) -> str:
        return resource_uri(self.session_id, self.name)


class ScreenshotNamer:
    """Derive collision-free resource names from a prefix.

    Names combine a UTC timestamp with microsecond precision and a process
    wide sequence number, so two captures never share a name even when the
    clock does not advance between them.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def next_name(self, prefix: str) -> str:
        with self._lock:
            sequence = next(self._counter)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        return f"{prefix}-{stamp}-{sequence:06d}"


class ScreenshotStore:
    """Append-only screenshot registry keyed by session id."""

    def __init__(self, max_per_session: Optional[int] = None) -> None:
        self._lock = threading.Lock()
        self._resources: Dict[str, List[ScreenshotResource]] = {}
        self._dropped: set[str] = set()
        self._max_per_session = max_per_session

    def register(self, session_id: str, name: str, data: str) -> ScreenshotResource:
        """Append a resource; existing entries are never replaced."""

        resource = ScreenshotResource(session_id=session_id, name=name, data=data)
        with self._lock:
            if session_id in self._dropped:
                raise SessionNotFoundError(session_id, closed=True)
            entries = self._resources.setdefault(session_id, [])
            entries.append(resource)
            self._prune(entries)
        LOGGER.debug("Registered screenshot %s for session %s", name, session_id)
        return resource

    def list(self, session_id: str) -> List[ScreenshotResource]:
        with self._lock:
            return list(self._resources.get(session_id, ()))

    def all(self) -> List[ScreenshotResource]:
        with self._lock:
            return [resource for entries in self._resources.values() for resource in entries]

    def get(self, session_id: str, name: str) -> ScreenshotResource:
        """Return the most recent resource called ``name``."""

        with self._lock:
            for resource in reversed(self._resources.get(session_id, ())):
                if resource.name == name:
                    return resource
        raise ResourceNotFoundError(resource_uri(session_id, name))

    def get_by_uri(self, uri: str) -> ScreenshotResource:
        session_id, name = parse_resource_uri(uri)
        return self.get(session_id, name)

    def drop_session(self, session_id: str) -> None:
        """Forget every resource of a closed session."""

        with self._lock:
            self._dropped.add(session_id)
            removed = self._resources.pop(session_id, [])
        if removed:
            LOGGER.debug("Dropped %d screenshots of session %s", len(removed), session_id)

    def _prune(self, entries: List[ScreenshotResource]) -> None:
        if not self._max_per_session or self._max_per_session < 1:
            return
        overflow = len(entries) - self._max_per_session
        if overflow > 0:
            del entries[:overflow]
