"""Shared execution contract for every browser action."""

from __future__ import annotations

import base64
import logging
from typing import Awaitable, Callable, Optional

from ..browser.base import BrowserActionError, PageHandle
from ..errors import ActionFailedError
from ..models import ActionResult, ImageContent, NotificationEvent, TextContent
from ..notifications.base import Notifier, NullNotifier
from ..resources.store import ScreenshotNamer, ScreenshotStore
from ..sessions.registry import Session, SessionRegistry

LOGGER = logging.getLogger(__name__)

Operation = Callable[[PageHandle], Awaitable[str]]


class ActionExecutor:
    """Run one primitive against a session and publish the resulting capture.

    An invocation resolves the session, runs the operation, captures and
    registers a screenshot, emits a list-changed notification and returns the
    operation's description followed by the capture. Session resolution
    errors are raised as-is. Anything failing after resolution is re-raised
    as :class:`ActionFailedError` and no partial result is returned.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        store: ScreenshotStore,
        notifier: Optional[Notifier] = None,
        *,
        namer: Optional[ScreenshotNamer] = None,
        full_page: bool = False,
    ) -> None:
        self._registry = registry
        self._store = store
        self._notifier = notifier or NullNotifier()
        self._namer = namer or ScreenshotNamer()
        self._full_page = full_page

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    @property
    def store(self) -> ScreenshotStore:
        return self._store

    async def execute(
        self,
        *,
        verb: str,
        prefix: str,
        operation: Operation,
        session_id: Optional[str] = None,
    ) -> ActionResult:
        session = self._registry.resolve_session(session_id)
        LOGGER.debug("Running %s on session %s", prefix, session.id)
        try:
            page = _require_page(session)
            description = await operation(page)
            capture = await self._capture(session, page, prefix)
        except Exception as exc:
            LOGGER.warning("Action %s failed on session %s: %s", prefix, session.id, exc)
            raise ActionFailedError(verb, str(exc)) from exc
        return ActionResult(content=[TextContent(text=description), *capture])

    async def _capture(
        self,
        session: Session,
        page: PageHandle,
        prefix: str,
    ) -> list[TextContent | ImageContent]:
        raw = await page.screenshot(full_page=self._full_page)
        payload = base64.b64encode(raw).decode("ascii")
        name = self._namer.next_name(prefix)
        resource = self._store.register(session.id, name, payload)
        self._emit_list_changed()
        return [
            TextContent(text=f"Screenshot captured: {resource.name}"),
            ImageContent(data=resource.data, mime_type=resource.mime_type),
        ]

    def _emit_list_changed(self) -> None:
        try:
            self._notifier.notify(NotificationEvent.resource_list_changed())
        except Exception:
            LOGGER.exception("Failed to emit resource list change notification")


def _require_page(session: Session) -> PageHandle:
    page = session.handle.page
    if page is None:
        raise BrowserActionError("No active page available")
    return page
