from __future__ import annotations

from typing import Any, Optional

import pytest

from remote_browser_control.actions.catalog import ActionCatalog, build_catalog
from remote_browser_control.actions.executor import ActionExecutor
from remote_browser_control.browser.base import BrowserProvider, BrowserSession
from remote_browser_control.models import NotificationEvent
from remote_browser_control.notifications.base import Notifier
from remote_browser_control.resources.store import ScreenshotStore
from remote_browser_control.sessions.registry import SessionRegistry

SCREENSHOT_BYTES = b"\x89PNG-stub"


class StubMouse:
    def __init__(self, page: "StubPage") -> None:
        self._page = page

    async def move(self, x: float, y: float, *, steps: Optional[int] = None) -> None:
        self._page.record("mouse.move", x, y)

    async def click(self, x: float, y: float, *, button: str = "left") -> None:
        self._page.record("mouse.click", x, y, button)

    async def dblclick(self, x: float, y: float) -> None:
        self._page.record("mouse.dblclick", x, y)

    async def down(self) -> None:
        self._page.record("mouse.down")

    async def up(self) -> None:
        self._page.record("mouse.up")

    async def wheel(self, delta_x: float, delta_y: float) -> None:
        self._page.record("mouse.wheel", delta_x, delta_y)


class StubKeyboard:
    def __init__(self, page: "StubPage") -> None:
        self._page = page

    async def type(self, text: str, *, delay: Optional[float] = None) -> None:
        self._page.record("keyboard.type", text, delay)

    async def press(self, key: str) -> None:
        self._page.record("keyboard.press", key)


class StubPage:
    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.failures: dict[str, Exception] = {}
        self.mouse = StubMouse(self)
        self.keyboard = StubKeyboard(self)

    def record(self, name: str, *args: Any) -> None:
        if name in self.failures:
            raise self.failures[name]
        self.calls.append((name, *args))

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    async def screenshot(self, **kwargs: Any) -> bytes:
        self.record("screenshot", kwargs.get("full_page"))
        return SCREENSHOT_BYTES

    async def wait_for_timeout(self, timeout: float) -> None:
        self.record("wait_for_timeout", timeout)


class StubBrowserSession(BrowserSession):
    def __init__(self) -> None:
        self._page: Optional[StubPage] = StubPage()
        self.stub_page = self._page
        self.stopped = False
        self.stop_error: Optional[Exception] = None

    @property
    def page(self) -> Optional[StubPage]:
        return self._page

    def drop_page(self) -> None:
        self._page = None

    async def stop(self) -> None:
        self.stopped = True
        self._page = None
        if self.stop_error is not None:
            raise self.stop_error


class StubBrowserProvider(BrowserProvider):
    def __init__(self) -> None:
        self.sessions: list[StubBrowserSession] = []
        self.open_error: Optional[Exception] = None
        self.shut_down = False

    async def open_session(self) -> StubBrowserSession:
        if self.open_error is not None:
            raise self.open_error
        session = StubBrowserSession()
        self.sessions.append(session)
        return session

    async def shutdown(self) -> None:
        self.shut_down = True


class CollectingNotifier(Notifier):
    def __init__(self) -> None:
        self.events: list[NotificationEvent] = []

    def notify(self, event: NotificationEvent) -> None:
        self.events.append(event)


@pytest.fixture
def provider() -> StubBrowserProvider:
    return StubBrowserProvider()


@pytest.fixture
def store() -> ScreenshotStore:
    return ScreenshotStore()


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def registry(provider: StubBrowserProvider, store: ScreenshotStore) -> SessionRegistry:
    registry = SessionRegistry(provider)
    registry.add_close_listener(store.drop_session)
    return registry


@pytest.fixture
def executor(
    registry: SessionRegistry,
    store: ScreenshotStore,
    notifier: CollectingNotifier,
) -> ActionExecutor:
    return ActionExecutor(registry, store, notifier)


@pytest.fixture
def catalog(executor: ActionExecutor) -> ActionCatalog:
    return build_catalog(executor)


@pytest.fixture
def screenshot_bytes() -> bytes:
    return SCREENSHOT_BYTES
