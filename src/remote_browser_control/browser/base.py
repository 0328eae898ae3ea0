"""Browser session abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol


class MouseHandle(Protocol):
    """Mouse primitives exposed by a page."""

    async def move(self, x: float, y: float, *, steps: Optional[int] = None) -> None: ...

    async def click(self, x: float, y: float, *, button: str = "left") -> None: ...

    async def dblclick(self, x: float, y: float) -> None: ...

    async def down(self) -> None: ...

    async def up(self) -> None: ...

    async def wheel(self, delta_x: float, delta_y: float) -> None: ...


class KeyboardHandle(Protocol):
    """Keyboard primitives exposed by a page."""

    async def type(self, text: str, *, delay: Optional[float] = None) -> None: ...

    async def press(self, key: str) -> None: ...


class PageHandle(Protocol):
    """The page-like capability every action operates on."""

    @property
    def mouse(self) -> MouseHandle: ...

    @property
    def keyboard(self) -> KeyboardHandle: ...

    async def screenshot(self, **kwargs: Any) -> bytes: ...

    async def wait_for_timeout(self, timeout: float) -> None: ...


class BrowserActionError(RuntimeError):
    """Raised when a browser handle cannot serve a primitive."""


class BrowserSession(ABC):
    """Interface for one automation-capable browser page."""

    @property
    @abstractmethod
    def page(self) -> Optional[PageHandle]:
        """Return the page, or ``None`` when it is gone."""

    @abstractmethod
    async def stop(self) -> None:
        """Tear down the page and everything it owns."""


class BrowserProvider(ABC):
    """Factory for browser sessions backed by one driver."""

    @abstractmethod
    async def open_session(self) -> BrowserSession:
        """Open a fresh, isolated browser session."""

    @abstractmethod
    async def shutdown(self) -> None:
        """Release driver resources once no session needs them."""
