"""Playwright-powered browser session implementation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from ..config import BrowserConfig
from .base import BrowserProvider, BrowserSession

LOGGER = logging.getLogger(__name__)


class PlaywrightBrowserSession(BrowserSession):
    """Browser session backed by one Playwright context and page."""

    def __init__(self, context: BrowserContext, page: Page) -> None:
        self._context: Optional[BrowserContext] = context
        self._page: Optional[Page] = page

    @property
    def page(self) -> Optional[Page]:
        if self._page is None or self._page.is_closed():
            return None
        return self._page

    async def stop(self) -> None:
        LOGGER.debug("Closing Playwright browser context")
        context = self._context
        self._context = None
        self._page = None
        if context is not None:
            await context.close()


class PlaywrightBrowserProvider(BrowserProvider):
    """Launch one browser lazily and hand out an isolated context per session."""

    def __init__(self, config: Optional[BrowserConfig] = None) -> None:
        self._config = config or BrowserConfig()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._launch_lock = asyncio.Lock()

    async def open_session(self) -> PlaywrightBrowserSession:
        browser = await self._ensure_browser()
        viewport = {"width": self._config.viewport_width, "height": self._config.viewport_height}
        context = await browser.new_context(viewport=viewport)
        try:
            page = await context.new_page()
        except Exception:
            await context.close()
            raise
        return PlaywrightBrowserSession(context, page)

    async def shutdown(self) -> None:
        LOGGER.debug("Stopping Playwright browser")
        try:
            if self._browser:
                await self._browser.close()
        finally:
            if self._playwright:
                await self._playwright.stop()
        self._browser = None
        self._playwright = None

    async def _ensure_browser(self) -> Browser:
        async with self._launch_lock:
            if self._browser is not None and self._browser.is_connected():
                return self._browser
            LOGGER.debug("Starting Playwright %s browser", self._config.browser_type)
            if self._playwright is None:
                self._playwright = await async_playwright().start()
            launch_kwargs: dict[str, Any] = {
                "headless": self._config.headless,
                "args": list(self._config.launch_args),
            }
            if self._config.slow_mo_ms is not None:
                launch_kwargs["slow_mo"] = self._config.slow_mo_ms
            launcher = getattr(self._playwright, self._config.browser_type)
            self._browser = await launcher.launch(**launch_kwargs)
            return self._browser
