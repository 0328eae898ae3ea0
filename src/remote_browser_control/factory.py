"""Factories for constructing components from configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .actions.catalog import ActionCatalog, build_catalog
from .actions.executor import ActionExecutor
from .browser.base import BrowserProvider
from .browser.playwright_session import PlaywrightBrowserProvider
from .config import BrowserConfig, NotificationConfig, ScreenshotConfig, ServerConfig
from .notifications.base import ConsoleNotifier, LoggingNotifier, Notifier, NullNotifier
from .resources.store import ScreenshotStore
from .sessions.registry import SessionRegistry


@dataclass
class ControlSurface:
    """Wired-up components serving one process."""

    provider: BrowserProvider
    registry: SessionRegistry
    store: ScreenshotStore
    executor: ActionExecutor
    catalog: ActionCatalog

    async def shutdown(self) -> None:
        try:
            await self.registry.close_all()
        finally:
            await self.provider.shutdown()


def build_provider(config: BrowserConfig) -> BrowserProvider:
    return PlaywrightBrowserProvider(config)


def build_notifier(config: NotificationConfig) -> Notifier:
    channel = config.channel.lower()
    if channel == "console":
        return ConsoleNotifier()
    if channel == "log":
        return LoggingNotifier()
    if channel == "none":
        return NullNotifier()
    raise ValueError(f"Unsupported notification channel: {config.channel}")


def build_store(config: ScreenshotConfig) -> ScreenshotStore:
    return ScreenshotStore(max_per_session=config.max_per_session)


def build_surface(
    config: ServerConfig,
    *,
    provider: Optional[BrowserProvider] = None,
    notifier: Optional[Notifier] = None,
) -> ControlSurface:
    provider = provider or build_provider(config.browser)
    store = build_store(config.screenshots)
    registry = SessionRegistry(provider)
    registry.add_close_listener(store.drop_session)
    executor = ActionExecutor(
        registry,
        store,
        notifier or build_notifier(config.notifications),
        full_page=config.screenshots.full_page,
    )
    catalog = build_catalog(
        executor,
        prefix=config.catalog.prefix,
        capabilities=config.catalog.capabilities,
    )
    return ControlSurface(
        provider=provider,
        registry=registry,
        store=store,
        executor=executor,
        catalog=catalog,
    )
