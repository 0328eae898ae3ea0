"""Notification sinks that forward events to the protocol layer."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional

from rich.console import Console
from rich.markup import escape

from ..models import NotificationEvent

LOGGER = logging.getLogger(__name__)


class Notifier(ABC):
    """Interface for fire-and-forget notification sinks."""

    @abstractmethod
    def notify(self, event: NotificationEvent) -> None:
        """Send a notification event."""


class NullNotifier(Notifier):
    """Notifier that drops every event."""

    def notify(self, event: NotificationEvent) -> None:
        return None


class LoggingNotifier(Notifier):
    """Notifier that records events in the application log."""

    def __init__(self, level: int = logging.DEBUG) -> None:
        self._level = level

    def notify(self, event: NotificationEvent) -> None:
        LOGGER.log(self._level, "Notification %s %s", event.type, event.data or "")


class ConsoleNotifier(Notifier):
    """Print events to the console using Rich.

    Output goes to stderr by default because stdout may carry the protocol
    stream.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console or Console(stderr=True)

    def notify(self, event: NotificationEvent) -> None:
        line = f"[{event.type}] {event.message or ''}".rstrip()
        self._console.print(escape(line), style="cyan")
        if event.data:
            self._console.print(event.data, style="dim")


class CallbackNotifier(Notifier):
    """Adapt a plain callable into a notifier."""

    def __init__(self, callback: Callable[[NotificationEvent], None]) -> None:
        self._callback = callback

    def notify(self, event: NotificationEvent) -> None:
        self._callback(event)


class CompositeNotifier(Notifier):
    """Fan-out notifier; one failing member does not starve the others."""

    def __init__(self, notifiers: Iterable[Notifier]) -> None:
        self._notifiers = list(notifiers)

    def notify(self, event: NotificationEvent) -> None:
        for notifier in self._notifiers:
            try:
                notifier.notify(event)
            except Exception:
                LOGGER.exception("Notifier %s failed for event %s", notifier, event.type)
