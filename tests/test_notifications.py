import io

import pytest
from rich.console import Console

from remote_browser_control.config import NotificationConfig
from remote_browser_control.factory import build_notifier
from remote_browser_control.models import RESOURCE_LIST_CHANGED, NotificationEvent
from remote_browser_control.notifications.base import (
    CallbackNotifier,
    CompositeNotifier,
    ConsoleNotifier,
    LoggingNotifier,
    NullNotifier,
)


def test_resource_list_changed_event_has_no_payload() -> None:
    event = NotificationEvent.resource_list_changed()

    assert event.type == RESOURCE_LIST_CHANGED
    assert event.data == {}
    assert event.message is None


def test_composite_notifier_isolates_failures() -> None:
    received: list[str] = []

    def explode(event: NotificationEvent) -> None:
        raise RuntimeError("sink down")

    notifier = CompositeNotifier(
        [CallbackNotifier(explode), CallbackNotifier(lambda event: received.append(event.type))]
    )

    notifier.notify(NotificationEvent.resource_list_changed())

    assert received == [RESOURCE_LIST_CHANGED]


def test_console_notifier_prints_event_type() -> None:
    buffer = io.StringIO()
    notifier = ConsoleNotifier(Console(file=buffer, width=120))

    notifier.notify(NotificationEvent(type=RESOURCE_LIST_CHANGED, message="grew"))

    assert f"[{RESOURCE_LIST_CHANGED}] grew" in buffer.getvalue()


def test_build_notifier_channels() -> None:
    assert isinstance(build_notifier(NotificationConfig(channel="console")), ConsoleNotifier)
    assert isinstance(build_notifier(NotificationConfig(channel="log")), LoggingNotifier)
    assert isinstance(build_notifier(NotificationConfig(channel="NONE")), NullNotifier)
    with pytest.raises(ValueError):
        build_notifier(NotificationConfig(channel="pager"))
