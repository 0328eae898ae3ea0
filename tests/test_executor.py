from __future__ import annotations

import asyncio
import base64

import pytest

from remote_browser_control.actions.executor import ActionExecutor
from remote_browser_control.errors import ActionFailedError, NoActiveSessionError
from remote_browser_control.models import RESOURCE_LIST_CHANGED, ImageContent, TextContent
from remote_browser_control.notifications.base import CallbackNotifier


async def _press_enter(page) -> str:
    await page.keyboard.press("Enter")
    return "Pressed Enter"


def test_execute_returns_description_then_capture(
    executor, registry, store, notifier, provider, screenshot_bytes
) -> None:
    session_id = asyncio.run(registry.create_session())

    result = asyncio.run(
        executor.execute(verb="press keys", prefix="cu-keypress", operation=_press_enter)
    )

    first, label, image = result.content
    assert first == TextContent(text="Pressed Enter")
    assert isinstance(label, TextContent)
    assert isinstance(image, ImageContent)
    assert image.mime_type == "image/png"
    assert base64.b64decode(image.data) == screenshot_bytes

    resources = store.list(session_id)
    assert len(resources) == 1
    assert label.text == f"Screenshot captured: {resources[0].name}"
    assert resources[0].name.startswith("cu-keypress-")
    assert [event.type for event in notifier.events] == [RESOURCE_LIST_CHANGED]
    assert provider.sessions[0].stub_page.call_names() == ["keyboard.press", "screenshot"]


def test_notification_failure_does_not_fail_action(registry, store) -> None:
    def explode(event) -> None:
        raise RuntimeError("transport closed")

    executor = ActionExecutor(registry, store, CallbackNotifier(explode))
    session_id = asyncio.run(registry.create_session())

    result = asyncio.run(
        executor.execute(verb="press keys", prefix="cu-keypress", operation=_press_enter)
    )

    assert result.content[0].text == "Pressed Enter"
    assert len(store.list(session_id)) == 1


def test_primitive_failure_is_wrapped_without_side_effects(executor, registry, store, notifier, provider) -> None:
    session_id = asyncio.run(registry.create_session())
    provider.sessions[0].stub_page.failures["keyboard.press"] = RuntimeError("target detached")

    with pytest.raises(ActionFailedError) as exc_info:
        asyncio.run(
            executor.execute(verb="press keys", prefix="cu-keypress", operation=_press_enter)
        )

    assert str(exc_info.value) == "Failed to press keys: target detached"
    assert exc_info.value.verb == "press keys"
    assert exc_info.value.original_message == "target detached"
    assert store.list(session_id) == []
    assert notifier.events == []


def test_screenshot_failure_is_wrapped(executor, registry, provider) -> None:
    asyncio.run(registry.create_session())
    provider.sessions[0].stub_page.failures["screenshot"] = RuntimeError("page crashed")

    with pytest.raises(ActionFailedError, match="^Failed to press keys: page crashed$"):
        asyncio.run(
            executor.execute(verb="press keys", prefix="cu-keypress", operation=_press_enter)
        )


def test_missing_page_is_reported_as_action_failure(executor, registry, provider) -> None:
    asyncio.run(registry.create_session())
    provider.sessions[0].drop_page()

    with pytest.raises(ActionFailedError, match="^Failed to type: No active page available$"):
        asyncio.run(executor.execute(verb="type", prefix="cu-type", operation=_press_enter))


def test_session_resolution_errors_are_not_wrapped(executor, notifier) -> None:
    with pytest.raises(NoActiveSessionError):
        asyncio.run(
            executor.execute(verb="press keys", prefix="cu-keypress", operation=_press_enter)
        )
    assert notifier.events == []


def test_full_page_flag_reaches_screenshot(registry, store, provider) -> None:
    executor = ActionExecutor(registry, store, full_page=True)
    asyncio.run(registry.create_session())

    asyncio.run(executor.execute(verb="press keys", prefix="cu-keypress", operation=_press_enter))

    assert provider.sessions[0].stub_page.calls[-1] == ("screenshot", True)
