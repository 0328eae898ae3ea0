from __future__ import annotations

import asyncio
import base64
import types as pytypes

import mcp.types as types

from remote_browser_control.config import ServerConfig
from remote_browser_control.models import ActionResult, ImageContent, NotificationEvent, TextContent
from remote_browser_control.resources.store import ScreenshotResource
from remote_browser_control.server import (
    ResourceListChangedNotifier,
    create_server,
    to_content,
    to_resource,
)


def _config() -> ServerConfig:
    return ServerConfig.model_validate({"notifications": {"channel": "none"}})


def test_to_content_preserves_order() -> None:
    result = ActionResult(
        content=[
            TextContent(text="Moved mouse to (1, 2)"),
            TextContent(text="Screenshot captured: cu-move-1"),
            ImageContent(data="aGVsbG8="),
        ]
    )

    content = to_content(result)

    assert [part.type for part in content] == ["text", "text", "image"]
    assert content[0].text == "Moved mouse to (1, 2)"
    assert content[2].data == "aGVsbG8="
    assert content[2].mimeType == "image/png"


def test_to_resource_uses_screenshot_uri() -> None:
    resource = ScreenshotResource(session_id="abc", name="cu-click-1", data="aGVsbG8=")

    converted = to_resource(resource)

    assert str(converted.uri) == "screenshot://abc/cu-click-1"
    assert converted.name == "cu-click-1"
    assert converted.mimeType == "image/png"


def test_notifier_without_request_is_silent() -> None:
    server, _ = create_server(_config())
    notifier = ResourceListChangedNotifier(server)

    notifier.notify(NotificationEvent.resource_list_changed())


def test_notifier_forwards_to_request_session() -> None:
    sent: list[str] = []

    class FakeSession:
        async def send_resource_list_changed(self) -> None:
            sent.append("list_changed")

    fake_server = pytypes.SimpleNamespace(
        request_context=pytypes.SimpleNamespace(session=FakeSession())
    )
    notifier = ResourceListChangedNotifier(fake_server)  # type: ignore[arg-type]

    async def scenario() -> None:
        notifier.notify(NotificationEvent.resource_list_changed())
        notifier.notify(NotificationEvent(type="something_else"))
        await asyncio.sleep(0)
        await asyncio.sleep(0)

    asyncio.run(scenario())

    assert sent == ["list_changed"]


def test_server_lists_catalog_and_resources(provider) -> None:
    server, surface = create_server(_config(), provider=provider)

    async def scenario():
        await surface.catalog.dispatch("browser_cu_session_create")
        await surface.catalog.dispatch("browser_cu_move", {"x": 1, "y": 2})
        tools = await server.request_handlers[types.ListToolsRequest](
            types.ListToolsRequest(method="tools/list")
        )
        resources = await server.request_handlers[types.ListResourcesRequest](
            types.ListResourcesRequest(method="resources/list")
        )
        await surface.shutdown()
        return tools, resources

    tools, resources = asyncio.run(scenario())

    tool_names = [tool.name for tool in tools.root.tools]
    assert tool_names == surface.catalog.names()
    listed = resources.root.resources
    assert len(listed) == 1
    assert str(listed[0].uri).startswith("screenshot://")
    assert provider.shut_down is True


def test_read_resource_returns_png_bytes(provider, screenshot_bytes) -> None:
    server, surface = create_server(_config(), provider=provider)

    async def scenario():
        await surface.catalog.dispatch("browser_cu_session_create")
        await surface.catalog.dispatch("browser_cu_screenshot")
        resource = surface.store.all()[0]
        return await server.request_handlers[types.ReadResourceRequest](
            types.ReadResourceRequest(
                method="resources/read",
                params=types.ReadResourceRequestParams(uri=resource.uri),
            )
        )

    result = asyncio.run(scenario())

    contents = result.root.contents
    assert len(contents) == 1
    assert contents[0].mimeType == "image/png"
    assert base64.b64decode(contents[0].blob) == screenshot_bytes
