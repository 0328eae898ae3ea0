"""Model Context Protocol binding for the action catalog and screenshot store."""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any, Optional

import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from pydantic import AnyUrl

from .actions.catalog import ActionDefinition
from .browser.base import BrowserProvider
from .config import ServerConfig
from .factory import ControlSurface, build_notifier, build_surface
from .models import RESOURCE_LIST_CHANGED, ActionResult, ImageContent, NotificationEvent
from .notifications.base import CompositeNotifier, Notifier
from .resources.store import ScreenshotResource

LOGGER = logging.getLogger(__name__)


class ResourceListChangedNotifier(Notifier):
    """Forward list-changed events to the client of the request in flight."""

    def __init__(self, server: Server) -> None:
        self._server = server
        self._pending: set[asyncio.Task[None]] = set()

    def notify(self, event: NotificationEvent) -> None:
        if event.type != RESOURCE_LIST_CHANGED:
            return
        try:
            session = self._server.request_context.session
        except LookupError:
            LOGGER.debug("No request in flight; resource list change not forwarded")
            return
        task = asyncio.get_running_loop().create_task(session.send_resource_list_changed())
        self._pending.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.warning("Failed to send resource list change notification: %s", exc)


def to_tool(definition: ActionDefinition) -> types.Tool:
    return types.Tool(
        name=definition.name,
        description=definition.description,
        inputSchema=definition.input_schema,
    )


def to_content(result: ActionResult) -> list[types.TextContent | types.ImageContent]:
    content: list[types.TextContent | types.ImageContent] = []
    for part in result.content:
        if isinstance(part, ImageContent):
            content.append(types.ImageContent(type="image", data=part.data, mimeType=part.mime_type))
        else:
            content.append(types.TextContent(type="text", text=part.text))
    return content


def to_resource(resource: ScreenshotResource) -> types.Resource:
    return types.Resource(
        uri=AnyUrl(resource.uri),
        name=resource.name,
        description=f"Screenshot captured in session {resource.session_id}",
        mimeType=resource.mime_type,
    )


def create_server(
    config: ServerConfig,
    *,
    provider: Optional[BrowserProvider] = None,
) -> tuple[Server, ControlSurface]:
    """Build an MCP server exposing the catalog as tools and captures as resources."""

    server: Server = Server(config.server_name)
    notifier = CompositeNotifier(
        [ResourceListChangedNotifier(server), build_notifier(config.notifications)]
    )
    surface = build_surface(config, provider=provider, notifier=notifier)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return [to_tool(definition) for definition in surface.catalog]

    @server.call_tool()
    async def handle_call_tool(
        name: str,
        arguments: dict[str, Any] | None,
    ) -> list[types.TextContent | types.ImageContent]:
        result = await surface.catalog.dispatch(name, arguments or {})
        return to_content(result)

    @server.list_resources()
    async def handle_list_resources() -> list[types.Resource]:
        return [to_resource(resource) for resource in surface.store.all()]

    @server.read_resource()
    async def handle_read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        resource = surface.store.get_by_uri(str(uri))
        return [
            ReadResourceContents(
                content=base64.b64decode(resource.data),
                mime_type=resource.mime_type,
            )
        ]

    return server, surface


async def serve_stdio(
    config: ServerConfig,
    *,
    provider: Optional[BrowserProvider] = None,
) -> None:
    """Serve over stdio until the client disconnects, then close every session."""

    server, surface = create_server(config, provider=provider)
    LOGGER.info("Serving %d actions over stdio", len(surface.catalog))
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(
                    notification_options=NotificationOptions(resources_changed=True),
                ),
            )
    finally:
        await surface.shutdown()
