"""Shared models used across the remote browser control layer."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field

SCREENSHOT_MEDIA_TYPE = "image/png"
RESOURCE_LIST_CHANGED = "resources/list_changed"


class Capability(str, enum.Enum):
    """Capability tags used to gate which catalog entries are exposed."""

    COMPUTER_USE = "computer_use"
    SESSION = "session"


class SessionMode(str, enum.Enum):
    """How an action picks the session it operates on."""

    IMPLICIT = "implicit"
    EXPLICIT = "explicit"
    LIFECYCLE = "lifecycle"


class MouseButton(str, enum.Enum):
    """Mouse buttons accepted by click actions."""

    LEFT = "left"
    RIGHT = "right"
    MIDDLE = "middle"


class TextContent(BaseModel):
    """Text part of an action result."""

    type: Literal["text"] = "text"
    text: str


class ImageContent(BaseModel):
    """Image part of an action result; ``data`` is base64 encoded."""

    type: Literal["image"] = "image"
    data: str
    mime_type: str = SCREENSHOT_MEDIA_TYPE


ContentPart = Union[TextContent, ImageContent]


class ActionResult(BaseModel):
    """Ordered content returned by a successful action."""

    content: list[ContentPart] = Field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> "ActionResult":
        return cls(content=[TextContent(text=text)])


class NotificationEvent(BaseModel):
    """Event emitted towards the protocol layer."""

    type: str
    message: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def resource_list_changed(cls) -> "NotificationEvent":
        return cls(type=RESOURCE_LIST_CHANGED)
