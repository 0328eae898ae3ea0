"""Input schemas for catalog actions."""

from __future__ import annotations

from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictInt, StrictStr, create_model

from ..models import MouseButton


def _integral(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


# Whole-number floats such as 120.0 count as integers; strings and bools do not.
Integer = Annotated[StrictInt, BeforeValidator(_integral)]


class ActionInput(BaseModel):
    """Base class for action arguments; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


class Point(BaseModel):
    model_config = ConfigDict(extra="forbid")

    x: Integer
    y: Integer


class ScreenshotInput(ActionInput):
    pass


class ClickInput(ActionInput):
    x: Integer = Field(description="X coordinate (pixels)")
    y: Integer = Field(description="Y coordinate (pixels)")
    button: MouseButton = Field(default=MouseButton.LEFT, description="Mouse button to click with")


class DoubleClickInput(ActionInput):
    x: Integer = Field(description="X coordinate (pixels)")
    y: Integer = Field(description="Y coordinate (pixels)")


class ScrollInput(ActionInput):
    x: Integer = Field(description="X coordinate to move to before scrolling")
    y: Integer = Field(description="Y coordinate to move to before scrolling")
    scroll_x: Integer = Field(description="Horizontal wheel delta")
    scroll_y: Integer = Field(description="Vertical wheel delta")


class TypeInput(ActionInput):
    text: StrictStr = Field(description="Text to type at the current focus")
    delay_ms: Optional[Integer] = Field(
        default=None,
        ge=0,
        description="Optional delay between keystrokes in milliseconds",
    )


class WaitInput(ActionInput):
    ms: Integer = Field(default=1000, ge=0, description="Milliseconds to wait (default 1000)")


class MoveInput(ActionInput):
    x: Integer = Field(description="X coordinate (pixels)")
    y: Integer = Field(description="Y coordinate (pixels)")


class KeypressInput(ActionInput):
    keys: list[StrictStr] = Field(
        min_length=1,
        description="Keys or chords to press in order, e.g. ['Enter'] or ['Shift+Tab', 'ArrowDown']",
    )


class DragInput(ActionInput):
    path: list[Point] = Field(
        min_length=2,
        description="Points to drag through, including start and end",
    )


class SessionIdInput(ActionInput):
    session_id: StrictStr = Field(min_length=1, description="Identifier of the target session")


class EmptyInput(ActionInput):
    pass


_EXPLICIT_MODELS: dict[type[ActionInput], type[ActionInput]] = {}


def with_session_id(model: type[ActionInput]) -> type[ActionInput]:
    """Return ``model`` extended with a required ``session_id`` field."""

    explicit = _EXPLICIT_MODELS.get(model)
    if explicit is None:
        explicit = create_model(
            f"{model.__name__}InSession",
            __base__=model,
            session_id=(
                StrictStr,
                Field(min_length=1, description="Identifier of the target session"),
            ),
        )
        _EXPLICIT_MODELS[model] = explicit
    return explicit
