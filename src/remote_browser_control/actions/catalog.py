"""Catalog of named, schema-described browser actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional, Sequence

from pydantic import BaseModel, ValidationError

from ..browser.base import PageHandle
from ..errors import ActionValidationError, UnknownActionError
from ..models import ActionResult, Capability, SessionMode
from ..sessions.registry import SessionRegistry
from . import schemas
from .executor import ActionExecutor

LOGGER = logging.getLogger(__name__)

Handler = Callable[[BaseModel], Awaitable[ActionResult]]
Perform = Callable[[PageHandle, Any], Awaitable[str]]

EXPLICIT_SUFFIX = "_in_session"


@dataclass(frozen=True)
class ActionDefinition:
    """A dispatchable action: name, input schema, capability and handler."""

    name: str
    description: str
    input_model: type[BaseModel]
    capability: Capability
    mode: SessionMode
    handler: Handler

    @property
    def input_schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema()

    def validate(self, arguments: Optional[Mapping[str, Any]]) -> BaseModel:
        try:
            return self.input_model.model_validate(dict(arguments or {}))
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'arguments'}: {error['msg']}"
                for error in exc.errors()
            )
            raise ActionValidationError(self.name, details, exc.errors()) from exc

    async def invoke(self, arguments: Optional[Mapping[str, Any]] = None) -> ActionResult:
        params = self.validate(arguments)
        return await self.handler(params)


@dataclass(frozen=True)
class InputAction:
    """Blueprint of one input/output action shared by both session modes."""

    verb: str
    description: str
    input_model: type[schemas.ActionInput]
    failure_verb: str
    prefix: str
    perform: Perform


class ActionCatalog:
    """Flat, append-only list of definitions with derived views."""

    def __init__(self, definitions: Iterable[ActionDefinition] = ()) -> None:
        self._definitions: list[ActionDefinition] = []
        self._by_name: Dict[str, ActionDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: ActionDefinition) -> None:
        if definition.name in self._by_name:
            raise ValueError(f"Duplicate action name: {definition.name}")
        self._definitions.append(definition)
        self._by_name[definition.name] = definition

    def __iter__(self):
        return iter(list(self._definitions))

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @property
    def definitions(self) -> tuple[ActionDefinition, ...]:
        return tuple(self._definitions)

    @property
    def single_session(self) -> tuple[ActionDefinition, ...]:
        return self._by_mode(SessionMode.IMPLICIT)

    @property
    def multi_session(self) -> tuple[ActionDefinition, ...]:
        return self._by_mode(SessionMode.EXPLICIT)

    @property
    def lifecycle(self) -> tuple[ActionDefinition, ...]:
        return self._by_mode(SessionMode.LIFECYCLE)

    def names(self) -> list[str]:
        return [definition.name for definition in self._definitions]

    def get(self, name: str) -> ActionDefinition:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownActionError(name) from None

    def with_capabilities(self, capabilities: Iterable[Capability]) -> "ActionCatalog":
        allowed = set(capabilities)
        return ActionCatalog(d for d in self._definitions if d.capability in allowed)

    async def dispatch(
        self,
        name: str,
        arguments: Optional[Mapping[str, Any]] = None,
    ) -> ActionResult:
        definition = self.get(name)
        LOGGER.info("Dispatching action %s", name)
        return await definition.invoke(arguments)

    def _by_mode(self, mode: SessionMode) -> tuple[ActionDefinition, ...]:
        return tuple(d for d in self._definitions if d.mode is mode)


# Primitive sequences ---------------------------------------------------------


async def _screenshot(page: PageHandle, params: schemas.ScreenshotInput) -> str:
    return "Captured screenshot of the current page"


async def _click(page: PageHandle, params: schemas.ClickInput) -> str:
    button = params.button.value
    await page.mouse.click(params.x, params.y, button=button)
    return f"Clicked at ({params.x}, {params.y}) with {button}"


async def _double_click(page: PageHandle, params: schemas.DoubleClickInput) -> str:
    await page.mouse.dblclick(params.x, params.y)
    return f"Double clicked at ({params.x}, {params.y})"


async def _scroll(page: PageHandle, params: schemas.ScrollInput) -> str:
    await page.mouse.move(params.x, params.y)
    await page.mouse.wheel(params.scroll_x, params.scroll_y)
    return f"Scrolled at ({params.x}, {params.y}) by ({params.scroll_x}, {params.scroll_y})"


async def _type(page: PageHandle, params: schemas.TypeInput) -> str:
    await page.keyboard.type(params.text, delay=params.delay_ms)
    return f"Typed {len(params.text)} characters"


async def _wait(page: PageHandle, params: schemas.WaitInput) -> str:
    await page.wait_for_timeout(params.ms)
    return f"Waited for {params.ms} ms"


async def _move(page: PageHandle, params: schemas.MoveInput) -> str:
    await page.mouse.move(params.x, params.y)
    return f"Moved mouse to ({params.x}, {params.y})"


async def _keypress(page: PageHandle, params: schemas.KeypressInput) -> str:
    for key in params.keys:
        await page.keyboard.press(key)
    return f"Pressed keys: {', '.join(params.keys)}"


async def _drag(page: PageHandle, params: schemas.DragInput) -> str:
    start, *rest = params.path
    await page.mouse.move(start.x, start.y)
    await page.mouse.down()
    for point in rest:
        await page.mouse.move(point.x, point.y)
    await page.mouse.up()
    end = rest[-1]
    return (
        f"Dragged from ({start.x}, {start.y}) to ({end.x}, {end.y}) "
        f"via {len(params.path)} points"
    )


INPUT_ACTIONS: Sequence[InputAction] = (
    InputAction(
        verb="screenshot",
        description="Capture a screenshot of the current page and return it as an image.",
        input_model=schemas.ScreenshotInput,
        failure_verb="take screenshot",
        prefix="cu-screenshot",
        perform=_screenshot,
    ),
    InputAction(
        verb="click",
        description="Click at page coordinates using the mouse.",
        input_model=schemas.ClickInput,
        failure_verb="click",
        prefix="cu-click",
        perform=_click,
    ),
    InputAction(
        verb="double_click",
        description="Double click at page coordinates.",
        input_model=schemas.DoubleClickInput,
        failure_verb="double click",
        prefix="cu-double-click",
        perform=_double_click,
    ),
    InputAction(
        verb="scroll",
        description="Scroll using the mouse wheel after moving to the given coordinates.",
        input_model=schemas.ScrollInput,
        failure_verb="scroll",
        prefix="cu-scroll",
        perform=_scroll,
    ),
    InputAction(
        verb="type",
        description="Type text using the keyboard at the current focus.",
        input_model=schemas.TypeInput,
        failure_verb="type",
        prefix="cu-type",
        perform=_type,
    ),
    InputAction(
        verb="wait",
        description="Wait for a number of milliseconds, then capture the page.",
        input_model=schemas.WaitInput,
        failure_verb="wait",
        prefix="cu-wait",
        perform=_wait,
    ),
    InputAction(
        verb="move",
        description="Move the mouse to page coordinates.",
        input_model=schemas.MoveInput,
        failure_verb="move",
        prefix="cu-move",
        perform=_move,
    ),
    InputAction(
        verb="keypress",
        description="Press one or more keys in order (supports modifier chords such as 'Shift+Tab').",
        input_model=schemas.KeypressInput,
        failure_verb="press keys",
        prefix="cu-keypress",
        perform=_keypress,
    ),
    InputAction(
        verb="drag",
        description=(
            "Drag the mouse along a path: press at the first point, move through "
            "the remaining points, release at the last point."
        ),
        input_model=schemas.DragInput,
        failure_verb="drag",
        prefix="cu-drag",
        perform=_drag,
    ),
)


# Builders --------------------------------------------------------------------


def bind_input_action(
    action: InputAction,
    executor: ActionExecutor,
    *,
    prefix: str,
    explicit: bool,
) -> ActionDefinition:
    """Build the implicit or explicit-session definition of ``action``.

    Both forms share the same primitive sequence and result shaping; only the
    session resolution differs.
    """

    async def handler(params: BaseModel) -> ActionResult:
        session_id = getattr(params, "session_id", None) if explicit else None
        return await executor.execute(
            verb=action.failure_verb,
            prefix=action.prefix,
            operation=lambda page: action.perform(page, params),
            session_id=session_id,
        )

    if explicit:
        return ActionDefinition(
            name=f"{prefix}_{action.verb}{EXPLICIT_SUFFIX}",
            description=f"{action.description} Targets the session given by session_id.",
            input_model=schemas.with_session_id(action.input_model),
            capability=Capability.COMPUTER_USE,
            mode=SessionMode.EXPLICIT,
            handler=handler,
        )
    return ActionDefinition(
        name=f"{prefix}_{action.verb}",
        description=action.description,
        input_model=action.input_model,
        capability=Capability.COMPUTER_USE,
        mode=SessionMode.IMPLICIT,
        handler=handler,
    )


def session_actions(registry: SessionRegistry, *, prefix: str) -> list[ActionDefinition]:
    """Definitions that expose session lifecycle through the catalog."""

    async def create(params: BaseModel) -> ActionResult:
        session_id = await registry.create_session()
        active = registry.active_session_id == session_id
        suffix = " (active)" if active else ""
        return ActionResult.from_text(f"Created session {session_id}{suffix}")

    async def list_(params: BaseModel) -> ActionResult:
        infos = registry.sessions()
        if not infos:
            return ActionResult.from_text("No open sessions")
        lines = [
            f"{info.id}{' (active)' if info.active else ''} created {info.created_at.isoformat()}"
            for info in infos
        ]
        return ActionResult.from_text("\n".join(lines))

    async def close(params: BaseModel) -> ActionResult:
        session_id = params.session_id  # type: ignore[attr-defined]
        await registry.close_session(session_id)
        return ActionResult.from_text(f"Closed session {session_id}")

    async def activate(params: BaseModel) -> ActionResult:
        session_id = params.session_id  # type: ignore[attr-defined]
        registry.activate_session(session_id)
        return ActionResult.from_text(f"Activated session {session_id}")

    def lifecycle(
        verb: str,
        description: str,
        model: type[BaseModel],
        handler: Handler,
    ) -> ActionDefinition:
        return ActionDefinition(
            name=f"{prefix}_session_{verb}",
            description=description,
            input_model=model,
            capability=Capability.SESSION,
            mode=SessionMode.LIFECYCLE,
            handler=handler,
        )

    return [
        lifecycle(
            "create",
            "Open a new browser session. It becomes active when no session is active.",
            schemas.EmptyInput,
            create,
        ),
        lifecycle(
            "list",
            "List open browser sessions in creation order.",
            schemas.EmptyInput,
            list_,
        ),
        lifecycle(
            "close",
            "Close a browser session. The active session is not replaced automatically.",
            schemas.SessionIdInput,
            close,
        ),
        lifecycle(
            "activate",
            "Make a session the target of actions that do not name a session.",
            schemas.SessionIdInput,
            activate,
        ),
    ]


def build_catalog(
    executor: ActionExecutor,
    *,
    prefix: str = "browser_cu",
    capabilities: Optional[Iterable[Capability]] = None,
) -> ActionCatalog:
    """Build the full catalog once: lifecycle, implicit and explicit actions."""

    catalog = ActionCatalog(session_actions(executor.registry, prefix=prefix))
    for action in INPUT_ACTIONS:
        catalog.register(bind_input_action(action, executor, prefix=prefix, explicit=False))
    for action in INPUT_ACTIONS:
        catalog.register(bind_input_action(action, executor, prefix=prefix, explicit=True))
    if capabilities is not None:
        return catalog.with_capabilities(capabilities)
    return catalog
