"""Error taxonomy surfaced to callers of the control layer."""

from __future__ import annotations

from typing import Any, Optional


class BrowserControlError(RuntimeError):
    """Base class for every error raised by the control layer."""


class SessionError(BrowserControlError):
    """Raised when an action cannot be routed to a live session."""


class NoActiveSessionError(SessionError):
    """Raised when an implicit-mode action runs while no session is active."""

    def __init__(self, message: str = "No active session") -> None:
        super().__init__(message)


class SessionNotFoundError(SessionError):
    """Raised when an explicit session id is unknown or already closed."""

    def __init__(self, session_id: str, *, closed: bool = False) -> None:
        self.session_id = session_id
        self.closed = closed
        if closed:
            message = f"Session {session_id} has been closed"
        else:
            message = f"Session {session_id} not found"
        super().__init__(message)


class SessionCreationError(BrowserControlError):
    """Raised when the browser driver cannot open a new session."""


class SessionCloseError(BrowserControlError):
    """Raised when tearing down a session's browser handle fails."""


class ActionValidationError(BrowserControlError, ValueError):
    """Raised when action arguments do not satisfy the action's schema."""

    def __init__(self, action: str, message: str, errors: Optional[list[Any]] = None) -> None:
        self.action = action
        self.errors = errors or []
        super().__init__(f"Invalid arguments for {action}: {message}")


class ActionFailedError(BrowserControlError):
    """Raised when a browser primitive fails while an action runs."""

    def __init__(self, verb: str, message: str) -> None:
        self.verb = verb
        self.original_message = message
        super().__init__(f"Failed to {verb}: {message}")


class UnknownActionError(BrowserControlError, KeyError):
    """Raised when dispatching a name that is not in the catalog."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown action: {name}")

    def __str__(self) -> str:
        return str(self.args[0])


class ResourceNotFoundError(BrowserControlError, KeyError):
    """Raised when a screenshot resource cannot be located."""

    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(f"Resource not found: {reference}")

    def __str__(self) -> str:
        return str(self.args[0])
