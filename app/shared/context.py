"""Request context management using contextvars.

Async-safe storage for request-scoped data: the acting user (taken from the
actor header; authentication happens upstream) and the request id.

Usage:
    set_current_actor("user123")
    actor_id = get_current_actor_id()
"""

from contextvars import ContextVar

_current_actor_id: ContextVar[str | None] = ContextVar("current_actor_id", default=None)
_current_request_id: ContextVar[str | None] = ContextVar(
    "current_request_id", default=None
)


def set_current_actor(actor_id: str | None) -> None:
    """Set the acting user for this request (None when the header is absent)."""
    _current_actor_id.set(actor_id.strip() if actor_id and actor_id.strip() else None)


def get_current_actor_id() -> str | None:
    """Return the current actor ID, or None if the request carried none."""
    return _current_actor_id.get()


def set_request_id(request_id: str | None) -> None:
    _current_request_id.set(request_id)


def get_request_id() -> str | None:
    return _current_request_id.get()


def clear_context() -> None:
    """Reset actor and request id (end of request)."""
    _current_actor_id.set(None)
    _current_request_id.set(None)
