"""Actor context middleware.

Copies the acting user id from the actor header (X-Actor-ID by default)
into the request context so use cases can stamp who did what. Identity is
asserted by the upstream gateway; this service does not authenticate.
"""

from typing import Callable

from app.middleware.request_id import get_header
from app.shared.context import set_current_actor


def ActorContextMiddleware(app: Callable, header_name: str = "X-Actor-ID") -> Callable:
    """Set the current actor from the header before the route runs. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        actor_id = get_header(scope, header_name)
        set_current_actor(actor_id)
        scope.setdefault("state", {})["actor_id"] = actor_id
        try:
            await app(scope, receive, send)
        finally:
            set_current_actor(None)

    return asgi_app
