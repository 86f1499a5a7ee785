"""X-Request-ID propagation (raw ASGI).

A caller-supplied id is kept only if it is a short token of letters, digits,
``_`` or ``-``; anything else is replaced so it cannot forge log lines.
"""

import re
import uuid
from typing import Callable

from app.shared.context import set_request_id

_ACCEPTED_ID = re.compile(r"[A-Za-z0-9_-]{1,64}")


def get_header(scope: dict, name: str) -> str | None:
    """First value of header ``name`` in an ASGI scope, or None."""
    wanted = name.lower().encode()
    return next(
        (value.decode("utf-8", errors="replace") for key, value in scope.get("headers", []) if key.lower() == wanted),
        None,
    )


def sanitize_request_id(raw: str | None) -> str:
    candidate = (raw or "").strip()
    return candidate if _ACCEPTED_ID.fullmatch(candidate) else str(uuid.uuid4())


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    response_header = header_name.lower().encode()

    async def middleware(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        request_id = sanitize_request_id(get_header(scope, header_name))
        scope.setdefault("state", {})["request_id"] = request_id
        set_request_id(request_id)

        async def send_with_id(message: dict) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [*message.get("headers", []), (response_header, request_id.encode())]
            await send(message)

        try:
            await app(scope, receive, send_with_id)
        finally:
            set_request_id(None)

    return middleware
