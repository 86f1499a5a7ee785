"""Request body size limit middleware.

Rejects request bodies above max_bytes before they reach the upload route,
for both Content-Length and chunked bodies. Raw ASGI.
"""

import json
from typing import Callable

from app.middleware.request_id import get_header


async def _send_413(send: Callable, max_bytes: int, actual: int) -> None:
    body = json.dumps(
        {
            "error": "UPLOAD_REJECTED",
            "message": f"Request body must be at most {max_bytes} bytes",
            "details": {"max_bytes": max_bytes, "content_length": actual},
        }
    ).encode()
    await send({
        "type": "http.response.start",
        "status": 413,
        "headers": [(b"content-type", b"application/json")],
    })
    await send({"type": "http.response.body", "body": body, "more_body": False})


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    """Reject requests whose body exceeds max_bytes."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        declared = get_header(scope, "content-length")
        if declared is not None and declared.isdigit():
            if int(declared) > max_bytes:
                await _send_413(send, max_bytes, int(declared))
                return
            await app(scope, receive, send)
            return

        # No usable Content-Length: buffer until the limit is crossed.
        chunks: list[bytes] = []
        total = 0
        while True:
            message = await receive()
            if message["type"] != "http.request":
                await app(scope, receive, send)
                return
            chunk = message.get("body", b"")
            total += len(chunk)
            if total > max_bytes:
                await _send_413(send, max_bytes, total)
                return
            chunks.append(chunk)
            if not message.get("more_body", False):
                break

        pending = [
            {"type": "http.request", "body": c, "more_body": i < len(chunks) - 1}
            for i, c in enumerate(chunks)
        ]

        async def replay() -> dict:
            if pending:
                return pending.pop(0)
            return await receive()

        await app(scope, replay, send)

    return asgi_app
