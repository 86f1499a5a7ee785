"""HTTP middleware: request size limit, request ID, actor context.

Applied in main app; order matters (last added = outermost).
"""

from app.middleware.actor_context import ActorContextMiddleware
from app.middleware.request_id import RequestIDMiddleware
from app.middleware.request_size_limit import RequestSizeLimitMiddleware

__all__ = [
    "ActorContextMiddleware",
    "RequestIDMiddleware",
    "RequestSizeLimitMiddleware",
]
