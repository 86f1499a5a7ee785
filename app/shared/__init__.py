"""Shared utilities: request context, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.context import (
    clear_context,
    get_current_actor_id,
    get_request_id,
    set_current_actor,
    set_request_id,
)
from app.shared.utils import ensure_utc, generate_cuid, utc_now

__all__ = [
    "set_current_actor",
    "get_current_actor_id",
    "set_request_id",
    "get_request_id",
    "clear_context",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
