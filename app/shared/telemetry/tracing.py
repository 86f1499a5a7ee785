"""Span helpers for workspace operations."""

import asyncio
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from app.domain.exceptions import WorkspaceException

# Keyword arguments copied onto spans; free text (titles, comments, feedback) never is.
_RECORDED_ARGS = frozenset({
    "workspace_id", "deadline_id", "deadline_type", "document_id", "item_id",
    "approval_id", "comment_id", "thesis_id", "version_id", "responsible_id",
    "target_phase", "viewing_phase",
    "expected_version", "locked", "checked", "status", "kind", "action",
    "page", "per_page", "as_principal",
})

_tracer = trace.get_tracer(__name__)


@contextmanager
def _operation_span(name: str, attributes: dict | None, kwargs: dict) -> Iterator[trace.Span]:
    with _tracer.start_as_current_span(name, attributes=attributes, record_exception=False) as span:
        for key, value in kwargs.items():
            if value is not None and key.lower() in _RECORDED_ARGS:
                span.set_attribute(f"arg.{key}", str(value))
        try:
            yield span
        except WorkspaceException as e:
            # Business rejections are expected outcomes; the code is enough.
            span.set_attribute("workspace.error_code", e.error_code)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
        except Exception as e:
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
        span.set_status(Status(StatusCode.OK))


def traced(operation_name: str | None = None, attributes: dict | None = None) -> Callable:
    """Run the decorated callable inside a span named ``operation_name``.

    Works for coroutines and plain functions. Allowlisted keyword arguments
    become ``arg.*`` attributes; domain rejections set ``workspace.error_code``.
    """

    def decorator(func: Callable) -> Callable:
        name = operation_name or f"{func.__module__}.{func.__name__}"

        if asyncio.iscoroutinefunction(func):

            @wraps(func)
            async def run_async(*args: Any, **kwargs: Any) -> Any:
                with _operation_span(name, attributes, kwargs):
                    return await func(*args, **kwargs)

            return run_async

        @wraps(func)
        def run(*args: Any, **kwargs: Any) -> Any:
            with _operation_span(name, attributes, kwargs):
                return func(*args, **kwargs)

        return run

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes(attributes)


def get_trace_id() -> str | None:
    """Current trace id as 32 hex chars, or None outside a span."""
    context = trace.get_current_span().get_span_context()
    return format(context.trace_id, "032x") if context.is_valid else None
