"""Error responses for the workspace API.

Every failure leaves the service as ``{"error", "message", "details"?}``.
Workspace errors pick their status from the error code; request-shape
problems are 422; anything unexpected is a logged 500.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import WorkspaceException
from app.shared.telemetry.tracing import get_trace_id

logger = logging.getLogger(__name__)

_NOT_FOUND = 404
_CONFLICT = 409

STATUS_BY_CODE: dict[str, int] = {
    "RESOURCE_NOT_FOUND": _NOT_FOUND,
    "VALIDATION_ERROR": 400,
    "MISSING_FEEDBACK": 400,
    "UPLOAD_REJECTED": 400,
    "PERMISSION_DENIED": 403,
    "READ_ONLY": 403,
    "INVALID_TRANSITION": _CONFLICT,
    "PRINCIPAL_ALREADY_EXISTS": _CONFLICT,
    "APPROVAL_ALREADY_DECIDED": _CONFLICT,
    "PHASE_MISMATCH": _CONFLICT,
    "CONCURRENT_MODIFICATION": _CONFLICT,
    "STORAGE_CONFLICT": _CONFLICT,
    "PRECONDITION_FAILED": 412,
    "WORKSPACE_LOCKED": 423,
    "LEDGER_INVARIANT_VIOLATION": 500,
    "SERVICE_UNAVAILABLE": 503,
    "STORAGE_UNAVAILABLE": 503,
}


def status_for(exc: WorkspaceException) -> int:
    """Status for a workspace error; an ``http_status`` set on the instance overrides the code."""
    override = getattr(exc, "http_status", None)
    return override if override is not None else STATUS_BY_CODE.get(exc.error_code, 400)


def _error(status: int, code: str, message: Any, details: Any = None) -> JSONResponse:
    body: dict[str, Any] = {"error": code, "message": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status, content=body)


async def _on_workspace_error(request: Request, exc: WorkspaceException) -> JSONResponse:
    status = status_for(exc)
    where = f"{request.method} {request.url.path}"
    if status >= 500:
        logger.error("%s failed: %s (%s) trace=%s", where, exc.error_code, exc.message, get_trace_id() or "-")
    else:
        logger.info("%s rejected: %s (%s)", where, exc.error_code, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _serializable(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    # pydantic puts exception instances under ctx; keep their text only.
    out = []
    for error in errors:
        entry = dict(error)
        if "ctx" in entry:
            entry["ctx"] = {key: str(value) for key, value in entry["ctx"].items()}
        out.append(entry)
    return out


async def _on_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(422, "VALIDATION_ERROR", "Request validation failed", _serializable(list(exc.errors())))


async def _on_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, "HTTP_ERROR", exc.detail)


async def _on_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception (trace=%s): %s", get_trace_id() or "-", exc)
    message = str(exc) if get_settings().debug else "Internal server error"
    return _error(500, "INTERNAL_ERROR", message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WorkspaceException, _on_workspace_error)
    app.add_exception_handler(RequestValidationError, _on_request_validation)
    app.add_exception_handler(StarletteHTTPException, _on_http_error)
    app.add_exception_handler(Exception, _on_unexpected)
