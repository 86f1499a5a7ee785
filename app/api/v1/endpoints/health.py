"""Health check endpoints for liveness and readiness checks."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.domain.exceptions import DatabaseNotConfiguredException
from app.infrastructure.persistence.database import get_db
from app.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse(version=get_settings().app_version)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Database not configured or unreachable"}},
)
async def readiness_check() -> ReadinessResponse | JSONResponse:
    """Return 200 when the database answers SELECT 1; 503 otherwise."""
    try:
        async for session in get_db():
            await session.execute(text("SELECT 1"))
    except DatabaseNotConfiguredException:
        return JSONResponse(
            status_code=503,
            content=ReadinessResponse(status="not_ready", database="not_configured").model_dump(),
        )
    except (SQLAlchemyError, OSError):
        return JSONResponse(
            status_code=503,
            content=ReadinessResponse(status="not_ready", database="unavailable").model_dump(),
        )
    return ReadinessResponse()
