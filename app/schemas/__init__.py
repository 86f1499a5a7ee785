"""Pydantic request/response schemas for the API."""

from app.schemas.health import HealthResponse, ReadinessResponse
from app.schemas.workspace import (
    UploadResponse,
    WorkspaceDetailResponse,
    WorkspaceResponse,
    WorkspaceStatsResponse,
)

__all__ = [
    "HealthResponse",
    "ReadinessResponse",
    "UploadResponse",
    "WorkspaceDetailResponse",
    "WorkspaceResponse",
    "WorkspaceStatsResponse",
]
