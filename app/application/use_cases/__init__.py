"""Application use cases: one entry point per workflow."""

from app.application.use_cases.workspaces import WorkspaceService

__all__ = ["WorkspaceService"]
