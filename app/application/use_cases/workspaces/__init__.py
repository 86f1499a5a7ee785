"""Workspace use cases: phase workflow and child-entity mutations."""

from app.application.use_cases.workspaces.workspace_operations import WorkspaceService

__all__ = ["WorkspaceService"]
