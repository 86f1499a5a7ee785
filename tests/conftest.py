"""Pytest configuration and fixtures for the deadline workspace service.

Service and API tests run against the in-memory repositories in
tests.support, so they need no database. Repository tests use db_session
and are marked requires_db.
"""

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.dependencies import get_workspace_query_service, get_workspace_service
from app.application.use_cases.workspaces import WorkspaceService
from app.core.limiter import limiter
from app.infrastructure.persistence import database
from app.main import app
from tests.support import InMemoryStore, WorkflowDriver, build_in_memory_service


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def notifier() -> AsyncMock:
    """Stand-in for the deadline service notifier (records notify_fulfilled and notify_delegated calls)."""
    return AsyncMock()


@pytest.fixture
def service(store: InMemoryStore, notifier: AsyncMock) -> WorkspaceService:
    return build_in_memory_service(store, notifier)


@pytest.fixture
def driver(service: WorkspaceService) -> WorkflowDriver:
    return WorkflowDriver(service)


@pytest.fixture
async def client(service: WorkspaceService) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI), backed by the in-memory service."""
    app.dependency_overrides[get_workspace_service] = lambda: service
    app.dependency_overrides[get_workspace_query_service] = lambda: service
    limiter.reset()
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """Database session for repository tests. Rolls back after test.

    Requires DATABASE_URL pointing at a migrated Postgres (alembic upgrade head).
    Skips when it is not configured; run without DB via: pytest -m 'not requires_db'.
    """
    sessions = database.configured_session_factory()
    if sessions is None:
        pytest.skip(
            "Postgres not configured: set DATABASE_URL, then run: alembic upgrade head"
        )
    async with sessions() as session:
        yield session
        await session.rollback()
