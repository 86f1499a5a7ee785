"""Smoke tests for health and app wiring."""

from httpx import AsyncClient

from app.core.config import get_settings


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200, status ok and the app version."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data.get("status") == "ok"
    assert data.get("version") == get_settings().app_version


async def test_health_generates_request_id(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert response.headers.get("X-Request-ID")


async def test_invalid_request_id_is_replaced(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "bad id with spaces"})
    assert response.headers["X-Request-ID"] != "bad id with spaces"


async def test_readiness_reports_database(client: AsyncClient) -> None:
    """GET /api/v1/health/ready is 200 with a reachable database, 503 otherwise."""
    response = await client.get("/api/v1/health/ready")
    assert response.status_code in (200, 503)
    data = response.json()
    assert data["database"] in ("ok", "not_configured", "unavailable")
    if response.status_code == 503:
        assert data["status"] == "not_ready"
