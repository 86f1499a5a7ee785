"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring (shared HTTP client, deadline
notifier, telemetry, DB engine dispose). No business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.persistence.database import dispose_engine
from app.infrastructure.services.deadline_notifier import (
    HttpDeadlineNotifier,
    LogOnlyDeadlineNotifier,
)
from app.shared.telemetry.telemetry import get_telemetry, set_telemetry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: shared HTTP client and deadline notifier (telemetry is set up in
    create_app so FastAPI can be instrumented before it starts).
    Shutdown: HTTP client close, telemetry shutdown, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    app.state.http_client = httpx.AsyncClient(timeout=settings.deadline_service_timeout_seconds)
    if settings.deadline_service_url:
        app.state.deadline_notifier = HttpDeadlineNotifier(
            app.state.http_client,
            settings.deadline_service_url,
            timeout_seconds=settings.deadline_service_timeout_seconds,
        )
        logger.info("Deadline notifications go to %s", settings.deadline_service_url)
    else:
        app.state.deadline_notifier = LogOnlyDeadlineNotifier()

    yield

    # ---- Shutdown ----
    await app.state.http_client.aclose()
    app.state.http_client = None

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
        logger.info("Telemetry shutdown complete")

    await dispose_engine()
    logger.info("Database engine disposed")
