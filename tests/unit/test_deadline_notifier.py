"""Unit tests for the deadline service notifiers (httpx MockTransport)."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from app.application.dtos.workspace import DeadlineDelegation, DeadlineFulfilment
from app.infrastructure.services import HttpDeadlineNotifier, LogOnlyDeadlineNotifier

FULFILMENT = DeadlineFulfilment(
    deadline_id="deadline-9",
    workspace_id="ws-1",
    filing_number="2026.001.234567",
    filed_at=datetime(2026, 3, 2, 14, 30, tzinfo=timezone.utc),
    closed_by="lawyer-1",
)
DELEGATION = DeadlineDelegation(
    deadline_id="deadline-9",
    workspace_id="ws-1",
    responsible_id="lawyer-2",
    previous_responsible_id="lawyer-1",
    delegated_by="partner-1",
    reason="Férias",
)


async def test_posts_fulfilment() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        notifier = HttpDeadlineNotifier(client, "https://deadlines.example.com/api/")
        await notifier.notify_fulfilled(FULFILMENT)

    assert len(seen) == 1
    assert seen[0].method == "POST"
    assert str(seen[0].url) == "https://deadlines.example.com/api/deadlines/deadline-9/fulfilled"
    assert json.loads(seen[0].content) == {
        "workspace_id": "ws-1",
        "filing_number": "2026.001.234567",
        "filed_at": "2026-03-02T14:30:00+00:00",
        "closed_by": "lawyer-1",
    }


async def test_error_status_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    async with httpx.AsyncClient(transport=transport) as client:
        await HttpDeadlineNotifier(client, "https://deadlines.example.com").notify_fulfilled(FULFILMENT)
    assert "HTTP 500" in caplog.text


async def test_unreachable_service_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        await HttpDeadlineNotifier(client, "https://deadlines.example.com").notify_fulfilled(FULFILMENT)
    assert "unreachable" in caplog.text


async def test_log_only_notifier(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("INFO"):
        await LogOnlyDeadlineNotifier().notify_fulfilled(FULFILMENT)
    assert "deadline-9" in caplog.text


async def test_posts_delegation() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        await HttpDeadlineNotifier(client, "https://deadlines.example.com").notify_delegated(DELEGATION)

    assert str(seen[0].url) == "https://deadlines.example.com/deadlines/deadline-9/responsible"
    assert json.loads(seen[0].content) == {
        "workspace_id": "ws-1",
        "responsible_id": "lawyer-2",
        "previous_responsible_id": "lawyer-1",
        "delegated_by": "partner-1",
        "reason": "Férias",
    }


async def test_rejected_delegation_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    async with httpx.AsyncClient(transport=transport) as client:
        await HttpDeadlineNotifier(client, "https://deadlines.example.com").notify_delegated(DELEGATION)
    assert "rejected delegation of deadline-9: HTTP 404" in caplog.text


async def test_log_only_delegation(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("INFO"):
        await LogOnlyDeadlineNotifier().notify_delegated(DELEGATION)
    assert "delegated to lawyer-2" in caplog.text
