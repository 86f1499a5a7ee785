"""Deadline service notifications: fulfilment on closure and responsible changes.

HttpDeadlineNotifier posts to {deadline_service_url}/deadlines/{id}/fulfilled
and {deadline_service_url}/deadlines/{id}/responsible through the shared
httpx client; LogOnlyDeadlineNotifier is used when no deadline service is
configured. Neither raises: a failed notification never undoes the closure
or the delegation.
"""

from __future__ import annotations

from typing import Any

import httpx

from app.application.dtos.workspace import DeadlineDelegation, DeadlineFulfilment
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class LogOnlyDeadlineNotifier:
    """IDeadlineNotifier that only logs (no deadline service configured)."""

    async def notify_fulfilled(self, fulfilment: DeadlineFulfilment) -> None:
        logger.info(
            "Deadline %s fulfilled by workspace %s (no deadline service configured)",
            fulfilment.deadline_id,
            fulfilment.workspace_id,
        )

    async def notify_delegated(self, delegation: DeadlineDelegation) -> None:
        logger.info(
            "Deadline %s delegated to %s (no deadline service configured)",
            delegation.deadline_id,
            delegation.responsible_id,
        )


class HttpDeadlineNotifier:
    """IDeadlineNotifier backed by the external deadline service's HTTP API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_seconds

    async def _post(self, deadline_id: str, path: str, payload: dict[str, Any], event: str) -> bool:
        """POST to the deadline's resource; log and return False on any HTTP failure."""
        url = f"{self.base_url}/deadlines/{deadline_id}/{path}"
        try:
            response = await self.client.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Deadline service rejected %s of %s: HTTP %s",
                event,
                deadline_id,
                e.response.status_code,
            )
            return False
        except httpx.HTTPError as e:
            logger.warning(
                "Deadline service unreachable for %s of %s: %s", event, deadline_id, e
            )
            return False
        return True

    async def notify_fulfilled(self, fulfilment: DeadlineFulfilment) -> None:
        payload = {
            "workspace_id": fulfilment.workspace_id,
            "filing_number": fulfilment.filing_number,
            "filed_at": fulfilment.filed_at.isoformat() if fulfilment.filed_at else None,
            "closed_by": fulfilment.closed_by,
        }
        if await self._post(fulfilment.deadline_id, "fulfilled", payload, "fulfilment"):
            logger.info("Deadline %s marked fulfilled", fulfilment.deadline_id)

    async def notify_delegated(self, delegation: DeadlineDelegation) -> None:
        payload = {
            "workspace_id": delegation.workspace_id,
            "responsible_id": delegation.responsible_id,
            "previous_responsible_id": delegation.previous_responsible_id,
            "delegated_by": delegation.delegated_by,
            "reason": delegation.reason,
        }
        if await self._post(delegation.deadline_id, "responsible", payload, "delegation"):
            logger.info(
                "Deadline %s now assigned to %s",
                delegation.deadline_id,
                delegation.responsible_id,
            )
