"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, BinaryIO, Protocol

if TYPE_CHECKING:
    from app.application.dtos.workspace import DeadlineDelegation, DeadlineFulfilment


# Storage service interface
class IStorageService(Protocol):
    """Protocol for file storage backends (upload step of the two-step protocol)."""

    async def upload(
        self,
        file_data: BinaryIO,
        storage_ref: str,
        expected_checksum: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Store bytes at storage_ref; return storage_ref, checksum, size, uploaded_at."""

    async def exists(self, storage_ref: str) -> bool:
        """Return True if a file is stored at storage_ref."""

    def public_url(self, storage_ref: str) -> str:
        """Return the URL under which storage_ref is served."""


# Deadline notifier interface
class IDeadlineNotifier(Protocol):
    """Protocol for pushing workspace outcomes to the external deadline service."""

    async def notify_fulfilled(self, fulfilment: DeadlineFulfilment) -> None:
        """Send the notification. Implementations log failures instead of raising."""

    async def notify_delegated(self, delegation: DeadlineDelegation) -> None:
        """Send the new responsible lawyer. Implementations log failures instead of raising."""
