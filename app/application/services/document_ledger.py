"""Document ledger: append-only document history with one current principal.

History is ordered by creation time. The principal draft is tracked both by
flags on each document and by the workspace's principal pointer; the ledger
checks that both agree so the "single current principal" invariant is
mechanically verifiable.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from app.domain.entities.workspace import DocumentEntity
from app.domain.exceptions import (
    PrincipalAlreadyExistsException,
    ResourceNotFoundException,
    ValidationException,
    WorkspaceException,
)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class LedgerInvariantError(WorkspaceException):
    """Raised when stored documents violate the single-principal invariant."""

    def __init__(self, workspace_id: str, reason: str) -> None:
        super().__init__(
            f"Document ledger for workspace {workspace_id} is inconsistent: {reason}",
            "LEDGER_INVARIANT_VIOLATION",
            {"workspace_id": workspace_id, "reason": reason},
        )


class DocumentLedger:
    """Read view over a workspace's documents (never mutates them)."""

    def __init__(
        self,
        workspace_id: str,
        documents: Iterable[DocumentEntity],
        principal_pointer: str | None = None,
    ) -> None:
        self.workspace_id = workspace_id
        indexed = list(enumerate(documents))
        indexed.sort(key=lambda pair: (pair[1].created_at or _EPOCH, pair[0]))
        self.history: list[DocumentEntity] = [d for _, d in indexed]
        self.principal_pointer = principal_pointer

    @property
    def active(self) -> list[DocumentEntity]:
        """Documents not removed (includes superseded versions)."""
        return [d for d in self.history if d.is_active]

    @property
    def principal(self) -> DocumentEntity | None:
        """The current principal draft, or None."""
        current = [d for d in self.history if d.is_current_principal]
        if len(current) > 1:
            raise LedgerInvariantError(
                self.workspace_id,
                f"{len(current)} non-superseded principal documents",
            )
        found = current[0] if current else None
        found_id = found.id if found else None
        if found_id != self.principal_pointer:
            raise LedgerInvariantError(
                self.workspace_id,
                f"principal pointer {self.principal_pointer!r} != {found_id!r}",
            )
        return found

    def get(self, document_id: str) -> DocumentEntity:
        for doc in self.history:
            if doc.id == document_id:
                return doc
        raise ResourceNotFoundException("document", document_id)

    def ensure_can_add(self, as_principal: bool) -> None:
        """add() may not create a second principal; use replace instead."""
        if as_principal:
            current = self.principal
            if current is not None:
                raise PrincipalAlreadyExistsException(self.workspace_id, current.id)

    def ensure_mutable(self, document: DocumentEntity, action: str) -> None:
        """Removed documents and superseded versions are immutable history."""
        if not document.is_active:
            raise ValidationException(
                f"Cannot {action}: document was removed", field="document_id"
            )
        if document.is_superseded:
            raise ValidationException(
                f"Cannot {action}: superseded versions are immutable",
                field="document_id",
            )

    @property
    def superseded_count(self) -> int:
        return sum(1 for d in self.history if d.is_superseded)

    @property
    def pending_count(self) -> int:
        return sum(1 for d in self.active if d.is_pending)

    @property
    def document_count(self) -> int:
        return len(self.active)

    @property
    def total_size(self) -> int:
        return sum(d.file_size or 0 for d in self.active)
