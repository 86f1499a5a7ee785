"""Unit tests for the document ledger (history order, single principal)."""

from datetime import datetime, timedelta, timezone

import pytest

from app.application.services.document_ledger import DocumentLedger, LedgerInvariantError
from app.domain.entities.workspace import DocumentEntity
from app.domain.enums import WorkspacePhase
from app.domain.exceptions import (
    PrincipalAlreadyExistsException,
    ResourceNotFoundException,
    ValidationException,
)

T0 = datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc)


def _doc(doc_id: str, minutes: int = 0, **kwargs) -> DocumentEntity:
    return DocumentEntity(
        id=doc_id,
        workspace_id="ws-1",
        title=f"Doc {doc_id}",
        origin_phase=WorkspacePhase.DRAFT,
        created_at=T0 + timedelta(minutes=minutes),
        **kwargs,
    )


def test_history_is_ordered_by_creation_time() -> None:
    ledger = DocumentLedger("ws-1", [_doc("c", 2), _doc("a", 0), _doc("b", 1)])
    assert [d.id for d in ledger.history] == ["a", "b", "c"]


def test_principal_matches_pointer() -> None:
    old = _doc("v1", 0, is_principal=True, is_superseded=True)
    new = _doc("v2", 1, is_principal=True, replaces_document_id="v1")
    ledger = DocumentLedger("ws-1", [new, old], principal_pointer="v2")
    assert ledger.principal is new
    assert ledger.superseded_count == 1


def test_two_current_principals_violate_invariant() -> None:
    docs = [_doc("a", 0, is_principal=True), _doc("b", 1, is_principal=True)]
    with pytest.raises(LedgerInvariantError) as exc_info:
        _ = DocumentLedger("ws-1", docs, principal_pointer="a").principal
    assert exc_info.value.error_code == "LEDGER_INVARIANT_VIOLATION"


def test_pointer_disagreeing_with_flags_violates_invariant() -> None:
    with pytest.raises(LedgerInvariantError):
        _ = DocumentLedger("ws-1", [_doc("a", is_principal=True)], principal_pointer=None).principal


def test_removed_principal_is_not_current() -> None:
    removed = _doc("a", is_principal=True, removed_at=T0)
    ledger = DocumentLedger("ws-1", [removed], principal_pointer=None)
    assert ledger.principal is None
    assert ledger.active == []
    assert ledger.document_count == 0


def test_ensure_can_add_rejects_second_principal() -> None:
    ledger = DocumentLedger("ws-1", [_doc("a", is_principal=True)], principal_pointer="a")
    ledger.ensure_can_add(as_principal=False)
    with pytest.raises(PrincipalAlreadyExistsException) as exc_info:
        ledger.ensure_can_add(as_principal=True)
    assert exc_info.value.details["principal_document_id"] == "a"


def test_ensure_mutable() -> None:
    ledger = DocumentLedger("ws-1", [])
    with pytest.raises(ValidationException, match="removed"):
        ledger.ensure_mutable(_doc("a", removed_at=T0), "validate")
    with pytest.raises(ValidationException, match="superseded"):
        ledger.ensure_mutable(_doc("b", is_principal=True, is_superseded=True), "validate")
    ledger.ensure_mutable(_doc("c"), "validate")


def test_get_unknown_document() -> None:
    with pytest.raises(ResourceNotFoundException):
        DocumentLedger("ws-1", [_doc("a")]).get("missing")


def test_counters() -> None:
    docs = [
        _doc("a", 0, storage_url="/files/a.pdf", file_size=100),
        _doc("b", 1),
        _doc("c", 2, storage_url="/files/c.pdf", file_size=50, removed_at=T0),
    ]
    ledger = DocumentLedger("ws-1", docs)
    assert ledger.document_count == 2
    assert ledger.pending_count == 1
    assert ledger.total_size == 100

