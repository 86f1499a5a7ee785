"""Tests for domain exceptions (error_code, message, details) and their HTTP status mapping."""

import pytest

from app.application.services.document_ledger import LedgerInvariantError
from app.core.exception_handlers import status_for
from app.domain.exceptions import (
    ApprovalAlreadyDecidedException,
    ConcurrentModificationException,
    DatabaseNotConfiguredException,
    InvalidTransitionException,
    MissingFeedbackException,
    PermissionDeniedException,
    PhaseMismatchException,
    PreconditionFailedException,
    PrincipalAlreadyExistsException,
    ReadOnlyException,
    ResourceNotFoundException,
    ValidationException,
    WorkspaceException,
    WorkspaceLockedException,
)
from app.infrastructure.exceptions import (
    StorageAlreadyExistsError,
    StorageUnavailableException,
    UploadRejectedException,
)


def test_workspace_exception_default_error_code() -> None:
    """Base WorkspaceException uses class name as error_code when not provided."""
    exc = WorkspaceException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "WorkspaceException"
    assert exc.details == {}


def test_to_dict() -> None:
    exc = WorkspaceException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("Invalid", field="title")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "title"}
    assert ValidationException("Invalid").details == {}


def test_precondition_failed_lists_every_condition() -> None:
    exc = PreconditionFailedException(
        "DRAFT",
        "REVIEW",
        [
            {"code": "MISSING_PRINCIPAL", "message": "principal required"},
            {"code": "BLOCKING_CHECKLIST", "message": "2 items"},
        ],
    )
    assert exc.unmet_codes == ["MISSING_PRINCIPAL", "BLOCKING_CHECKLIST"]
    assert "principal required; 2 items" in exc.message


def test_read_only_is_a_permission_denial() -> None:
    exc = ReadOnlyException("toggle_checklist", "DRAFT", "REVIEW")
    assert isinstance(exc, PermissionDeniedException)
    assert exc.error_code == "READ_ONLY"
    assert exc.details["capability"] == "READ_ONLY"


def test_concurrent_modification_details() -> None:
    exc = ConcurrentModificationException("ws-1", 3, 4)
    assert exc.details == {"workspace_id": "ws-1", "expected_version": 3, "actual_version": 4}


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (ResourceNotFoundException("workspace", "x"), 404),
        (ValidationException("bad"), 400),
        (InvalidTransitionException("DRAFT", "CLOSED"), 409),
        (PreconditionFailedException("DRAFT", "REVIEW", [{"code": "C", "message": "m"}]), 412),
        (WorkspaceLockedException("ws-1", "u"), 423),
        (PermissionDeniedException("remove_document", "READ_ONLY"), 403),
        (ReadOnlyException("toggle_checklist", "DRAFT", "REVIEW"), 403),
        (PrincipalAlreadyExistsException("ws-1", "doc-1"), 409),
        (MissingFeedbackException("ap-1"), 400),
        (ApprovalAlreadyDecidedException("ap-1", "APPROVED"), 409),
        (PhaseMismatchException("register_filing", "FILING", "CLOSED"), 409),
        (ConcurrentModificationException("ws-1", 1), 409),
        (LedgerInvariantError("ws-1", "two principals"), 500),
        (DatabaseNotConfiguredException(), 503),
        (StorageUnavailableException("uploads/x", "disk full"), 503),
        (StorageAlreadyExistsError("uploads/x"), 409),
        (UploadRejectedException("bad type", reason="mime_type_not_allowed"), 400),
        (UploadRejectedException("too big", reason="too_large", http_status=413), 413),
        (WorkspaceException("unknown", error_code="SOMETHING_ELSE"), 400),
    ],
)
def test_status_for(exc: WorkspaceException, status: int) -> None:
    assert status_for(exc) == status
