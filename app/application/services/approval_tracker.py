"""Approval round tracker: reviewer decisions requested during APPROVAL."""

from __future__ import annotations

from collections.abc import Iterable

from app.domain.entities.workspace import ApprovalRequestEntity
from app.domain.enums import ApprovalStatus, WorkspacePhase
from app.domain.exceptions import (
    ApprovalAlreadyDecidedException,
    MissingFeedbackException,
    PhaseMismatchException,
    ValidationException,
)
from app.shared.utils.sanitization import strip_markup


def ensure_can_request(phase: WorkspacePhase, approver_id: str) -> None:
    """Raise unless a new approval request may be created in this phase."""
    if phase != WorkspacePhase.APPROVAL:
        raise PhaseMismatchException(
            "request_approval", WorkspacePhase.APPROVAL.value, phase.value
        )
    if not approver_id or not approver_id.strip():
        raise ValidationException("Approver is required", field="approver_id")


def next_round(approvals: Iterable[ApprovalRequestEntity]) -> int:
    """Round number for the next request (1-based, scoped to the workspace)."""
    return max((a.round for a in approvals), default=0) + 1


def validate_decision(
    approval: ApprovalRequestEntity,
    status: ApprovalStatus,
    feedback: str | None,
) -> str | None:
    """Validate a decision and return the normalized feedback.

    Decisions are terminal: only PENDING requests can be decided and the new
    status cannot be PENDING. REJECTED requires non-empty feedback.
    """
    if not approval.is_pending:
        raise ApprovalAlreadyDecidedException(approval.id, approval.status.value)
    if status == ApprovalStatus.PENDING:
        raise ValidationException("Decision status cannot be PENDING", field="status")
    normalized = (strip_markup(feedback) or "").strip() if feedback else None
    if status == ApprovalStatus.REJECTED and not normalized:
        raise MissingFeedbackException(approval.id)
    return normalized or None


def pending(approvals: Iterable[ApprovalRequestEntity]) -> list[ApprovalRequestEntity]:
    return [a for a in approvals if a.is_pending]


def all_resolved(approvals: Iterable[ApprovalRequestEntity]) -> bool:
    """True iff every request for the workspace is decided."""
    return not pending(approvals)


def latest(approvals: Iterable[ApprovalRequestEntity]) -> ApprovalRequestEntity | None:
    """Most recent request by round."""
    return max(approvals, key=lambda a: a.round, default=None)
