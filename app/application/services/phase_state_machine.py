"""Phase state machine for the deadline workspace.

DRAFT -> REVIEW -> APPROVAL -> FILING -> CLOSED, plus the single backward
edge REVIEW -> DRAFT (reason required). Preconditions are always evaluated
against a freshly read aggregate, never against client-supplied aggregates.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.application.services import approval_tracker, checklist_gate, filing_validator
from app.application.services.document_ledger import DocumentLedger
from app.domain.entities.workspace import WorkspaceAggregate
from app.domain.enums import WorkspacePhase
from app.domain.exceptions import (
    InvalidTransitionException,
    PreconditionFailedException,
    ValidationException,
    WorkspaceLockedException,
)

ALLOWED_TRANSITIONS: frozenset[tuple[WorkspacePhase, WorkspacePhase]] = frozenset(
    {
        (WorkspacePhase.DRAFT, WorkspacePhase.REVIEW),
        (WorkspacePhase.REVIEW, WorkspacePhase.APPROVAL),
        (WorkspacePhase.REVIEW, WorkspacePhase.DRAFT),
        (WorkspacePhase.APPROVAL, WorkspacePhase.FILING),
        (WorkspacePhase.FILING, WorkspacePhase.CLOSED),
    }
)

BACKWARD_TRANSITIONS: frozenset[tuple[WorkspacePhase, WorkspacePhase]] = frozenset(
    {(WorkspacePhase.REVIEW, WorkspacePhase.DRAFT)}
)


@dataclass(frozen=True)
class UnmetCondition:
    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class TransitionPlan:
    """Validated transition, ready to be applied by the use case."""

    from_phase: WorkspacePhase
    to_phase: WorkspacePhase
    reason: str | None

    @property
    def is_backward(self) -> bool:
        return (self.from_phase, self.to_phase) in BACKWARD_TRANSITIONS


def is_allowed(from_phase: WorkspacePhase, to_phase: WorkspacePhase) -> bool:
    return (from_phase, to_phase) in ALLOWED_TRANSITIONS


def unmet_conditions(
    aggregate: WorkspaceAggregate, target: WorkspacePhase
) -> list[UnmetCondition]:
    """Return every gating condition of the edge current -> target that is unmet.

    Edges without gates (REVIEW -> APPROVAL, REVIEW -> DRAFT) return [].
    """
    current = aggregate.phase
    unmet: list[UnmetCondition] = []
    if (current, target) == (WorkspacePhase.DRAFT, WorkspacePhase.REVIEW):
        ledger = DocumentLedger(
            aggregate.id,
            aggregate.documents,
            aggregate.workspace.principal_document_id,
        )
        principal = ledger.principal
        if principal is None:
            unmet.append(
                UnmetCondition("MISSING_PRINCIPAL", "A principal draft document is required")
            )
        if not checklist_gate.is_satisfied(aggregate.checklist):
            blocking = checklist_gate.blocking_unchecked(aggregate.checklist)
            titles = ", ".join(i.title for i in blocking)
            unmet.append(
                UnmetCondition(
                    "BLOCKING_CHECKLIST",
                    f"{len(blocking)} blocking checklist item(s) unchecked: {titles}",
                )
            )
    elif (current, target) == (WorkspacePhase.APPROVAL, WorkspacePhase.FILING):
        if not aggregate.approvals:
            unmet.append(
                UnmetCondition("NO_APPROVALS", "At least one approval must be requested")
            )
        elif not approval_tracker.all_resolved(aggregate.approvals):
            waiting = approval_tracker.pending(aggregate.approvals)
            unmet.append(
                UnmetCondition(
                    "PENDING_APPROVALS",
                    f"{len(waiting)} approval request(s) still pending",
                )
            )
    elif (current, target) == (WorkspacePhase.FILING, WorkspacePhase.CLOSED):
        if not filing_validator.is_complete(aggregate.filing_record):
            unmet.append(
                UnmetCondition(
                    "INCOMPLETE_FILING",
                    "Filing number and filing timestamp must be registered",
                )
            )
    return unmet


def next_phase_blockers(aggregate: WorkspaceAggregate) -> list[UnmetCondition]:
    """Unmet conditions for the next forward transition ([] when none or CLOSED)."""
    target = aggregate.phase.next_phase()
    if target is None:
        return []
    return unmet_conditions(aggregate, target)


def plan_transition(
    aggregate: WorkspaceAggregate,
    target: WorkspacePhase,
    reason: str | None = None,
) -> TransitionPlan:
    """Validate a requested transition and return the plan to apply.

    Raises:
        WorkspaceLockedException: workspace is locked.
        InvalidTransitionException: edge not allowed (including same-phase re-requests).
        ValidationException: backward edge without a reason.
        PreconditionFailedException: gating conditions unmet.
    """
    workspace = aggregate.workspace
    if workspace.locked:
        raise WorkspaceLockedException(workspace.id, workspace.locked_by)
    current = workspace.phase
    if not is_allowed(current, target):
        raise InvalidTransitionException(current.value, target.value)
    normalized_reason = reason.strip() if reason else None
    if (current, target) in BACKWARD_TRANSITIONS and not normalized_reason:
        raise ValidationException(
            "A reason is required to return the workspace to draft", field="reason"
        )
    unmet = unmet_conditions(aggregate, target)
    if unmet:
        raise PreconditionFailedException(
            current.value, target.value, [u.to_dict() for u in unmet]
        )
    return TransitionPlan(current, target, normalized_reason or None)
