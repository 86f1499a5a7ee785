"""Unit tests for the phase state machine (edges, gates, plan_transition)."""

from datetime import datetime, timezone

import pytest

from app.application.services import phase_state_machine
from app.domain.entities.workspace import (
    ApprovalRequestEntity,
    ChecklistItemEntity,
    DocumentEntity,
    FilingRecordEntity,
    WorkspaceAggregate,
    WorkspaceEntity,
)
from app.domain.enums import ApprovalStatus, WorkspacePhase
from app.domain.exceptions import (
    InvalidTransitionException,
    PreconditionFailedException,
    ValidationException,
    WorkspaceLockedException,
)

P = WorkspacePhase


def _aggregate(phase: WorkspacePhase, **kwargs) -> WorkspaceAggregate:
    principal = kwargs.pop("principal", None)
    locked = kwargs.pop("locked", False)
    workspace = WorkspaceEntity(
        id="ws-1",
        deadline_id="deadline-1",
        phase=phase,
        locked=locked,
        principal_document_id=principal.id if principal else None,
    )
    documents = kwargs.pop("documents", [principal] if principal else [])
    return WorkspaceAggregate(workspace=workspace, documents=documents, **kwargs)


def _principal(uploaded: bool = True) -> DocumentEntity:
    return DocumentEntity(
        id="doc-p",
        workspace_id="ws-1",
        title="Contestação",
        origin_phase=P.DRAFT,
        storage_url="/files/uploads/x/contestacao.pdf" if uploaded else None,
        is_principal=True,
    )


def _item(item_id: str, blocking: bool, checked: bool, position: int = 0) -> ChecklistItemEntity:
    return ChecklistItemEntity(
        id=item_id,
        workspace_id="ws-1",
        title=f"Item {item_id}",
        blocking=blocking,
        checked=checked,
        position=position,
    )


def _approval(round_: int, status: ApprovalStatus) -> ApprovalRequestEntity:
    return ApprovalRequestEntity(
        id=f"ap-{round_}", workspace_id="ws-1", round=round_, approver_id="partner", status=status
    )


class TestAllowedEdges:
    @pytest.mark.parametrize(
        ("source", "target"),
        [
            (P.DRAFT, P.REVIEW),
            (P.REVIEW, P.APPROVAL),
            (P.REVIEW, P.DRAFT),
            (P.APPROVAL, P.FILING),
            (P.FILING, P.CLOSED),
        ],
    )
    def test_allowed(self, source, target) -> None:
        assert phase_state_machine.is_allowed(source, target)

    def test_every_other_pair_is_rejected(self) -> None:
        allowed = phase_state_machine.ALLOWED_TRANSITIONS
        for source in P:
            for target in P:
                if (source, target) not in allowed:
                    assert not phase_state_machine.is_allowed(source, target)

    def test_exactly_five_edges(self) -> None:
        assert len(phase_state_machine.ALLOWED_TRANSITIONS) == 5


class TestUnmetConditions:
    def test_draft_reports_all_unmet_conditions(self) -> None:
        aggregate = _aggregate(
            P.DRAFT,
            checklist=[_item("a", True, False, 1), _item("b", True, False, 0), _item("c", False, False, 2)],
        )
        unmet = phase_state_machine.unmet_conditions(aggregate, P.REVIEW)
        assert [u.code for u in unmet] == ["MISSING_PRINCIPAL", "BLOCKING_CHECKLIST"]
        assert "2 blocking" in unmet[1].message
        assert unmet[1].message.index("Item b") < unmet[1].message.index("Item a")

    def test_pending_principal_does_not_block_review(self) -> None:
        aggregate = _aggregate(P.DRAFT, principal=_principal(uploaded=False))
        assert phase_state_machine.unmet_conditions(aggregate, P.REVIEW) == []

    def test_draft_ready(self) -> None:
        aggregate = _aggregate(
            P.DRAFT,
            principal=_principal(),
            checklist=[_item("a", True, True), _item("b", False, False)],
        )
        assert phase_state_machine.unmet_conditions(aggregate, P.REVIEW) == []

    def test_pending_non_principal_does_not_block(self) -> None:
        pending = DocumentEntity(id="doc-x", workspace_id="ws-1", title="Anexo", origin_phase=P.DRAFT)
        aggregate = _aggregate(P.DRAFT, principal=_principal(), documents=[_principal(), pending])
        assert phase_state_machine.unmet_conditions(aggregate, P.REVIEW) == []

    def test_review_edges_have_no_gates(self) -> None:
        aggregate = _aggregate(P.REVIEW)
        assert phase_state_machine.unmet_conditions(aggregate, P.APPROVAL) == []
        assert phase_state_machine.unmet_conditions(aggregate, P.DRAFT) == []

    def test_approval_without_requests(self) -> None:
        codes = [u.code for u in phase_state_machine.unmet_conditions(_aggregate(P.APPROVAL), P.FILING)]
        assert codes == ["NO_APPROVALS"]

    def test_approval_with_pending_request(self) -> None:
        aggregate = _aggregate(
            P.APPROVAL,
            approvals=[_approval(1, ApprovalStatus.REJECTED), _approval(2, ApprovalStatus.PENDING)],
        )
        codes = [u.code for u in phase_state_machine.unmet_conditions(aggregate, P.FILING)]
        assert codes == ["PENDING_APPROVALS"]

    def test_rejected_round_does_not_block_filing(self) -> None:
        """Only pending requests gate FILING; a rejection is a resolved decision."""
        aggregate = _aggregate(P.APPROVAL, approvals=[_approval(1, ApprovalStatus.REJECTED)])
        assert phase_state_machine.unmet_conditions(aggregate, P.FILING) == []

    def test_filing_requires_number_and_timestamp(self) -> None:
        incomplete = FilingRecordEntity(workspace_id="ws-1", number="123")
        aggregate = _aggregate(P.FILING, filing_record=incomplete)
        codes = [u.code for u in phase_state_machine.unmet_conditions(aggregate, P.CLOSED)]
        assert codes == ["INCOMPLETE_FILING"]

    def test_filing_complete(self) -> None:
        record = FilingRecordEntity(
            workspace_id="ws-1", number="123", filed_at=datetime(2026, 1, 5, tzinfo=timezone.utc)
        )
        aggregate = _aggregate(P.FILING, filing_record=record)
        assert phase_state_machine.unmet_conditions(aggregate, P.CLOSED) == []

    def test_next_phase_blockers_for_closed_is_empty(self) -> None:
        assert phase_state_machine.next_phase_blockers(_aggregate(P.CLOSED)) == []


class TestPlanTransition:
    def test_lock_is_checked_first(self) -> None:
        """A locked workspace rejects even an invalid edge with WORKSPACE_LOCKED."""
        with pytest.raises(WorkspaceLockedException):
            phase_state_machine.plan_transition(_aggregate(P.DRAFT, locked=True), P.CLOSED)

    def test_same_phase_is_invalid(self) -> None:
        with pytest.raises(InvalidTransitionException) as exc_info:
            phase_state_machine.plan_transition(_aggregate(P.REVIEW), P.REVIEW)
        assert exc_info.value.details == {"from_phase": "REVIEW", "to_phase": "REVIEW"}

    def test_skipping_a_phase_is_invalid(self) -> None:
        with pytest.raises(InvalidTransitionException):
            phase_state_machine.plan_transition(_aggregate(P.DRAFT), P.APPROVAL)

    def test_backward_from_approval_is_invalid(self) -> None:
        with pytest.raises(InvalidTransitionException):
            phase_state_machine.plan_transition(_aggregate(P.APPROVAL), P.DRAFT, "fix")

    def test_backward_requires_reason(self) -> None:
        with pytest.raises(ValidationException) as exc_info:
            phase_state_machine.plan_transition(_aggregate(P.REVIEW), P.DRAFT, "   ")
        assert exc_info.value.details == {"field": "reason"}

    def test_backward_with_reason(self) -> None:
        plan = phase_state_machine.plan_transition(_aggregate(P.REVIEW), P.DRAFT, "  fix citations ")
        assert plan.is_backward
        assert plan.reason == "fix citations"

    def test_precondition_failure_lists_codes(self) -> None:
        with pytest.raises(PreconditionFailedException) as exc_info:
            phase_state_machine.plan_transition(_aggregate(P.DRAFT), P.REVIEW)
        assert exc_info.value.unmet_codes == ["MISSING_PRINCIPAL"]
        assert exc_info.value.error_code == "PRECONDITION_FAILED"

    def test_forward_plan(self) -> None:
        plan = phase_state_machine.plan_transition(_aggregate(P.REVIEW), P.APPROVAL, "")
        assert (plan.from_phase, plan.to_phase) == (P.REVIEW, P.APPROVAL)
        assert plan.reason is None
        assert not plan.is_backward
