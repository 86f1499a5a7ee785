"""Deadline workspace aggregate and its child entities.

A workspace carries one legal filing task (a deadline) from drafting through
review, approval, court filing and closure. Children (documents, checklist,
approvals, filing record, comments, theses, draft versions) belong to exactly
one workspace.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.enums import (
    ActivityAction,
    ApprovalStatus,
    ThesisKind,
    ThesisStatus,
    ThesisStrength,
    WorkspacePhase,
)
from app.domain.exceptions import ValidationException

WORDS_PER_PAGE = 300


@dataclass
class WorkspaceEntity:
    """Workspace root: current phase, manual lock and optimistic-lock version."""

    id: str
    deadline_id: str
    phase: WorkspacePhase
    locked: bool = False
    version: int = 1
    deadline_type: str | None = None
    locked_by: str | None = None
    locked_at: datetime | None = None
    principal_document_id: str | None = None
    phase_changed_at: datetime | None = None
    phase_changed_by: str | None = None
    responsible_id: str | None = None
    content_json: Any = None
    content_html: str | None = None
    content_saved_at: datetime | None = None
    content_saved_by: str | None = None
    word_count: int = 0
    char_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def estimated_pages(self) -> int:
        """Pages at WORDS_PER_PAGE words each; never less than one."""
        return max(1, math.ceil(self.word_count / WORDS_PER_PAGE))

    def __post_init__(self) -> None:
        if not self.deadline_id:
            raise ValidationException(
                "Workspace must reference a deadline", field="deadline_id"
            )
        if not isinstance(self.phase, WorkspacePhase):
            self.phase = WorkspacePhase(self.phase)


@dataclass
class DocumentEntity:
    """Artifact attached to a workspace.

    storage_url is None while the upload is pending (placeholder entry).
    Superseded principal versions and removed documents are kept as history.
    """

    id: str
    workspace_id: str
    title: str
    origin_phase: WorkspacePhase
    storage_url: str | None = None
    file_name: str | None = None
    file_size: int = 0
    mime_type: str | None = None
    category: str = "ANEXO"
    description: str | None = None
    is_principal: bool = False
    is_superseded: bool = False
    replaces_document_id: str | None = None
    is_validated: bool = False
    validated_by: str | None = None
    validated_at: datetime | None = None
    uploaded_by: str | None = None
    removed_at: datetime | None = None
    removed_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        """True while no stored file is attached."""
        return not self.storage_url

    @property
    def is_active(self) -> bool:
        """True unless the document was removed from the ledger."""
        return self.removed_at is None

    @property
    def is_current_principal(self) -> bool:
        return self.is_principal and not self.is_superseded and self.is_active


@dataclass
class ChecklistItemEntity:
    """Task on the workspace checklist; blocking items gate DRAFT -> REVIEW."""

    id: str
    workspace_id: str
    title: str
    category: str = "GERAL"
    checked: bool = False
    blocking: bool = False
    is_required: bool = False
    position: int = 0
    template_source: str | None = None
    checked_by: str | None = None
    checked_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def blocks_advancement(self) -> bool:
        return self.blocking and not self.checked


@dataclass
class ApprovalRequestEntity:
    """One reviewer decision requested during the approval phase."""

    id: str
    workspace_id: str
    round: int
    approver_id: str
    status: ApprovalStatus = ApprovalStatus.PENDING
    requested_by: str | None = None
    feedback: str | None = None
    corrections_required: str | None = None
    decided_by: str | None = None
    decided_at: datetime | None = None
    requested_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == ApprovalStatus.PENDING


@dataclass
class FilingRecordEntity:
    """Proof that the task was submitted to a court system."""

    workspace_id: str
    system: str | None = None
    number: str | None = None
    filed_at: datetime | None = None
    receipt_url: str | None = None
    registered_by: str | None = None
    registered_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        """Filing number and filing timestamp are both present."""
        return bool(self.number and self.number.strip()) and self.filed_at is not None


@dataclass
class CommentEntity:
    """Free-form, append-only note; never gates transitions."""

    id: str
    workspace_id: str
    content: str
    author_id: str | None = None
    kind: str = "GERAL"
    parent_id: str | None = None
    resolved: bool = False
    resolved_by: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None
    replies: list["CommentEntity"] = field(default_factory=list)


@dataclass
class ThesisEntity:
    """Legal argument drafted for the filing, laid out as issue, rule, analysis, conclusion."""

    id: str
    workspace_id: str
    title: str
    kind: ThesisKind = ThesisKind.MERITO
    status: ThesisStatus = ThesisStatus.RASCUNHO
    issue: str | None = None
    rule: str | None = None
    analysis: str | None = None
    conclusion: str | None = None
    legal_refs: list[str] = field(default_factory=list)
    case_refs: list[str] = field(default_factory=list)
    doctrine_refs: list[str] = field(default_factory=list)
    strength: ThesisStrength | None = None
    position: int = 0
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class DraftVersionEntity:
    """Snapshot of the workspace draft content; versions are never edited."""

    id: str
    workspace_id: str
    version_number: int
    title: str
    content_json: Any = None
    content_html: str | None = None
    word_count: int = 0
    change_summary: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class PhaseTransitionEntity:
    """Audit entry for one applied phase change."""

    id: str
    workspace_id: str
    from_phase: WorkspacePhase
    to_phase: WorkspacePhase
    actor_id: str | None
    reason: str | None
    created_at: datetime | None = None


@dataclass(frozen=True)
class ActivityEntity:
    """Activity log entry (any mutation)."""

    id: str
    workspace_id: str
    action: ActivityAction
    description: str
    actor_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


@dataclass
class WorkspaceAggregate:
    """Workspace root plus every child entity, read in one consistent snapshot."""

    workspace: WorkspaceEntity
    documents: list[DocumentEntity] = field(default_factory=list)
    checklist: list[ChecklistItemEntity] = field(default_factory=list)
    approvals: list[ApprovalRequestEntity] = field(default_factory=list)
    filing_record: FilingRecordEntity | None = None
    comments: list[CommentEntity] = field(default_factory=list)
    theses: list[ThesisEntity] = field(default_factory=list)
    transitions: list[PhaseTransitionEntity] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.workspace.id

    @property
    def phase(self) -> WorkspacePhase:
        return self.workspace.phase

    def find_document(self, document_id: str) -> DocumentEntity | None:
        return next((d for d in self.documents if d.id == document_id), None)

    def find_checklist_item(self, item_id: str) -> ChecklistItemEntity | None:
        return next((i for i in self.checklist if i.id == item_id), None)

    def find_approval(self, approval_id: str) -> ApprovalRequestEntity | None:
        return next((a for a in self.approvals if a.id == approval_id), None)

    def find_thesis(self, thesis_id: str) -> ThesisEntity | None:
        return next((t for t in self.theses if t.id == thesis_id), None)
