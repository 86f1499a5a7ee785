"""DTOs for workspace use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.entities.workspace import ActivityEntity, ApprovalRequestEntity
from app.domain.enums import EditCapability, ThesisKind, ThesisStatus, ThesisStrength, WorkspacePhase


@dataclass(frozen=True)
class DocumentInput:
    """Input for registering a document. storage_url None creates a pending placeholder."""

    title: str
    storage_url: str | None = None
    file_name: str | None = None
    file_size: int = 0
    mime_type: str | None = None
    category: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class ThesisInput:
    """Fields for a new thesis; position is assigned after the last one."""

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


@dataclass(frozen=True)
class ThesisChanges:
    """Partial thesis update: None leaves a field unchanged, an empty string clears text."""

    title: str | None = None
    kind: ThesisKind | None = None
    status: ThesisStatus | None = None
    issue: str | None = None
    rule: str | None = None
    analysis: str | None = None
    conclusion: str | None = None
    legal_refs: list[str] | None = None
    case_refs: list[str] | None = None
    doctrine_refs: list[str] | None = None
    strength: ThesisStrength | None = None
    position: int | None = None


@dataclass(frozen=True)
class DraftContent:
    """Editor state sent by the client. Counts are derived from the HTML when omitted."""

    content_json: Any = None
    content_html: str | None = None
    word_count: int | None = None
    char_count: int | None = None


@dataclass(frozen=True)
class FileReference:
    """Result of the out-of-band upload step, passed into document registration."""

    url: str
    path: str | None = None
    file_name: str | None = None
    file_size: int = 0
    mime_type: str | None = None


@dataclass(frozen=True)
class BlockingCondition:
    code: str
    message: str


@dataclass(frozen=True)
class WorkspaceStats:
    """Derived counters, recomputed from the entity set on every read."""

    checklist_done: int
    checklist_total: int
    checklist_progress: int
    blocking_unchecked: int
    total_comments: int
    open_comments: int
    total_documents: int
    superseded_documents: int
    pending_uploads: int
    total_document_size: int
    pending_approvals: int
    current_round: int
    last_approval: ApprovalRequestEntity | None
    filing_complete: bool
    total_theses: int = 0
    word_count: int = 0
    estimated_pages: int = 1
    saved_versions: int = 0
    next_phase_blockers: list[BlockingCondition] = field(default_factory=list)


@dataclass(frozen=True)
class DocumentPermission:
    document_id: str
    origin_phase: WorkspacePhase
    capability: EditCapability


@dataclass(frozen=True)
class WorkspacePermissions:
    """Capabilities for one viewed phase (workspace level and per active document)."""

    workspace_id: str
    current_phase: WorkspacePhase
    viewing_phase: WorkspacePhase
    locked: bool
    workspace_capability: EditCapability
    documents: list[DocumentPermission] = field(default_factory=list)


@dataclass(frozen=True)
class ActivityPage:
    items: list[ActivityEntity]
    total: int
    page: int
    per_page: int


@dataclass(frozen=True)
class DeadlineFulfilment:
    """Payload sent to the external deadline service when a workspace closes."""

    deadline_id: str
    workspace_id: str
    filing_number: str | None
    filed_at: datetime | None
    closed_by: str | None


@dataclass(frozen=True)
class DeadlineDelegation:
    """Payload sent to the external deadline service when the responsible lawyer changes."""

    deadline_id: str
    workspace_id: str
    responsible_id: str
    previous_responsible_id: str | None
    delegated_by: str | None
    reason: str | None
