"""Workspace API schemas (request bodies and responses)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import (
    ActivityAction,
    ApprovalStatus,
    EditCapability,
    ThesisKind,
    ThesisStatus,
    ThesisStrength,
    WorkspacePhase,
)


class VersionedRequest(BaseModel):
    """Base for mutating requests: optional optimistic-lock token."""

    expected_version: int | None = Field(
        default=None,
        ge=1,
        description="Workspace version last read by the client; mismatch -> 409",
    )


# ---- Requests ----


class WorkspaceOpenRequest(BaseModel):
    """Body for POST /workspaces (get-or-create by deadline)."""

    deadline_id: str = Field(..., min_length=1, max_length=255)
    deadline_type: str | None = Field(
        default=None,
        max_length=64,
        description="Filing type used to pick the checklist template (e.g. APELACAO)",
    )
    responsible_id: str | None = Field(
        default=None,
        max_length=255,
        description="Responsible lawyer; defaults to the opening actor",
    )


class PhaseChangeRequest(VersionedRequest):
    target_phase: WorkspacePhase
    reason: str | None = Field(
        default=None, max_length=2000, description="Required for REVIEW -> DRAFT"
    )


class LockRequest(VersionedRequest):
    locked: bool


class DocumentCreateRequest(VersionedRequest):
    """Register a document; omit storage_url for a pending placeholder."""

    title: str = Field(..., min_length=1, max_length=500)
    storage_url: str | None = Field(default=None, max_length=2048)
    file_name: str | None = Field(default=None, max_length=500)
    file_size: int = Field(default=0, ge=0)
    mime_type: str | None = Field(default=None, max_length=255)
    category: str | None = Field(default=None, max_length=64)
    description: str | None = Field(default=None, max_length=5000)
    as_principal: bool = False


class PrincipalReplaceRequest(VersionedRequest):
    title: str = Field(..., min_length=1, max_length=500)
    storage_url: str | None = Field(default=None, max_length=2048)
    file_name: str | None = Field(default=None, max_length=500)
    file_size: int = Field(default=0, ge=0)
    mime_type: str | None = Field(default=None, max_length=255)
    category: str | None = Field(default=None, max_length=64)
    description: str | None = Field(default=None, max_length=5000)


class DocumentRenameRequest(VersionedRequest):
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=5000)


class DocumentFileAttachRequest(VersionedRequest):
    """File reference returned by POST /uploads."""

    url: str = Field(..., min_length=1, max_length=2048)
    path: str | None = Field(default=None, max_length=2048)
    file_name: str | None = Field(default=None, max_length=500)
    file_size: int = Field(default=0, ge=0)
    mime_type: str | None = Field(default=None, max_length=255)


class ChecklistItemCreateRequest(VersionedRequest):
    title: str = Field(..., min_length=1, max_length=500)
    category: str | None = Field(default=None, max_length=64)
    blocking: bool = False
    is_required: bool | None = None


class ChecklistToggleRequest(VersionedRequest):
    checked: bool


class ApprovalCreateRequest(VersionedRequest):
    approver_id: str = Field(..., min_length=1, max_length=255)


class ApprovalDecisionRequest(VersionedRequest):
    status: ApprovalStatus
    feedback: str | None = Field(default=None, max_length=5000)
    corrections_required: str | None = Field(default=None, max_length=5000)


class FilingRegisterRequest(VersionedRequest):
    system: str | None = Field(default=None, max_length=255)
    number: str = Field(..., min_length=1, max_length=255)
    filed_at: datetime
    receipt_url: str | None = Field(default=None, max_length=2048)


class CommentCreateRequest(VersionedRequest):
    content: str = Field(..., min_length=1, max_length=10000)
    kind: str | None = Field(default=None, max_length=64)
    parent_id: str | None = None


class DelegateRequest(VersionedRequest):
    responsible_id: str = Field(..., min_length=1, max_length=255)
    reason: str | None = Field(default=None, max_length=2000)


class ThesisCreateRequest(VersionedRequest):
    title: str = Field(..., min_length=1, max_length=500)
    kind: ThesisKind = ThesisKind.MERITO
    status: ThesisStatus = ThesisStatus.RASCUNHO
    issue: str | None = Field(default=None, max_length=20000)
    rule: str | None = Field(default=None, max_length=20000)
    analysis: str | None = Field(default=None, max_length=50000)
    conclusion: str | None = Field(default=None, max_length=20000)
    legal_refs: list[str] = Field(default_factory=list, max_length=100)
    case_refs: list[str] = Field(default_factory=list, max_length=100)
    doctrine_refs: list[str] = Field(default_factory=list, max_length=100)
    strength: ThesisStrength | None = None


class ThesisUpdateRequest(VersionedRequest):
    """Partial update: omitted fields are left unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    kind: ThesisKind | None = None
    status: ThesisStatus | None = None
    issue: str | None = Field(default=None, max_length=20000)
    rule: str | None = Field(default=None, max_length=20000)
    analysis: str | None = Field(default=None, max_length=50000)
    conclusion: str | None = Field(default=None, max_length=20000)
    legal_refs: list[str] | None = Field(default=None, max_length=100)
    case_refs: list[str] | None = Field(default=None, max_length=100)
    doctrine_refs: list[str] | None = Field(default=None, max_length=100)
    strength: ThesisStrength | None = None
    position: int | None = Field(default=None, ge=0)


class DraftContentRequest(VersionedRequest):
    """Editor state; counts are computed from content_html when omitted."""

    content_json: dict[str, Any] | list[Any] | None = None
    content_html: str | None = Field(default=None, max_length=2_000_000)
    word_count: int | None = Field(default=None, ge=0)
    char_count: int | None = Field(default=None, ge=0)


class DraftVersionCreateRequest(VersionedRequest):
    change_summary: str | None = Field(default=None, max_length=2000)


# ---- Responses ----


class WorkspaceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    deadline_id: str
    deadline_type: str | None = None
    phase: WorkspacePhase
    locked: bool
    locked_by: str | None = None
    locked_at: datetime | None = None
    principal_document_id: str | None = None
    version: int
    phase_changed_at: datetime | None = None
    phase_changed_by: str | None = None
    responsible_id: str | None = None
    content_saved_at: datetime | None = None
    content_saved_by: str | None = None
    word_count: int = 0
    char_count: int = 0
    estimated_pages: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None


class WorkspaceContentResponse(WorkspaceResponse):
    """Workspace header plus the stored editor state."""

    content_json: Any = None
    content_html: str | None = None


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    workspace_id: str
    title: str
    origin_phase: WorkspacePhase
    storage_url: str | None = None
    file_name: str | None = None
    file_size: int = 0
    mime_type: str | None = None
    category: str
    description: str | None = None
    is_principal: bool
    is_superseded: bool
    is_pending: bool
    replaces_document_id: str | None = None
    is_validated: bool
    validated_by: str | None = None
    validated_at: datetime | None = None
    uploaded_by: str | None = None
    removed_at: datetime | None = None
    removed_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ChecklistItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    workspace_id: str
    title: str
    category: str
    checked: bool
    blocking: bool
    is_required: bool
    position: int
    template_source: str | None = None
    checked_by: str | None = None
    checked_at: datetime | None = None
    created_at: datetime | None = None


class ApprovalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    workspace_id: str
    round: int
    approver_id: str
    status: ApprovalStatus
    requested_by: str | None = None
    requested_at: datetime | None = None
    feedback: str | None = None
    corrections_required: str | None = None
    decided_by: str | None = None
    decided_at: datetime | None = None


class FilingRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    workspace_id: str
    system: str | None = None
    number: str | None = None
    filed_at: datetime | None = None
    receipt_url: str | None = None
    registered_by: str | None = None
    registered_at: datetime | None = None
    is_complete: bool


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    workspace_id: str
    content: str
    author_id: str | None = None
    kind: str
    parent_id: str | None = None
    resolved: bool
    resolved_by: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None
    replies: list[CommentResponse] = Field(default_factory=list)


class ThesisResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    workspace_id: str
    title: str
    kind: ThesisKind
    status: ThesisStatus
    issue: str | None = None
    rule: str | None = None
    analysis: str | None = None
    conclusion: str | None = None
    legal_refs: list[str] = Field(default_factory=list)
    case_refs: list[str] = Field(default_factory=list)
    doctrine_refs: list[str] = Field(default_factory=list)
    strength: ThesisStrength | None = None
    position: int
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DraftVersionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class PhaseTransitionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    from_phase: WorkspacePhase
    to_phase: WorkspacePhase
    actor_id: str | None = None
    reason: str | None = None
    created_at: datetime | None = None


class WorkspaceDetailResponse(BaseModel):
    """Workspace with every child collection (GET /workspaces/{id})."""

    model_config = ConfigDict(from_attributes=True)

    workspace: WorkspaceResponse
    documents: list[DocumentResponse]
    checklist: list[ChecklistItemResponse]
    approvals: list[ApprovalResponse]
    filing_record: FilingRecordResponse | None = None
    comments: list[CommentResponse]
    theses: list[ThesisResponse]
    transitions: list[PhaseTransitionResponse]


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    action: ActivityAction
    description: str
    actor_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class ActivityPageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: list[ActivityResponse]
    total: int
    page: int
    per_page: int


class BlockingConditionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    message: str


class WorkspaceStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    checklist_done: int
    checklist_total: int
    checklist_progress: int = Field(..., ge=0, le=100)
    blocking_unchecked: int
    total_comments: int
    open_comments: int
    total_documents: int
    superseded_documents: int
    pending_uploads: int
    total_document_size: int
    pending_approvals: int
    current_round: int
    last_approval: ApprovalResponse | None = None
    filing_complete: bool
    total_theses: int
    word_count: int
    estimated_pages: int
    saved_versions: int
    next_phase_blockers: list[BlockingConditionResponse]


class DocumentPermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    document_id: str
    origin_phase: WorkspacePhase
    capability: EditCapability


class WorkspacePermissionsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    workspace_id: str
    current_phase: WorkspacePhase
    viewing_phase: WorkspacePhase
    locked: bool
    workspace_capability: EditCapability
    documents: list[DocumentPermissionResponse]


class UploadResponse(BaseModel):
    """Stored file reference (first step of the two-step document protocol)."""

    model_config = ConfigDict(from_attributes=True)

    url: str
    path: str
    file_name: str
    file_size: int
    mime_type: str
