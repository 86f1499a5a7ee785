"""Workspace API: thin routes delegating to WorkspaceService.

Mutations accept an optional expected_version (body or query) and a
viewing_phase query parameter for the phase tab the user is acting from.
The acting user comes from the actor header via the request context.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import get_workspace_query_service, get_workspace_service
from app.application.dtos.workspace import (
    DocumentInput,
    DraftContent,
    FileReference,
    ThesisChanges,
    ThesisInput,
)
from app.application.use_cases.workspaces import WorkspaceService
from app.core.limiter import limit_writes
from app.domain.enums import ActivityAction, WorkspacePhase
from app.schemas.workspace import (
    ActivityPageResponse,
    ApprovalCreateRequest,
    ApprovalDecisionRequest,
    ApprovalResponse,
    ChecklistItemCreateRequest,
    ChecklistItemResponse,
    ChecklistToggleRequest,
    CommentCreateRequest,
    CommentResponse,
    DelegateRequest,
    DocumentCreateRequest,
    DocumentFileAttachRequest,
    DocumentRenameRequest,
    DocumentResponse,
    DraftContentRequest,
    DraftVersionCreateRequest,
    DraftVersionResponse,
    FilingRecordResponse,
    FilingRegisterRequest,
    LockRequest,
    PhaseChangeRequest,
    PhaseTransitionResponse,
    PrincipalReplaceRequest,
    ThesisCreateRequest,
    ThesisResponse,
    ThesisUpdateRequest,
    VersionedRequest,
    WorkspaceContentResponse,
    WorkspaceDetailResponse,
    WorkspaceOpenRequest,
    WorkspacePermissionsResponse,
    WorkspaceResponse,
    WorkspaceStatsResponse,
)

router = APIRouter()

WriteService = Annotated[WorkspaceService, Depends(get_workspace_service)]
ReadService = Annotated[WorkspaceService, Depends(get_workspace_query_service)]
ViewingPhase = Annotated[
    WorkspacePhase | None,
    Query(description="Phase tab the user is acting from (defaults to the current phase)"),
]
ExpectedVersion = Annotated[int | None, Query(ge=1)]


# ---- Workspace ----


@router.post("", response_model=WorkspaceDetailResponse)
@limit_writes
async def open_workspace(
    request: Request,
    body: WorkspaceOpenRequest,
    svc: WriteService,
):
    """Return the deadline's workspace, creating it (DRAFT, seeded checklist) on first open."""
    aggregate = await svc.get_or_create(
        body.deadline_id, body.deadline_type, body.responsible_id
    )
    return WorkspaceDetailResponse.model_validate(aggregate)


@router.get("/{workspace_id}", response_model=WorkspaceDetailResponse)
async def get_workspace(workspace_id: str, svc: ReadService):
    aggregate = await svc.get(workspace_id)
    return WorkspaceDetailResponse.model_validate(aggregate)


@router.post("/{workspace_id}/phase", response_model=WorkspaceDetailResponse)
@limit_writes
async def change_phase(
    request: Request,
    workspace_id: str,
    body: PhaseChangeRequest,
    svc: WriteService,
):
    """Move the workspace along an allowed edge; 412 lists every unmet condition."""
    aggregate = await svc.change_phase(
        workspace_id,
        body.target_phase,
        body.reason,
        expected_version=body.expected_version,
    )
    return WorkspaceDetailResponse.model_validate(aggregate)


@router.post("/{workspace_id}/lock", response_model=WorkspaceDetailResponse)
@limit_writes
async def set_lock(
    request: Request,
    workspace_id: str,
    body: LockRequest,
    svc: WriteService,
):
    aggregate = await svc.toggle_lock(
        workspace_id, body.locked, expected_version=body.expected_version
    )
    return WorkspaceDetailResponse.model_validate(aggregate)


@router.post("/{workspace_id}/delegate", response_model=WorkspaceResponse)
@limit_writes
async def delegate_workspace(
    request: Request,
    workspace_id: str,
    body: DelegateRequest,
    svc: WriteService,
):
    """Reassign the responsible lawyer; the deadline service is notified."""
    workspace = await svc.delegate(
        workspace_id,
        body.responsible_id,
        body.reason,
        expected_version=body.expected_version,
    )
    return WorkspaceResponse.model_validate(workspace)


@router.get("/{workspace_id}/stats", response_model=WorkspaceStatsResponse)
async def get_stats(workspace_id: str, svc: ReadService):
    return WorkspaceStatsResponse.model_validate(await svc.stats(workspace_id))


@router.get("/{workspace_id}/permissions", response_model=WorkspacePermissionsResponse)
async def get_permissions(
    workspace_id: str,
    svc: ReadService,
    viewing_phase: ViewingPhase = None,
):
    result = await svc.permissions(workspace_id, viewing_phase)
    return WorkspacePermissionsResponse.model_validate(result)


@router.get("/{workspace_id}/history", response_model=list[PhaseTransitionResponse])
async def get_phase_history(workspace_id: str, svc: ReadService):
    transitions = await svc.phase_history(workspace_id)
    return [PhaseTransitionResponse.model_validate(t) for t in transitions]


@router.get("/{workspace_id}/activities", response_model=ActivityPageResponse)
async def list_activities(
    workspace_id: str,
    svc: ReadService,
    action: ActivityAction | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=200)] = 50,
):
    """Activity log, newest first."""
    result = await svc.list_activities(workspace_id, action, page, per_page)
    return ActivityPageResponse.model_validate(result)


# ---- Documents ----


@router.post(
    "/{workspace_id}/documents", response_model=DocumentResponse, status_code=201
)
@limit_writes
async def add_document(
    request: Request,
    workspace_id: str,
    body: DocumentCreateRequest,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
):
    """Register a document; without storage_url it is a pending placeholder."""
    document = await svc.add_document(
        workspace_id,
        DocumentInput(
            title=body.title,
            storage_url=body.storage_url,
            file_name=body.file_name,
            file_size=body.file_size,
            mime_type=body.mime_type,
            category=body.category,
            description=body.description,
        ),
        body.as_principal,
        viewing_phase=viewing_phase,
        expected_version=body.expected_version,
    )
    return DocumentResponse.model_validate(document)


@router.post(
    "/{workspace_id}/documents/principal",
    response_model=DocumentResponse,
    status_code=201,
)
@limit_writes
async def replace_principal(
    request: Request,
    workspace_id: str,
    body: PrincipalReplaceRequest,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
):
    """Supersede the current principal draft with a new version."""
    document = await svc.replace_principal(
        workspace_id,
        DocumentInput(
            title=body.title,
            storage_url=body.storage_url,
            file_name=body.file_name,
            file_size=body.file_size,
            mime_type=body.mime_type,
            category=body.category,
            description=body.description,
        ),
        viewing_phase=viewing_phase,
        expected_version=body.expected_version,
    )
    return DocumentResponse.model_validate(document)


@router.patch(
    "/{workspace_id}/documents/{document_id}", response_model=DocumentResponse
)
@limit_writes
async def rename_document(
    request: Request,
    workspace_id: str,
    document_id: str,
    body: DocumentRenameRequest,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
):
    document = await svc.rename_document(
        workspace_id,
        document_id,
        body.title,
        body.description,
        viewing_phase=viewing_phase,
        expected_version=body.expected_version,
    )
    return DocumentResponse.model_validate(document)


@router.delete(
    "/{workspace_id}/documents/{document_id}", response_model=DocumentResponse
)
@limit_writes
async def remove_document(
    request: Request,
    workspace_id: str,
    document_id: str,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
    expected_version: ExpectedVersion = None,
):
    """Remove a document from the active ledger (kept as history)."""
    document = await svc.remove_document(
        workspace_id,
        document_id,
        viewing_phase=viewing_phase,
        expected_version=expected_version,
    )
    return DocumentResponse.model_validate(document)


@router.put(
    "/{workspace_id}/documents/{document_id}/file", response_model=DocumentResponse
)
@limit_writes
async def attach_document_file(
    request: Request,
    workspace_id: str,
    document_id: str,
    body: DocumentFileAttachRequest,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
):
    """Complete a pending placeholder with a file returned by POST /uploads."""
    document = await svc.attach_document_file(
        workspace_id,
        document_id,
        FileReference(
            url=body.url,
            path=body.path,
            file_name=body.file_name,
            file_size=body.file_size,
            mime_type=body.mime_type,
        ),
        viewing_phase=viewing_phase,
        expected_version=body.expected_version,
    )
    return DocumentResponse.model_validate(document)


@router.post(
    "/{workspace_id}/documents/{document_id}/validate",
    response_model=DocumentResponse,
)
@limit_writes
async def validate_document(
    request: Request,
    workspace_id: str,
    document_id: str,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
    body: VersionedRequest | None = None,
):
    document = await svc.validate_document(
        workspace_id,
        document_id,
        viewing_phase=viewing_phase,
        expected_version=body.expected_version if body else None,
    )
    return DocumentResponse.model_validate(document)


# ---- Checklist ----


@router.post(
    "/{workspace_id}/checklist", response_model=ChecklistItemResponse, status_code=201
)
@limit_writes
async def add_checklist_item(
    request: Request,
    workspace_id: str,
    body: ChecklistItemCreateRequest,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
):
    item = await svc.add_checklist_item(
        workspace_id,
        body.title,
        body.category,
        body.blocking,
        body.is_required,
        viewing_phase=viewing_phase,
        expected_version=body.expected_version,
    )
    return ChecklistItemResponse.model_validate(item)


@router.patch(
    "/{workspace_id}/checklist/{item_id}", response_model=ChecklistItemResponse
)
@limit_writes
async def toggle_checklist_item(
    request: Request,
    workspace_id: str,
    item_id: str,
    body: ChecklistToggleRequest,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
):
    item = await svc.toggle_checklist(
        workspace_id,
        item_id,
        body.checked,
        viewing_phase=viewing_phase,
        expected_version=body.expected_version,
    )
    return ChecklistItemResponse.model_validate(item)


@router.delete("/{workspace_id}/checklist/{item_id}", status_code=204)
@limit_writes
async def delete_checklist_item(
    request: Request,
    workspace_id: str,
    item_id: str,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
    expected_version: ExpectedVersion = None,
):
    await svc.delete_checklist_item(
        workspace_id,
        item_id,
        viewing_phase=viewing_phase,
        expected_version=expected_version,
    )
    return Response(status_code=204)


# ---- Approvals ----


@router.post(
    "/{workspace_id}/approvals", response_model=ApprovalResponse, status_code=201
)
@limit_writes
async def request_approval(
    request: Request,
    workspace_id: str,
    body: ApprovalCreateRequest,
    svc: WriteService,
):
    approval = await svc.request_approval(
        workspace_id, body.approver_id, expected_version=body.expected_version
    )
    return ApprovalResponse.model_validate(approval)


@router.post(
    "/{workspace_id}/approvals/{approval_id}/decision",
    response_model=ApprovalResponse,
)
@limit_writes
async def decide_approval(
    request: Request,
    workspace_id: str,
    approval_id: str,
    body: ApprovalDecisionRequest,
    svc: WriteService,
):
    """Approve, approve with caveats, or reject (feedback required)."""
    approval = await svc.decide_approval(
        workspace_id,
        approval_id,
        body.status,
        body.feedback,
        body.corrections_required,
        expected_version=body.expected_version,
    )
    return ApprovalResponse.model_validate(approval)


# ---- Filing record ----


@router.put("/{workspace_id}/filing", response_model=FilingRecordResponse)
@limit_writes
async def register_filing(
    request: Request,
    workspace_id: str,
    body: FilingRegisterRequest,
    svc: WriteService,
):
    record = await svc.register_filing(
        workspace_id,
        body.system,
        body.number,
        body.filed_at,
        body.receipt_url,
        expected_version=body.expected_version,
    )
    return FilingRecordResponse.model_validate(record)


# ---- Comments ----


@router.get("/{workspace_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    workspace_id: str,
    svc: ReadService,
    kind: str | None = None,
    resolved: bool | None = None,
):
    comments = await svc.list_comments(workspace_id, kind, resolved)
    return [CommentResponse.model_validate(c) for c in comments]


@router.post(
    "/{workspace_id}/comments", response_model=CommentResponse, status_code=201
)
@limit_writes
async def add_comment(
    request: Request,
    workspace_id: str,
    body: CommentCreateRequest,
    svc: WriteService,
):
    comment = await svc.add_comment(
        workspace_id,
        body.content,
        body.kind,
        body.parent_id,
        expected_version=body.expected_version,
    )
    return CommentResponse.model_validate(comment)


@router.post(
    "/{workspace_id}/comments/{comment_id}/resolve", response_model=CommentResponse
)
@limit_writes
async def resolve_comment(
    request: Request,
    workspace_id: str,
    comment_id: str,
    svc: WriteService,
    body: VersionedRequest | None = None,
):
    comment = await svc.resolve_comment(
        workspace_id,
        comment_id,
        expected_version=body.expected_version if body else None,
    )
    return CommentResponse.model_validate(comment)


# ---- Theses ----


@router.post(
    "/{workspace_id}/theses", response_model=ThesisResponse, status_code=201
)
@limit_writes
async def add_thesis(
    request: Request,
    workspace_id: str,
    body: ThesisCreateRequest,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
):
    thesis = await svc.add_thesis(
        workspace_id,
        ThesisInput(**body.model_dump(exclude={"expected_version"})),
        viewing_phase=viewing_phase,
        expected_version=body.expected_version,
    )
    return ThesisResponse.model_validate(thesis)


@router.patch("/{workspace_id}/theses/{thesis_id}", response_model=ThesisResponse)
@limit_writes
async def update_thesis(
    request: Request,
    workspace_id: str,
    thesis_id: str,
    body: ThesisUpdateRequest,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
):
    """Partial update; send position to reorder."""
    thesis = await svc.update_thesis(
        workspace_id,
        thesis_id,
        ThesisChanges(**body.model_dump(exclude={"expected_version"})),
        viewing_phase=viewing_phase,
        expected_version=body.expected_version,
    )
    return ThesisResponse.model_validate(thesis)


@router.delete("/{workspace_id}/theses/{thesis_id}", status_code=204)
@limit_writes
async def delete_thesis(
    request: Request,
    workspace_id: str,
    thesis_id: str,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
    expected_version: ExpectedVersion = None,
):
    await svc.delete_thesis(
        workspace_id,
        thesis_id,
        viewing_phase=viewing_phase,
        expected_version=expected_version,
    )
    return Response(status_code=204)


# ---- Draft content ----


@router.get("/{workspace_id}/content", response_model=WorkspaceContentResponse)
async def get_content(workspace_id: str, svc: ReadService):
    aggregate = await svc.get(workspace_id)
    return WorkspaceContentResponse.model_validate(aggregate.workspace)


@router.put("/{workspace_id}/content", response_model=WorkspaceContentResponse)
@limit_writes
async def save_content(
    request: Request,
    workspace_id: str,
    body: DraftContentRequest,
    svc: WriteService,
    viewing_phase: ViewingPhase = None,
):
    workspace = await svc.save_content(
        workspace_id,
        DraftContent(
            content_json=body.content_json,
            content_html=body.content_html,
            word_count=body.word_count,
            char_count=body.char_count,
        ),
        viewing_phase=viewing_phase,
        expected_version=body.expected_version,
    )
    return WorkspaceContentResponse.model_validate(workspace)


@router.get("/{workspace_id}/versions", response_model=list[DraftVersionResponse])
async def list_versions(workspace_id: str, svc: ReadService):
    """Saved draft versions, newest first."""
    versions = await svc.list_versions(workspace_id)
    return [DraftVersionResponse.model_validate(v) for v in versions]


@router.post(
    "/{workspace_id}/versions", response_model=DraftVersionResponse, status_code=201
)
@limit_writes
async def save_version(
    request: Request,
    workspace_id: str,
    svc: WriteService,
    body: DraftVersionCreateRequest | None = None,
    viewing_phase: ViewingPhase = None,
):
    version = await svc.save_version(
        workspace_id,
        body.change_summary if body else None,
        viewing_phase=viewing_phase,
        expected_version=body.expected_version if body else None,
    )
    return DraftVersionResponse.model_validate(version)


@router.post(
    "/{workspace_id}/versions/{version_id}/restore",
    response_model=WorkspaceContentResponse,
)
@limit_writes
async def restore_version(
    request: Request,
    workspace_id: str,
    version_id: str,
    svc: WriteService,
    body: VersionedRequest | None = None,
    viewing_phase: ViewingPhase = None,
):
    workspace = await svc.restore_version(
        workspace_id,
        version_id,
        viewing_phase=viewing_phase,
        expected_version=body.expected_version if body else None,
    )
    return WorkspaceContentResponse.model_validate(workspace)
