"""Phase permission resolver: pure function of (current, viewing, origin) phases.

Consulted before every checklist toggle and every document add, remove,
rename or replace. Rules, in priority order:

1. Viewing a phase strictly earlier than the current one -> READ_ONLY.
2. Current phase CLOSED -> READ_ONLY.
3. Viewing a phase not yet reached -> READ_ONLY.
4. Viewing == current == DRAFT -> FULL_EDIT.
5. Viewing == current in {REVIEW, APPROVAL}: documents introduced in the
   current phase -> FULL_EDIT; documents from earlier phases -> READ_ONLY;
   the workspace itself (origin None) -> ADD_ONLY.
6. Current phase FILING -> READ_ONLY (only filing registration is allowed,
   which is not governed here).
"""

from __future__ import annotations

from app.domain.entities.workspace import DocumentEntity
from app.domain.enums import EditCapability, WorkspacePhase
from app.domain.exceptions import PermissionDeniedException, ReadOnlyException

_COLLABORATIVE_PHASES = frozenset({WorkspacePhase.REVIEW, WorkspacePhase.APPROVAL})

_CAPABILITY_RANK = {
    EditCapability.READ_ONLY: 0,
    EditCapability.ADD_ONLY: 1,
    EditCapability.FULL_EDIT: 2,
}


def resolve(
    current_phase: WorkspacePhase,
    viewing_phase: WorkspacePhase,
    origin_phase: WorkspacePhase | None = None,
) -> EditCapability:
    """Return the edit capability for the viewed phase.

    origin_phase is the phase a document was introduced in; pass None to get
    the workspace-level capability (adding documents, toggling checklist).
    """
    if viewing_phase.precedes(current_phase):
        return EditCapability.READ_ONLY
    if current_phase == WorkspacePhase.CLOSED:
        return EditCapability.READ_ONLY
    if viewing_phase != current_phase:
        return EditCapability.READ_ONLY
    if current_phase == WorkspacePhase.DRAFT:
        return EditCapability.FULL_EDIT
    if current_phase in _COLLABORATIVE_PHASES:
        if origin_phase is None:
            return EditCapability.ADD_ONLY
        if origin_phase == current_phase:
            return EditCapability.FULL_EDIT
        return EditCapability.READ_ONLY
    return EditCapability.READ_ONLY


def allows(capability: EditCapability, required: EditCapability) -> bool:
    """Return True if capability is at least as strong as required."""
    return _CAPABILITY_RANK[capability] >= _CAPABILITY_RANK[required]


def workspace_capability(
    current_phase: WorkspacePhase, viewing_phase: WorkspacePhase
) -> EditCapability:
    return resolve(current_phase, viewing_phase, None)


def document_capability(
    current_phase: WorkspacePhase,
    viewing_phase: WorkspacePhase,
    document: DocumentEntity,
) -> EditCapability:
    """Capability for one document; history (superseded or removed) is always READ_ONLY."""
    if document.is_superseded or not document.is_active:
        return EditCapability.READ_ONLY
    return resolve(current_phase, viewing_phase, document.origin_phase)


def require_workspace_capability(
    current_phase: WorkspacePhase,
    viewing_phase: WorkspacePhase,
    required: EditCapability,
    action: str,
) -> EditCapability:
    """Raise if the workspace-level capability is below required.

    READ_ONLY views raise ReadOnlyException; weaker-than-required
    capabilities raise PermissionDeniedException.
    """
    capability = workspace_capability(current_phase, viewing_phase)
    if capability == EditCapability.READ_ONLY:
        raise ReadOnlyException(action, viewing_phase.value, current_phase.value)
    if not allows(capability, required):
        raise PermissionDeniedException(
            action,
            capability.value,
            viewing_phase=viewing_phase.value,
            current_phase=current_phase.value,
        )
    return capability


def require_document_capability(
    current_phase: WorkspacePhase,
    viewing_phase: WorkspacePhase,
    document: DocumentEntity,
    required: EditCapability,
    action: str,
) -> EditCapability:
    """Raise PermissionDeniedException if the document capability is below required."""
    capability = document_capability(current_phase, viewing_phase, document)
    if not allows(capability, required):
        if document.is_superseded:
            message = "Superseded versions are immutable history"
        else:
            message = None
        raise PermissionDeniedException(
            action,
            capability.value,
            message=message,
            document_id=document.id,
            origin_phase=document.origin_phase.value,
            viewing_phase=viewing_phase.value,
            current_phase=current_phase.value,
        )
    return capability
