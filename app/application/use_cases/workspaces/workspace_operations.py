"""Workspace operations: phase workflow, document ledger, checklist, approvals,
filing, comments, theses, draft content and delegation.

Every mutation re-reads the aggregate, validates against that fresh state and
then claims the workspace row with a versioned conditional update before any
child row is written. A lost claim raises ConcurrentModificationException.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from app.application.dtos.workspace import (
    ActivityPage,
    BlockingCondition,
    DeadlineDelegation,
    DeadlineFulfilment,
    DocumentInput,
    DocumentPermission,
    DraftContent,
    FileReference,
    ThesisChanges,
    ThesisInput,
    WorkspacePermissions,
    WorkspaceStats,
)
from app.application.interfaces.repositories import (
    IActivityRepository,
    IApprovalRepository,
    IChecklistRepository,
    ICommentRepository,
    IDraftVersionRepository,
    IFilingRecordRepository,
    IPhaseTransitionRepository,
    IThesisRepository,
    IWorkspaceDocumentRepository,
    IWorkspaceRepository,
)
from app.application.interfaces.services import IDeadlineNotifier
from app.application.services import (
    approval_tracker,
    checklist_gate,
    filing_validator,
    permission_resolver,
    phase_state_machine,
)
from app.application.services.document_ledger import DocumentLedger
from app.domain.entities.workspace import (
    ActivityEntity,
    ApprovalRequestEntity,
    ChecklistItemEntity,
    CommentEntity,
    DocumentEntity,
    DraftVersionEntity,
    FilingRecordEntity,
    PhaseTransitionEntity,
    ThesisEntity,
    WorkspaceAggregate,
    WorkspaceEntity,
)
from app.domain.enums import (
    ActivityAction,
    ApprovalStatus,
    EditCapability,
    ThesisKind,
    ThesisStatus,
    ThesisStrength,
    WorkspacePhase,
)
from app.domain.exceptions import (
    ConcurrentModificationException,
    ReadOnlyException,
    ResourceNotFoundException,
    ValidationException,
    WorkspaceLockedException,
)
from app.shared.context import get_current_actor_id
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid
from app.shared.utils.sanitization import clean_rich_text, strip_markup

logger = get_logger(__name__)

MAX_ACTIVITY_PAGE_SIZE = 200

_THESIS_TEXT_ATTRS = ("issue", "rule", "analysis", "conclusion")
_THESIS_REF_ATTRS = ("legal_refs", "case_refs", "doctrine_refs")


def _required_text(
    value: str | None, field: str, label: str, *, prose: bool = False
) -> str:
    text = ((strip_markup(value) if prose else value) or "").strip()
    if not text:
        raise ValidationException(f"{label} is required", field=field)
    return text


def _optional_text(value: str | None, *, prose: bool = False) -> str | None:
    """Strip whitespace (and markup for prose); blank becomes None."""
    text = ((strip_markup(value) if prose else value) or "").strip()
    return text or None


def _references(values: list[str] | None) -> list[str]:
    """Trimmed citations with blanks and repeats dropped, first occurrence kept."""
    seen: dict[str, None] = {}
    for value in values or []:
        text = (strip_markup(value) or "").strip()
        if text:
            seen.setdefault(text, None)
    return list(seen)


def _text_counts(html: str | None) -> tuple[int, int]:
    """(words, characters) of the visible text of an editor HTML body."""
    # Tags separate words ("<p>a</p><p>b</p>" is two words).
    words = (strip_markup((html or "").replace("<", " <")) or "").split()
    return len(words), len(" ".join(words))


def thread_comments(comments: list[CommentEntity]) -> list[CommentEntity]:
    """Group replies under their top-level comment (oldest first)."""
    top_level: dict[str, CommentEntity] = {}
    replies: list[CommentEntity] = []
    for comment in comments:
        comment.replies = []
        if comment.parent_id is None:
            top_level[comment.id] = comment
        else:
            replies.append(comment)
    for reply in replies:
        parent = top_level.get(reply.parent_id or "")
        if parent is not None:
            parent.replies.append(reply)
    return list(top_level.values())


class WorkspaceService:
    """Use cases for one deadline workspace (get-or-create, transitions and child mutations)."""

    def __init__(
        self,
        workspace_repo: IWorkspaceRepository,
        document_repo: IWorkspaceDocumentRepository,
        checklist_repo: IChecklistRepository,
        approval_repo: IApprovalRepository,
        filing_repo: IFilingRecordRepository,
        comment_repo: ICommentRepository,
        transition_repo: IPhaseTransitionRepository,
        activity_repo: IActivityRepository,
        thesis_repo: IThesisRepository,
        draft_version_repo: IDraftVersionRepository,
        deadline_notifier: IDeadlineNotifier | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.workspace_repo = workspace_repo
        self.document_repo = document_repo
        self.checklist_repo = checklist_repo
        self.approval_repo = approval_repo
        self.filing_repo = filing_repo
        self.comment_repo = comment_repo
        self.transition_repo = transition_repo
        self.activity_repo = activity_repo
        self.thesis_repo = thesis_repo
        self.draft_version_repo = draft_version_repo
        self.deadline_notifier = deadline_notifier
        self._clock = clock

    # ------------------------------------------------------------------
    # Loading, claiming and recording
    # ------------------------------------------------------------------

    async def _load(self, workspace_id: str) -> WorkspaceAggregate:
        workspace = await self.workspace_repo.get_by_id(workspace_id)
        if workspace is None:
            raise ResourceNotFoundException("workspace", workspace_id)
        return WorkspaceAggregate(
            workspace=workspace,
            documents=await self.document_repo.list_by_workspace(workspace_id),
            checklist=await self.checklist_repo.list_by_workspace(workspace_id),
            approvals=await self.approval_repo.list_by_workspace(workspace_id),
            filing_record=await self.filing_repo.get_by_workspace(workspace_id),
            comments=await self.comment_repo.list_by_workspace(workspace_id),
            theses=await self.thesis_repo.list_by_workspace(workspace_id),
            transitions=await self.transition_repo.list_by_workspace(workspace_id),
        )

    async def _load_for_write(
        self, workspace_id: str, expected_version: int | None
    ) -> WorkspaceAggregate:
        aggregate = await self._load(workspace_id)
        current = aggregate.workspace.version
        if expected_version is not None and expected_version != current:
            raise ConcurrentModificationException(
                workspace_id, expected_version, current
            )
        return aggregate

    @staticmethod
    def _ensure_unlocked(aggregate: WorkspaceAggregate) -> None:
        if aggregate.workspace.locked:
            raise WorkspaceLockedException(aggregate.id, aggregate.workspace.locked_by)

    async def _claim(self, aggregate: WorkspaceAggregate, **changes: Any) -> None:
        """Bump the workspace version iff nobody else did since it was read."""
        workspace = aggregate.workspace
        now = self._clock()
        new_version = await self.workspace_repo.claim(
            workspace.id, workspace.version, updated_at=now, **changes
        )
        if new_version is None:
            raise ConcurrentModificationException(workspace.id, workspace.version)
        for key, value in changes.items():
            setattr(workspace, key, value)
        workspace.version = new_version
        workspace.updated_at = now

    async def _record(
        self,
        workspace_id: str,
        action: ActivityAction,
        description: str,
        actor_id: str | None,
        **metadata: Any,
    ) -> None:
        await self.activity_repo.append(
            ActivityEntity(
                id=generate_cuid(),
                workspace_id=workspace_id,
                action=action,
                description=description,
                actor_id=actor_id,
                metadata=metadata,
                created_at=self._clock(),
            )
        )
        logger.info(
            "Workspace %s: %s by %s", workspace_id, action.value, actor_id or "system"
        )

    @staticmethod
    def _actor(actor_id: str | None) -> str | None:
        return actor_id if actor_id is not None else get_current_actor_id()

    @staticmethod
    def _ledger(aggregate: WorkspaceAggregate) -> DocumentLedger:
        return DocumentLedger(
            aggregate.id,
            aggregate.documents,
            aggregate.workspace.principal_document_id,
        )

    @staticmethod
    def _active_document(ledger: DocumentLedger, document_id: str) -> DocumentEntity:
        document = ledger.get(document_id)
        if not document.is_active:
            raise ResourceNotFoundException("document", document_id)
        return document

    # ------------------------------------------------------------------
    # Workspace
    # ------------------------------------------------------------------

    @traced("workspace.get_or_create")
    async def get_or_create(
        self,
        deadline_id: str,
        deadline_type: str | None = None,
        responsible_id: str | None = None,
        *,
        actor_id: str | None = None,
    ) -> WorkspaceAggregate:
        """Return the deadline's workspace, creating and seeding it on first open (idempotent).

        responsible_id defaults to the opening actor and is ignored once the
        workspace exists; use delegate() to change it.
        """
        deadline_id = _required_text(deadline_id, "deadline_id", "Deadline")
        existing = await self.workspace_repo.get_by_deadline(deadline_id)
        if existing is not None:
            return await self._load(existing.id)

        actor = self._actor(actor_id)
        now = self._clock()
        workspace = WorkspaceEntity(
            id=generate_cuid(),
            deadline_id=deadline_id,
            phase=WorkspacePhase.DRAFT,
            deadline_type=_optional_text(deadline_type),
            responsible_id=_optional_text(responsible_id) or actor,
            phase_changed_at=now,
            phase_changed_by=actor,
            created_at=now,
            updated_at=now,
        )
        try:
            workspace = await self.workspace_repo.create(workspace)
        except ConcurrentModificationException:
            # Another request created it between our read and insert.
            winner = await self.workspace_repo.get_by_deadline(deadline_id)
            if winner is None:
                raise
            return await self._load(winner.id)

        template_key, template = checklist_gate.template_for(workspace.deadline_type)
        await self.checklist_repo.create_many(
            [
                ChecklistItemEntity(
                    id=generate_cuid(),
                    workspace_id=workspace.id,
                    title=entry.title,
                    category=entry.category,
                    blocking=entry.blocking,
                    is_required=entry.is_required,
                    position=position,
                    template_source=template_key,
                    created_at=now,
                )
                for position, entry in enumerate(template)
            ]
        )
        await self._record(
            workspace.id,
            ActivityAction.CREATED,
            f"Workspace created with {len(template)} checklist items ({template_key})",
            actor,
            deadline_id=deadline_id,
            template=template_key,
        )
        return await self._load(workspace.id)

    @traced("workspace.get")
    async def get(self, workspace_id: str) -> WorkspaceAggregate:
        """Return the workspace with documents, checklist, approvals, filing record, comments and theses."""
        aggregate = await self._load(workspace_id)
        aggregate.comments = thread_comments(aggregate.comments)
        return aggregate

    @traced("workspace.change_phase")
    async def change_phase(
        self,
        workspace_id: str,
        target_phase: WorkspacePhase,
        reason: str | None = None,
        *,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> WorkspaceAggregate:
        """Validate and apply a phase transition against freshly read state."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        plan = phase_state_machine.plan_transition(aggregate, target_phase, reason)
        add_span_attributes(
            **{
                "workspace.from_phase": plan.from_phase.value,
                "workspace.to_phase": plan.to_phase.value,
            }
        )
        now = self._clock()
        await self._claim(
            aggregate,
            phase=plan.to_phase,
            phase_changed_at=now,
            phase_changed_by=actor,
        )
        await self.transition_repo.append(
            PhaseTransitionEntity(
                id=generate_cuid(),
                workspace_id=workspace_id,
                from_phase=plan.from_phase,
                to_phase=plan.to_phase,
                actor_id=actor,
                reason=plan.reason,
                created_at=now,
            )
        )
        description = f"Phase changed from {plan.from_phase.value} to {plan.to_phase.value}"
        if plan.is_backward:
            description = f"{description}: {plan.reason}"
        await self._record(
            workspace_id,
            ActivityAction.PHASE_CHANGED,
            description,
            actor,
            from_phase=plan.from_phase.value,
            to_phase=plan.to_phase.value,
            reason=plan.reason,
        )
        if plan.to_phase == WorkspacePhase.CLOSED and self.deadline_notifier is not None:
            record = aggregate.filing_record
            await self.deadline_notifier.notify_fulfilled(
                DeadlineFulfilment(
                    deadline_id=aggregate.workspace.deadline_id,
                    workspace_id=workspace_id,
                    filing_number=record.number if record else None,
                    filed_at=record.filed_at if record else None,
                    closed_by=actor,
                )
            )
        return await self.get(workspace_id)

    @traced("workspace.toggle_lock")
    async def toggle_lock(
        self,
        workspace_id: str,
        locked: bool,
        *,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> WorkspaceAggregate:
        """Set the manual hold. Available at any phase; setting the current state is a no-op."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        if aggregate.workspace.locked == locked:
            return await self.get(workspace_id)
        now = self._clock()
        await self._claim(
            aggregate,
            locked=locked,
            locked_by=actor if locked else None,
            locked_at=now if locked else None,
        )
        if locked:
            await self._record(workspace_id, ActivityAction.LOCKED, "Workspace locked", actor)
        else:
            await self._record(
                workspace_id, ActivityAction.UNLOCKED, "Workspace unlocked", actor
            )
        return await self.get(workspace_id)

    @traced("workspace.delegate")
    async def delegate(
        self,
        workspace_id: str,
        responsible_id: str,
        reason: str | None = None,
        *,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> WorkspaceEntity:
        """Hand the deadline to another lawyer; the deadline service is told afterwards.

        Closed workspaces cannot be reassigned. Delegating to the current
        responsible is a no-op.
        """
        actor = self._actor(actor_id)
        responsible_id = _required_text(responsible_id, "responsible_id", "Responsible lawyer")
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        workspace = aggregate.workspace
        if workspace.phase == WorkspacePhase.CLOSED:
            raise ReadOnlyException("delegate", workspace.phase.value, workspace.phase.value)
        previous = workspace.responsible_id
        if previous == responsible_id:
            return workspace
        reason = _optional_text(reason, prose=True)
        await self._claim(aggregate, responsible_id=responsible_id)
        description = f"Deadline delegated to {responsible_id}"
        if reason:
            description = f"{description}: {reason}"
        await self._record(
            workspace_id,
            ActivityAction.DELEGATED,
            description,
            actor,
            previous_responsible_id=previous,
            new_responsible_id=responsible_id,
            reason=reason,
        )
        if self.deadline_notifier is not None:
            await self.deadline_notifier.notify_delegated(
                DeadlineDelegation(
                    deadline_id=workspace.deadline_id,
                    workspace_id=workspace_id,
                    responsible_id=responsible_id,
                    previous_responsible_id=previous,
                    delegated_by=actor,
                    reason=reason,
                )
            )
        return workspace

    # ------------------------------------------------------------------
    # Document ledger
    # ------------------------------------------------------------------

    def _new_document(
        self,
        aggregate: WorkspaceAggregate,
        data: DocumentInput,
        actor: str | None,
        *,
        is_principal: bool,
        replaces_document_id: str | None = None,
    ) -> DocumentEntity:
        title = _required_text(data.title, "title", "Document title", prose=True)
        if data.file_size < 0:
            raise ValidationException("File size cannot be negative", field="file_size")
        storage_url = _optional_text(data.storage_url)
        now = self._clock()
        return DocumentEntity(
            id=generate_cuid(),
            workspace_id=aggregate.id,
            title=title,
            origin_phase=aggregate.phase,
            storage_url=storage_url,
            file_name=_optional_text(data.file_name) if storage_url else None,
            file_size=data.file_size if storage_url else 0,
            mime_type=_optional_text(data.mime_type) if storage_url else None,
            category=_optional_text(data.category) or "ANEXO",
            description=_optional_text(data.description, prose=True),
            is_principal=is_principal,
            replaces_document_id=replaces_document_id,
            uploaded_by=actor,
            created_at=now,
            updated_at=now,
        )

    @traced("workspace.add_document")
    async def add_document(
        self,
        workspace_id: str,
        data: DocumentInput,
        as_principal: bool = False,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> DocumentEntity:
        """Register a document (or a pending placeholder) stamped with the current phase."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        permission_resolver.require_workspace_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            EditCapability.ADD_ONLY,
            "add_document",
        )
        self._ledger(aggregate).ensure_can_add(as_principal)
        document = self._new_document(aggregate, data, actor, is_principal=as_principal)
        if as_principal:
            await self._claim(aggregate, principal_document_id=document.id)
        else:
            await self._claim(aggregate)
        document = await self.document_repo.create(document)
        await self._record(
            workspace_id,
            ActivityAction.DOCUMENT_ADDED,
            f"Document '{document.title}' added"
            + (" as principal draft" if as_principal else ""),
            actor,
            document_id=document.id,
            is_principal=as_principal,
            pending=document.is_pending,
        )
        return document

    @traced("workspace.replace_principal")
    async def replace_principal(
        self,
        workspace_id: str,
        data: DocumentInput,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> DocumentEntity:
        """Supersede the current principal draft (kept as history) with a new one.

        Without a current principal the new document simply becomes the principal.
        """
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        permission_resolver.require_workspace_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            EditCapability.ADD_ONLY,
            "replace_principal",
        )
        previous = self._ledger(aggregate).principal
        document = self._new_document(
            aggregate,
            data,
            actor,
            is_principal=True,
            replaces_document_id=previous.id if previous else None,
        )
        await self._claim(aggregate, principal_document_id=document.id)
        if previous is not None:
            previous.is_superseded = True
            previous.updated_at = self._clock()
            await self.document_repo.update(previous)
        document = await self.document_repo.create(document)
        await self._record(
            workspace_id,
            ActivityAction.PRINCIPAL_REPLACED,
            f"Principal draft replaced by '{document.title}'",
            actor,
            document_id=document.id,
            previous_document_id=previous.id if previous else None,
        )
        return document

    @traced("workspace.remove_document")
    async def remove_document(
        self,
        workspace_id: str,
        document_id: str,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> DocumentEntity:
        """Remove a document from the active ledger; the row is kept as history."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        ledger = self._ledger(aggregate)
        document = self._active_document(ledger, document_id)
        permission_resolver.require_document_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            document,
            EditCapability.FULL_EDIT,
            "remove_document",
        )
        if document.is_current_principal:
            await self._claim(aggregate, principal_document_id=None)
        else:
            await self._claim(aggregate)
        now = self._clock()
        document.removed_at = now
        document.removed_by = actor
        document.updated_at = now
        document = await self.document_repo.update(document)
        await self._record(
            workspace_id,
            ActivityAction.DOCUMENT_REMOVED,
            f"Document '{document.title}' removed",
            actor,
            document_id=document.id,
        )
        return document

    @traced("workspace.rename_document")
    async def rename_document(
        self,
        workspace_id: str,
        document_id: str,
        title: str,
        description: str | None = None,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> DocumentEntity:
        """Change a document's title (and optionally its description)."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        document = self._active_document(self._ledger(aggregate), document_id)
        permission_resolver.require_document_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            document,
            EditCapability.FULL_EDIT,
            "rename_document",
        )
        new_title = _required_text(title, "title", "Document title", prose=True)
        old_title = document.title
        await self._claim(aggregate)
        document.title = new_title
        if description is not None:
            document.description = _optional_text(description, prose=True)
        document.updated_at = self._clock()
        document = await self.document_repo.update(document)
        await self._record(
            workspace_id,
            ActivityAction.DOCUMENT_RENAMED,
            f"Document '{old_title}' renamed to '{new_title}'",
            actor,
            document_id=document.id,
            old_title=old_title,
            new_title=new_title,
        )
        return document

    @traced("workspace.attach_document_file")
    async def attach_document_file(
        self,
        workspace_id: str,
        document_id: str,
        file: FileReference,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> DocumentEntity:
        """Complete a pending placeholder with an uploaded file reference."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        ledger = self._ledger(aggregate)
        document = self._active_document(ledger, document_id)
        ledger.ensure_mutable(document, "attach a file")
        permission_resolver.require_document_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            document,
            EditCapability.FULL_EDIT,
            "attach_document_file",
        )
        if not document.is_pending:
            raise ValidationException(
                "Document already has an uploaded file", field="document_id"
            )
        url = _required_text(file.url, "url", "Storage URL")
        if file.file_size < 0:
            raise ValidationException("File size cannot be negative", field="file_size")
        await self._claim(aggregate)
        document.storage_url = url
        document.file_name = _optional_text(file.file_name)
        document.file_size = file.file_size
        document.mime_type = _optional_text(file.mime_type)
        document.updated_at = self._clock()
        document = await self.document_repo.update(document)
        await self._record(
            workspace_id,
            ActivityAction.DOCUMENT_FILE_ATTACHED,
            f"File '{document.file_name or url}' attached to '{document.title}'",
            actor,
            document_id=document.id,
            file_size=document.file_size,
        )
        return document

    @traced("workspace.validate_document")
    async def validate_document(
        self,
        workspace_id: str,
        document_id: str,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> DocumentEntity:
        """Mark an uploaded document as checked by a reviewer."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        permission_resolver.require_workspace_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            EditCapability.ADD_ONLY,
            "validate_document",
        )
        ledger = self._ledger(aggregate)
        document = self._active_document(ledger, document_id)
        ledger.ensure_mutable(document, "validate")
        if document.is_pending:
            raise ValidationException(
                "Cannot validate a document without an uploaded file",
                field="document_id",
            )
        if document.is_validated:
            return document
        await self._claim(aggregate)
        now = self._clock()
        document.is_validated = True
        document.validated_by = actor
        document.validated_at = now
        document.updated_at = now
        document = await self.document_repo.update(document)
        await self._record(
            workspace_id,
            ActivityAction.DOCUMENT_VALIDATED,
            f"Document '{document.title}' validated",
            actor,
            document_id=document.id,
        )
        return document

    # ------------------------------------------------------------------
    # Checklist
    # ------------------------------------------------------------------

    def _find_item(
        self, aggregate: WorkspaceAggregate, item_id: str
    ) -> ChecklistItemEntity:
        item = aggregate.find_checklist_item(item_id)
        if item is None:
            raise ResourceNotFoundException("checklist_item", item_id)
        return item

    @traced("workspace.toggle_checklist")
    async def toggle_checklist(
        self,
        workspace_id: str,
        item_id: str,
        checked: bool,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> ChecklistItemEntity:
        """Check or uncheck an item; rejected with READ_ONLY when the viewed phase is read-only."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        permission_resolver.require_workspace_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            EditCapability.ADD_ONLY,
            "toggle_checklist",
        )
        item = self._find_item(aggregate, item_id)
        if item.checked == checked:
            return item
        await self._claim(aggregate)
        item.checked = checked
        item.checked_by = actor if checked else None
        item.checked_at = self._clock() if checked else None
        item = await self.checklist_repo.update(item)
        await self._record(
            workspace_id,
            ActivityAction.CHECKLIST_TOGGLED,
            f"Checklist item '{item.title}' {'checked' if checked else 'unchecked'}",
            actor,
            item_id=item.id,
            checked=checked,
        )
        return item

    @traced("workspace.add_checklist_item")
    async def add_checklist_item(
        self,
        workspace_id: str,
        title: str,
        category: str | None = None,
        blocking: bool = False,
        is_required: bool | None = None,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> ChecklistItemEntity:
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        permission_resolver.require_workspace_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            EditCapability.ADD_ONLY,
            "add_checklist_item",
        )
        item = ChecklistItemEntity(
            id=generate_cuid(),
            workspace_id=workspace_id,
            title=_required_text(title, "title", "Checklist item title", prose=True),
            category=_optional_text(category) or "GERAL",
            blocking=blocking,
            is_required=blocking if is_required is None else is_required,
            position=max((i.position for i in aggregate.checklist), default=-1) + 1,
            created_at=self._clock(),
        )
        await self._claim(aggregate)
        (item,) = await self.checklist_repo.create_many([item])
        await self._record(
            workspace_id,
            ActivityAction.CHECKLIST_ITEM_ADDED,
            f"Checklist item '{item.title}' added"
            + (" (blocking)" if item.blocking else ""),
            actor,
            item_id=item.id,
            blocking=item.blocking,
        )
        return item

    @traced("workspace.delete_checklist_item")
    async def delete_checklist_item(
        self,
        workspace_id: str,
        item_id: str,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> None:
        """Delete an item; requires full edit (drafting phase)."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        permission_resolver.require_workspace_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            EditCapability.FULL_EDIT,
            "delete_checklist_item",
        )
        item = self._find_item(aggregate, item_id)
        await self._claim(aggregate)
        await self.checklist_repo.delete(item.id)
        await self._record(
            workspace_id,
            ActivityAction.CHECKLIST_ITEM_REMOVED,
            f"Checklist item '{item.title}' removed",
            actor,
            item_id=item.id,
        )

    # ------------------------------------------------------------------
    # Approvals
    # ------------------------------------------------------------------

    @traced("workspace.request_approval")
    async def request_approval(
        self,
        workspace_id: str,
        approver_id: str,
        *,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> ApprovalRequestEntity:
        """Open a new approval round (APPROVAL phase only)."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        approval_tracker.ensure_can_request(aggregate.phase, approver_id)
        approval = ApprovalRequestEntity(
            id=generate_cuid(),
            workspace_id=workspace_id,
            round=approval_tracker.next_round(aggregate.approvals),
            approver_id=approver_id.strip(),
            requested_by=actor,
            requested_at=self._clock(),
        )
        await self._claim(aggregate)
        approval = await self.approval_repo.create(approval)
        await self._record(
            workspace_id,
            ActivityAction.APPROVAL_REQUESTED,
            f"Approval round {approval.round} requested from {approval.approver_id}",
            actor,
            approval_id=approval.id,
            round=approval.round,
            approver_id=approval.approver_id,
        )
        return approval

    @traced("workspace.decide_approval")
    async def decide_approval(
        self,
        workspace_id: str,
        approval_id: str,
        status: ApprovalStatus,
        feedback: str | None = None,
        corrections_required: str | None = None,
        *,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> ApprovalRequestEntity:
        """Record a terminal decision on a pending request."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        approval = aggregate.find_approval(approval_id)
        if approval is None:
            raise ResourceNotFoundException("approval", approval_id)
        normalized = approval_tracker.validate_decision(approval, status, feedback)
        await self._claim(aggregate)
        approval.status = status
        approval.feedback = normalized
        approval.corrections_required = _optional_text(corrections_required, prose=True)
        approval.decided_by = actor
        approval.decided_at = self._clock()
        approval = await self.approval_repo.update(approval)
        await self._record(
            workspace_id,
            ActivityAction.APPROVAL_DECIDED,
            f"Approval round {approval.round} decided: {status.value}",
            actor,
            approval_id=approval.id,
            round=approval.round,
            status=status.value,
        )
        return approval

    # ------------------------------------------------------------------
    # Filing record
    # ------------------------------------------------------------------

    @traced("workspace.register_filing")
    async def register_filing(
        self,
        workspace_id: str,
        system: str | None,
        number: str,
        filed_at: datetime,
        receipt_url: str | None = None,
        *,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> FilingRecordEntity:
        """Register (or overwrite) the filing record while in FILING."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        filing_validator.ensure_can_register(aggregate.phase)
        record = filing_validator.build_record(
            workspace_id,
            system,
            number,
            filed_at,
            receipt_url,
            registered_by=actor,
            registered_at=self._clock(),
        )
        await self._claim(aggregate)
        record = await self.filing_repo.upsert(record)
        await self._record(
            workspace_id,
            ActivityAction.FILING_REGISTERED,
            f"Filing {record.number} registered"
            + (f" on {record.system}" if record.system else ""),
            actor,
            number=record.number,
            system=record.system,
            filed_at=record.filed_at.isoformat() if record.filed_at else None,
        )
        return record

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    @traced("workspace.add_comment")
    async def add_comment(
        self,
        workspace_id: str,
        content: str,
        kind: str | None = None,
        parent_id: str | None = None,
        *,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> CommentEntity:
        """Append a comment or a reply to a top-level comment."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        text = _required_text(content, "content", "Comment", prose=True)
        if parent_id is not None:
            parent = next((c for c in aggregate.comments if c.id == parent_id), None)
            if parent is None:
                raise ResourceNotFoundException("comment", parent_id)
            if parent.parent_id is not None:
                raise ValidationException(
                    "Replies can only be added to top-level comments",
                    field="parent_id",
                )
        comment = CommentEntity(
            id=generate_cuid(),
            workspace_id=workspace_id,
            content=text,
            author_id=actor,
            kind=_optional_text(kind) or "GERAL",
            parent_id=parent_id,
            created_at=self._clock(),
        )
        await self._claim(aggregate)
        comment = await self.comment_repo.create(comment)
        await self._record(
            workspace_id,
            ActivityAction.COMMENT_ADDED,
            "Reply added" if parent_id else f"Comment added ({comment.kind})",
            actor,
            comment_id=comment.id,
            parent_id=parent_id,
        )
        return comment

    @traced("workspace.resolve_comment")
    async def resolve_comment(
        self,
        workspace_id: str,
        comment_id: str,
        *,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> CommentEntity:
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        comment = next((c for c in aggregate.comments if c.id == comment_id), None)
        if comment is None:
            raise ResourceNotFoundException("comment", comment_id)
        if comment.resolved:
            return comment
        await self._claim(aggregate)
        comment.resolved = True
        comment.resolved_by = actor
        comment.resolved_at = self._clock()
        comment = await self.comment_repo.update(comment)
        await self._record(
            workspace_id,
            ActivityAction.COMMENT_RESOLVED,
            "Comment resolved",
            actor,
            comment_id=comment.id,
        )
        return comment

    @traced("workspace.list_comments")
    async def list_comments(
        self,
        workspace_id: str,
        kind: str | None = None,
        resolved: bool | None = None,
    ) -> list[CommentEntity]:
        """Top-level comments with their replies, optionally filtered."""
        if await self.workspace_repo.get_by_id(workspace_id) is None:
            raise ResourceNotFoundException("workspace", workspace_id)
        threads = thread_comments(await self.comment_repo.list_by_workspace(workspace_id))
        if kind is not None:
            threads = [c for c in threads if c.kind == kind]
        if resolved is not None:
            threads = [c for c in threads if c.resolved == resolved]
        return threads

    # ------------------------------------------------------------------
    # Theses
    # ------------------------------------------------------------------

    def _find_thesis(self, aggregate: WorkspaceAggregate, thesis_id: str) -> ThesisEntity:
        thesis = aggregate.find_thesis(thesis_id)
        if thesis is None:
            raise ResourceNotFoundException("thesis", thesis_id)
        return thesis

    @traced("workspace.add_thesis")
    async def add_thesis(
        self,
        workspace_id: str,
        data: ThesisInput,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> ThesisEntity:
        """Append a thesis after the last one; gated like adding a checklist item."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        permission_resolver.require_workspace_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            EditCapability.ADD_ONLY,
            "add_thesis",
        )
        now = self._clock()
        thesis = ThesisEntity(
            id=generate_cuid(),
            workspace_id=workspace_id,
            title=_required_text(data.title, "title", "Thesis title", prose=True),
            kind=ThesisKind(data.kind),
            status=ThesisStatus(data.status),
            issue=_optional_text(data.issue, prose=True),
            rule=_optional_text(data.rule, prose=True),
            analysis=_optional_text(data.analysis, prose=True),
            conclusion=_optional_text(data.conclusion, prose=True),
            legal_refs=_references(data.legal_refs),
            case_refs=_references(data.case_refs),
            doctrine_refs=_references(data.doctrine_refs),
            strength=ThesisStrength(data.strength) if data.strength else None,
            position=max((t.position for t in aggregate.theses), default=-1) + 1,
            created_by=actor,
            created_at=now,
            updated_at=now,
        )
        await self._claim(aggregate)
        thesis = await self.thesis_repo.create(thesis)
        await self._record(
            workspace_id,
            ActivityAction.THESIS_ADDED,
            f"Thesis '{thesis.title}' added ({thesis.kind.value})",
            actor,
            thesis_id=thesis.id,
            kind=thesis.kind.value,
        )
        return thesis

    @traced("workspace.update_thesis")
    async def update_thesis(
        self,
        workspace_id: str,
        thesis_id: str,
        changes: ThesisChanges,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> ThesisEntity:
        """Apply the fields set in changes; position moves the thesis in the list."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        permission_resolver.require_workspace_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            EditCapability.ADD_ONLY,
            "update_thesis",
        )
        thesis = self._find_thesis(aggregate, thesis_id)
        if changes.position is not None and changes.position < 0:
            raise ValidationException("Position cannot be negative", field="position")
        changed: list[str] = []
        if changes.title is not None:
            thesis.title = _required_text(changes.title, "title", "Thesis title", prose=True)
            changed.append("title")
        for attr in _THESIS_TEXT_ATTRS:
            value = getattr(changes, attr)
            if value is not None:
                setattr(thesis, attr, _optional_text(value, prose=True))
                changed.append(attr)
        for attr in _THESIS_REF_ATTRS:
            value = getattr(changes, attr)
            if value is not None:
                setattr(thesis, attr, _references(value))
                changed.append(attr)
        if changes.kind is not None:
            thesis.kind = ThesisKind(changes.kind)
            changed.append("kind")
        if changes.status is not None:
            thesis.status = ThesisStatus(changes.status)
            changed.append("status")
        if changes.strength is not None:
            thesis.strength = ThesisStrength(changes.strength)
            changed.append("strength")
        if changes.position is not None:
            thesis.position = changes.position
            changed.append("position")
        if not changed:
            return thesis
        thesis.updated_at = self._clock()
        await self._claim(aggregate)
        thesis = await self.thesis_repo.update(thesis)
        await self._record(
            workspace_id,
            ActivityAction.THESIS_UPDATED,
            f"Thesis '{thesis.title}' updated",
            actor,
            thesis_id=thesis.id,
            fields=changed,
        )
        return thesis

    @traced("workspace.delete_thesis")
    async def delete_thesis(
        self,
        workspace_id: str,
        thesis_id: str,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> None:
        """Delete a thesis; requires full edit (drafting phase)."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._ensure_unlocked(aggregate)
        permission_resolver.require_workspace_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            EditCapability.FULL_EDIT,
            "delete_thesis",
        )
        thesis = self._find_thesis(aggregate, thesis_id)
        await self._claim(aggregate)
        await self.thesis_repo.delete(thesis.id)
        await self._record(
            workspace_id,
            ActivityAction.THESIS_REMOVED,
            f"Thesis '{thesis.title}' removed",
            actor,
            thesis_id=thesis.id,
        )

    # ------------------------------------------------------------------
    # Draft content
    # ------------------------------------------------------------------

    def _require_content_edit(
        self,
        aggregate: WorkspaceAggregate,
        viewing_phase: WorkspacePhase | None,
        action: str,
    ) -> None:
        self._ensure_unlocked(aggregate)
        permission_resolver.require_workspace_capability(
            aggregate.phase,
            viewing_phase or aggregate.phase,
            EditCapability.ADD_ONLY,
            action,
        )

    @traced("workspace.save_content")
    async def save_content(
        self,
        workspace_id: str,
        content: DraftContent,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> WorkspaceEntity:
        """Store the editor state; HTML keeps formatting tags only."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._require_content_edit(aggregate, viewing_phase, "save_content")
        if (content.word_count or 0) < 0 or (content.char_count or 0) < 0:
            raise ValidationException("Word and character counts cannot be negative")
        html = clean_rich_text(content.content_html)
        words, chars = _text_counts(html)
        word_count = content.word_count if content.word_count is not None else words
        char_count = content.char_count if content.char_count is not None else chars
        await self._claim(
            aggregate,
            content_json=content.content_json,
            content_html=html,
            content_saved_at=self._clock(),
            content_saved_by=actor,
            word_count=word_count,
            char_count=char_count,
        )
        await self._record(
            workspace_id,
            ActivityAction.CONTENT_EDITED,
            f"Draft saved ({word_count} words)",
            actor,
            word_count=word_count,
        )
        return aggregate.workspace

    @traced("workspace.save_version")
    async def save_version(
        self,
        workspace_id: str,
        change_summary: str | None = None,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> DraftVersionEntity:
        """Snapshot the current draft as the next numbered version."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._require_content_edit(aggregate, viewing_phase, "save_version")
        workspace = aggregate.workspace
        if workspace.content_json is None and not workspace.content_html:
            raise ValidationException("There is no draft content to save as a version")
        existing = await self.draft_version_repo.list_by_workspace(workspace_id)
        number = max((v.version_number for v in existing), default=0) + 1
        version = DraftVersionEntity(
            id=generate_cuid(),
            workspace_id=workspace_id,
            version_number=number,
            title=f"Version {number}",
            content_json=workspace.content_json,
            content_html=workspace.content_html,
            word_count=workspace.word_count,
            change_summary=_optional_text(change_summary, prose=True)
            or f"Version {number} saved",
            created_by=actor,
            created_at=self._clock(),
        )
        await self._claim(aggregate)
        version = await self.draft_version_repo.append(version)
        await self._record(
            workspace_id,
            ActivityAction.VERSION_SAVED,
            f"{version.title} saved: {version.change_summary}",
            actor,
            version_number=number,
        )
        return version

    @traced("workspace.restore_version")
    async def restore_version(
        self,
        workspace_id: str,
        version_id: str,
        *,
        viewing_phase: WorkspacePhase | None = None,
        expected_version: int | None = None,
        actor_id: str | None = None,
    ) -> WorkspaceEntity:
        """Copy a saved version back into the draft; the version itself is kept."""
        actor = self._actor(actor_id)
        aggregate = await self._load_for_write(workspace_id, expected_version)
        self._require_content_edit(aggregate, viewing_phase, "restore_version")
        version = await self.draft_version_repo.get_by_id(version_id)
        if version is None or version.workspace_id != workspace_id:
            raise ResourceNotFoundException("draft_version", version_id)
        _, char_count = _text_counts(version.content_html)
        await self._claim(
            aggregate,
            content_json=version.content_json,
            content_html=version.content_html,
            content_saved_at=self._clock(),
            content_saved_by=actor,
            word_count=version.word_count,
            char_count=char_count,
        )
        await self._record(
            workspace_id,
            ActivityAction.CONTENT_EDITED,
            f"Draft restored from {version.title}",
            actor,
            restored_version=version.version_number,
        )
        return aggregate.workspace

    @traced("workspace.list_versions")
    async def list_versions(self, workspace_id: str) -> list[DraftVersionEntity]:
        """Saved versions, newest first."""
        if await self.workspace_repo.get_by_id(workspace_id) is None:
            raise ResourceNotFoundException("workspace", workspace_id)
        return await self.draft_version_repo.list_by_workspace(workspace_id)

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    @traced("workspace.list_activities")
    async def list_activities(
        self,
        workspace_id: str,
        action: ActivityAction | None = None,
        page: int = 1,
        per_page: int = 50,
    ) -> ActivityPage:
        """Activity log, newest first."""
        if page < 1:
            raise ValidationException("page must be >= 1", field="page")
        if not 1 <= per_page <= MAX_ACTIVITY_PAGE_SIZE:
            raise ValidationException(
                f"per_page must be between 1 and {MAX_ACTIVITY_PAGE_SIZE}",
                field="per_page",
            )
        if await self.workspace_repo.get_by_id(workspace_id) is None:
            raise ResourceNotFoundException("workspace", workspace_id)
        items, total = await self.activity_repo.list_page(
            workspace_id, action, skip=(page - 1) * per_page, limit=per_page
        )
        return ActivityPage(items=items, total=total, page=page, per_page=per_page)

    @traced("workspace.phase_history")
    async def phase_history(self, workspace_id: str) -> list[PhaseTransitionEntity]:
        if await self.workspace_repo.get_by_id(workspace_id) is None:
            raise ResourceNotFoundException("workspace", workspace_id)
        return await self.transition_repo.list_by_workspace(workspace_id)

    @traced("workspace.permissions")
    async def permissions(
        self,
        workspace_id: str,
        viewing_phase: WorkspacePhase | None = None,
    ) -> WorkspacePermissions:
        """Capabilities of the workspace and each active document for the viewed phase."""
        aggregate = await self._load(workspace_id)
        current = aggregate.phase
        viewing = viewing_phase or current
        return WorkspacePermissions(
            workspace_id=workspace_id,
            current_phase=current,
            viewing_phase=viewing,
            locked=aggregate.workspace.locked,
            workspace_capability=permission_resolver.workspace_capability(current, viewing),
            documents=[
                DocumentPermission(
                    document_id=d.id,
                    origin_phase=d.origin_phase,
                    capability=permission_resolver.document_capability(current, viewing, d),
                )
                for d in self._ledger(aggregate).active
            ],
        )

    @traced("workspace.stats")
    async def stats(self, workspace_id: str) -> WorkspaceStats:
        """Derived counters recomputed from the stored entities."""
        aggregate = await self._load(workspace_id)
        ledger = self._ledger(aggregate)
        done, total = checklist_gate.progress(aggregate.checklist)
        last = approval_tracker.latest(aggregate.approvals)
        versions = await self.draft_version_repo.list_by_workspace(workspace_id)
        return WorkspaceStats(
            checklist_done=done,
            checklist_total=total,
            checklist_progress=round(done * 100 / total) if total else 0,
            blocking_unchecked=len(checklist_gate.blocking_unchecked(aggregate.checklist)),
            total_comments=len(aggregate.comments),
            open_comments=sum(1 for c in aggregate.comments if not c.resolved),
            total_documents=ledger.document_count,
            superseded_documents=ledger.superseded_count,
            pending_uploads=ledger.pending_count,
            total_document_size=ledger.total_size,
            pending_approvals=len(approval_tracker.pending(aggregate.approvals)),
            current_round=last.round if last else 0,
            last_approval=last,
            filing_complete=filing_validator.is_complete(aggregate.filing_record),
            total_theses=len(aggregate.theses),
            word_count=aggregate.workspace.word_count,
            estimated_pages=aggregate.workspace.estimated_pages,
            saved_versions=len(versions),
            next_phase_blockers=[
                BlockingCondition(code=u.code, message=u.message)
                for u in phase_state_machine.next_phase_blockers(aggregate)
            ],
        )
