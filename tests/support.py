"""In-memory repositories and workflow helpers shared by the service and API tests.

The repositories honour the repository protocols, including the versioned
claim, so WorkspaceService runs unchanged on top of them.
"""

from copy import deepcopy
from datetime import datetime, timedelta, timezone
from typing import Any

from app.application.dtos.workspace import DocumentInput
from app.application.use_cases.workspaces import WorkspaceService
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
from app.domain.enums import ActivityAction, ApprovalStatus, WorkspacePhase
from app.domain.exceptions import ConcurrentModificationException

FILED_AT = datetime(2026, 3, 2, 14, 30, tzinfo=timezone.utc)


class StepClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


class InMemoryStore:
    """Rows shared by the in-memory repositories (one 'database')."""

    def __init__(self) -> None:
        self.workspaces: dict[str, WorkspaceEntity] = {}
        self.documents: dict[str, DocumentEntity] = {}
        self.checklist: dict[str, ChecklistItemEntity] = {}
        self.approvals: dict[str, ApprovalRequestEntity] = {}
        self.filings: dict[str, FilingRecordEntity] = {}
        self.comments: dict[str, CommentEntity] = {}
        self.theses: dict[str, ThesisEntity] = {}
        self.versions: list[DraftVersionEntity] = []
        self.transitions: list[PhaseTransitionEntity] = []
        self.activities: list[ActivityEntity] = []
        self.claims = 0
        # Simulates another writer bumping the version between read and claim.
        self.steal_next_claim = False


class InMemoryWorkspaceRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get_by_id(self, workspace_id: str) -> WorkspaceEntity | None:
        row = self.store.workspaces.get(workspace_id)
        return deepcopy(row) if row else None

    async def get_by_deadline(self, deadline_id: str) -> WorkspaceEntity | None:
        for row in self.store.workspaces.values():
            if row.deadline_id == deadline_id:
                return deepcopy(row)
        return None

    async def create(self, workspace: WorkspaceEntity) -> WorkspaceEntity:
        if any(w.deadline_id == workspace.deadline_id for w in self.store.workspaces.values()):
            raise ConcurrentModificationException(workspace.id, workspace.version)
        self.store.workspaces[workspace.id] = deepcopy(workspace)
        return deepcopy(workspace)

    async def claim(self, workspace_id: str, read_version: int, **changes: Any) -> int | None:
        row = self.store.workspaces.get(workspace_id)
        if row is None:
            return None
        if self.store.steal_next_claim:
            self.store.steal_next_claim = False
            row.version += 1
        if row.version != read_version:
            return None
        for key, value in changes.items():
            setattr(row, key, value)
        row.version += 1
        self.store.claims += 1
        return row.version


class InMemoryDocumentRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def list_by_workspace(self, workspace_id: str) -> list[DocumentEntity]:
        return [deepcopy(d) for d in self.store.documents.values() if d.workspace_id == workspace_id]

    async def create(self, document: DocumentEntity) -> DocumentEntity:
        self.store.documents[document.id] = deepcopy(document)
        return deepcopy(document)

    async def update(self, document: DocumentEntity) -> DocumentEntity:
        self.store.documents[document.id] = deepcopy(document)
        return deepcopy(document)


class InMemoryChecklistRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def list_by_workspace(self, workspace_id: str) -> list[ChecklistItemEntity]:
        items = [deepcopy(i) for i in self.store.checklist.values() if i.workspace_id == workspace_id]
        return sorted(items, key=lambda i: i.position)

    async def create_many(self, items: list[ChecklistItemEntity]) -> list[ChecklistItemEntity]:
        for item in items:
            self.store.checklist[item.id] = deepcopy(item)
        return [deepcopy(i) for i in items]

    async def update(self, item: ChecklistItemEntity) -> ChecklistItemEntity:
        self.store.checklist[item.id] = deepcopy(item)
        return deepcopy(item)

    async def delete(self, item_id: str) -> None:
        self.store.checklist.pop(item_id, None)


class InMemoryApprovalRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def list_by_workspace(self, workspace_id: str) -> list[ApprovalRequestEntity]:
        rows = [deepcopy(a) for a in self.store.approvals.values() if a.workspace_id == workspace_id]
        return sorted(rows, key=lambda a: a.round)

    async def create(self, approval: ApprovalRequestEntity) -> ApprovalRequestEntity:
        self.store.approvals[approval.id] = deepcopy(approval)
        return deepcopy(approval)

    async def update(self, approval: ApprovalRequestEntity) -> ApprovalRequestEntity:
        self.store.approvals[approval.id] = deepcopy(approval)
        return deepcopy(approval)


class InMemoryFilingRecordRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get_by_workspace(self, workspace_id: str) -> FilingRecordEntity | None:
        row = self.store.filings.get(workspace_id)
        return deepcopy(row) if row else None

    async def upsert(self, record: FilingRecordEntity) -> FilingRecordEntity:
        self.store.filings[record.workspace_id] = deepcopy(record)
        return deepcopy(record)


class InMemoryCommentRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def list_by_workspace(self, workspace_id: str) -> list[CommentEntity]:
        return [deepcopy(c) for c in self.store.comments.values() if c.workspace_id == workspace_id]

    async def create(self, comment: CommentEntity) -> CommentEntity:
        self.store.comments[comment.id] = deepcopy(comment)
        return deepcopy(comment)

    async def update(self, comment: CommentEntity) -> CommentEntity:
        self.store.comments[comment.id] = deepcopy(comment)
        return deepcopy(comment)


class InMemoryThesisRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def list_by_workspace(self, workspace_id: str) -> list[ThesisEntity]:
        rows = [deepcopy(t) for t in self.store.theses.values() if t.workspace_id == workspace_id]
        return sorted(rows, key=lambda t: t.position)

    async def create(self, thesis: ThesisEntity) -> ThesisEntity:
        self.store.theses[thesis.id] = deepcopy(thesis)
        return deepcopy(thesis)

    async def update(self, thesis: ThesisEntity) -> ThesisEntity:
        self.store.theses[thesis.id] = deepcopy(thesis)
        return deepcopy(thesis)

    async def delete(self, thesis_id: str) -> None:
        self.store.theses.pop(thesis_id, None)


class InMemoryDraftVersionRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def list_by_workspace(self, workspace_id: str) -> list[DraftVersionEntity]:
        rows = [v for v in self.store.versions if v.workspace_id == workspace_id]
        return sorted(rows, key=lambda v: v.version_number, reverse=True)

    async def get_by_id(self, version_id: str) -> DraftVersionEntity | None:
        return next((v for v in self.store.versions if v.id == version_id), None)

    async def append(self, version: DraftVersionEntity) -> DraftVersionEntity:
        self.store.versions.append(version)
        return version


class InMemoryPhaseTransitionRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def list_by_workspace(self, workspace_id: str) -> list[PhaseTransitionEntity]:
        return [t for t in self.store.transitions if t.workspace_id == workspace_id]

    async def append(self, transition: PhaseTransitionEntity) -> PhaseTransitionEntity:
        self.store.transitions.append(transition)
        return transition


class InMemoryActivityRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def append(self, activity: ActivityEntity) -> ActivityEntity:
        self.store.activities.append(activity)
        return activity

    async def list_page(
        self,
        workspace_id: str,
        action: ActivityAction | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[ActivityEntity], int]:
        rows = [
            a
            for a in reversed(self.store.activities)
            if a.workspace_id == workspace_id and (action is None or a.action == action)
        ]
        return rows[skip : skip + limit], len(rows)


def build_in_memory_service(
    store: InMemoryStore, notifier: Any = None, clock: StepClock | None = None
) -> WorkspaceService:
    """WorkspaceService wired to in-memory repositories sharing one store."""
    return WorkspaceService(
        workspace_repo=InMemoryWorkspaceRepository(store),
        document_repo=InMemoryDocumentRepository(store),
        checklist_repo=InMemoryChecklistRepository(store),
        approval_repo=InMemoryApprovalRepository(store),
        filing_repo=InMemoryFilingRecordRepository(store),
        comment_repo=InMemoryCommentRepository(store),
        transition_repo=InMemoryPhaseTransitionRepository(store),
        activity_repo=InMemoryActivityRepository(store),
        thesis_repo=InMemoryThesisRepository(store),
        draft_version_repo=InMemoryDraftVersionRepository(store),
        deadline_notifier=notifier,
        clock=clock or StepClock(),
    )


class WorkflowDriver:
    """Moves a workspace along the happy path so tests can start mid-workflow."""

    def __init__(self, service: WorkspaceService) -> None:
        self.service = service

    async def open(self, deadline_id: str = "deadline-1", deadline_type: str | None = None) -> WorkspaceAggregate:
        return await self.service.get_or_create(deadline_id, deadline_type, actor_id="lawyer-1")

    async def satisfy_draft(self, workspace_id: str) -> None:
        """Upload a principal draft and check every blocking checklist item."""
        await self.service.add_document(
            workspace_id,
            DocumentInput(
                title="Petição inicial",
                storage_url="/files/uploads/a/peticao.pdf",
                file_name="peticao.pdf",
                file_size=1024,
                mime_type="application/pdf",
            ),
            as_principal=True,
            actor_id="lawyer-1",
        )
        aggregate = await self.service.get(workspace_id)
        for item in aggregate.checklist:
            if item.blocking:
                await self.service.toggle_checklist(workspace_id, item.id, True, actor_id="lawyer-1")

    async def to_review(self, workspace_id: str) -> WorkspaceAggregate:
        await self.satisfy_draft(workspace_id)
        return await self.service.change_phase(workspace_id, WorkspacePhase.REVIEW, actor_id="lawyer-1")

    async def to_approval(self, workspace_id: str) -> WorkspaceAggregate:
        await self.to_review(workspace_id)
        return await self.service.change_phase(workspace_id, WorkspacePhase.APPROVAL, actor_id="lawyer-1")

    async def to_filing(self, workspace_id: str) -> WorkspaceAggregate:
        await self.to_approval(workspace_id)
        approval = await self.service.request_approval(workspace_id, "partner-1", actor_id="lawyer-1")
        await self.service.decide_approval(
            workspace_id, approval.id, ApprovalStatus.APPROVED, actor_id="partner-1"
        )
        return await self.service.change_phase(workspace_id, WorkspacePhase.FILING, actor_id="lawyer-1")

    async def to_closed(self, workspace_id: str) -> WorkspaceAggregate:
        await self.to_filing(workspace_id)
        await self.service.register_filing(
            workspace_id, "PJe", "0001234-56.2026.8.26.0100", FILED_AT, actor_id="lawyer-1"
        )
        return await self.service.change_phase(workspace_id, WorkspacePhase.CLOSED, actor_id="lawyer-1")

