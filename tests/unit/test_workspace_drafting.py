"""Unit tests for WorkspaceService drafting operations: theses, draft content and versions, delegation."""

from unittest.mock import AsyncMock

import pytest

from app.application.dtos.workspace import DeadlineDelegation, DraftContent, ThesisChanges, ThesisInput
from app.application.use_cases.workspaces import WorkspaceService
from app.domain.enums import ActivityAction, ThesisKind, ThesisStatus, ThesisStrength, WorkspacePhase
from app.domain.exceptions import (
    PermissionDeniedException,
    ReadOnlyException,
    ResourceNotFoundException,
    ValidationException,
    WorkspaceLockedException,
)
from tests.support import InMemoryStore, WorkflowDriver

P = WorkspacePhase

PETITION_HTML = "<p>Excelentíssimo Senhor</p><script>alert(1)</script><p>Juiz</p>"


def _last_activity(store: InMemoryStore):
    return store.activities[-1]


class TestTheses:
    async def test_add_appends_after_last(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        first = await service.add_thesis(ws.id, ThesisInput(title="Prescrição"), actor_id="lawyer-1")
        second = await service.add_thesis(
            ws.id,
            ThesisInput(title="Ilegitimidade passiva", kind=ThesisKind.PRELIMINAR),
            actor_id="lawyer-1",
        )
        assert (first.position, second.position) == (0, 1)
        assert first.kind == ThesisKind.MERITO
        assert first.status == ThesisStatus.RASCUNHO
        assert first.created_by == "lawyer-1"
        assert [t.title for t in (await service.get(ws.id)).theses] == [
            "Prescrição",
            "Ilegitimidade passiva",
        ]

    async def test_add_records_activity(
        self, driver: WorkflowDriver, service: WorkspaceService, store: InMemoryStore
    ) -> None:
        ws = await driver.open()
        thesis = await service.add_thesis(
            ws.id, ThesisInput(title="Decadência", kind=ThesisKind.PREJUDICIAL), actor_id="lawyer-2"
        )
        activity = _last_activity(store)
        assert activity.action == ActivityAction.THESIS_ADDED
        assert activity.description == "Thesis 'Decadência' added (PREJUDICIAL)"
        assert activity.metadata == {"thesis_id": thesis.id, "kind": "PREJUDICIAL"}

    async def test_markup_and_duplicate_references_dropped(
        self, driver: WorkflowDriver, service: WorkspaceService
    ) -> None:
        ws = await driver.open()
        thesis = await service.add_thesis(
            ws.id,
            ThesisInput(
                title="<b>Prescrição</b>",
                issue="  <i>Prazo</i> quinquenal ",
                legal_refs=["Art. 206 CC", " ", "Art. 206 CC", "Art. 189 CC"],
            ),
        )
        assert thesis.title == "Prescrição"
        assert thesis.issue == "Prazo quinquenal"
        assert thesis.legal_refs == ["Art. 206 CC", "Art. 189 CC"]

    async def test_blank_title_rejected(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        with pytest.raises(ValidationException):
            await service.add_thesis(ws.id, ThesisInput(title="<p> </p>"))

    async def test_update_applies_only_given_fields(
        self, driver: WorkflowDriver, service: WorkspaceService, store: InMemoryStore
    ) -> None:
        ws = await driver.open()
        thesis = await service.add_thesis(ws.id, ThesisInput(title="Prescrição", issue="Prazo"))
        updated = await service.update_thesis(
            ws.id,
            thesis.id,
            ThesisChanges(status=ThesisStatus.APROVADA, strength=ThesisStrength.FORTE, issue=""),
        )
        assert updated.title == "Prescrição"
        assert updated.status == ThesisStatus.APROVADA
        assert updated.strength == ThesisStrength.FORTE
        assert updated.issue is None
        activity = _last_activity(store)
        assert activity.action == ActivityAction.THESIS_UPDATED
        assert activity.metadata["fields"] == ["issue", "status", "strength"]

    async def test_reorder(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        first = await service.add_thesis(ws.id, ThesisInput(title="A"))
        await service.add_thesis(ws.id, ThesisInput(title="B"))
        await service.update_thesis(ws.id, first.id, ThesisChanges(position=5))
        assert [t.title for t in (await service.get(ws.id)).theses] == ["B", "A"]

    async def test_negative_position_rejected(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        thesis = await service.add_thesis(ws.id, ThesisInput(title="A"))
        with pytest.raises(ValidationException):
            await service.update_thesis(ws.id, thesis.id, ThesisChanges(position=-1))

    async def test_empty_update_does_not_bump_version(
        self, driver: WorkflowDriver, service: WorkspaceService, store: InMemoryStore
    ) -> None:
        ws = await driver.open()
        thesis = await service.add_thesis(ws.id, ThesisInput(title="A"))
        claims = store.claims
        await service.update_thesis(ws.id, thesis.id, ThesisChanges())
        assert store.claims == claims

    async def test_delete_requires_full_edit(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        kept = await service.add_thesis(ws.id, ThesisInput(title="Mantida"))
        dropped = await service.add_thesis(ws.id, ThesisInput(title="Descartada"))
        await service.delete_thesis(ws.id, dropped.id)
        assert [t.id for t in (await service.get(ws.id)).theses] == [kept.id]
        await driver.to_review(ws.id)
        with pytest.raises(PermissionDeniedException):
            await service.delete_thesis(ws.id, kept.id)

    async def test_add_allowed_in_review(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        await driver.to_review(ws.id)
        thesis = await service.add_thesis(ws.id, ThesisInput(title="Tese do revisor"))
        assert thesis.position == 0

    async def test_filing_is_read_only(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        await driver.to_filing(ws.id)
        with pytest.raises(ReadOnlyException):
            await service.add_thesis(ws.id, ThesisInput(title="Tardia"))

    async def test_locked_workspace_rejects(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        thesis = await service.add_thesis(ws.id, ThesisInput(title="A"))
        await service.toggle_lock(ws.id, True, actor_id="partner-1")
        with pytest.raises(WorkspaceLockedException):
            await service.update_thesis(ws.id, thesis.id, ThesisChanges(title="B"))

    async def test_unknown_thesis(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        with pytest.raises(ResourceNotFoundException):
            await service.delete_thesis(ws.id, "missing")

    async def test_stats_count_theses(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        await service.add_thesis(ws.id, ThesisInput(title="A"))
        await service.add_thesis(ws.id, ThesisInput(title="B"))
        assert (await service.stats(ws.id)).total_theses == 2


class TestDraftContent:
    async def test_save_cleans_html_and_counts_words(
        self, driver: WorkflowDriver, service: WorkspaceService, store: InMemoryStore
    ) -> None:
        ws = await driver.open()
        saved = await service.save_content(
            ws.id, DraftContent(content_json={"type": "doc"}, content_html=PETITION_HTML), actor_id="lawyer-2"
        )
        assert "<script>" not in saved.content_html
        assert "alert" not in saved.content_html
        assert "<p>Juiz</p>" in saved.content_html
        assert saved.word_count == 3
        assert saved.char_count == len("Excelentíssimo Senhor Juiz")
        assert saved.content_saved_by == "lawyer-2"
        assert saved.content_json == {"type": "doc"}
        activity = _last_activity(store)
        assert activity.action == ActivityAction.CONTENT_EDITED
        assert activity.description == "Draft saved (3 words)"

    async def test_client_counts_win(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        saved = await service.save_content(
            ws.id, DraftContent(content_html="<p>curto</p>", word_count=601, char_count=4000)
        )
        assert saved.word_count == 601
        assert saved.estimated_pages == 3
        stats = await service.stats(ws.id)
        assert (stats.word_count, stats.estimated_pages) == (601, 3)

    async def test_negative_counts_rejected(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        with pytest.raises(ValidationException):
            await service.save_content(ws.id, DraftContent(content_html="<p>a</p>", word_count=-1))

    async def test_closed_is_read_only(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        await driver.to_closed(ws.id)
        with pytest.raises(ReadOnlyException):
            await service.save_content(ws.id, DraftContent(content_html="<p>tarde</p>"))

    async def test_version_without_content_rejected(
        self, driver: WorkflowDriver, service: WorkspaceService
    ) -> None:
        ws = await driver.open()
        with pytest.raises(ValidationException):
            await service.save_version(ws.id)

    async def test_versions_are_numbered(
        self, driver: WorkflowDriver, service: WorkspaceService, store: InMemoryStore
    ) -> None:
        ws = await driver.open()
        await service.save_content(ws.id, DraftContent(content_html="<p>primeira minuta</p>"))
        first = await service.save_version(ws.id)
        second = await service.save_version(ws.id, "Ajustes do sócio")
        assert (first.version_number, first.title) == (1, "Version 1")
        assert first.change_summary == "Version 1 saved"
        assert first.word_count == 2
        assert second.version_number == 2
        assert _last_activity(store).description == "Version 2 saved: Ajustes do sócio"
        assert [v.version_number for v in await service.list_versions(ws.id)] == [2, 1]
        assert (await service.stats(ws.id)).saved_versions == 2

    async def test_restore_copies_snapshot_back(
        self, driver: WorkflowDriver, service: WorkspaceService, store: InMemoryStore
    ) -> None:
        ws = await driver.open()
        await service.save_content(ws.id, DraftContent(content_json={"v": 1}, content_html="<p>texto original</p>"))
        version = await service.save_version(ws.id)
        await service.save_content(ws.id, DraftContent(content_json={"v": 2}, content_html="<p>outro</p>"))
        restored = await service.restore_version(ws.id, version.id, actor_id="lawyer-3")
        assert restored.content_html == "<p>texto original</p>"
        assert restored.content_json == {"v": 1}
        assert restored.word_count == 2
        assert restored.content_saved_by == "lawyer-3"
        activity = _last_activity(store)
        assert activity.action == ActivityAction.CONTENT_EDITED
        assert activity.metadata == {"restored_version": 1}
        assert len(await service.list_versions(ws.id)) == 1

    async def test_restore_other_workspace_version_not_found(
        self, driver: WorkflowDriver, service: WorkspaceService
    ) -> None:
        ws = await driver.open()
        other = await driver.open("deadline-2")
        await service.save_content(other.id, DraftContent(content_html="<p>alheia</p>"))
        version = await service.save_version(other.id)
        with pytest.raises(ResourceNotFoundException):
            await service.restore_version(ws.id, version.id)

    async def test_list_versions_unknown_workspace(self, service: WorkspaceService) -> None:
        with pytest.raises(ResourceNotFoundException):
            await service.list_versions("missing")


class TestDelegation:
    async def test_open_defaults_responsible_to_actor(
        self, driver: WorkflowDriver, service: WorkspaceService
    ) -> None:
        ws = await driver.open()
        assert ws.workspace.responsible_id == "lawyer-1"
        other = await service.get_or_create("deadline-2", responsible_id="lawyer-5", actor_id="lawyer-1")
        assert other.workspace.responsible_id == "lawyer-5"

    async def test_delegate_records_and_notifies(
        self,
        driver: WorkflowDriver,
        service: WorkspaceService,
        store: InMemoryStore,
        notifier: AsyncMock,
    ) -> None:
        ws = await driver.open()
        updated = await service.delegate(ws.id, "lawyer-2", "Férias", actor_id="partner-1")
        assert updated.responsible_id == "lawyer-2"
        assert (await service.get(ws.id)).workspace.responsible_id == "lawyer-2"
        activity = _last_activity(store)
        assert activity.action == ActivityAction.DELEGATED
        assert activity.description == "Deadline delegated to lawyer-2: Férias"
        assert activity.metadata == {
            "previous_responsible_id": "lawyer-1",
            "new_responsible_id": "lawyer-2",
            "reason": "Férias",
        }
        notifier.notify_delegated.assert_awaited_once_with(
            DeadlineDelegation(
                deadline_id="deadline-1",
                workspace_id=ws.id,
                responsible_id="lawyer-2",
                previous_responsible_id="lawyer-1",
                delegated_by="partner-1",
                reason="Férias",
            )
        )

    async def test_same_responsible_is_noop(
        self,
        driver: WorkflowDriver,
        service: WorkspaceService,
        store: InMemoryStore,
        notifier: AsyncMock,
    ) -> None:
        ws = await driver.open()
        claims = store.claims
        await service.delegate(ws.id, "lawyer-1")
        assert store.claims == claims
        notifier.notify_delegated.assert_not_awaited()

    async def test_blank_responsible_rejected(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        with pytest.raises(ValidationException):
            await service.delegate(ws.id, "   ")

    async def test_allowed_mid_workflow(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        await driver.to_filing(ws.id)
        updated = await service.delegate(ws.id, "lawyer-2")
        assert updated.responsible_id == "lawyer-2"

    async def test_closed_workspace_rejected(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        await driver.to_closed(ws.id)
        with pytest.raises(ReadOnlyException):
            await service.delegate(ws.id, "lawyer-2")

    async def test_locked_workspace_rejected(self, driver: WorkflowDriver, service: WorkspaceService) -> None:
        ws = await driver.open()
        await service.toggle_lock(ws.id, True, actor_id="partner-1")
        with pytest.raises(WorkspaceLockedException):
            await service.delegate(ws.id, "lawyer-2")
