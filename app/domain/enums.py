"""Domain enumerations for the deadline workspace.

Enums represent fixed sets of domain values (phases, capabilities,
approval decisions, activity actions, thesis classification).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class WorkspacePhase(_ValuesMixin, str, Enum):
    """Workflow phase of a deadline workspace.

    Declaration order is the workflow order; compare with rank or precedes().
    """

    DRAFT = "DRAFT"
    REVIEW = "REVIEW"
    APPROVAL = "APPROVAL"
    FILING = "FILING"
    CLOSED = "CLOSED"

    @property
    def rank(self) -> int:
        """Zero-based position in the workflow order."""
        return _PHASE_ORDER.index(self)

    def precedes(self, other: "WorkspacePhase") -> bool:
        """Return True if this phase is strictly earlier than other."""
        return self.rank < other.rank

    def next_phase(self) -> "WorkspacePhase | None":
        """Return the next phase in order, or None for CLOSED."""
        idx = self.rank + 1
        return _PHASE_ORDER[idx] if idx < len(_PHASE_ORDER) else None


_PHASE_ORDER: tuple[WorkspacePhase, ...] = tuple(WorkspacePhase)


class EditCapability(_ValuesMixin, str, Enum):
    """What a user may do to documents/checklist while viewing a phase."""

    FULL_EDIT = "FULL_EDIT"
    ADD_ONLY = "ADD_ONLY"
    READ_ONLY = "READ_ONLY"


class ApprovalStatus(_ValuesMixin, str, Enum):
    """Reviewer decision on an approval request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    APPROVED_WITH_CAVEATS = "APPROVED_WITH_CAVEATS"
    REJECTED = "REJECTED"


class ActivityAction(_ValuesMixin, str, Enum):
    """Actions recorded in the workspace activity log."""

    CREATED = "CREATED"
    PHASE_CHANGED = "PHASE_CHANGED"
    LOCKED = "LOCKED"
    UNLOCKED = "UNLOCKED"
    DOCUMENT_ADDED = "DOCUMENT_ADDED"
    DOCUMENT_FILE_ATTACHED = "DOCUMENT_FILE_ATTACHED"
    DOCUMENT_RENAMED = "DOCUMENT_RENAMED"
    DOCUMENT_REMOVED = "DOCUMENT_REMOVED"
    DOCUMENT_VALIDATED = "DOCUMENT_VALIDATED"
    PRINCIPAL_REPLACED = "PRINCIPAL_REPLACED"
    CHECKLIST_ITEM_ADDED = "CHECKLIST_ITEM_ADDED"
    CHECKLIST_ITEM_REMOVED = "CHECKLIST_ITEM_REMOVED"
    CHECKLIST_TOGGLED = "CHECKLIST_TOGGLED"
    APPROVAL_REQUESTED = "APPROVAL_REQUESTED"
    APPROVAL_DECIDED = "APPROVAL_DECIDED"
    FILING_REGISTERED = "FILING_REGISTERED"
    COMMENT_ADDED = "COMMENT_ADDED"
    COMMENT_RESOLVED = "COMMENT_RESOLVED"
    THESIS_ADDED = "THESIS_ADDED"
    THESIS_UPDATED = "THESIS_UPDATED"
    THESIS_REMOVED = "THESIS_REMOVED"
    CONTENT_EDITED = "CONTENT_EDITED"
    VERSION_SAVED = "VERSION_SAVED"
    DELEGATED = "DELEGATED"


class ThesisKind(_ValuesMixin, str, Enum):
    """Procedural role of a legal argument in the filing."""

    PRELIMINAR = "PRELIMINAR"
    PREJUDICIAL = "PREJUDICIAL"
    MERITO = "MERITO"
    SUBSIDIARIA = "SUBSIDIARIA"


class ThesisStatus(_ValuesMixin, str, Enum):
    RASCUNHO = "RASCUNHO"
    REVISAO = "REVISAO"
    APROVADA = "APROVADA"
    DESCARTADA = "DESCARTADA"


class ThesisStrength(_ValuesMixin, str, Enum):
    FORTE = "FORTE"
    MEDIA = "MEDIA"
    FRACA = "FRACA"
