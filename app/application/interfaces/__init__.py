"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IActivityRepository,
    IApprovalRepository,
    IChecklistRepository,
    ICommentRepository,
    IFilingRecordRepository,
    IPhaseTransitionRepository,
    IWorkspaceDocumentRepository,
    IWorkspaceRepository,
)
from app.application.interfaces.services import IDeadlineNotifier, IStorageService

__all__ = [
    "IActivityRepository",
    "IApprovalRepository",
    "IChecklistRepository",
    "ICommentRepository",
    "IDeadlineNotifier",
    "IFilingRecordRepository",
    "IPhaseTransitionRepository",
    "IStorageService",
    "IWorkspaceDocumentRepository",
    "IWorkspaceRepository",
]
