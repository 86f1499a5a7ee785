"""Application services: the pure workflow rules of a deadline workspace.

phase_state_machine orchestrates the other rules (document ledger, checklist
gate, approval tracker, filing validator, permission resolver).
"""

from app.application.services.document_ledger import DocumentLedger, LedgerInvariantError
from app.application.services.phase_state_machine import (
    ALLOWED_TRANSITIONS,
    TransitionPlan,
    UnmetCondition,
    plan_transition,
)
from app.application.services.permission_resolver import resolve

__all__ = [
    "ALLOWED_TRANSITIONS",
    "DocumentLedger",
    "LedgerInvariantError",
    "TransitionPlan",
    "UnmetCondition",
    "plan_transition",
    "resolve",
]
