"""Filing record validator: proof of court submission before closure."""

from __future__ import annotations

from datetime import datetime

from app.domain.entities.workspace import FilingRecordEntity
from app.domain.enums import WorkspacePhase
from app.domain.exceptions import PhaseMismatchException, ValidationException
from app.shared.utils.datetime import ensure_utc


def ensure_can_register(phase: WorkspacePhase) -> None:
    """Registration is only valid while FILING; a CLOSED record is immutable."""
    if phase != WorkspacePhase.FILING:
        raise PhaseMismatchException(
            "register_filing", WorkspacePhase.FILING.value, phase.value
        )


def build_record(
    workspace_id: str,
    system: str | None,
    number: str,
    filed_at: datetime,
    receipt_url: str | None,
    registered_by: str | None,
    registered_at: datetime,
) -> FilingRecordEntity:
    """Normalize input into a record; replaces any prior draft values."""
    number = (number or "").strip()
    if not number:
        raise ValidationException("Filing number is required", field="number")
    if filed_at is None:
        raise ValidationException("Filing timestamp is required", field="filed_at")
    return FilingRecordEntity(
        workspace_id=workspace_id,
        system=(system or "").strip() or None,
        number=number,
        filed_at=ensure_utc(filed_at),
        receipt_url=(receipt_url or "").strip() or None,
        registered_by=registered_by,
        registered_at=registered_at,
    )


def is_complete(record: FilingRecordEntity | None) -> bool:
    """Filing number and timestamp both present."""
    return record is not None and record.is_complete
