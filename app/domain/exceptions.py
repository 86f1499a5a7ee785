"""Domain exceptions for the deadline workspace.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class WorkspaceException(Exception):
    """Base exception for all workspace application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(WorkspaceException):
    """Raised when input validation fails (e.g. empty title or bad value)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(WorkspaceException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'workspace', 'document').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class InvalidTransitionException(WorkspaceException):
    """Raised when the requested phase edge is not in the allowed set."""

    def __init__(self, from_phase: str, to_phase: str) -> None:
        super().__init__(
            f"Transition {from_phase} -> {to_phase} is not allowed",
            "INVALID_TRANSITION",
            {"from_phase": from_phase, "to_phase": to_phase},
        )


class PreconditionFailedException(WorkspaceException):
    """Raised when a valid edge is requested but gating conditions are unmet.

    details["unmet"] lists every unmet condition as {code, message} so the
    caller can display all of them at once.
    """

    def __init__(
        self,
        from_phase: str,
        to_phase: str,
        unmet: list[dict[str, Any]],
    ) -> None:
        summary = "; ".join(str(u["message"]) for u in unmet)
        super().__init__(
            f"Cannot move {from_phase} -> {to_phase}: {summary}",
            "PRECONDITION_FAILED",
            {"from_phase": from_phase, "to_phase": to_phase, "unmet": unmet},
        )

    @property
    def unmet_codes(self) -> list[str]:
        """Codes of the unmet conditions, in the order they were detected."""
        return [str(u["code"]) for u in self.details["unmet"]]


class WorkspaceLockedException(WorkspaceException):
    """Raised when a mutation is attempted on a locked workspace."""

    def __init__(self, workspace_id: str, locked_by: str | None = None) -> None:
        super().__init__(
            "Workspace is locked; unlock it before making changes",
            "WORKSPACE_LOCKED",
            {"workspace_id": workspace_id, "locked_by": locked_by},
        )


class PermissionDeniedException(WorkspaceException):
    """Raised when the phase permission rules deny the requested capability."""

    def __init__(
        self,
        action: str,
        capability: str,
        message: str | None = None,
        error_code: str = "PERMISSION_DENIED",
        **details_extra: Any,
    ) -> None:
        """Initialize with the attempted action and the resolved capability.

        Args:
            action: Action that was attempted (e.g. 'remove_document').
            capability: Capability resolved for the viewed phase.
            message: Optional override for the default message.
            error_code: Machine-readable code (subclasses narrow it).
            **details_extra: Extra keys merged into details (e.g. document_id).
        """
        details = {"action": action, "capability": capability, **details_extra}
        super().__init__(
            message or f"Permission denied: {action} ({capability})",
            error_code,
            details,
        )


class ReadOnlyException(PermissionDeniedException):
    """Raised when the viewed phase is read-only for the workspace."""

    def __init__(self, action: str, viewing_phase: str, current_phase: str) -> None:
        super().__init__(
            action,
            "READ_ONLY",
            message=f"Phase {viewing_phase} is read-only while workspace is in {current_phase}",
            error_code="READ_ONLY",
            viewing_phase=viewing_phase,
            current_phase=current_phase,
        )


class PrincipalAlreadyExistsException(WorkspaceException):
    """Raised when adding a principal draft while one is already current."""

    def __init__(self, workspace_id: str, principal_document_id: str) -> None:
        super().__init__(
            "Workspace already has a principal document; replace it instead",
            "PRINCIPAL_ALREADY_EXISTS",
            {
                "workspace_id": workspace_id,
                "principal_document_id": principal_document_id,
            },
        )


class MissingFeedbackException(WorkspaceException):
    """Raised when an approval is rejected without feedback."""

    def __init__(self, approval_id: str) -> None:
        super().__init__(
            "Feedback is required when rejecting an approval",
            "MISSING_FEEDBACK",
            {"approval_id": approval_id, "field": "feedback"},
        )


class ApprovalAlreadyDecidedException(WorkspaceException):
    """Raised when deciding an approval request that is no longer pending."""

    def __init__(self, approval_id: str, status: str) -> None:
        super().__init__(
            f"Approval {approval_id} was already decided ({status})",
            "APPROVAL_ALREADY_DECIDED",
            {"approval_id": approval_id, "status": status},
        )


class PhaseMismatchException(WorkspaceException):
    """Raised when an operation is only valid in a phase the workspace is not in."""

    def __init__(self, operation: str, required_phase: str, current_phase: str) -> None:
        super().__init__(
            f"{operation} requires phase {required_phase}; workspace is in {current_phase}",
            "PHASE_MISMATCH",
            {
                "operation": operation,
                "required_phase": required_phase,
                "current_phase": current_phase,
            },
        )


class ConcurrentModificationException(WorkspaceException):
    """Raised when a concurrent request changed the workspace first (optimistic lock)."""

    def __init__(
        self,
        workspace_id: str,
        expected_version: int,
        actual_version: int | None = None,
    ) -> None:
        super().__init__(
            "Workspace was updated by another request; re-read and retry.",
            "CONCURRENT_MODIFICATION",
            {
                "workspace_id": workspace_id,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )


class DatabaseNotConfiguredException(WorkspaceException):
    """Raised when an operation requires the SQL database but it is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
