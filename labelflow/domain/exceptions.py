"""Domain exceptions for the Labelflow application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class LabelflowException(Exception):
    """Base exception for all Labelflow application errors.

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
        """Return the error body used by API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(LabelflowException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(LabelflowException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: int | str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'task', 'workflow_stage').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class InvalidStatusTransitionException(LabelflowException):
    """Raised when the status validator denies a requested transition.

    No mutation has happened when this is raised; the reason is user-facing.
    """

    def __init__(
        self,
        from_status: str,
        to_status: str,
        reason: str,
        task_id: int | None = None,
    ) -> None:
        details: dict[str, Any] = {
            "from_status": from_status,
            "to_status": to_status,
            "reason": reason,
        }
        if task_id is not None:
            details["task_id"] = task_id
        super().__init__(
            f"Invalid status transition from {from_status} to {to_status}: {reason}",
            "INVALID_STATUS_TRANSITION",
            details,
        )
        self.reason = reason


class TaskVersionConflictException(LabelflowException):
    """Raised when a concurrent request updated the task first (optimistic lock)."""

    def __init__(self, task_id: int | None = None) -> None:
        super().__init__(
            "Task was updated by another request; retry.",
            "TASK_VERSION_CONFLICT",
            {"task_id": task_id} if task_id is not None else {},
        )


class PersistenceException(LabelflowException):
    """Raised when a store reports that a write affected no rows."""

    def __init__(self, resource_type: str, resource_id: int | None = None) -> None:
        details: dict[str, Any] = {"resource_type": resource_type}
        if resource_id is not None:
            details["resource_id"] = resource_id
        super().__init__(
            f"Failed to persist {resource_type}",
            "PERSISTENCE_ERROR",
            details,
        )


class InvalidStageGraphException(LabelflowException):
    """Raised when a workflow's stages do not form a valid linear graph."""

    def __init__(self, message: str, workflow_id: int | None = None) -> None:
        details = {"workflow_id": workflow_id} if workflow_id is not None else {}
        super().__init__(message, "INVALID_STAGE_GRAPH", details)


class SqlNotConfiguredException(LabelflowException):
    """Raised when an operation requires Postgres but the backend is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )


class AssetTransferException(LabelflowException):
    """Raised when an object-store call fails transiently (timeout, backend error).

    Nothing has been committed; the operation is safe to retry.
    """

    def __init__(self, asset_id: int, operation: str, reason: str) -> None:
        super().__init__(
            f"Asset transfer interrupted during {operation}",
            "ASSET_TRANSFER_UNAVAILABLE",
            {"asset_id": asset_id, "operation": operation, "reason": reason},
        )
