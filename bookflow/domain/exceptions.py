"""Domain exceptions for bookflow.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Callers
(e.g. an HTTP layer) map them to responses using message, error_code
and details.
"""

from typing import Any


class BookflowException(Exception):
    """Base exception for all bookflow errors.

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


class ValidationException(BookflowException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(BookflowException):
    """Raised when a requested resource is not found (or soft-deleted)."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'workflow', 'workflow_execution').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class WorkflowDefinitionException(BookflowException):
    """Raised when a workflow's step list is malformed."""

    def __init__(self, message: str, step_index: int | None = None) -> None:
        details = {"step_index": step_index} if step_index is not None else {}
        super().__init__(message, "INVALID_WORKFLOW_DEFINITION", details)


class InvalidExecutionTransitionException(BookflowException):
    """Raised when an execution leaves a terminal status (running -> terminal only)."""

    def __init__(self, execution_id: str, current: str, requested: str) -> None:
        super().__init__(
            f"Execution {execution_id} cannot move from {current} to {requested}",
            "INVALID_EXECUTION_TRANSITION",
            {"execution_id": execution_id, "current": current, "requested": requested},
        )


class ActionExecutionException(BookflowException):
    """Raised by an action's execute() when the work itself fails.

    The engine treats any exception from execute() as a failed attempt;
    actions raise this one so the message carries the action's prefix
    (e.g. 'Failed to send email: ...').
    """

    def __init__(self, action_id: str, message: str) -> None:
        super().__init__(message, "ACTION_EXECUTION_FAILED", {"action_id": action_id})
