"""Domain enumerations for workflows and executions.

Enums represent fixed sets of domain values (workflow status, execution
status). Stored as their string values.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class WorkflowStatus(_ValuesMixin, str, Enum):
    """Workflow definition status. Only ACTIVE workflows can be triggered."""

    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"


class WorkflowExecutionStatus(_ValuesMixin, str, Enum):
    """Workflow execution lifecycle status.

    RUNNING is the initial state; COMPLETED and FAILED are terminal.
    """

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Return whether no further transition is allowed from this status."""
        return self is not WorkflowExecutionStatus.RUNNING
