"""Domain layer: entities, enums, and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from bookflow.domain.entities import (
    BookingEntity,
    HostRef,
    OrganizationRef,
    ScheduledEventEntity,
    WorkflowEntity,
    WorkflowExecutionEntity,
    WorkflowStep,
)
from bookflow.domain.enums import WorkflowExecutionStatus, WorkflowStatus
from bookflow.domain.exceptions import (
    ActionExecutionException,
    BookflowException,
    InvalidExecutionTransitionException,
    ResourceNotFoundException,
    ValidationException,
    WorkflowDefinitionException,
)

__all__ = [
    # Entities
    "BookingEntity",
    "HostRef",
    "OrganizationRef",
    "ScheduledEventEntity",
    "WorkflowEntity",
    "WorkflowExecutionEntity",
    "WorkflowStep",
    # Enums
    "WorkflowExecutionStatus",
    "WorkflowStatus",
    # Exceptions
    "ActionExecutionException",
    "BookflowException",
    "InvalidExecutionTransitionException",
    "ResourceNotFoundException",
    "ValidationException",
    "WorkflowDefinitionException",
]
