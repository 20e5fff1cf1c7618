"""Domain entities: workflow definitions, executions, and trigger sources."""

from bookflow.domain.entities.booking import (
    BookingEntity,
    HostRef,
    OrganizationRef,
    ScheduledEventEntity,
)
from bookflow.domain.entities.workflow import (
    WorkflowEntity,
    WorkflowExecutionEntity,
    WorkflowStep,
)

__all__ = [
    "BookingEntity",
    "HostRef",
    "OrganizationRef",
    "ScheduledEventEntity",
    "WorkflowEntity",
    "WorkflowExecutionEntity",
    "WorkflowStep",
]
