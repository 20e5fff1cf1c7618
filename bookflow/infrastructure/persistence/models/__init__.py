"""Persistence models: ORM entities and mixins."""

from bookflow.infrastructure.persistence.models.mixins import (
    AuditedOrganizationModel,
    CreatedByMixin,
    CuidMixin,
    OrganizationMixin,
    OrganizationModel,
    SoftDeleteMixin,
    TimestampMixin,
)
from bookflow.infrastructure.persistence.models.workflow import (
    Workflow,
    WorkflowExecution,
)

__all__ = [
    "AuditedOrganizationModel",
    "CreatedByMixin",
    "CuidMixin",
    "OrganizationMixin",
    "OrganizationModel",
    "SoftDeleteMixin",
    "TimestampMixin",
    "Workflow",
    "WorkflowExecution",
]
