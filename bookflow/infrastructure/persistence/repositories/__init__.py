"""Persistence repositories. Re-exports for the composition root."""

from bookflow.infrastructure.persistence.repositories.base import BaseRepository
from bookflow.infrastructure.persistence.repositories.workflow_execution_repo import (
    WorkflowExecutionRepository,
)
from bookflow.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowRepository,
)

__all__ = [
    "BaseRepository",
    "WorkflowExecutionRepository",
    "WorkflowRepository",
]
