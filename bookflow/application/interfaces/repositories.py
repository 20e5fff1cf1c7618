"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities only; no infrastructure imports.
Every lookup takes the organization id explicitly; there is no ambient tenant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from bookflow.domain.entities.workflow import (
        WorkflowEntity,
        WorkflowExecutionEntity,
    )
    from bookflow.domain.enums import WorkflowStatus


# Workflow definition repository interface
class IWorkflowRepository(Protocol):
    """Protocol for workflow definition storage."""

    async def find_active(
        self, trigger_type: str, organization_id: str
    ) -> list[WorkflowEntity]:
        """Return active, non-deleted workflows for trigger_type in the organization, in run order."""

    async def get_by_id_and_organization(
        self, workflow_id: str, organization_id: str
    ) -> WorkflowEntity | None:
        """Return a non-deleted workflow of the organization, or None."""

    async def list_by_organization(
        self,
        organization_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowEntity]:
        """Return non-deleted workflows of the organization (any status)."""

    async def create_workflow(
        self,
        organization_id: str,
        name: str,
        trigger_type: str,
        steps: list[dict[str, Any]],
        *,
        description: str | None = None,
        trigger_config: dict[str, Any] | None = None,
        status: WorkflowStatus | None = None,
        created_by: str | None = None,
    ) -> WorkflowEntity:
        """Create a workflow definition; return the created entity."""

    async def update_workflow(
        self, workflow_id: str, organization_id: str, changes: dict[str, Any]
    ) -> WorkflowEntity:
        """Apply field changes; raise ResourceNotFoundException if missing."""

    async def soft_delete(self, workflow_id: str, organization_id: str) -> None:
        """Flag the workflow deleted; raise ResourceNotFoundException if missing."""


# Workflow execution repository interface
class IWorkflowExecutionRepository(Protocol):
    """Protocol for execution records (created running, finalized once)."""

    async def create_running(
        self,
        workflow_id: str,
        organization_id: str,
        context: dict[str, Any],
    ) -> WorkflowExecutionEntity:
        """Persist a new execution with status running and return it."""

    async def finalize(self, execution: WorkflowExecutionEntity) -> None:
        """Persist the terminal status, error, step results and completed_at in one update."""

    async def list_by_workflow(
        self,
        workflow_id: str,
        organization_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowExecutionEntity]:
        """Return executions of a workflow, newest first."""
