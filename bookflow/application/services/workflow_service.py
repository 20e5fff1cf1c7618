"""Workflow definition management: create, edit, activate, duplicate, soft delete."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from bookflow.application.dtos.workflow import WorkflowCreate, WorkflowUpdate
from bookflow.application.interfaces.repositories import (
    IWorkflowExecutionRepository,
    IWorkflowRepository,
)
from bookflow.application.services.action_registry import ActionRegistry
from bookflow.domain.entities.workflow import WorkflowEntity, WorkflowExecutionEntity
from bookflow.domain.enums import WorkflowStatus
from bookflow.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
    WorkflowDefinitionException,
)
from bookflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

COPY_SUFFIX = " (Copy)"


class WorkflowService:
    """Manage workflow definitions of an organization.

    Step lists are checked for shape on every write. A workflow that is (or
    becomes) active is also checked against the action registry, so an
    active workflow never names an unknown action or carries a config its
    action rejects. Drafts may be saved incomplete.
    """

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        execution_repo: IWorkflowExecutionRepository,
        action_registry: ActionRegistry | None = None,
    ) -> None:
        self._workflow_repo = workflow_repo
        self._execution_repo = execution_repo
        self._action_registry = action_registry

    def validate_steps(self, steps: Any, *, strict: bool = False) -> list[dict[str, Any]]:
        """Return steps normalized to [{"action": ..., "config": {...}}].

        Raises:
            WorkflowDefinitionException: On a malformed step, or (strict) an
                unknown action or a config the action rejects.
        """
        if not isinstance(steps, list):
            raise WorkflowDefinitionException("Steps must be a list")
        normalized: list[dict[str, Any]] = []
        for i, step in enumerate(steps):
            if not isinstance(step, Mapping):
                raise WorkflowDefinitionException(f"Step {i} must be an object", i)
            action_id = step.get("action") or step.get("action_id")
            if not isinstance(action_id, str) or not action_id.strip():
                raise WorkflowDefinitionException(f"Step {i} must have an action", i)
            config = step.get("config", {})
            if config is None:
                config = {}
            if not isinstance(config, Mapping):
                raise WorkflowDefinitionException(f"Step {i} config must be an object", i)
            if strict and self._action_registry is not None:
                self._check_against_registry(i, action_id, dict(config))
            normalized.append({"action": action_id, "config": dict(config)})
        return normalized

    def _check_against_registry(
        self, index: int, action_id: str, config: dict[str, Any]
    ) -> None:
        action = self._action_registry.get_action(action_id)
        if action is None:
            raise WorkflowDefinitionException(
                f"Step {index}: Action not found: {action_id}", index
            )
        errors = action.validate(config)
        if errors:
            raise WorkflowDefinitionException(
                f"Step {index}: Configuration validation failed: {', '.join(errors)}",
                index,
            )

    async def get_workflow(self, workflow_id: str, organization_id: str) -> WorkflowEntity:
        """Return the workflow or raise ResourceNotFoundException."""
        workflow = await self._workflow_repo.get_by_id_and_organization(
            workflow_id, organization_id
        )
        if workflow is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        return workflow

    async def list_workflows(
        self, organization_id: str, skip: int = 0, limit: int = 100
    ) -> list[WorkflowEntity]:
        return await self._workflow_repo.list_by_organization(
            organization_id, skip=skip, limit=limit
        )

    async def create_workflow(
        self,
        organization_id: str,
        data: WorkflowCreate,
        created_by: str | None = None,
    ) -> WorkflowEntity:
        """Create a workflow (draft unless data.status says otherwise)."""
        if not data.name or not data.name.strip():
            raise ValidationException("Workflow name is required", field="name")
        if not data.trigger_type:
            raise ValidationException("Trigger type is required", field="trigger_type")
        steps = self.validate_steps(
            data.steps, strict=data.status == WorkflowStatus.ACTIVE
        )
        created = await self._workflow_repo.create_workflow(
            organization_id,
            data.name,
            data.trigger_type,
            steps,
            description=data.description,
            trigger_config=data.trigger_config,
            status=data.status,
            created_by=created_by,
        )
        logger.info(
            "Workflow %s created (organization_id=%s, trigger=%s, status=%s)",
            created.id,
            organization_id,
            created.trigger_type,
            created.status.value,
        )
        return created

    async def update_workflow(
        self, workflow_id: str, organization_id: str, data: WorkflowUpdate
    ) -> WorkflowEntity:
        """Apply a partial update. Runs already in flight keep their step snapshot."""
        current = await self.get_workflow(workflow_id, organization_id)
        changes = data.changes()
        if "name" in changes and not changes["name"].strip():
            raise ValidationException("Workflow name is required", field="name")
        status = changes.get("status", current.status)
        if "steps" in changes:
            changes["steps"] = self.validate_steps(
                changes["steps"], strict=status == WorkflowStatus.ACTIVE
            )
        elif status == WorkflowStatus.ACTIVE and current.status != WorkflowStatus.ACTIVE:
            self.validate_steps(current.steps_as_dicts(), strict=True)
        if not changes:
            return current
        return await self._workflow_repo.update_workflow(
            workflow_id, organization_id, changes
        )

    async def set_status(
        self, workflow_id: str, organization_id: str, status: WorkflowStatus
    ) -> WorkflowEntity:
        """Activate or deactivate a workflow (activation re-checks its steps)."""
        updated = await self.update_workflow(
            workflow_id, organization_id, WorkflowUpdate(status=WorkflowStatus(status))
        )
        logger.info("Workflow %s status set to %s", workflow_id, updated.status.value)
        return updated

    async def delete_workflow(self, workflow_id: str, organization_id: str) -> None:
        """Soft delete: the workflow stops triggering; its executions are kept."""
        await self._workflow_repo.soft_delete(workflow_id, organization_id)

    async def duplicate_workflow(
        self,
        workflow_id: str,
        organization_id: str,
        created_by: str | None = None,
    ) -> WorkflowEntity:
        """Copy a workflow as a draft named '<name> (Copy)'."""
        source = await self.get_workflow(workflow_id, organization_id)
        return await self._workflow_repo.create_workflow(
            organization_id,
            f"{source.name}{COPY_SUFFIX}",
            source.trigger_type,
            source.steps_as_dicts(),
            description=source.description,
            trigger_config=dict(source.trigger_config),
            status=WorkflowStatus.DRAFT,
            created_by=created_by,
        )

    async def list_executions(
        self,
        workflow_id: str,
        organization_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowExecutionEntity]:
        """Return the workflow's execution records, newest first."""
        await self.get_workflow(workflow_id, organization_id)
        return await self._execution_repo.list_by_workflow(
            workflow_id, organization_id, skip=skip, limit=limit
        )
