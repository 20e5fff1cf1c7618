"""Workflow repository (implements IWorkflowRepository)."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookflow.domain.entities.workflow import WorkflowEntity, WorkflowStep
from bookflow.domain.enums import WorkflowStatus
from bookflow.domain.exceptions import ResourceNotFoundException
from bookflow.infrastructure.persistence.models.workflow import Workflow
from bookflow.infrastructure.persistence.repositories.base import BaseRepository
from bookflow.shared.telemetry.logging import get_logger
from bookflow.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)

_UPDATABLE_FIELDS = frozenset(
    {"name", "description", "trigger_type", "trigger_config", "steps", "status"}
)


def workflow_to_entity(row: Workflow) -> WorkflowEntity:
    """Map an ORM row to the domain entity (steps snapshot as a tuple)."""
    flow_data = row.flow_data or {}
    raw_steps = flow_data.get("steps") if isinstance(flow_data, dict) else None
    steps = tuple(
        WorkflowStep.from_dict(step) if isinstance(step, dict) else WorkflowStep("")
        for step in (raw_steps if isinstance(raw_steps, list) else [])
    )
    return WorkflowEntity(
        id=row.id,
        organization_id=row.organization_id,
        name=row.name,
        trigger_type=row.trigger_type,
        steps=steps,
        status=WorkflowStatus(row.status),
        description=row.description,
        trigger_config=dict(row.trigger_config or {}),
        deleted=row.deleted_at is not None,
        created_by=row.created_by,
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


class WorkflowRepository(BaseRepository[Workflow]):
    """Workflow definitions. Every query is scoped by organization and skips soft-deleted rows."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Workflow)

    async def find_active(
        self, trigger_type: str, organization_id: str
    ) -> list[WorkflowEntity]:
        """Return active workflows for the trigger, oldest first (run order)."""
        result = await self.db.execute(
            select(Workflow)
            .where(
                Workflow.organization_id == organization_id,
                Workflow.trigger_type == trigger_type,
                Workflow.status == WorkflowStatus.ACTIVE.value,
                Workflow.deleted_at.is_(None),
            )
            .order_by(Workflow.created_at.asc(), Workflow.id.asc())
        )
        return [workflow_to_entity(row) for row in result.scalars().all()]

    async def _get_row(self, workflow_id: str, organization_id: str) -> Workflow | None:
        result = await self.db.execute(
            select(Workflow).where(
                Workflow.id == workflow_id,
                Workflow.organization_id == organization_id,
                Workflow.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def _require_row(self, workflow_id: str, organization_id: str) -> Workflow:
        row = await self._get_row(workflow_id, organization_id)
        if row is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        return row

    async def get_by_id_and_organization(
        self, workflow_id: str, organization_id: str
    ) -> WorkflowEntity | None:
        row = await self._get_row(workflow_id, organization_id)
        return workflow_to_entity(row) if row is not None else None

    async def list_by_organization(
        self,
        organization_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowEntity]:
        result = await self.db.execute(
            select(Workflow)
            .where(
                Workflow.organization_id == organization_id,
                Workflow.deleted_at.is_(None),
            )
            .order_by(Workflow.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return [workflow_to_entity(row) for row in result.scalars().all()]

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
        """Create workflow; return created entity."""
        workflow = Workflow(
            organization_id=organization_id,
            name=name,
            description=description,
            trigger_type=trigger_type,
            trigger_config=trigger_config or {},
            flow_data={"steps": steps},
            status=(status or WorkflowStatus.DRAFT).value,
            created_by=created_by,
        )
        created = await self.create(workflow)
        return workflow_to_entity(created)

    async def update_workflow(
        self, workflow_id: str, organization_id: str, changes: dict[str, Any]
    ) -> WorkflowEntity:
        """Apply changes (name, description, trigger_type, trigger_config, steps, status)."""
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown workflow fields: {sorted(unknown)}")
        row = await self._require_row(workflow_id, organization_id)
        for field, value in changes.items():
            if field == "steps":
                row.flow_data = {**(row.flow_data or {}), "steps": value}
            elif field == "status":
                row.status = WorkflowStatus(value).value
            else:
                setattr(row, field, value)
        updated = await self.update(row)
        return workflow_to_entity(updated)

    async def _on_after_update(self, obj: Workflow) -> None:
        logger.debug(
            "Workflow %s updated (organization_id=%s, status=%s)",
            obj.id,
            obj.organization_id,
            obj.status,
        )

    async def soft_delete(self, workflow_id: str, organization_id: str) -> None:
        row = await self._require_row(workflow_id, organization_id)
        row.deleted_at = utc_now()
        await self.db.flush()
        logger.info(
            "Workflow %s soft-deleted (organization_id=%s)", workflow_id, organization_id
        )
