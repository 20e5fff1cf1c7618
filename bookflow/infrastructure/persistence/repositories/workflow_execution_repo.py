"""Workflow execution repository (implements IWorkflowExecutionRepository)."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookflow.domain.entities.workflow import WorkflowExecutionEntity
from bookflow.domain.enums import WorkflowExecutionStatus
from bookflow.domain.exceptions import InvalidExecutionTransitionException
from bookflow.infrastructure.persistence.models.workflow import WorkflowExecution
from bookflow.infrastructure.persistence.repositories.base import BaseRepository
from bookflow.shared.telemetry.logging import get_logger
from bookflow.shared.utils.datetime import ensure_utc, utc_now
from bookflow.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


def execution_to_entity(row: WorkflowExecution) -> WorkflowExecutionEntity:
    return WorkflowExecutionEntity(
        id=row.id,
        workflow_id=row.workflow_id,
        organization_id=row.organization_id,
        context=dict(row.context or {}),
        status=WorkflowExecutionStatus(row.status),
        error=row.error,
        step_results=list(row.step_results or []),
        started_at=ensure_utc(row.started_at),
        completed_at=ensure_utc(row.completed_at),
    )


class WorkflowExecutionRepository(BaseRepository[WorkflowExecution]):
    """Execution records: inserted as running, finalized by one conditional UPDATE.

    With commit_writes=True each write is its own transaction: the running
    row is visible to other connections while steps execute, and a failed
    write is rolled back so the session stays usable for later runs.
    """

    def __init__(self, db: AsyncSession, *, commit_writes: bool = False) -> None:
        super().__init__(db, WorkflowExecution)
        self.commit_writes = commit_writes

    async def create_running(
        self,
        workflow_id: str,
        organization_id: str,
        context: dict[str, Any],
    ) -> WorkflowExecutionEntity:
        """Insert a running execution and return it."""
        row = WorkflowExecution(
            id=generate_cuid(),
            workflow_id=workflow_id,
            organization_id=organization_id,
            context=context,
            status=WorkflowExecutionStatus.RUNNING.value,
            started_at=utc_now(),
        )
        try:
            created = await self.create(row)
            if self.commit_writes:
                await self.db.commit()
        except SQLAlchemyError:
            await self._rollback_write()
            raise
        return execution_to_entity(created)

    async def _on_after_create(self, obj: WorkflowExecution) -> None:
        logger.debug(
            "Workflow execution %s started (workflow_id=%s, organization_id=%s)",
            obj.id,
            obj.workflow_id,
            obj.organization_id,
        )

    async def finalize(self, execution: WorkflowExecutionEntity) -> None:
        """Write the terminal state in a single UPDATE guarded by status = running.

        Raises InvalidExecutionTransitionException when the row is not
        running any more (finalized twice) or does not exist.
        """
        if not execution.is_terminal:
            raise InvalidExecutionTransitionException(
                execution.id, WorkflowExecutionStatus.RUNNING.value, execution.status.value
            )
        try:
            result = await self.db.execute(
                update(WorkflowExecution)
                .where(
                    WorkflowExecution.id == execution.id,
                    WorkflowExecution.status == WorkflowExecutionStatus.RUNNING.value,
                )
                .values(
                    status=execution.status.value,
                    error=execution.error,
                    step_results=execution.step_results,
                    completed_at=execution.completed_at or utc_now(),
                )
            )
            if result.rowcount != 1:
                raise InvalidExecutionTransitionException(
                    execution.id, "not running", execution.status.value
                )
            if self.commit_writes:
                await self.db.commit()
        except (SQLAlchemyError, InvalidExecutionTransitionException):
            await self._rollback_write()
            raise

    async def _rollback_write(self) -> None:
        if self.commit_writes:
            logger.warning("Rolling back failed workflow execution write")
            await self.db.rollback()

    async def list_by_workflow(
        self,
        workflow_id: str,
        organization_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowExecutionEntity]:
        result = await self.db.execute(
            select(WorkflowExecution)
            .where(
                WorkflowExecution.workflow_id == workflow_id,
                WorkflowExecution.organization_id == organization_id,
            )
            .order_by(WorkflowExecution.started_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return [execution_to_entity(row) for row in result.scalars().all()]
