"""Pytest configuration and fixtures for bookflow.

Unit tests run the engine against in-memory repositories and scripted
actions. Repository tests use db_session, which needs PostgreSQL
(DATABASE_URL) and skips otherwise.
"""

from __future__ import annotations

import copy
from dataclasses import replace
from typing import Any
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from bookflow.application.services.action_registry import ActionRegistry
from bookflow.application.services.context_builder import WorkflowContextBuilder
from bookflow.application.use_cases.workflows.execution import WorkflowExecutionService
from bookflow.domain.entities.workflow import (
    WorkflowEntity,
    WorkflowExecutionEntity,
    WorkflowStep,
)
from bookflow.domain.enums import WorkflowStatus
from bookflow.domain.exceptions import (
    InvalidExecutionTransitionException,
    ResourceNotFoundException,
)
from bookflow.infrastructure.persistence import database


class InMemoryWorkflowRepository:
    """IWorkflowRepository over a dict; insertion order is run order."""

    def __init__(self) -> None:
        self.workflows: dict[str, WorkflowEntity] = {}
        self.find_active_calls: list[tuple[str, str]] = []
        self._next_id = 1

    def add(self, workflow: WorkflowEntity) -> WorkflowEntity:
        self.workflows[workflow.id] = workflow
        return workflow

    async def find_active(
        self, trigger_type: str, organization_id: str
    ) -> list[WorkflowEntity]:
        self.find_active_calls.append((trigger_type, organization_id))
        return [
            w
            for w in self.workflows.values()
            if w.belongs_to_organization(organization_id) and w.can_trigger_on(trigger_type)
        ]

    async def get_by_id_and_organization(
        self, workflow_id: str, organization_id: str
    ) -> WorkflowEntity | None:
        workflow = self.workflows.get(workflow_id)
        if workflow is None or workflow.deleted:
            return None
        if not workflow.belongs_to_organization(organization_id):
            return None
        return workflow

    async def list_by_organization(
        self, organization_id: str, skip: int = 0, limit: int = 100
    ) -> list[WorkflowEntity]:
        rows = [
            w
            for w in self.workflows.values()
            if w.belongs_to_organization(organization_id) and not w.deleted
        ]
        return rows[skip : skip + limit]

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
        workflow_id = f"wf-new-{self._next_id}"
        self._next_id += 1
        return self.add(
            WorkflowEntity(
                id=workflow_id,
                organization_id=organization_id,
                name=name,
                trigger_type=trigger_type,
                steps=tuple(WorkflowStep.from_dict(s) for s in steps),
                status=status or WorkflowStatus.DRAFT,
                description=description,
                trigger_config=trigger_config or {},
                created_by=created_by,
            )
        )

    async def update_workflow(
        self, workflow_id: str, organization_id: str, changes: dict[str, Any]
    ) -> WorkflowEntity:
        current = await self.get_by_id_and_organization(workflow_id, organization_id)
        if current is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        fields = dict(changes)
        if "steps" in fields:
            fields["steps"] = tuple(WorkflowStep.from_dict(s) for s in fields["steps"])
        return self.add(replace(current, **fields))

    async def soft_delete(self, workflow_id: str, organization_id: str) -> None:
        current = await self.get_by_id_and_organization(workflow_id, organization_id)
        if current is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        self.add(replace(current, deleted=True))


class InMemoryExecutionRepository:
    """IWorkflowExecutionRepository keeping stored copies; finalize only once per record."""

    def __init__(self) -> None:
        self.records: dict[str, WorkflowExecutionEntity] = {}
        self.finalize_calls: list[str] = []
        self.fail_create = False
        # Number of upcoming finalize() calls that raise
        self.finalize_failures = 0
        self._next_id = 1

    async def create_running(
        self, workflow_id: str, organization_id: str, context: dict[str, Any]
    ) -> WorkflowExecutionEntity:
        if self.fail_create:
            raise RuntimeError("execution store unavailable")
        execution_id = f"ex-{self._next_id}"
        self._next_id += 1
        stored = WorkflowExecutionEntity(
            id=execution_id,
            workflow_id=workflow_id,
            organization_id=organization_id,
            context=copy.deepcopy(context),
        )
        self.records[execution_id] = stored
        return copy.deepcopy(stored)

    async def finalize(self, execution: WorkflowExecutionEntity) -> None:
        self.finalize_calls.append(execution.id)
        if self.finalize_failures > 0:
            self.finalize_failures -= 1
            raise RuntimeError("execution store unavailable")
        stored = self.records[execution.id]
        if stored.is_terminal:
            raise InvalidExecutionTransitionException(
                execution.id, stored.status.value, execution.status.value
            )
        self.records[execution.id] = copy.deepcopy(execution)

    async def list_by_workflow(
        self, workflow_id: str, organization_id: str, skip: int = 0, limit: int = 100
    ) -> list[WorkflowExecutionEntity]:
        rows = [
            r
            for r in reversed(list(self.records.values()))
            if r.workflow_id == workflow_id and r.organization_id == organization_id
        ]
        return rows[skip : skip + limit]


@pytest.fixture
def workflow_repo() -> InMemoryWorkflowRepository:
    return InMemoryWorkflowRepository()


@pytest.fixture
def execution_repo() -> InMemoryExecutionRepository:
    return InMemoryExecutionRepository()


@pytest.fixture
def sleep() -> AsyncMock:
    """Replaces asyncio.sleep between retries; records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def make_service(workflow_repo, execution_repo, sleep):
    """Build WorkflowExecutionService over the in-memory repos with the given actions."""

    def _make(*actions: Any, **options: Any) -> WorkflowExecutionService:
        options.setdefault("sleep", sleep)
        return WorkflowExecutionService(
            workflow_repo,
            execution_repo,
            ActionRegistry(actions),
            WorkflowContextBuilder(),
            **options,
        )

    return _make


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository tests. Rolls back after each test.

    Requires DATABASE_URL (postgresql+asyncpg://...). Skips (pytest.skip)
    when it is not configured. Tables are created from the ORM metadata
    if missing; run tests without a DB via: pytest -m 'not requires_db'.
    """
    session_maker = database.get_session_maker()
    if session_maker is None:
        pytest.skip(
            "Postgres not configured: set DATABASE_URL, then run: alembic upgrade head"
        )
    from bookflow.infrastructure.persistence import models  # noqa: F401

    async with database.get_engine().begin() as conn:
        await conn.run_sync(database.Base.metadata.create_all)
    async with session_maker() as session:
        yield session
        await session.rollback()
    # Pooled connections belong to this test's event loop.
    await database.get_engine().dispose()
