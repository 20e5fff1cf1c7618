"""Composition root: wires repositories, actions and services for the workflow engine.

The booking side calls trigger_workflows() after it commits a booking
change; everything else (tests, scripts) can build the pieces directly.
Nothing here holds module-level state except the cached action registry.
"""

from __future__ import annotations

from functools import lru_cache

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from bookflow.application.dtos.workflow import WorkflowRunResult
from bookflow.application.interfaces.services import (
    INotificationService,
    ITriggerSource,
)
from bookflow.application.services.action_registry import ActionRegistry
from bookflow.application.services.context_builder import WorkflowContextBuilder
from bookflow.application.services.workflow_service import WorkflowService
from bookflow.application.use_cases.workflows.execution import WorkflowExecutionService
from bookflow.core.config import Settings, get_settings
from bookflow.infrastructure.actions import default_actions
from bookflow.infrastructure.persistence.database import session_scope
from bookflow.infrastructure.persistence.repositories import (
    WorkflowExecutionRepository,
    WorkflowRepository,
)
from bookflow.infrastructure.services.notification_service import (
    LogOnlyNotificationService,
)


def build_action_registry(
    settings: Settings | None = None,
    *,
    notification_service: INotificationService | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ActionRegistry:
    """Return a registry holding every built-in action."""
    settings = settings or get_settings()
    return ActionRegistry(
        default_actions(
            notification_service or LogOnlyNotificationService(),
            http_client=http_client,
            webhook_default_timeout=settings.webhook_default_timeout_seconds,
            webhook_max_timeout=settings.webhook_max_timeout_seconds,
        )
    )


@lru_cache
def get_action_registry() -> ActionRegistry:
    """Process-wide registry (built on first use, read-only afterwards)."""
    return build_action_registry()


def build_execution_service(
    db: AsyncSession,
    settings: Settings | None = None,
    *,
    action_registry: ActionRegistry | None = None,
    commit_writes: bool = False,
) -> WorkflowExecutionService:
    """Build WorkflowExecutionService on SQL repositories sharing one session.

    commit_writes=True commits every execution record write on its own
    instead of leaving it to the session owner.
    """
    settings = settings or get_settings()
    return WorkflowExecutionService(
        WorkflowRepository(db),
        WorkflowExecutionRepository(db, commit_writes=commit_writes),
        action_registry or get_action_registry(),
        WorkflowContextBuilder(),
        max_attempts=settings.workflow_step_max_attempts,
        retry_delay_seconds=settings.workflow_step_retry_delay_seconds,
        execution_timeout_seconds=settings.workflow_execution_timeout_seconds,
        run_concurrently=settings.workflow_run_concurrently,
    )


def build_workflow_service(
    db: AsyncSession, *, action_registry: ActionRegistry | None = None
) -> WorkflowService:
    return WorkflowService(
        WorkflowRepository(db),
        WorkflowExecutionRepository(db),
        action_registry or get_action_registry(),
    )


async def trigger_workflows(
    trigger_type: str,
    source: ITriggerSource,
    *,
    action_registry: ActionRegistry | None = None,
) -> list[WorkflowRunResult]:
    """Run the workflows listening for trigger_type, persisting each run as it goes.

    Every execution record is committed when it is created and again when
    it is finalized, so in-flight runs are visible to other connections and
    a failed write in one run is rolled back without touching its siblings.
    Workflows run sequentially here since every repository shares one session.
    """
    async with session_scope() as db:
        service = build_execution_service(
            db, action_registry=action_registry, commit_writes=True
        )
        service.run_concurrently = False
        return await service.execute_for_trigger(trigger_type, source)
