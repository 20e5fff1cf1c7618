"""Workflow execution: run a tenant's automations when a trigger fires.

execute_for_trigger() finds the organization's active workflows for the
trigger type, builds one context from the source entity and runs each
workflow. A run walks its steps in order, retries a failing action up to
max_attempts with a fixed delay, stops at the first failed step and
records the outcome on a WorkflowExecution row that is written as running
before the first step and finalized once. If writing the outcome raises,
the row gets one more attempt to be recorded as failed.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Awaitable, Callable
from typing import Any

from bookflow.application.dtos.workflow import StepError, StepResult, WorkflowRunResult
from bookflow.application.interfaces.repositories import (
    IWorkflowExecutionRepository,
    IWorkflowRepository,
)
from bookflow.application.interfaces.services import IContextBuilder, ITriggerSource
from bookflow.application.services.action_registry import ActionRegistry
from bookflow.domain.entities.workflow import (
    WorkflowEntity,
    WorkflowExecutionEntity,
    WorkflowStep,
)
from bookflow.shared.telemetry.logging import get_logger
from bookflow.shared.telemetry.tracing import add_span_attributes, add_span_event, traced

logger = get_logger(__name__)

NO_STEPS_ERROR = "Workflow has no steps"
STEPS_FAILED_ERROR = "One or more steps failed"
CANCELLED_ERROR = "Workflow execution cancelled"

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0


class WorkflowExecutionService:
    """Runs workflows for triggers (implements IWorkflowExecutionService).

    Steps of one workflow are strictly sequential. Workflows matched by the
    same trigger are independent: each gets its own execution record and a
    failure in one never stops the others.
    """

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        execution_repo: IWorkflowExecutionRepository,
        action_registry: ActionRegistry,
        context_builder: IContextBuilder,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        execution_timeout_seconds: float | None = None,
        run_concurrently: bool = False,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.workflow_repo = workflow_repo
        self.execution_repo = execution_repo
        self.action_registry = action_registry
        self.context_builder = context_builder
        self.max_attempts = max_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self.execution_timeout_seconds = execution_timeout_seconds
        self.run_concurrently = run_concurrently
        self._sleep = sleep

    @traced("workflow.execute_for_trigger")
    async def execute_for_trigger(
        self, trigger_type: str, source: ITriggerSource
    ) -> list[WorkflowRunResult]:
        """Run every active workflow of the source's organization listening for trigger_type.

        Returns one result per matched workflow, in lookup order; [] (and no
        execution records) when nothing matches. Raises only when the lookup
        or context building fails.
        """
        organization_id = source.organization_id
        add_span_attributes(trigger_type=trigger_type, organization_id=organization_id)
        workflows = await self.workflow_repo.find_active(trigger_type, organization_id)
        if not workflows:
            logger.debug(
                "No active workflows for trigger %s (organization_id=%s)",
                trigger_type,
                organization_id,
            )
            return []

        context = self.context_builder.build(source)
        logger.info(
            "Trigger %s matched %d workflow(s) (organization_id=%s, source_id=%s)",
            trigger_type,
            len(workflows),
            organization_id,
            getattr(source, "id", None),
        )

        if self.run_concurrently:
            outcomes = await asyncio.gather(
                *(self.execute_workflow(workflow, context) for workflow in workflows),
                return_exceptions=True,
            )
        else:
            outcomes = []
            for workflow in workflows:
                try:
                    outcomes.append(await self.execute_workflow(workflow, context))
                except Exception as e:
                    outcomes.append(e)

        results: list[WorkflowRunResult] = []
        for workflow, outcome in zip(workflows, outcomes, strict=True):
            if isinstance(outcome, WorkflowRunResult):
                results.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                raise outcome
            logger.error(
                "Workflow %s failed outside its run (trigger=%s, organization_id=%s): %s",
                workflow.id,
                trigger_type,
                organization_id,
                outcome,
                exc_info=outcome,
            )
            results.append(
                WorkflowRunResult(
                    success=False,
                    workflow_id=workflow.id,
                    execution_id=None,
                    error=str(outcome),
                )
            )
        return results

    @traced("workflow.execute_workflow")
    async def execute_workflow(
        self, workflow: WorkflowEntity, context: dict[str, Any]
    ) -> WorkflowRunResult:
        """Run one workflow's steps against context and persist the execution record."""
        execution = await self.execution_repo.create_running(
            workflow.id, workflow.organization_id, copy.deepcopy(context)
        )
        add_span_attributes(workflow_id=workflow.id, execution_id=execution.id)
        step_results: list[StepResult] = []

        try:
            if not workflow.steps:
                return await self._fail(workflow, execution, NO_STEPS_ERROR, step_results)
            try:
                async with asyncio.timeout(self.execution_timeout_seconds):
                    await self._run_steps(workflow.steps, context, step_results)
            except TimeoutError:
                error = (
                    "Workflow execution timed out after "
                    f"{self.execution_timeout_seconds:g} seconds"
                )
                return await self._fail(workflow, execution, error, step_results)
            return await self._finish(workflow, execution, step_results)
        except asyncio.CancelledError:
            if not execution.is_terminal:
                execution.fail(CANCELLED_ERROR, self._as_dicts(step_results))
                await self.execution_repo.finalize(execution)
            raise
        except Exception as e:
            logger.exception(
                "Workflow %s execution failed (execution_id=%s)", workflow.id, execution.id
            )
            return await self._record_failure(workflow, execution, str(e), step_results)

    @traced("workflow.dry_run")
    async def dry_run(self, workflow: WorkflowEntity) -> WorkflowRunResult:
        """Run workflow steps against sample data without writing an execution record.

        Used to preview a definition while authoring it; actions still run.
        """
        if not workflow.steps:
            return WorkflowRunResult(
                success=False, workflow_id=workflow.id, execution_id=None, error=NO_STEPS_ERROR
            )
        context = self.context_builder.build_fake_context()
        step_results: list[StepResult] = []
        await self._run_steps(workflow.steps, context, step_results)
        success = all(result.success for result in step_results)
        return WorkflowRunResult(
            success=success,
            workflow_id=workflow.id,
            execution_id=None,
            steps=step_results,
        )

    async def _run_steps(
        self,
        steps: tuple[WorkflowStep, ...],
        context: dict[str, Any],
        step_results: list[StepResult],
    ) -> None:
        """Append one result per executed step; stop after the first failure."""
        for index, step in enumerate(steps):
            result = await self._execute_step(step, context, step_index=index)
            step_results.append(result)
            if not result.success:
                return

    @traced("workflow.step")
    async def _execute_step(
        self, step: WorkflowStep, context: dict[str, Any], *, step_index: int
    ) -> StepResult:
        """Resolve, validate and run one step with retries.

        Configuration problems fail the step without calling execute().
        Each step receives its own copy of the context, so nothing an action
        does to it is visible to later steps or sibling workflows.
        """
        action_id = step.action_id
        add_span_attributes(step_index=step_index, action_id=action_id or None)
        if not action_id:
            return self._config_failure(step_index, None, "Step has no action defined")

        action = self.action_registry.get_action(action_id)
        if action is None:
            return self._config_failure(step_index, action_id, f"Action not found: {action_id}")

        errors = action.validate(step.config)
        if errors:
            return self._config_failure(
                step_index,
                action_id,
                "Configuration validation failed: " + ", ".join(errors),
                action_name=action.name,
            )

        last_error = StepError("Action was not executed", retryable=False)
        attempt = 0
        while attempt < self.max_attempts:
            attempt += 1
            try:
                result = await action.execute(
                    copy.deepcopy(step.config), copy.deepcopy(context)
                )
            except Exception as e:
                last_error = StepError(
                    str(e) or type(e).__name__,
                    retryable=getattr(e, "retryable", True),
                )
                add_span_event("attempt_failed", {"attempt": attempt, "error": last_error.message})
                logger.warning(
                    "Workflow step failed (step_index=%d, action=%s, attempt=%d/%d): %s",
                    step_index,
                    action_id,
                    attempt,
                    self.max_attempts,
                    last_error.message,
                )
                if attempt < self.max_attempts:
                    await self._sleep(self.retry_delay_seconds)
                continue

            logger.info(
                "Workflow step executed (step_index=%d, action=%s, attempt=%d)",
                step_index,
                action_id,
                attempt,
            )
            return StepResult.succeeded(
                step_index,
                action_id,
                action.name,
                attempt,
                result if result is not None else {},
            )

        return StepResult.failed(
            step_index,
            action_id,
            last_error,
            attempts=attempt,
            action_name=action.name,
        )

    def _config_failure(
        self,
        step_index: int,
        action_id: str | None,
        message: str,
        *,
        action_name: str | None = None,
    ) -> StepResult:
        logger.warning(
            "Workflow step not runnable (step_index=%d, action=%s): %s",
            step_index,
            action_id,
            message,
        )
        return StepResult.failed(
            step_index, action_id, StepError(message), action_name=action_name
        )

    async def _finish(
        self,
        workflow: WorkflowEntity,
        execution: WorkflowExecutionEntity,
        step_results: list[StepResult],
    ) -> WorkflowRunResult:
        """Finalize after the step loop: failed if the last step failed, else completed."""
        failed_step = next((r for r in step_results if not r.success), None)
        if failed_step is not None:
            execution.fail(STEPS_FAILED_ERROR, self._as_dicts(step_results))
            await self.execution_repo.finalize(execution)
            logger.warning(
                "Workflow %s failed at step %d (execution_id=%s): %s",
                workflow.id,
                failed_step.step_index,
                execution.id,
                failed_step.error,
            )
        else:
            execution.complete(self._as_dicts(step_results))
            await self.execution_repo.finalize(execution)
            logger.info(
                "Workflow %s completed (execution_id=%s, steps=%d)",
                workflow.id,
                execution.id,
                len(step_results),
            )
        return WorkflowRunResult(
            success=failed_step is None,
            workflow_id=workflow.id,
            execution_id=execution.id,
            steps=step_results,
        )

    async def _fail(
        self,
        workflow: WorkflowEntity,
        execution: WorkflowExecutionEntity,
        error: str,
        step_results: list[StepResult],
    ) -> WorkflowRunResult:
        execution.fail(error, self._as_dicts(step_results))
        await self.execution_repo.finalize(execution)
        logger.error(
            "Workflow execution failed (workflow_id=%s, execution_id=%s): %s",
            workflow.id,
            execution.id,
            error,
        )
        return WorkflowRunResult(
            success=False,
            workflow_id=workflow.id,
            execution_id=execution.id,
            steps=step_results,
            error=error,
        )

    async def _record_failure(
        self,
        workflow: WorkflowEntity,
        execution: WorkflowExecutionEntity,
        error: str,
        step_results: list[StepResult],
    ) -> WorkflowRunResult:
        """Persist a run that raised as failed, with a single finalize attempt.

        When the error came from finalize itself the entity is already
        terminal, so a fresh running copy of the record is failed instead.
        A second store error is logged and the result still carries the
        execution id.
        """
        if execution.is_terminal:
            execution = WorkflowExecutionEntity(
                id=execution.id,
                workflow_id=execution.workflow_id,
                organization_id=execution.organization_id,
                context=execution.context,
                started_at=execution.started_at,
            )
        execution.fail(error, self._as_dicts(step_results))
        try:
            await self.execution_repo.finalize(execution)
        except Exception:
            logger.exception(
                "Could not record failed workflow execution "
                "(workflow_id=%s, execution_id=%s)",
                workflow.id,
                execution.id,
            )
        else:
            logger.error(
                "Workflow execution failed (workflow_id=%s, execution_id=%s): %s",
                workflow.id,
                execution.id,
                error,
            )
        return WorkflowRunResult(
            success=False,
            workflow_id=workflow.id,
            execution_id=execution.id,
            steps=step_results,
            error=error,
        )

    @staticmethod
    def _as_dicts(step_results: list[StepResult]) -> list[dict[str, Any]]:
        return [result.to_dict() for result in step_results]
