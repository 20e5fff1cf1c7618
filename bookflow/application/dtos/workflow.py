"""DTOs for workflow definitions and run results (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from bookflow.domain.enums import WorkflowStatus


@dataclass(frozen=True)
class StepError:
    """Why a step failed.

    Configuration errors (missing/unknown action, invalid config) are not
    retryable; errors raised by an action's execute() are, unless the
    exception carries retryable = False. The flag is recorded for callers;
    the engine gives every execute() error the full attempt budget.
    """

    message: str
    retryable: bool = False


@dataclass(frozen=True)
class StepResult:
    """Outcome of one step. attempts is 0 when execute() was never called."""

    step_index: int
    action_id: str | None
    success: bool
    attempts: int = 0
    action_name: str | None = None
    result: dict[str, Any] | None = None
    error: str | None = None
    retryable: bool | None = None

    @classmethod
    def succeeded(
        cls,
        step_index: int,
        action_id: str,
        action_name: str,
        attempts: int,
        result: dict[str, Any],
    ) -> StepResult:
        return cls(
            step_index=step_index,
            action_id=action_id,
            success=True,
            attempts=attempts,
            action_name=action_name,
            result=result,
        )

    @classmethod
    def failed(
        cls,
        step_index: int,
        action_id: str | None,
        error: StepError,
        *,
        attempts: int = 0,
        action_name: str | None = None,
    ) -> StepResult:
        return cls(
            step_index=step_index,
            action_id=action_id,
            success=False,
            attempts=attempts,
            action_name=action_name,
            error=error.message,
            retryable=error.retryable,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON shape stored on the execution record (None fields dropped)."""
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class WorkflowRunResult:
    """Per-workflow summary returned to the trigger caller."""

    success: bool
    workflow_id: str
    execution_id: str | None
    steps: list[StepResult] = field(default_factory=list)
    error: str | None = None

    @property
    def failed_step(self) -> StepResult | None:
        """The step that stopped the run, if any."""
        return next((s for s in self.steps if not s.success), None)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "workflow_id": self.workflow_id,
            "execution_id": self.execution_id,
            "steps": [s.to_dict() for s in self.steps],
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class WorkflowCreate:
    """Input for creating a workflow definition."""

    name: str
    trigger_type: str
    steps: list[dict[str, Any]] = field(default_factory=list)
    description: str | None = None
    trigger_config: dict[str, Any] | None = None
    status: WorkflowStatus = WorkflowStatus.DRAFT


@dataclass(frozen=True)
class WorkflowUpdate:
    """Partial update of a workflow definition; None fields are left unchanged."""

    name: str | None = None
    description: str | None = None
    trigger_type: str | None = None
    trigger_config: dict[str, Any] | None = None
    steps: list[dict[str, Any]] | None = None
    status: WorkflowStatus | None = None

    def changes(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}
