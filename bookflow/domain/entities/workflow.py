"""Workflow domain entities.

A workflow is a tenant-owned definition: a trigger type plus an ordered
list of steps, each naming an action and its config. An execution is the
durable record of one run of a workflow.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from bookflow.domain.enums import WorkflowExecutionStatus, WorkflowStatus
from bookflow.domain.exceptions import InvalidExecutionTransitionException
from bookflow.shared.utils.datetime import utc_now


@dataclass(frozen=True)
class WorkflowStep:
    """One action invocation within a workflow."""

    action_id: str
    config: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkflowStep":
        """Build from stored step JSON ({"action": ..., "config": {...}}).

        Never raises on a malformed step: a missing action becomes "" and a
        non-mapping config becomes {}, so the engine reports the problem as
        a failed step instead of refusing to load the workflow.
        """
        action_id = data.get("action") or data.get("action_id") or ""
        config = data.get("config")
        return cls(
            action_id=str(action_id),
            config=dict(config) if isinstance(config, Mapping) else {},
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the stored JSON shape of this step."""
        return {"action": self.action_id, "config": dict(self.config)}


@dataclass(frozen=True)
class WorkflowEntity:
    """Domain entity for a workflow definition (trigger + ordered steps).

    Frozen with a tuple of steps: a run always executes the snapshot it was
    handed, never a definition edited mid-run.
    """

    id: str
    organization_id: str
    name: str
    trigger_type: str
    steps: tuple[WorkflowStep, ...]
    status: WorkflowStatus = WorkflowStatus.DRAFT
    description: str | None = None
    trigger_config: dict[str, Any] = field(default_factory=dict)
    deleted: bool = False
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == WorkflowStatus.ACTIVE and not self.deleted

    def belongs_to_organization(self, organization_id: str) -> bool:
        """Return whether this workflow belongs to the given organization."""
        return self.organization_id == organization_id

    def can_trigger_on(self, trigger_type: str) -> bool:
        """Return whether this workflow is active, not deleted, and listens for trigger_type."""
        return self.is_active and self.trigger_type == trigger_type

    def steps_as_dicts(self) -> list[dict[str, Any]]:
        return [step.to_dict() for step in self.steps]


@dataclass
class WorkflowExecutionEntity:
    """Durable record of one workflow run.

    Status moves running -> completed or running -> failed exactly once;
    complete() and fail() raise InvalidExecutionTransitionException on a
    terminal execution.
    """

    id: str
    workflow_id: str
    organization_id: str
    context: dict[str, Any]
    status: WorkflowExecutionStatus = WorkflowExecutionStatus.RUNNING
    error: str | None = None
    step_results: list[dict[str, Any]] = field(default_factory=list)
    started_at: datetime = field(default_factory=utc_now)
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def complete(self, step_results: list[dict[str, Any]]) -> None:
        """Mark the run as completed (all steps succeeded)."""
        self._finish(WorkflowExecutionStatus.COMPLETED, None, step_results)

    def fail(self, error: str, step_results: list[dict[str, Any]] | None = None) -> None:
        """Mark the run as failed with a summary error."""
        self._finish(WorkflowExecutionStatus.FAILED, error, step_results or [])

    def _finish(
        self,
        status: WorkflowExecutionStatus,
        error: str | None,
        step_results: list[dict[str, Any]],
    ) -> None:
        if self.is_terminal:
            raise InvalidExecutionTransitionException(
                self.id, self.status.value, status.value
            )
        self.status = status
        self.error = error
        self.step_results = step_results
        self.completed_at = utc_now()
