"""Tests for workflow domain entities and enums."""

import pytest

from bookflow.domain.entities.booking import BookingEntity, OrganizationRef, ScheduledEventEntity
from bookflow.domain.entities.workflow import (
    WorkflowEntity,
    WorkflowExecutionEntity,
    WorkflowStep,
)
from bookflow.domain.enums import WorkflowExecutionStatus, WorkflowStatus
from bookflow.domain.exceptions import InvalidExecutionTransitionException


class TestEnums:
    def test_workflow_status_values(self) -> None:
        assert WorkflowStatus.values() == ["draft", "active", "inactive"]

    def test_execution_status_values(self) -> None:
        assert WorkflowExecutionStatus.values() == ["running", "completed", "failed"]

    def test_terminal_statuses(self) -> None:
        assert WorkflowExecutionStatus.RUNNING.is_terminal is False
        assert WorkflowExecutionStatus.COMPLETED.is_terminal is True
        assert WorkflowExecutionStatus.FAILED.is_terminal is True

    def test_str_enum_compares_to_value(self) -> None:
        assert WorkflowStatus("active") is WorkflowStatus.ACTIVE
        assert WorkflowStatus.ACTIVE == "active"


class TestWorkflowStep:
    def test_from_stored_json(self) -> None:
        step = WorkflowStep.from_dict({"action": "email.send", "config": {"to": "x"}})
        assert step == WorkflowStep("email.send", {"to": "x"})
        assert step.to_dict() == {"action": "email.send", "config": {"to": "x"}}

    def test_accepts_action_id_key(self) -> None:
        assert WorkflowStep.from_dict({"action_id": "webhook.send"}).action_id == "webhook.send"

    def test_malformed_step_does_not_raise(self) -> None:
        step = WorkflowStep.from_dict({"action": None, "config": "oops"})
        assert step == WorkflowStep("", {})


class TestWorkflowEntity:
    def _workflow(self, **overrides) -> WorkflowEntity:
        fields = {
            "id": "wf1",
            "organization_id": "org1",
            "name": "Confirm",
            "trigger_type": "booking.created",
            "steps": (WorkflowStep("email.send", {}),),
            "status": WorkflowStatus.ACTIVE,
        }
        fields.update(overrides)
        return WorkflowEntity(**fields)

    def test_can_trigger_on(self) -> None:
        workflow = self._workflow()
        assert workflow.can_trigger_on("booking.created") is True
        assert workflow.can_trigger_on("booking.cancelled") is False

    @pytest.mark.parametrize(
        "overrides",
        [{"status": WorkflowStatus.DRAFT}, {"status": WorkflowStatus.INACTIVE}, {"deleted": True}],
    )
    def test_only_active_undeleted_workflows_trigger(self, overrides) -> None:
        workflow = self._workflow(**overrides)
        assert workflow.is_active is False
        assert workflow.can_trigger_on("booking.created") is False

    def test_belongs_to_organization(self) -> None:
        workflow = self._workflow()
        assert workflow.belongs_to_organization("org1") is True
        assert workflow.belongs_to_organization("org2") is False

    def test_steps_as_dicts(self) -> None:
        assert self._workflow().steps_as_dicts() == [{"action": "email.send", "config": {}}]


class TestWorkflowExecutionEntity:
    def _execution(self) -> WorkflowExecutionEntity:
        return WorkflowExecutionEntity(
            id="ex1", workflow_id="wf1", organization_id="org1", context={}
        )

    def test_starts_running(self) -> None:
        execution = self._execution()
        assert execution.status == WorkflowExecutionStatus.RUNNING
        assert execution.is_terminal is False
        assert execution.started_at.tzinfo is not None
        assert execution.completed_at is None

    def test_complete(self) -> None:
        execution = self._execution()
        execution.complete([{"step_index": 0, "success": True}])
        assert execution.status == WorkflowExecutionStatus.COMPLETED
        assert execution.error is None
        assert execution.step_results == [{"step_index": 0, "success": True}]
        assert execution.completed_at is not None

    def test_fail(self) -> None:
        execution = self._execution()
        execution.fail("Workflow has no steps")
        assert execution.status == WorkflowExecutionStatus.FAILED
        assert execution.error == "Workflow has no steps"
        assert execution.step_results == []

    def test_terminal_execution_cannot_transition_again(self) -> None:
        execution = self._execution()
        execution.complete([])
        with pytest.raises(InvalidExecutionTransitionException):
            execution.fail("late")
        with pytest.raises(InvalidExecutionTransitionException):
            execution.complete([])
        assert execution.status == WorkflowExecutionStatus.COMPLETED


def test_booking_organization_comes_from_event() -> None:
    booking = BookingEntity(
        id="b1",
        event=ScheduledEventEntity(id="ev1", organization=OrganizationRef(id="org7")),
    )
    assert booking.organization_id == "org7"
