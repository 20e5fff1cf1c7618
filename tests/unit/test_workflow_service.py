"""WorkflowService: definition management over the in-memory repositories."""

from unittest.mock import AsyncMock

import pytest

from bookflow.application.dtos.workflow import WorkflowCreate, WorkflowUpdate
from bookflow.application.services.action_registry import ActionRegistry
from bookflow.application.services.workflow_service import WorkflowService
from bookflow.domain.entities.workflow import WorkflowExecutionEntity
from bookflow.domain.enums import WorkflowStatus
from bookflow.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
    WorkflowDefinitionException,
)
from bookflow.infrastructure.actions import default_actions

EMAIL_STEP = {
    "action": "email.send",
    "config": {"to": "{{booking.customer_email}}", "subject": "Hi", "body": "Booked"},
}


@pytest.fixture
def service(workflow_repo, execution_repo) -> WorkflowService:
    return WorkflowService(
        workflow_repo, execution_repo, ActionRegistry(default_actions(AsyncMock()))
    )


def _create(steps=None, status=WorkflowStatus.DRAFT) -> WorkflowCreate:
    return WorkflowCreate(
        name="Confirmation",
        trigger_type="booking.created",
        steps=[EMAIL_STEP] if steps is None else steps,
        status=status,
    )


class TestValidateSteps:
    def test_normalizes_steps(self, service: WorkflowService) -> None:
        steps = service.validate_steps([{"action_id": "email.send"}, {"action": "x", "config": None}])
        assert steps == [
            {"action": "email.send", "config": {}},
            {"action": "x", "config": {}},
        ]

    @pytest.mark.parametrize(
        ("steps", "message"),
        [
            ("nope", "Steps must be a list"),
            (["nope"], "Step 0 must be an object"),
            ([EMAIL_STEP, {"config": {}}], "Step 1 must have an action"),
            ([{"action": "  "}], "Step 0 must have an action"),
            ([{"action": "x", "config": []}], "Step 0 config must be an object"),
        ],
    )
    def test_malformed_steps(self, service: WorkflowService, steps, message: str) -> None:
        with pytest.raises(WorkflowDefinitionException) as exc_info:
            service.validate_steps(steps)
        assert exc_info.value.message == message

    def test_strict_rejects_unknown_action(self, service: WorkflowService) -> None:
        with pytest.raises(WorkflowDefinitionException, match="Action not found: ghost"):
            service.validate_steps([{"action": "ghost"}], strict=True)

    def test_strict_rejects_invalid_config(self, service: WorkflowService) -> None:
        with pytest.raises(WorkflowDefinitionException) as exc_info:
            service.validate_steps([{"action": "email.send", "config": {}}], strict=True)
        assert exc_info.value.message == (
            "Step 0: Configuration validation failed: Recipient email is required, "
            "Email subject is required, Email body is required"
        )
        assert exc_info.value.details == {"step_index": 0}


class TestCreateAndUpdate:
    async def test_create_defaults_to_draft(self, service: WorkflowService) -> None:
        created = await service.create_workflow("org1", _create(), created_by="u1")
        assert created.status == WorkflowStatus.DRAFT
        assert created.created_by == "u1"
        assert created.steps_as_dicts() == [EMAIL_STEP]

    async def test_draft_may_be_incomplete(self, service: WorkflowService) -> None:
        created = await service.create_workflow("org1", _create(steps=[{"action": "ghost"}]))
        assert created.steps[0].action_id == "ghost"

    async def test_active_create_checks_actions(self, service: WorkflowService) -> None:
        with pytest.raises(WorkflowDefinitionException):
            await service.create_workflow(
                "org1", _create(steps=[{"action": "ghost"}], status=WorkflowStatus.ACTIVE)
            )

    async def test_name_required(self, service: WorkflowService) -> None:
        data = WorkflowCreate(name=" ", trigger_type="booking.created")
        with pytest.raises(ValidationException, match="name is required") as exc_info:
            await service.create_workflow("org1", data)
        assert exc_info.value.details == {"field": "name"}

    async def test_update_steps_and_name(self, service: WorkflowService) -> None:
        created = await service.create_workflow("org1", _create())
        updated = await service.update_workflow(
            created.id, "org1", WorkflowUpdate(name="Reminder", steps=[{"action": "webhook.send"}])
        )
        assert updated.name == "Reminder"
        assert updated.steps_as_dicts() == [{"action": "webhook.send", "config": {}}]

    async def test_empty_update_returns_current(self, service: WorkflowService) -> None:
        created = await service.create_workflow("org1", _create())
        assert await service.update_workflow(created.id, "org1", WorkflowUpdate()) == created

    async def test_update_other_organization_not_found(self, service: WorkflowService) -> None:
        created = await service.create_workflow("org1", _create())
        with pytest.raises(ResourceNotFoundException):
            await service.update_workflow(created.id, "org2", WorkflowUpdate(name="x"))


class TestStatusAndLifecycle:
    async def test_activate_valid_workflow(self, service: WorkflowService, workflow_repo) -> None:
        created = await service.create_workflow("org1", _create())
        activated = await service.set_status(created.id, "org1", WorkflowStatus.ACTIVE)
        assert activated.status == WorkflowStatus.ACTIVE
        assert await workflow_repo.find_active("booking.created", "org1") == [activated]

    async def test_activate_incomplete_workflow_rejected(self, service: WorkflowService) -> None:
        created = await service.create_workflow("org1", _create(steps=[{"action": "ghost"}]))
        with pytest.raises(WorkflowDefinitionException, match="Action not found"):
            await service.set_status(created.id, "org1", WorkflowStatus.ACTIVE)
        assert (await service.get_workflow(created.id, "org1")).status == WorkflowStatus.DRAFT

    async def test_deactivate(self, service: WorkflowService, workflow_repo) -> None:
        created = await service.create_workflow("org1", _create(status=WorkflowStatus.ACTIVE))
        await service.set_status(created.id, "org1", WorkflowStatus.INACTIVE)
        assert await workflow_repo.find_active("booking.created", "org1") == []

    async def test_delete_hides_workflow(self, service: WorkflowService, workflow_repo) -> None:
        created = await service.create_workflow("org1", _create(status=WorkflowStatus.ACTIVE))
        await service.delete_workflow(created.id, "org1")
        assert await service.list_workflows("org1") == []
        assert await workflow_repo.find_active("booking.created", "org1") == []
        with pytest.raises(ResourceNotFoundException) as exc_info:
            await service.get_workflow(created.id, "org1")
        assert exc_info.value.details["resource_type"] == "workflow"

    async def test_duplicate_is_draft_copy(self, service: WorkflowService) -> None:
        created = await service.create_workflow("org1", _create(status=WorkflowStatus.ACTIVE))
        copy = await service.duplicate_workflow(created.id, "org1", created_by="u2")
        assert copy.id != created.id
        assert copy.name == "Confirmation (Copy)"
        assert copy.status == WorkflowStatus.DRAFT
        assert copy.steps == created.steps
        assert copy.created_by == "u2"

    async def test_list_workflows_scoped_to_organization(self, service: WorkflowService) -> None:
        await service.create_workflow("org1", _create())
        await service.create_workflow("org2", _create())
        assert [w.organization_id for w in await service.list_workflows("org1")] == ["org1"]


class TestListExecutions:
    async def test_newest_first(self, service: WorkflowService, execution_repo) -> None:
        created = await service.create_workflow("org1", _create())
        first = await execution_repo.create_running(created.id, "org1", {})
        second = await execution_repo.create_running(created.id, "org1", {})
        executions = await service.list_executions(created.id, "org1")
        assert [e.id for e in executions] == [second.id, first.id]
        assert all(isinstance(e, WorkflowExecutionEntity) for e in executions)

    async def test_unknown_workflow(self, service: WorkflowService) -> None:
        with pytest.raises(ResourceNotFoundException):
            await service.list_executions("missing", "org1")
