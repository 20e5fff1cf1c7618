"""Workflow use cases: run the workflows listening for a trigger."""

from bookflow.application.use_cases.workflows.execution import WorkflowExecutionService

__all__ = ["WorkflowExecutionService"]
