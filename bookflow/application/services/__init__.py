"""Application services: action registry, context builder, workflow management."""

from bookflow.application.services.action_registry import ActionRegistry
from bookflow.application.services.context_builder import WorkflowContextBuilder
from bookflow.application.services.workflow_service import WorkflowService

__all__ = [
    "ActionRegistry",
    "WorkflowContextBuilder",
    "WorkflowService",
]
