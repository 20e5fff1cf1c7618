"""Application DTOs: workflow definition inputs and run results."""

from bookflow.application.dtos.workflow import (
    StepError,
    StepResult,
    WorkflowCreate,
    WorkflowRunResult,
    WorkflowUpdate,
)

__all__ = [
    "StepError",
    "StepResult",
    "WorkflowCreate",
    "WorkflowRunResult",
    "WorkflowUpdate",
]
