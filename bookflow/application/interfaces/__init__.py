"""Application interfaces (ports): action, repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from bookflow.infrastructure.
"""

from bookflow.application.interfaces.actions import IAction
from bookflow.application.interfaces.repositories import (
    IWorkflowExecutionRepository,
    IWorkflowRepository,
)
from bookflow.application.interfaces.services import (
    IContextBuilder,
    INotificationService,
    ITemplateRenderer,
    ITriggerSource,
    IWorkflowExecutionService,
)

__all__ = [
    "IAction",
    "IContextBuilder",
    "INotificationService",
    "ITemplateRenderer",
    "ITriggerSource",
    "IWorkflowExecutionRepository",
    "IWorkflowExecutionService",
    "IWorkflowRepository",
]
