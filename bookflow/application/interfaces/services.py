"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from bookflow.application.dtos.workflow import WorkflowRunResult
    from bookflow.domain.entities.workflow import WorkflowEntity


# Trigger source: anything that fires a workflow trigger
class ITriggerSource(Protocol):
    """Protocol for trigger-producing entities (e.g. a booking)."""

    @property
    def id(self) -> str:
        """Identifier of the source entity (used in logs)."""

    @property
    def organization_id(self) -> str:
        """Tenant that scopes the workflow lookup."""


# Context builder interface
class IContextBuilder(Protocol):
    """Protocol for turning a trigger source into a workflow execution context."""

    def build(self, source: Any) -> dict[str, Any]:
        """Return the nested, JSON-serializable context. Never raises."""

    def build_fake_context(self) -> dict[str, Any]:
        """Return sample context with the same top-level keys (dry runs, previews)."""


# Notification service interface (email.send action)
class INotificationService(Protocol):
    """Protocol for sending notifications (e.g. email) to a list of recipients."""

    async def send(
        self,
        to_emails: list[str],
        subject: str,
        body: str,
    ) -> None:
        """Send notification (e.g. email) to the given addresses. Raises on delivery failure."""


# Template renderer interface (placeholder substitution in action configs)
class ITemplateRenderer(Protocol):
    """Protocol for rendering {{ path }} placeholders against a context."""

    def render(self, template: str, context: dict[str, Any]) -> str:
        """Render template; unresolved placeholders are left as written."""


# Workflow engine interface
class IWorkflowExecutionService(Protocol):
    """Protocol for executing workflows when a trigger fires."""

    async def execute_for_trigger(
        self, trigger_type: str, source: ITriggerSource
    ) -> list[WorkflowRunResult]:
        """Find and run the organization's active workflows for trigger_type."""

    async def execute_workflow(
        self, workflow: WorkflowEntity, context: dict[str, Any]
    ) -> WorkflowRunResult:
        """Run one workflow against a context and persist its execution record."""
