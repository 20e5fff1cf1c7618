"""Workflow and WorkflowExecution ORM models. Event-driven booking automation."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from bookflow.domain.enums import WorkflowExecutionStatus, WorkflowStatus
from bookflow.infrastructure.persistence.database import Base
from bookflow.infrastructure.persistence.models.mixins import (
    AuditedOrganizationModel,
    OrganizationModel,
)


def _in_values(column: str, values: list[str]) -> str:
    quoted = ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    return f"{column} IN ({quoted})"


class Workflow(AuditedOrganizationModel, Base):
    """Workflow definition. Table: workflow. Trigger + ordered steps (flow_data JSON)."""

    __tablename__ = "workflow"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    trigger_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    trigger_config: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    # {"steps": [{"action": "email.send", "config": {...}}, ...]}
    flow_data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=WorkflowStatus.DRAFT.value
    )

    __table_args__ = (
        Index(
            "ix_workflow_organization_trigger_status",
            "organization_id",
            "trigger_type",
            "status",
        ),
        CheckConstraint(
            _in_values("status", WorkflowStatus.values()),
            name="workflow_status_check",
        ),
    )


class WorkflowExecution(OrganizationModel, Base):
    """Workflow execution audit. Table: workflow_execution."""

    __tablename__ = "workflow_execution"

    workflow_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("workflow.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    context: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=WorkflowExecutionStatus.RUNNING.value,
        index=True,
    )
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    step_results: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSON, nullable=True
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index(
            "ix_workflow_execution_organization_workflow",
            "organization_id",
            "workflow_id",
        ),
        CheckConstraint(
            _in_values("status", WorkflowExecutionStatus.values()),
            name="workflow_execution_status_check",
        ),
    )
