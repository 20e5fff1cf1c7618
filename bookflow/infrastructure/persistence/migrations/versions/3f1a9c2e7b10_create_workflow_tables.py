"""create workflow and workflow_execution tables

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-18

Workflow definitions (trigger type + flow_data steps, draft/active/inactive,
soft delete) and their execution records (running -> completed/failed).
"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

revision: str = "3f1a9c2e7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create workflow and workflow_execution."""
    op.create_table(
        "workflow",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("organization_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("trigger_type", sa.String(length=100), nullable=False),
        sa.Column("trigger_config", sa.JSON(), nullable=False),
        sa.Column("flow_data", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('draft', 'active', 'inactive')", name="workflow_status_check"
        ),
    )
    op.create_index("ix_workflow_organization_id", "workflow", ["organization_id"])
    op.create_index("ix_workflow_trigger_type", "workflow", ["trigger_type"])
    op.create_index("ix_workflow_created_by", "workflow", ["created_by"])
    op.create_index("ix_workflow_deleted_at", "workflow", ["deleted_at"])
    op.create_index(
        "ix_workflow_organization_trigger_status",
        "workflow",
        ["organization_id", "trigger_type", "status"],
    )

    op.create_table(
        "workflow_execution",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("organization_id", sa.String(), nullable=False),
        sa.Column(
            "workflow_id",
            sa.String(),
            sa.ForeignKey("workflow.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("context", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("step_results", sa.JSON(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('running', 'completed', 'failed')",
            name="workflow_execution_status_check",
        ),
    )
    op.create_index(
        "ix_workflow_execution_organization_id", "workflow_execution", ["organization_id"]
    )
    op.create_index("ix_workflow_execution_workflow_id", "workflow_execution", ["workflow_id"])
    op.create_index("ix_workflow_execution_status", "workflow_execution", ["status"])
    op.create_index(
        "ix_workflow_execution_organization_workflow",
        "workflow_execution",
        ["organization_id", "workflow_id"],
    )


def downgrade() -> None:
    """Drop workflow_execution and workflow."""
    op.drop_table("workflow_execution")
    op.drop_table("workflow")
