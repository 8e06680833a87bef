"""task lifecycle schema: data sources, stages, assets, tasks, task events

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19

Tasks carry an explicit status, archive marker, JSON status history and a
version column for optimistic locking. task_event is append-only.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "3f1c2a9d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TASK_STATUSES = (
    "not_started",
    "ready_for_annotation",
    "ready_for_review",
    "ready_for_completion",
    "in_progress",
    "suspended",
    "deferred",
    "completed",
    "archived",
    "changes_required",
    "vetoed",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "data_source",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "name", name="uq_data_source_project_name"),
    )
    op.create_index("ix_data_source_project_id", "data_source", ["project_id"], unique=False)

    op.create_table(
        "workflow_stage",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("workflow_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("stage_order", sa.Integer(), nullable=False),
        sa.Column("stage_type", sa.String(length=32), nullable=False),
        sa.Column("is_initial_stage", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_final_stage", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("input_data_source_id", sa.Integer(), nullable=True),
        sa.Column("target_data_source_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["input_data_source_id"], ["data_source.id"], ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(
            ["target_data_source_id"], ["data_source.id"], ondelete="SET NULL"
        ),
        sa.UniqueConstraint("workflow_id", "stage_order", name="uq_workflow_stage_order"),
        sa.CheckConstraint(
            "stage_type IN ('annotation', 'revision', 'completion')",
            name="workflow_stage_type_check",
        ),
    )
    op.create_index(
        "ix_workflow_stage_workflow_id", "workflow_stage", ["workflow_id"], unique=False
    )

    op.create_table(
        "asset",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("external_id", sa.String(length=1024), nullable=False),
        sa.Column("filename", sa.String(length=512), nullable=True),
        sa.Column("data_source_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["data_source_id"], ["data_source.id"]),
        sa.UniqueConstraint(
            "project_id", "external_id", name="uq_asset_project_external_id"
        ),
    )
    op.create_index("ix_asset_project_id", "asset", ["project_id"], unique=False)
    op.create_index("ix_asset_data_source_id", "asset", ["data_source_id"], unique=False)

    status_values = ", ".join(f"'{s}'" for s in TASK_STATUSES)
    op.create_table(
        "task",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("workflow_id", sa.Integer(), nullable=False),
        sa.Column("workflow_stage_id", sa.Integer(), nullable=False),
        sa.Column("asset_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("status_changed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "status_history",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("suspended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deferred_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("vetoed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("changes_required_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("assigned_to_user_id", sa.String(length=255), nullable=True),
        sa.Column("last_worked_on_by_user_id", sa.String(length=255), nullable=True),
        sa.Column("working_time_ms", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["workflow_stage_id"], ["workflow_stage.id"]),
        sa.ForeignKeyConstraint(["asset_id"], ["asset.id"]),
        sa.UniqueConstraint("asset_id", "workflow_stage_id", name="uq_task_asset_stage"),
        sa.CheckConstraint(f"status IN ({status_values})", name="task_status_check"),
    )
    op.create_index("ix_task_project_id", "task", ["project_id"], unique=False)
    op.create_index("ix_task_workflow_id", "task", ["workflow_id"], unique=False)
    op.create_index("ix_task_workflow_stage_id", "task", ["workflow_stage_id"], unique=False)
    op.create_index("ix_task_asset_id", "task", ["asset_id"], unique=False)
    op.create_index("ix_task_status", "task", ["status"], unique=False)
    op.create_index(
        "ix_task_assigned_to_user_id", "task", ["assigned_to_user_id"], unique=False
    )
    op.create_index(
        "ix_task_stage_status", "task", ["workflow_stage_id", "status"], unique=False
    )

    op.create_table(
        "task_event",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("task_id", sa.Integer(), nullable=False),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("from_workflow_stage_id", sa.Integer(), nullable=True),
        sa.Column("to_workflow_stage_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["task_id"], ["task.id"]),
        sa.ForeignKeyConstraint(["from_workflow_stage_id"], ["workflow_stage.id"]),
        sa.ForeignKeyConstraint(["to_workflow_stage_id"], ["workflow_stage.id"]),
    )
    op.create_index("ix_task_event_task_id", "task_event", ["task_id"], unique=False)
    op.create_index(
        "ix_task_event_task_created", "task_event", ["task_id", "created_at"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_task_event_task_created", table_name="task_event")
    op.drop_index("ix_task_event_task_id", table_name="task_event")
    op.drop_table("task_event")
    op.drop_index("ix_task_stage_status", table_name="task")
    op.drop_index("ix_task_assigned_to_user_id", table_name="task")
    op.drop_index("ix_task_status", table_name="task")
    op.drop_index("ix_task_asset_id", table_name="task")
    op.drop_index("ix_task_workflow_stage_id", table_name="task")
    op.drop_index("ix_task_workflow_id", table_name="task")
    op.drop_index("ix_task_project_id", table_name="task")
    op.drop_table("task")
    op.drop_index("ix_asset_data_source_id", table_name="asset")
    op.drop_index("ix_asset_project_id", table_name="asset")
    op.drop_table("asset")
    op.drop_index("ix_workflow_stage_workflow_id", table_name="workflow_stage")
    op.drop_table("workflow_stage")
    op.drop_index("ix_data_source_project_id", table_name="data_source")
    op.drop_table("data_source")
