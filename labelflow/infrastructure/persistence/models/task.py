"""Task ORM model. Annotation work item for one asset in one workflow stage."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from labelflow.domain.enums import TaskStatus
from labelflow.infrastructure.persistence.database import Base
from labelflow.infrastructure.persistence.models.mixins import LabelflowModel

_STATUS_VALUES = ", ".join(f"'{value}'" for value in TaskStatus.values())


class Task(LabelflowModel, Base):
    """Task with explicit status, archive marker and status history. Table: task.

    The per-reason timestamp columns mirror values derived from status so they
    stay queryable; they are written by the repository, never read back.
    """

    __tablename__ = "task"

    project_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    workflow_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    workflow_stage_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("workflow_stage.id"), nullable=False, index=True
    )
    asset_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("asset.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    status_changed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    status_history: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, default=list
    )
    archived_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    suspended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    deferred_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    vetoed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    changes_required_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    assigned_to_user_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    last_worked_on_by_user_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    working_time_ms: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # Optimistic lock: SQLAlchemy checks and bumps it on every UPDATE.
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("asset_id", "workflow_stage_id", name="uq_task_asset_stage"),
        Index("ix_task_stage_status", "workflow_stage_id", "status"),
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="task_status_check"),
    )
