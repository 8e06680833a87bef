"""TaskEvent ORM model. Append-only audit log; immutable after creation."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    Connection,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    event,
)
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from labelflow.infrastructure.persistence.database import Base
from labelflow.infrastructure.persistence.models.mixins import IntegerIdMixin


class TaskEvent(IntegerIdMixin, Base):
    """Immutable task audit event. Table: task_event. No updated_at."""

    __tablename__ = "task_event"

    task_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("task.id"), nullable=False, index=True
    )
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    from_workflow_stage_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("workflow_stage.id"), nullable=True
    )
    to_workflow_stage_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("workflow_stage.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    __table_args__ = (Index("ix_task_event_task_created", "task_id", "created_at"),)


@event.listens_for(TaskEvent, "before_update")
def _prevent_task_event_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: TaskEvent
) -> None:
    """Task events are append-only; updates are forbidden."""
    raise ValueError(
        "Task events are immutable and cannot be updated. "
        "Record a new event instead."
    )
