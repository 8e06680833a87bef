"""WorkflowStage ORM model. One ordered step of a workflow."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from labelflow.infrastructure.persistence.database import Base
from labelflow.infrastructure.persistence.models.mixins import LabelflowModel


class WorkflowStage(LabelflowModel, Base):
    """Workflow stage with its input/target data sources. Table: workflow_stage."""

    __tablename__ = "workflow_stage"

    workflow_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    stage_order: Mapped[int] = mapped_column(Integer, nullable=False)
    stage_type: Mapped[str] = mapped_column(String(32), nullable=False)
    is_initial_stage: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_final_stage: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    input_data_source_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("data_source.id", ondelete="SET NULL"), nullable=True
    )
    target_data_source_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("data_source.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("workflow_id", "stage_order", name="uq_workflow_stage_order"),
        CheckConstraint(
            "stage_type IN ('annotation', 'revision', 'completion')",
            name="workflow_stage_type_check",
        ),
    )
