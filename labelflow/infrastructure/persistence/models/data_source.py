"""DataSource ORM model. A named storage location (one bucket per project + name)."""

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from labelflow.infrastructure.persistence.database import Base
from labelflow.infrastructure.persistence.models.mixins import LabelflowModel


class DataSource(LabelflowModel, Base):
    """Storage location for the assets of one workflow stage. Table: data_source."""

    __tablename__ = "data_source"

    project_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_data_source_project_name"),
    )
