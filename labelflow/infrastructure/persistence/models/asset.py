"""Asset ORM model. data_source_id is the authoritative location of the file."""

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from labelflow.infrastructure.persistence.database import Base
from labelflow.infrastructure.persistence.models.mixins import LabelflowModel


class Asset(LabelflowModel, Base):
    """File being annotated. Table: asset."""

    __tablename__ = "asset"

    project_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    external_id: Mapped[str] = mapped_column(String(1024), nullable=False)
    filename: Mapped[str | None] = mapped_column(String(512), nullable=True)
    data_source_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("data_source.id"), nullable=False, index=True
    )

    __table_args__ = (
        UniqueConstraint("project_id", "external_id", name="uq_asset_project_external_id"),
    )
