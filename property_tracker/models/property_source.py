"""Source listing linkage table model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from property_tracker.models.base import Base


class PropertySource(Base):
    """Link between a source's listing id and the tracked property it maps to."""

    __tablename__ = "property_source"
    __table_args__ = (
        UniqueConstraint(
            "source_name",
            "source_listing_id",
            name="uq_property_source_source_listing",
        ),
        Index("idx_property_source_property", "property_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tracked_property.id"), nullable=False
    )
    source_name: Mapped[str] = mapped_column(nullable=False)
    source_listing_id: Mapped[str] = mapped_column(nullable=False)
    first_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    last_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
