"""Append-only field history table model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from property_tracker.models.base import Base


class PropertyHistory(Base):
    """One observed transition of a single tracked field."""

    __tablename__ = "property_history"
    __table_args__ = (
        Index("idx_property_history_property", "property_id"),
        Index("idx_property_history_observed", "observed_at"),
        Index("idx_property_history_field", "field_name", "observed_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tracked_property.id"), nullable=False
    )
    observed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    field_name: Mapped[str] = mapped_column(nullable=False)
    previous_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    current_value: Mapped[str] = mapped_column(Text, nullable=False)
