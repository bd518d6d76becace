"""Tracked property current-state table model."""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Index,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from property_tracker.models.base import Base


class TrackedProperty(Base):
    """Current state of one physical property, keyed by its address."""

    __tablename__ = "tracked_property"
    __table_args__ = (
        UniqueConstraint(
            "address_line",
            "city",
            "postal_code",
            name="uq_tracked_property_address",
        ),
        Index("idx_tracked_property_address_key", "address_key"),
        Index("idx_tracked_property_region", "state_abbr", "county_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    address_line: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(nullable=False)
    postal_code: Mapped[str] = mapped_column(nullable=False)
    state_abbr: Mapped[str | None] = mapped_column(nullable=True)
    county_name: Mapped[str | None] = mapped_column(nullable=True)
    address_key: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[str | None] = mapped_column(nullable=True)
    list_price: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    sold_price: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    sold_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_pending: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    is_contingent: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    is_new_listing: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    is_foreclosure: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    is_price_reduced: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    is_coming_soon: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    first_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    last_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
