"""Scrape run bookkeeping table model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from property_tracker.models.base import Base


class ScrapeRun(Base):
    """One ingestion run over a scrape target."""

    __tablename__ = "scrape_run"
    __table_args__ = (Index("idx_scrape_run_started", "started_at"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    target: Mapped[str] = mapped_column(nullable=False)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    finished_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    pages_fetched: Mapped[int | None] = mapped_column(Integer, nullable=True)
    properties_seen: Mapped[int | None] = mapped_column(Integer, nullable=True)
    success: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
