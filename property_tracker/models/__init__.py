"""SQLAlchemy ORM models."""

from property_tracker.models.base import Base
from property_tracker.models.property_history import PropertyHistory
from property_tracker.models.property_source import PropertySource
from property_tracker.models.scrape_run import ScrapeRun
from property_tracker.models.tracked_property import TrackedProperty

__all__ = [
    "Base",
    "PropertyHistory",
    "PropertySource",
    "ScrapeRun",
    "TrackedProperty",
]
