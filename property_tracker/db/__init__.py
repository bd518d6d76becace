"""Database session and repository utilities."""

from property_tracker.db.session import (
    dispose_engine,
    get_engine,
    get_sessionmaker,
    session_context,
)
from property_tracker.db.repositories import (
    ChangeEventRow,
    append_history,
    fetch_change_events,
    fetch_change_years,
    fetch_property_history,
    fetch_recent_scrape_runs,
    find_property_by_address,
    find_property_by_address_key,
    find_property_by_source,
    finish_scrape_run,
    insert_tracked_property,
    start_scrape_run,
    update_tracked_property,
    upsert_property_source,
)

__all__ = [
    "ChangeEventRow",
    "dispose_engine",
    "get_engine",
    "get_sessionmaker",
    "session_context",
    "append_history",
    "fetch_change_events",
    "fetch_change_years",
    "fetch_property_history",
    "fetch_recent_scrape_runs",
    "find_property_by_address",
    "find_property_by_address_key",
    "find_property_by_source",
    "finish_scrape_run",
    "insert_tracked_property",
    "start_scrape_run",
    "update_tracked_property",
    "upsert_property_source",
]
