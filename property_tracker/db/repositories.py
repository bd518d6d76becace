"""Repository helpers for tracked properties, history, sources and scrape runs.

Write helpers used by the ingestion pipeline only flush; the caller owns the
transaction so a whole page commits or rolls back together. Scrape run
bookkeeping commits on its own.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import extract, func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from property_tracker.domain.listing import NormalizedListing
from property_tracker.domain.tracked_fields import TRACKED_FIELD_NAMES, PropertyChange
from property_tracker.models.property_history import PropertyHistory
from property_tracker.models.property_source import PropertySource
from property_tracker.models.scrape_run import ScrapeRun
from property_tracker.models.tracked_property import TrackedProperty

REPORTABLE_FIELDS = ("status", "list_price")


@dataclass(slots=True)
class ChangeEventRow:
    """History entry joined with the current state of its property."""

    history: PropertyHistory
    tracked: TrackedProperty


def _tracked_values(listing: NormalizedListing) -> dict[str, object]:
    return {name: getattr(listing, name) for name in TRACKED_FIELD_NAMES}


def _year_bounds(year: int) -> tuple[datetime, datetime]:
    return (
        datetime(year, 1, 1, tzinfo=UTC),
        datetime(year + 1, 1, 1, tzinfo=UTC),
    )


async def find_property_by_address(
    session: AsyncSession,
    *,
    address_line: str,
    city: str,
    postal_code: str,
) -> TrackedProperty | None:
    """Exact, case-sensitive lookup on the natural key."""

    stmt = (
        select(TrackedProperty)
        .where(TrackedProperty.address_line == address_line)
        .where(TrackedProperty.city == city)
        .where(TrackedProperty.postal_code == postal_code)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def find_property_by_address_key(
    session: AsyncSession, address_key: str
) -> TrackedProperty | None:
    """Lookup on the normalized address key; the oldest row wins."""

    stmt = (
        select(TrackedProperty)
        .where(TrackedProperty.address_key == address_key)
        .order_by(TrackedProperty.id.asc())
        .limit(1)
    )
    return (await session.execute(stmt)).scalars().first()


async def find_property_by_source(
    session: AsyncSession,
    *,
    source_name: str,
    source_listing_id: str,
) -> TrackedProperty | None:
    """Follow the source link for a (source name, listing id) pair."""

    stmt = (
        select(TrackedProperty)
        .join(PropertySource, PropertySource.property_id == TrackedProperty.id)
        .where(PropertySource.source_name == source_name)
        .where(PropertySource.source_listing_id == source_listing_id)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def insert_tracked_property(
    session: AsyncSession, listing: NormalizedListing, seen_at: datetime
) -> TrackedProperty:
    """Insert a new tracked property and flush to obtain its id."""

    tracked = TrackedProperty(
        address_line=listing.address_line,
        city=listing.city,
        postal_code=listing.postal_code,
        state_abbr=listing.state_abbr,
        county_name=listing.county_name,
        address_key=listing.address_key,
        first_seen_at=seen_at,
        last_seen_at=seen_at,
        **_tracked_values(listing),
    )
    session.add(tracked)
    await session.flush()
    return tracked


async def update_tracked_property(
    session: AsyncSession,
    tracked: TrackedProperty,
    listing: NormalizedListing,
    seen_at: datetime,
) -> None:
    """Overwrite the tracked fields and bump ``last_seen_at``."""

    for name, value in _tracked_values(listing).items():
        setattr(tracked, name, value)
    tracked.last_seen_at = seen_at
    await session.flush()


async def append_history(
    session: AsyncSession,
    changes: Sequence[PropertyChange],
    observed_at: datetime,
) -> int:
    """Append one history row per change."""

    if not changes:
        return 0

    values = [
        {
            "property_id": change.property_id,
            "observed_at": observed_at,
            "field_name": change.field_name,
            "previous_value": change.previous_value,
            "current_value": change.current_value,
        }
        for change in changes
    ]
    await session.execute(insert(PropertyHistory), values)
    return len(values)


async def upsert_property_source(
    session: AsyncSession,
    *,
    property_id: int,
    source_name: str,
    source_listing_id: str,
    seen_at: datetime,
) -> None:
    """Link a source listing to a property; the latest writer wins."""

    dialect_name = session.get_bind().dialect.name

    if dialect_name == "postgresql":
        stmt = pg_insert(PropertySource).values(
            property_id=property_id,
            source_name=source_name,
            source_listing_id=source_listing_id,
            first_seen_at=seen_at,
            last_seen_at=seen_at,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_property_source_source_listing",
            set_={
                "property_id": stmt.excluded.property_id,
                "last_seen_at": stmt.excluded.last_seen_at,
            },
        )
        await session.execute(stmt)
        return

    exists_stmt = (
        select(PropertySource.id)
        .where(PropertySource.source_name == source_name)
        .where(PropertySource.source_listing_id == source_listing_id)
    )
    existing_id = (await session.execute(exists_stmt)).scalar_one_or_none()

    if existing_id is None:
        session.add(
            PropertySource(
                property_id=property_id,
                source_name=source_name,
                source_listing_id=source_listing_id,
                first_seen_at=seen_at,
                last_seen_at=seen_at,
            )
        )
        await session.flush()
        return

    stmt = (
        update(PropertySource)
        .where(PropertySource.id == existing_id)
        .values(property_id=property_id, last_seen_at=seen_at)
    )
    await session.execute(stmt)


async def fetch_change_events(
    session: AsyncSession,
    *,
    state_abbr: str,
    year: int,
    county_name: str | None = None,
    since: datetime | None = None,
    limit: int | None = None,
) -> list[ChangeEventRow]:
    """Fetch reportable history rows joined with their property, newest first."""

    start, end = _year_bounds(year)
    stmt = (
        select(PropertyHistory, TrackedProperty)
        .join(TrackedProperty, PropertyHistory.property_id == TrackedProperty.id)
        .where(TrackedProperty.state_abbr == state_abbr)
        .where(PropertyHistory.observed_at >= start)
        .where(PropertyHistory.observed_at < end)
        .where(PropertyHistory.field_name.in_(REPORTABLE_FIELDS))
        .order_by(PropertyHistory.observed_at.desc(), PropertyHistory.id.desc())
    )

    if county_name:
        stmt = stmt.where(TrackedProperty.county_name == county_name)

    if since is not None:
        stmt = stmt.where(PropertyHistory.observed_at >= since)

    if limit is not None:
        stmt = stmt.limit(limit)

    rows = (await session.execute(stmt)).all()
    return [ChangeEventRow(history=row[0], tracked=row[1]) for row in rows]


async def fetch_change_years(session: AsyncSession) -> list[int]:
    """Distinct UTC years present in history, newest first.

    Years are taken in UTC to agree with the year bounds of
    :func:`fetch_change_events`. PostgreSQL would otherwise extract them in
    the session time zone; SQLite already stores UTC wall-clock values.
    """

    observed_at = PropertyHistory.observed_at
    if session.get_bind().dialect.name == "postgresql":
        observed_at = func.timezone("UTC", observed_at)
    year_expr = extract("year", observed_at)
    stmt = select(year_expr).distinct().order_by(year_expr.desc())
    return [int(year) for year in (await session.execute(stmt)).scalars().all()]


async def fetch_property_history(
    session: AsyncSession, property_id: int
) -> list[PropertyHistory]:
    """Full history of one property in observation order."""

    stmt = (
        select(PropertyHistory)
        .where(PropertyHistory.property_id == property_id)
        .order_by(PropertyHistory.observed_at.asc(), PropertyHistory.id.asc())
    )
    return list((await session.execute(stmt)).scalars().all())


async def start_scrape_run(
    session: AsyncSession, target: str, started_at: datetime | None = None
) -> int:
    """Record the start of an ingestion run and return its id."""

    run = ScrapeRun(
        target=target,
        started_at=started_at or datetime.now(UTC),
        success=False,
    )
    session.add(run)
    await session.commit()
    return run.id


async def finish_scrape_run(
    session: AsyncSession,
    run_id: int,
    *,
    pages_fetched: int,
    properties_seen: int,
    success: bool,
    error_message: str | None = None,
    finished_at: datetime | None = None,
) -> None:
    """Record the outcome of an ingestion run."""

    stmt = (
        update(ScrapeRun)
        .where(ScrapeRun.id == run_id)
        .values(
            finished_at=finished_at or datetime.now(UTC),
            pages_fetched=pages_fetched,
            properties_seen=properties_seen,
            success=success,
            error_message=error_message,
        )
    )
    await session.execute(stmt)
    await session.commit()


async def fetch_recent_scrape_runs(
    session: AsyncSession, limit: int = 50
) -> list[ScrapeRun]:
    """Most recent ingestion runs, newest first."""

    stmt = select(ScrapeRun).order_by(ScrapeRun.started_at.desc()).limit(limit)
    return list((await session.execute(stmt)).scalars().all())
