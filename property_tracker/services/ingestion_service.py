"""Transactional persistence of normalized listings with field-level history."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from property_tracker.config import Settings, get_settings
from property_tracker.db.repositories import (
    append_history,
    insert_tracked_property,
    update_tracked_property,
    upsert_property_source,
)
from property_tracker.domain.listing import NormalizedListing, normalize_page
from property_tracker.domain.tracked_fields import (
    diff_tracked_fields,
    initial_state_changes,
)
from property_tracker.services.identity_service import IdentityResolver

logger = logging.getLogger(__name__)


class BatchPersistError(RuntimeError):
    """Storage failure that rolled back a whole batch."""


@dataclass(slots=True)
class BatchResult:
    """Outcome counters for one committed batch."""

    created: int = 0
    updated: int = 0
    unchanged: int = 0
    history_entries: int = 0
    rejected: int = 0

    @property
    def processed(self) -> int:
        return self.created + self.updated + self.unchanged

    def as_dict(self) -> dict[str, int]:
        return {
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "history_entries": self.history_entries,
            "rejected": self.rejected,
        }


class IngestionService:
    """Apply scraped listings to current state, history and source links."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        self._session = session
        self._resolver = IdentityResolver(session, settings or get_settings())

    async def ingest_page(
        self,
        payloads: Iterable[Mapping[str, object]],
        *,
        observed_at: datetime | None = None,
    ) -> BatchResult:
        """Normalize raw payloads, skip invalid ones, and persist the rest."""

        listings, rejected = normalize_page(payloads)
        result = await self.ingest_batch(listings, observed_at=observed_at)
        result.rejected = rejected
        return result

    async def ingest_batch(
        self,
        listings: Sequence[NormalizedListing],
        *,
        observed_at: datetime | None = None,
    ) -> BatchResult:
        """Persist a batch inside a single transaction.

        Either every listing's effects are committed or none are. Storage
        errors are re-raised as :class:`BatchPersistError`. The session must
        not have a transaction in progress.
        """

        now = observed_at or datetime.now(UTC)
        result = BatchResult()

        try:
            async with self._session.begin():
                for listing in listings:
                    await self._process_one(listing, now, result)
        except SQLAlchemyError as exc:
            logger.error(
                "Batch of %s listings rolled back: %s", len(listings), exc
            )
            raise BatchPersistError(str(exc)) from exc

        logger.info(
            "Batch committed: created=%s updated=%s unchanged=%s history=%s",
            result.created,
            result.updated,
            result.unchanged,
            result.history_entries,
        )
        return result

    async def _process_one(
        self, listing: NormalizedListing, now: datetime, result: BatchResult
    ) -> None:
        tracked = await self._resolver.resolve(listing)

        if tracked is None:
            tracked = await insert_tracked_property(self._session, listing, now)
            seeded = initial_state_changes(tracked.id, listing)
            result.history_entries += await append_history(self._session, seeded, now)
            result.created += 1
        else:
            changes = diff_tracked_fields(tracked, listing)
            if changes:
                result.history_entries += await append_history(
                    self._session, changes, now
                )
                await update_tracked_property(self._session, tracked, listing, now)
                result.updated += 1
            else:
                result.unchanged += 1

        await upsert_property_source(
            self._session,
            property_id=tracked.id,
            source_name=listing.source_name,
            source_listing_id=listing.source_listing_id,
            seen_at=now,
        )
