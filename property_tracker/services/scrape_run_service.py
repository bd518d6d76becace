"""Ingestion runs over a scrape target, one transaction per page."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from property_tracker.config import Settings, get_settings
from property_tracker.crawlers.base import ScrapePage
from property_tracker.db.repositories import finish_scrape_run, start_scrape_run
from property_tracker.services.ingestion_service import IngestionService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScrapeRunSummary:
    run_id: int
    target: str
    pages_fetched: int = 0
    pages_skipped: int = 0
    properties_seen: int = 0
    created: int = 0
    updated: int = 0
    rejected: int = 0


class ScrapeRunService:
    """Drive page-by-page ingestion and keep the ``scrape_run`` ledger."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings()

    async def run(
        self, target: str, pages: AsyncIterable[ScrapePage]
    ) -> ScrapeRunSummary:
        async with self._session_factory() as session:
            run_id = await start_scrape_run(session, target)

        summary = ScrapeRunSummary(run_id=run_id, target=target)
        logger.info("Scrape run %s started for target=%s", run_id, target)

        try:
            async for page in pages:
                await self._ingest_page(page, summary)
        except Exception as exc:
            logger.exception("Scrape run %s failed for target=%s", run_id, target)
            await self._finish(summary, success=False, error_message=str(exc))
            raise

        await self._finish(summary, success=True)
        logger.info(
            "Scrape run %s complete: pages=%s properties=%s skipped_pages=%s",
            run_id,
            summary.pages_fetched,
            summary.properties_seen,
            summary.pages_skipped,
        )
        return summary

    async def _ingest_page(self, page: ScrapePage, summary: ScrapeRunSummary) -> None:
        if not page.is_usable:
            summary.pages_skipped += 1
            logger.warning("Skipping unusable page url=%s: %s", page.page_url, page.error)
            return

        async with self._session_factory() as session:
            service = IngestionService(session, self._settings)
            result = await service.ingest_page(page.payloads)

        summary.pages_fetched += 1
        summary.properties_seen += len(page.payloads)
        summary.created += result.created
        summary.updated += result.updated
        summary.rejected += result.rejected

    async def _finish(
        self,
        summary: ScrapeRunSummary,
        *,
        success: bool,
        error_message: str | None = None,
    ) -> None:
        async with self._session_factory() as session:
            await finish_scrape_run(
                session,
                summary.run_id,
                pages_fetched=summary.pages_fetched,
                properties_seen=summary.properties_seen,
                success=success,
                error_message=error_message,
            )
