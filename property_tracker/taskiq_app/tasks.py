"""Taskiq tasks for page ingestion."""

import logging
from collections.abc import Mapping
from typing import Any, cast

from property_tracker.config import get_settings
from property_tracker.db.session import session_context
from property_tracker.services.ingestion_service import BatchResult, IngestionService
from property_tracker.taskiq_app.broker import broker
from property_tracker.taskiq_app.dedup import build_target_lock_key, target_lock

logger = logging.getLogger(__name__)
settings = get_settings()


async def _persist_page(payloads: list[Mapping[str, object]]) -> BatchResult:
    """Ingest one page of raw payloads in its own session and transaction."""

    async with session_context() as session:
        return await IngestionService(session, settings).ingest_page(payloads)


@broker.task(task_name="ingest_scrape_page")
async def ingest_scrape_page(
    target: str,
    page_url: str,
    payloads: list[dict[str, Any]],
) -> dict[str, object]:
    lock_key = build_target_lock_key(scope="execution", target=target)
    async with target_lock(lock_key, settings.ingest_dedup_ttl_seconds) as acquired:
        if not acquired:
            logger.info("ingest_scrape_page skipped for target=%s due to lock", target)
            return {
                "target": target,
                "page_url": page_url,
                "status": "skipped_duplicate_execution",
            }

        result = await _persist_page(list(payloads))
        logger.info(
            "Ingested page url=%s for target=%s: %s",
            page_url,
            target,
            result.as_dict(),
        )
        return {
            "target": target,
            "page_url": page_url,
            "status": "ok",
            "received": len(payloads),
            **result.as_dict(),
        }


async def enqueue_ingest_scrape_page(
    *,
    target: str,
    page_url: str,
    payloads: list[dict[str, Any]],
) -> dict[str, object]:
    """Hand one fetched page to the background worker."""

    task_kicker = cast(Any, ingest_scrape_page)
    task = await task_kicker.kiq(target, page_url, payloads)
    return {"enqueued": True, "task_id": task.task_id}
