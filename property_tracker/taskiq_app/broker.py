"""Broker that carries scraped pages to the ingestion worker.

Under ``TASKIQ_TESTING`` pages are ingested in-process on an InMemoryBroker.
Otherwise they travel over a Redis stream and task summaries expire after
``TASK_RESULT_TTL_SECONDS``.
"""

import importlib

from taskiq import AsyncBroker, InMemoryBroker
from taskiq_redis import RedisAsyncResultBackend, RedisStreamBroker

from property_tracker.config import Settings, get_settings


def _build_broker(settings: Settings) -> AsyncBroker:
    if settings.taskiq_testing:
        return InMemoryBroker()

    result_backend = RedisAsyncResultBackend(
        redis_url=settings.redis_url,
        result_ex_time=settings.task_result_ttl_seconds,
    )
    return RedisStreamBroker(url=settings.redis_url).with_result_backend(
        result_backend
    )


broker = _build_broker(get_settings())

# Ingestion tasks register themselves on import.
importlib.import_module("property_tracker.taskiq_app.tasks")

__all__ = ["broker"]
