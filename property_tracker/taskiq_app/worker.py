"""Worker entrypoint: registers ingestion tasks and worker lifecycle hooks.

Run with ``taskiq worker property_tracker.taskiq_app.worker:broker``.
"""

import logging

from taskiq import TaskiqEvents, TaskiqState

from property_tracker.db.session import dispose_engine
from property_tracker.taskiq_app.broker import broker
from property_tracker.taskiq_app import tasks as _tasks  # noqa: F401

logger = logging.getLogger(__name__)


@broker.on_event(TaskiqEvents.WORKER_STARTUP)
async def _on_worker_startup(state: TaskiqState) -> None:  # noqa: ARG001
    logger.info("Ingestion worker started")


@broker.on_event(TaskiqEvents.WORKER_SHUTDOWN)
async def _on_worker_shutdown(state: TaskiqState) -> None:  # noqa: ARG001
    await dispose_engine()
    logger.info("Ingestion worker stopped; database engine disposed")


__all__ = ["broker"]
