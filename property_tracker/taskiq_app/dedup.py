"""Redis-based locks that serialize ingestion runs per scrape target."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from time import monotonic

from redis.asyncio import Redis

from property_tracker.config import get_settings

_MEMORY_LOCKS: dict[str, float] = {}


def build_target_lock_key(*, scope: str, target: str) -> str:
    """Build namespaced lock key for one scrape target."""

    return f"ingest-lock:{scope}:{target.strip().lower()}"


def _acquire_memory_lock(key: str, ttl_seconds: int) -> bool:
    now = monotonic()
    for lock_key in [k for k, expiry in _MEMORY_LOCKS.items() if expiry <= now]:
        _MEMORY_LOCKS.pop(lock_key, None)

    if key in _MEMORY_LOCKS:
        return False

    _MEMORY_LOCKS[key] = now + ttl_seconds
    return True


async def acquire_target_lock(key: str, ttl_seconds: int) -> bool:
    """Acquire the lock with Redis SET NX EX semantics."""

    settings = get_settings()

    if settings.taskiq_testing:
        return _acquire_memory_lock(key, ttl_seconds)

    client = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
    try:
        return bool(await client.set(key, "1", nx=True, ex=ttl_seconds))
    finally:
        await client.aclose()


async def release_target_lock(key: str) -> None:
    settings = get_settings()

    if settings.taskiq_testing:
        _MEMORY_LOCKS.pop(key, None)
        return

    client = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
    try:
        await client.delete(key)
    finally:
        await client.aclose()


@asynccontextmanager
async def target_lock(key: str, ttl_seconds: int) -> AsyncIterator[bool]:
    """Yield whether the lock was acquired; release it on exit if it was."""

    acquired = await acquire_target_lock(key, ttl_seconds)
    try:
        yield acquired
    finally:
        if acquired:
            await release_target_lock(key)
