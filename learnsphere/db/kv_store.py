"""Whole-collection key-value record store.

Every collection (users, enrollments, submissions, attendance) is stored
as one JSON document under one key and is read and written atomically as
a whole.  There is no partial-update API: callers read, modify in memory,
and write the full collection back.

A stored value that is not valid JSON is treated as absent.  The read
logs a warning, bumps a metric, and returns the caller's empty default,
so aggregation degrades to empty results instead of failing.

With REDIS_URL set the collections live in Redis and every API instance
sees the same data; without it they live in process memory.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol, runtime_checkable

import redis.asyncio as aioredis

from learnsphere.core.config import SETTINGS
from learnsphere.core.metrics import STORE_DECODE_FAILURES

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None:
        """Fetch a raw stored value.  Returns None when the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Replace the stored value for a key."""
        ...

    async def ping(self) -> bool:
        """True when the backing store answers."""
        ...

    async def aclose(self) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store used in dev and tests.

    The autouse fixture in conftest.py clears it between tests.
    """

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str) -> None:
        self._store[key] = value

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        pass


class RedisKeyValueStore:
    """Redis-backed store, shared across all API instances."""

    # Key prefix keeps record collections apart from anything else in the db.
    _PREFIX = "records:"

    def __init__(self, redis_client: aioredis.Redis) -> None:  # type: ignore[type-arg]
        self._redis = redis_client

    @classmethod
    def from_url(cls, url: str, *, max_connections: int = 20) -> RedisKeyValueStore:
        return cls(
            aioredis.from_url(url, decode_responses=True, max_connections=max_connections)
        )

    async def get(self, key: str) -> str | None:
        return await self._redis.get(f"{self._PREFIX}{key}")

    async def set(self, key: str, value: str) -> None:
        await self._redis.set(f"{self._PREFIX}{key}", value)

    async def ping(self) -> bool:
        try:
            await self._redis.ping()  # type: ignore[misc]
        except aioredis.RedisError:
            logger.exception("Record store ping failed")
            return False
        return True

    async def aclose(self) -> None:
        await self._redis.aclose()


async def read_json(store: KeyValueStore, key: str, default: Any) -> Any:
    """Read and decode one collection, falling back to ``default``."""
    raw = await store.get(key)
    if raw is None:
        return default
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored collection %s is not valid JSON; using empty", key)
        STORE_DECODE_FAILURES.labels(key=key).inc()
        return default
    if not isinstance(value, type(default)):
        logger.warning(
            "Stored collection %s has type %s, expected %s; using empty",
            key,
            type(value).__name__,
            type(default).__name__,
        )
        STORE_DECODE_FAILURES.labels(key=key).inc()
        return default
    return value


async def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    await store.set(key, json.dumps(value))


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

if SETTINGS.redis_url:
    kv_store: KeyValueStore = RedisKeyValueStore.from_url(SETTINGS.redis_url)
else:
    kv_store = InMemoryKeyValueStore()


@asynccontextmanager
async def lifespan_store() -> AsyncIterator[None]:
    """Check the record store on startup and release it on shutdown.

    An unreachable Redis does not stop the app; reads against it fail per
    request and /health reports the store as degraded.
    """
    if isinstance(kv_store, InMemoryKeyValueStore):
        logger.info("No REDIS_URL configured — record store is in-memory")
    elif await kv_store.ping():
        logger.info("Record store connected: %s", SETTINGS.redis_url)
    else:
        logger.error("Record store unreachable on startup: %s", SETTINGS.redis_url)

    try:
        yield
    finally:
        await kv_store.aclose()
