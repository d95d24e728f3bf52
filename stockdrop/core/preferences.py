from __future__ import annotations

import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from stockdrop.core.config import settings

logger = logging.getLogger(__name__)

THEME_KEY = "theme_mode"


def theme_key(device_id: str) -> str:
    return f"{THEME_KEY}:{device_id}"


class MemoryPreferenceStore:
    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str) -> None:
        self._store[key] = value

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)


class PreferenceStore:
    """Single-string-key preferences read before any backend round trip.

    Backed by redis when reachable, otherwise by process memory.
    """

    def __init__(self) -> None:
        self._memory = MemoryPreferenceStore()
        self._redis: Redis | None = None

    @property
    def backend(self) -> str:
        return "redis" if self._redis else "memory"

    async def connect(self) -> None:
        try:
            client = Redis.from_url(settings.redis_url, decode_responses=True)
            await client.ping()
            self._redis = client
        except (RedisError, OSError) as exc:
            logger.warning("Preference store falling back to memory: %s", exc)
            self._redis = None

    async def close(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def get(self, key: str) -> str | None:
        if self._redis:
            try:
                return await self._redis.get(key)
            except RedisError as exc:
                logger.warning("Redis read failed for %s: %s", key, exc)
        return await self._memory.get(key)

    async def set(self, key: str, value: str) -> None:
        if self._redis:
            try:
                await self._redis.set(name=key, value=value)
                return
            except RedisError as exc:
                logger.warning("Redis write failed for %s: %s", key, exc)
        await self._memory.set(key, value)

    async def delete(self, key: str) -> None:
        if self._redis:
            try:
                await self._redis.delete(key)
            except RedisError as exc:
                logger.warning("Redis delete failed for %s: %s", key, exc)
        await self._memory.delete(key)


preferences = PreferenceStore()
