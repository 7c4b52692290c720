"""Redis cache backend (async client)."""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from filedrop.config import settings
from filedrop.exceptions import CacheFailure

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _as_cache_failure(command: str):
    """Translate any backend error into CacheFailure."""
    try:
        yield
    except (RedisError, OSError, asyncio.TimeoutError) as e:
        raise CacheFailure(f"Redis {command} failed: {e}") from e


class RedisCacheBackend:
    """
    Key/value cache on Redis.

    The client connects lazily on first command, so construction never
    fails when Redis is down; every command error surfaces as CacheFailure.
    """

    def __init__(self, url: Optional[str] = None, socket_timeout: Optional[float] = None):
        timeout = socket_timeout if socket_timeout is not None else settings.REDIS_SOCKET_TIMEOUT
        self.url = url or settings.REDIS_URL
        self._client = redis.from_url(
            self.url,
            decode_responses=False,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )

    async def get(self, key: str) -> Optional[bytes]:
        async with _as_cache_failure(f"GET {key}"):
            return await self._client.get(key)

    async def set_with_ttl(self, key: str, value: bytes, ttl_seconds: int) -> None:
        async with _as_cache_failure(f"SETEX {key}"):
            await self._client.setex(key, ttl_seconds, value)

    async def delete(self, key: str) -> None:
        async with _as_cache_failure(f"DEL {key}"):
            await self._client.delete(key)

    async def ping(self) -> bool:
        async with _as_cache_failure("PING"):
            return bool(await self._client.ping())

    async def close(self) -> None:
        try:
            await self._client.aclose()
            logger.info("Redis connection closed")
        except (RedisError, OSError) as e:
            logger.warning(f"⚠️  Error closing Redis connection: {e}")
