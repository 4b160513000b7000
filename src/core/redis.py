"""Optional Redis connection shared by the view and aggregate caches."""
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

R = TypeVar("R")


class RedisClient:
    """
    Async Redis client that treats every failure as a cache miss.

    Redis only accelerates view deduplication and aggregate caching. When it is
    disabled, unreachable or raising, reads return None and writes return False;
    the in-process cache tier keeps working on its own.
    """

    def __init__(self, url: str, enabled: bool = True, pool_size: int = 20) -> None:
        self._url = url
        self._enabled = enabled
        self._pool_size = pool_size
        self._client: Redis | None = None

    async def connect(self) -> None:
        """Open the pool and ping once; on failure stay disconnected."""
        if not self._enabled:
            logger.info("redis_disabled")
            return
        pool = ConnectionPool.from_url(self._url, max_connections=self._pool_size)
        client = Redis(connection_pool=pool)
        try:
            await client.ping()
        except RedisError as e:
            logger.warning("redis_connect_failed", extra={"error": str(e)})
            await client.aclose(close_connection_pool=True)
            return
        self._client = client
        logger.info("redis_connected")

    async def close(self) -> None:
        """Close the client and its pool."""
        if self._client is None:
            return
        await self._client.aclose(close_connection_pool=True)
        self._client = None
        logger.info("redis_closed")

    @property
    def is_connected(self) -> bool:
        """True once a ping has succeeded and until close()."""
        return self._client is not None

    async def _guarded(
        self,
        op: str,
        call: Callable[[Redis], Awaitable[R]],
        fallback: R,
    ) -> R:
        if self._client is None:
            return fallback
        try:
            return await call(self._client)
        except RedisError as e:
            logger.warning("redis_op_failed", extra={"op": op, "error": str(e)})
            return fallback

    async def ping(self) -> bool:
        """Check Redis connectivity."""
        return bool(await self._guarded("ping", lambda c: c.ping(), False))

    async def get(self, key: str) -> bytes | None:
        """Read a key; None when missing or Redis is unavailable."""
        return await self._guarded("get", lambda c: c.get(key), None)

    async def setex(self, key: str, seconds: int, value: str | bytes) -> bool:
        """Write a key with a TTL; False when Redis is unavailable."""
        async def call(c: Redis) -> bool:
            await c.setex(key, seconds, value)
            return True

        return await self._guarded("setex", call, False)

    async def delete(self, *keys: str) -> bool:
        """Delete keys; False when Redis is unavailable."""
        async def call(c: Redis) -> bool:
            await c.delete(*keys)
            return True

        return await self._guarded("delete", call, False)
