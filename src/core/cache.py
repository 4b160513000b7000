"""
Two-tier caching: Redis first, an in-process TTL map second.

Redis may be disabled, unreachable, or rate limited. The in-process map keeps
caching (and view deduplication) working inside a single process without it,
trading cross-process consistency for availability.
"""
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.redis import RedisClient

logger = logging.getLogger(__name__)


class LocalTTLCache:
    """
    In-process key/value map with per-entry expiry.

    Expired entries are dropped lazily on read. When the map grows beyond
    ``max_entries`` it is swept: expired entries are removed first, then, if
    ``evict_live`` is set, the oldest insertions until the map is back within
    bounds. Without ``evict_live`` the bound only triggers purges, and live
    entries stay until they expire.
    """

    def __init__(
        self,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
        evict_live: bool = True,
    ) -> None:
        self._max_entries = max_entries
        self._evict_live = evict_live
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> str | None:
        """Return the cached value, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value for ``ttl_seconds``, sweeping if the map is over its bound."""
        # Re-insert so dict order reflects recency of writes
        self._entries.pop(key, None)
        self._entries[key] = (self._clock() + ttl_seconds, value)
        if len(self._entries) > self._max_entries:
            self._sweep()

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    def _sweep(self) -> None:
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

        overflow = len(self._entries) - self._max_entries if self._evict_live else 0
        if overflow > 0:
            for key in list(self._entries)[:overflow]:
                del self._entries[key]

        logger.debug(
            "local_cache_swept expired=%s evicted=%s size=%s",
            len(expired),
            max(overflow, 0),
            len(self._entries),
        )


class LayeredCache:
    """
    Cache that consults Redis and an in-process map independently.

    A hit in either tier counts as a hit. Writes go to both tiers; a failed
    Redis write is logged by the Redis client and otherwise ignored.
    """

    def __init__(self, redis_client: "RedisClient | None", local: LocalTTLCache) -> None:
        self._redis = redis_client
        self._local = local

    @property
    def local(self) -> LocalTTLCache:
        """The in-process tier."""
        return self._local

    async def get(self, key: str) -> str | None:
        """Return the value from Redis, falling back to the in-process map."""
        if self._redis is not None:
            data = await self._redis.get(key)
            if data is not None:
                return data.decode() if isinstance(data, bytes) else str(data)
        return self._local.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Write the value to both tiers."""
        if self._redis is not None:
            await self._redis.setex(key, ttl_seconds, value)
        self._local.set(key, value, ttl_seconds)

    async def delete(self, key: str) -> None:
        """Remove the key from both tiers."""
        if self._redis is not None:
            await self._redis.delete(key)
        self._local.delete(key)
