"""Cache service implementation.

This module provides an abstract cache service interface with two backends
(in-process memory and Redis) and the identifier cache built on top of them,
which stores resolved catalog identifiers:

- city name -> region id
- (region id, category name) -> rubric id

Key consistency:
- City keys are trimmed and case-folded, so "Moscow", " moscow " and
  "MOSCOW" share one slot.
- Rubric keys are ``{region_id}:{normalized category}``.

Expiry is lazy: an entry past its expiry instant is treated as absent and
removed on the read that notices it. Nothing runs in the background.
"""

import fnmatch
import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

import redis.asyncio as redis

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


class CacheService(ABC):
    """Abstract base class for cache services.

    Defines the interface for caching operations including get, set,
    invalidation and counting.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve cached value by key.

        Args:
            key: The cache key to look up.

        Returns:
            The cached value if found and not expired, None otherwise.
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store value in cache, resetting its TTL.

        Args:
            key: The cache key to store under.
            value: The value to cache (must be JSON serializable).
            ttl_seconds: Time-to-live in seconds. Uses the backend default if None.
        """
        pass

    @abstractmethod
    async def invalidate(self, pattern: str) -> int:
        """Invalidate cache entries matching pattern.

        Args:
            pattern: Glob-style pattern to match keys (e.g., "region:*").

        Returns:
            Number of keys invalidated.
        """
        pass

    @abstractmethod
    async def count(self, pattern: str = "*") -> int:
        """Count live entries whose key matches pattern."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None


@dataclass
class _Entry:
    value: Any
    expires_at: float


class MemoryCacheService(CacheService):
    """Process-local cache backend with lazy TTL expiry.

    A plain dict guarded by a lock. The lock is only held for dict access,
    never across awaits, so concurrent coroutines (and threads) can read and
    write freely; two writers racing on one key leave the last value.

    Attributes:
        _entries: Key to value/expiry mapping.
        _default_ttl: Default TTL in seconds.
        _clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[str, _Entry] = {}
        self._default_ttl = default_ttl
        self._clock = clock
        self._lock = threading.Lock()

    async def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl)

    async def invalidate(self, pattern: str) -> int:
        with self._lock:
            keys = [k for k in self._entries if fnmatch.fnmatchcase(k, pattern)]
            for k in keys:
                del self._entries[k]
        return len(keys)

    async def count(self, pattern: str = "*") -> int:
        now = self._clock()
        with self._lock:
            return sum(
                1
                for k, e in self._entries.items()
                if e.expires_at >= now and fnmatch.fnmatchcase(k, pattern)
            )

    @property
    def default_ttl(self) -> int:
        """Get the default TTL in seconds."""
        return self._default_ttl


class RedisCacheService(CacheService):
    """Redis-based implementation of the cache service.

    Uses Redis for storing cached values with support for TTL,
    pattern-based invalidation, and JSON serialization. Expiry is delegated
    to Redis.

    Attributes:
        _client: The Redis async client instance.
        _default_ttl: Default TTL in seconds for cached values.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        default_ttl: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        """Initialize the Redis cache service.

        Args:
            redis_url: Redis connection URL. Defaults to localhost:6379.
            default_ttl: Default TTL in seconds. Defaults to 24 hours.
        """
        self._redis_url = redis_url
        self._default_ttl = default_ttl
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Establish connection to Redis."""
        if self._client is None:
            self._client = redis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
            )

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _ensure_connected(self) -> redis.Redis:
        if self._client is None:
            await self.connect()
        return self._client  # type: ignore

    async def _scan(self, pattern: str) -> list[str]:
        # SCAN, never KEYS
        client = await self._ensure_connected()
        found: list[str] = []
        cursor = 0
        while True:
            cursor, keys = await client.scan(cursor=cursor, match=pattern, count=100)
            found.extend(keys)
            if cursor == 0:
                break
        return found

    async def get(self, key: str) -> Any | None:
        client = await self._ensure_connected()
        value = await client.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        client = await self._ensure_connected()
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        # Values are stored as JSON; "123" reads back as a str
        await client.set(key, json.dumps(value), ex=ttl)

    async def invalidate(self, pattern: str) -> int:
        keys = await self._scan(pattern)
        if not keys:
            return 0
        client = await self._ensure_connected()
        return await client.delete(*keys)

    async def count(self, pattern: str = "*") -> int:
        return len(await self._scan(pattern))

    @property
    def default_ttl(self) -> int:
        """Get the default TTL in seconds."""
        return self._default_ttl


@dataclass
class CacheStats:
    """Identifier cache statistics. Hit/miss counters are advisory."""

    region_entries: int
    rubric_entries: int
    hits: int
    misses: int

    @property
    def entries(self) -> int:
        return self.region_entries + self.rubric_entries

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return 0.0 if total == 0 else self.hits / total

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": self.entries,
            "region_entries": self.region_entries,
            "rubric_entries": self.rubric_entries,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": round(self.hit_rate, 4),
        }


class IdentifierCache:
    """TTL cache of resolved region and rubric identifiers.

    One instance is created per process and injected into the catalog
    client. ``put`` always resets the entry's TTL.
    """

    REGION_PREFIX = "region:"
    RUBRIC_PREFIX = "rubric:"

    def __init__(
        self,
        backend: CacheService | None = None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        self._backend = backend or MemoryCacheService(default_ttl=ttl_seconds)
        self._ttl = ttl_seconds
        self._hits = 0
        self._misses = 0

    @staticmethod
    def normalize(key: str | None) -> str:
        """Trim and case-fold a free-text key."""
        return "" if key is None else key.strip().casefold()

    @classmethod
    def build_region_key(cls, city: str) -> str:
        """Cache key for a city.

        Example:
            >>> IdentifierCache.build_region_key("  Moscow ")
            'region:moscow'
        """
        return f"{cls.REGION_PREFIX}{cls.normalize(city)}"

    @classmethod
    def build_rubric_key(cls, region_id: str, category: str) -> str:
        """Cache key for a category within a region.

        Example:
            >>> IdentifierCache.build_rubric_key("32", "Museums")
            'rubric:32:museums'
        """
        return f"{cls.RUBRIC_PREFIX}{region_id}:{cls.normalize(category)}"

    async def get(self, key: str) -> str | None:
        value = await self._backend.get(key)
        if value is None:
            self._misses += 1
            return None
        self._hits += 1
        return str(value)

    async def put(self, key: str, value: str) -> None:
        await self._backend.set(key, value, ttl_seconds=self._ttl)

    async def get_region_id(self, city: str) -> str | None:
        return await self.get(self.build_region_key(city))

    async def put_region_id(self, city: str, region_id: str) -> None:
        await self.put(self.build_region_key(city), region_id)

    async def get_rubric_id(self, region_id: str, category: str) -> str | None:
        return await self.get(self.build_rubric_key(region_id, category))

    async def put_rubric_id(self, region_id: str, category: str, rubric_id: str) -> None:
        await self.put(self.build_rubric_key(region_id, category), rubric_id)

    async def stats(self) -> CacheStats:
        return CacheStats(
            region_entries=await self._backend.count(f"{self.REGION_PREFIX}*"),
            rubric_entries=await self._backend.count(f"{self.RUBRIC_PREFIX}*"),
            hits=self._hits,
            misses=self._misses,
        )

    async def clear(self) -> None:
        removed = await self._backend.invalidate(f"{self.REGION_PREFIX}*")
        removed += await self._backend.invalidate(f"{self.RUBRIC_PREFIX}*")
        self._hits = 0
        self._misses = 0
        logger.info(f"[CACHE] Cleared {removed} identifier entries")

    async def close(self) -> None:
        await self._backend.close()


def create_cache_backend(
    redis_url: str | None, ttl_seconds: int = DEFAULT_TTL_SECONDS
) -> CacheService:
    """Redis when a URL is configured, process memory otherwise."""
    if redis_url:
        logger.info("[CACHE] Using Redis backend")
        return RedisCacheService(redis_url=redis_url, default_ttl=ttl_seconds)
    logger.info("[CACHE] Using in-memory backend")
    return MemoryCacheService(default_ttl=ttl_seconds)
