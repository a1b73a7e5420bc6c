"""Identifier cache with in-memory and Redis backends."""

from .service import (
    CacheService,
    CacheStats,
    IdentifierCache,
    MemoryCacheService,
    RedisCacheService,
    create_cache_backend,
)

__all__ = [
    "CacheService",
    "CacheStats",
    "IdentifierCache",
    "MemoryCacheService",
    "RedisCacheService",
    "create_cache_backend",
]
