# src/cache/cache_factory.py - v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from convocache.cache.base_cache_store import BaseCacheStore
from convocache.config.settings import Settings
from convocache.storage.rest_client import RestDocumentClient


def create_cache_store(
    settings: Settings | None = None,
    rest_client: RestDocumentClient | None = None,
) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the HTTP backend.
        rest_client: Shared REST client for the HTTP backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "http" if settings is None else settings.cache_backend

    if backend == "http":
        from convocache.cache.http_store import HttpCacheStore
        timeout = 30.0 if settings is None else settings.store_timeout_s
        return HttpCacheStore(rest_client or RestDocumentClient(timeout_s=timeout))

    if backend == "json":
        from convocache.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=settings.cache_root)

    if backend == "redis":
        from convocache.cache.redis_store import RedisCacheStore
        if not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisCacheStore(redis_url=settings.cache_redis_url)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
