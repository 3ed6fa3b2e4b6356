# src/cache/redis_store.py - v2
"""Redis-based cache store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install convocache[redis].
One Redis string per (tenant, module) holds the whole cache document.
"""

from __future__ import annotations

import json
import logging

from convocache.cache.base_cache_store import BaseCacheStore, CacheWriteError
from convocache.cache.models import CacheDocument, document_from_json, document_to_json
from convocache.config.settings import ConfigurationError
from convocache.config.tenants import StoreConnection

logger = logging.getLogger(__name__)

_KEY_PREFIX = "convocache"


def redis_key(tenant_id: str, module: str) -> str:
    return f"{_KEY_PREFIX}:{tenant_id}:analysis_cache:{module}"


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store for shared deployments."""

    def __init__(self, redis_url: str) -> None:
        try:
            import redis.asyncio as aioredis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = aioredis.Redis.from_url(redis_url, decode_responses=True)

    async def read(
        self, connection: StoreConnection | None, module: str
    ) -> CacheDocument:
        """Read the cache document, empty on a miss or any Redis failure."""
        if connection is None:
            return {}
        key = redis_key(connection.tenant_id, module)
        try:
            raw = await self._client.get(key)
        except Exception as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return {}
        if raw is None:
            logger.info("No %s cache found, first run", module)
            return {}
        try:
            return document_from_json(json.loads(raw))
        except json.JSONDecodeError as e:
            logger.warning("Cache document %s is not valid JSON: %s", key, e)
            return {}

    async def write(
        self, connection: StoreConnection | None, module: str, document: CacheDocument
    ) -> None:
        """Overwrite the cache document."""
        if connection is None:
            raise ConfigurationError(f"Store connection not configured for {module} cache")
        key = redis_key(connection.tenant_id, module)
        try:
            await self._client.set(key, json.dumps(document_to_json(document)))
        except Exception as e:
            raise CacheWriteError(connection.tenant_id, module, str(e)) from e
        logger.info("Saved %d cache entries to %s", len(document), key)

    async def close(self) -> None:
        """Close the Redis connection."""
        await self._client.aclose()
