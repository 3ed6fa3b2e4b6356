# src/cache/http_store.py - v1
"""Remote cache store backed by the tenant's REST document store (CACHE_BACKEND=http).

Document path: analysis_cache/{module}.json under the tenant base URL.
"""

from __future__ import annotations

import logging

import httpx

from convocache.cache.base_cache_store import BaseCacheStore, CacheWriteError
from convocache.cache.models import CacheDocument, document_from_json, document_to_json
from convocache.config.settings import ConfigurationError
from convocache.config.tenants import StoreConnection
from convocache.storage.rest_client import RestDocumentClient

logger = logging.getLogger(__name__)


def cache_path(module: str) -> str:
    return f"analysis_cache/{module}"


class HttpCacheStore(BaseCacheStore):
    """Cache documents stored in a Firebase-style REST database."""

    def __init__(self, client: RestDocumentClient) -> None:
        self._client = client

    async def read(
        self, connection: StoreConnection | None, module: str
    ) -> CacheDocument:
        """Fetch the cache document, degrading to empty on any failure."""
        if connection is None or not connection.is_complete:
            logger.info("No store connection for %s cache, starting empty", module)
            return {}

        try:
            response = await self._client.get_json(connection, cache_path(module))
        except httpx.HTTPError as e:
            logger.warning("Cache read failed for %s (%s), starting empty", module, e)
            return {}

        if response.status_code == 404:
            logger.info("No %s cache found, first run", module)
            return {}
        if not response.is_success:
            logger.warning(
                "Cache read for %s returned HTTP %d, starting empty",
                module, response.status_code,
            )
            return {}

        try:
            data = response.json()
        except ValueError as e:
            logger.warning("Cache document for %s is not valid JSON: %s", module, e)
            return {}

        document = document_from_json(data)
        logger.debug("Loaded %d cache entries for %s", len(document), module)
        return document

    async def write(
        self, connection: StoreConnection | None, module: str, document: CacheDocument
    ) -> None:
        """Overwrite the remote cache document."""
        if connection is None or not connection.is_complete:
            raise ConfigurationError(f"Store connection not configured for {module} cache")

        try:
            await self._client.put_json(
                connection, cache_path(module), document_to_json(document)
            )
        except httpx.HTTPStatusError as e:
            raise CacheWriteError(
                connection.tenant_id, module, f"HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise CacheWriteError(connection.tenant_id, module, str(e)) from e

        logger.info("Saved %d cache entries for %s", len(document), module)

    async def close(self) -> None:
        await self._client.aclose()
