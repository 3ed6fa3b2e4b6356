# src/cache/json_store.py - v2
"""JSON file-based cache store (CACHE_BACKEND=json).

Stores each cache document as a JSON file under CACHE_ROOT, laid out like
the remote store: {cache_root}/{tenant_id}/analysis_cache/{module}.json.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from convocache.cache.base_cache_store import BaseCacheStore, CacheWriteError
from convocache.cache.models import CacheDocument, document_from_json, document_to_json
from convocache.config.settings import ConfigurationError
from convocache.config.tenants import StoreConnection

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()

    async def read(
        self, connection: StoreConnection | None, module: str
    ) -> CacheDocument:
        """Read the cache document file, empty if missing or unreadable."""
        if connection is None:
            return {}
        path = self._document_path(connection.tenant_id, module)
        if not path.exists():
            logger.info("No %s cache found at %s, first run", module, path)
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to read cache document %s: %s", path, e)
            return {}
        return document_from_json(data)

    async def write(
        self, connection: StoreConnection | None, module: str, document: CacheDocument
    ) -> None:
        """Write the cache document atomically (temp file + rename)."""
        if connection is None:
            raise ConfigurationError(f"Store connection not configured for {module} cache")
        path = self._document_path(connection.tenant_id, module)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(document_to_json(document), indent=2), encoding="utf-8"
            )
            os.replace(tmp_path, path)
        except OSError as e:
            raise CacheWriteError(connection.tenant_id, module, str(e)) from e
        logger.info("Saved %d cache entries to %s", len(document), path)

    def _document_path(self, tenant_id: str, module: str) -> Path:
        """Return file path for a tenant/module cache document."""
        safe_tenant = tenant_id.replace("/", "_").replace("\\", "_")
        return self._root / safe_tenant / "analysis_cache" / f"{module}.json"
