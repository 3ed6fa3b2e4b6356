# src/cache/base_cache_store.py - v2
"""Abstract cache store interface.

A cache store reads and writes one CacheDocument per (tenant, module).
Implementations keep no per-tenant state: the resolved connection is
passed to every call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from convocache.cache.models import CacheDocument
from convocache.config.tenants import StoreConnection


class CacheWriteError(Exception):
    """Raised when a cache document could not be persisted."""

    def __init__(self, tenant_id: str, module: str, reason: str) -> None:
        self.tenant_id = tenant_id
        self.module = module
        self.reason = reason
        super().__init__(
            f"Failed to write analysis cache for tenant {tenant_id!r}, module {module!r}: {reason}"
        )


class BaseCacheStore(ABC):
    """Unified interface for cache document backends."""

    @abstractmethod
    async def read(
        self, connection: StoreConnection | None, module: str
    ) -> CacheDocument:
        """Read the cache document. Never raises: failures yield an empty document."""

    @abstractmethod
    async def write(
        self, connection: StoreConnection | None, module: str, document: CacheDocument
    ) -> None:
        """Overwrite the cache document.

        Raises:
            ConfigurationError: If no connection is available.
            CacheWriteError: If the backend rejects or fails the write.
        """

    async def clear(self, connection: StoreConnection | None, module: str) -> None:
        """Replace the cache document with an empty one."""
        await self.write(connection, module, {})

    async def close(self) -> None:
        """Release backend resources."""
