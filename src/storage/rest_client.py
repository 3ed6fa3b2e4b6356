# src/storage/rest_client.py - v1
"""Thin async client for Firebase-style REST document stores.

Every document lives at `{base_url}/{path}.json` and is authenticated with
the tenant credential in the `auth` query parameter. GET returns the JSON
document (`null` when absent), PUT replaces it wholesale.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from convocache.config.tenants import StoreConnection

logger = logging.getLogger(__name__)


class RestDocumentClient:
    """Read and overwrite whole JSON documents over HTTPS."""

    def __init__(
        self,
        timeout_s: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize REST client.

        Args:
            timeout_s: Request timeout when the client is created here.
            http_client: Shared client (tests pass one with a MockTransport).
        """
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)

    @staticmethod
    def document_url(connection: StoreConnection, path: str) -> str:
        """Build the document URL for a path relative to the store root."""
        return f"{connection.root_url}/{path.strip('/')}.json"

    async def get_json(self, connection: StoreConnection, path: str) -> httpx.Response:
        """GET a document. Caller inspects status and decodes the body."""
        url = self.document_url(connection, path)
        logger.debug("GET %s", url)
        return await self._client.get(url, params={"auth": connection.credential})

    async def put_json(
        self, connection: StoreConnection, path: str, data: Any
    ) -> httpx.Response:
        """PUT a full document, raising httpx.HTTPStatusError on non-2xx."""
        url = self.document_url(connection, path)
        logger.debug("PUT %s", url)
        response = await self._client.put(
            url, params={"auth": connection.credential}, json=data
        )
        response.raise_for_status()
        return response

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
