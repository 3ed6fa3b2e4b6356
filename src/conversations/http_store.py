# src/conversations/http_store.py - v1
"""Conversation store backed by the tenant's REST document store.

Layout under the tenant base URL:
    conversations/{module}.json         all conversations keyed by id
    analyses/{module}/{key}.json        saved analysis reports
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from convocache.config.tenants import StoreConnection
from convocache.conversations.base_conversation_store import (
    BaseConversationStore,
    StoreError,
)
from convocache.conversations.models import ConversationRecord, records_from_json
from convocache.storage.rest_client import RestDocumentClient

logger = logging.getLogger(__name__)


class HttpConversationStore(BaseConversationStore):
    """Conversations and reports stored in a Firebase-style REST database."""

    def __init__(self, client: RestDocumentClient) -> None:
        self._client = client

    async def load(
        self, connection: StoreConnection, module: str
    ) -> list[ConversationRecord]:
        try:
            response = await self._client.get_json(connection, f"conversations/{module}")
        except httpx.HTTPError as e:
            raise StoreError(f"Failed to load {module} conversations: {e}") from e

        if response.status_code == 404:
            logger.info("No %s conversations found", module)
            return []
        if not response.is_success:
            raise StoreError(
                f"Failed to load {module} conversations: HTTP {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise StoreError(f"Conversations document for {module} is not valid JSON") from e

        records = records_from_json(data)
        logger.info("Loaded %d %s conversations", len(records), module)
        return records

    async def save_report(
        self,
        connection: StoreConnection,
        module: str,
        key: str,
        report: dict[str, Any],
    ) -> None:
        body = {
            **report,
            "analysis_timestamp": datetime.now(timezone.utc).isoformat(),
            "module": module,
        }
        try:
            await self._client.put_json(connection, f"analyses/{module}/{key}", body)
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"Failed to save {module} report {key!r}: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(f"Failed to save {module} report {key!r}: {e}") from e
        logger.info("Saved %s report %s", module, key)

    async def close(self) -> None:
        await self._client.aclose()
