# src/conversations/store_factory.py - v1
"""Factory for conversation store instantiation."""

from __future__ import annotations

from convocache.config.settings import Settings
from convocache.conversations.base_conversation_store import BaseConversationStore
from convocache.storage.rest_client import RestDocumentClient


def create_conversation_store(
    settings: Settings,
    rest_client: RestDocumentClient | None = None,
) -> BaseConversationStore:
    """Create the conversation store selected by CONVERSATION_BACKEND.

    Raises:
        ValueError: If the backend is not supported.
    """
    if settings.conversation_backend == "http":
        from convocache.conversations.http_store import HttpConversationStore
        return HttpConversationStore(
            rest_client or RestDocumentClient(timeout_s=settings.store_timeout_s)
        )

    if settings.conversation_backend == "json":
        from convocache.conversations.json_store import JsonConversationStore
        return JsonConversationStore(root=settings.cache_root)

    raise ValueError(
        f"Unsupported conversation backend: {settings.conversation_backend!r}"
    )
