# src/conversations/base_conversation_store.py - v1
"""Abstract conversation store interface.

The conversation store owns the tenant's conversation records and receives
the consolidated analysis report at the end of a run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from convocache.config.tenants import StoreConnection
from convocache.conversations.models import ConversationRecord


class StoreError(Exception):
    """Raised when the conversation store cannot be read or written."""


class BaseConversationStore(ABC):
    """Unified interface for conversation store backends."""

    @abstractmethod
    async def load(
        self, connection: StoreConnection, module: str
    ) -> list[ConversationRecord]:
        """Load all conversations for the module.

        Raises:
            StoreError: If the store cannot be read.
        """

    @abstractmethod
    async def save_report(
        self,
        connection: StoreConnection,
        module: str,
        key: str,
        report: dict[str, Any],
    ) -> None:
        """Persist an analysis report under a well-known key.

        Raises:
            StoreError: If the store rejects the write.
        """

    async def close(self) -> None:
        """Release backend resources."""
