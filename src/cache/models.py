# src/cache/models.py - v2
"""Cache domain models: CacheEntry, CacheDocument, CachedConversation, AnalysisStats.

A cache document holds one entry per conversation id for a single
(tenant, module) pair and is always persisted as a whole.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from convocache.conversations.models import ConversationRecord

logger = logging.getLogger(__name__)


class CacheEntry(BaseModel):
    """Previously computed analysis for one conversation."""

    conversation_id: str
    last_analysis: datetime
    content_hash: str
    cached_results: Any = None
    conversation_length: int

    def matches(self, content_hash: str, conversation_length: int) -> bool:
        """True when this entry can be reused for the given current state."""
        return (
            self.content_hash == content_hash
            and self.conversation_length == conversation_length
        )


# conversation id -> entry, one document per (tenant, module)
CacheDocument = dict[str, CacheEntry]


def document_from_json(data: Any) -> CacheDocument:
    """Build a CacheDocument from decoded JSON.

    `None` (an absent remote document) is an empty document. Entries that
    fail validation are skipped with a warning so a single corrupt entry
    only costs one re-analysis.
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring cache document of type %s", type(data).__name__)
        return {}

    document: CacheDocument = {}
    for conversation_id, raw in data.items():
        try:
            document[conversation_id] = CacheEntry.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping invalid cache entry %s: %s", conversation_id, e)
    return document


def document_to_json(document: CacheDocument) -> dict[str, Any]:
    """Serialize a CacheDocument to JSON-ready data."""
    return {
        conversation_id: entry.model_dump(mode="json")
        for conversation_id, entry in document.items()
    }


class CachedConversation(BaseModel):
    """Unchanged conversation paired with its reusable analysis."""

    conversation: ConversationRecord
    cached_results: Any = None


class AnalysisStats(BaseModel):
    """Summary of one differencing pass. Not persisted."""

    model_config = ConfigDict(populate_by_name=True)

    total_conversations: int = Field(0, alias="totalConversations")
    cached_conversations: int = Field(0, alias="cachedConversations")
    new_conversations: int = Field(0, alias="newConversations")
    modified_conversations: int = Field(0, alias="modifiedConversations")
    estimated_savings: int = Field(0, alias="estimatedSavings")

    @property
    def to_analyze(self) -> int:
        return self.new_conversations + self.modified_conversations


class PartitionResult(BaseModel):
    """Output of the differencing engine."""

    to_analyze: list[ConversationRecord] = Field(default_factory=list)
    cached: list[CachedConversation] = Field(default_factory=list)
    stats: AnalysisStats = Field(default_factory=AnalysisStats)
