# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides sample conversations, a tenant connection and in-memory stores.
No external dependencies: all I/O is faked or goes to tmp_path.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from convocache.analysis.base_analyzer import BaseAnalyzer
from convocache.cache.base_cache_store import BaseCacheStore, CacheWriteError
from convocache.cache.models import CacheDocument
from convocache.config.settings import Settings
from convocache.config.tenants import (
    ModuleConnection,
    StaticConnectionResolver,
    StoreConnection,
    TenantConfig,
)
from convocache.conversations.base_conversation_store import (
    BaseConversationStore,
    StoreError,
)
from convocache.conversations.models import ConversationRecord
from convocache.core.models import AnalysisResult


def _make_conversation(
    conversation_id: str,
    message_count: int,
    contact_name: str = "Maria",
    updated_at: str = "2026-02-07T14:00:00Z",
) -> ConversationRecord:
    """Conversation with message_count alternating customer/agent messages."""
    return ConversationRecord(
        id=conversation_id,
        contact_name=contact_name,
        updated_at=updated_at,
        messages=[
            {
                "sender": "customer" if i % 2 == 0 else "agent",
                "text": f"message {i} of {conversation_id}",
                "timestamp": f"2026-02-07T14:{i:02d}:00Z",
            }
            for i in range(message_count)
        ],
    )


def _add_message(conversation: ConversationRecord, text: str) -> ConversationRecord:
    """Copy of conversation with one more message appended."""
    data = conversation.model_dump()
    data["messages"].append(
        {"sender": "customer", "text": text, "timestamp": "2026-02-08T09:00:00Z"}
    )
    return ConversationRecord.model_validate(data)


class InMemoryCacheStore(BaseCacheStore):
    """Cache store keeping documents in a dict keyed by (tenant, module)."""

    def __init__(self) -> None:
        self.documents: dict[tuple[str, str], CacheDocument] = {}
        self.reads = 0
        self.writes = 0
        self.fail_writes = False

    async def read(self, connection, module):
        self.reads += 1
        if connection is None:
            return {}
        return dict(self.documents.get((connection.tenant_id, module), {}))

    async def write(self, connection, module, document):
        if self.fail_writes:
            raise CacheWriteError(connection.tenant_id, module, "simulated outage")
        self.writes += 1
        self.documents[(connection.tenant_id, module)] = dict(document)


class InMemoryConversationStore(BaseConversationStore):
    """Conversation store serving `items` and recording saved reports."""

    def __init__(self, items: list[ConversationRecord] | None = None) -> None:
        self.items: list[ConversationRecord] = list(items or [])
        self.reports: list[tuple[str, str, str, dict[str, Any]]] = []
        self.fail_reports = False

    async def load(self, connection, module):
        return list(self.items)

    async def save_report(self, connection, module, key, report):
        if self.fail_reports:
            raise StoreError("simulated report failure")
        self.reports.append((connection.tenant_id, module, key, report))


class RecordingAnalyzer(BaseAnalyzer):
    """Analyzer returning a deterministic result and recording each call."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.fail_on: str | None = None

    async def analyze(self, conversation: ConversationRecord) -> AnalysisResult:
        self.calls.append(conversation.id)
        if conversation.id == self.fail_on:
            raise RuntimeError(f"model error on {conversation.id}")
        return {
            "conversation_id": conversation.id,
            "message_count": conversation.message_count,
            "sentiment": "positive" if conversation.message_count % 2 else "neutral",
        }


# === FIXTURES: Factories ===


@pytest.fixture
def make_conversation() -> Callable[..., ConversationRecord]:
    return _make_conversation


@pytest.fixture
def add_message() -> Callable[[ConversationRecord, str], ConversationRecord]:
    return _add_message


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_conversations() -> list[ConversationRecord]:
    """Three conversations with 5, 3 and 8 messages."""
    return [
        _make_conversation("conv_a", 5, contact_name="Ana"),
        _make_conversation("conv_b", 3, contact_name="Bruno"),
        _make_conversation("conv_c", 8, contact_name="Carla"),
    ]


@pytest.fixture
def connection() -> StoreConnection:
    return StoreConnection(
        tenant_id="acme",
        base_url="https://acme-default-rtdb.firebaseio.com/",
        credential="secret-token",
    )


@pytest.fixture
def resolver() -> StaticConnectionResolver:
    return StaticConnectionResolver({
        "acme": TenantConfig(modules={
            "observatory": ModuleConnection(
                base_url="https://acme-default-rtdb.firebaseio.com/",
                credential="secret-token",
            ),
            "commercial": ModuleConnection(
                base_url="https://acme-sales.firebaseio.com",
                credential="sales-token",
            ),
        }),
    })


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


# === FIXTURES: Fake collaborators ===


@pytest.fixture
def cache_store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def conversation_store(sample_conversations) -> InMemoryConversationStore:
    return InMemoryConversationStore(sample_conversations)


@pytest.fixture
def analyzer() -> RecordingAnalyzer:
    return RecordingAnalyzer()
