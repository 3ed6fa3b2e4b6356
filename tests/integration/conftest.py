# tests/integration/conftest.py - v8
"""Shared fixtures for integration tests.

FakeRealtimeDatabase serves a Firebase-style REST document tree through
an httpx.MockTransport, so the HTTP stores run end to end without network.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
import pytest
import pytest_asyncio

from convocache.storage.rest_client import RestDocumentClient

logger = logging.getLogger(__name__)


# ── Pytest markers ──────────────────────────────────────────────

def pytest_configure(config):
    config.addinivalue_line("markers", "redis: marks tests requiring a Redis server")


class FakeRealtimeDatabase:
    """In-memory JSON tree addressed by `/{path}.json?auth=...`."""

    def __init__(self, credential: str) -> None:
        self.credential = credential
        self.tree: dict[str, Any] = {}
        self.requests: list[tuple[str, str]] = []
        self.fail_paths: set[str] = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.strip("/")
        if path.endswith(".json"):
            path = path[: -len(".json")]
        self.requests.append((request.method, path))

        if request.url.params.get("auth") != self.credential:
            return httpx.Response(401, json={"error": "Permission denied"})
        if path in self.fail_paths:
            return httpx.Response(503, json={"error": "Service unavailable"})

        segments = [s for s in path.split("/") if s]
        if request.method == "GET":
            return httpx.Response(200, json=self.get(segments))
        if request.method == "PUT":
            body = json.loads(request.content)
            self.put(segments, body)
            return httpx.Response(200, json=body)
        return httpx.Response(405)

    def get(self, segments: list[str]) -> Any:
        node: Any = self.tree
        for segment in segments:
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        return node

    def put(self, segments: list[str], value: Any) -> None:
        node = self.tree
        for segment in segments[:-1]:
            node = node.setdefault(segment, {})
        node[segments[-1]] = value

    def writes_to(self, path: str) -> int:
        return sum(1 for method, p in self.requests if method == "PUT" and p == path)


@pytest.fixture
def fake_database() -> FakeRealtimeDatabase:
    return FakeRealtimeDatabase(credential="secret-token")


@pytest_asyncio.fixture
async def rest_client(fake_database):
    client = RestDocumentClient(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(fake_database.handler))
    )
    yield client
    await client._client.aclose()
