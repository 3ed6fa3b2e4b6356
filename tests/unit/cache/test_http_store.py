# tests/unit/cache/test_http_store.py - v1
"""Tests for cache/http_store.py with an httpx MockTransport."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from convocache.cache.base_cache_store import CacheWriteError
from convocache.cache.http_store import HttpCacheStore
from convocache.cache.models import CacheEntry
from convocache.config.settings import ConfigurationError
from convocache.config.tenants import StoreConnection
from convocache.storage.rest_client import RestDocumentClient


def _store(handler) -> HttpCacheStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpCacheStore(RestDocumentClient(http_client=client))


def _entry(conversation_id: str = "c1") -> CacheEntry:
    return CacheEntry(
        conversation_id=conversation_id,
        last_analysis=datetime(2026, 2, 7, tzinfo=timezone.utc),
        content_hash="abc",
        cached_results={"sentiment": "neutral"},
        conversation_length=3,
    )


class TestRead:
    @pytest.mark.asyncio
    async def test_url_and_auth(self, connection):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=None)

        await _store(handler).read(connection, "observatory")
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/analysis_cache/observatory.json"
        assert request.url.host == "acme-default-rtdb.firebaseio.com"
        assert request.url.params["auth"] == "secret-token"

    @pytest.mark.asyncio
    async def test_returns_entries(self, connection):
        payload = {"c1": _entry("c1").model_dump(mode="json")}
        store = _store(lambda r: httpx.Response(200, json=payload))
        doc = await store.read(connection, "observatory")
        assert list(doc) == ["c1"]
        assert doc["c1"].cached_results == {"sentiment": "neutral"}

    @pytest.mark.asyncio
    async def test_null_body_is_empty(self, connection):
        store = _store(lambda r: httpx.Response(200, content=b"null"))
        assert await store.read(connection, "observatory") == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 401, 500])
    async def test_error_status_is_empty(self, connection, status):
        store = _store(lambda r: httpx.Response(status, json={"error": "nope"}))
        assert await store.read(connection, "observatory") == {}

    @pytest.mark.asyncio
    async def test_transport_error_is_empty(self, connection):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        assert await _store(handler).read(connection, "observatory") == {}

    @pytest.mark.asyncio
    async def test_invalid_json_is_empty(self, connection):
        store = _store(lambda r: httpx.Response(200, content=b"<html>"))
        assert await store.read(connection, "observatory") == {}

    @pytest.mark.asyncio
    async def test_missing_connection_skips_io(self):
        calls = []
        store = _store(lambda r: calls.append(r) or httpx.Response(200, json={}))
        assert await store.read(None, "observatory") == {}
        incomplete = StoreConnection(tenant_id="acme", base_url="https://x.firebaseio.com")
        assert await store.read(incomplete, "observatory") == {}
        assert calls == []


class TestWrite:
    @pytest.mark.asyncio
    async def test_puts_full_document(self, connection):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=json.loads(request.content))

        await _store(handler).write(connection, "commercial", {"c1": _entry("c1")})
        request = seen[0]
        assert request.method == "PUT"
        assert request.url.path == "/analysis_cache/commercial.json"
        body = json.loads(request.content)
        assert body["c1"]["content_hash"] == "abc"
        assert body["c1"]["conversation_length"] == 3

    @pytest.mark.asyncio
    async def test_error_status_raises(self, connection):
        store = _store(lambda r: httpx.Response(403))
        with pytest.raises(CacheWriteError, match="HTTP 403"):
            await store.write(connection, "observatory", {})

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, connection):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(CacheWriteError):
            await _store(handler).write(connection, "observatory", {})

    @pytest.mark.asyncio
    async def test_missing_connection_raises(self):
        store = _store(lambda r: httpx.Response(200))
        with pytest.raises(ConfigurationError):
            await store.write(None, "observatory", {})

    @pytest.mark.asyncio
    async def test_clear_puts_empty_object(self, connection):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={})

        await _store(handler).clear(connection, "observatory")
        assert bodies == [{}]
