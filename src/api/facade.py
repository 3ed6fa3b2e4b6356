# src/api/facade.py - v2
"""Public API facade: the user-invocable actions of the analysis cache.

Usage:
    from convocache.api.facade import trigger_analysis
    outcome = await trigger_analysis("acme", "observatory")
    if not outcome.ok:
        notify(outcome.message)

trigger_analysis never raises: every failure becomes a single failed
RunOutcome for the UI layer. clear_cache and inspect_cache are operator
actions and propagate their errors.
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from convocache.analysis.models import RunOutcome
from convocache.analysis.orchestrator import AnalysisOrchestrator, RunGuard
from convocache.api.models import CacheSummary
from convocache.config.settings import Settings
from convocache.config.tenants import FileConnectionResolver
from convocache.core.models import validate_module
from convocache.storage.rest_client import RestDocumentClient

if TYPE_CHECKING:
    from convocache.analysis.base_analyzer import BaseAnalyzer
    from convocache.cache.base_cache_store import BaseCacheStore
    from convocache.config.tenants import ConnectionResolver
    from convocache.conversations.base_conversation_store import BaseConversationStore

logger = logging.getLogger(__name__)


async def trigger_analysis(
    tenant_id: str | None,
    module: str = "observatory",
    settings: Settings | None = None,
    analyzer: BaseAnalyzer | None = None,
    conversation_store: BaseConversationStore | None = None,
    cache_store: BaseCacheStore | None = None,
    connection_resolver: ConnectionResolver | None = None,
    run_guard: RunGuard | None = None,
) -> RunOutcome:
    """Run one incremental analysis and report the outcome.

    Collaborators that are not passed in are built from settings and
    closed before returning.

    Args:
        tenant_id: Authenticated tenant identity.
        module: Analysis module ("observatory" or "commercial").
        settings: Global settings. Loaded from .env if None.
        analyzer: Analysis function. Defaults to KeywordAnalyzer.
        conversation_store: Conversation source and report sink.
        cache_store: Cache document backend.
        connection_resolver: Tenant connection resolver.
        run_guard: Active-run registry shared across triggers.

    Returns:
        RunOutcome with status completed, no_data or failed.
    """
    started_at = datetime.now(timezone.utc)
    try:
        settings = settings or Settings()
        async with AsyncExitStack() as stack:
            conversations, cache = _build_stores(
                settings, stack, conversation_store, cache_store
            )
            if analyzer is None:
                from convocache.analysis.keyword_analyzer import KeywordAnalyzer
                analyzer = KeywordAnalyzer()
            orchestrator = AnalysisOrchestrator(
                conversation_store=conversations,
                cache_store=cache,
                analyzer=analyzer,
                connection_resolver=connection_resolver
                or FileConnectionResolver(settings.tenants_file),
                settings=settings,
                run_guard=run_guard,
            )
            return await orchestrator.run(tenant_id, module)
    except Exception as exc:
        logger.error("Analysis for %s/%s failed: %s", tenant_id, module, exc)
        return RunOutcome(
            run_id="",
            tenant_id=tenant_id,
            module=module,
            status="failed",
            message=str(exc),
            error_type=type(exc).__name__,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
        )


async def clear_cache(
    tenant_id: str,
    module: str = "observatory",
    settings: Settings | None = None,
    cache_store: BaseCacheStore | None = None,
    connection_resolver: ConnectionResolver | None = None,
) -> None:
    """Replace the (tenant, module) cache document with an empty one.

    Raises:
        ConfigurationError: If the tenant has no store connection.
        CacheWriteError: If the write fails.
    """
    validate_module(module)
    settings = settings or Settings()
    resolver = connection_resolver or FileConnectionResolver(settings.tenants_file)
    connection = resolver.resolve(tenant_id, module)
    async with AsyncExitStack() as stack:
        _, cache = _build_stores(settings, stack, None, cache_store, need_conversations=False)
        await cache.clear(connection, module)
    logger.info("Cleared %s analysis cache for tenant %s", module, tenant_id)


async def inspect_cache(
    tenant_id: str,
    module: str = "observatory",
    settings: Settings | None = None,
    cache_store: BaseCacheStore | None = None,
    connection_resolver: ConnectionResolver | None = None,
) -> CacheSummary:
    """Summarize the cache document for a tenant and module."""
    validate_module(module)
    settings = settings or Settings()
    resolver = connection_resolver or FileConnectionResolver(settings.tenants_file)
    connection = resolver.resolve(tenant_id, module)
    async with AsyncExitStack() as stack:
        _, cache = _build_stores(settings, stack, None, cache_store, need_conversations=False)
        document = await cache.read(connection, module)
    return CacheSummary(
        tenant_id=tenant_id,
        module=module,
        entries=len(document),
        last_analysis=max((e.last_analysis for e in document.values()), default=None),
    )


def _build_stores(
    settings: Settings,
    stack: AsyncExitStack,
    conversation_store: BaseConversationStore | None,
    cache_store: BaseCacheStore | None,
    need_conversations: bool = True,
) -> tuple[BaseConversationStore | None, BaseCacheStore]:
    """Create missing stores, sharing one REST client, closed by the stack."""
    build_conversations = need_conversations and conversation_store is None
    rest_client: RestDocumentClient | None = None
    if (build_conversations and settings.conversation_backend == "http") or (
        cache_store is None and settings.cache_backend == "http"
    ):
        rest_client = RestDocumentClient(timeout_s=settings.store_timeout_s)
        stack.push_async_callback(rest_client.aclose)

    if build_conversations:
        from convocache.conversations.store_factory import create_conversation_store
        conversation_store = create_conversation_store(settings, rest_client)

    if cache_store is None:
        from convocache.cache.cache_factory import create_cache_store
        cache_store = create_cache_store(settings, rest_client)
        stack.push_async_callback(cache_store.close)

    return conversation_store, cache_store
