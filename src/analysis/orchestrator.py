# src/analysis/orchestrator.py - v2
"""Incremental analysis orchestrator.

Drives one run for a (tenant, module):

  loading            resolve store connection, load conversations
  diffing            read cache document, partition conversations
  analyzing          run the analyzer on new and modified conversations
  merging            fresh results followed by cached results
  persisting_report  save the consolidated report (before touching the cache)
  updating_cache     write new entries into the snapshot read while diffing

The cache document is read once and written once per run. Overlapping runs
for the same (tenant, module) are rejected by a RunGuard so the final
full-document write cannot drop entries from a concurrent run.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from convocache.analysis.base_analyzer import AnalysisError
from convocache.analysis.models import RunOutcome, RunState
from convocache.analysis.report import build_report
from convocache.cache.differ import partition
from convocache.cache.fingerprint import compute_fingerprint
from convocache.cache.models import CacheDocument, CacheEntry
from convocache.config.settings import Settings
from convocache.core.models import AnalysisResult, validate_module
from convocache.logging.context import clear_context, set_run_context, set_step_context

if TYPE_CHECKING:
    from convocache.analysis.base_analyzer import BaseAnalyzer
    from convocache.cache.base_cache_store import BaseCacheStore
    from convocache.config.tenants import ConnectionResolver, StoreConnection
    from convocache.conversations.base_conversation_store import BaseConversationStore
    from convocache.conversations.models import ConversationRecord

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when a run is triggered without a tenant identity."""


class RunInProgressError(Exception):
    """Raised when a run for the same tenant and module is already active."""

    def __init__(self, tenant_id: str, module: str) -> None:
        self.tenant_id = tenant_id
        self.module = module
        super().__init__(
            f"An analysis run is already in progress for tenant {tenant_id!r}, module {module!r}"
        )


class RunGuard:
    """Tracks active (tenant, module) runs within this process."""

    def __init__(self) -> None:
        self._active: set[tuple[str, str]] = set()

    def is_active(self, tenant_id: str, module: str) -> bool:
        return (tenant_id, module) in self._active

    @contextmanager
    def hold(self, tenant_id: str, module: str) -> Iterator[None]:
        key = (tenant_id, module)
        if key in self._active:
            raise RunInProgressError(tenant_id, module)
        self._active.add(key)
        try:
            yield
        finally:
            self._active.discard(key)


# Shared by every orchestrator that is not given its own guard.
DEFAULT_RUN_GUARD = RunGuard()


class AnalysisOrchestrator:
    """Run incremental analysis against the differential cache.

    Args:
        conversation_store: Source of conversations and sink for reports.
        cache_store: Cache document backend.
        analyzer: Opaque analysis function.
        connection_resolver: Resolves (tenant, module) to a StoreConnection.
        settings: Application settings (fingerprint, concurrency, report).
        run_guard: Active-run registry. Defaults to the process-wide guard.
    """

    def __init__(
        self,
        conversation_store: BaseConversationStore,
        cache_store: BaseCacheStore,
        analyzer: BaseAnalyzer,
        connection_resolver: ConnectionResolver,
        settings: Settings | None = None,
        run_guard: RunGuard | None = None,
    ) -> None:
        self._conversations = conversation_store
        self._cache = cache_store
        self._analyzer = analyzer
        self._resolver = connection_resolver
        self._settings = settings or Settings(_env_file=None)
        self._guard = run_guard or DEFAULT_RUN_GUARD
        self._state: RunState = "idle"

    @property
    def state(self) -> RunState:
        return self._state

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, tenant_id: str | None, module: str) -> RunOutcome:
        """Execute one incremental analysis run.

        Returns:
            RunOutcome with status "completed" or "no_data".

        Raises:
            AuthenticationError: If tenant_id is empty.
            RunInProgressError: If a run for (tenant, module) is active.
            ConfigurationError: If the tenant has no store connection.
            StoreError: If loading conversations or saving the report fails.
            AnalysisError: If the analyzer fails on any conversation.
            CacheWriteError: If the cache document cannot be written.
        """
        if not tenant_id or not tenant_id.strip():
            raise AuthenticationError("An authenticated tenant is required to run analysis")
        validate_module(module)

        run_id = _generate_run_id()
        started_at = datetime.now(timezone.utc)

        with self._guard.hold(tenant_id, module):
            set_run_context(tenant_id, module, run_id)
            try:
                outcome = await self._execute(tenant_id, module, run_id, started_at)
            except Exception:
                self._set_state("failed")
                logger.exception("Analysis run %s failed", run_id)
                raise
            finally:
                clear_context()

        self._set_state("idle")
        return outcome

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _execute(
        self, tenant_id: str, module: str, run_id: str, started_at: datetime
    ) -> RunOutcome:
        self._set_state("loading")
        connection = self._resolver.resolve(tenant_id, module)
        conversations = await self._conversations.load(connection, module)

        if not conversations:
            logger.info("No conversations to analyze")
            return RunOutcome(
                run_id=run_id,
                tenant_id=tenant_id,
                module=module,
                status="no_data",
                message="Nothing to analyze",
                started_at=started_at,
                completed_at=datetime.now(timezone.utc),
            )

        self._set_state("diffing")
        cache = await self._cache.read(connection, module)
        parts = partition(conversations, cache, self._settings.fingerprint_algorithm)

        fresh_results: list[AnalysisResult] = []
        if parts.to_analyze:
            self._set_state("analyzing")
            fresh_results = await self._analyze_all(parts.to_analyze)

        self._set_state("merging")
        merged = fresh_results + [c.cached_results for c in parts.cached]

        self._set_state("persisting_report")
        report = build_report(
            merged, parts.stats, conversations, self._settings.report_rollup_fields_list
        )
        await self._conversations.save_report(
            connection, module, self._settings.report_key, report
        )

        if parts.to_analyze:
            self._set_state("updating_cache")
            await self._update_cache(
                connection, module, cache, parts.to_analyze, fresh_results
            )

        stats = parts.stats
        logger.info(
            "Run %s complete: %d analyzed, %d from cache",
            run_id, stats.to_analyze, stats.cached_conversations,
        )
        return RunOutcome(
            run_id=run_id,
            tenant_id=tenant_id,
            module=module,
            status="completed",
            message=(
                f"{stats.total_conversations} conversations: "
                f"{stats.to_analyze} analyzed, {stats.cached_conversations} from cache"
            ),
            stats=stats,
            report=report,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
        )

    async def _analyze_all(
        self, conversations: Sequence[ConversationRecord]
    ) -> list[AnalysisResult]:
        """Analyze each conversation once; results keep input order."""
        concurrency = self._settings.analysis_concurrency
        logger.info(
            "Analyzing %d conversations with %s (concurrency=%d)",
            len(conversations), self._analyzer.name, concurrency,
        )

        if concurrency <= 1:
            return [await self._analyze_one(c) for c in conversations]

        semaphore = asyncio.Semaphore(concurrency)

        async def bounded(conversation: ConversationRecord) -> AnalysisResult:
            async with semaphore:
                return await self._analyze_one(conversation)

        tasks = [asyncio.create_task(bounded(c)) for c in conversations]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # First failure aborts the run: stop the remaining analyses.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _analyze_one(self, conversation: ConversationRecord) -> AnalysisResult:
        try:
            return await self._analyzer.analyze(conversation)
        except Exception as e:
            raise AnalysisError(conversation.id, e) from e

    async def _update_cache(
        self,
        connection: StoreConnection,
        module: str,
        snapshot: CacheDocument,
        analyzed: Sequence[ConversationRecord],
        results: Sequence[AnalysisResult],
    ) -> None:
        """Merge fresh entries into the snapshot and write it back whole."""
        now = datetime.now(timezone.utc)
        document = dict(snapshot)
        for conversation, result in zip(analyzed, results):
            document[conversation.id] = CacheEntry(
                conversation_id=conversation.id,
                last_analysis=now,
                content_hash=compute_fingerprint(
                    conversation, self._settings.fingerprint_algorithm
                ),
                cached_results=result,
                conversation_length=conversation.message_count,
            )
        await self._cache.write(connection, module, document)
        logger.info("Cache updated with %d new analyses", len(analyzed))

    def _set_state(self, state: RunState) -> None:
        self._state = state
        set_step_context(None if state in ("idle", "failed") else state)
        logger.debug("Run state -> %s", state)


def _generate_run_id() -> str:
    """Generate a run ID: {YYYYMMDD_HHMMSS}_{uuid8}."""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"{ts}_{uuid.uuid4().hex[:8]}"
