# src/analysis/report.py - v1
"""Consolidated report built from merged fresh and cached results."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from convocache.cache.differ import round_percent
from convocache.cache.models import AnalysisStats
from convocache.conversations.models import ConversationRecord


def build_report(
    merged_results: Sequence[Any],
    stats: AnalysisStats,
    conversations: Sequence[ConversationRecord],
    rollup_fields: Sequence[str] = (),
) -> dict[str, Any]:
    """Aggregate merged results into the report saved under the well-known key.

    Args:
        merged_results: Fresh results followed by cached ones.
        stats: Partition stats of the run.
        conversations: Conversations loaded for the run.
        rollup_fields: Result fields whose string values are counted.

    Returns:
        JSON-ready report dict.
    """
    total = stats.total_conversations
    return {
        "analysis_date": datetime.now(timezone.utc).date().isoformat(),
        "conversations_analyzed": len(merged_results),
        "from_cache": stats.cached_conversations,
        "newly_analyzed": stats.to_analyze,
        "cache_efficiency": round_percent(stats.cached_conversations, total),
        "total_messages": sum(c.message_count for c in conversations),
        "rollups": rollup_counts(merged_results, rollup_fields),
    }


def rollup_counts(
    results: Sequence[Any], fields: Sequence[str]
) -> dict[str, dict[str, int]]:
    """Count string values of each field across dict results."""
    rollups: dict[str, dict[str, int]] = {}
    for field in fields:
        counter: Counter[str] = Counter(
            r[field]
            for r in results
            if isinstance(r, dict) and isinstance(r.get(field), str)
        )
        if counter:
            rollups[field] = dict(counter.most_common())
    return rollups
