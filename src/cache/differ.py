# src/cache/differ.py - v1
"""Differencing engine: split conversations into those needing analysis and
those whose cached analysis is still valid.

Classification per conversation:
  new       - no cache entry for its id
  modified  - entry exists but content hash or message count differs
  unchanged - entry exists and both match; cached results are carried along

The partition is stable (input order kept in both buckets) and performs
no I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from convocache.cache.fingerprint import FingerprintAlgorithm, compute_fingerprint
from convocache.cache.models import (
    AnalysisStats,
    CacheDocument,
    CachedConversation,
    PartitionResult,
)
from convocache.conversations.models import ConversationRecord

logger = logging.getLogger(__name__)


def partition(
    conversations: Sequence[ConversationRecord],
    cache: CacheDocument,
    algorithm: FingerprintAlgorithm = "blake2b",
) -> PartitionResult:
    """Partition conversations against a cache document.

    Args:
        conversations: Current conversation set, in load order.
        cache: Cache document for the same (tenant, module).
        algorithm: Fingerprint algorithm the cache was written with.

    Returns:
        PartitionResult with to_analyze, cached and stats.
    """
    result = PartitionResult()
    new_count = 0
    modified_count = 0

    for conversation in conversations:
        current_hash = compute_fingerprint(conversation, algorithm)
        current_length = conversation.message_count
        entry = cache.get(conversation.id)

        if entry is None:
            result.to_analyze.append(conversation)
            new_count += 1
            logger.debug(
                "New conversation %s (%d messages)", conversation.id, current_length
            )
        elif not entry.matches(current_hash, current_length):
            result.to_analyze.append(conversation)
            modified_count += 1
            logger.debug(
                "Modified conversation %s (%d messages, cached %d)",
                conversation.id, current_length, entry.conversation_length,
            )
        else:
            result.cached.append(
                CachedConversation(
                    conversation=conversation, cached_results=entry.cached_results
                )
            )
            logger.debug(
                "Reusing cache for %s (%d messages)", conversation.id, current_length
            )

    result.stats = AnalysisStats(
        total_conversations=len(conversations),
        cached_conversations=len(result.cached),
        new_conversations=new_count,
        modified_conversations=modified_count,
        estimated_savings=estimate_savings(
            len(result.cached), len(conversations), len(result.to_analyze)
        ),
    )

    logger.info(
        "Cache partition: total=%d cached=%d new=%d modified=%d savings=%d%%",
        result.stats.total_conversations,
        result.stats.cached_conversations,
        new_count,
        modified_count,
        result.stats.estimated_savings,
    )
    return result


def estimate_savings(cached: int, total: int, to_analyze: int) -> int:
    """Percentage of conversations served from cache.

    Reported as 0 when nothing needs analysis, matching what the dashboard
    has always displayed for a fully cached run.
    """
    if to_analyze <= 0 or total <= 0:
        return 0
    return round_percent(cached, total)


def round_percent(part: int, whole: int) -> int:
    """part / whole * 100 rounded half up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    value = Decimal(part) * 100 / Decimal(whole)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
