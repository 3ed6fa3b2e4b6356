# src/analysis/keyword_analyzer.py - v1
"""Rule-based default analyzer used by the CLI.

Scores sentiment from keyword hits and tags a coarse category. It exists
so the pipeline can run end to end without an LLM provider configured.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from convocache.analysis.base_analyzer import BaseAnalyzer
from convocache.conversations.models import ConversationRecord
from convocache.core.models import AnalysisResult

_WORD_RE = re.compile(r"\w+", re.UNICODE)

POSITIVE_WORDS = frozenset({
    "thanks", "thank", "great", "good", "perfect", "excellent", "love", "happy",
    "obrigado", "obrigada", "otimo", "ótimo", "excelente", "perfeito", "bom",
})
NEGATIVE_WORDS = frozenset({
    "bad", "terrible", "problem", "issue", "angry", "cancel", "refund", "broken",
    "ruim", "problema", "péssimo", "pessimo", "cancelar", "reembolso",
})
SALES_WORDS = frozenset({
    "price", "buy", "quote", "discount", "order", "plan", "payment",
    "preço", "preco", "comprar", "orçamento", "orcamento", "desconto", "pedido",
})
SUPPORT_WORDS = frozenset({
    "help", "error", "support", "fix", "broken", "problem", "issue",
    "ajuda", "erro", "suporte", "problema",
})


class KeywordAnalyzer(BaseAnalyzer):
    """Keyword-count heuristics over message text."""

    async def analyze(self, conversation: ConversationRecord) -> AnalysisResult:
        words = [
            w.lower()
            for message in conversation.messages
            for w in _WORD_RE.findall(message.text or "")
        ]
        positive = sum(w in POSITIVE_WORDS for w in words)
        negative = sum(w in NEGATIVE_WORDS for w in words)
        sales = sum(w in SALES_WORDS for w in words)
        support = sum(w in SUPPORT_WORDS for w in words)

        if positive > negative:
            sentiment = "positive"
        elif negative > positive:
            sentiment = "negative"
        else:
            sentiment = "neutral"

        if sales == 0 and support == 0:
            category = "general"
        elif sales >= support:
            category = "sales"
        else:
            category = "support"

        return {
            "conversation_id": conversation.id,
            "contact_name": conversation.contact_name,
            "message_count": conversation.message_count,
            "sentiment": sentiment,
            "category": category,
            "analyzed_at": datetime.now(timezone.utc).isoformat(),
        }
