# src/analysis/base_analyzer.py - v1
"""Abstract analysis function.

An analyzer turns one conversation into an opaque AnalysisResult. Any
implementation (rule-based, ML model, remote LLM) can be plugged into the
orchestrator without changes to the cache logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from convocache.conversations.models import ConversationRecord
from convocache.core.models import AnalysisResult


class AnalysisError(Exception):
    """Raised when analyzing a conversation fails."""

    def __init__(self, conversation_id: str, last_error: Exception) -> None:
        self.conversation_id = conversation_id
        self.last_error = last_error
        super().__init__(f"Analysis failed for conversation {conversation_id!r}: {last_error}")


class BaseAnalyzer(ABC):
    """Unified interface for analysis functions."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def analyze(self, conversation: ConversationRecord) -> AnalysisResult:
        """Analyze a single conversation."""
