# src/analysis/models.py - v1
"""Orchestration models: RunState, RunOutcome."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel

from convocache.cache.models import AnalysisStats

RunState = Literal[
    "idle",
    "loading",
    "diffing",
    "analyzing",
    "merging",
    "persisting_report",
    "updating_cache",
    "failed",
]


class RunOutcome(BaseModel):
    """What the trigger surface reports back to the UI after one run."""

    run_id: str
    tenant_id: str | None = None
    module: str
    status: Literal["completed", "no_data", "failed"]
    message: str = ""
    stats: AnalysisStats | None = None
    report: dict[str, Any] | None = None
    error_type: str | None = None
    started_at: datetime
    completed_at: datetime | None = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"
