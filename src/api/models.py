# src/api/models.py - v2
"""API-level models returned by the trigger surface."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class CacheSummary(BaseModel):
    """Snapshot of a cache document for operator inspection."""

    tenant_id: str
    module: str
    entries: int
    last_analysis: datetime | None = None
