# src/conversations/json_store.py - v1
"""Local JSON conversation store (CONVERSATION_BACKEND=json).

Mirrors the remote layout under CACHE_ROOT:
    {cache_root}/{tenant_id}/conversations/{module}.json
    {cache_root}/{tenant_id}/analyses/{module}/{key}.json
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from convocache.config.tenants import StoreConnection
from convocache.conversations.base_conversation_store import (
    BaseConversationStore,
    StoreError,
)
from convocache.conversations.models import ConversationRecord, records_from_json

logger = logging.getLogger(__name__)


class JsonConversationStore(BaseConversationStore):
    """File-based conversation store for development and tests."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser()

    async def load(
        self, connection: StoreConnection, module: str
    ) -> list[ConversationRecord]:
        path = self._tenant_dir(connection) / "conversations" / f"{module}.json"
        if not path.exists():
            logger.info("No %s conversations at %s", module, path)
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to load {module} conversations from {path}: {e}") from e
        return records_from_json(data)

    async def save_report(
        self,
        connection: StoreConnection,
        module: str,
        key: str,
        report: dict[str, Any],
    ) -> None:
        path = self._tenant_dir(connection) / "analyses" / module / f"{key}.json"
        body = {
            **report,
            "analysis_timestamp": datetime.now(timezone.utc).isoformat(),
            "module": module,
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(body, indent=2, default=str), encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Failed to save {module} report {key!r}: {e}") from e

    def _tenant_dir(self, connection: StoreConnection) -> Path:
        safe_tenant = connection.tenant_id.replace("/", "_").replace("\\", "_")
        return self._root / safe_tenant
