# src/conversations/models.py - v2
"""Conversation domain models as stored in the tenant document store.

Records are owned by the external conversation store and are read-only to
the cache subsystem. Values are kept as the store returns them: scalars are
not coerced, unknown fields are kept, and message keys keep their stored
order. The legacy fingerprint hashes this exact shape.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

# Scalar as found in the store: ISO strings, epoch millis, phone numbers.
StoredScalar = str | int | float | bool | None

# Record fields that take part in the fingerprint, in digest order.
FINGERPRINT_FIELDS: tuple[str, ...] = ("messages", "contact_name", "updated_at")


class ConversationMessage(BaseModel):
    """Single message inside a conversation, kept verbatim.

    Every key is stored as an extra so the dump reproduces the stored key
    order and explicit nulls.
    """

    model_config = ConfigDict(extra="allow")

    @property
    def sender(self) -> Any:
        return (self.__pydantic_extra__ or {}).get("sender")

    @property
    def text(self) -> str | None:
        value = (self.__pydantic_extra__ or {}).get("text")
        return None if value is None else str(value)

    @property
    def timestamp(self) -> Any:
        return (self.__pydantic_extra__ or {}).get("timestamp")


class ConversationRecord(BaseModel):
    """Conversation as loaded from the tenant store."""

    model_config = ConfigDict(extra="allow")

    id: str
    messages: list[ConversationMessage] = Field(default_factory=list)
    contact_name: StoredScalar = None
    updated_at: StoredScalar = None

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def fingerprint_payload(self) -> dict[str, Any]:
        """Digest-relevant fields, in fixed key order, as JSON-ready data.

        Fields absent from the stored record are left out and explicit
        nulls are kept, the way the dashboard's JSON.stringify treats
        undefined and null.
        """
        payload: dict[str, Any] = {}
        for name in FINGERPRINT_FIELDS:
            if name not in self.model_fields_set:
                continue
            if name == "messages":
                payload[name] = [m.model_dump(mode="json") for m in self.messages]
            else:
                payload[name] = getattr(self, name)
        return payload


def records_from_json(data: Any) -> list[ConversationRecord]:
    """Build conversation records from a decoded store document.

    The store keeps conversations as an object keyed by id; a JSON array
    (what the store returns for dense numeric keys) is accepted too.
    Records missing an id take their key. Invalid records are skipped.
    """
    if data is None:
        return []
    if isinstance(data, list):
        items = [(str(i), raw) for i, raw in enumerate(data) if raw is not None]
    elif isinstance(data, dict):
        items = list(data.items())
    else:
        logger.warning("Ignoring conversations document of type %s", type(data).__name__)
        return []

    records: list[ConversationRecord] = []
    for key, raw in items:
        if not isinstance(raw, dict):
            logger.warning("Skipping conversation %s: not an object", key)
            continue
        raw = dict(raw)
        raw["id"] = str(raw.get("id") or key)
        try:
            records.append(ConversationRecord.model_validate(raw))
        except ValidationError as e:
            logger.warning("Skipping invalid conversation %s: %s", key, e)
    return records
