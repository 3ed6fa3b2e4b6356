# src/cache/fingerprint.py - v3
"""Conversation content fingerprints for change detection.

Two algorithms are available:

- blake2b (default): 128-bit BLAKE2b over a canonical JSON serialization
  (sorted keys, compact separators). Used purely as a change detector.
- legacy: the dashboard's 32-bit rolling hash (h = h * 31 + code unit,
  wrapped to signed 32 bits, absolute value in base 36) over the compact
  serialization of the stored values, keeping message key order and
  explicit nulls. Produces the hashes already stored in
  cache documents written by the dashboard.

Only messages, contact_name and updated_at take part in the digest.
"""

from __future__ import annotations

import hashlib
import json
from typing import Literal

from convocache.conversations.models import ConversationRecord

FingerprintAlgorithm = Literal["blake2b", "legacy"]

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def compute_fingerprint(
    conversation: ConversationRecord,
    algorithm: FingerprintAlgorithm = "blake2b",
) -> str:
    """Compute the content fingerprint of a conversation.

    Args:
        conversation: Conversation in its current state.
        algorithm: Digest algorithm ("blake2b" or "legacy").

    Returns:
        Short deterministic digest string.
    """
    payload = conversation.fingerprint_payload()
    if algorithm == "blake2b":
        return _blake2b_hash(payload)
    if algorithm == "legacy":
        return _legacy_rolling_hash(payload)
    raise ValueError(f"Unsupported fingerprint algorithm: {algorithm!r}")


def _blake2b_hash(payload: dict) -> str:
    canonical = json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str
    )
    return hashlib.blake2b(canonical.encode("utf-8"), digest_size=16).hexdigest()


def _legacy_rolling_hash(payload: dict) -> str:
    serialized = json.dumps(
        payload, separators=(",", ":"), ensure_ascii=False, default=str
    )
    return rolling_hash_base36(serialized)


def rolling_hash_base36(text: str) -> str:
    """32-bit polynomial rolling hash over UTF-16 code units, base-36 encoded."""
    h = 0
    units = text.encode("utf-16-le", errors="surrogatepass")
    for i in range(0, len(units), 2):
        code_unit = units[i] | (units[i + 1] << 8)
        h = _to_int32(h * 31 + code_unit)
    return _to_base36(abs(h))


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))
