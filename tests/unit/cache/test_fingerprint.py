# tests/unit/cache/test_fingerprint.py - v2
"""Tests for cache/fingerprint.py."""

from __future__ import annotations

import pytest

from convocache.cache.fingerprint import compute_fingerprint, rolling_hash_base36
from convocache.conversations.models import ConversationRecord


class TestBlake2bFingerprint:
    def test_deterministic(self, make_conversation):
        conv = make_conversation("c1", 4)
        assert compute_fingerprint(conv) == compute_fingerprint(conv)

    def test_equal_for_identical_relevant_fields(self, make_conversation):
        a = make_conversation("c1", 4)
        b = a.model_copy(update={"id": "other_id"})
        assert compute_fingerprint(a) == compute_fingerprint(b)

    def test_ignores_fields_outside_digest(self, make_conversation):
        a = make_conversation("c1", 4)
        data = a.model_dump()
        data["contact_phone"] = "+5511999990000"
        data["lead_status"] = "qualified"
        b = ConversationRecord.model_validate(data)
        assert compute_fingerprint(a) == compute_fingerprint(b)

    def test_is_128_bit_hex(self, make_conversation):
        fp = compute_fingerprint(make_conversation("c1", 2))
        assert len(fp) == 32
        int(fp, 16)

    @pytest.mark.parametrize("change", [
        {"contact_name": "Someone Else"},
        {"updated_at": "2026-03-01T00:00:00Z"},
    ])
    def test_changes_with_relevant_fields(self, make_conversation, change):
        a = make_conversation("c1", 4)
        b = a.model_copy(update=change)
        assert compute_fingerprint(a) != compute_fingerprint(b)

    def test_changes_with_message_text(self, make_conversation):
        a = make_conversation("c1", 3)
        data = a.model_dump()
        data["messages"][1]["text"] = "edited"
        b = ConversationRecord.model_validate(data)
        assert compute_fingerprint(a) != compute_fingerprint(b)

    def test_changes_with_new_message(self, make_conversation, add_message):
        a = make_conversation("c1", 3)
        assert compute_fingerprint(a) != compute_fingerprint(add_message(a, "hello"))

    def test_key_order_of_message_extras_irrelevant(self):
        a = ConversationRecord(id="x", messages=[{"text": "hi", "sender": "me", "ai_generated": True}])
        b = ConversationRecord(id="x", messages=[{"ai_generated": True, "sender": "me", "text": "hi"}])
        assert compute_fingerprint(a) == compute_fingerprint(b)

    def test_unknown_algorithm(self, make_conversation):
        with pytest.raises(ValueError, match="Unsupported"):
            compute_fingerprint(make_conversation("c1", 1), "crc32")  # type: ignore[arg-type]


class TestRollingHash:
    def test_empty_string(self):
        assert rolling_hash_base36("") == "0"

    def test_single_char(self):
        # 'a' = 97 = 2 * 36 + 25
        assert rolling_hash_base36("a") == "2p"

    def test_matches_java_string_hash(self):
        # Same polynomial as java.lang.String.hashCode
        assert int(rolling_hash_base36("hello"), 36) == 99162322

    def test_wraps_to_signed_32_bit(self):
        # "polygenelubricants".hashCode() == Integer.MIN_VALUE
        assert int(rolling_hash_base36("polygenelubricants"), 36) == 2**31

    def test_uses_utf16_code_units(self):
        # U+1F600 is the surrogate pair D83D DE00
        expected = ((0xD83D * 31) + 0xDE00)
        assert int(rolling_hash_base36("\U0001F600"), 36) == expected


class TestLegacyFingerprint:
    """Expected values were produced by the dashboard's generateContentHash."""

    @staticmethod
    def _record(**fields) -> ConversationRecord:
        return ConversationRecord.model_validate({"id": "1", **fields})

    def test_declared_order(self):
        conv = self._record(
            messages=[{"sender": "ana", "text": "oi", "timestamp": "t1"}],
            contact_name="Ana",
            updated_at="2026-01-01",
        )
        assert compute_fingerprint(conv, "legacy") == "77i69c"

    def test_stored_message_key_order_kept(self):
        conv = self._record(
            messages=[{"text": "oi", "sender": "ana", "timestamp": "t1"}],
            contact_name="Ana",
            updated_at="2026-01-01",
        )
        assert compute_fingerprint(conv, "legacy") == "txps1a"

    def test_null_contact_name_kept(self):
        conv = self._record(
            messages=[{"sender": "ana", "text": "oi", "timestamp": "t1"}],
            contact_name=None,
            updated_at="2026-01-01",
        )
        assert compute_fingerprint(conv, "legacy") == "4df1e5"

    def test_null_message_text_kept(self):
        conv = self._record(
            messages=[{"sender": "ana", "text": None, "timestamp": "t1"}],
            contact_name="Ana",
            updated_at="2026-01-01",
        )
        assert compute_fingerprint(conv, "legacy") == "5k60gh"

    def test_numeric_values_and_non_ascii(self):
        conv = self._record(
            messages=[{"sender": 5511999990000, "text": "olá", "timestamp": 1760000000000}],
            contact_name="Ana",
            updated_at=1760000000000,
        )
        assert compute_fingerprint(conv, "legacy") == "qgidoi"

    def test_missing_fields_omitted(self):
        assert compute_fingerprint(self._record(), "legacy") == "31e"

    def test_deterministic(self, make_conversation):
        conv = make_conversation("c1", 6)
        assert compute_fingerprint(conv, "legacy") == compute_fingerprint(conv, "legacy")
