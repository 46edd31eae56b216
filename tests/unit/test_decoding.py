"""Tests for decoding model-written suggestion and verdict payloads."""

import json

import pytest

from collageworks.core.decoding import (
    FALLBACK_SUGGESTIONS,
    FALLBACK_VERDICT,
    decode_suggestions,
    decode_verdict,
    strip_code_fence,
)


class TestStripCodeFence:
    """Tests for strip_code_fence."""

    def test_plain_text_unchanged(self):
        assert strip_code_fence('  ["a"] ') == '["a"]'

    def test_json_fence_removed(self):
        assert strip_code_fence('```json\n["a", "b"]\n```') == '["a", "b"]'

    def test_bare_fence_removed(self):
        assert strip_code_fence('```\n{"x": 1}\n```') == '{"x": 1}'


class TestDecodeSuggestions:
    """Tests for decode_suggestions."""

    def test_three_strings_accepted(self):
        decoded = decode_suggestions('["Warmer light", "Softer edges", "More contrast"]')
        assert decoded.ok is True
        assert decoded.value == ["Warmer light", "Softer edges", "More contrast"]

    def test_fenced_reply_accepted(self):
        decoded = decode_suggestions('```json\n["a", "b", "c"]\n```')
        assert decoded.ok is True
        assert decoded.value == ["a", "b", "c"]

    @pytest.mark.parametrize(
        "text",
        [
            None,
            "",
            "Here are some ideas: more light",
            '["only", "two"]',
            '["one", "two", "three", "four"]',
            '["one", 2, "three"]',
            '{"suggestions": ["a", "b", "c"]}',
        ],
    )
    def test_nonconforming_reply_falls_back(self, text):
        decoded = decode_suggestions(text)
        assert decoded.ok is False
        assert decoded.value == list(FALLBACK_SUGGESTIONS)

    def test_fallback_is_a_fresh_list(self):
        decode_suggestions(None).value.append("extra")
        assert len(decode_suggestions(None).value) == 3


class TestDecodeVerdict:
    """Tests for decode_verdict."""

    def test_valid_verdict(self):
        text = json.dumps({"winner": "image2", "reason": "Sharper", "score1": 6, "score2": 9})
        decoded = decode_verdict(text)
        assert decoded.ok is True
        assert decoded.value.winner == "image2"
        assert (decoded.value.score1, decoded.value.score2) == (6, 9)

    def test_fenced_verdict(self):
        text = '```json\n{"winner": "image1", "reason": "Cleaner", "score1": 8, "score2": 5}\n```'
        assert decode_verdict(text).value.winner == "image1"

    @pytest.mark.parametrize(
        "payload",
        [
            {"winner": "image3", "reason": "?", "score1": 5, "score2": 5},
            {"winner": "image1", "reason": "Out of range", "score1": 11, "score2": 5},
            {"winner": "image1", "reason": "Zero", "score1": 0, "score2": 5},
            {"winner": "image1", "score1": 5, "score2": 5},
        ],
    )
    def test_invalid_verdict_falls_back(self, payload):
        decoded = decode_verdict(json.dumps(payload))
        assert decoded.ok is False
        assert decoded.value == FALLBACK_VERDICT

    def test_non_json_falls_back(self):
        assert decode_verdict("image1 is better").ok is False

    def test_fallback_prefers_first_image(self):
        assert FALLBACK_VERDICT.winner == "image1"
        assert (FALLBACK_VERDICT.score1, FALLBACK_VERDICT.score2) == (7, 6)
