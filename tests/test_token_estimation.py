"""Tests for the byte-length token estimator."""

from __future__ import annotations

from foundation_api.completions.tokens import estimate_tokens


class TestEstimateTokens:
    def test_empty_text_is_one(self):
        assert estimate_tokens("") == 1

    def test_short_text_is_at_least_one(self):
        assert estimate_tokens("hi") == 1

    def test_four_bytes_per_token(self):
        assert estimate_tokens("a" * 40) == 10
        assert estimate_tokens("a" * 43) == 10

    def test_counts_utf8_bytes_not_characters(self):
        # each "é" is two bytes, each emoji four
        assert estimate_tokens("é" * 8) == 4
        assert estimate_tokens("🌍" * 3) == 3

    def test_monotonic_in_byte_length(self):
        texts = ["", "a", "abcd", "abcdefgh", "héllo wörld", "🌍" * 10, "x" * 1000]
        texts.sort(key=lambda t: len(t.encode("utf-8")))
        estimates = [estimate_tokens(t) for t in texts]
        assert estimates == sorted(estimates)
        assert all(e >= 1 for e in estimates)
