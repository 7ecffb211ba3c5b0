"""Approximate token accounting for usage reporting."""

from __future__ import annotations

# Rough average for English text; not a real tokenizer.
BYTES_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Estimate the token count of ``text`` from its UTF-8 byte length.

    Always returns at least 1. The value is only used for the ``usage``
    block of responses and must not be treated as billing-accurate.
    """
    return max(1, len(text.encode("utf-8")) // BYTES_PER_TOKEN)
