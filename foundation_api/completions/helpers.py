"""Shared utilities for the completions pipeline."""

from __future__ import annotations

import secrets
import string

COMPLETION_ID_PREFIX = "fndt-"
_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 16


def new_completion_id(prefix: str = COMPLETION_ID_PREFIX, length: int = _ID_LENGTH) -> str:
    """Return a fresh response identifier such as ``fndt-3k9x0c1m2n4b5v6q``."""
    return prefix + "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


# ---------------------------------------------------------------------------
# Bounded parameter helpers
# ---------------------------------------------------------------------------


def bounded_int(value: int | None, *, default: int, minimum: int, maximum: int) -> int:
    if value is None:
        return default
    return max(minimum, min(maximum, int(value)))


def bounded_float(
    value: float | None,
    *,
    default: float,
    minimum: float,
    maximum: float,
) -> float:
    if value is None:
        return default
    return max(minimum, min(maximum, float(value)))
