"""Stop-sequence post-processing of generated text."""

from __future__ import annotations

from collections.abc import Sequence

FINISH_REASON_STOP = "stop"


def find_earliest_stop(text: str, stop: Sequence[str]) -> int | None:
    """Return the smallest offset at which any stop string occurs, or None.

    Empty stop strings never match.
    """
    earliest: int | None = None
    for stop_string in stop:
        if not stop_string:
            continue
        idx = text.find(stop_string)
        if idx >= 0 and (earliest is None or idx < earliest):
            earliest = idx
    return earliest


def apply_stop_sequences(text: str, stop: Sequence[str]) -> tuple[str, str]:
    """Truncate ``text`` at the earliest occurrence of any stop string.

    The matched stop string is not included in the output. Matching is
    exact and case-sensitive. The finish reason is always ``"stop"``; a
    length cutoff is not distinguished from a natural end.
    """
    if not stop:
        return text, FINISH_REASON_STOP

    idx = find_earliest_stop(text, stop)
    if idx is None:
        return text, FINISH_REASON_STOP
    return text[:idx], FINISH_REASON_STOP
