"""OpenAI completions translation layer.

Validation, single-call generation with post-processing, and the JSON and
simulated-streaming responders used by ``POST /v1/completions``.
"""

from __future__ import annotations

from .adapter import GenerationAdapter
from .responses import build_completion_response
from .stop import apply_stop_sequences
from .streaming import stream_completion, stream_completion_response
from .tokens import estimate_tokens
from .validation import validate_completion_request

__all__ = [
    "GenerationAdapter",
    "apply_stop_sequences",
    "build_completion_response",
    "estimate_tokens",
    "stream_completion",
    "stream_completion_response",
    "validate_completion_request",
]
