"""Simulated SSE streaming of an already-generated completion.

The backend returns the whole answer at once. This module replays it as a
sequence of ``text_completion`` chunks so that OpenAI-compatible clients see
ordinary incremental delivery::

    data: {"id": "fndt-...", "choices": [{"text": "Hello", "finish_reason": null, ...}], ...}

    data: {"id": "fndt-...", "choices": [{"text": " worl", "finish_reason": null, ...}], ...}

    data: {"id": "fndt-...", "choices": [{"text": "d", "finish_reason": null, ...}], ...}

    data: {"id": "fndt-...", "choices": [{"text": "", "finish_reason": "stop", ...}], ...}

    data: [DONE]
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Iterator

from fastapi.responses import StreamingResponse

from foundation_api.core.types import (
    CompletionStreamChoice,
    CompletionStreamChunk,
    GenerationResult,
)

from .helpers import new_completion_id

DEFAULT_CHUNK_SIZE = 5
DEFAULT_DELAY_S = 0.03
DONE_EVENT = "data: [DONE]\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def iter_text_chunks(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[str]:
    """Split ``text`` into consecutive slices of ``chunk_size`` characters.

    Slicing a ``str`` works on code points, so a multi-byte character is
    never split across two chunks. Grapheme clusters are not kept together:
    a ZWJ emoji sequence may straddle a chunk boundary, and concatenating
    the chunks still reproduces ``text`` exactly.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    for start in range(0, len(text), chunk_size):
        yield text[start:start + chunk_size]


def sse_event(chunk: CompletionStreamChunk) -> str:
    return f"data: {chunk.model_dump_json()}\n\n"


def _chunk(
    completion_id: str,
    model: str,
    text: str,
    finish_reason: str | None = None,
) -> CompletionStreamChunk:
    return CompletionStreamChunk(
        id=completion_id,
        created=int(time.time()),
        model=model,
        choices=[CompletionStreamChoice(text=text, finish_reason=finish_reason)],
    )


async def stream_completion(
    result: GenerationResult,
    *,
    model: str = "auto",
    completion_id: str | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    delay_s: float = DEFAULT_DELAY_S,
) -> AsyncIterator[str]:
    """Yield SSE events replaying ``result.text`` chunk by chunk.

    Each text chunk is followed by a ``delay_s`` pause that only suspends
    this generator. If the client disconnects, Starlette cancels the
    generator and no further chunks are produced.
    """
    completion_id = completion_id or new_completion_id()

    for piece in iter_text_chunks(result.text, chunk_size):
        yield sse_event(_chunk(completion_id, model, piece))
        await asyncio.sleep(delay_s)

    yield sse_event(_chunk(completion_id, model, "", finish_reason=result.finish_reason))
    yield DONE_EVENT


def stream_completion_response(
    result: GenerationResult,
    *,
    model: str = "auto",
    completion_id: str | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    delay_s: float = DEFAULT_DELAY_S,
) -> StreamingResponse:
    """Wrap a complete text-completion result as an SSE stream."""
    return StreamingResponse(
        stream_completion(
            result,
            model=model,
            completion_id=completion_id,
            chunk_size=chunk_size,
            delay_s=delay_s,
        ),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
