"""Single-shot JSON completion responses."""

from __future__ import annotations

import time

from foundation_api.core.types import (
    CompletionUsage,
    GenerationResult,
    TextCompletionChoice,
    TextCompletionResponse,
)

from .helpers import new_completion_id


def build_completion_response(
    result: GenerationResult,
    *,
    model: str = "auto",
    completion_id: str | None = None,
) -> TextCompletionResponse:
    return TextCompletionResponse(
        id=completion_id or new_completion_id(),
        created=int(time.time()),
        model=model,
        choices=[TextCompletionChoice(text=result.text, finish_reason=result.finish_reason)],
        usage=CompletionUsage(
            prompt_tokens=result.prompt_tokens,
            completion_tokens=result.completion_tokens,
            total_tokens=result.prompt_tokens + result.completion_tokens,
        ),
    )
