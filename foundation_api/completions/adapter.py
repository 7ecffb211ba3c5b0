"""Single-call generation with stop-sequence and usage post-processing."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from foundation_api.core.errors import AppError, GenerationFailed
from foundation_api.core.types import GenerationResult
from foundation_api.generation.base import GenerationBackend

from .stop import apply_stop_sequences
from .tokens import estimate_tokens

logger = logging.getLogger(__name__)


class GenerationAdapter:
    """Runs exactly one backend generation per request and normalizes the result.

    Failures are never retried.
    """

    def __init__(self, backend: GenerationBackend) -> None:
        self._backend = backend

    async def generate_text(self, prompt: str, max_tokens: int, temperature: float) -> str:
        """Return the raw backend output without any post-processing."""
        try:
            return await self._backend.generate(
                prompt=prompt,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except AppError:
            raise
        except Exception as e:
            logger.exception("Generation backend raised an unexpected error")
            raise GenerationFailed(str(e) or type(e).__name__) from e

    async def run(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        stop: Sequence[str] = (),
    ) -> GenerationResult:
        raw_text = await self.generate_text(prompt, max_tokens, temperature)
        text, finish_reason = apply_stop_sequences(raw_text, stop)
        if len(text) != len(raw_text):
            logger.debug(
                "Truncated completion at stop sequence (%d -> %d chars)", len(raw_text), len(text),
            )

        return GenerationResult(
            text=text,
            prompt_tokens=estimate_tokens(prompt),
            completion_tokens=estimate_tokens(text),
            finish_reason=finish_reason,
        )
