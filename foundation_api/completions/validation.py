"""Validation and normalization of inbound completion requests."""

from __future__ import annotations

import logging

from foundation_api.core.config import GenerationConfig
from foundation_api.core.errors import InvalidRequest
from foundation_api.core.types import CompletionParams, CompletionRequest

from .helpers import bounded_float, bounded_int

logger = logging.getLogger(__name__)

SUPPORTED_MODEL = "auto"


def validate_completion_request(
    request: CompletionRequest,
    *,
    cfg: GenerationConfig | None = None,
) -> CompletionParams:
    """Check a decoded request and map it onto canonical generation parameters.

    Raises:
        InvalidRequest: empty prompt, unsupported model, or ``n > 1``.
    """
    cfg = cfg or GenerationConfig()

    if not request.prompt:
        raise InvalidRequest("prompt cannot be empty")

    logger.debug("Received model: %s", request.model)
    if request.model is not None and request.model != SUPPORTED_MODEL:
        raise InvalidRequest(
            f"model '{request.model}' is not supported. Only '{SUPPORTED_MODEL}' is supported."
        )

    if request.n is not None and request.n > 1:
        raise InvalidRequest(
            "Generating multiple completions (n > 1) is not currently supported"
        )

    return CompletionParams(
        prompt=request.prompt,
        max_tokens=bounded_int(
            request.max_tokens,
            default=cfg.default_max_tokens,
            minimum=1,
            maximum=cfg.max_tokens_limit,
        ),
        temperature=bounded_float(
            request.temperature,
            default=cfg.default_temperature,
            minimum=cfg.min_temperature,
            maximum=cfg.max_temperature,
        ),
        stop=tuple(request.stop),
        stream=bool(request.stream),
        model=SUPPORTED_MODEL,
    )
