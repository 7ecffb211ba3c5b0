"""Shared Pydantic models for the completions API.

Request models are decoded strictly so that a mistyped field is reported
as a malformed body instead of being silently coerced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ErrorType

FinishReason = Literal["stop"]

# --- Legacy prompt API ---


class PromptRequest(BaseModel):
    """Body of ``POST /generate``."""

    model_config = ConfigDict(strict=True)

    prompt: str


class PromptResponse(BaseModel):
    prompt: str
    response: str


# --- OpenAI completions request ---


class CompletionRequest(BaseModel):
    """Body of ``POST /v1/completions``.

    ``stop`` accepts either a single string or an array of strings and is
    normalized to a list during decoding, so downstream code only ever sees
    ``list[str]``.
    """

    model_config = ConfigDict(strict=True)

    model: str | None = None
    prompt: str
    max_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    n: int | None = None
    stream: bool | None = None
    logprobs: bool | None = None
    echo: bool | None = None
    stop: list[str] = Field(default_factory=list)

    @field_validator("stop", mode="before")
    @classmethod
    def _normalize_stop(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


@dataclass(frozen=True)
class CompletionParams:
    """Canonical generation parameters produced by request validation."""

    prompt: str
    max_tokens: int
    temperature: float
    stop: tuple[str, ...] = ()
    stream: bool = False
    model: str = "auto"


@dataclass(frozen=True)
class GenerationResult:
    """Post-processed output of a single generation call."""

    text: str
    prompt_tokens: int
    completion_tokens: int
    finish_reason: str = "stop"


# --- OpenAI completions response ---


class CompletionUsage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class TextCompletionChoice(BaseModel):
    text: str
    index: int = 0
    logprobs: None = None
    finish_reason: str = "stop"


class TextCompletionResponse(BaseModel):
    id: str
    object: Literal["text_completion"] = "text_completion"
    created: int
    model: str
    choices: list[TextCompletionChoice]
    usage: CompletionUsage


class CompletionStreamChoice(BaseModel):
    text: str
    index: int = 0
    finish_reason: str | None = None


class CompletionStreamChunk(BaseModel):
    """One SSE ``data:`` payload of a streamed completion."""

    id: str
    object: Literal["text_completion"] = "text_completion"
    created: int
    model: str
    choices: list[CompletionStreamChoice]


# --- Models listing ---


class ModelCard(BaseModel):
    id: str
    object: Literal["model"] = "model"
    owned_by: str = "system"


class ModelList(BaseModel):
    object: Literal["list"] = "list"
    data: list[ModelCard]


# --- Errors ---


class ErrorDetail(BaseModel):
    message: str
    type: ErrorType = "invalid_request_error"
    code: str | None = None


class ErrorResponse(BaseModel):
    error: ErrorDetail
