"""Error taxonomy for the completions API.

Every failure that reaches the HTTP boundary is an :class:`AppError`
subclass; the API layer renders it as an OpenAI-style error envelope using
``openai_type`` and ``status_code``.
"""

from __future__ import annotations

from typing import ClassVar, Literal

ErrorType = Literal["invalid_request_error", "server_error"]


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    openai_type: ClassVar[ErrorType] = "server_error"
    status_code: ClassVar[int] = 500

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    @property
    def message(self) -> str:
        return self.reason


class ModelUnavailable(AppError):
    """The backing model cannot serve requests (ineligible, disabled, loading)."""

    status_code = 400

    @property
    def message(self) -> str:
        return f"On-device model unavailable: {self.reason}"


class InvalidRequest(AppError):
    """The request decoded fine but failed semantic validation."""

    openai_type = "invalid_request_error"
    status_code = 400


class GenerationFailed(AppError):
    """The backend accepted the request but failed to produce text."""

    @property
    def message(self) -> str:
        return f"Generation failed: {self.reason}"


class MalformedBody(AppError):
    """The body is not valid JSON or does not match the request schema."""

    openai_type = "invalid_request_error"
    status_code = 400

    def __init__(self, reason: str = "Invalid JSON in request body") -> None:
        super().__init__(reason)

    @property
    def message(self) -> str:
        return "Invalid JSON in request body"


class PayloadTooLarge(AppError):
    """The body exceeds the configured collection limit."""

    openai_type = "invalid_request_error"
    status_code = 413

    def __init__(self, limit: int) -> None:
        super().__init__(f"Request body too large (limit {limit} bytes)")
        self.limit = limit
