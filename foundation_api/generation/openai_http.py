"""Upstream forwarding generation backend.

Forwards each generation to an OpenAI-compatible ``/v1/chat/completions``
endpoint (vLLM, llama.cpp server, Ollama, ...) and returns only the text.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from foundation_api.core.config import BackendConfig, upstream_api_key
from foundation_api.core.errors import GenerationFailed, ModelUnavailable

from .base import AvailabilityStatus, GenerationBackend, ModelAvailability

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Upstream response shape
# ---------------------------------------------------------------------------


class _UpstreamMessage(BaseModel):
    content: str | None = None


class _UpstreamChoice(BaseModel):
    message: _UpstreamMessage


class _UpstreamChatResponse(BaseModel):
    choices: list[_UpstreamChoice]


# ---------------------------------------------------------------------------
# OpenAIHTTPBackend
# ---------------------------------------------------------------------------


class OpenAIHTTPBackend(GenerationBackend):
    """Generation backend that forwards to an upstream OpenAI-compatible server."""

    def __init__(self, cfg: BackendConfig, client: httpx.AsyncClient | None = None) -> None:
        self._cfg = cfg
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._cfg.timeout_s, connect=10.0),
            )
        return self._client

    def _backend_url(self) -> str:
        return self._cfg.base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        api_key = upstream_api_key()
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    async def availability(self) -> ModelAvailability:
        if not self._cfg.enabled:
            return ModelAvailability(AvailabilityStatus.NOT_ENABLED)
        try:
            resp = await self._get_client().get(
                f"{self._backend_url()}/v1/models",
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.debug("Upstream availability probe failed: %s", e)
            return ModelAvailability(AvailabilityStatus.MODEL_NOT_READY)
        if resp.is_success:
            return ModelAvailability.available()
        logger.debug("Upstream availability probe returned %d", resp.status_code)
        return ModelAvailability(AvailabilityStatus.MODEL_NOT_READY)

    async def generate(self, *, prompt: str, max_tokens: int, temperature: float) -> str:
        if not self._cfg.enabled:
            raise ModelUnavailable(ModelAvailability(AvailabilityStatus.NOT_ENABLED).description)

        body: dict[str, Any] = {
            "model": self._cfg.model,
            "messages": [
                {"role": "system", "content": self._cfg.instructions},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stream": False,
        }

        try:
            resp = await self._get_client().post(
                f"{self._backend_url()}/v1/chat/completions",
                json=body,
                headers=self._headers(),
            )
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.warning("Upstream model unreachable at %s: %s", self._backend_url(), e)
            raise ModelUnavailable(
                ModelAvailability(AvailabilityStatus.MODEL_NOT_READY).description,
            ) from e
        except httpx.HTTPError as e:
            raise GenerationFailed(str(e) or type(e).__name__) from e

        if resp.status_code == 503:
            raise ModelUnavailable(
                ModelAvailability(AvailabilityStatus.MODEL_NOT_READY).description,
            )
        if not resp.is_success:
            raise GenerationFailed(f"upstream returned HTTP {resp.status_code}")

        try:
            data = _UpstreamChatResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise GenerationFailed("upstream returned an unexpected response shape") from e
        if not data.choices:
            raise GenerationFailed("upstream returned no choices")
        return data.choices[0].message.content or ""

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
