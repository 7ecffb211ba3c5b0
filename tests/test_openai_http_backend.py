"""Tests for the upstream OpenAI-compatible generation backend.

Upstream traffic is served by ``httpx.MockTransport``; no network access.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from foundation_api.core.config import BackendConfig
from foundation_api.core.errors import GenerationFailed, ModelUnavailable
from foundation_api.generation import get_generation_backend
from foundation_api.generation.base import AvailabilityStatus
from foundation_api.generation.openai_http import OpenAIHTTPBackend


def _chat_response(content: str | None) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


def _backend(handler, **cfg_kwargs) -> OpenAIHTTPBackend:
    cfg = BackendConfig(base_url="http://upstream:8000/", **cfg_kwargs)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAIHTTPBackend(cfg=cfg, client=client)


def _generate(backend: OpenAIHTTPBackend) -> str:
    return asyncio.run(backend.generate(prompt="Hi there", max_tokens=32, temperature=0.2))


class TestGenerate:
    def test_sends_instructions_and_parameters(self, monkeypatch):
        monkeypatch.setenv("FOUNDATION_API_UPSTREAM_KEY", "sk-up")
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_chat_response("Hello!"))

        backend = _backend(handler, model="llama", instructions="Be brief.")
        assert _generate(backend) == "Hello!"

        request = seen[0]
        assert request.url == "http://upstream:8000/v1/chat/completions"
        assert request.headers["authorization"] == "Bearer sk-up"
        body = json.loads(request.content)
        assert body["model"] == "llama"
        assert body["messages"] == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hi there"},
        ]
        assert body["max_tokens"] == 32
        assert body["temperature"] == 0.2
        assert body["stream"] is False

    def test_no_auth_header_without_key(self, monkeypatch):
        monkeypatch.delenv("FOUNDATION_API_UPSTREAM_KEY", raising=False)
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_chat_response("ok"))

        _generate(_backend(handler))
        assert "authorization" not in seen[0].headers

    def test_null_content_is_empty_text(self):
        backend = _backend(lambda request: httpx.Response(200, json=_chat_response(None)))
        assert _generate(backend) == ""

    def test_disabled_backend_is_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("upstream must not be called")

        with pytest.raises(ModelUnavailable, match="not enabled"):
            _generate(_backend(handler, enabled=False))

    def test_connection_error_is_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ModelUnavailable) as exc_info:
            _generate(_backend(handler))
        assert exc_info.value.reason == "model still downloading or not ready"

    def test_upstream_503_is_unavailable(self):
        backend = _backend(lambda request: httpx.Response(503, text="loading"))
        with pytest.raises(ModelUnavailable):
            _generate(backend)

    def test_upstream_error_status_is_generation_failure(self):
        backend = _backend(lambda request: httpx.Response(400, json={"error": "bad"}))
        with pytest.raises(GenerationFailed, match="HTTP 400"):
            _generate(backend)

    def test_unexpected_shape_is_generation_failure(self):
        backend = _backend(lambda request: httpx.Response(200, json={"result": "x"}))
        with pytest.raises(GenerationFailed, match="unexpected response shape"):
            _generate(backend)

    def test_empty_choices_is_generation_failure(self):
        backend = _backend(lambda request: httpx.Response(200, json={"choices": []}))
        with pytest.raises(GenerationFailed, match="no choices"):
            _generate(backend)

    def test_read_timeout_is_generation_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(GenerationFailed, match="timed out"):
            _generate(_backend(handler))


class TestAvailability:
    def _availability(self, backend: OpenAIHTTPBackend):
        return asyncio.run(backend.availability())

    def test_available_when_models_endpoint_answers(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1/models"
            return httpx.Response(200, json={"object": "list", "data": []})

        assert self._availability(_backend(handler)).is_available

    def test_not_ready_when_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        availability = self._availability(_backend(handler))
        assert availability.status is AvailabilityStatus.MODEL_NOT_READY
        assert availability.health_message == "unavailable: model still downloading or not ready"

    def test_not_ready_on_error_status(self):
        availability = self._availability(_backend(lambda request: httpx.Response(500)))
        assert availability.status is AvailabilityStatus.MODEL_NOT_READY

    def test_not_enabled(self):
        availability = self._availability(_backend(lambda request: httpx.Response(200), enabled=False))
        assert availability.status is AvailabilityStatus.NOT_ENABLED


def test_aclose_releases_client():
    backend = _backend(lambda request: httpx.Response(200, json=_chat_response("x")))
    asyncio.run(backend.aclose())
    assert backend._client is None


class TestFactory:
    def test_openai_kind(self):
        assert isinstance(get_generation_backend(BackendConfig()), OpenAIHTTPBackend)

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError, match="bogus"):
            get_generation_backend(BackendConfig(kind="bogus"))
