"""Shared test fixtures for the Foundation API."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from foundation_api.api import configure_web_app, web_app
from foundation_api.core.config import ServerConfig, StreamingConfig
from foundation_api.generation.base import GenerationBackend, ModelAvailability


class StubBackend(GenerationBackend):
    """In-memory backend returning a fixed text and recording calls."""

    def __init__(
        self,
        text: str = "Hello world",
        availability: ModelAvailability | None = None,
        error: Exception | None = None,
    ) -> None:
        self.text = text
        self.state = availability or ModelAvailability.available()
        self.error = error
        self.calls: list[dict[str, object]] = []
        self.closed = False

    async def availability(self) -> ModelAvailability:
        return self.state

    async def generate(self, *, prompt: str, max_tokens: int, temperature: float) -> str:
        self.calls.append(
            {"prompt": prompt, "max_tokens": max_tokens, "temperature": temperature}
        )
        self.state.raise_if_unavailable()
        if self.error is not None:
            raise self.error
        return self.text

    async def aclose(self) -> None:
        self.closed = True


def make_config(**kwargs: object) -> ServerConfig:
    """ServerConfig with streaming pacing disabled unless overridden."""
    kwargs.setdefault("streaming", StreamingConfig(delay_s=0.0))
    return ServerConfig(**kwargs)  # type: ignore[arg-type]


@pytest.fixture()
def stub_backend() -> StubBackend:
    return StubBackend()


@pytest.fixture()
def api_client(stub_backend: StubBackend):
    """TestClient for the API app wired to ``stub_backend``."""
    configure_web_app(make_config(), backend=stub_backend)
    yield TestClient(web_app)
    web_app.state.runtime_config = None
