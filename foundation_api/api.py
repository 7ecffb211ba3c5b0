"""Foundation API: FastAPI surface for a local text-generation model.

The backing model produces each answer in a single call. This module maps
OpenAI completions requests onto that call and renders the result either as
one JSON document or as a simulated SSE stream.

Endpoints:
- GET  /health: Plain-text model availability (``ok`` or ``unavailable: ...``)
- POST /generate: Legacy ``{prompt}`` -> ``{prompt, response}`` endpoint
- POST /v1/completions: OpenAI-compatible text completion (JSON or SSE)
- GET  /v1/models: List the single supported model (``auto``)

Example usage::

    curl -X POST http://127.0.0.1:2929/v1/completions \\
        -H "Content-Type: application/json" \\
        -d '{"prompt": "Say hello", "max_tokens": 64, "stop": ["\\n"]}'
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TypeVar

import hydra
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from omegaconf import DictConfig
from pydantic import BaseModel, ValidationError

from . import __version__
from .completions import (
    GenerationAdapter,
    build_completion_response,
    stream_completion_response,
    validate_completion_request,
)
from .core.config import (
    ServerConfig,
    configure_logging,
    load_core_config,
    register_config_schemas,
    to_server_config,
)
from .core.errors import AppError, MalformedBody, PayloadTooLarge
from .core.types import (
    CompletionRequest,
    ErrorDetail,
    ErrorResponse,
    ModelCard,
    ModelList,
    PromptRequest,
    PromptResponse,
)
from .generation import get_generation_backend
from .generation.base import GenerationBackend

logger = logging.getLogger(__name__)
register_config_schemas()

_ModelT = TypeVar("_ModelT", bound=BaseModel)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    if getattr(app.state, "runtime_config", None) is None:
        cfg = load_core_config()
        configure_logging(cfg.debug)
        configure_web_app(cfg)
    yield
    backend = getattr(app.state, "generation_backend", None)
    if backend is not None:
        await backend.aclose()


web_app = FastAPI(
    title="Foundation API",
    description="OpenAI-compatible completions for a local text-generation model",
    version=__version__,
    lifespan=_lifespan,
)


def configure_web_app(cfg: ServerConfig, backend: GenerationBackend | None = None) -> None:
    """Inject runtime config and the generation backend into the app."""
    if backend is None:
        backend = get_generation_backend(cfg.backend)
    web_app.state.runtime_config = cfg
    web_app.state.generation_backend = backend
    web_app.state.generation_adapter = GenerationAdapter(backend)
    logger.debug("Configured web app with backend %s", type(backend).__name__)


def _runtime_config() -> ServerConfig:
    cfg = getattr(web_app.state, "runtime_config", None)
    if isinstance(cfg, ServerConfig):
        return cfg
    raise TypeError("Web app is not configured; call configure_web_app() first")


def _generation_backend() -> GenerationBackend:
    _runtime_config()
    return web_app.state.generation_backend


def _generation_adapter() -> GenerationAdapter:
    _runtime_config()
    return web_app.state.generation_adapter


# ---------------------------------------------------------------------------
# Error envelopes
# ---------------------------------------------------------------------------


def _error_response(message: str, error_type: str, status_code: int) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(message=message, type=error_type))  # type: ignore[arg-type]
    return JSONResponse(status_code=status_code, content=body.model_dump())


@web_app.exception_handler(AppError)
async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(exc.message, exc.openai_type, exc.status_code)


def _unexpected_error_response(exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error while serving completion")
    return _error_response(str(exc) or type(exc).__name__, "server_error", 500)


# ---------------------------------------------------------------------------
# Body handling
# ---------------------------------------------------------------------------


async def _read_body(request: Request, limit: int) -> bytes:
    """Collect the request body, refusing anything larger than ``limit`` bytes."""
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLarge(limit)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise PayloadTooLarge(limit)
    return bytes(body)


async def _decode_body(request: Request, model_cls: type[_ModelT]) -> _ModelT:
    raw = await _read_body(request, _runtime_config().max_body_bytes)
    try:
        return model_cls.model_validate_json(raw)
    except ValidationError as e:
        logger.debug("Rejected malformed %s body: %s", model_cls.__name__, e)
        raise MalformedBody() from e


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@web_app.get("/health", response_class=PlainTextResponse)
async def health() -> PlainTextResponse:
    """Report whether the backing model can serve requests."""
    availability = await _generation_backend().availability()
    status_code = 200 if availability.is_available else 503
    return PlainTextResponse(availability.health_message, status_code=status_code)


@web_app.post("/generate", response_model=PromptResponse)
async def generate(request: Request) -> PromptResponse:
    """Legacy single-prompt generation with default parameters."""
    body = await _decode_body(request, PromptRequest)
    gen_cfg = _runtime_config().generation
    output = await _generation_adapter().generate_text(
        body.prompt,
        gen_cfg.default_max_tokens,
        gen_cfg.default_temperature,
    )
    return PromptResponse(prompt=body.prompt, response=output)


@web_app.post("/v1/completions", response_model=None)
async def completions(request: Request) -> Response:
    """OpenAI-compatible text completion.

    Generation always finishes before the first byte is sent, so every
    failure, including in streaming mode, is reported with a proper status.
    """
    cfg = _runtime_config()
    try:
        body = await _decode_body(request, CompletionRequest)
        params = validate_completion_request(body, cfg=cfg.generation)
        result = await _generation_adapter().run(
            params.prompt,
            params.max_tokens,
            params.temperature,
            params.stop,
        )
    except AppError:
        raise
    except Exception as e:
        return _unexpected_error_response(e)

    if params.stream:
        return stream_completion_response(
            result,
            model=params.model,
            chunk_size=cfg.streaming.chunk_size,
            delay_s=cfg.streaming.delay_s,
        )

    response = build_completion_response(result, model=params.model)
    return JSONResponse(content=response.model_dump())


@web_app.get("/v1/models", response_model=ModelList)
async def list_models() -> ModelList:
    return ModelList(data=[ModelCard(id="auto")])


@hydra.main(version_base=None, config_path="core/configs", config_name="local")
def main(cfg: DictConfig) -> None:
    """Hydra entry point for running the API with an explicit config profile."""
    server_cfg = to_server_config(cfg)
    configure_logging(server_cfg.debug)
    configure_web_app(server_cfg)
    uvicorn.run(
        web_app,
        host=server_cfg.host,
        port=server_cfg.port,
        log_level="debug" if server_cfg.debug else "info",
    )


if __name__ == "__main__":
    main()
