"""Centralized configuration for the Foundation API server.

Configuration is resolved from two sources:

1. **YAML config** — loaded via Hydra from ``foundation_api/core/configs/``
2. **Environment variables** — used only for secrets and the config selector

The YAML profile is selected by ``FOUNDATION_API_CONFIG_NAME`` (default:
``"local"``). Use Hydra overrides (``key=value``) to customize values.

Usage::

    from foundation_api.core.config import load_core_config

    cfg = load_core_config("local", overrides=["port=8080"])
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from hydra import compose, initialize_config_dir
from hydra.core.config_store import ConfigStore
from omegaconf import OmegaConf

logger = logging.getLogger(__name__)

_CONFIG_DIR = str(Path(__file__).parent / "configs")

DEFAULT_INSTRUCTIONS = (
    "You are a concise, helpful assistant. "
    "Keep replies under 200 words unless asked otherwise."
)

UPSTREAM_KEY_ENV = "FOUNDATION_API_UPSTREAM_KEY"


# ---------------------------------------------------------------------------
# Structured config schema
# ---------------------------------------------------------------------------


@dataclass
class GenerationConfig:
    """Defaults and bounds applied to completion request parameters."""

    default_max_tokens: int = 256
    max_tokens_limit: int = 4096
    default_temperature: float = 0.7
    min_temperature: float = 0.0
    max_temperature: float = 2.0


@dataclass
class StreamingConfig:
    """Pacing of simulated SSE streaming."""

    chunk_size: int = 5
    delay_s: float = 0.03


@dataclass
class BackendConfig:
    """Generation backend selection and upstream connection settings."""

    kind: str = "openai"
    enabled: bool = True
    base_url: str = "http://127.0.0.1:8000"
    model: str = "default"
    timeout_s: float = 120.0
    instructions: str = DEFAULT_INSTRUCTIONS


@dataclass
class ServerConfig:
    """Top-level runtime configuration."""

    host: str = "127.0.0.1"
    port: int = 2929
    debug: bool = False
    max_body_bytes: int = 1_000_000
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    streaming: StreamingConfig = field(default_factory=StreamingConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)


def register_config_schemas() -> None:
    """Register the structured config schema with Hydra's ConfigStore."""
    cs = ConfigStore.instance()
    cs.store(name="_server_schema", node=ServerConfig)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def config_name_from_env() -> str:
    return os.environ.get("FOUNDATION_API_CONFIG_NAME", "local").strip().lower() or "local"


def to_server_config(cfg: object) -> ServerConfig:
    """Convert a composed OmegaConf node into a validated ``ServerConfig``."""
    merged = OmegaConf.merge(OmegaConf.structured(ServerConfig), cfg)
    parsed = OmegaConf.to_object(merged)
    if not isinstance(parsed, ServerConfig):
        raise TypeError("Hydra did not produce a ServerConfig")
    return parsed


def load_core_config(
    config_name: str | None = None,
    overrides: list[str] | None = None,
) -> ServerConfig:
    """Compose a YAML profile and return the typed server config.

    Unknown keys or values of the wrong type raise, since the result is
    merged onto the ``ServerConfig`` schema.
    """
    name = config_name or config_name_from_env()
    register_config_schemas()
    abs_dir = os.path.abspath(_CONFIG_DIR)
    with initialize_config_dir(version_base=None, config_dir=abs_dir):
        cfg = compose(config_name=name, overrides=overrides or [])
    server_cfg = to_server_config(cfg)
    logger.debug("Loaded config profile %r", name)
    return server_cfg


def upstream_api_key() -> str:
    """Read the upstream bearer token from the environment."""
    raw = os.environ.get(UPSTREAM_KEY_ENV)
    return raw.strip() if raw is not None else ""


def configure_logging(debug: bool) -> None:
    """Configure root logging for an entry point."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
