"""Generation backend abstraction.

Factory function to get the configured backend.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from foundation_api.core.config import BackendConfig

    from .base import GenerationBackend


def get_generation_backend(cfg: BackendConfig) -> GenerationBackend:
    """Return the generation backend selected by ``cfg.kind``."""
    if cfg.kind == "openai":
        from .openai_http import OpenAIHTTPBackend

        return OpenAIHTTPBackend(cfg=cfg)
    raise ValueError(f"Unsupported generation backend: {cfg.kind!r}")
