"""Abstract generation backend interface and availability reporting."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from foundation_api.core.errors import ModelUnavailable


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    DEVICE_NOT_ELIGIBLE = "device_not_eligible"
    NOT_ENABLED = "not_enabled"
    MODEL_NOT_READY = "model_not_ready"
    OTHER = "other"


_DESCRIPTIONS = {
    AvailabilityStatus.AVAILABLE: "model available",
    AvailabilityStatus.DEVICE_NOT_ELIGIBLE: "device not eligible for Foundation Models",
    AvailabilityStatus.NOT_ENABLED: "Apple Intelligence not enabled in Settings",
    AvailabilityStatus.MODEL_NOT_READY: "model still downloading or not ready",
}


@dataclass(frozen=True)
class ModelAvailability:
    """Whether the backing model can serve requests, and why not.

    ``detail`` is only meaningful for ``AvailabilityStatus.OTHER``.
    """

    status: AvailabilityStatus
    detail: str = ""

    @classmethod
    def available(cls) -> ModelAvailability:
        return cls(AvailabilityStatus.AVAILABLE)

    @property
    def is_available(self) -> bool:
        return self.status is AvailabilityStatus.AVAILABLE

    @property
    def description(self) -> str:
        """Reason string carried by ``ModelUnavailable``."""
        if self.status is AvailabilityStatus.OTHER:
            return f"model unavailable: {self.detail}"
        return _DESCRIPTIONS[self.status]

    @property
    def health_message(self) -> str:
        """Plain-text body served by ``GET /health``.

        These strings are matched by external callers; do not reword them.
        """
        if self.is_available:
            return "ok"
        if self.status is AvailabilityStatus.OTHER:
            return f"unavailable: {self.detail}"
        return f"unavailable: {_DESCRIPTIONS[self.status]}"

    def raise_if_unavailable(self) -> None:
        if not self.is_available:
            raise ModelUnavailable(self.description)


class GenerationBackend(ABC):
    """Abstract base for the text-generation runtime.

    Implementations produce the whole answer in one call. They must be safe
    to call concurrently and must not block the event loop; blocking SDKs
    belong behind ``asyncio.to_thread``.
    """

    @abstractmethod
    async def availability(self) -> ModelAvailability:
        """Report whether the model can currently serve requests."""

    @abstractmethod
    async def generate(self, *, prompt: str, max_tokens: int, temperature: float) -> str:
        """Generate a completion for ``prompt``.

        Raises:
            ModelUnavailable: the model is absent, disabled, or still loading.
        """

    async def aclose(self) -> None:
        """Release backend resources. Default is a no-op."""
