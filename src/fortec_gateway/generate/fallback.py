# Declarative fallback policy: one retry against the baseline model, never more.

from __future__ import annotations

from dataclasses import dataclass

from .types import EndpointShape


@dataclass(frozen=True)
class FallbackPolicy:
    baseline_model: str = "openai"
    fallback_shape: EndpointShape = EndpointShape.TEXT_JSON

    def __post_init__(self):
        if self.fallback_shape is EndpointShape.TEXT_AUDIO:
            raise ValueError("audio replies cannot serve as a text fallback")

    def applies_to(self, shape: EndpointShape) -> bool:
        """Audio requests never fall back."""
        return shape is not EndpointShape.TEXT_AUDIO

    def allows_fallback(self, requested_model: str) -> bool:
        return requested_model != self.baseline_model

    @classmethod
    def from_settings(cls, settings) -> "FallbackPolicy":
        return cls(
            baseline_model=settings.BASELINE_MODEL,
            fallback_shape=EndpointShape(settings.FALLBACK_SHAPE),
        )
