# Typed dataclasses shared across the generation pipeline.
# Upstream replies are resolved once into JsonBody / TextBody / AudioBody.

from __future__ import annotations
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class EndpointShape(str, Enum):
    TEXT_JSON = "text_json"
    TEXT_AUDIO = "text_audio"
    TEXT_PLAIN_FALLBACK = "text_plain_fallback"


@dataclass(frozen=True)
class GenerationRequest:
    """One text (or audio) generation call as received from the API layer."""
    prompt: str
    model: str = "openai"
    temperature: float = 0.7
    max_tokens: int = 150
    voice: Optional[str] = None


@dataclass(frozen=True)
class UpstreamAttempt:
    """A single outbound call: where to go, what shape to expect back."""
    target_model: str
    endpoint_shape: EndpointShape
    url: str
    prompt: str
    timeout: float
    accept: str = "application/json"
    voice: Optional[str] = None


@dataclass(frozen=True)
class JsonBody:
    data: Dict[str, Any]


@dataclass(frozen=True)
class TextBody:
    text: str


@dataclass(frozen=True)
class AudioBody:
    payload: bytes
    content_type: str = "audio/mpeg"


UpstreamResponse = Union[JsonBody, TextBody, AudioBody]


@dataclass(frozen=True)
class NormalizedResult:
    """The only value the pipeline hands back to callers."""
    text: str
    resolved_model: str
    requested_model: str
    used_fallback: bool
    tokens_used: int
    temperature: float
    audio_data: Optional[str] = None
    voice: Optional[str] = None
    model_name: Optional[str] = None
    degraded: bool = False

    def to_payload(self) -> Dict[str, Any]:
        data = {
            "text": self.text,
            "model": self.resolved_model,
            "requested_model": self.requested_model,
            "used_fallback": self.used_fallback,
            "tokens_used": self.tokens_used,
            "temperature": self.temperature,
            "model_name": self.model_name or self.resolved_model,
            "degraded": self.degraded,
        }
        if self.audio_data is not None:
            data["audio_data"] = self.audio_data
            data["voice"] = self.voice
        return data


@dataclass(frozen=True)
class ImageRequest:
    prompt: str
    width: int = 512
    height: int = 512
    model: str = "stable-diffusion"
    seed: Optional[int] = None


@dataclass(frozen=True)
class ImageResult:
    image_url: str
    model: str
    prompt: str
    width: int
    height: int
    seed: int

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)
