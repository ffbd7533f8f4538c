# Attempt construction for the Pollinations text/image endpoints.
# Model -> shape and shape -> URL builder are plain lookup tables so the
# pipeline never branches on model names itself.

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from urllib.parse import quote, urlencode

from .types import EndpointShape, GenerationRequest, ImageRequest, UpstreamAttempt

ACCEPT_BY_SHAPE = {
    EndpointShape.TEXT_JSON: "application/json",
    EndpointShape.TEXT_AUDIO: "audio/mpeg",
    EndpointShape.TEXT_PLAIN_FALLBACK: "text/plain",
}

MAX_SEED = 2**31 - 1


@dataclass
class AttemptPlanner:
    text_base_url: str = "https://text.pollinations.ai"
    image_base_url: str = "https://image.pollinations.ai"
    referrer: str = "fortecai.vercel.app"
    audio_models: List[str] = field(default_factory=lambda: ["openai-audio"])
    default_voice: str = "alloy"
    image_model_params: List[str] = field(default_factory=lambda: ["midjourney", "dalle", "playground"])
    seed_source: Callable[[], int] = lambda: random.randint(0, MAX_SEED)

    def __post_init__(self):
        self._builders: Dict[EndpointShape, Callable[[GenerationRequest, str], Dict[str, str]]] = {
            EndpointShape.TEXT_JSON: self._json_params,
            EndpointShape.TEXT_AUDIO: self._audio_params,
            EndpointShape.TEXT_PLAIN_FALLBACK: lambda request, model: {},
        }

    # -------------------------
    # Text attempts
    # -------------------------

    def shape_for(self, model: str) -> EndpointShape:
        if model in self.audio_models:
            return EndpointShape.TEXT_AUDIO
        return EndpointShape.TEXT_JSON

    def voice_for(self, request: GenerationRequest) -> str:
        return request.voice or self.default_voice

    def build(
        self,
        request: GenerationRequest,
        shape: EndpointShape,
        model: str,
        timeout: float,
    ) -> UpstreamAttempt:
        params = self._builders[shape](request, model)
        url = f"{self.text_base_url.rstrip('/')}/{quote(request.prompt, safe='')}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return UpstreamAttempt(
            target_model=model,
            endpoint_shape=shape,
            url=url,
            prompt=request.prompt,
            timeout=timeout,
            accept=ACCEPT_BY_SHAPE[shape],
            voice=params.get("voice"),
        )

    def primary(self, request: GenerationRequest, timeout: float) -> UpstreamAttempt:
        return self.build(request, self.shape_for(request.model), request.model, timeout)

    def _json_params(self, request: GenerationRequest, model: str) -> Dict[str, str]:
        return {
            "model": model,
            "json": "true",
            "referrer": self.referrer,
            "temperature": str(request.temperature),
            "max_tokens": str(request.max_tokens),
        }

    def _audio_params(self, request: GenerationRequest, model: str) -> Dict[str, str]:
        return {"model": model, "voice": self.voice_for(request)}

    # -------------------------
    # Image URLs
    # -------------------------

    def image_url(self, request: ImageRequest, seed: Optional[int] = None) -> str:
        params: Dict[str, str] = {}
        if request.model in self.image_model_params:
            params["model"] = request.model
        params["width"] = str(request.width)
        params["height"] = str(request.height)
        if seed is not None:
            params["seed"] = str(seed)
        base = self.image_base_url.rstrip("/")
        return f"{base}/prompt/{quote(request.prompt, safe='')}?{urlencode(params)}"

    def image_seed(self, request: ImageRequest) -> int:
        # the only nondeterministic value the gateway produces
        return request.seed if request.seed is not None else self.seed_source()
