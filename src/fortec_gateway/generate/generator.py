# GenerationPipeline: the outbound request flow for text, audio and image.
#  - accepts any upstream client exposing fetch(attempt) / probe(url, timeout)
#  - primary attempt, then at most one fallback against the baseline model
#  - always returns a NormalizedResult; only bad local input raises

from __future__ import annotations

import base64
from typing import Optional

from fortec_gateway.errors import (
    ExhaustedFallbackError,
    UpstreamShapeError,
    UpstreamTransportError,
    ValidationError,
)
from fortec_gateway.logger import get_logger
from .attempts import AttemptPlanner
from .fallback import FallbackPolicy
from .interpret import Interpretation, interpret
from .types import (
    AudioBody,
    EndpointShape,
    GenerationRequest,
    ImageRequest,
    ImageResult,
    NormalizedResult,
    UpstreamAttempt,
)

logger = get_logger("generate")

AUDIO_CONFIRMATION = "Audio generated successfully"
EMPTY_RESPONSE = "No response generated. The model may be unavailable."


def validate_request(request: GenerationRequest):
    if not isinstance(request.prompt, str) or not request.prompt.strip():
        raise ValidationError("Prompt is required")
    if request.max_tokens <= 0:
        raise ValidationError("max_tokens must be a positive integer")


def validate_image_request(request: ImageRequest):
    if not isinstance(request.prompt, str) or not request.prompt.strip():
        raise ValidationError("Prompt is required")
    if request.width <= 0 or request.height <= 0:
        raise ValidationError("width and height must be positive integers")


def fallback_note(baseline: str, requested: str) -> str:
    return f"{baseline} (fallback from {requested})"


def connection_issue_message(model: str) -> str:
    return (
        f"The {model} model could not be reached. Our connection to the generation "
        f"service is currently experiencing issues, possibly due to high demand or a "
        f"temporary disruption. Please try again shortly."
    )


def exhausted_message(requested: str, baseline: str) -> str:
    return (
        f"The requested model ({requested}) didn't provide a complete response and the "
        f"fallback model ({baseline}) was unavailable as well. Please try again shortly."
    )


class GenerationPipeline:
    def __init__(
        self,
        client,
        planner: Optional[AttemptPlanner] = None,
        policy: Optional[FallbackPolicy] = None,
        primary_timeout: float = 60.0,
        fallback_timeout: float = 30.0,
        probe_timeout: float = 15.0,
        probe_images: bool = True,
    ):
        self.client = client
        self.planner = planner or AttemptPlanner()
        self.policy = policy or FallbackPolicy()
        self.primary_timeout = primary_timeout
        self.fallback_timeout = fallback_timeout
        self.probe_timeout = probe_timeout
        self.probe_images = probe_images

    @classmethod
    def from_settings(cls, client, settings) -> "GenerationPipeline":
        planner = AttemptPlanner(
            text_base_url=settings.TEXT_API_URL,
            image_base_url=settings.IMAGE_API_URL,
            referrer=settings.REFERRER,
            audio_models=list(settings.AUDIO_MODELS),
            default_voice=settings.DEFAULT_VOICE,
            image_model_params=list(settings.IMAGE_MODEL_PARAMS),
        )
        return cls(
            client=client,
            planner=planner,
            policy=FallbackPolicy.from_settings(settings),
            primary_timeout=settings.PRIMARY_TIMEOUT,
            fallback_timeout=settings.FALLBACK_TIMEOUT,
            probe_timeout=settings.PROBE_TIMEOUT,
            probe_images=settings.IMAGE_PROBE,
        )

    # -------------------------
    # Text / audio
    # -------------------------

    def generate(self, request: GenerationRequest) -> NormalizedResult:
        """Main entry point for text and audio generation."""
        validate_request(request)
        attempt = self.planner.primary(request, self.primary_timeout)
        logger.info(
            "Generation request: model=%s shape=%s prompt_chars=%d temperature=%s",
            request.model, attempt.endpoint_shape.value, len(request.prompt), request.temperature,
        )

        if attempt.endpoint_shape is EndpointShape.TEXT_AUDIO:
            return self._generate_audio(request, attempt)

        try:
            outcome = self._run_text(attempt)
        except (UpstreamTransportError, UpstreamShapeError) as e:
            if self.policy.applies_to(attempt.endpoint_shape) and self.policy.allows_fallback(request.model):
                return self._fallback(request, e)
            return self._surface_failure(request, e)

        return self._result(request, outcome, resolved_model=request.model)

    def _run_text(self, attempt: UpstreamAttempt) -> Interpretation:
        body = self.client.fetch(attempt)
        outcome = interpret(body)
        if outcome.incomplete:
            raise UpstreamShapeError(
                f"incomplete response from {attempt.target_model}",
                model=attempt.target_model,
                reported_model=outcome.reported_model or "",
            )
        return outcome

    def _fallback(self, request: GenerationRequest, cause: Exception) -> NormalizedResult:
        baseline = self.policy.baseline_model
        logger.info("Primary attempt for %s failed (%s); falling back to %s", request.model, type(cause).__name__, baseline)
        attempt = self.planner.build(request, self.policy.fallback_shape, baseline, self.fallback_timeout)
        try:
            try:
                outcome = self._run_text(attempt)
            except (UpstreamTransportError, UpstreamShapeError) as e:
                raise ExhaustedFallbackError(
                    f"fallback to {baseline} failed for {request.model}",
                    requested_model=request.model,
                    fallback_model=baseline,
                ) from e
            if outcome.content is None:
                raise ExhaustedFallbackError(
                    f"fallback to {baseline} returned no content for {request.model}",
                    requested_model=request.model,
                    fallback_model=baseline,
                )
        except ExhaustedFallbackError as e:
            logger.warning("Fallback exhausted: %s", e.message)
            return self._degraded(request, exhausted_message(request.model, baseline), used_fallback=True)

        note = fallback_note(baseline, request.model)
        return NormalizedResult(
            text=f"{outcome.content}\n\n[Generated by {note}]",
            resolved_model=baseline,
            requested_model=request.model,
            used_fallback=True,
            tokens_used=outcome.tokens_used or request.max_tokens,
            temperature=request.temperature,
            model_name=note,
        )

    def _surface_failure(self, request: GenerationRequest, cause: Exception) -> NormalizedResult:
        if isinstance(cause, UpstreamShapeError):
            text = f"I'm a {cause.reported_model} model. How can I help you today?"
        else:
            text = connection_issue_message(request.model)
        logger.warning("No fallback available for %s: %s", request.model, type(cause).__name__)
        return self._degraded(request, text, used_fallback=False)

    def _result(self, request: GenerationRequest, outcome: Interpretation, resolved_model: str) -> NormalizedResult:
        if outcome.content is None:
            return self._degraded(request, EMPTY_RESPONSE, used_fallback=False)
        return NormalizedResult(
            text=outcome.content,
            resolved_model=resolved_model,
            requested_model=request.model,
            used_fallback=False,
            tokens_used=outcome.tokens_used or request.max_tokens,
            temperature=request.temperature,
            model_name=outcome.reported_model or resolved_model,
        )

    def _degraded(self, request: GenerationRequest, text: str, used_fallback: bool) -> NormalizedResult:
        return NormalizedResult(
            text=text,
            resolved_model=request.model,
            requested_model=request.model,
            used_fallback=used_fallback,
            tokens_used=request.max_tokens,
            temperature=request.temperature,
            degraded=True,
        )

    def _generate_audio(self, request: GenerationRequest, attempt: UpstreamAttempt) -> NormalizedResult:
        voice = attempt.voice or self.planner.voice_for(request)
        try:
            body = self.client.fetch(attempt)
        except UpstreamTransportError:
            return self._degraded(request, connection_issue_message(request.model), used_fallback=False)

        if not isinstance(body, AudioBody) or not body.payload:
            logger.warning("Audio reply for %s carried no payload", request.model)
            return self._degraded(request, f"The {request.model} model returned no audio. Please try again shortly.", used_fallback=False)

        encoded = base64.b64encode(body.payload).decode("ascii")
        return NormalizedResult(
            text=AUDIO_CONFIRMATION,
            resolved_model=request.model,
            requested_model=request.model,
            used_fallback=False,
            tokens_used=request.max_tokens,
            temperature=request.temperature,
            audio_data=f"data:{body.content_type};base64,{encoded}",
            voice=voice,
            model_name=request.model,
        )

    # -------------------------
    # Image
    # -------------------------

    def generate_image(self, request: ImageRequest) -> ImageResult:
        validate_image_request(request)
        seed = self.planner.image_seed(request)
        url = self.planner.image_url(request, seed=seed)
        logger.info("Image request: model=%s size=%dx%d seed=%d", request.model, request.width, request.height, seed)
        if self.probe_images:
            self.client.probe(url, self.probe_timeout)
        return ImageResult(
            image_url=url,
            model=request.model,
            prompt=request.prompt,
            width=request.width,
            height=request.height,
            seed=seed,
        )
