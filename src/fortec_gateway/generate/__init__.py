# Generation package

# Exposes the pipeline, its value types and the offline dev client.

from .generator import GenerationPipeline
from .fallback import FallbackPolicy
from .attempts import AttemptPlanner
from .types import GenerationRequest, ImageRequest, ImageResult, NormalizedResult, EndpointShape
from .clients.echo_dev_client import EchoDevClient

__all__ = [
    "GenerationPipeline",
    "FallbackPolicy",
    "AttemptPlanner",
    "GenerationRequest",
    "ImageRequest",
    "ImageResult",
    "NormalizedResult",
    "EndpointShape",
    "EchoDevClient",
]
