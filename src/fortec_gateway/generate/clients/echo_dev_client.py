# Offline upstream for local dev and testing without network calls.

from ..types import AudioBody, JsonBody, UpstreamAttempt, UpstreamResponse, EndpointShape


class EchoDevClient:
    def __init__(self):
        self.model = "echo-dev"

    def fetch(self, attempt: UpstreamAttempt) -> UpstreamResponse:
        if attempt.endpoint_shape is EndpointShape.TEXT_AUDIO:
            return AudioBody(payload=f"ECHO-AUDIO:{attempt.voice}:{attempt.prompt}".encode("utf-8"))
        text = f"[ECHO RESPONSE]\n{attempt.prompt}"
        return JsonBody(data={"text": text, "model": attempt.target_model, "engine": "echo"})

    def probe(self, url: str, timeout: float) -> bool:
        return True

    def close(self):
        pass
