# Error taxonomy for the gateway.
# Every GatewayError maps to an HTTP status and the standard error envelope.


class GatewayError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GatewayError):
    """Malformed local input, rejected before any upstream call."""
    status_code = 400


class UpstreamTransportError(GatewayError):
    """Network failure, timeout or non-2xx reply from the upstream service."""
    status_code = 502

    def __init__(self, message: str, model: str):
        super().__init__(message)
        self.model = model


class UpstreamShapeError(GatewayError):
    """Upstream replied with model identity fields but no usable content."""
    status_code = 502

    def __init__(self, message: str, model: str, reported_model: str = ""):
        super().__init__(message)
        self.model = model
        self.reported_model = reported_model or model


class ExhaustedFallbackError(GatewayError):
    """Primary and fallback attempts both failed."""
    status_code = 502

    def __init__(self, message: str, requested_model: str, fallback_model: str):
        super().__init__(message)
        self.requested_model = requested_model
        self.fallback_model = fallback_model


class AuthenticationError(GatewayError):
    status_code = 401


class PermissionDeniedError(GatewayError):
    status_code = 403


class NotFoundError(GatewayError):
    status_code = 404


class ConflictError(GatewayError):
    status_code = 400


class RateLimitExceededError(GatewayError):
    status_code = 429
