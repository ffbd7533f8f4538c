# Demo authentication: identity store, auth service and tier lookup.

from .store import DemoIdentityStore, IdentityStore, UserRecord, ApiKeyRecord
from .service import AuthService
from .tiers import Principal, require_api_key, restrict_to, require_model, resolve_tier

__all__ = [
    "DemoIdentityStore",
    "IdentityStore",
    "UserRecord",
    "ApiKeyRecord",
    "AuthService",
    "Principal",
    "require_api_key",
    "restrict_to",
    "require_model",
    "resolve_tier",
]
