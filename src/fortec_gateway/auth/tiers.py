# Demo-only tier resolution from bearer keys, plus FastAPI dependencies.
# Tiers are inferred from key prefixes; nothing here verifies a key was issued.
# restrict_to and require_model are extension hooks for gating routes by tier
# or model; no built-in route is gated by them.

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from fastapi import Depends, Header

from fortec_gateway.errors import AuthenticationError, PermissionDeniedError

FREE_TIER_KEY = "FORTEC_FREE_TIER"
MIN_KEY_LENGTH = 10

ALL_MODELS = ["fortec-7", "fortec-code", "fortec-expert", "fortec-lite", "fortec-business", "fortec-vision"]

# (prefix, tier, models), checked in order
PREFIX_TIERS: List[Tuple[str, str, List[str]]] = [
    ("FORTEC_PREMIUM_", "premium", ALL_MODELS),
    ("FORTEC_PRO_", "pro", ["fortec-code", "fortec-lite", "fortec-business"]),
]
FREE_MODELS = ["fortec-lite", "fortec-business"]
STANDARD_MODELS = ["fortec-lite"]


@dataclass(frozen=True)
class Principal:
    api_key: str
    tier: str
    models: Tuple[str, ...]

    def can_use(self, model: str) -> bool:
        return model in self.models


def parse_bearer(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError(
            "API key is required. Please provide an API key in the Authorization header as Bearer token."
        )
    key = authorization[len("Bearer "):].strip()
    if len(key) < MIN_KEY_LENGTH:
        raise AuthenticationError("Invalid API key format")
    return key


def resolve_tier(api_key: str) -> Principal:
    if api_key == FREE_TIER_KEY:
        return Principal(api_key=api_key, tier="free", models=tuple(FREE_MODELS))
    for prefix, tier, models in PREFIX_TIERS:
        if api_key.startswith(prefix):
            return Principal(api_key=api_key, tier=tier, models=tuple(models))
    return Principal(api_key=api_key, tier="standard", models=tuple(STANDARD_MODELS))


def optional_principal(authorization: Optional[str]) -> Optional[Principal]:
    """Principal for a well-formed bearer header, None otherwise."""
    try:
        return resolve_tier(parse_bearer(authorization))
    except AuthenticationError:
        return None


# ------------------------------------------------------------
# FastAPI dependencies
# ------------------------------------------------------------

def require_api_key(authorization: Optional[str] = Header(default=None)) -> Principal:
    return resolve_tier(parse_bearer(authorization))


def restrict_to(*tiers: str) -> Callable[..., Principal]:
    def dependency(principal: Principal = Depends(require_api_key)) -> Principal:
        if principal.tier not in tiers:
            raise PermissionDeniedError(
                f"Access denied. Your tier ({principal.tier}) is not authorized to perform this action."
            )
        return principal
    return dependency


def require_model(model: str) -> Callable[..., Principal]:
    def dependency(principal: Principal = Depends(require_api_key)) -> Principal:
        if not principal.can_use(model):
            raise PermissionDeniedError(f"Access denied. Your tier does not have access to the {model} model.")
        return principal
    return dependency
