# ============================================================
# Fortec AI Gateway FastAPI App
# ------------------------------------------------------------
# This app wires everything together:
#   - Model catalog listing
#   - Demo registration / login / API keys
#   - Text, audio and image generation proxied to Pollinations
#   - CORS, security headers, access log, rate limiting
# ============================================================

import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

# --- Local imports ---
from fortec_gateway import __version__
from fortec_gateway.settings import settings
from fortec_gateway.logger import get_logger
from fortec_gateway.errors import GatewayError, NotFoundError
from fortec_gateway.catalog import list_models, get_model
from fortec_gateway.auth import AuthService, DemoIdentityStore, Principal, require_api_key
from fortec_gateway.auth.tiers import optional_principal
from fortec_gateway.ratelimit import TieredRateLimiter
from fortec_gateway.generate import GenerationPipeline, GenerationRequest, ImageRequest, EchoDevClient

logger = get_logger("gateway")

# ------------------------------------------------------------
# 🔧 Upstream client selection
# ------------------------------------------------------------
if settings.USE_ECHO_UPSTREAM:
    upstream_client = EchoDevClient()
else:
    from fortec_gateway.generate.clients.pollinations_client import PollinationsClient
    upstream_client = PollinationsClient()

pipeline = GenerationPipeline.from_settings(upstream_client, settings)
auth_service = AuthService(DemoIdentityStore())
rate_limiter = TieredRateLimiter.from_settings(settings)


def get_pipeline() -> GenerationPipeline:
    return pipeline


def get_auth_service() -> AuthService:
    return auth_service


def get_rate_limiter() -> TieredRateLimiter:
    return rate_limiter


# ------------------------------------------------------------
# 🧾 Envelopes
# ------------------------------------------------------------
def request_id() -> str:
    return str(uuid.uuid4())


def envelope(data: Optional[Dict[str, Any]] = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"status": "success"}
    if message:
        body["message"] = message
    body["requestId"] = request_id()
    if data is not None:
        body["data"] = data
    return body


def error_envelope(message: str, status_code: int, **extra: Any) -> JSONResponse:
    content = {"status": "error", "message": message, "requestId": request_id(), **extra}
    return JSONResponse(status_code=status_code, content=content)


# ------------------------------------------------------------
# 🚀 FastAPI init
# ------------------------------------------------------------
@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info("%s %s starting (env=%s)", settings.APP_NAME, __version__, settings.ENV)
    yield
    upstream_client.close()


app = FastAPI(title=settings.APP_NAME, version=settings.VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    allow_credentials=False,
)

CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self' *.fortecai.vercel.app *.onrender.com",
    "connect-src 'self' *",
    "img-src 'self' *",
    "script-src 'self' 'unsafe-inline'",
    "style-src 'self' 'unsafe-inline'",
])


@app.middleware("http")
async def access_log(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    response.headers["Content-Security-Policy"] = CONTENT_SECURITY_POLICY
    logger.info("%s %s %d %.1f ms", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


# ------------------------------------------------------------
# ⚠️ Error handlers
# ------------------------------------------------------------
@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return error_envelope(exc.message, exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())[1:]) or "body"
        problems.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return error_envelope("; ".join(problems) or "Invalid request", 400)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_envelope("Endpoint not found", 404)
    return error_envelope(str(exc.detail), exc.status_code)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return error_envelope("Internal server error", 500, path=request.url.path)


# ------------------------------------------------------------
# 📦 Pydantic models
# ------------------------------------------------------------
class TextGenerationBody(BaseModel):
    prompt: Optional[str] = None
    model: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = Field(default=150, gt=0)
    voice: Optional[str] = None


class ImageGenerationBody(BaseModel):
    prompt: Optional[str] = None
    width: int = Field(default=512, gt=0)
    height: int = Field(default=512, gt=0)
    model: Optional[str] = None
    seed: Optional[int] = Field(default=None, ge=0)


class RegisterBody(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginBody(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ApiKeyBody(BaseModel):
    user_id: Optional[str] = None


class VerifyBody(BaseModel):
    api_key: Optional[str] = None


# ------------------------------------------------------------
# 🚦 Rate limiting
# ------------------------------------------------------------
def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    limiter: TieredRateLimiter = Depends(get_rate_limiter),
):
    principal = optional_principal(authorization)
    if principal:
        limiter.check(principal.api_key, principal.tier)
    else:
        limiter.check(client_address(request))


# ------------------------------------------------------------
# 💬 Generation routes
# ------------------------------------------------------------
@app.post("/api/v1/generate/text", dependencies=[Depends(enforce_rate_limit)])
def generate_text(body: TextGenerationBody, gen: GenerationPipeline = Depends(get_pipeline)):
    req = GenerationRequest(
        prompt=body.prompt or "",
        model=body.model or settings.DEFAULT_MODEL,
        temperature=body.temperature,
        max_tokens=body.max_tokens,
        voice=body.voice or None,
    )
    result = gen.generate(req)
    return envelope(result.to_payload())


@app.post("/api/v1/generate/image", dependencies=[Depends(enforce_rate_limit)])
def generate_image(body: ImageGenerationBody, gen: GenerationPipeline = Depends(get_pipeline)):
    req = ImageRequest(
        prompt=body.prompt or "",
        width=body.width,
        height=body.height,
        model=body.model or settings.DEFAULT_IMAGE_MODEL,
        seed=body.seed,
    )
    result = gen.generate_image(req)
    return envelope(result.to_payload())


# ------------------------------------------------------------
# 📚 Model catalog
# ------------------------------------------------------------
@app.get("/api/v1/models")
def models_index():
    return envelope({"models": list_models()})


@app.get("/api/v1/models/{model_id}")
def model_detail(model_id: str):
    model = get_model(model_id)
    if model is None:
        raise NotFoundError(f"Model with ID {model_id} not found")
    return envelope({"model": model})


# ------------------------------------------------------------
# 🔑 Demo auth
# ------------------------------------------------------------
@app.post("/api/v1/auth/register", status_code=201)
def register(body: RegisterBody, auth: AuthService = Depends(get_auth_service)):
    data = auth.register(body.name, body.email, body.password)
    return envelope(data, message="User registered successfully")


@app.post("/api/v1/auth/login")
def login(body: LoginBody, auth: AuthService = Depends(get_auth_service)):
    data = auth.login(body.email, body.password)
    return envelope(data, message="Login successful")


@app.post("/api/v1/auth/api-key")
def api_key(body: ApiKeyBody, auth: AuthService = Depends(get_auth_service)):
    data = auth.issue_key(body.user_id)
    return envelope(data, message="API key generated successfully")


@app.post("/api/v1/auth/verify")
def verify(body: VerifyBody, auth: AuthService = Depends(get_auth_service)):
    data = auth.verify_key(body.api_key)
    return envelope(data, message="API key is valid")


@app.get("/api/v1/auth/me")
def whoami(principal: Principal = Depends(require_api_key)):
    return envelope({"tier": principal.tier, "models": list(principal.models)})


# ------------------------------------------------------------
# 🧭 Health checks
# ------------------------------------------------------------
@app.get("/health")
def health():
    return {
        "status": "success",
        "message": "Server is healthy",
        "env": settings.ENV,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "requestId": request_id(),
    }


@app.get("/")
def hello():
    return {
        "status": "success",
        "message": f"Welcome to {settings.APP_NAME}",
        "documentation": "/docs",
        "version": settings.VERSION,
        "requestId": request_id(),
    }
