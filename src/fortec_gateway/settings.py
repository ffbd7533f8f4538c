# fortec_gateway/settings.py
import os
from pathlib import Path
from typing import Dict, List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="Fortec AI API")
    VERSION: str = Field(default="1.0.0")
    ENV: str = Field(default=os.getenv("APP_ENV", "dev"))
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")

    # upstream (Pollinations)
    TEXT_API_URL: str = "https://text.pollinations.ai"
    IMAGE_API_URL: str = "https://image.pollinations.ai"
    REFERRER: str = "fortecai.vercel.app"
    USE_ECHO_UPSTREAM: bool = False

    # text pipeline
    DEFAULT_MODEL: str = "openai"
    BASELINE_MODEL: str = "openai"
    AUDIO_MODELS: List[str] = ["openai-audio"]
    DEFAULT_VOICE: str = "alloy"
    FALLBACK_SHAPE: str = "text_json"
    PRIMARY_TIMEOUT: float = 60.0
    FALLBACK_TIMEOUT: float = 30.0
    PROBE_TIMEOUT: float = 15.0

    # image sub-path
    DEFAULT_IMAGE_MODEL: str = "stable-diffusion"
    IMAGE_MODEL_PARAMS: List[str] = ["midjourney", "dalle", "playground"]
    IMAGE_PROBE: bool = True

    # rate limiting (15 minute windows)
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    RATE_LIMIT_MAX: int = 100
    TIER_RATE_LIMITS: Dict[str, int] = {
        "free": 50,
        "standard": 200,
        "pro": 500,
        "premium": 1000,
    }

    # model catalog
    MODELS_FILE: str = str(PACKAGE_DIR / "catalog" / "models.yaml")

    model_config = SettingsConfigDict(
        env_file=".env.dev",
        extra="ignore",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


settings = Settings()
