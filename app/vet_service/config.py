"""
Application configuration.

Centralized environment-based settings using Pydantic v2.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from app.core.errors import ConfigurationError


class Settings(BaseSettings):
    # --------------------
    # Environment
    # --------------------
    ENV: str = "dev"

    # --------------------
    # CORS
    # --------------------
    ALLOWED_ORIGINS: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:8080",
            "http://127.0.0.1:8080",
        ],
        description="Allowed CORS origins for frontend",
    )

    # --------------------
    # LLM
    # --------------------
    GEMINI_API_KEY: str
    ADVICE_MODEL: str = "gemini-3.1-pro-preview"
    ADVICE_TEMPERATURE: float = Field(default=0.4, ge=0.0, le=2.0)

    # --------------------
    # Speech
    # --------------------
    SPEECH_MODEL: str = "gemini-2.5-flash-preview-tts"
    VOICE_NAME: str = "Kore"
    SPEECH_MAX_CHARS: int = Field(default=1000, gt=0)

    # --------------------
    # Observability
    # --------------------
    MLFLOW_TRACKING_URI: Optional[str] = None
    SENTRY_DSN: Optional[str] = None

    model_config = ConfigDict(
        env_file=".env",
        env_prefix="VETNIKO_",
        extra="ignore",
    )

    @field_validator("GEMINI_API_KEY")
    @classmethod
    def _require_api_key(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("GEMINI_API_KEY must not be blank")
        return value.strip()


@lru_cache
def get_settings() -> Settings:
    """
    Load settings once per process.

    Raises:
        ConfigurationError: If the Gemini credential is missing or invalid.
    """
    try:
        return Settings()
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise ConfigurationError(
            "Invalid or missing configuration: "
            + ", ".join(f"VETNIKO_{name}" for name in fields)
        ) from exc
