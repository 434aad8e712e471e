"""
Frontend configuration.

Loads frontend-specific environment variables only.
Safely ignores unrelated backend environment variables.
"""

from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field


class Settings(BaseSettings):
    """
    Frontend application settings.

    Environment variables must be prefixed with:
        VETNIKO_

    Example:
        VETNIKO_API_BASE_URL=http://localhost:8000
    """

    API_BASE_URL: str = Field(
        default="http://localhost:8000",
        description="Base URL for backend API",
        min_length=1,
    )

    REQUEST_TIMEOUT_SECONDS: float = Field(
        default=90.0,
        gt=0,
        description="Timeout for backend calls (grounded answers can be slow)",
    )

    SPEECH_MAX_CHARS: int = Field(
        default=1000,
        gt=0,
        description="Maximum report length sent to speech synthesis",
    )

    STORAGE_SECRET: str = Field(default="dev-secret")

    # env_prefix prevents backend/frontend collisions;
    # extra='ignore' skips backend-only variables
    model_config = ConfigDict(
        env_file=".env",
        env_prefix="VETNIKO_",
        extra="ignore",
    )


settings = Settings()
