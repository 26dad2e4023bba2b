"""
Configuration management for the Support Desk service.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Support Desk"
    APP_VERSION: str = "0.1.0"

    # Heuristic triage + template replies instead of the chat model
    USE_DUMMY_AI: bool = False

    # Chat-completion capability
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    UPSTREAM_TIMEOUT: float = Field(default=60.0, gt=0)

    # Generation parameters
    TRIAGE_TEMPERATURE: float = 0.0
    REPLY_TEMPERATURE: float = 0.2

    # Pacing of the template stream and latency of the mock order lookup
    STREAM_CHUNK_DELAY: float = Field(default=0.04, ge=0)
    FULFILLMENT_DELAY: float = Field(default=0.15, ge=0)

    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    ALLOWED_ORIGINS: list[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {_VALID_LOG_LEVELS}, got '{v}'")
        return upper

    @property
    def mode(self) -> str:
        return "dummy" if self.USE_DUMMY_AI else "openai"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
