"""
Configuration settings for sequence-retry.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

import math

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "sequence-retry"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Retry ===
    RETRY_SCHEDULE: list[float] = [1.0, 1.0, 2.0]  # seconds, schedule[i] precedes attempt i+2

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True

    @field_validator("RETRY_SCHEDULE")
    @classmethod
    def _non_negative_delays(cls, value: list[float]) -> list[float]:
        for delay in value:
            if not math.isfinite(delay) or delay < 0:
                raise ValueError(f"retry delays must be finite and >= 0, got {delay!r}")
        return value


# Global settings instance
settings = Settings()
