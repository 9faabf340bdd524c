"""Application configuration via Pydantic BaseSettings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Redis (empty means the store is not configured)
    REDIS_URL: str = ""
    REDIS_MAX_RETRIES: int = 3
    REDIS_RETRY_BASE_SECONDS: float = 0.05
    REDIS_RETRY_CAP_SECONDS: float = 2.0

    # Access records for the external cleanup sweep
    TRACK_ACCESS: bool = True
    MEETING_RETENTION_DAYS: int = 30

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ALLOWED_ORIGINS: str = "*"

    # Monitoring
    SENTRY_DSN: str = ""

    # Store inspection endpoint (/api/debug)
    DEBUG_ENDPOINT_ENABLED: bool = True

    # Scheduler client
    SCHEDULER_API_URL: str = "http://localhost:8000"
    SCHEDULER_TIMEOUT: float = 10.0

    @property
    def redis_configured(self) -> bool:
        return bool(self.REDIS_URL)


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
