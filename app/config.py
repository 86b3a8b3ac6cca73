# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key (used for session refresh)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret; ES256 tokens are verified via JWKS"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # OpenAI / Chat Autopilot
    # -------------------------------------------------------------------------
    # A per-user key in user_profiles.openai_api_key takes precedence

    OPENAI_API_KEY: str | None = Field(
        default=None,
        description="Fallback OpenAI API key for chat autopilot"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Model used for chat autopilot replies"
    )

    CHAT_AUTOPILOT_TEMPERATURE: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for autopilot replies"
    )

    CHAT_AUTOPILOT_MAX_TOKENS: int = Field(
        default=300,
        ge=1,
        le=4096,
        description="Max tokens per autopilot reply"
    )

    # -------------------------------------------------------------------------
    # Mobile API
    # -------------------------------------------------------------------------

    MOBILE_API_KEY: str | None = Field(
        default=None,
        description="Static key expected in the x-api-key header on /api/mobile/*"
    )

    LEASE_ANNUAL_RATE: float = Field(
        default=8.9,
        ge=0.0,
        description="Annual interest rate (percent) for the lease calculator"
    )

    # -------------------------------------------------------------------------
    # Offline Sync
    # -------------------------------------------------------------------------

    APP_URL: str = Field(
        default="http://localhost:8000",
        description="Public base URL of this API (sync client target)"
    )

    LOCAL_DATABASE_URL: str = Field(
        default="sqlite:///bright-ops.db",
        description="SQLAlchemy URL for the local outbox store"
    )

    SYNC_BATCH_SIZE: int = Field(default=100, ge=1, le=1000)

    SYNC_MAX_RETRIES: int = Field(default=3, ge=1, le=20)

    SYNC_BASE_DELAY_MS: int = Field(
        default=1000,
        ge=0,
        description="Base backoff delay; doubled per previous attempt"
    )

    NETWORK_CHECK_INTERVAL_MS: int = Field(default=5000, ge=100)

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing tokens"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Treat VAR= as unset so defaults apply
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://ops.brightaudio.com" -> ["http://localhost:3000", "https://ops.brightaudio.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def sync_api_url(self) -> str:
        """Endpoint the outbox sync client posts to."""
        return f"{self.APP_URL.rstrip('/')}/api/sync/changes"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Parses .env and validates once per process.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
