"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.constants import DEFAULT_LOG_LEVEL, MAX_WEBHOOK_BODY_BYTES


class Settings(BaseSettings):
    """Settings for the optional logging and webhook helpers.

    The decoder and accessors never read these; only ``setup_logfire`` and
    ``get_webhook_payload`` do.
    """

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL, description="Python logging level name"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for cloud logging"
    )

    # ==========================================================================
    # Webhook Limits
    # ==========================================================================

    max_webhook_body_bytes: int = Field(
        default=MAX_WEBHOOK_BODY_BYTES,
        gt=0,
        description="Largest webhook body accepted before decoding (bytes)",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
