"""
Module: settings.py
Description: Library configuration using pydantic-settings.

Configures batching defaults and remote client settings from environment
variables prefixed with LISTBATCH_. Supports .env files for local development.
"""

import re
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LISTBATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="listbatch", description="Application name")
    log_level: str = Field(default="INFO", description="Logging level")

    # Remote list service settings
    site_url: str = Field(
        default="",
        description="Base URL of the remote site hosting the lists"
    )
    access_token: Optional[str] = Field(
        default=None,
        description="Bearer token sent with every batch round trip"
    )
    request_timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="HTTP timeout in seconds for one batch round trip"
    )

    # Batching settings
    default_batch_size: int = Field(
        default=100,
        ge=1,
        description="Operations per grouped transaction"
    )
    enable_concurrency: bool = Field(
        default=False,
        description="Dispatch chunks concurrently instead of in order"
    )

    # Retry settings
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries for a failed batch round trip"
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Base delay for exponential retry backoff"
    )

    @field_validator('site_url')
    @classmethod
    def validate_site_url(cls, v: str) -> str:
        """Validate site URL is empty or an HTTP(S) URL."""
        if not v:
            return v

        if not re.match(r'^https?://', v):
            raise ValueError("site_url must be a valid HTTP/HTTPS URL")

        return v.rstrip('/')

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()


# Global settings instance
settings = Settings()
