"""
Configuration settings for the ELIZA quiz engine client.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Platform API
    # ========================================
    eliza_api_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the ELIZA platform backend",
    )
    eliza_api_token: str | None = Field(
        default=None,
        description="Bearer token sent with every request (optional)",
    )
    request_timeout_ms: int = Field(
        default=30000,
        description="Per-request timeout in milliseconds",
    )
    read_retry_attempts: int = Field(
        default=3,
        description="Attempts for read-only requests (submissions are never retried)",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # ========================================
    # Quiz & Lesson Progress
    # ========================================
    quiz_pass_threshold: int = Field(
        default=70,
        description="Summary percentage at or above which a quiz counts as passed",
    )
    video_watched_threshold: int = Field(
        default=90,
        description="Video progress percentage at which a video counts as watched",
    )
    default_practice_difficulty: Literal["easy", "standard", "hard"] = Field(
        default="standard",
        description="Difficulty offered first when a practice session starts",
    )

    # ========================================
    # Helper Methods
    # ========================================
    def has_token_configured(self) -> bool:
        """Check if an API token is configured."""
        return bool(self.eliza_api_token and self.eliza_api_token.strip())

    def get_attempt_client_config(self) -> dict[str, Any]:
        """Get AttemptClient configuration as a dictionary."""
        return {
            "api_url": self.eliza_api_url,
            "api_token": self.eliza_api_token,
            "timeout_ms": self.request_timeout_ms,
            "retry_attempts": self.read_retry_attempts,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
