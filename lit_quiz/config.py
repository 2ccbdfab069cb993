"""
Configuration management for the Literature Quiz Grader.

Uses Pydantic Settings for type-safe configuration loading from environment variables.
The API key is deliberately optional: a missing key is reported by the grading
gateway at call time so the quiz itself stays usable without one.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are validated at startup. An empty ``openai_api_key``
    is valid here and means "credential missing" to the grading gateway.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # LLM API Configuration
    # ==========================================================================
    openai_api_key: str = Field(
        default="",
        description="Bearer token for the chat-completion endpoint",
    )

    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL for the OpenAI-compatible API",
    )

    openai_model: str = Field(
        default="gpt-4o",
        description="Model used for grading and overall feedback",
    )

    llm_temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Temperature for LLM generation (0.0 = deterministic)",
    )

    # ==========================================================================
    # Content & Logging Configuration
    # ==========================================================================
    content_path: Path | None = Field(
        default=None,
        description="Custom quiz content bundle (JSON). Uses the packaged bundle if unset",
    )

    log_level: str = Field(
        default="WARNING",
        description="Logging level for the CLI",
    )

    @field_validator("openai_api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        """Treat a whitespace-only key as missing."""
        return v.strip()

    @field_validator("openai_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensure base URL doesn't have trailing slash."""
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the log level is one the logging module knows."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def has_credential(self) -> bool:
        """Whether an API key is configured."""
        return bool(self.openai_api_key)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.
    """
    return Settings()
