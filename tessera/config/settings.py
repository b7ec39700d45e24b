"""Pydantic settings for Tessera.

This module defines the TesseraSettings class that loads configuration from
environment variables and .env files using pydantic-settings.

Environment Variables:
    TESSERA_LOG_LEVEL: Logging level used by the CLI (default: INFO)
    TESSERA_TOKENIZER_ENCODING: tiktoken encoding name (default: o200k_base)
    TESSERA_DEFAULT_CURRENCY: Currency reported in cost metadata (default: USD)
    TESSERA_PREVIEW_METADATA: Print metadata headers in previews (default: true)

Usage:
    from tessera.config.settings import get_settings

    settings = get_settings()
    print(settings.tokenizer_encoding)
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# Default Constants
# =============================================================================

DEFAULT_ENCODING = "o200k_base"
"""Tokenizer used by GPT-4o class models; counts for other models are estimates."""

DEFAULT_CURRENCY = "USD"
"""Currency attached to cost metadata."""

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


# =============================================================================
# Main Settings Class
# =============================================================================


class TesseraSettings(BaseSettings):
    """Main settings class for Tessera.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        tokenizer_encoding: tiktoken encoding used by count_tokens.
        default_currency: Currency code used when a cost config omits one.
        preview_metadata: Whether CLI previews include the metadata header.
    """

    model_config = SettingsConfigDict(
        env_prefix="TESSERA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    tokenizer_encoding: str = Field(
        default=DEFAULT_ENCODING,
        min_length=1,
        description="tiktoken encoding name"
    )
    default_currency: str = Field(
        default=DEFAULT_CURRENCY,
        min_length=3,
        max_length=3,
        description="ISO currency code for cost metadata"
    )
    preview_metadata: bool = Field(
        default=True,
        description="Include metadata headers in CLI previews"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize the log level."""
        upper = v.upper()
        if upper not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(VALID_LOG_LEVELS)}")
        return upper

    @field_validator("default_currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return v.upper()

    def to_dict(self) -> dict[str, Any]:
        """Export settings as a dictionary."""
        return self.model_dump()


# =============================================================================
# Singleton Pattern
# =============================================================================

_settings_instance: Optional[TesseraSettings] = None


def get_settings() -> TesseraSettings:
    """Get the cached settings instance.

    The settings are created on first use and cached for subsequent calls.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = TesseraSettings()
    return _settings_instance


def reload_settings() -> TesseraSettings:
    """Reload settings from environment, clearing the cache.

    Primarily useful in tests after modifying environment variables.
    """
    global _settings_instance
    _settings_instance = TesseraSettings()
    return _settings_instance


def clear_settings_cache() -> None:
    """Clear the settings cache without creating a new instance."""
    global _settings_instance
    _settings_instance = None


__all__ = [
    "TesseraSettings",
    "get_settings",
    "reload_settings",
    "clear_settings_cache",
    "DEFAULT_ENCODING",
    "DEFAULT_CURRENCY",
]
