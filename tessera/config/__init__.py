"""Configuration module for Tessera.

Usage:
    from tessera.config import get_settings

    settings = get_settings()
    print(settings.tokenizer_encoding)
"""

from tessera.config.settings import (
    TesseraSettings,
    get_settings,
    reload_settings,
    clear_settings_cache,
    DEFAULT_ENCODING,
    DEFAULT_CURRENCY,
)

__all__ = [
    "TesseraSettings",
    "get_settings",
    "reload_settings",
    "clear_settings_cache",
    "DEFAULT_ENCODING",
    "DEFAULT_CURRENCY",
]
