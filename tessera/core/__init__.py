"""Core module for Tessera.

This module contains the pieces every other module depends on:
- The exception hierarchy
- The identifier grammar for keys and ids
"""

from tessera.core.exceptions import (
    TesseraError,
    ConfigurationError,
    InputValidationError,
    PatternError,
    TokenLimitExceededError,
    ContentValidationError,
    CostConfigurationError,
)
from tessera.core.identifiers import (
    IDENTIFIER_PATTERN,
    is_valid_identifier,
    require_identifier,
    normalize_pattern_id,
    normalize_step_id,
    find_duplicates,
)

__all__ = [
    # Exceptions
    "TesseraError",
    "ConfigurationError",
    "InputValidationError",
    "PatternError",
    "TokenLimitExceededError",
    "ContentValidationError",
    "CostConfigurationError",
    # Identifiers
    "IDENTIFIER_PATTERN",
    "is_valid_identifier",
    "require_identifier",
    "normalize_pattern_id",
    "normalize_step_id",
    "find_duplicates",
]
