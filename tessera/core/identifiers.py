"""Identifier grammar shared by components, compositions and patterns.

Keys and ids must start with a letter and contain only letters, digits,
hyphens or underscores (``user``, ``user-profile``, ``UserInfo``).
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable

from tessera.core.exceptions import ConfigurationError


IDENTIFIER_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$", re.IGNORECASE)
"""Grammar for component keys and composition, pattern and strategy ids."""

MAX_IDENTIFIER_LENGTH = 255
"""Longest accepted pattern id."""

_ONLY_SEPARATORS = re.compile(r"^[-_]+$")


def is_valid_identifier(value: str) -> bool:
    """Check a key or id against the identifier grammar."""
    return isinstance(value, str) and IDENTIFIER_PATTERN.fullmatch(value) is not None


def require_identifier(value: str, kind: str) -> str:
    """Validate a component key or composition id.

    Args:
        value: The key or id to check.
        kind: Human label used in the error ("component key", "composition ID").

    Returns:
        The unchanged value.

    Raises:
        ConfigurationError: If the value does not match the identifier grammar.
    """
    if not is_valid_identifier(value):
        raise ConfigurationError(
            f'Invalid {kind} "{value}".\n'
            "> Must start with a letter and contain only letters, numbers, hyphens, or underscores.\n"
            '> Examples: "user", "user-profile", "user_settings", "UserInfo"',
            config_key=str(value),
        )
    return value


def normalize_pattern_id(value: str, kind: str = "pattern ID") -> str:
    """Trim and validate a pattern id.

    Pattern ids get a few extra checks over plain identifiers: surrounding
    whitespace is dropped, the length is capped and separator-only ids get a
    dedicated message.

    Raises:
        ConfigurationError: If the id is empty, too long or malformed.
    """
    if not isinstance(value, str):
        raise ConfigurationError(f'Invalid {kind}: "{value}".\n> ID must be a non-empty string.')

    trimmed = value.strip()
    if not trimmed:
        raise ConfigurationError(
            f"Invalid {kind}: ID cannot be empty or whitespace only.",
            config_key=value,
        )
    if len(trimmed) > MAX_IDENTIFIER_LENGTH:
        raise ConfigurationError(
            f'Invalid {kind}: "{trimmed[:50]}..." is too long ({len(trimmed)} characters).\n'
            f"> IDs must be {MAX_IDENTIFIER_LENGTH} characters or less.",
            config_key=trimmed[:50],
        )
    if _ONLY_SEPARATORS.match(trimmed):
        raise ConfigurationError(
            f'Invalid {kind}: "{trimmed}" contains only separators.\n'
            "> IDs must contain at least one alphanumeric character.",
            config_key=trimmed,
        )
    return require_identifier(trimmed, kind)


def normalize_step_id(value: str, pattern_id: str) -> str:
    """Trim and NFC-normalize a strategy pattern step id."""
    trimmed = value.strip() if isinstance(value, str) else ""
    if not trimmed:
        raise ConfigurationError(
            f'Strategy pattern "{pattern_id}" has invalid step.\n'
            "> Step ID cannot be empty or whitespace only.",
            config_key=pattern_id,
        )
    if len(trimmed) > MAX_IDENTIFIER_LENGTH:
        raise ConfigurationError(
            f'Strategy pattern "{pattern_id}" has invalid step.\n'
            f"> Step ID must be {MAX_IDENTIFIER_LENGTH} characters or less. "
            f"Current length: {len(trimmed)}",
            config_key=pattern_id,
        )
    return unicodedata.normalize("NFC", trimmed)


def find_duplicates(values: Iterable[str]) -> list[str]:
    """Return values that occur more than once, in first-repeat order."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for value in values:
        if value in seen and value not in duplicates:
            duplicates.append(value)
        seen.add(value)
    return duplicates


__all__ = [
    "IDENTIFIER_PATTERN",
    "MAX_IDENTIFIER_LENGTH",
    "is_valid_identifier",
    "require_identifier",
    "normalize_pattern_id",
    "normalize_step_id",
    "find_duplicates",
]
