"""Wrapper styles for rendered component text.

Fixed styles are plain string values; a CustomWrapper carries functions
that build the text placed before and after each component.

    none      -> content
    xml       -> <key>\\ncontent\\n</key>
    markdown  -> ## Key\\ncontent
    brackets  -> [KEY]\\ncontent\\n[/KEY]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional, Union

from tessera.core.exceptions import ConfigurationError


WrapperName = Literal["none", "xml", "markdown", "brackets"]

WRAPPER_NAMES: tuple[str, ...] = ("none", "xml", "markdown", "brackets")


@dataclass(frozen=True)
class CustomWrapper:
    """User-defined wrapper.

    Attributes:
        before: Builds the prefix for a component key
        after: Builds the suffix for a component key; omitted means no suffix

    Example:
        >>> CustomWrapper(before=lambda key: f"=== {key} ===\\n").wrap("role", "x")
        '=== role ===\\nx'
    """

    before: Callable[[str], str]
    after: Optional[Callable[[str], Optional[str]]] = None

    def wrap(self, key: str, content: str) -> str:
        suffix = self.after(key) if self.after is not None else None
        return self.before(key) + content + (suffix or "")


WrapperStyle = Union[WrapperName, CustomWrapper]


def validate_wrapper(style: WrapperStyle) -> WrapperStyle:
    """Check a wrapper style at construction time."""
    if isinstance(style, CustomWrapper) or style in WRAPPER_NAMES:
        return style
    raise ConfigurationError(
        f"Invalid wrapper style {style!r}; expected one of "
        f"{', '.join(WRAPPER_NAMES)} or a CustomWrapper",
        config_key="wrapper",
    )


def apply_wrapper(style: WrapperStyle, key: str, content: str) -> str:
    """Decorate component text according to a wrapper style."""
    if isinstance(style, CustomWrapper):
        return style.wrap(key, content)
    if style == "xml":
        return f"<{key}>\n{content}\n</{key}>"
    if style == "markdown":
        return f"## {key[:1].upper()}{key[1:]}\n{content}"
    if style == "brackets":
        return f"[{key.upper()}]\n{content}\n[/{key.upper()}]"
    return content


__all__ = [
    "WrapperName",
    "WRAPPER_NAMES",
    "CustomWrapper",
    "WrapperStyle",
    "validate_wrapper",
    "apply_wrapper",
]
