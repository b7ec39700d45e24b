"""Component templates.

A template is either static text with ``{{placeholder}}`` markers or a
rendering function. Both are modelled as explicit variants so rendering
dispatches on the variant instead of inspecting values.

Placeholder forms in static text:
    - ``{{field}}`` and ``{{input.field}}``: the validated input value
    - ``{{optimized.field}}``: the compact (TOON) encoding of the field

Substitution is a single pass: text inserted for one placeholder is never
scanned for further placeholders. Placeholders naming unknown fields are
left untouched.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from tessera.component.toon import to_plain
from tessera.core.exceptions import ConfigurationError


PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*(?:(input|optimized)\.)?([A-Za-z_][A-Za-z0-9_-]*)\s*\}\}")

RenderFunction = Callable[[Mapping[str, Any], Mapping[str, str], Optional[Mapping[str, Any]]], str]
"""``fn(input, optimized, context) -> text``"""


def format_value(value: Any) -> str:
    """Render a field value as template text.

    None renders as an empty string, booleans as ``true``/``false`` and
    structured values as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    plain = to_plain(value)
    if isinstance(plain, (dict, list)):
        return json.dumps(plain, ensure_ascii=False, separators=(",", ":"))
    return "" if plain is None else str(plain)


@dataclass(frozen=True)
class StaticTemplate:
    """Template text with ``{{placeholder}}`` markers."""

    text: str

    def placeholders(self) -> list[str]:
        """Field names referenced by the text, in first-use order."""
        names: list[str] = []
        for match in PLACEHOLDER_PATTERN.finditer(self.text):
            if match.group(2) not in names:
                names.append(match.group(2))
        return names

    def render(
        self,
        input: Mapping[str, Any],
        optimized: Mapping[str, str],
        context: Optional[Mapping[str, Any]] = None,
    ) -> str:
        def substitute(match: re.Match) -> str:
            scope, name = match.group(1), match.group(2)
            if scope == "optimized":
                return optimized[name] if name in optimized else match.group(0)
            return format_value(input[name]) if name in input else match.group(0)

        return PLACEHOLDER_PATTERN.sub(substitute, self.text)


@dataclass(frozen=True)
class DynamicTemplate:
    """Template backed by a pure function ``fn(input, optimized, context)``.

    Exceptions raised by the function propagate unchanged.
    """

    fn: RenderFunction

    def placeholders(self) -> list[str]:
        return []

    def render(
        self,
        input: Mapping[str, Any],
        optimized: Mapping[str, str],
        context: Optional[Mapping[str, Any]] = None,
    ) -> str:
        content = self.fn(input, optimized, context)
        if not isinstance(content, str):
            raise TypeError(
                f"Template function {getattr(self.fn, '__name__', self.fn)!r} "
                f"returned {type(content).__name__}, expected str"
            )
        return content


Template = Union[StaticTemplate, DynamicTemplate]


def as_template(value: Any) -> Template:
    """Coerce a string or callable into a Template variant."""
    if isinstance(value, (StaticTemplate, DynamicTemplate)):
        return value
    if isinstance(value, str):
        return StaticTemplate(value)
    if callable(value):
        return DynamicTemplate(value)
    raise ConfigurationError(
        f"Unsupported template type {type(value).__name__}; expected a string or a callable",
        config_key="template",
    )


__all__ = [
    "PLACEHOLDER_PATTERN",
    "RenderFunction",
    "StaticTemplate",
    "DynamicTemplate",
    "Template",
    "as_template",
    "format_value",
]
