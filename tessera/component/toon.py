"""TOON encoding of structured field values.

TOON (Token-Oriented Object Notation) is a compact text form of JSON data
that language models read well and that usually costs fewer tokens than
JSON. Arrays of uniform objects become a header plus CSV-like rows:

    users[2]{id,name}:
      1,Alice
      2,Bob

Implemented rules:
    - Escape sequences (\\\\ \\" \\n \\r \\t) in quoted strings
    - Quoting of strings that would read as another type or contain the delimiter
    - Primitive arrays on one line, tabular arrays as header + rows
    - Mixed arrays as ``- item`` lists
    - Configurable delimiter, indentation and ``#`` length markers

Example:
    >>> encode({"tags": ["a", "b"]})
    'tags[2]: a,b'
    >>> encode([{"id": 1}, {"id": 2}], ToonOptions(delimiter="|"))
    '[2|]{id}:\\n  1\\n  2'
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pydantic_core import to_jsonable_python

from tessera.core.exceptions import ConfigurationError


VALID_DELIMITERS = (",", "\t", "|")

# Characters that force quoting of a string value.
_SPECIAL_CHARS = frozenset(':"\\\n\t\r[]{}')

_NUMERIC_PATTERN = re.compile(r"^-?\d+(?:\.\d+)?(?:e[+-]?\d+)?$", re.IGNORECASE)
_LEADING_ZERO_PATTERN = re.compile(r"^0\d+$")
_BARE_KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


@dataclass(frozen=True)
class ToonOptions:
    """Options for TOON output.

    Attributes:
        delimiter: Separator for array values and table cells
        indent: Spaces per nesting level
        length_marker: Prefix array lengths with ``#`` (``[#3]``)
    """

    delimiter: str = ","
    indent: int = 2
    length_marker: bool = False

    def __post_init__(self) -> None:
        if self.delimiter not in VALID_DELIMITERS:
            raise ConfigurationError(
                f"Invalid TOON delimiter {self.delimiter!r}; "
                f"expected one of {', '.join(repr(d) for d in VALID_DELIMITERS)}",
                config_key="delimiter",
            )
        if isinstance(self.indent, bool) or not isinstance(self.indent, int) or self.indent < 0:
            raise ConfigurationError(
                f"Invalid TOON indent {self.indent!r}; expected a non-negative integer",
                config_key="indent",
            )
        if not isinstance(self.length_marker, bool):
            raise ConfigurationError(
                f"Invalid TOON length_marker {self.length_marker!r}; expected a boolean",
                config_key="length_marker",
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToonOptions":
        unknown = set(data) - {"delimiter", "indent", "length_marker"}
        if unknown:
            raise ConfigurationError(
                f"Unknown TOON options: {', '.join(sorted(unknown))}",
                config_key=sorted(unknown)[0],
            )
        return cls(**data)


# =============================================================================
# Normalization
# =============================================================================


def to_plain(value: Any) -> Any:
    """Reduce a value to JSON-compatible dicts, lists and primitives.

    Serialization goes through pydantic, so anything a schema field can
    hold (models, dataclasses, enums, dates, Decimal, UUID, paths) comes out
    in its JSON form. Types pydantic does not know fall back to ``str``.
    Non-finite floats become ``None``.
    """
    return _finite(to_jsonable_python(value, fallback=str))


def _finite(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _finite(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_finite(item) for item in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


# =============================================================================
# Primitives
# =============================================================================


def _needs_quoting(value: str, delimiter: str) -> bool:
    if not value:
        return True
    if value in ("true", "false", "null"):
        return True
    if value[0] == " " or value[-1] == " " or value[0] == "-":
        return True
    if any(c in _SPECIAL_CHARS for c in value) or delimiter in value:
        return True
    return bool(_NUMERIC_PATTERN.match(value) or _LEADING_ZERO_PATTERN.match(value))


def _escape(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def _quote(value: str, delimiter: str) -> str:
    return f'"{_escape(value)}"' if _needs_quoting(value, delimiter) else value


def _key(key: Any) -> str:
    text = str(key)
    return text if _BARE_KEY_PATTERN.match(text) else f'"{_escape(text)}"'


def _primitive(value: Any, delimiter: str) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value == 0:
            return "0"
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, str):
        return _quote(value, delimiter)
    return _quote(str(value), delimiter)


def _is_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def _is_tabular(items: list) -> bool:
    if not items or not isinstance(items[0], dict) or not items[0]:
        return False
    keys = list(items[0].keys())
    return all(
        isinstance(item, dict)
        and list(item.keys()) == keys
        and all(_is_primitive(v) for v in item.values())
        for item in items
    )


# =============================================================================
# Structures
# =============================================================================


def _pad(depth: int, options: ToonOptions) -> str:
    return " " * (options.indent * depth)


def _header(key: Optional[str], length: int, options: ToonOptions, fields: Optional[list] = None) -> str:
    marker = "#" if options.length_marker else ""
    delimiter = "" if options.delimiter == "," else options.delimiter
    head = f"{_key(key) if key is not None else ''}[{marker}{length}{delimiter}]"
    if fields is not None:
        head += "{" + options.delimiter.join(_key(name) for name in fields) + "}"
    return head + ":"


def _dict_lines(obj: dict, depth: int, options: ToonOptions) -> list[str]:
    pad = _pad(depth, options)
    lines: list[str] = []
    for key, value in obj.items():
        if isinstance(value, dict):
            lines.append(f"{pad}{_key(key)}:")
            lines.extend(_dict_lines(value, depth + 1, options))
        elif isinstance(value, list):
            lines.extend(_list_lines(key, value, depth, options))
        else:
            lines.append(f"{pad}{_key(key)}: {_primitive(value, options.delimiter)}")
    return lines


def _list_lines(key: Optional[str], items: list, depth: int, options: ToonOptions) -> list[str]:
    pad = _pad(depth, options)
    delimiter = options.delimiter

    if all(_is_primitive(item) for item in items):
        header = _header(key, len(items), options)
        if not items:
            return [pad + header]
        return [f"{pad}{header} {delimiter.join(_primitive(v, delimiter) for v in items)}"]

    if _is_tabular(items):
        fields = list(items[0].keys())
        row_pad = _pad(depth + 1, options)
        lines = [pad + _header(key, len(items), options, fields)]
        lines.extend(
            row_pad + delimiter.join(_primitive(item[name], delimiter) for name in fields)
            for item in items
        )
        return lines

    item_pad = _pad(depth + 1, options)
    lines = [pad + _header(key, len(items), options)]
    for item in items:
        if isinstance(item, dict):
            nested = _dict_lines(item, depth + 2, options)
            if not nested:
                lines.append(f"{item_pad}-")
                continue
            lines.append(f"{item_pad}- {nested[0].lstrip()}")
            lines.extend(nested[1:])
        elif isinstance(item, list):
            nested = _list_lines(None, item, depth + 2, options)
            lines.append(f"{item_pad}- {nested[0].lstrip()}")
            lines.extend(nested[1:])
        else:
            lines.append(f"{item_pad}- {_primitive(item, delimiter)}")
    return lines


def encode(value: Any, options: Optional[ToonOptions] = None) -> str:
    """Encode a value as TOON.

    Args:
        value: Mapping, sequence, pydantic model or primitive.
        options: Output options; defaults to comma delimiter, 2-space indent.

    Returns:
        TOON text without a trailing newline.
    """
    options = options or ToonOptions()
    plain = to_plain(value)
    if isinstance(plain, dict):
        return "\n".join(_dict_lines(plain, 0, options))
    if isinstance(plain, list):
        return "\n".join(_list_lines(None, plain, 0, options))
    return _primitive(plain, options.delimiter)


__all__ = ["ToonOptions", "VALID_DELIMITERS", "encode", "to_plain"]
