"""Static versus dynamic token estimation.

The tokens of a rendered prompt split into a static part, contributed by
template text that never changes, and a dynamic part, contributed by the
input values. The static part is measured by rebuilding the composition with
every field replaced by a minimal schema-valid placeholder.

Token counts are not additive over concatenation, so both parts are
estimates; the static part is capped at the total and the dynamic part is
never negative.

Key Components:
    - TokenSplit: Total, static and dynamic token counts
    - resolve_static_value / build_static_data: Minimal placeholder input
    - resolve_placeholder_value / apply_missing_placeholders: Readable
      ``{{field}}`` stand-ins for fields a fixture does not provide
    - estimate_split: Measure the split for one composition and input
    - format_cost_breakdown: Priced report lines for a split
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from tessera.composition.composition import Composition
from tessera.schema.fields import (
    NO_OPTION,
    FieldSchema,
    adapter_accepts,
    declared_option,
    field_adapter,
    model_type,
)
from tessera.telemetry.tokens import CostConfig, format_input_pricing, format_price, format_token_count

logger = logging.getLogger(__name__)


MAX_PLACEHOLDER_DEPTH = 3
"""Nested models deeper than this get no generated object candidate."""


def placeholder_text(name: str) -> str:
    return "{{" + name + "}}"


def has_placeholder(value: Any) -> bool:
    """Whether a value (or anything nested in it) contains ``{{...}}`` text."""
    if isinstance(value, str):
        return "{{" in value and "}}" in value
    if isinstance(value, Mapping):
        return any(has_placeholder(item) for item in value.values())
    if isinstance(value, (list, tuple)):
        return any(has_placeholder(item) for item in value)
    return False


@dataclass(frozen=True)
class TokenSplit:
    """Token counts of a rendered prompt.

    Attributes:
        total: Tokens of the real rendering
        static: Tokens of the placeholder rendering, at most ``total``
        dynamic: ``total - static``, at least 0
    """

    total: int
    static: int
    dynamic: int

    @classmethod
    def from_counts(cls, total: int, static: int) -> "TokenSplit":
        static = max(0, min(static, total))
        return cls(total=total, static=static, dynamic=max(total - static, 0))


# =============================================================================
# Placeholder Resolution
# =============================================================================


def _option_and_default(annotation: Any, default: Any) -> list[Any]:
    candidates = []
    option = declared_option(annotation)
    if option is not NO_OPTION:
        candidates.append(option)
    if isinstance(default, FieldInfo):
        if not default.is_required():
            candidates.append(default.get_default(call_default_factory=True))
    elif default is not ...:
        candidates.append(default)
    return candidates


def _model_object(
    model: Optional[type[BaseModel]],
    name: str,
    depth: int,
    resolve: Callable[[str, Any, Any, int], Any],
) -> Optional[dict[str, Any]]:
    if model is None or depth > MAX_PLACEHOLDER_DEPTH:
        return None
    return {
        child: resolve(f"{name}.{child}", info.annotation, info, depth + 1)
        for child, info in model.model_fields.items()
        if info.is_required()
    }


def _first_accepted(annotation: Any, default: Any, candidates: Sequence[Any], fallback: Any) -> Any:
    adapter = field_adapter(annotation, default)
    for candidate in candidates:
        if adapter_accepts(adapter, candidate):
            return candidate
    return fallback


def resolve_static_value(name: str, annotation: Any, default: Any = ..., depth: int = 0) -> Any:
    """Minimal schema-valid value for a field.

    Candidates in order: declared option (first Literal or Enum member),
    default, ``{{name}}``, ``[]``, ``""``, an object of minimal required
    fields for model types, ``0``, ``False``, ``None``, ``{}``. The first
    one the field accepts wins; ``""`` when none does.
    """
    candidates = _option_and_default(annotation, default)
    candidates += [placeholder_text(name), [], ""]
    nested = _model_object(model_type(annotation), name, depth, resolve_static_value)
    if nested is not None:
        candidates.append(nested)
    candidates += [0, False, None, {}]
    return _first_accepted(annotation, default, candidates, "")


def resolve_placeholder_value(name: str, annotation: Any, default: Any = ..., depth: int = 0) -> Any:
    """Readable stand-in for a field missing from a fixture.

    Candidates in order: declared option, default, ``{{name}}``,
    ``["{{name}}"]``, an object of placeholder fields for model types,
    ``[]``, ``0``, ``False``, ``None``, ``{}``. Falls back to ``{{name}}``.
    """
    text = placeholder_text(name)
    candidates = _option_and_default(annotation, default)
    candidates += [text, [text]]
    nested = _model_object(model_type(annotation), name, depth, resolve_placeholder_value)
    if nested is not None:
        candidates.append(nested)
    candidates += [[], 0, False, None, {}]
    return _first_accepted(annotation, default, candidates, text)


def build_static_data(schema: FieldSchema) -> dict[str, Any]:
    """Placeholder input replacing every field of a schema."""
    return {
        name: resolve_static_value(name, *schema.fields[name])
        for name in schema.names()
    }


def apply_missing_placeholders(
    schema: FieldSchema,
    data: Mapping[str, Any],
    missing: Sequence[str],
) -> dict[str, Any]:
    """Copy of ``data`` with placeholders for the missing fields."""
    filled = dict(data)
    for name in missing:
        filled[name] = resolve_placeholder_value(name, *schema.fields[name])
    return filled


# =============================================================================
# Estimation
# =============================================================================


def estimate_split(
    composition: Composition,
    data: Mapping[str, Any],
    context: Optional[Mapping[str, Any]] = None,
) -> TokenSplit:
    """Measure static and dynamic tokens of a composition build.

    Errors from the real build propagate. A failure to build the placeholder
    variant is logged and counted as zero static tokens.
    """
    total = composition.build(data, context).metadata.token_count
    try:
        static = composition.build(build_static_data(composition.schema), context).metadata.token_count
    except Exception as exc:
        logger.warning(
            f'Static estimate for composition "{composition.id}" failed, '
            f"counting all {total} tokens as dynamic: {exc}"
        )
        static = 0
    return TokenSplit.from_counts(total, static)


def format_cost_breakdown(split: TokenSplit, cost: CostConfig) -> list[str]:
    """Report lines for a priced split.

    Example:
        >>> format_cost_breakdown(TokenSplit.from_counts(10, 4), CostConfig(0.000005))
        ['Input Pricing: $5.00 / 1M tokens ($0.000005/token)',
         'Static: 4 tokens / $0.000020',
         'Dynamic: 6 tokens / $0.000030',
         'Total: 10 tokens / $0.000050']
    """
    def line(label: str, tokens: int) -> str:
        return f"{label}: {format_token_count(tokens)} tokens / {format_price(cost.input_cost(tokens), cost.currency)}"

    return [
        format_input_pricing(cost),
        line("Static", split.static),
        line("Dynamic", split.dynamic),
        line("Total", split.total),
    ]


__all__ = [
    "MAX_PLACEHOLDER_DEPTH",
    "TokenSplit",
    "placeholder_text",
    "has_placeholder",
    "resolve_static_value",
    "resolve_placeholder_value",
    "build_static_data",
    "apply_missing_placeholders",
    "estimate_split",
    "format_cost_breakdown",
]
