"""Compact encoding of structured component input.

The optimizer re-encodes structured fields (arrays of objects, nested
objects) as TOON so templates can embed them with fewer tokens, and reports
how many tokens that saves against the JSON form of the whole input.

Key Components:
    - OptimizerConfig: Which encoders run and with what options
    - OptimizationMetadata: Token counts, reduction and optimized keys
    - OptimizationResult: Original input, encoded fields and metadata
    - should_optimize / optimize_input: Field selection and encoding

Example:
    >>> result = optimize_input({"users": [{"id": 1}, {"id": 2}]}, OptimizerConfig())
    >>> result.metadata.keys_optimized
    ['users']
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from pydantic import BaseModel

from tessera.component.toon import ToonOptions, encode, to_plain
from tessera.core.exceptions import ConfigurationError
from tessera.telemetry.tokens import count_tokens


@dataclass(frozen=True)
class OptimizerConfig:
    """Optimizer configuration.

    Attributes:
        toon: ``True`` for default TOON options, a ToonOptions (or a mapping
            of its fields) for custom ones, ``False`` to disable encoding.
    """

    toon: Union[bool, ToonOptions] = True

    def __post_init__(self) -> None:
        if isinstance(self.toon, Mapping):
            object.__setattr__(self, "toon", ToonOptions.from_dict(self.toon))
        elif not isinstance(self.toon, (bool, ToonOptions)):
            raise ConfigurationError(
                f"Invalid optimizer toon setting {self.toon!r}; expected a bool or ToonOptions",
                config_key="toon",
            )

    @property
    def toon_options(self) -> ToonOptions:
        return self.toon if isinstance(self.toon, ToonOptions) else ToonOptions()

    @property
    def enabled(self) -> bool:
        return self.toon is not False


@dataclass(frozen=True)
class OptimizationMetadata:
    """Token statistics of one optimization pass.

    Attributes:
        original_tokens: Tokens of the whole input as compact JSON
        optimized_tokens: Tokens of the encoded fields joined by newlines
        reduction: Percentage saved; 0 when nothing was optimized
        keys_optimized: Field names that were encoded, in input order
    """

    original_tokens: int
    optimized_tokens: int
    reduction: float
    keys_optimized: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class OptimizationResult:
    original: dict[str, Any]
    optimized: dict[str, str]
    metadata: OptimizationMetadata


def _is_object(value: Any) -> bool:
    if value is None or isinstance(value, (str, bytes)):
        return False
    if isinstance(value, (Mapping, list, tuple, BaseModel)):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def should_optimize(value: Any) -> bool:
    """Decide whether a field value benefits from compact encoding.

    True for a non-empty list or tuple whose elements are all non-null
    objects, and for any non-null object. Strings and other primitives
    never qualify.
    """
    if isinstance(value, (list, tuple)):
        return len(value) > 0 and all(_is_object(item) for item in value)
    return _is_object(value)


def to_json(value: Any) -> str:
    """Compact JSON text of a value."""
    return json.dumps(to_plain(value), ensure_ascii=False, separators=(",", ":"))


def optimize_input(fields: Mapping[str, Any], config: OptimizerConfig) -> OptimizationResult:
    """Encode every optimizable field and measure the saving.

    Args:
        fields: Validated component input.
        config: Optimizer configuration.

    Returns:
        OptimizationResult whose ``optimized`` maps field names to TOON text.
    """
    optimized: dict[str, str] = {}
    keys_optimized: list[str] = []

    if config.enabled:
        options = config.toon_options
        for key, value in fields.items():
            if should_optimize(value):
                optimized[key] = encode(value, options)
                keys_optimized.append(key)

    original_tokens = count_tokens(to_json(dict(fields)))
    optimized_tokens = count_tokens("\n".join(optimized.values()))
    if keys_optimized and original_tokens > 0:
        reduction = (original_tokens - optimized_tokens) / original_tokens * 100
    else:
        reduction = 0.0

    return OptimizationResult(
        original=dict(fields),
        optimized=optimized,
        metadata=OptimizationMetadata(
            original_tokens=original_tokens,
            optimized_tokens=optimized_tokens,
            reduction=reduction,
            keys_optimized=keys_optimized,
        ),
    )


__all__ = [
    "OptimizerConfig",
    "OptimizationMetadata",
    "OptimizationResult",
    "should_optimize",
    "optimize_input",
    "to_json",
]
