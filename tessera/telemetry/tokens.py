"""Token counting and cost accounting for Tessera.

This module counts tokens with a real subword tokenizer (tiktoken) and turns
token counts into prices.

Key Components:
    - count_tokens: Token count of a text for the configured encoding
    - CostConfig: Immutable per-token pricing
    - CostEntry: Tokens and cost for one direction (input or output)
    - CostMetadata: Input/output breakdown with total and currency

Design Notes:
    - Counts come from the wrapped text, which is what a model receives.
    - Token counts are not additive: count(a + b) may differ from
      count(a) + count(b). Per-component sums are estimates.
    - The default encoding is ``o200k_base``. Counts for models that use
      other tokenizers are approximations; billing-critical callers should
      use the usage numbers reported by their provider.

Example:
    >>> count_tokens("")
    0
    >>> cost = CostConfig(input_token_price=0.000005)
    >>> cost.input_cost(10)
    5e-05
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from functools import lru_cache
from typing import Any, Optional

import tiktoken

from tessera.config import get_settings
from tessera.core.exceptions import ConfigurationError


# =============================================================================
# Token Counting
# =============================================================================


@lru_cache(maxsize=8)
def get_encoding(name: str) -> tiktoken.Encoding:
    """Load (once) and return a tiktoken encoding by name."""
    return tiktoken.get_encoding(name)


def count_tokens(text: str, encoding_name: Optional[str] = None) -> int:
    """Count the tokens of a text.

    Args:
        text: Text to tokenize.
        encoding_name: Override for the encoding from settings.

    Returns:
        Number of tokens; 0 for an empty string.
    """
    if not text:
        return 0
    name = encoding_name or get_settings().tokenizer_encoding
    # Special-token markers inside prompt text are counted as plain text.
    return len(get_encoding(name).encode(text, disallowed_special=()))


# =============================================================================
# Cost Configuration
# =============================================================================


@dataclass(frozen=True)
class CostConfig:
    """Immutable per-token pricing.

    Attributes:
        input_token_price: Price of one input token
        output_token_price: Price of one output token, reasoning included
        currency: Currency code reported in cost metadata

    Example:
        >>> CostConfig(input_token_price=0.000005, output_token_price=0.000015)
    """

    input_token_price: float
    output_token_price: Optional[float] = None
    currency: str = "USD"

    def __post_init__(self) -> None:
        """Validate prices after initialization."""
        if self.input_token_price < 0:
            raise ConfigurationError(
                f"input_token_price must be non-negative, got {self.input_token_price}",
                config_key="input_token_price",
            )
        if self.output_token_price is not None and self.output_token_price < 0:
            raise ConfigurationError(
                f"output_token_price must be non-negative, got {self.output_token_price}",
                config_key="output_token_price",
            )
        if not self.currency:
            raise ConfigurationError("currency cannot be empty", config_key="currency")

    def input_cost(self, tokens: int) -> float:
        return tokens * self.input_token_price

    def output_cost(self, tokens: int) -> Optional[float]:
        if self.output_token_price is None:
            return None
        return tokens * self.output_token_price

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CostConfig":
        """Create a CostConfig from a dictionary."""
        return cls(
            input_token_price=data["input_token_price"],
            output_token_price=data.get("output_token_price"),
            currency=data.get("currency", get_settings().default_currency),
        )


# =============================================================================
# Cost Metadata
# =============================================================================


@dataclass(frozen=True)
class CostEntry:
    """Token count and price for one direction of a model call."""

    tokens: int
    cost: float


@dataclass(frozen=True)
class CostMetadata:
    """Cost breakdown of a rendered prompt.

    Attributes:
        input: Prompt tokens and their cost
        output: Completion tokens and their cost, once known
        total: Input cost plus output cost
        currency: Currency of every amount
    """

    input: CostEntry
    total: float
    currency: str = "USD"
    output: Optional[CostEntry] = None

    @classmethod
    def for_input(cls, tokens: int, config: CostConfig) -> "CostMetadata":
        """Build the breakdown for a freshly rendered prompt."""
        cost = config.input_cost(tokens)
        return cls(input=CostEntry(tokens=tokens, cost=cost), total=cost, currency=config.currency)

    def with_output(self, tokens: int, config: CostConfig) -> "CostMetadata":
        """Return a copy that includes output usage.

        When the config has no output price the output entry is left out and
        the total stays equal to the input cost.
        """
        output_cost = config.output_cost(tokens)
        if output_cost is None:
            return replace(self, total=self.input.cost)
        output = CostEntry(tokens=tokens, cost=output_cost)
        return replace(self, output=output, total=self.input.cost + output.cost)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "input": asdict(self.input),
            "total": self.total,
            "currency": self.currency,
        }
        if self.output is not None:
            data["output"] = asdict(self.output)
        return data


# =============================================================================
# Formatting
# =============================================================================


def format_token_count(value: int) -> str:
    """Format a token count with thousands separators (``1,234``)."""
    return f"{value:,}"


def _currency_symbol(currency: str) -> str:
    return "$" if currency == "USD" else f"{currency} "


def format_price(value: float, currency: str = "USD") -> str:
    """Format an amount with six decimals (``$0.000020``)."""
    return f"{_currency_symbol(currency)}{value:.6f}"


def format_input_pricing(config: CostConfig) -> str:
    """Describe input pricing per million tokens and per token.

    Example:
        >>> format_input_pricing(CostConfig(input_token_price=0.000005))
        'Input Pricing: $5.00 / 1M tokens ($0.000005/token)'
    """
    per_million = config.input_token_price * 1_000_000
    symbol = _currency_symbol(config.currency)
    return (
        f"Input Pricing: {symbol}{per_million:.2f} / 1M tokens "
        f"({format_price(config.input_token_price, config.currency)}/token)"
    )


__all__ = [
    "get_encoding",
    "count_tokens",
    "CostConfig",
    "CostEntry",
    "CostMetadata",
    "format_token_count",
    "format_price",
    "format_input_pricing",
]
