"""Telemetry module for Tessera.

Token counting and price accounting for rendered prompts.

Key Components:
    - count_tokens: tiktoken-backed token count
    - CostConfig: Immutable per-token pricing
    - CostMetadata: Input/output cost breakdown of a prompt

Example:
    >>> from tessera.telemetry import CostConfig, CostMetadata
    >>> cost = CostMetadata.for_input(10, CostConfig(input_token_price=0.000005))
    >>> cost.total
    5e-05
"""

from tessera.telemetry.tokens import (
    count_tokens,
    get_encoding,
    CostConfig,
    CostEntry,
    CostMetadata,
    format_token_count,
    format_price,
    format_input_pricing,
)

__all__ = [
    "count_tokens",
    "get_encoding",
    "CostConfig",
    "CostEntry",
    "CostMetadata",
    "format_token_count",
    "format_price",
    "format_input_pricing",
]
