"""Tessera - Composable, validated prompt engineering.

Build prompts from small, typed pieces:
- Components: schema-validated prompt fragments with static or dynamic templates
- Compositions: ordered components with wrappers, roles, patterns and cost metadata
- Patterns: structural and content rules (RACE, COSTAR, ReAct, ...)
- Strategies: multi-step prompt sequences with cursor, history and progress
- Estimation: token counts, prices and static/dynamic splits
"""

from tessera.component import Component, DynamicTemplate, OptimizerConfig, StaticTemplate, ToonOptions
from tessera.composition import ChatMessage, Composition, CustomWrapper, PromptInstance, PromptMetadata
from tessera.core import (
    ConfigurationError,
    ContentValidationError,
    CostConfigurationError,
    InputValidationError,
    PatternError,
    TesseraError,
    TokenLimitExceededError,
)
from tessera.estimation import TokenSplit, estimate_split, format_cost_breakdown
from tessera.patterns import (
    CompositionPattern,
    ContentValidationRule,
    CustomCheck,
    PatternComponent,
    PREBUILT_PATTERNS,
)
from tessera.registry import CompositionEntry, Registry
from tessera.schema import FieldSchema
from tessera.strategy import PREBUILT_STRATEGY_PATTERNS, Strategy, StrategyPattern, StrategyStep
from tessera.telemetry import CostConfig, count_tokens

__version__ = "0.1.0"

__all__ = [
    # Building blocks
    "FieldSchema",
    "Component",
    "StaticTemplate",
    "DynamicTemplate",
    "OptimizerConfig",
    "ToonOptions",
    # Compositions
    "Composition",
    "CustomWrapper",
    "PromptInstance",
    "PromptMetadata",
    "ChatMessage",
    # Patterns
    "CompositionPattern",
    "PatternComponent",
    "ContentValidationRule",
    "CustomCheck",
    "PREBUILT_PATTERNS",
    # Strategies
    "Strategy",
    "StrategyPattern",
    "StrategyStep",
    "PREBUILT_STRATEGY_PATTERNS",
    # Estimation
    "CostConfig",
    "count_tokens",
    "TokenSplit",
    "estimate_split",
    "format_cost_breakdown",
    # Registry
    "Registry",
    "CompositionEntry",
    # Errors
    "TesseraError",
    "ConfigurationError",
    "InputValidationError",
    "PatternError",
    "TokenLimitExceededError",
    "ContentValidationError",
    "CostConfigurationError",
]
