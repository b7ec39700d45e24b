"""Strategy module for Tessera.

Multi-step prompt workflows:
- StrategyPattern: required composition ids and their order
- Strategy: cursor, history and progress over a sequence of compositions
"""

from tessera.strategy.pattern import (
    StrategyStep,
    StrategyPattern,
    DRAFT_CRITIQUE_REFINE_PATTERN,
    REACT_STRATEGY_PATTERN,
    CHAIN_OF_DENSITY_PATTERN,
    RESEARCH_OUTLINE_WRITE_EDIT_PATTERN,
    ANALYSIS_HYPOTHESIS_TEST_PATTERN,
    PREBUILT_STRATEGY_PATTERNS,
)
from tessera.strategy.strategy import Strategy, StrategyHistoryEntry, StrategyProgress

__all__ = [
    # Patterns
    "StrategyStep",
    "StrategyPattern",
    "DRAFT_CRITIQUE_REFINE_PATTERN",
    "REACT_STRATEGY_PATTERN",
    "CHAIN_OF_DENSITY_PATTERN",
    "RESEARCH_OUTLINE_WRITE_EDIT_PATTERN",
    "ANALYSIS_HYPOTHESIS_TEST_PATTERN",
    "PREBUILT_STRATEGY_PATTERNS",
    # State machine
    "Strategy",
    "StrategyHistoryEntry",
    "StrategyProgress",
]
