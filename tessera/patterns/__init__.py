"""Patterns module for Tessera.

Structure and content requirements that compositions and strategies are
checked against:
- Content rules (keywords, token budgets, custom predicates)
- Structural presence and order checks
- Composition patterns, including prebuilt ones (RACE, COSTAR, ...)
"""

from tessera.patterns.content import (
    IssueSeverity,
    ContentIssue,
    CustomCheck,
    CustomPredicate,
    ContentValidationRule,
    ContentValidationResult,
    keyword_present,
    validate_content,
    format_content_issues,
)
from tessera.patterns.structure import (
    StructureReport,
    check_structure,
    enforce_composition_structure,
    enforce_strategy_structure,
    enforce_token_budget,
)
from tessera.patterns.composition_pattern import (
    PatternComponent,
    CompositionPattern,
    RACE_PATTERN,
    COSTAR_PATTERN,
    CHAIN_OF_THOUGHT_PATTERN,
    FEW_SHOT_PATTERN,
    REACT_PATTERN,
    PREBUILT_PATTERNS,
)

__all__ = [
    # Content
    "IssueSeverity",
    "ContentIssue",
    "CustomCheck",
    "CustomPredicate",
    "ContentValidationRule",
    "ContentValidationResult",
    "keyword_present",
    "validate_content",
    "format_content_issues",
    # Structure
    "StructureReport",
    "check_structure",
    "enforce_composition_structure",
    "enforce_strategy_structure",
    "enforce_token_budget",
    # Composition patterns
    "PatternComponent",
    "CompositionPattern",
    "RACE_PATTERN",
    "COSTAR_PATTERN",
    "CHAIN_OF_THOUGHT_PATTERN",
    "FEW_SHOT_PATTERN",
    "REACT_PATTERN",
    "PREBUILT_PATTERNS",
]
