"""
Estimation - Static/dynamic token split and fixture analysis.
"""

from tessera.estimation.fixtures import FixtureAnalysis, FixtureStatus, analyze_fixture
from tessera.estimation.split import (
    MAX_PLACEHOLDER_DEPTH,
    TokenSplit,
    apply_missing_placeholders,
    build_static_data,
    estimate_split,
    format_cost_breakdown,
    has_placeholder,
    placeholder_text,
    resolve_placeholder_value,
    resolve_static_value,
)

__all__ = [
    # Split
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
    # Fixtures
    "FixtureStatus",
    "FixtureAnalysis",
    "analyze_fixture",
]
