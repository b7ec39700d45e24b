"""Tests for composition patterns, strategy patterns and structural checks."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tessera.core import ConfigurationError, PatternError, TokenLimitExceededError
from tessera.patterns import (
    COSTAR_PATTERN,
    PREBUILT_PATTERNS,
    RACE_PATTERN,
    CompositionPattern,
    ContentValidationRule,
    PatternComponent,
    check_structure,
    enforce_composition_structure,
    enforce_strategy_structure,
    enforce_token_budget,
)
from tessera.strategy import PREBUILT_STRATEGY_PATTERNS, StrategyPattern, StrategyStep


# =============================================================================
# Structural Checks
# =============================================================================


class TestCheckStructure:
    """Tests for check_structure()."""

    def test_valid_with_extra_members(self):
        report = check_structure(["role", "task"], ["role", "extra", "task"])
        assert report.valid is True
        assert report.filtered == ["role", "task"]

    def test_missing(self):
        report = check_structure(["role", "task"], ["task"])
        assert report.present is False
        assert report.missing == ["role"]

    def test_order(self):
        report = check_structure(["role", "task"], ["task", "role"])
        assert report.present is True
        assert report.ordered is False
        assert report.first_out_of_order() == "role"

    def test_swap_flips_validity(self):
        """Swapping two required members turns a valid order invalid."""
        assert check_structure(["a", "b", "c"], ["a", "b", "c"]).valid is True
        assert check_structure(["a", "b", "c"], ["a", "c", "b"]).valid is False


class TestEnforce:
    """Tests for the raising variants."""

    def test_composition_missing(self):
        with pytest.raises(PatternError, match="Missing required components: task"):
            enforce_composition_structure("demo", "basic", ["role", "task"], ["role"])

    def test_composition_order(self):
        with pytest.raises(PatternError) as exc_info:
            enforce_composition_structure("demo", "basic", ["role", "task"], ["task", "role"])
        message = str(exc_info.value)
        assert "> Expected order: role, task" in message
        assert "> Actual order: task, role" in message
        assert exc_info.value.pattern_id == "basic"

    def test_strategy_missing(self):
        with pytest.raises(PatternError) as exc_info:
            enforce_strategy_structure("s", "dcr", ["draft", "critique"], ["draft"])
        message = str(exc_info.value)
        assert "> Missing composition IDs: critique" in message
        assert "> Expected IDs from pattern: draft, critique" in message
        assert "> Actual IDs in strategy: draft" in message

    def test_strategy_order(self):
        with pytest.raises(PatternError) as exc_info:
            enforce_strategy_structure("s", "dcr", ["draft", "critique"], ["critique", "draft"])
        message = str(exc_info.value)
        assert 'Composition "draft" appears out of order' in message
        assert "> Expected order: draft → critique" in message
        assert "> Actual order: critique → draft" in message

    def test_token_budget(self):
        enforce_token_budget("p", 10, 10)
        enforce_token_budget("p", 10, None)
        with pytest.raises(TokenLimitExceededError, match=r'Pattern "p" token limit exceeded: 11 > 10'):
            enforce_token_budget("p", 11, 10)


# =============================================================================
# Composition Patterns
# =============================================================================


class TestCompositionPattern:
    """Tests for CompositionPattern validation."""

    def test_id_is_trimmed(self):
        pattern = CompositionPattern(id="  basic ", components=[PatternComponent(key="role")])
        assert pattern.id == "basic"

    def test_invalid_id(self):
        with pytest.raises(ConfigurationError):
            CompositionPattern(id="1basic", components=[PatternComponent(key="role")])

    def test_empty_components(self):
        with pytest.raises(ConfigurationError, match="at least one component"):
            CompositionPattern(id="basic", components=[])

    def test_duplicate_keys(self):
        with pytest.raises(ConfigurationError, match='Duplicate component key "role"'):
            CompositionPattern(
                id="basic",
                components=[PatternComponent(key="role"), PatternComponent(key="role")],
            )

    @pytest.mark.parametrize("budget", [0, -1])
    def test_non_positive_budget(self, budget):
        with pytest.raises(ConfigurationError, match="max_tokens"):
            CompositionPattern(id="basic", components=[PatternComponent(key="role")], max_tokens=budget)

    def test_non_positive_component_budget(self):
        with pytest.raises(ConfigurationError, match='component "rules"'):
            CompositionPattern(
                id="basic",
                components=[PatternComponent(key="rules", validation=ContentValidationRule(max_tokens=0))],
            )

    def test_empty_key(self):
        with pytest.raises(ValidationError):
            PatternComponent(key="")

    def test_lookup(self):
        assert RACE_PATTERN.keys() == ["role", "action", "context", "examples"]
        assert RACE_PATTERN.component("action").key == "action"
        assert RACE_PATTERN.component("missing") is None

    def test_prebuilt(self):
        assert set(PREBUILT_PATTERNS) >= {"RACE", "COSTAR", "CHAIN_OF_THOUGHT", "FEW_SHOT", "REACT"}
        assert COSTAR_PATTERN.keys() == ["context", "objective", "style", "tone", "audience", "response"]


# =============================================================================
# Strategy Patterns
# =============================================================================


class TestStrategyPattern:
    """Tests for StrategyPattern validation."""

    def test_steps_from_mappings(self):
        pattern = StrategyPattern(id="think-act", steps=[{"id": "think"}, {"id": " act "}])
        assert pattern.step_ids() == ["think", "act"]

    def test_step_ids_are_nfc_normalized(self):
        pattern = StrategyPattern(id="cafe", steps=[StrategyStep(id="cafe\u0301")])
        assert pattern.step_ids() == ["caf\u00e9"]

    def test_duplicate_after_normalization(self):
        with pytest.raises(ConfigurationError, match="duplicate step IDs"):
            StrategyPattern(id="cafe", steps=[{"id": "cafe\u0301"}, {"id": "caf\u00e9"}])

    def test_blank_step(self):
        with pytest.raises(ConfigurationError, match="cannot be empty"):
            StrategyPattern(id="p", steps=[{"id": "   "}])

    def test_long_step(self):
        with pytest.raises(ConfigurationError, match="255 characters or less"):
            StrategyPattern(id="p", steps=[{"id": "x" * 256}])

    def test_no_steps(self):
        with pytest.raises(ConfigurationError, match="at least one step"):
            StrategyPattern(id="p", steps=[])

    def test_invalid_id(self):
        with pytest.raises(ConfigurationError, match="strategy pattern ID"):
            StrategyPattern(id="   ", steps=[{"id": "a"}])

    def test_prebuilt(self):
        pattern = PREBUILT_STRATEGY_PATTERNS["DRAFT_CRITIQUE_REFINE"]
        assert pattern.step_ids() == ["draft", "critique", "refine"]
        assert len(PREBUILT_STRATEGY_PATTERNS["CHAIN_OF_DENSITY"].steps) == 5
