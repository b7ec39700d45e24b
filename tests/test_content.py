"""Tests for content validation rules.

Test Coverage:
- Required, optional and forbidden keywords (whole word, case-insensitive)
- Token budgets, including non-positive budgets
- Custom predicates and malformed predicate results
- Issue report formatting
"""

from __future__ import annotations

import pytest

from tessera.patterns.content import (
    ContentValidationRule,
    CustomCheck,
    IssueSeverity,
    format_content_issues,
    keyword_present,
    validate_content,
)


class TestKeywords:
    """Tests for keyword matching."""

    def test_case_insensitive_whole_word(self):
        assert keyword_present("Comply with hipaa rules", "HIPAA") is True
        assert keyword_present("HIPAAcompliant", "HIPAA") is False

    def test_regex_characters_are_literal(self):
        assert keyword_present("cost is a.b", "a.b") is True
        assert keyword_present("cost is axb", "a.b") is False

    def test_required_missing(self):
        result = validate_content("Hello", ContentValidationRule(required=["HIPAA", "PHI"]))
        assert result.valid is False
        assert [issue.message for issue in result.errors] == [
            'Missing required keyword "HIPAA"',
            'Missing required keyword "PHI"',
        ]

    def test_optional_missing_is_warning(self):
        result = validate_content("Hello", ContentValidationRule(optional=["FDA"]))
        assert result.valid is True
        assert result.warnings[0].severity == IssueSeverity.WARNING
        assert result.warnings[0].message == 'Recommended keyword "FDA" not found'

    def test_forbidden_present(self):
        result = validate_content("Do not Diagnose.", ContentValidationRule(forbidden=["diagnose"]))
        assert result.valid is False
        assert result.errors[0].message == 'Contains forbidden keyword "diagnose"'

    def test_blank_keywords_are_skipped(self):
        result = validate_content("x", ContentValidationRule(required=["", "  "], forbidden=[" "]))
        assert result.valid is True
        assert result.issues == []


class TestMaxTokens:
    """Tests for the token budget."""

    def test_within_budget(self):
        assert validate_content("one two three", ContentValidationRule(max_tokens=3)).valid is True

    def test_over_budget(self):
        result = validate_content("one two three four", ContentValidationRule(max_tokens=3))
        assert result.errors[0].message == "Exceeds max tokens: 4 > 3 tokens"

    @pytest.mark.parametrize("budget", [0, -5])
    def test_non_positive_budget_fails_closed(self, budget):
        result = validate_content("", ContentValidationRule(max_tokens=budget))
        assert result.valid is False
        assert "Invalid max_tokens configuration" in result.errors[0].message


class TestCustomPredicates:
    """Tests for custom predicates."""

    def test_passing_predicate(self):
        rule = ContentValidationRule(custom=[lambda text: CustomCheck(True)])
        assert validate_content("x", rule).valid is True

    def test_failing_predicate_message(self):
        rule = ContentValidationRule(custom=[lambda text: CustomCheck(False, "Needs a greeting")])
        assert validate_content("x", rule).errors[0].message == "Needs a greeting"

    def test_failing_predicate_default_message(self):
        rule = ContentValidationRule(custom=[lambda text: CustomCheck(True), lambda text: CustomCheck(False)])
        assert validate_content("x", rule).errors[0].message == "Custom validator #2 failed"

    def test_mapping_result(self):
        rule = ContentValidationRule(custom=[lambda text: {"valid": False, "message": "nope"}])
        assert validate_content("x", rule).errors[0].message == "nope"

    @pytest.mark.parametrize("returned", [None, "yes", CustomCheck("true"), {"valid": 1}])
    def test_invalid_result(self, returned):
        rule = ContentValidationRule(custom=[lambda text: returned])
        result = validate_content("x", rule)
        assert result.valid is False
        assert result.errors[0].message == "Custom validator #1 returned invalid result"

    def test_exceptions_propagate(self):
        def explode(text):
            raise RuntimeError("predicate crashed")

        with pytest.raises(RuntimeError, match="predicate crashed"):
            validate_content("x", ContentValidationRule(custom=[explode]))


class TestFormatContentIssues:
    """Tests for the issue report."""

    def test_errors_and_warnings_sections(self):
        result = validate_content(
            "Hello",
            ContentValidationRule(required=["HIPAA"], optional=["FDA"]),
        )
        report = format_content_issues("medical-rules", "rules", result.issues)
        assert report == (
            'Component "medical-rules" for key "rules" validation failed:\n'
            "\n"
            "Errors:\n"
            '  - Missing required keyword "HIPAA"\n'
            "\n"
            "Warnings:\n"
            '  - Recommended keyword "FDA" not found'
        )

    def test_issue_order(self):
        """Issues follow check order: required, optional, forbidden, budget, custom."""
        rule = ContentValidationRule(
            required=["alpha"],
            optional=["beta"],
            forbidden=["gamma"],
            max_tokens=1,
            custom=[lambda text: CustomCheck(False, "custom")],
        )
        messages = [issue.message for issue in validate_content("gamma delta", rule).issues]
        assert messages == [
            'Missing required keyword "alpha"',
            'Recommended keyword "beta" not found',
            'Contains forbidden keyword "gamma"',
            "Exceeds max tokens: 2 > 1 tokens",
            "custom",
        ]
