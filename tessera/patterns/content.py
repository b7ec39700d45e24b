"""Content validation of rendered component text.

A ContentValidationRule describes what a piece of rendered text must,
should and must not contain. Rules come from two independent places: a
component can carry its own rule, and a composition pattern can attach a
rule to the same key. Both are checked against the raw text (never the
wrapped text) and both must pass.

Key Components:
    - IssueSeverity: error (blocks a build) or warning (logged only)
    - ContentIssue: A single finding
    - CustomCheck: Result type for user-defined predicates
    - ContentValidationRule: Keywords, token budget and custom predicates
    - ContentValidationResult: Outcome with errors and warnings
    - validate_content: Applies a rule to text
    - format_content_issues: Multi-line report for error messages

Keyword matching is whole-word and case-insensitive: ``"PHI"`` matches
``"phi data"`` but not ``"philosophy"``.

Example:
    >>> rule = ContentValidationRule(required=["HIPAA"], forbidden=["diagnose"])
    >>> validate_content("We follow HIPAA.", rule).valid
    True
    >>> validate_content("We diagnose.", rule).errors[0].message
    'Missing required keyword "HIPAA"'
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from tessera.telemetry.tokens import count_tokens


class IssueSeverity(str, Enum):
    """Severity of a content issue.

    Attributes:
        ERROR: Fails validation and blocks the build
        WARNING: Reported through logging, never blocks
    """

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class ContentIssue:
    severity: IssueSeverity
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity == IssueSeverity.ERROR

    def __str__(self) -> str:
        return f"[{self.severity.value.upper()}] {self.message}"


@dataclass(frozen=True)
class CustomCheck:
    """Result of a custom content predicate.

    Attributes:
        valid: Whether the text passed
        message: Error message used when the check fails
    """

    valid: bool
    message: Optional[str] = None


CustomPredicate = Callable[[str], CustomCheck]


class ContentValidationRule(BaseModel):
    """Content requirements for one piece of rendered text.

    Attributes:
        required: Keywords that must all appear (error when missing)
        optional: Keywords that should appear (warning when missing)
        forbidden: Keywords that must not appear (error when found)
        max_tokens: Token budget for the text; values <= 0 always fail
        custom: Predicates returning CustomCheck

    Example:
        >>> ContentValidationRule(
        ...     required=["HIPAA", "PHI"],
        ...     optional=["FDA"],
        ...     forbidden=["prescribe"],
        ...     max_tokens=100,
        ...     custom=[lambda text: CustomCheck(text.count("\\n") >= 2, "Needs 3 lines")],
        ... )
    """

    model_config = ConfigDict(frozen=True)

    required: tuple[str, ...] = Field(default=(), description="Keywords that must be present")
    optional: tuple[str, ...] = Field(default=(), description="Keywords that should be present")
    forbidden: tuple[str, ...] = Field(default=(), description="Keywords that must not appear")
    max_tokens: Optional[int] = Field(default=None, description="Token budget for the text")
    custom: tuple[CustomPredicate, ...] = Field(default=(), description="Custom predicates")

    def is_empty(self) -> bool:
        return not (
            self.required or self.optional or self.forbidden or self.custom
        ) and self.max_tokens is None


@dataclass
class ContentValidationResult:
    """Outcome of validate_content.

    Attributes:
        valid: True when no error-severity issue was found
        issues: Every issue in check order (required, optional, forbidden,
            max tokens, custom)
    """

    valid: bool
    issues: list[ContentIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ContentIssue]:
        return [issue for issue in self.issues if issue.severity == IssueSeverity.ERROR]

    @property
    def warnings(self) -> list[ContentIssue]:
        return [issue for issue in self.issues if issue.severity == IssueSeverity.WARNING]


# =============================================================================
# Validation
# =============================================================================


def keyword_present(text: str, keyword: str) -> bool:
    """Whole-word, case-insensitive keyword match."""
    return re.search(rf"\b{re.escape(keyword)}\b", text, re.IGNORECASE) is not None


def _coerce_check(result: Any) -> Optional[CustomCheck]:
    if isinstance(result, CustomCheck):
        return result if isinstance(result.valid, bool) else None
    if isinstance(result, Mapping) and isinstance(result.get("valid"), bool):
        return CustomCheck(valid=result["valid"], message=result.get("message"))
    return None


def validate_content(text: str, rule: ContentValidationRule) -> ContentValidationResult:
    """Validate text against a content rule.

    Exceptions raised by custom predicates propagate to the caller.

    Args:
        text: Raw rendered text (no wrapper markup).
        rule: Rule to apply.

    Returns:
        ContentValidationResult listing every issue found.
    """
    issues: list[ContentIssue] = []

    for keyword in rule.required:
        if not keyword.strip():
            continue
        if not keyword_present(text, keyword):
            issues.append(ContentIssue(IssueSeverity.ERROR, f'Missing required keyword "{keyword}"'))

    for keyword in rule.optional:
        if not keyword.strip():
            continue
        if not keyword_present(text, keyword):
            issues.append(ContentIssue(IssueSeverity.WARNING, f'Recommended keyword "{keyword}" not found'))

    for keyword in rule.forbidden:
        if not keyword.strip():
            continue
        if keyword_present(text, keyword):
            issues.append(ContentIssue(IssueSeverity.ERROR, f'Contains forbidden keyword "{keyword}"'))

    if rule.max_tokens is not None:
        if rule.max_tokens <= 0:
            issues.append(
                ContentIssue(
                    IssueSeverity.ERROR,
                    f"Invalid max_tokens configuration: {rule.max_tokens} (must be positive)",
                )
            )
        else:
            token_count = count_tokens(text)
            if token_count > rule.max_tokens:
                issues.append(
                    ContentIssue(
                        IssueSeverity.ERROR,
                        f"Exceeds max tokens: {token_count} > {rule.max_tokens} tokens",
                    )
                )

    for index, predicate in enumerate(rule.custom, start=1):
        check = _coerce_check(predicate(text))
        if check is None:
            issues.append(ContentIssue(IssueSeverity.ERROR, f"Custom validator #{index} returned invalid result"))
        elif not check.valid:
            issues.append(ContentIssue(IssueSeverity.ERROR, check.message or f"Custom validator #{index} failed"))

    return ContentValidationResult(
        valid=not any(issue.is_error for issue in issues),
        issues=issues,
    )


def format_content_issues(component_key: str, pattern_key: str, issues: list[ContentIssue]) -> str:
    """Render issues as a multi-line failure report.

    Example:
        Component "medical-rules" for key "rules" validation failed:

        Errors:
          - Missing required keyword "HIPAA"

        Warnings:
          - Recommended keyword "FDA" not found
    """
    errors = [f"  - {issue.message}" for issue in issues if issue.severity == IssueSeverity.ERROR]
    warnings = [f"  - {issue.message}" for issue in issues if issue.severity == IssueSeverity.WARNING]

    message = f'Component "{component_key}" for key "{pattern_key}" validation failed:'
    if errors:
        message += "\n\nErrors:\n" + "\n".join(errors)
    if warnings:
        message += "\n\nWarnings:\n" + "\n".join(warnings)
    return message


__all__ = [
    "IssueSeverity",
    "ContentIssue",
    "CustomCheck",
    "CustomPredicate",
    "ContentValidationRule",
    "ContentValidationResult",
    "keyword_present",
    "validate_content",
    "format_content_issues",
]
