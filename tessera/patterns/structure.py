"""Structural pattern checks.

A pattern names keys (for compositions) or ids (for strategies) that must be
present and must appear in a given relative order. Members that the pattern
does not name may appear anywhere and are ignored by the order check.

Key Components:
    - StructureReport: Presence and order findings for one check
    - check_structure: Compares required members with actual members
    - enforce_composition_structure / enforce_strategy_structure: Raise
      PatternError with a full description on violation
    - enforce_token_budget: Aggregate max-token check after rendering

Example:
    >>> report = check_structure(["role", "task"], ["task", "extra", "role"])
    >>> report.present, report.ordered
    (True, False)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from tessera.core.exceptions import PatternError, TokenLimitExceededError


@dataclass(frozen=True)
class StructureReport:
    """Findings of a structural check.

    Attributes:
        expected: Required members in pattern order
        actual: Members in declared order
        missing: Required members absent from actual, in pattern order
        filtered: Actual members restricted to the required ones
    """

    expected: list[str]
    actual: list[str]
    missing: list[str] = field(default_factory=list)
    filtered: list[str] = field(default_factory=list)

    @property
    def present(self) -> bool:
        return not self.missing

    @property
    def ordered(self) -> bool:
        return self.filtered == self.expected

    @property
    def valid(self) -> bool:
        return self.present and self.ordered

    def first_out_of_order(self) -> Optional[str]:
        """First required member whose position differs from the pattern."""
        for expected, found in zip(self.expected, self.filtered):
            if expected != found:
                return expected
        return None


def check_structure(required: Sequence[str], actual: Sequence[str]) -> StructureReport:
    """Check presence and relative order of required members."""
    required_set = set(required)
    actual_set = set(actual)
    return StructureReport(
        expected=list(required),
        actual=list(actual),
        missing=[member for member in required if member not in actual_set],
        filtered=[member for member in actual if member in required_set],
    )


def enforce_composition_structure(
    composition_id: str,
    pattern_id: str,
    required: Sequence[str],
    actual: Sequence[str],
) -> StructureReport:
    """Validate composition component keys against a pattern.

    Raises:
        PatternError: If required keys are missing or out of order.
    """
    report = check_structure(required, actual)
    if not report.present:
        raise PatternError(
            f'Composition "{composition_id}" does not match pattern "{pattern_id}".\n'
            f"> Missing required components: {', '.join(report.missing)}\n"
            f"> Expected keys: {', '.join(report.expected)}\n"
            f"> Actual keys: {', '.join(report.actual)}",
            pattern_id=pattern_id,
            expected=report.expected,
            actual=report.actual,
        )
    if not report.ordered:
        raise PatternError(
            f'Composition "{composition_id}" does not match pattern "{pattern_id}" required order.\n'
            f"> Expected order: {', '.join(report.expected)}\n"
            f"> Actual order: {', '.join(report.filtered)}",
            pattern_id=pattern_id,
            expected=report.expected,
            actual=report.filtered,
        )
    return report


def enforce_strategy_structure(
    strategy_id: str,
    pattern_id: str,
    required: Sequence[str],
    actual: Sequence[str],
) -> StructureReport:
    """Validate strategy composition ids against a strategy pattern.

    Raises:
        PatternError: If pattern ids are missing or out of order.
    """
    report = check_structure(required, actual)
    if not report.present:
        raise PatternError(
            f'Strategy "{strategy_id}" does not match pattern "{pattern_id}".\n'
            f"> Missing composition IDs: {', '.join(report.missing)}\n"
            f"> Expected IDs from pattern: {', '.join(report.expected)}\n"
            f"> Actual IDs in strategy: {', '.join(report.actual)}",
            pattern_id=pattern_id,
            expected=report.expected,
            actual=report.actual,
        )
    if not report.ordered:
        raise PatternError(
            f'Strategy "{strategy_id}" violates pattern "{pattern_id}" order.\n'
            f'> Composition "{report.first_out_of_order()}" appears out of order.\n'
            f"> Expected order: {' → '.join(report.expected)}\n"
            f"> Actual order: {' → '.join(report.actual)}",
            pattern_id=pattern_id,
            expected=report.expected,
            actual=report.actual,
        )
    return report


def enforce_token_budget(pattern_id: str, token_count: int, max_tokens: Optional[int]) -> None:
    """Fail when a rendered composition exceeds its pattern budget.

    Raises:
        TokenLimitExceededError: If ``token_count > max_tokens``.
    """
    if max_tokens is not None and token_count > max_tokens:
        raise TokenLimitExceededError(
            f'Pattern "{pattern_id}" token limit exceeded: {token_count} > {max_tokens}',
            token_count=token_count,
            max_tokens=max_tokens,
            pattern_id=pattern_id,
        )


__all__ = [
    "StructureReport",
    "check_structure",
    "enforce_composition_structure",
    "enforce_strategy_structure",
    "enforce_token_budget",
]
