"""Composition patterns.

A CompositionPattern describes the structure a composition must follow:
which component keys are required, in what order, what content each of
them must carry and how many tokens the whole prompt may use.

Patterns are validated when they are created; a pattern that exists is
always well-formed.

Key Components:
    - PatternComponent: One required key with optional content rule
    - CompositionPattern: Ordered required keys plus aggregate budget
    - RACE_PATTERN, COSTAR_PATTERN, CHAIN_OF_THOUGHT_PATTERN,
      FEW_SHOT_PATTERN, REACT_PATTERN: Prebuilt patterns
    - PREBUILT_PATTERNS: Name to pattern lookup

Example:
    >>> pattern = CompositionPattern(
    ...     id="medical-analysis",
    ...     max_tokens=4000,
    ...     components=[
    ...         PatternComponent(key="role"),
    ...         PatternComponent(
    ...             key="rules",
    ...             validation=ContentValidationRule(required=["HIPAA"]),
    ...         ),
    ...     ],
    ... )
    >>> pattern.keys()
    ['role', 'rules']
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tessera.core.exceptions import ConfigurationError
from tessera.core.identifiers import normalize_pattern_id
from tessera.patterns.content import ContentValidationRule


class PatternComponent(BaseModel):
    """A component key required by a pattern.

    Attributes:
        key: Component key that must be present in the composition
        description: What the component is for
        validation: Content rule applied to that component's raw text
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1)
    description: Optional[str] = None
    validation: Optional[ContentValidationRule] = None


class CompositionPattern(BaseModel):
    """Structural and content requirements for a composition.

    Attributes:
        id: Pattern identifier; surrounding whitespace is trimmed
        components: Required components in required order
        description: Purpose of the pattern
        max_tokens: Budget for the whole rendered prompt

    Raises:
        ConfigurationError: On a malformed id, a non-positive budget, an
            empty component list, duplicate keys or a component rule with a
            non-positive max_tokens.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    components: tuple[PatternComponent, ...]
    description: Optional[str] = None
    max_tokens: Optional[int] = None

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: Any) -> str:
        return normalize_pattern_id(v)

    @model_validator(mode="after")
    def validate_structure(self) -> "CompositionPattern":
        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ConfigurationError(
                f'Invalid max_tokens in pattern "{self.id}": {self.max_tokens}.\n'
                "> max_tokens must be a positive number.",
                config_key=self.id,
            )

        if not self.components:
            raise ConfigurationError(
                f'Pattern "{self.id}" must have at least one component.\n'
                "> Add at least one component with a key and optional validation rules.",
                config_key=self.id,
            )

        seen: set[str] = set()
        for component in self.components:
            if component.key in seen:
                raise ConfigurationError(
                    f'Duplicate component key "{component.key}" in pattern "{self.id}".\n'
                    "> Each component in the pattern must have a unique key.",
                    config_key=component.key,
                )
            seen.add(component.key)

            rule = component.validation
            if rule is not None and rule.max_tokens is not None and rule.max_tokens <= 0:
                raise ConfigurationError(
                    f'Invalid max_tokens in component "{component.key}": {rule.max_tokens}.\n'
                    "> max_tokens must be a positive number.",
                    config_key=component.key,
                )
        return self

    def keys(self) -> list[str]:
        return [component.key for component in self.components]

    def component(self, key: str) -> Optional[PatternComponent]:
        for component in self.components:
            if component.key == key:
                return component
        return None


# =============================================================================
# Prebuilt Patterns
# =============================================================================

RACE_PATTERN = CompositionPattern(
    id="race",
    description="Role, Action, Context, Examples - A structured pattern for clear task definition",
    components=[
        PatternComponent(key="role", description="Who the model should act as"),
        PatternComponent(key="action", description="What the model should do"),
        PatternComponent(key="context", description="Background the model needs"),
        PatternComponent(key="examples", description="Sample inputs and outputs"),
    ],
)

COSTAR_PATTERN = CompositionPattern(
    id="costar",
    description="Context, Objective, Style, Tone, Audience, Response - Comprehensive prompt specification",
    components=[
        PatternComponent(key="context", description="Background information for the task"),
        PatternComponent(key="objective", description="The task the model must accomplish"),
        PatternComponent(key="style", description="Writing style to emulate"),
        PatternComponent(key="tone", description="Attitude of the response"),
        PatternComponent(key="audience", description="Who the response is written for"),
        PatternComponent(key="response", description="Format of the response"),
    ],
)

CHAIN_OF_THOUGHT_PATTERN = CompositionPattern(
    id="chain-of-thought",
    description="Step-by-step reasoning pattern for complex problem-solving",
    components=[
        PatternComponent(key="task", description="Problem to solve"),
        PatternComponent(key="reasoning", description="Instructions to reason step by step"),
        PatternComponent(key="constraints", description="Limits the answer must respect"),
    ],
)

FEW_SHOT_PATTERN = CompositionPattern(
    id="few-shot",
    description="Examples-based learning pattern for consistent outputs",
    components=[
        PatternComponent(key="instruction", description="What to do with the input"),
        PatternComponent(key="examples", description="Worked input and output pairs"),
        PatternComponent(key="task", description="The input to handle"),
    ],
)

REACT_PATTERN = CompositionPattern(
    id="react",
    description="Reasoning + Acting - Interleave reasoning and action steps",
    components=[
        PatternComponent(key="thought", description="Reasoning about the current state"),
        PatternComponent(key="action", description="Action chosen from the reasoning"),
        PatternComponent(key="observation", description="Result of the action"),
    ],
)

PREBUILT_PATTERNS: dict[str, CompositionPattern] = {
    "RACE": RACE_PATTERN,
    "COSTAR": COSTAR_PATTERN,
    "CHAIN_OF_THOUGHT": CHAIN_OF_THOUGHT_PATTERN,
    "FEW_SHOT": FEW_SHOT_PATTERN,
    "REACT": REACT_PATTERN,
}


__all__ = [
    "PatternComponent",
    "CompositionPattern",
    "RACE_PATTERN",
    "COSTAR_PATTERN",
    "CHAIN_OF_THOUGHT_PATTERN",
    "FEW_SHOT_PATTERN",
    "REACT_PATTERN",
    "PREBUILT_PATTERNS",
]
