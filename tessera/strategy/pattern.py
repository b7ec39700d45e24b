"""Strategy patterns.

A StrategyPattern lists the composition ids a strategy must contain and the
order they must run in. Unlike composition patterns it carries no content
rules.

Step ids are trimmed and NFC-normalized, so ``"cafe\\u0301"`` and
``"caf\\u00e9"`` are the same step.

Key Components:
    - StrategyStep: One required step id with description
    - StrategyPattern: Ordered steps with a validated id
    - Prebuilt patterns: draft-critique-refine, react, chain-of-density,
      research-outline-write-edit, analysis-hypothesis-test
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from tessera.core.exceptions import ConfigurationError
from tessera.core.identifiers import find_duplicates, normalize_pattern_id, normalize_step_id


class StrategyStep(BaseModel):
    """A composition id required by a strategy pattern."""

    model_config = ConfigDict(frozen=True)

    id: str
    description: Optional[str] = None


class StrategyPattern(BaseModel):
    """Ordered composition ids a strategy must follow.

    Attributes:
        id: Pattern identifier; surrounding whitespace is trimmed
        steps: Required steps in required order
        description: Purpose of the pattern

    Raises:
        ConfigurationError: On a malformed id, no steps, a blank or overlong
            step id, or duplicate step ids.

    Example:
        >>> pattern = StrategyPattern(
        ...     id="think-act",
        ...     steps=[{"id": "think"}, {"id": "act"}],
        ... )
        >>> pattern.step_ids()
        ['think', 'act']
    """

    model_config = ConfigDict(frozen=True)

    id: str
    steps: tuple[StrategyStep, ...]
    description: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_steps(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        pattern_id = str(data.get("id", "")).strip()
        steps = []
        for step in data.get("steps") or ():
            if isinstance(step, StrategyStep):
                step_id, description = step.id, step.description
            elif isinstance(step, Mapping):
                step_id, description = step.get("id"), step.get("description")
            else:
                raise ConfigurationError(
                    f'Strategy pattern "{pattern_id}" has invalid step {step!r}.\n'
                    "> Steps must be StrategyStep objects or mappings with an id.",
                    config_key=pattern_id,
                )
            steps.append(StrategyStep(id=normalize_step_id(step_id, pattern_id), description=description))
        return {**data, "steps": steps}

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: Any) -> str:
        return normalize_pattern_id(v, "strategy pattern ID")

    @model_validator(mode="after")
    def validate_steps(self) -> "StrategyPattern":
        if not self.steps:
            raise ConfigurationError(
                f'Strategy pattern "{self.id}" must have at least one step.',
                config_key=self.id,
            )
        duplicates = find_duplicates(self.step_ids())
        if duplicates:
            raise ConfigurationError(
                f'Strategy pattern "{self.id}" has duplicate step IDs.\n'
                f"> Duplicate IDs: {', '.join(duplicates)}",
                config_key=self.id,
            )
        return self

    def step_ids(self) -> list[str]:
        return [step.id for step in self.steps]


# =============================================================================
# Prebuilt Strategy Patterns
# =============================================================================

DRAFT_CRITIQUE_REFINE_PATTERN = StrategyPattern(
    id="draft-critique-refine",
    description="Iterative content refinement through draft, critique, and refine steps",
    steps=[
        StrategyStep(id="draft", description="Initial content generation"),
        StrategyStep(id="critique", description="Critical evaluation of draft"),
        StrategyStep(id="refine", description="Final polished version based on critique"),
    ],
)

REACT_STRATEGY_PATTERN = StrategyPattern(
    id="react",
    description="Reasoning and Acting pattern with thought, action, and observation",
    steps=[
        StrategyStep(id="thought", description="Reasoning step - think about the problem"),
        StrategyStep(id="action", description="Action to take based on reasoning"),
        StrategyStep(id="observation", description="Observation of action result"),
    ],
)

CHAIN_OF_DENSITY_PATTERN = StrategyPattern(
    id="chain-of-density",
    description="Iterative summarization with increasing density",
    steps=[
        StrategyStep(id="initial", description="Initial verbose summary"),
        StrategyStep(id="compress-1", description="First compression pass"),
        StrategyStep(id="compress-2", description="Second compression pass"),
        StrategyStep(id="compress-3", description="Third compression pass"),
        StrategyStep(id="final", description="Final dense summary"),
    ],
)

RESEARCH_OUTLINE_WRITE_EDIT_PATTERN = StrategyPattern(
    id="research-outline-write-edit",
    description="Complete content creation pipeline from research to final edit",
    steps=[
        StrategyStep(id="research", description="Gather and analyze information"),
        StrategyStep(id="outline", description="Structure the content"),
        StrategyStep(id="write", description="Create initial draft"),
        StrategyStep(id="edit", description="Polish and refine"),
    ],
)

ANALYSIS_HYPOTHESIS_TEST_PATTERN = StrategyPattern(
    id="analysis-hypothesis-test",
    description="Scientific method approach to problem-solving",
    steps=[
        StrategyStep(id="analysis", description="Analyze the problem and gather data"),
        StrategyStep(id="hypothesis", description="Generate hypothesis"),
        StrategyStep(id="test", description="Test hypothesis"),
        StrategyStep(id="conclusion", description="Draw conclusions from test results"),
    ],
)

PREBUILT_STRATEGY_PATTERNS: dict[str, StrategyPattern] = {
    "DRAFT_CRITIQUE_REFINE": DRAFT_CRITIQUE_REFINE_PATTERN,
    "REACT": REACT_STRATEGY_PATTERN,
    "CHAIN_OF_DENSITY": CHAIN_OF_DENSITY_PATTERN,
    "RESEARCH_OUTLINE_WRITE_EDIT": RESEARCH_OUTLINE_WRITE_EDIT_PATTERN,
    "ANALYSIS_HYPOTHESIS_TEST": ANALYSIS_HYPOTHESIS_TEST_PATTERN,
}


__all__ = [
    "StrategyStep",
    "StrategyPattern",
    "DRAFT_CRITIQUE_REFINE_PATTERN",
    "REACT_STRATEGY_PATTERN",
    "CHAIN_OF_DENSITY_PATTERN",
    "RESEARCH_OUTLINE_WRITE_EDIT_PATTERN",
    "ANALYSIS_HYPOTHESIS_TEST_PATTERN",
    "PREBUILT_STRATEGY_PATTERNS",
]
