"""Prompt compositions.

A Composition orders components into one prompt. It merges their schemas,
checks them against an optional pattern at construction time, and renders
them on every ``build`` call. A composition keeps no mutable state: each
build returns a fresh, immutable PromptInstance or raises.

Build pipeline:
    1. Validate input against the composed schema
    2. Render each component in declared order
    3. Apply the wrapper style
    4. Check pattern content rules on the raw text (if a pattern is set)
    5. Check the pattern token budget (if a pattern is set)
    6. Assemble text, messages and metadata

Example:
    >>> composition = Composition(
    ...     id="diagnosis",
    ...     components=[role, task],
    ...     wrapper="xml",
    ...     cost=CostConfig(input_token_price=0.000005),
    ... )
    >>> prompt = composition.build({"role": "doctor", "task": "diagnose"})
    >>> print(prompt.as_string())
    <role>
    You are a doctor.
    </role>
    <task>
    Task: diagnose
    </task>
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from tessera.component.component import Component
from tessera.composition.instance import (
    VALID_ROLES,
    ComponentMetadata,
    PromptInstance,
    PromptMetadata,
    RenderedPart,
    Role,
)
from tessera.composition.schema_composer import compose_schemas
from tessera.composition.wrapper import WrapperStyle, apply_wrapper, validate_wrapper
from tessera.core.exceptions import ConfigurationError, ContentValidationError, InputValidationError
from tessera.core.identifiers import find_duplicates, require_identifier
from tessera.patterns.composition_pattern import CompositionPattern
from tessera.patterns.content import ContentIssue, format_content_issues, validate_content
from tessera.patterns.structure import enforce_composition_structure, enforce_token_budget
from tessera.schema.fields import FieldSchema, format_issues
from tessera.telemetry.tokens import CostConfig, CostMetadata, count_tokens

logger = logging.getLogger(__name__)


SEPARATOR = "\n"
"""Joins wrapped component texts."""

SchemaAugmenter = Callable[[FieldSchema], Any]


def _coerce_cost(cost: Any) -> Optional[CostConfig]:
    if cost is None or isinstance(cost, CostConfig):
        return cost
    if isinstance(cost, Mapping):
        return CostConfig.from_dict(cost)
    raise ConfigurationError(f"Unsupported cost config type {type(cost).__name__}", config_key="cost")


class Composition:
    """An ordered, validated arrangement of components.

    Attributes:
        id: Composition identifier
        components: Components in render order
        schema: Union of the component schemas (after augmentation)
        wrapper: Wrapper style applied to every component
        roles: Component key to chat role mapping
        pattern: Pattern the composition is checked against
        cost: Token pricing
        description: Human-readable purpose

    Raises:
        ConfigurationError: On a malformed id, duplicate component keys, an
            unknown wrapper style or an unknown role.
        PatternError: If the components do not satisfy the pattern.
    """

    def __init__(
        self,
        id: str,
        components: Sequence[Component],
        wrapper: WrapperStyle = "none",
        roles: Optional[Mapping[str, Role]] = None,
        pattern: Optional[CompositionPattern] = None,
        cost: Union[CostConfig, Mapping[str, Any], None] = None,
        description: Optional[str] = None,
        augment_schema: Optional[SchemaAugmenter] = None,
    ) -> None:
        self._id = require_identifier(id, "composition ID")
        self._components = tuple(components)

        duplicates = find_duplicates(component.key for component in self._components)
        if duplicates:
            raise ConfigurationError(
                f'Duplicate component key "{duplicates[0]}" in composition "{id}".\n'
                "> Each component must have a unique key.",
                config_key=duplicates[0],
            )

        self._wrapper = validate_wrapper(wrapper)

        if roles is not None:
            for key, role in roles.items():
                if role not in VALID_ROLES:
                    raise ConfigurationError(
                        f'Invalid role "{role}" for component "{key}" in composition "{id}".\n'
                        f"> Roles must be one of: {', '.join(VALID_ROLES)}",
                        config_key=key,
                    )
        self._roles = dict(roles) if roles is not None else None

        if pattern is not None:
            enforce_composition_structure(
                self._id,
                pattern.id,
                pattern.keys(),
                [component.key for component in self._components],
            )
        self._pattern = pattern

        schema = compose_schemas(self._components, name=f"{id}_input")
        if augment_schema is not None:
            schema = FieldSchema.coerce(augment_schema(schema), name=schema.name)
        self._schema = schema

        self._cost = _coerce_cost(cost)
        self._description = description

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def components(self) -> tuple[Component, ...]:
        return self._components

    @property
    def schema(self) -> FieldSchema:
        return self._schema

    @property
    def wrapper(self) -> WrapperStyle:
        return self._wrapper

    @property
    def roles(self) -> Optional[dict[str, Role]]:
        return dict(self._roles) if self._roles is not None else None

    @property
    def pattern(self) -> Optional[CompositionPattern]:
        return self._pattern

    @property
    def cost(self) -> Optional[CostConfig]:
        return self._cost

    @property
    def description(self) -> Optional[str]:
        return self._description

    def keys(self) -> list[str]:
        return [component.key for component in self._components]

    def __repr__(self) -> str:
        return f"Composition(id={self._id!r}, components={self.keys()!r})"

    # -------------------------------------------------------------------------
    # Build
    # -------------------------------------------------------------------------

    def build(
        self,
        data: Mapping[str, Any],
        context: Optional[Mapping[str, Any]] = None,
    ) -> PromptInstance:
        """Render the composition.

        Args:
            data: Input values for every component; unknown keys are dropped.
            context: Shared values passed to dynamic templates.

        Returns:
            A new PromptInstance.

        Raises:
            InputValidationError: If the data fails the composed schema.
            ContentValidationError: If a component or pattern content rule fails.
            TokenLimitExceededError: If the pattern token budget is exceeded.
        """
        parsed = self._schema.parse(data)
        if not parsed.ok:
            raise InputValidationError(
                format_issues(parsed.issues, f'Composition "{self._id}"'),
                issues=parsed.issues,
            )

        parts: list[RenderedPart] = []
        component_metadata: list[ComponentMetadata] = []
        for component in self._components:
            result = component.render(parsed.data, context)
            wrapped = apply_wrapper(self._wrapper, component.key, result.content)
            parts.append(RenderedPart(key=component.key, raw=result.content, wrapped=wrapped))

            tokens = count_tokens(wrapped)
            component_metadata.append(
                ComponentMetadata(
                    key=component.key,
                    tokens=tokens,
                    cost=self._cost.input_cost(tokens) if self._cost is not None else None,
                    optimization=result.optimization,
                )
            )

        total_tokens = sum(entry.tokens for entry in component_metadata)

        if self._pattern is not None:
            self._check_pattern_content(parts)
            enforce_token_budget(self._pattern.id, total_tokens, self._pattern.max_tokens)

        metadata = PromptMetadata(
            id=self._id,
            token_count=total_tokens,
            input_data=parsed.data,
            components=component_metadata,
            cost=CostMetadata.for_input(total_tokens, self._cost) if self._cost is not None else None,
        )
        logger.debug(
            f'Built composition "{self._id}": {len(parts)} components, {total_tokens} tokens'
        )
        return PromptInstance(parts, metadata, roles=self._roles, cost_config=self._cost, separator=SEPARATOR)

    def _check_pattern_content(self, parts: list[RenderedPart]) -> None:
        """Apply pattern content rules to raw component text.

        Every failing component is reported in one ContentValidationError.
        """
        failures: list[tuple[str, list[ContentIssue]]] = []
        for part in parts:
            pattern_component = self._pattern.component(part.key)
            if pattern_component is None or pattern_component.validation is None:
                continue
            result = validate_content(part.raw, pattern_component.validation)
            if not result.valid:
                failures.append((part.key, result.issues))
            elif result.warnings:
                logger.warning(format_content_issues(part.key, part.key, result.warnings))

        if failures:
            raise ContentValidationError(
                "\n\n".join(format_content_issues(key, key, issues) for key, issues in failures),
                component_key=failures[0][0],
                issues=[issue for _, issues in failures for issue in issues],
            )


__all__ = ["Composition", "SEPARATOR", "SchemaAugmenter"]
