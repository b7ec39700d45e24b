"""Prompt components.

A Component is the smallest building block of a prompt: a key, the schema of
the input it needs, a template, and optionally a content rule and an
optimizer configuration. Components are created once and rendered many
times; they hold no mutable state.

Rendering pipeline:
    1. Parse the input against the component schema (unknown keys dropped)
    2. Encode structured fields compactly when an optimizer is configured
    3. Render the template
    4. Check the component's own content rule; errors raise, warnings log

Example:
    >>> role = Component(
    ...     key="role",
    ...     schema={"role": str},
    ...     template="You are a {{role}}.",
    ... )
    >>> role.render({"role": "doctor"}).content
    'You are a doctor.'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from tessera.component.optimizer import OptimizationMetadata, OptimizerConfig, optimize_input
from tessera.component.template import RenderFunction, Template, as_template
from tessera.core.exceptions import ConfigurationError, ContentValidationError, InputValidationError
from tessera.core.identifiers import require_identifier
from tessera.patterns.content import ContentValidationRule, validate_content
from tessera.schema.fields import FieldSchema, format_issues

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """Output of Component.render.

    Attributes:
        content: Rendered text, without wrapper markup
        optimization: Optimizer statistics when an optimizer is configured
    """

    content: str
    optimization: Optional[OptimizationMetadata] = None


def _coerce_rule(rule: Any) -> Optional[ContentValidationRule]:
    if rule is None or isinstance(rule, ContentValidationRule):
        return rule
    if isinstance(rule, Mapping):
        return ContentValidationRule.model_validate(rule)
    raise ConfigurationError(
        f"Unsupported validation rule type {type(rule).__name__}",
        config_key="validation",
    )


def _coerce_optimizer(optimizer: Any) -> Optional[OptimizerConfig]:
    if optimizer is None or isinstance(optimizer, OptimizerConfig):
        return optimizer
    if isinstance(optimizer, Mapping):
        return OptimizerConfig(**optimizer)
    raise ConfigurationError(
        f"Unsupported optimizer type {type(optimizer).__name__}",
        config_key="optimizer",
    )


class Component:
    """One prompt fragment.

    Attributes:
        key: Identifier of the component within a composition
        schema: Fields the component reads
        template: StaticTemplate or DynamicTemplate
        validation: Content rule checked on every render
        optimizer: Compact encoding configuration
        description: Human-readable purpose

    Raises:
        ConfigurationError: If the key is malformed or the template, rule or
            optimizer configuration is invalid.
    """

    __slots__ = ("_key", "_schema", "_template", "_validation", "_optimizer", "_description")

    def __init__(
        self,
        key: str,
        schema: Any = None,
        template: Union[str, RenderFunction, Template] = "",
        validation: Union[ContentValidationRule, Mapping[str, Any], None] = None,
        optimizer: Union[OptimizerConfig, Mapping[str, Any], None] = None,
        description: Optional[str] = None,
    ) -> None:
        self._key = require_identifier(key, "component key")
        self._schema = FieldSchema.coerce(schema, name=f"{key}_input")
        self._template = as_template(template)
        self._validation = _coerce_rule(validation)
        self._optimizer = _coerce_optimizer(optimizer)
        self._description = description

    @property
    def key(self) -> str:
        return self._key

    @property
    def schema(self) -> FieldSchema:
        return self._schema

    @property
    def template(self) -> Template:
        return self._template

    @property
    def validation(self) -> Optional[ContentValidationRule]:
        return self._validation

    @property
    def optimizer(self) -> Optional[OptimizerConfig]:
        return self._optimizer

    @property
    def description(self) -> Optional[str]:
        return self._description

    @property
    def label(self) -> str:
        """Name used in error messages."""
        if self._description:
            return f'Component "{self._key}" ({self._description})'
        return f'Component "{self._key}"'

    def __repr__(self) -> str:
        return f"Component(key={self._key!r}, fields={self._schema.names()!r})"

    def render(
        self,
        data: Mapping[str, Any],
        context: Optional[Mapping[str, Any]] = None,
    ) -> RenderResult:
        """Render the component.

        Args:
            data: Input values; keys outside the schema are ignored.
            context: Shared values passed through to dynamic templates.

        Returns:
            RenderResult with the raw text and optimizer statistics.

        Raises:
            InputValidationError: If the data fails the component schema.
            ContentValidationError: If the text violates the component rule.
        """
        parsed = self._schema.parse(data)
        if not parsed.ok:
            raise InputValidationError(format_issues(parsed.issues, self.label), issues=parsed.issues)

        optimized: dict[str, str] = {}
        optimization: Optional[OptimizationMetadata] = None
        if self._optimizer is not None:
            result = optimize_input(parsed.data, self._optimizer)
            optimized = result.optimized
            optimization = result.metadata

        content = self._template.render(parsed.data, optimized, context)

        if self._validation is not None:
            check = validate_content(content, self._validation)
            if not check.valid:
                details = "\n".join(f"  - {issue.message}" for issue in check.errors)
                raise ContentValidationError(
                    f'Component "{self._key}" content validation failed:\n{details}',
                    component_key=self._key,
                    issues=check.issues,
                )
            for warning in check.warnings:
                logger.warning(f'Component "{self._key}" validation warning: {warning.message}')

        return RenderResult(content=content, optimization=optimization)


__all__ = ["Component", "RenderResult"]
