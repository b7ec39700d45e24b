"""Rendered prompt instances.

A PromptInstance is the immutable result of one Composition.build call. It
exposes the prompt as a single string, as role-tagged chat messages and as
metadata (token counts, echoed input, optimizer statistics, cost).

Key Components:
    - ChatMessage: ``{role, content}`` pair for chat APIs
    - ComponentMetadata: Per-component tokens, cost and optimizer stats
    - PromptMetadata: Totals, echoed input, components and cost
    - PromptInstance: String view, message view, metadata, cost update
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Literal, Optional

from tessera.component.optimizer import OptimizationMetadata
from tessera.core.exceptions import CostConfigurationError
from tessera.telemetry.tokens import CostConfig, CostMetadata

logger = logging.getLogger(__name__)


Role = Literal["system", "user", "assistant"]

VALID_ROLES: tuple[str, ...] = ("system", "user", "assistant")


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ComponentMetadata:
    """Metadata of one rendered component.

    Attributes:
        key: Component key
        tokens: Tokens of the wrapped component text
        cost: ``tokens * input_token_price`` when the composition is priced
        optimization: Optimizer statistics when the component has an optimizer
    """

    key: str
    tokens: int
    cost: Optional[float] = None
    optimization: Optional[OptimizationMetadata] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"key": self.key, "tokens": self.tokens}
        if self.cost is not None:
            data["cost"] = self.cost
        if self.optimization is not None:
            data["optimization"] = self.optimization.to_dict()
        return data


@dataclass(frozen=True)
class PromptMetadata:
    """Metadata of a rendered prompt.

    Attributes:
        id: Composition id
        token_count: Sum of the per-component token counts
        input_data: Validated input the prompt was built from
        components: Per-component metadata in declared order
        cost: Cost breakdown when the composition is priced
    """

    id: str
    token_count: int
    input_data: dict[str, Any] = field(default_factory=dict)
    components: list[ComponentMetadata] = field(default_factory=list)
    cost: Optional[CostMetadata] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "token_count": self.token_count,
            "input_data": self.input_data,
            "components": [component.to_dict() for component in self.components],
        }
        if self.cost is not None:
            data["cost"] = self.cost.to_dict()
        return data


@dataclass(frozen=True)
class RenderedPart:
    """Rendered text of one component, with and without wrapper markup."""

    key: str
    raw: str
    wrapped: str


class PromptInstance:
    """Immutable result of a composition build.

    Example:
        >>> prompt = composition.build({"role": "doctor", "task": "diagnose"})
        >>> prompt.as_string()
        >>> prompt.as_messages()
        >>> prompt.metadata.token_count
    """

    __slots__ = ("_parts", "_text", "_roles", "_metadata", "_cost_config")

    def __init__(
        self,
        parts: list[RenderedPart],
        metadata: PromptMetadata,
        roles: Optional[dict[str, Role]] = None,
        cost_config: Optional[CostConfig] = None,
        separator: str = "\n",
    ) -> None:
        self._parts = tuple(parts)
        self._text = separator.join(part.wrapped for part in parts)
        self._roles = dict(roles) if roles is not None else None
        self._metadata = metadata
        self._cost_config = cost_config

    @property
    def metadata(self) -> PromptMetadata:
        return self._metadata

    def as_string(self) -> str:
        return self._text

    def __str__(self) -> str:
        return self._text

    def as_messages(self) -> list[ChatMessage]:
        """Role-tagged messages for chat APIs.

        Without a role map the whole prompt is one system message. With a
        role map each mapped component becomes one message in declared
        order; unmapped components are left out.
        """
        if self._roles is None:
            return [ChatMessage(role="system", content=self._text)]
        return [
            ChatMessage(role=self._roles[part.key], content=part.wrapped)
            for part in self._parts
            if part.key in self._roles
        ]

    def update_cost(self, output_tokens: int) -> PromptMetadata:
        """Return metadata that includes the cost of the model's output.

        Output tokens include any reasoning tokens billed as output. The
        instance itself is not modified.

        Args:
            output_tokens: Completion tokens reported by the provider.

        Returns:
            A new PromptMetadata with output cost and updated total.

        Raises:
            CostConfigurationError: If the composition has no cost config.
        """
        if self._cost_config is None or self._metadata.cost is None:
            raise CostConfigurationError(
                f'Cannot update cost: no cost config provided in composition "{self._metadata.id}"',
                composition_id=self._metadata.id,
            )
        if self._cost_config.output_token_price is None:
            logger.warning(
                f"Output tokens provided but no output_token_price configured "
                f'for composition "{self._metadata.id}"'
            )
        cost = self._metadata.cost.with_output(output_tokens, self._cost_config)
        return replace(self._metadata, cost=cost)


__all__ = [
    "Role",
    "VALID_ROLES",
    "ChatMessage",
    "ComponentMetadata",
    "PromptMetadata",
    "RenderedPart",
    "PromptInstance",
]
