"""Composition registry.

The registry is the catalog a project hands to tooling: every composition
with its named fixtures (sample inputs for previews) and an optional price.
Fixtures are developer data only; production code passes real input to
``Composition.build``.

Example:
    >>> registry = Registry(
    ...     [
    ...         simple_prompt,
    ...         CompositionEntry(
    ...             composition=medical_diagnosis,
    ...             fixtures={"basic": {"role": "doctor", "task": "diagnose"}},
    ...         ),
    ...     ],
    ...     default_cost=CostConfig(input_token_price=0.000005),
    ... )
    >>> registry.get("medical-diagnosis").fixtures
    {'basic': {'role': 'doctor', 'task': 'diagnose'}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence, Union

from tessera.composition.composition import Composition
from tessera.core.exceptions import ConfigurationError
from tessera.core.identifiers import find_duplicates
from tessera.telemetry.tokens import CostConfig


@dataclass(frozen=True)
class CompositionEntry:
    """A registered composition.

    Attributes:
        composition: The composition
        fixtures: Named sample inputs, in preview order
        cost: Price for this composition; overrides the registry default
    """

    composition: Composition
    fixtures: dict[str, dict[str, Any]] = field(default_factory=dict)
    cost: Optional[CostConfig] = None

    def __post_init__(self) -> None:
        if not isinstance(self.composition, Composition):
            raise ConfigurationError(
                f"Registry entry must wrap a Composition, got {type(self.composition).__name__}",
                config_key="composition",
            )
        for name, data in self.fixtures.items():
            if not isinstance(data, dict):
                raise ConfigurationError(
                    f'Fixture "{name}" of composition "{self.composition.id}" must be a dict, '
                    f"got {type(data).__name__}",
                    config_key=name,
                )

    @property
    def id(self) -> str:
        return self.composition.id


RegistryInput = Union[Composition, CompositionEntry]


class Registry:
    """Ordered catalog of compositions with unique ids.

    Raises:
        ConfigurationError: On duplicate composition ids or an entry that is
            neither a Composition nor a CompositionEntry.
    """

    def __init__(
        self,
        compositions: Sequence[RegistryInput],
        default_cost: Optional[CostConfig] = None,
    ) -> None:
        entries = []
        for item in compositions:
            if isinstance(item, CompositionEntry):
                entries.append(item)
            elif isinstance(item, Composition):
                entries.append(CompositionEntry(composition=item))
            else:
                raise ConfigurationError(
                    f"Unsupported registry entry {type(item).__name__}; "
                    "expected Composition or CompositionEntry",
                    config_key="compositions",
                )

        duplicates = find_duplicates(entry.id for entry in entries)
        if duplicates:
            raise ConfigurationError(
                "Registry contains duplicate composition IDs.\n"
                f"> Duplicate IDs: {', '.join(duplicates)}\n"
                "> All composition IDs must be unique within the registry.",
                config_key=duplicates[0],
            )

        self._entries = tuple(entries)
        self._default_cost = default_cost

    @property
    def entries(self) -> tuple[CompositionEntry, ...]:
        return self._entries

    @property
    def default_cost(self) -> Optional[CostConfig]:
        return self._default_cost

    def get(self, composition_id: str) -> Optional[CompositionEntry]:
        for entry in self._entries:
            if entry.id == composition_id:
                return entry
        return None

    def resolve_cost(self, entry: CompositionEntry) -> Optional[CostConfig]:
        """Price for an entry: its own, then the registry default, then none."""
        if entry.cost is not None:
            return entry.cost
        return self._default_cost

    def __iter__(self) -> Iterator[CompositionEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Registry(compositions={[entry.id for entry in self._entries]!r})"


__all__ = ["CompositionEntry", "Registry", "RegistryInput"]
