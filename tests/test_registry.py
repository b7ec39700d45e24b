"""Tests for the composition registry."""

from __future__ import annotations

import pytest

from tessera.component import Component
from tessera.composition import Composition
from tessera.core import ConfigurationError
from tessera.registry import CompositionEntry, Registry
from tessera.telemetry import CostConfig


def _composition(composition_id: str, cost: CostConfig | None = None) -> Composition:
    component = Component(key="body", schema={"topic": str}, template="About {{topic}}")
    return Composition(id=composition_id, components=[component], cost=cost)


class TestCompositionEntry:
    """Tests for CompositionEntry validation."""

    def test_id_comes_from_composition(self):
        entry = CompositionEntry(composition=_composition("intro"))
        assert entry.id == "intro"
        assert entry.fixtures == {}

    def test_rejects_non_composition(self):
        with pytest.raises(ConfigurationError, match="must wrap a Composition"):
            CompositionEntry(composition="intro")

    def test_rejects_non_dict_fixture(self):
        with pytest.raises(ConfigurationError, match='Fixture "basic" of composition "intro" must be a dict'):
            CompositionEntry(composition=_composition("intro"), fixtures={"basic": ["topic"]})


class TestRegistry:
    """Tests for Registry construction and lookup."""

    def test_bare_compositions_are_wrapped(self):
        registry = Registry([_composition("intro"), CompositionEntry(composition=_composition("outro"))])
        assert [entry.id for entry in registry] == ["intro", "outro"]
        assert all(isinstance(entry, CompositionEntry) for entry in registry.entries)
        assert len(registry) == 2

    def test_duplicate_ids(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Registry([_composition("intro"), _composition("intro"), _composition("outro")])
        assert "> Duplicate IDs: intro" in str(exc_info.value)
        assert exc_info.value.config_key == "intro"

    def test_unsupported_entry(self):
        with pytest.raises(ConfigurationError, match="Unsupported registry entry dict"):
            Registry([{"id": "intro"}])

    def test_get(self):
        registry = Registry([_composition("intro")])
        assert registry.get("intro").id == "intro"
        assert registry.get("missing") is None

    def test_repr(self):
        assert repr(Registry([_composition("intro")])) == "Registry(compositions=['intro'])"


class TestResolveCost:
    """Tests for price resolution order."""

    ENTRY_COST = CostConfig(input_token_price=0.00001)
    COMPOSITION_COST = CostConfig(input_token_price=0.000002)
    DEFAULT_COST = CostConfig(input_token_price=0.000005)

    def test_entry_cost_wins(self):
        entry = CompositionEntry(composition=_composition("a"), cost=self.ENTRY_COST)
        registry = Registry([entry], default_cost=self.DEFAULT_COST)
        assert registry.resolve_cost(entry) is self.ENTRY_COST

    def test_composition_cost_is_not_an_entry_price(self):
        """A composition priced for build metadata still uses the registry price in previews."""
        registry = Registry([_composition("a", self.COMPOSITION_COST)], default_cost=self.DEFAULT_COST)
        assert registry.resolve_cost(registry.get("a")) is self.DEFAULT_COST

    def test_default_cost(self):
        registry = Registry([_composition("a")], default_cost=self.DEFAULT_COST)
        assert registry.resolve_cost(registry.get("a")) is self.DEFAULT_COST

    def test_no_cost(self):
        registry = Registry([_composition("a")])
        assert registry.resolve_cost(registry.get("a")) is None
