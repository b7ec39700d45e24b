"""
Registry - Catalog of compositions, fixtures and prices for tooling.
"""

from tessera.registry.registry import CompositionEntry, Registry, RegistryInput

__all__ = ["CompositionEntry", "Registry", "RegistryInput"]
