"""Composition module for Tessera.

Compositions arrange components into complete prompts:
- Schema composition across components
- Wrapper styles (none, xml, markdown, brackets, custom)
- The build pipeline and immutable prompt instances
"""

from tessera.composition.schema_composer import compose_schemas
from tessera.composition.wrapper import (
    WrapperName,
    WRAPPER_NAMES,
    CustomWrapper,
    WrapperStyle,
    apply_wrapper,
    validate_wrapper,
)
from tessera.composition.instance import (
    Role,
    VALID_ROLES,
    ChatMessage,
    ComponentMetadata,
    PromptMetadata,
    RenderedPart,
    PromptInstance,
)
from tessera.composition.composition import Composition, SEPARATOR, SchemaAugmenter

__all__ = [
    # Schema
    "compose_schemas",
    # Wrappers
    "WrapperName",
    "WRAPPER_NAMES",
    "CustomWrapper",
    "WrapperStyle",
    "apply_wrapper",
    "validate_wrapper",
    # Instances
    "Role",
    "VALID_ROLES",
    "ChatMessage",
    "ComponentMetadata",
    "PromptMetadata",
    "RenderedPart",
    "PromptInstance",
    # Composition
    "Composition",
    "SEPARATOR",
    "SchemaAugmenter",
]
