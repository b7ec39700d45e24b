"""Component module for Tessera.

Components are the atomic prompt fragments:
- Component: key, schema, template, content rule, optimizer
- Templates: static ``{{placeholder}}`` text or rendering functions
- Optimizer: compact TOON encoding of structured fields
"""

from tessera.component.toon import ToonOptions, encode, to_plain
from tessera.component.template import (
    StaticTemplate,
    DynamicTemplate,
    Template,
    RenderFunction,
    as_template,
    format_value,
)
from tessera.component.optimizer import (
    OptimizerConfig,
    OptimizationMetadata,
    OptimizationResult,
    should_optimize,
    optimize_input,
)
from tessera.component.component import Component, RenderResult

__all__ = [
    # Encoding
    "ToonOptions",
    "encode",
    "to_plain",
    # Templates
    "StaticTemplate",
    "DynamicTemplate",
    "Template",
    "RenderFunction",
    "as_template",
    "format_value",
    # Optimizer
    "OptimizerConfig",
    "OptimizationMetadata",
    "OptimizationResult",
    "should_optimize",
    "optimize_input",
    # Component
    "Component",
    "RenderResult",
]
