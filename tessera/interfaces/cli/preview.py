"""Preview generation for registry fixtures.

Renders every (composition, fixture) pair of a registry so prompt authors
can read the final text without writing calling code. Fixtures that miss
required fields are filled with ``{{field}}`` placeholders; when even the
filled fixture cannot be rendered, a short fallback summary is produced
instead of failing the whole run.

Key Components:
    - load_registry: Import a Registry from ``module:attribute`` or ``file.py:attribute``
    - Preview: One rendered preview with its status and warning
    - generate_previews: Render the selected fixtures of a registry
    - format_header: Metadata header (fixture status, fields, cost estimate)
"""

from __future__ import annotations

import importlib
import importlib.util
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from tessera.composition.composition import Composition
from tessera.core.exceptions import ConfigurationError, TesseraError
from tessera.estimation.fixtures import FixtureAnalysis, FixtureStatus, analyze_fixture
from tessera.estimation.split import (
    TokenSplit,
    apply_missing_placeholders,
    estimate_split,
    format_cost_breakdown,
    has_placeholder,
)
from tessera.registry.registry import CompositionEntry, Registry
from tessera.telemetry.tokens import CostConfig

logger = logging.getLogger(__name__)


DEFAULT_ATTRIBUTE = "registry"
PLACEHOLDER_FIXTURE = "placeholder"


# =============================================================================
# Registry Loading
# =============================================================================


def _import_target(module_ref: str) -> Any:
    path = Path(module_ref)
    if module_ref.endswith(".py") or path.is_file():
        if not path.is_file():
            raise ConfigurationError(f"Registry file not found: {module_ref}", config_key="registry")
        spec = importlib.util.spec_from_file_location(path.stem, path)
        if spec is None or spec.loader is None:
            raise ConfigurationError(f"Cannot import registry file {module_ref}", config_key="registry")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
    return importlib.import_module(module_ref)


def load_registry(target: str) -> Registry:
    """Load a Registry from ``module:attribute`` or ``path/to/file.py:attribute``.

    The attribute defaults to ``registry``. A callable attribute is called
    with no arguments and must return a Registry.

    Raises:
        ConfigurationError: If the module cannot be imported or fails while
            loading, the attribute is missing, a factory raises, or the result
            is not a Registry. Tessera errors raised while loading pass through.
    """
    module_ref, _, attribute = target.partition(":")
    attribute = attribute or DEFAULT_ATTRIBUTE
    if not module_ref:
        raise ConfigurationError(
            f'Invalid registry reference "{target}".\n> Expected module:attribute or file.py:attribute',
            config_key="registry",
        )

    try:
        module = _import_target(module_ref)
    except TesseraError:
        raise
    except ImportError as exc:
        raise ConfigurationError(f"Cannot import registry module {module_ref}: {exc}", config_key="registry") from exc
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load registry module {module_ref}: {type(exc).__name__}: {exc}",
            config_key="registry",
        ) from exc

    value = getattr(module, attribute, None)
    if value is None:
        raise ConfigurationError(
            f'Registry module {module_ref} has no attribute "{attribute}"',
            config_key="registry",
        )
    if callable(value) and not isinstance(value, Registry):
        try:
            value = value()
        except TesseraError:
            raise
        except Exception as exc:
            raise ConfigurationError(
                f"Registry factory {target} failed: {type(exc).__name__}: {exc}",
                config_key="registry",
            ) from exc
    if not isinstance(value, Registry):
        raise ConfigurationError(
            f"{target} is a {type(value).__name__}, expected Registry",
            config_key="registry",
        )
    return value


# =============================================================================
# Preview Rendering
# =============================================================================


@dataclass(frozen=True)
class Preview:
    """A rendered fixture.

    Attributes:
        composition_id: Composition that was rendered
        fixture: Fixture name
        content: Header (if enabled) followed by the prompt or fallback text
        analysis: Fixture coverage
        warning: Short note for partial and placeholder fixtures
        split: Token estimate, only for complete fixtures that rendered
    """

    composition_id: str
    fixture: str
    content: str
    analysis: FixtureAnalysis
    warning: Optional[str] = None
    split: Optional[TokenSplit] = None

    @property
    def filename(self) -> str:
        return f"{self.composition_id}_{self.fixture}.txt"


def format_fallback_preview(data: Mapping[str, Any], reason: Optional[str] = None) -> str:
    lines = ["Preview generated with placeholder fallback."]
    if reason:
        lines.append(f"Reason: {reason}")
    placeholders = [(key, value) for key, value in data.items() if has_placeholder(value)]
    if placeholders:
        lines.append("Placeholders:")
        for key, value in placeholders:
            lines.append(f"- {key}: {json.dumps(value, ensure_ascii=False, default=str)}")
    return "\n".join(lines)


def format_header(
    composition_id: str,
    fixture: str,
    analysis: FixtureAnalysis,
    source: Mapping[str, Any],
    split: Optional[TokenSplit] = None,
    cost: Optional[CostConfig] = None,
) -> str:
    """Metadata block printed above a preview.

    Example:
        ---
        Composition ID: summarize
        Fixture: basic (complete - 1/1)
        Schema Fields:
          ✓ text (required)

        Estimated Input Cost:
          Input Pricing: $5.00 / 1M tokens ($0.000005/token)
          Static: 4 tokens / $0.000020
          Dynamic: 6 tokens / $0.000030
          Total: 10 tokens / $0.000050
        ---
    """
    lines = ["---", f"Composition ID: {composition_id}", f"Fixture: {fixture} ({analysis.label})"]

    fields = []
    for name in analysis.required:
        if name in analysis.provided:
            fields.append(f"  ✓ {name} (required)")
        else:
            fields.append(f"  ✗ {name} (required) → placeholder")
    for name in analysis.optional:
        if name in source:
            fields.append(f"  ✓ {name} (optional)")
        else:
            fields.append(f"  ○ {name} (optional) → not provided")
    if fields:
        lines.append("Schema Fields:")
        lines.extend(fields)

    if split is not None:
        if cost is not None:
            lines.extend(["", "Estimated Input Cost:"])
            lines.extend(f"  {line}" for line in format_cost_breakdown(split, cost))
        else:
            lines.append(f"Estimated Tokens: {split.total}")

    lines.extend(["---", ""])
    return "\n".join(lines)


def _fixtures_of(entry: CompositionEntry) -> dict[str, dict[str, Any]]:
    return entry.fixtures or {PLACEHOLDER_FIXTURE: {}}


def render_fixture(
    composition: Composition,
    fixture: str,
    source: Mapping[str, Any],
    cost: Optional[CostConfig] = None,
    metadata: bool = True,
) -> Preview:
    """Render one fixture, falling back to a placeholder summary on failure."""
    analysis = analyze_fixture(composition.schema, source)

    warning = None
    if analysis.status is FixtureStatus.PARTIAL:
        warning = f"partial fixture (missing: {', '.join(analysis.missing)})"
    elif analysis.status is FixtureStatus.PLACEHOLDER:
        warning = "placeholder fixture (no inputs provided)"

    complete = analysis.status is FixtureStatus.COMPLETE
    data = dict(source) if complete else apply_missing_placeholders(composition.schema, source, analysis.missing)

    rendered = ""
    reason = None
    split = None
    try:
        rendered = composition.build(data).as_string()
        if complete:
            split = estimate_split(composition, data)
    except Exception as exc:
        reason = str(exc)
        if complete:
            logger.error(f"Failed to generate preview for {composition.id}/{fixture}: {exc}")
        else:
            logger.warning(
                f"{composition.id}/{fixture}: using fallback preview due to placeholder rendering constraints"
            )

    if not rendered:
        rendered = format_fallback_preview(data, reason)

    content = rendered
    if metadata:
        content = format_header(composition.id, fixture, analysis, source, split, cost) + rendered

    return Preview(
        composition_id=composition.id,
        fixture=fixture,
        content=content,
        analysis=analysis,
        warning=warning,
        split=split,
    )


def generate_previews(
    registry: Registry,
    composition_id: Optional[str] = None,
    fixture: Optional[str] = None,
    metadata: bool = True,
) -> list[Preview]:
    """Render the selected fixtures of a registry, in registry order.

    An entry without fixtures is rendered once as the ``placeholder``
    fixture with empty input.
    """
    previews = []
    for entry in registry:
        if composition_id and entry.id != composition_id:
            continue
        cost = registry.resolve_cost(entry)
        for name, data in _fixtures_of(entry).items():
            if fixture and name != fixture:
                continue
            previews.append(render_fixture(entry.composition, name, data, cost, metadata))
    return previews


__all__ = [
    "DEFAULT_ATTRIBUTE",
    "PLACEHOLDER_FIXTURE",
    "Preview",
    "load_registry",
    "format_fallback_preview",
    "format_header",
    "render_fixture",
    "generate_previews",
]
