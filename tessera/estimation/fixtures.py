"""Fixture coverage analysis.

A fixture is a sample input used to preview a composition. It is complete
when it supplies every required field of the composition schema, partial
when it supplies some, and a placeholder fixture when it supplies none.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from tessera.schema.fields import FieldSchema


class FixtureStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class FixtureAnalysis:
    """Which schema fields a fixture provides.

    Attributes:
        status: Coverage of the required fields
        label: Short human-readable summary (``partial - 1/2``)
        required: Required field names, in schema order
        provided: Required fields present in the fixture
        missing: Required fields absent from the fixture
        optional: Fields with a default, in schema order
    """

    status: FixtureStatus
    label: str
    required: list[str] = field(default_factory=list)
    provided: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    optional: list[str] = field(default_factory=list)


def _is_provided(data: Mapping[str, Any], name: str) -> bool:
    return name in data and data[name] is not None


def analyze_fixture(schema: FieldSchema, data: Mapping[str, Any]) -> FixtureAnalysis:
    """Classify a fixture against a schema.

    A field set to None counts as missing.

    Example:
        >>> analyze_fixture(FieldSchema({"a": str, "b": str}), {"a": "x"}).label
        'partial - 1/2'
    """
    required = [name for name in schema.names() if schema.is_required(name)]
    provided = [name for name in required if _is_provided(data, name)]
    missing = [name for name in required if not _is_provided(data, name)]
    optional = [name for name in schema.names() if not schema.is_required(name)]
    total = len(required)

    if total == 0:
        status, label = FixtureStatus.COMPLETE, "complete - no required fields"
    elif not missing:
        status, label = FixtureStatus.COMPLETE, f"complete - {total}/{total}"
    elif provided:
        status, label = FixtureStatus.PARTIAL, f"partial - {len(provided)}/{total}"
    else:
        status, label = FixtureStatus.PLACEHOLDER, f"empty - 0/{total}"
    return FixtureAnalysis(status, label, required, provided, missing, optional)


__all__ = ["FixtureStatus", "FixtureAnalysis", "analyze_fixture"]
