"""Union of component schemas.

Independently written components may reuse field names. When two components
declare the same field, the later component's definition wins and a warning
names both owners; the composition is still built.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from tessera.schema.fields import FieldSchema

logger = logging.getLogger(__name__)


def compose_schemas(components: Sequence[Any], name: str = "ComposedInput") -> FieldSchema:
    """Merge the schemas of components in declared order.

    Args:
        components: Objects with ``key`` and ``schema`` attributes.
        name: Model name of the composed schema.

    Returns:
        A FieldSchema holding every field of every component.
    """
    fields: dict[str, Any] = {}
    owners: dict[str, str] = {}

    for component in components:
        for field_name, definition in component.schema.fields.items():
            if field_name in owners:
                logger.warning(
                    f'Schema key collision: field "{field_name}" is defined by component '
                    f'"{owners[field_name]}" and component "{component.key}". '
                    f'Using the definition from "{component.key}".'
                )
            fields[field_name] = definition
            owners[field_name] = component.key

    return FieldSchema(fields, name=name)


__all__ = ["compose_schemas"]
