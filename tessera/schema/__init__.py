"""Schema module for Tessera.

Pydantic-backed field schemas used to validate component and composition
input.
"""

from tessera.schema.fields import (
    FieldDefinition,
    NO_OPTION,
    SchemaIssue,
    SchemaParseResult,
    FieldSchema,
    declared_option,
    field_adapter,
    adapter_accepts,
    model_type,
    format_issues,
    issues_from_error,
)

__all__ = [
    "FieldDefinition",
    "NO_OPTION",
    "SchemaIssue",
    "SchemaParseResult",
    "FieldSchema",
    "declared_option",
    "field_adapter",
    "adapter_accepts",
    "model_type",
    "format_issues",
    "issues_from_error",
]
