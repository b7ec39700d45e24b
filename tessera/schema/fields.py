"""Field schemas for component input.

A FieldSchema is a named record of field definitions that can validate and
parse build input. Parsing is delegated to pydantic: each schema lazily
builds a model with ``create_model`` and converts pydantic's
``ValidationError`` into plain ``SchemaIssue`` records, so the rest of Tessera
never touches pydantic error objects.

Key Components:
    - SchemaIssue: One failing field (path, problem, error code)
    - SchemaParseResult: Outcome of a parse, parsed data or issues
    - FieldSchema: Field definitions plus parse and per-field checks

Field definitions follow ``pydantic.create_model`` conventions:

    - ``str``: required field of that type
    - ``(int, 3)``: optional field with a default
    - ``(str, Field(min_length=1))``: field with pydantic constraints
    - a ``BaseModel`` subclass can be turned into a schema via ``from_model``

Unknown keys in the input are dropped, never rejected. Field names that
pydantic reserves (``model_config``, other ``BaseModel`` members and names
with a leading underscore) are rejected when the schema is built.

Example:
    >>> schema = FieldSchema({"role": str, "years": (int, 0)})
    >>> result = schema.parse({"role": "doctor", "extra": True})
    >>> result.ok, result.data
    (True, {'role': 'doctor', 'years': 0})
"""

from __future__ import annotations

import enum
import types
from dataclasses import dataclass, field
from typing import Annotated, Any, Iterator, Literal, Mapping, Optional, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError, create_model
from pydantic.fields import FieldInfo

from tessera.core.exceptions import ConfigurationError


FieldDefinition = tuple[Any, Any]
"""``(annotation, default or FieldInfo)``; a default of ``...`` marks a required field."""


class _NoOption:
    """Sentinel for annotations that declare no option."""

    def __repr__(self) -> str:
        return "NO_OPTION"


NO_OPTION = _NoOption()


# =============================================================================
# Parse Results
# =============================================================================


@dataclass(frozen=True)
class SchemaIssue:
    """A single field that failed schema validation.

    Attributes:
        path: Dotted location of the field (``user.age``)
        problem: Human-readable description
        code: Machine-readable error type reported by the validator
        value: The rejected input value, when one was supplied
    """

    path: str
    problem: str
    code: str = "value_error"
    value: Any = None

    def __str__(self) -> str:
        text = f"{self.path or '(root)'}: {self.problem} ({self.code})"
        if self.value is not None:
            text += f", got {self.value!r}"
        return text


@dataclass(frozen=True)
class SchemaParseResult:
    """Outcome of parsing input against a FieldSchema."""

    ok: bool
    data: dict[str, Any] = field(default_factory=dict)
    issues: list[SchemaIssue] = field(default_factory=list)


def format_issues(issues: list[SchemaIssue], label: Optional[str] = None) -> str:
    """Render schema issues as a numbered multi-line report.

    Example:
        Validation failed for "role"
          Issue 1:
            Path: role
            Problem: Field required
            Code: missing
    """
    header = f'Validation failed for "{label}"' if label else "Validation failed"
    blocks = []
    for index, issue in enumerate(issues, start=1):
        block = f"  Issue {index}:\n    Path: {issue.path or '<root>'}\n    Problem: {issue.problem}"
        if issue.value is not None:
            block += f"\n    Value: {issue.value!r}"
        block += f"\n    Code: {issue.code}"
        blocks.append(block)
    return header + "\n" + "\n".join(blocks)


def issues_from_error(error: ValidationError) -> list[SchemaIssue]:
    """Convert a pydantic ValidationError to SchemaIssues, in error order."""
    issues = []
    for detail in error.errors():
        code = detail.get("type", "value_error")
        issues.append(
            SchemaIssue(
                path=".".join(str(part) for part in detail.get("loc", ())),
                problem=detail.get("msg", "Invalid value"),
                code=code,
                value=None if code == "missing" else detail.get("input"),
            )
        )
    return issues


# =============================================================================
# Annotation Helpers
# =============================================================================


def declared_option(annotation: Any) -> Any:
    """Return the first declared option of an annotation.

    ``Literal["a", "b"]`` gives ``"a"`` and an Enum gives its first member.
    Optional and Annotated wrappers are looked through. Annotations without
    declared options give ``NO_OPTION``.
    """
    origin = get_origin(annotation)
    if origin is Annotated:
        return declared_option(get_args(annotation)[0])
    if origin is Literal:
        options = get_args(annotation)
        return options[0] if options else NO_OPTION
    if origin is Union or origin is types.UnionType:
        for arg in get_args(annotation):
            if arg is type(None):
                continue
            option = declared_option(arg)
            if option is not NO_OPTION:
                return option
        return NO_OPTION
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        members = list(annotation)
        return members[0] if members else NO_OPTION
    return NO_OPTION


def field_adapter(annotation: Any, default: Any = ...) -> TypeAdapter:
    """Build a TypeAdapter for one field definition."""
    # Constraints such as min_length live in FieldInfo.metadata.
    if isinstance(default, FieldInfo) and default.metadata:
        annotation = Annotated[(annotation, *default.metadata)]
    return TypeAdapter(annotation)


def adapter_accepts(adapter: TypeAdapter, value: Any) -> bool:
    try:
        adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def model_type(annotation: Any) -> Optional[type[BaseModel]]:
    """Return the pydantic model behind an annotation (looking through Optional)."""
    origin = get_origin(annotation)
    if origin is Annotated:
        return model_type(get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        for arg in get_args(annotation):
            found = model_type(arg)
            if found is not None:
                return found
        return None
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    return None


def _check_field_name(name: str) -> None:
    # pydantic treats underscore names as private and reserves BaseModel members
    if name.startswith("_") or (name.startswith("model_") and hasattr(BaseModel, name)):
        raise ConfigurationError(
            f'Field name "{name}" is reserved by pydantic; rename the field',
            config_key=name,
        )


def _normalize_definition(name: str, definition: Any) -> FieldDefinition:
    _check_field_name(name)
    if isinstance(definition, FieldInfo):
        annotation = definition.annotation if definition.annotation is not None else Any
        return (annotation, definition)
    if isinstance(definition, tuple):
        if len(definition) != 2:
            raise ConfigurationError(
                f'Invalid definition for field "{name}": expected (annotation, default), '
                f"got a tuple of {len(definition)} items",
                config_key=name,
            )
        return definition
    return (definition, ...)


# =============================================================================
# Field Schema
# =============================================================================


class FieldSchema:
    """A record of named field definitions with pydantic-backed parsing.

    Schemas are treated as immutable: ``with_fields`` and ``without`` return
    new instances. The pydantic model and per-field adapters are built on
    first use and cached.

    Attributes:
        name: Model name used in pydantic error output
    """

    def __init__(self, fields: Optional[Mapping[str, Any]] = None, name: str = "FieldSchema") -> None:
        self.name = name
        self._fields: dict[str, FieldDefinition] = {
            field_name: _normalize_definition(field_name, definition)
            for field_name, definition in (fields or {}).items()
        }
        self._model: Optional[type[BaseModel]] = None
        self._adapters: dict[str, TypeAdapter] = {}

    @classmethod
    def from_model(cls, model: type[BaseModel]) -> "FieldSchema":
        """Build a schema from the fields of a pydantic model."""
        return cls(
            {name: (info.annotation, info) for name, info in model.model_fields.items()},
            name=model.__name__,
        )

    @classmethod
    def coerce(cls, schema: Any, name: str = "FieldSchema") -> "FieldSchema":
        """Accept a FieldSchema, a BaseModel subclass, a mapping or None."""
        if schema is None:
            return cls(name=name)
        if isinstance(schema, FieldSchema):
            return schema
        if isinstance(schema, type) and issubclass(schema, BaseModel):
            return cls.from_model(schema)
        if isinstance(schema, Mapping):
            return cls(schema, name=name)
        raise ConfigurationError(
            f"Unsupported schema type {type(schema).__name__}; "
            "expected FieldSchema, a pydantic model class or a mapping of field definitions",
            config_key=name,
        )

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def fields(self) -> dict[str, FieldDefinition]:
        return dict(self._fields)

    def names(self) -> list[str]:
        return list(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FieldSchema(name={self.name!r}, fields={self.names()!r})"

    def annotation(self, name: str) -> Any:
        return self._fields[name][0]

    def is_required(self, name: str) -> bool:
        default = self._fields[name][1]
        if isinstance(default, FieldInfo):
            return default.is_required()
        return default is ...

    def has_default(self, name: str) -> bool:
        return not self.is_required(name)

    def default(self, name: str) -> Any:
        """Return the default of an optional field.

        Raises:
            KeyError: If the field is required and has no default.
        """
        if self.is_required(name):
            raise KeyError(name)
        default = self._fields[name][1]
        if isinstance(default, FieldInfo):
            return default.get_default(call_default_factory=True)
        return default

    def description(self, name: str) -> Optional[str]:
        default = self._fields[name][1]
        return default.description if isinstance(default, FieldInfo) else None

    # -------------------------------------------------------------------------
    # Derivation
    # -------------------------------------------------------------------------

    def with_fields(self, fields: Mapping[str, Any], name: Optional[str] = None) -> "FieldSchema":
        """Return a copy with fields added or replaced."""
        merged: dict[str, Any] = dict(self._fields)
        merged.update(fields)
        return FieldSchema(merged, name=name or self.name)

    def without(self, *names: str) -> "FieldSchema":
        return FieldSchema(
            {key: value for key, value in self._fields.items() if key not in names},
            name=self.name,
        )

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def model(self) -> type[BaseModel]:
        """Return (building once) the pydantic model behind this schema."""
        if self._model is None:
            self._model = create_model(
                self.name,
                __config__=ConfigDict(extra="ignore", arbitrary_types_allowed=True, protected_namespaces=()),
                **self._fields,
            )
        return self._model

    def parse(self, data: Any) -> SchemaParseResult:
        """Validate and parse input.

        Args:
            data: Mapping of field values. Keys not in the schema are dropped.

        Returns:
            SchemaParseResult with parsed values for every schema field, or
            with one issue per failing field.
        """
        if not isinstance(data, Mapping):
            return SchemaParseResult(
                ok=False,
                issues=[
                    SchemaIssue(
                        path="",
                        problem=f"Expected a mapping of field values, got {type(data).__name__}",
                        code="dict_type",
                    )
                ],
            )
        try:
            instance = self.model().model_validate(dict(data))
        except ValidationError as exc:
            return SchemaParseResult(ok=False, issues=issues_from_error(exc))
        return SchemaParseResult(
            ok=True,
            data={name: getattr(instance, name) for name in self._fields},
        )

    def accepts(self, name: str, value: Any) -> bool:
        """Check whether a single value satisfies one field's rules."""
        adapter = self._adapters.get(name)
        if adapter is None:
            adapter = field_adapter(*self._fields[name])
            self._adapters[name] = adapter
        return adapter_accepts(adapter, value)


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
