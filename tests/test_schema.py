"""Tests for field schemas.

Test Coverage:
- Parsing, defaults and dropping of unknown keys
- Issues for missing and mistyped fields
- Per-field acceptance checks, constraints included
- Declared options of Literal and Enum annotations
- Construction from pydantic models
- Identifier grammar shared by keys and ids
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

import pytest
from pydantic import BaseModel, Field

from tessera.core import ConfigurationError, find_duplicates, is_valid_identifier, normalize_pattern_id
from tessera.schema import NO_OPTION, FieldSchema, declared_option, format_issues, model_type


class Tone(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"


class Address(BaseModel):
    city: str
    zip_code: str = "00000"


# =============================================================================
# Parsing
# =============================================================================


class TestParse:
    """Tests for FieldSchema.parse."""

    def test_parse_valid_input(self):
        """Valid input parses to the field values."""
        schema = FieldSchema({"role": str, "years": int})
        result = schema.parse({"role": "doctor", "years": 5})
        assert result.ok is True
        assert result.data == {"role": "doctor", "years": 5}
        assert result.issues == []

    def test_unknown_keys_are_dropped(self):
        """Keys outside the schema never reach the parsed data."""
        schema = FieldSchema({"role": str})
        result = schema.parse({"role": "doctor", "extra": True})
        assert result.ok is True
        assert result.data == {"role": "doctor"}

    def test_defaults_fill_missing_optional_fields(self):
        """Optional fields take their default."""
        schema = FieldSchema({"role": str, "years": (int, 0)})
        assert schema.parse({"role": "nurse"}).data == {"role": "nurse", "years": 0}

    def test_missing_required_field_reports_issue(self):
        """A missing field produces an issue with the pydantic error type."""
        result = FieldSchema({"role": str}).parse({})
        assert result.ok is False
        assert len(result.issues) == 1
        assert result.issues[0].path == "role"
        assert result.issues[0].code == "missing"

    def test_every_invalid_field_is_reported(self):
        """All failing fields are reported, not only the first."""
        schema = FieldSchema({"role": str, "years": int})
        result = schema.parse({"years": "many"})
        assert {issue.path for issue in result.issues} == {"role", "years"}

    def test_non_mapping_input(self):
        """Input that is not a mapping fails with a root issue."""
        result = FieldSchema({"role": str}).parse(["doctor"])
        assert result.ok is False
        assert result.issues[0].path == ""
        assert result.issues[0].code == "dict_type"

    def test_empty_schema_accepts_anything(self):
        """A schema without fields parses to an empty dict."""
        assert FieldSchema().parse({"a": 1}).data == {}

    def test_invalid_definition_tuple(self):
        """A definition tuple must have exactly two items."""
        with pytest.raises(ConfigurationError):
            FieldSchema({"role": (str, "a", "b")})

    @pytest.mark.parametrize("name", ["model_config", "model_dump", "_secret", "__base__"])
    def test_reserved_field_names(self, name):
        """Names pydantic claims for itself fail when the schema is built, not at parse time."""
        with pytest.raises(ConfigurationError, match=f'Field name "{name}" is reserved') as exc_info:
            FieldSchema({name: str})
        assert exc_info.value.config_key == name

    def test_reserved_names_checked_when_extending(self):
        with pytest.raises(ConfigurationError, match="reserved"):
            FieldSchema({"role": str}).with_fields({"model_config": (dict, {})})

    def test_model_prefix_without_collision_is_allowed(self):
        assert FieldSchema({"model_name": str}).parse({"model_name": "gpt"}).data == {"model_name": "gpt"}


class TestFormatIssues:
    """Tests for the issue report."""

    def test_report_lists_each_issue(self):
        """Every issue gets a numbered block with path, problem and code."""
        result = FieldSchema({"role": str, "years": int}).parse({"years": "x"})
        report = format_issues(result.issues, 'Composition "demo"')
        assert report.startswith('Validation failed for "Composition "demo""')
        assert "Issue 1:" in report
        assert "Issue 2:" in report
        assert "Path: role" in report
        assert "Code: missing" in report
        assert "Value: 'x'" in report


# =============================================================================
# Introspection
# =============================================================================


class TestIntrospection:
    """Tests for field metadata accessors."""

    def test_required_and_default(self):
        """Required fields have no default; optional ones expose it."""
        schema = FieldSchema({"role": str, "years": (int, 3), "tags": Field(default_factory=list)})
        assert schema.is_required("role") is True
        assert schema.is_required("years") is False
        assert schema.default("years") == 3
        assert schema.default("tags") == []
        with pytest.raises(KeyError):
            schema.default("role")

    def test_with_fields_and_without(self):
        """Derived schemas leave the original untouched."""
        schema = FieldSchema({"role": str})
        extended = schema.with_fields({"task": str})
        assert extended.names() == ["role", "task"]
        assert schema.names() == ["role"]
        assert extended.without("role").names() == ["task"]

    def test_from_model(self):
        """A pydantic model becomes a schema with the same fields."""
        schema = FieldSchema.from_model(Address)
        assert schema.names() == ["city", "zip_code"]
        assert schema.is_required("city") is True
        assert schema.default("zip_code") == "00000"
        assert schema.parse({"city": "Oslo"}).data == {"city": "Oslo", "zip_code": "00000"}

    def test_coerce_rejects_unknown_types(self):
        """Only schemas, model classes, mappings and None are accepted."""
        with pytest.raises(ConfigurationError):
            FieldSchema.coerce(42)


class TestAccepts:
    """Tests for single-value checks."""

    def test_type_check(self):
        """Values are checked against the field annotation."""
        schema = FieldSchema({"count": int, "name": str})
        assert schema.accepts("count", 0) is True
        assert schema.accepts("count", []) is False
        assert schema.accepts("name", "{{name}}") is True

    def test_constraints_are_checked(self):
        """Field constraints such as min_length apply."""
        schema = FieldSchema({"name": (str, Field(min_length=12))})
        assert schema.accepts("name", "{{name}}") is False
        assert schema.accepts("name", "long enough name") is True


class TestAnnotationHelpers:
    """Tests for declared_option and model_type."""

    def test_literal_option(self):
        assert declared_option(Literal["short", "long"]) == "short"

    def test_enum_option(self):
        assert declared_option(Tone) is Tone.FORMAL

    def test_optional_literal(self):
        assert declared_option(Optional[Literal["a", "b"]]) == "a"

    def test_no_option(self):
        assert declared_option(str) is NO_OPTION

    def test_model_type(self):
        assert model_type(Address) is Address
        assert model_type(Optional[Address]) is Address
        assert model_type(str) is None


class TestIdentifiers:
    """Tests for the identifier grammar."""

    @pytest.mark.parametrize("value", ["role", "user-profile", "user_settings", "UserInfo", "a1"])
    def test_valid(self, value):
        assert is_valid_identifier(value) is True

    @pytest.mark.parametrize("value", ["", "1role", "-role", "has space", "role\n", "ròle"])
    def test_invalid(self, value):
        assert is_valid_identifier(value) is False

    def test_pattern_id_is_trimmed(self):
        assert normalize_pattern_id("  race  ") == "race"

    def test_pattern_id_separators_only(self):
        with pytest.raises(ConfigurationError, match="only separators"):
            normalize_pattern_id("---")

    def test_pattern_id_too_long(self):
        with pytest.raises(ConfigurationError, match="too long"):
            normalize_pattern_id("a" * 256)

    def test_find_duplicates(self):
        assert find_duplicates(["a", "b", "a", "c", "b", "a"]) == ["a", "b"]
