"""Tests for the TOON encoder and its options."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest
from pydantic import BaseModel

from tessera.component.toon import ToonOptions, encode, to_plain
from tessera.core import ConfigurationError


class User(BaseModel):
    id: int
    name: str


# =============================================================================
# Options
# =============================================================================


class TestToonOptions:
    """Tests for ToonOptions validation."""

    def test_defaults(self):
        options = ToonOptions()
        assert options.delimiter == ","
        assert options.indent == 2
        assert options.length_marker is False

    @pytest.mark.parametrize("delimiter", [";", " ", ""])
    def test_invalid_delimiter(self, delimiter):
        with pytest.raises(ConfigurationError, match="delimiter"):
            ToonOptions(delimiter=delimiter)

    @pytest.mark.parametrize("indent", [-1, 1.5, True])
    def test_invalid_indent(self, indent):
        with pytest.raises(ConfigurationError, match="indent"):
            ToonOptions(indent=indent)

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ConfigurationError, match="Unknown TOON options"):
            ToonOptions.from_dict({"delimiter": ",", "colour": "red"})


# =============================================================================
# Encoding
# =============================================================================


class TestEncode:
    """Tests for encode()."""

    def test_tabular_array(self):
        """Uniform objects become a header plus one row per item."""
        text = encode([{"id": 1, "name": "Ada"}, {"id": 2, "name": "Bob"}])
        assert text == "[2]{id,name}:\n  1,Ada\n  2,Bob"

    def test_keyed_tabular_array(self):
        text = encode({"users": [{"id": 1, "name": "Ada"}]})
        assert text == "users[1]{id,name}:\n  1,Ada"

    def test_primitive_array_is_inline(self):
        assert encode({"tags": ["a", "b", "c"]}) == "tags[3]: a,b,c"

    def test_nested_object(self):
        text = encode({"user": {"name": "Ada", "active": True}})
        assert text == "user:\n  name: Ada\n  active: true"

    def test_mixed_array_uses_list_items(self):
        text = encode({"items": [1, {"a": 1}]})
        assert text == "items[2]:\n  - 1\n  - a: 1"

    def test_strings_that_look_like_other_types_are_quoted(self):
        text = encode({"values": ["true", "42", "", "a:b"]})
        assert text == 'values[4]: "true","42","","a:b"'

    def test_custom_delimiter_appears_in_header(self):
        options = ToonOptions(delimiter="|")
        text = encode([{"id": 1, "name": "Ada"}, {"id": 2, "name": "Bob"}], options)
        assert text == "[2|]{id|name}:\n  1|Ada\n  2|Bob"

    def test_length_marker(self):
        assert encode({"tags": ["a"]}, ToonOptions(length_marker=True)) == "tags[#1]: a"

    def test_indent(self):
        assert encode({"user": {"name": "Ada"}}, ToonOptions(indent=4)) == "user:\n    name: Ada"

    def test_pydantic_models(self):
        assert encode([User(id=1, name="Ada")]) == "[1]{id,name}:\n  1,Ada"

    def test_empty_array(self):
        assert encode({"tags": []}) == "tags[0]:"


class TestToPlain:
    """Tests for to_plain()."""

    def test_dates_and_non_finite_floats(self):
        assert to_plain({"day": date(2024, 1, 2), "x": float("nan")}) == {"day": "2024-01-02", "x": None}

    def test_tuples_become_lists(self):
        assert to_plain((1, (2, 3))) == [1, [2, 3]]

    def test_decimal_and_uuid(self):
        owner = UUID("12345678-1234-5678-1234-567812345678")
        assert to_plain({"owner": owner, "prices": [Decimal("1.5")]}) == {
            "owner": "12345678-1234-5678-1234-567812345678",
            "prices": ["1.5"],
        }

    def test_unknown_types_fall_back_to_str(self):
        class Opaque:
            def __str__(self):
                return "opaque"

        assert to_plain({"x": Opaque()}) == {"x": "opaque"}

    def test_models_are_dumped(self):
        assert to_plain([User(id=1, name="Ada")]) == [{"id": 1, "name": "Ada"}]
