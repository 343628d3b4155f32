"""Tests for dot-path parameter resolution."""

import json
from decimal import Decimal

import pytest

from hookfire.parameters import (
    JSONNumber,
    decode_json,
    encode_json,
    extract_parameter_as_string,
    get_parameter,
    replace_parameter,
    stringify,
)


@pytest.fixture
def push_payload():
    """A trimmed GitHub push payload."""
    return {
        "ref": "refs/heads/main",
        "repository": {"name": "hookfire", "owner": {"login": "octocat"}},
        "commits": [
            {"id": "a1", "author": {"name": "Ada"}},
            {"id": "b2", "author": {"name": "Grace"}},
        ],
        "forced": False,
        "size": 2,
    }


# ---------------------------------------------------------------------------
# get_parameter
# ---------------------------------------------------------------------------


class TestGetParameter:
    """Test path lookups."""

    def test_nested_mapping(self):
        assert get_parameter("a.b", {"a": {"b": 1}}) == (1, True)

    def test_top_level_key(self, push_payload):
        assert get_parameter("ref", push_payload) == ("refs/heads/main", True)

    def test_deep_path(self, push_payload):
        assert get_parameter("repository.owner.login", push_payload) == ("octocat", True)

    def test_sequence_index_in_path(self, push_payload):
        assert get_parameter("commits.1.author.name", push_payload) == ("Grace", True)

    def test_sequence_terminal_index(self):
        assert get_parameter("1", ["x", "y"]) == ("y", True)

    def test_sequence_index_out_of_range(self):
        assert get_parameter("2", ["x", "y"]) == (None, False)

    def test_sequence_index_not_numeric(self):
        assert get_parameter("first", ["x", "y"]) == (None, False)

    def test_sequence_negative_index(self):
        """Negative indexes are not Python-style offsets."""
        assert get_parameter("-1", ["x", "y"]) == (None, False)

    def test_sequence_signed_index(self):
        assert get_parameter("+1", ["x", "y"]) == (None, False)

    def test_empty_sequence(self):
        assert get_parameter("0", []) == (None, False)

    def test_nested_out_of_range(self, push_payload):
        assert get_parameter("commits.5.id", push_payload) == (None, False)

    def test_missing_key(self, push_payload):
        assert get_parameter("repository.url", push_payload) == (None, False)

    def test_path_through_scalar(self, push_payload):
        """Path segments left over at a scalar do not resolve."""
        assert get_parameter("ref.length", push_payload) == (None, False)

    def test_none_tree(self):
        assert get_parameter("a", None) == (None, False)

    def test_returns_composite_node(self, push_payload):
        value, found = get_parameter("repository.owner", push_payload)
        assert found is True
        assert value == {"login": "octocat"}

    def test_falsy_values_are_found(self, push_payload):
        assert get_parameter("forced", push_payload) == (False, True)
        assert get_parameter("x", {"x": None}) == (None, True)

    def test_numeric_string_key_on_mapping(self):
        """A numeric segment is a plain key when the node is a mapping."""
        assert get_parameter("0", {"0": "zero"}) == ("zero", True)


# ---------------------------------------------------------------------------
# replace_parameter
# ---------------------------------------------------------------------------


class TestReplaceParameter:
    """Test in-place replacement."""

    def test_round_trip(self):
        tree = {"a": {"b": 1}}
        assert get_parameter("a.b", tree) == (1, True)
        assert replace_parameter("a.b", tree, 2) is True
        assert get_parameter("a.b", tree) == (2, True)

    def test_never_inserts_new_key(self):
        tree = {"a": {"b": 1}}
        assert replace_parameter("a.c", tree, 3) is False
        assert tree == {"a": {"b": 1}}

    def test_never_inserts_top_level_key(self):
        tree = {"a": 1}
        assert replace_parameter("b", tree, 2) is False
        assert "b" not in tree

    def test_replace_top_level(self):
        tree = {"data": "{}"}
        assert replace_parameter("data", tree, {"x": 1}) is True
        assert tree["data"] == {"x": 1}

    def test_through_sequence(self, push_payload):
        assert replace_parameter("commits.0.id", push_payload, "zz") is True
        assert push_payload["commits"][0]["id"] == "zz"

    def test_sequence_element_not_replaced(self):
        tree = {"items": ["x", "y"]}
        assert replace_parameter("items.0", tree, "z") is False
        assert tree["items"] == ["x", "y"]

    def test_bad_index(self, push_payload):
        assert replace_parameter("commits.9.id", push_payload, "zz") is False
        assert replace_parameter("commits.x.id", push_payload, "zz") is False

    def test_path_through_scalar(self):
        tree = {"a": "text"}
        assert replace_parameter("a.b", tree, 1) is False
        assert tree == {"a": "text"}

    def test_none_tree(self):
        assert replace_parameter("a", None, 1) is False


# ---------------------------------------------------------------------------
# stringify / extract_parameter_as_string
# ---------------------------------------------------------------------------


class TestExtractAsString:
    """Test string extraction of leaf values."""

    def test_string(self, push_payload):
        assert extract_parameter_as_string("ref", push_payload) == ("refs/heads/main", True)

    def test_int(self, push_payload):
        assert extract_parameter_as_string("size", push_payload) == ("2", True)

    def test_bool(self, push_payload):
        assert extract_parameter_as_string("forced", push_payload) == ("false", True)

    def test_missing(self, push_payload):
        assert extract_parameter_as_string("nope", push_payload) == ("", False)

    def test_precision_preserved(self):
        tree = decode_json('{"big": 123456789012345678901234567890, "price": 0.10000000000000000001}')
        assert extract_parameter_as_string("big", tree) == ("123456789012345678901234567890", True)
        assert extract_parameter_as_string("price", tree) == ("0.10000000000000000001", True)

    def test_literal_text_kept(self):
        tree = decode_json('{"amount": 0.0000001, "big": 1e5, "neg": -2.50E-3}')
        assert extract_parameter_as_string("amount", tree) == ("0.0000001", True)
        assert extract_parameter_as_string("big", tree) == ("1e5", True)
        assert extract_parameter_as_string("neg", tree) == ("-2.50E-3", True)

    def test_composite_renders_as_json(self, push_payload):
        assert extract_parameter_as_string("repository.owner", push_payload) == ('{"login":"octocat"}', True)

    def test_null(self):
        assert stringify(None) == "null"

    def test_list(self):
        assert stringify([1, "a", True]) == '[1,"a",true]'


# ---------------------------------------------------------------------------
# decode_json / encode_json
# ---------------------------------------------------------------------------


class TestJsonCodec:
    """Test precision-preserving JSON helpers."""

    def test_decode_float_as_decimal(self):
        assert decode_json('{"x": 1.5}') == {"x": Decimal("1.5")}

    def test_decode_bytes(self):
        assert decode_json(b'{"x": 1}') == {"x": 1}

    def test_decode_invalid(self):
        with pytest.raises(json.JSONDecodeError):
            decode_json("{not json")

    def test_encode_sorted_and_compact(self):
        assert encode_json({"b": 1, "a": [True, None]}) == '{"a":[true,null],"b":1}'

    def test_encode_decimal_literal(self):
        tree = decode_json('{"amount": 19.990}')
        assert encode_json(tree) == '{"amount":19.990}'

    def test_encode_keeps_exponent_and_small_literals(self):
        tree = decode_json('{"amount": 0.0000001, "big": 1e5, "list": [1E+2, 3]}')
        assert encode_json(tree) == '{"amount":0.0000001,"big":1e5,"list":[1E+2,3]}'

    def test_decoded_number_is_decimal(self):
        value = decode_json("1e5")
        assert isinstance(value, JSONNumber)
        assert value == Decimal(100000)
        assert value.literal == "1e5"

    def test_plain_decimal_uses_str(self):
        assert stringify(Decimal("1E-7")) == "1E-7"
        assert encode_json([Decimal("2.5")]) == "[2.5]"

    def test_encode_unicode_unescaped(self):
        assert encode_json({"name": "Zoë"}) == '{"name":"Zoë"}'

    def test_encode_rejects_unserializable(self):
        with pytest.raises(TypeError):
            encode_json({"x": object()})

    def test_encode_rejects_non_string_key(self):
        with pytest.raises(TypeError):
            encode_json({1: "x"})

    def test_encode_rejects_nan(self):
        with pytest.raises(ValueError):
            encode_json({"x": float("nan")})
        with pytest.raises(ValueError):
            encode_json({"x": Decimal("NaN")})
