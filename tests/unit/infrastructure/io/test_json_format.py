"""Tests for the JSON text adapter."""

from __future__ import annotations

from decimal import Decimal

import pytest

from fhir_model_engine.domain.errors import DecodeError, EncodeError
from fhir_model_engine.infrastructure.io import json_format


class TestDumps:
    """Tests for json_format.dumps."""

    def test_preserves_key_order(self):
        """Keys are written in mapping order."""
        text = json_format.dumps({"resourceType": "Sample", "status": "final", "id": "a"})

        assert text == '{"resourceType": "Sample", "status": "final", "id": "a"}'

    def test_unicode_is_not_escaped(self):
        """Non-ASCII text stays readable."""
        assert json_format.dumps({"text": "Größe"}) == '{"text": "Größe"}'

    def test_indent(self):
        """indent pretty-prints."""
        assert json_format.dumps({"a": 1}, indent=2) == '{\n  "a": 1\n}'

    def test_decimals(self):
        """Decimals are written as numbers."""
        assert json_format.dumps({"a": Decimal("2"), "b": Decimal("2.5")}) == '{"a": 2, "b": 2.5}'

    def test_decimal_keeps_lexical_form(self):
        """Decimal values are not routed through float."""
        assert json_format.dumps({"value": Decimal("1.50")}) == '{"value": 1.50}'

    @pytest.mark.parametrize("value", [float("nan"), Decimal("NaN"), Decimal("Infinity")])
    def test_nan_rejected(self, value):
        """NaN and infinities have no JSON form."""
        with pytest.raises(EncodeError):
            json_format.dumps({"value": value})

    def test_nested_indent(self):
        """Nested containers indent one level per depth; empty ones stay inline."""
        text = json_format.dumps({"a": [1, {"b": True}], "c": [], "d": {}}, indent=2)

        assert text == (
            '{\n  "a": [\n    1,\n    {\n      "b": true\n    }\n  ],\n  "c": [],\n  "d": {}\n}'
        )

    def test_non_string_keys_rejected(self):
        """Mapping keys must be strings."""
        with pytest.raises(EncodeError, match="Property names"):
            json_format.dumps({1: "a"})

    def test_unserializable_rejected(self):
        """Arbitrary objects are encode errors."""
        with pytest.raises(EncodeError, match="not JSON serializable"):
            json_format.dumps({"value": object()})


class TestLoads:
    """Tests for json_format.loads."""

    def test_round_trip(self):
        """loads reads what dumps writes."""
        tree = {"resourceType": "Sample", "note": ["a", "b"], "valueBoolean": True}

        assert json_format.loads(json_format.dumps(tree)) == tree

    def test_numbers(self):
        """Integers stay integers; decimals become Decimal."""
        tree = json_format.loads('{"a": 1, "b": 1.5}')

        assert tree == {"a": 1, "b": Decimal("1.5")}
        assert type(tree["b"]) is Decimal

    @pytest.mark.parametrize("literal", ["1.50", "0.000", "-2.10", "1.0E+3", "1e-7"])
    def test_decimal_precision_round_trip(self, literal):
        """Decimal text is written back with the digits it was read with."""
        tree = json_format.loads(f'{{"value": {literal}}}')

        assert json_format.dumps(tree) == f'{{"value": {tree["value"]}}}'
        assert json_format.loads(json_format.dumps(tree)) == tree
        assert str(json_format.loads(json_format.dumps(tree))["value"]) == str(tree["value"])

    def test_duplicate_keys_rejected(self):
        """The same property twice is ambiguous."""
        with pytest.raises(DecodeError) as exc_info:
            json_format.loads('{"status": "a", "status": "b"}')

        assert exc_info.value.key == "status"

    def test_nan_rejected(self):
        """Non-standard constants are not accepted."""
        with pytest.raises(DecodeError, match="NaN"):
            json_format.loads('{"value": NaN}')

    def test_syntax_error_has_position(self):
        """Malformed JSON reports line and column."""
        with pytest.raises(DecodeError, match="line 1 column"):
            json_format.loads('{"status": }')

    def test_accepts_bytes(self):
        """UTF-8 bytes can be parsed directly."""
        assert json_format.loads(b'{"a": "b"}') == {"a": "b"}
