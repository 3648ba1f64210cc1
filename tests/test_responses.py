"""
Tests for response values and the Responses store.

These tests verify:
    - ResponseValue construction and type checks
    - Typed getters and their StructuralMismatch errors
    - Prefix filtering used by scoped validators
"""

import pytest

from surveyform.errors import MissingResponse, ResponseTypeMismatch, StructuralMismatch
from surveyform.paths import ResponsePath
from surveyform.responses import Responses
from surveyform.values import (
    INT64_MAX,
    BoolValue,
    ChosenVariant,
    ChosenVariants,
    FloatList,
    FloatValue,
    IntList,
    IntValue,
    StringList,
    StringValue,
    to_response_value,
)


class TestResponseValues:
    """Test ResponseValue objects."""

    def test_int_rejects_bool(self):
        with pytest.raises(TypeError):
            IntValue(True)

    def test_int_is_64_bit(self):
        IntValue(INT64_MAX)
        with pytest.raises(ValueError):
            IntValue(INT64_MAX + 1)

    def test_float_coerces_int(self):
        assert FloatValue(3).value == 3.0
        assert isinstance(FloatValue(3).value, float)

    def test_chosen_variant_must_be_non_negative(self):
        with pytest.raises(ValueError):
            ChosenVariant(-1)

    def test_chosen_variants_keep_order(self):
        assert ChosenVariants([2, 0]).value == (2, 0)

    def test_values_are_frozen(self):
        value = StringValue("x")
        with pytest.raises(AttributeError):
            value.value = "y"

    def test_to_response_value(self):
        assert to_response_value("a") == StringValue("a")
        assert to_response_value(1) == IntValue(1)
        assert to_response_value(1.5) == FloatValue(1.5)
        assert to_response_value(False) == BoolValue(False)
        assert to_response_value(["a", "b"]) == StringList(("a", "b"))
        assert to_response_value([1, 2]) == IntList((1, 2))
        assert to_response_value([1, 2.5]) == FloatList((1.0, 2.5))

    def test_to_response_value_rejects_objects(self):
        with pytest.raises(TypeError):
            to_response_value(object())

    def test_lists_reject_bare_strings(self):
        with pytest.raises(TypeError):
            StringList("MIT")
        with pytest.raises(TypeError):
            IntList("12")
        with pytest.raises(TypeError):
            FloatList("1.5")
        with pytest.raises(TypeError):
            ChosenVariants("01")


class TestResponses:
    """Test the Responses store."""

    def test_insert_and_get(self):
        responses = Responses()
        responses.insert("name", "Alice")
        assert responses.get_string("name") == "Alice"
        assert "name" in responses
        assert len(responses) == 1

    def test_insert_replaces(self):
        responses = Responses({"age": 30})
        responses.insert("age", 31)
        assert responses.get_int("age") == 31
        assert len(responses) == 1

    def test_missing_path(self):
        with pytest.raises(MissingResponse) as exc:
            Responses().get_string("name")
        assert isinstance(exc.value, StructuralMismatch)
        assert exc.value.path == ResponsePath("name")

    def test_wrong_type(self):
        responses = Responses({"age": "thirty"})
        with pytest.raises(ResponseTypeMismatch) as exc:
            responses.get_int("age")
        assert exc.value.expected == "Int"
        assert exc.value.actual == "String"

    def test_chosen_variant_getters(self):
        responses = Responses()
        responses.insert("status.selected_variant", ChosenVariant(1))
        responses.insert("skills.selected_variants", ChosenVariants([2, 0]))
        assert responses.get_chosen_variant("status.selected_variant") == 1
        assert responses.get_chosen_variants("skills.selected_variants") == (2, 0)

    def test_filter_prefix(self):
        responses = Responses({"address.street": "Main St", "address.city": "Leeds", "name": "Alice"})
        address = responses.filter_prefix(ResponsePath("address"))
        assert len(address) == 2
        assert address.get_string("street") == "Main St"
        assert "name" not in address

    def test_filter_prefix_does_not_match_partial_segments(self):
        responses = Responses({"addressee": "Bob"})
        assert len(responses.filter_prefix(ResponsePath("address"))) == 0

    def test_has_value_treats_empty_string_as_skipped(self):
        responses = Responses({"notes": "", "name": "Alice"})
        assert not responses.has_value("notes")
        assert responses.has_value("name")
        assert not responses.has_value("missing")

    def test_equality_and_copy(self):
        responses = Responses({"a": 1})
        duplicate = responses.copy()
        assert duplicate == responses
        duplicate.insert("b", 2)
        assert duplicate != responses
