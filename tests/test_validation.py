"""
Tests for the validation engine.

These tests verify:
    - Built-in checks: type, bounds, list sizes, selection ranges
    - Per-field validators and their scoped view of the responses
    - Propagated record validators (validate_fields)
    - Composite validators with prefixed error paths
    - Assumed values taking part in every validator
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

import pytest

from surveyform.declarations import ask, one_of, survey
from surveyform.errors import StructuralMismatch, ValidationFailed
from surveyform.examples import JobApplication
from surveyform.overrides import apply_overrides
from surveyform.paths import ResponsePath
from surveyform.responses import Responses
from surveyform.schema import build_definition
from surveyform.validation import SurveyValidator, check_constraints
from surveyform.values import ChosenVariant, ChosenVariants, FloatValue, IntList, IntValue, StringValue


def not_blank(value, responses):
    if not value.value.strip():
        return "Cannot be blank"
    return None


def seen_keys(value, responses):
    """Reports which keys the validator was allowed to see."""
    keys = sorted(str(p) for p in responses)
    if keys:
        return "saw " + ",".join(keys)
    return None


def max_total(value, responses):
    total = value.value
    for name in ("low", "high"):
        if name in responses:
            total += responses.get_int(name)
    if total > 10:
        return "Total too large"
    return None


def low_below_high(responses):
    if "low" in responses and "high" in responses:
        if responses.get_int("low") > responses.get_int("high"):
            return {"high": "Must be at least low"}
    return {}


def no_bob(responses):
    if responses.get("name") == StringValue("Bob"):
        return {"name": "No Bobs"}
    return {}


@survey(validate=low_below_high, validate_fields=max_total)
@dataclass
class Range:
    low: int = ask("Low:", min=0)
    high: int = ask("High:", min=0)


@dataclass
class Inner:
    probe: str = ask("Probe:", validate=seen_keys)


@one_of
class Shape:
    pass


@dataclass
class Dot(Shape):
    pass


@survey(validate=low_below_high)
@dataclass
class Band(Shape):
    low: int = ask("Low:")
    high: int = ask("High:")


class Colour(Enum):
    RED = "Red"
    GREEN = "Green"


@survey(validate=no_bob)
@dataclass
class Form:
    name: str = ask("Name:", validate=not_blank)
    age: int = ask("Age:", min=0, max=150)
    weight: float = ask("Weight:", min=0.5)
    scores: List[int] = ask("Scores:", min=0, max=10, min_items=1, max_items=3)
    range: Range = ask("Range:")
    inner: Inner = ask("Inner:")
    shape: Shape = ask("Shape:")
    colours: List[Colour] = ask("Colours:")


@pytest.fixture
def validator():
    return SurveyValidator(build_definition(Form))


class TestBuiltInChecks:
    """Test checks that run before any user validator."""

    def test_bounds(self, validator):
        assert validator.validate_field("age", 30) is None
        assert validator.validate_field("age", 200) == "Value must be at most 150"
        assert validator.validate_field("age", -1) == "Value must be at least 0"

    def test_wrong_type(self, validator):
        assert validator.validate_field("age", "thirty") == "Expected Int, got String"

    def test_int_accepted_for_float(self, validator):
        assert validator.validate_field("weight", 2) is None
        assert validator.validate_field("weight", FloatValue(0.1)) == "Value must be at least 0.5"

    def test_list_counts(self, validator):
        assert validator.validate_field("scores", IntList([])) == "At least 1 items required"
        assert validator.validate_field("scores", [1, 2, 3, 4]) == "At most 3 items allowed"
        assert validator.validate_field("scores", [1, 20]) == "Item 2: Value must be at most 10"
        assert validator.validate_field("scores", [1, 2]) is None

    def test_selection_range(self, validator):
        assert validator.validate_field("shape.selected_variant", ChosenVariant(1)) is None
        assert validator.validate_field("shape.selected_variant", ChosenVariant(2)) == "Choice 2 is not a valid option"

    def test_multi_selection_duplicates(self, validator):
        path = "colours.selected_variants"
        assert validator.validate_field(path, ChosenVariants([1, 0])) is None
        assert validator.validate_field(path, ChosenVariants([0, 0])) == "Choice 0 selected more than once"

    def test_check_constraints_directly(self):
        definition = build_definition(Form)
        age = definition.get_question("age")
        assert check_constraints(age, IntValue(151)) == "Value must be at most 150"
        assert check_constraints(age, IntValue(150)) is None

    def test_unknown_path(self, validator):
        with pytest.raises(StructuralMismatch):
            validator.validate_field("nope", 1)

    def test_composite_path_is_not_answerable(self, validator):
        with pytest.raises(StructuralMismatch):
            validator.validate_field("range", 1)


class TestFieldValidators:
    """Test user-supplied per-field validators."""

    def test_field_validator_runs(self, validator):
        assert validator.validate_field("name", "   ") == "Cannot be blank"
        assert validator.validate_field("name", "Alice") is None

    def test_field_validator_skipped_when_built_in_fails(self, validator):
        assert validator.validate_field("name", 5) == "Expected String, got Int"

    def test_scoped_responses(self, validator):
        """A nested field's validator sees only its own record, with the prefix stripped."""
        responses = Responses({"name": "Alice", "inner.other": "x"})
        assert validator.validate_field("inner.probe", "p", responses) == "saw other"

    def test_propagated_record_validator(self, validator):
        responses = Responses({"range.low": 6})
        assert validator.validate_field("range.high", 3, responses) is None
        assert validator.validate_field("range.high", 5, responses) == "Total too large"

    def test_check_field_raises(self, validator):
        with pytest.raises(ValidationFailed) as exc:
            validator.check_field("age", 200)
        assert exc.value.path == ResponsePath("age")
        assert exc.value.message == "Value must be at most 150"


class TestCompositeValidators:
    """Test validate_all over the whole tree."""

    def _responses(self, **overrides):
        values = {
            "name": "Alice",
            "age": 30,
            "weight": 70.0,
            "scores": [1],
            "range.low": 1,
            "range.high": 2,
            "inner.probe": "p",
            "shape.selected_variant": ChosenVariant(0),
            "colours.selected_variants": ChosenVariants([]),
        }
        values.update(overrides)
        return Responses(values)

    def test_clean(self, validator):
        assert validator.validate_all(self._responses()) == {}

    def test_root_validator(self, validator):
        errors = validator.validate_all(self._responses(name="Bob"))
        assert errors == {ResponsePath("name"): "No Bobs"}

    def test_nested_record_errors_are_prefixed(self, validator):
        errors = validator.validate_all(self._responses(**{"range.low": 5, "range.high": 1}))
        assert errors == {ResponsePath.parse("range.high"): "Must be at least low"}

    def test_chosen_variant_errors_are_prefixed(self, validator):
        responses = self._responses(**{"shape.selected_variant": ChosenVariant(1)})
        responses.insert("shape.1.low", 9)
        responses.insert("shape.1.high", 3)
        errors = validator.validate_all(responses)
        assert errors == {ResponsePath.parse("shape.1.high"): "Must be at least low"}

    def test_unchosen_variant_validators_do_not_run(self, validator):
        responses = self._responses()
        responses.insert("shape.1.low", 9)
        responses.insert("shape.1.high", 3)
        assert validator.validate_all(responses) == {}


class TestAssumedValues:
    """Test that assumed sites are visible to validators like answered ones."""

    def assuming(self, assumptions, target=Form):
        return SurveyValidator(apply_overrides(build_definition(target), assumptions=assumptions))

    def test_view_adds_assumed_values(self):
        validator = self.assuming({"range.low": 6})
        collected = Responses({"age": 3})
        view = validator.view(collected)
        assert view.get("range.low") == IntValue(6)
        assert view.get("age") == IntValue(3)
        assert "range.low" not in collected

    def test_assumed_sibling_reaches_field_validator(self):
        validator = self.assuming({"range.low": 6})
        assert validator.validate_field("range.high", 3) is None
        assert validator.validate_field("range.high", 5) == "Total too large"

    def test_assumed_salary_base_counts_toward_cap(self):
        validator = self.assuming({"salary.base": 200}, JobApplication)
        assert validator.validate_field("salary.bonus", 100) == "Total comp $300k exceeds $250k limit"
        assert validator.validate_field("salary.bonus", 50) is None

    def test_assumed_leaf_reaches_root_validator(self):
        validator = self.assuming({"name": "Bob"})
        errors = validator.validate_all(Responses({"age": 30}))
        assert errors == {ResponsePath("name"): "No Bobs"}

    def test_assumed_record_is_validated(self):
        validator = self.assuming({"range": Range(low=5, high=1)})
        errors = validator.validate_all(Responses({"shape.selected_variant": ChosenVariant(0)}))
        assert errors == {ResponsePath.parse("range.high"): "Must be at least low"}

    def test_assumed_choice_runs_payload_validator(self):
        validator = self.assuming({"shape": "Band"})
        responses = Responses({"shape.1.low": 9, "shape.1.high": 3})
        assert validator.validate_all(responses) == {ResponsePath.parse("shape.1.high"): "Must be at least low"}
