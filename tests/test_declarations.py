"""
Tests for the declaration helpers.

These tests verify:
    - ask() metadata on dataclass fields
    - @survey options and the class methods it adds
    - @one_of case registration and case options
    - NumericWidth narrowing
    - Naming helpers used for labels and keys
"""

import dataclasses
from dataclasses import dataclass

import pytest

from surveyform.declarations import (
    F32,
    F64,
    I8,
    U8,
    U64,
    AskSpec,
    ask,
    ask_spec,
    case_options,
    humanize,
    is_one_of,
    one_of,
    snake_case,
    survey,
    survey_options,
    union_cases,
)


class TestAsk:
    """Test field metadata."""

    def test_spec_is_attached(self):
        @dataclass
        class Form:
            age: int = ask("Age:", min=0, max=9)

        (f,) = dataclasses.fields(Form)
        spec = ask_spec(f)
        assert spec.prompt == "Age:"
        assert spec.min == 0 and spec.max == 9

    def test_plain_fields_get_empty_spec(self):
        @dataclass
        class Form:
            age: int

        (f,) = dataclasses.fields(Form)
        assert ask_spec(f) == AskSpec()

    def test_default_is_kept(self):
        @dataclass
        class Form:
            age: int = ask("Age:", default=3)

        assert Form().age == 3


class TestSurveyOptions:
    """Test @survey."""

    def test_bare_decorator(self):
        @survey
        @dataclass
        class Form:
            name: str

        assert survey_options(Form).prelude is None
        assert hasattr(Form, "builder")

    def test_options(self):
        @survey(prelude="Hi", epilogue="Bye")
        @dataclass
        class Form:
            name: str

        options = survey_options(Form)
        assert options.prelude == "Hi"
        assert options.epilogue == "Bye"
        assert Form.survey_definition().prelude == "Hi"

    def test_options_are_not_inherited(self):
        @survey(prelude="Hi")
        @dataclass
        class Base:
            name: str

        @dataclass
        class Child(Base):
            pass

        assert survey_options(Child).prelude is None


class TestOneOf:
    """Test union declarations."""

    def test_cases_in_definition_order(self):
        @one_of
        class Shape:
            pass

        class Circle(Shape):
            pass

        class Square(Shape, label="Box"):
            pass

        class RoundedSquare(Square):
            pass

        assert is_one_of(Shape)
        assert not is_one_of(Circle)
        assert union_cases(Shape) == [Circle, Square]
        assert case_options(Square).label == "Box"
        assert case_options(Circle).label is None

    def test_newtype_option(self):
        @one_of
        class Wrapper:
            pass

        @dataclass
        class Number(Wrapper, newtype=True):
            value: int

        assert case_options(Number).newtype


class TestNumericWidth:
    """Test narrowing to declared widths."""

    def test_integer_ranges(self):
        assert U8.lower == 0 and U8.upper == 255
        assert I8.lower == -128 and I8.upper == 127
        assert U64.upper == 2 ** 64 - 1

    def test_narrow_accepts_in_range(self):
        assert U8.narrow(255) == 255
        assert I8.narrow(-128) == -128

    def test_narrow_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            U8.narrow(256)
        with pytest.raises(ValueError):
            U8.narrow(-1)

    def test_float32(self):
        assert F32.narrow(0.5) == 0.5
        with pytest.raises(ValueError):
            F32.narrow(0.1)
        with pytest.raises(ValueError):
            F32.narrow(1e300)

    def test_float64_is_unchanged(self):
        assert F64.narrow(0.1) == 0.1

    def test_str(self):
        assert str(U8) == "u8"


class TestNaming:
    """Test label and key helpers."""

    @pytest.mark.parametrize("name, expected", [
        ("TechLead", "tech_lead"),
        ("HONEY_OAT", "honey_oat"),
        ("HTTPServer", "http_server"),
        ("years_at_level", "years_at_level"),
    ])
    def test_snake_case(self, name, expected):
        assert snake_case(name) == expected

    def test_humanize(self):
        assert humanize("years_at_level") == "Years At Level"
        assert humanize("TechLead") == "Tech Lead"
        assert humanize("ON_SITE") == "On Site"
