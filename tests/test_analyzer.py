"""
Tests for the Definition Analyzer.

Tests verify that the analyzer correctly:
    - Inventories questions by kind
    - Measures nesting depth and union fan-out
    - Lists suggested and assumed sites
    - Reports validation coverage and unbounded numeric inputs
    - Flags duplicate paths
"""

from dataclasses import dataclass
from typing import List, Optional

from surveyform.analyzer import analyze_definition, find_duplicate_paths
from surveyform.declarations import ask, one_of
from surveyform.examples import JobApplication
from surveyform.model import InputQuestion, Question, SurveyDefinition
from surveyform.overrides import apply_overrides
from surveyform.paths import ResponsePath
from surveyform.schema import build_definition


def not_empty(value, responses):
    return None if value.value else "Required"


@dataclass
class Person:
    name: str = ask("Name:", validate=not_empty)
    age: int = ask("Age:", min=0, max=150)
    height: float = ask("Height:")
    nickname: Optional[str] = ask("Nickname:")


@one_of
class Pet:
    pass


@dataclass
class Cat(Pet):
    pass


@dataclass
class Dog(Pet):
    name: str = ask("Dog's name:")


@dataclass
class Household:
    owner: Person = ask("Owner:")
    pets: List[Pet] = ask("Pets:")
    favourite: Pet = ask("Favourite pet:")


def test_simple_inventory():
    """Count leaves and kinds of a flat record."""
    report = analyze_definition(build_definition(Person))

    assert report.survey_name == "Person"
    assert report.total_questions == 4
    assert report.total_leaves == 4
    assert report.kind_counts == {"Input": 2, "Int": 1, "Float": 1}
    assert report.optional_leaves == ["nickname"]
    assert report.max_depth == 1


def test_validation_coverage():
    report = analyze_definition(build_definition(Person))

    assert report.leaves_with_validators == 1
    assert report.validation_coverage_percent == 25.0


def test_unbounded_numeric_warning():
    """Numeric inputs with neither bound are flagged."""
    report = analyze_definition(build_definition(Person))

    assert report.unbounded_numeric == ["height"]
    assert any("Unbounded numeric" in w for w in report.warnings)


def test_unions_and_depth():
    report = analyze_definition(build_definition(Household))

    assert report.total_records == 1
    assert report.total_one_of == 1
    assert report.total_any_of == 1
    assert report.total_variants == 4
    assert report.max_variants_per_site == 2
    # favourite.1.name
    assert report.max_depth == 3


def test_override_sites():
    definition = apply_overrides(
        build_definition(Person),
        suggestions={"name": "Ann"},
        assumptions={"age": 40},
    )
    report = analyze_definition(definition)

    assert report.suggested_sites == ["name"]
    assert report.assumed_sites == ["age"]
    assert not any("Every question is assumed" in w for w in report.warnings)


def test_everything_assumed_warning():
    definition = apply_overrides(
        build_definition(Person),
        assumptions={"name": "Ann", "age": 40, "height": 1.7, "nickname": None},
    )
    report = analyze_definition(definition)

    assert "Every question is assumed: nothing will be shown" in report.warnings


def test_empty_definition():
    report = analyze_definition(SurveyDefinition())

    assert report.total_questions == 0
    assert "Survey has no questions to ask" in report.warnings


def test_duplicate_paths():
    """Hand-built definitions can repeat a path; built ones cannot."""
    definition = SurveyDefinition(questions=[
        Question(path=ResponsePath("a"), ask="A", kind=InputQuestion()),
        Question(path=ResponsePath("a"), ask="A again", kind=InputQuestion()),
    ])

    assert find_duplicate_paths(definition) == [ResponsePath("a")]
    report = analyze_definition(definition)
    assert report.duplicate_paths == ["a"]
    assert any("Duplicate paths" in w for w in report.warnings)


def test_example_job_application():
    """The bundled example is well formed."""
    report = analyze_definition(build_definition(JobApplication))

    assert report.duplicate_paths == []
    assert report.total_one_of >= 3
    assert report.total_any_of == 1
    assert report.unbounded_numeric == ["position.2.team_size"]
