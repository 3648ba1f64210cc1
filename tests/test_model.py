"""
Tests for surveyform Core Model Objects

These tests verify:
    - Basic model creation
    - Relationships between questions, variants and definitions
    - Default states
    - Retrieval methods
    - Pruning of assumed sites
"""

import pytest

from surveyform.defaults import NO_DEFAULT, DefaultState, DefaultValue
from surveyform.model import (
    AllOfQuestion,
    AnyOfQuestion,
    ConfirmQuestion,
    InputQuestion,
    IntQuestion,
    OneOfQuestion,
    Question,
    SurveyDefinition,
    Variant,
)
from surveyform.paths import ResponsePath
from surveyform.values import ChosenVariant, ChosenVariants, IntValue


def leaf(path, kind=None, **kwargs):
    return Question(path=ResponsePath.parse(path), ask=path, kind=kind or InputQuestion(), **kwargs)


def employment_site():
    """status: OneOf(Unemployed | Employed{employer, income})"""
    employed = Variant(
        label="Employed",
        key="employed",
        payload=AllOfQuestion(questions=[leaf("status.1.employer"), leaf("status.1.income", IntQuestion())]),
    )
    return Question(
        path=ResponsePath("status"),
        ask="Status",
        kind=OneOfQuestion(variants=[Variant(label="Unemployed", key="unemployed"), employed]),
    )


class TestDefaultValue:
    """Test DefaultValue objects."""

    def test_none(self):
        assert NO_DEFAULT.is_none
        assert NO_DEFAULT.get() is None

    def test_suggested(self):
        default = DefaultValue.suggested(IntValue(3))
        assert default.is_suggested
        assert default.state is DefaultState.SUGGESTED
        assert default.get() == IntValue(3)

    def test_assumed(self):
        default = DefaultValue.assumed(IntValue(3))
        assert default.is_assumed
        assert not default.is_suggested

    def test_frozen(self):
        with pytest.raises(AttributeError):
            NO_DEFAULT.value = 1


class TestVariant:
    """Test Variant objects."""

    def test_unit(self):
        variant = Variant(label="None", key="none")
        assert variant.is_unit
        assert variant.questions() == []

    def test_newtype(self):
        variant = Variant(label="Age", key="age", payload=leaf("x.0.age", IntQuestion()))
        assert variant.is_newtype
        assert not variant.is_struct
        assert len(variant.questions()) == 1

    def test_struct(self):
        (_, employed) = employment_site().kind.variants
        assert employed.is_struct
        assert [str(q.path) for q in employed.questions()] == ["status.1.employer", "status.1.income"]


class TestQuestion:
    """Test Question objects."""

    def test_leaf(self):
        question = leaf("name")
        assert question.is_leaf
        assert question.selection_path is None
        assert question.children() == []
        assert question.default is NO_DEFAULT

    def test_selection_paths(self):
        assert str(employment_site().selection_path) == "status.selected_variant"
        many = Question(path=ResponsePath("tags"), ask="Tags", kind=AnyOfQuestion())
        assert str(many.selection_path) == "tags.selected_variants"

    def test_children_include_variant_payloads(self):
        children = employment_site().children()
        assert [str(q.path) for q in children] == ["status.1.employer", "status.1.income"]

    def test_composites_are_not_leaves(self):
        assert not employment_site().is_leaf
        group = Question(path=ResponsePath("g"), ask="G", kind=AllOfQuestion())
        assert not group.is_leaf


class TestSurveyDefinition:
    """Test SurveyDefinition container."""

    def build(self):
        return SurveyDefinition(
            questions=[leaf("name"), leaf("agree", ConfirmQuestion()), employment_site()],
            prelude="Hello",
            epilogue="Bye",
        )

    def test_create(self):
        definition = self.build()
        assert len(definition) == 3
        assert definition.prelude == "Hello"
        assert not definition.is_empty()

    def test_walk_order(self):
        paths = [str(q.path) for q in self.build().iter_questions()]
        assert paths == ["name", "agree", "status", "status.1.employer", "status.1.income"]

    def test_leaves(self):
        paths = [str(q.path) for q in self.build().leaves()]
        assert paths == ["name", "agree", "status.1.employer", "status.1.income"]

    def test_get_question(self):
        definition = self.build()
        assert definition.get_question("status.1.employer").ask == "status.1.employer"
        assert definition.get_question(ResponsePath("agree")) is not None
        assert definition.get_question("missing") is None

    def test_selection_sites(self):
        sites = self.build().selection_sites()
        assert list(sites) == [ResponsePath.parse("status.selected_variant")]


class TestVisible:
    """Test pruning of assumed sites."""

    def test_assumed_leaf_is_pruned(self):
        definition = SurveyDefinition(questions=[
            leaf("name"),
            leaf("age", IntQuestion(), default=DefaultValue.assumed(IntValue(3))),
        ])
        visible = definition.visible()
        assert [str(q.path) for q in visible.questions] == ["name"]
        assert len(definition.questions) == 2

    def test_suggested_leaf_is_kept(self):
        definition = SurveyDefinition(questions=[
            leaf("age", IntQuestion(), default=DefaultValue.suggested(IntValue(3))),
        ])
        assert len(definition.visible().questions) == 1

    def test_assumed_choice_keeps_payload(self):
        site = employment_site()
        site.default = DefaultValue.assumed(ChosenVariant(1))
        visible = SurveyDefinition(questions=[site]).visible()
        (group,) = visible.questions
        assert isinstance(group.kind, AllOfQuestion)
        assert [str(q.path) for q in group.kind.questions] == ["status.1.employer", "status.1.income"]

    def test_assumed_unit_choice_disappears(self):
        site = employment_site()
        site.default = DefaultValue.assumed(ChosenVariant(0))
        assert SurveyDefinition(questions=[site]).visible().is_empty()

    def test_nested_assumed_leaf_is_pruned(self):
        site = employment_site()
        site.kind.variants[1].payload.questions[1].default = DefaultValue.assumed(IntValue(5))
        visible = SurveyDefinition(questions=[site]).visible()
        paths = [str(q.path) for q in visible.iter_questions()]
        assert "status.1.income" not in paths
        assert "status.1.employer" in paths

    def test_assumed_multi_choice_groups_by_index(self):
        employed = employment_site().kind.variants[1]
        site = Question(
            path=ResponsePath("status"),
            ask="Status",
            kind=AnyOfQuestion(variants=[Variant(label="Unemployed", key="unemployed"), employed]),
            default=DefaultValue.assumed(ChosenVariants((1,))),
        )
        (group,) = SurveyDefinition(questions=[site]).visible().questions
        (inner,) = group.kind.questions
        assert str(inner.path) == "status.1"
        assert len(inner.kind.questions) == 2
