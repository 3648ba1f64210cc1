"""
Validation Engine.

Two entry points, both handed to a collection backend:

    validate_field(path, value, responses) -> Optional[str]
        Called for every candidate answer. Built-in checks (type, bounds,
        list sizes, selection ranges) run first; the question's own
        validators run only if those pass.

    validate_all(responses) -> {ResponsePath: message}
        Called once after every leaf is collected. Runs the composite
        validators of the root and of every reachable record.

A returned message means "reject and ask again". Paths the definition
does not know about are a StructuralMismatch, not a user error.
"""

from typing import Any, Callable, Dict, Mapping, Optional

from surveyform.errors import StructuralMismatch, ValidationFailed
from surveyform.model import (
    AllOfQuestion,
    AnyOfQuestion,
    ConfirmQuestion,
    FloatQuestion,
    InputQuestion,
    IntQuestion,
    ListElementKind,
    ListQuestion,
    MaskedQuestion,
    MultilineQuestion,
    OneOfQuestion,
    Question,
    SurveyDefinition,
)
from surveyform.paths import ResponsePath
from surveyform.responses import Responses
from surveyform.values import (
    BoolValue,
    ChosenVariant,
    ChosenVariants,
    FloatList,
    FloatValue,
    IntList,
    IntValue,
    ResponseValue,
    StringList,
    StringValue,
    to_response_value,
)

_EXPECTED = {
    InputQuestion: StringValue,
    MaskedQuestion: StringValue,
    MultilineQuestion: StringValue,
    IntQuestion: IntValue,
    FloatQuestion: FloatValue,
    ConfirmQuestion: BoolValue,
}

_LIST_EXPECTED = {
    ListElementKind.STRING: StringList,
    ListElementKind.INT: IntList,
    ListElementKind.FLOAT: FloatList,
}


def _check_bounds(value, minimum, maximum) -> Optional[str]:
    if minimum is not None and value < minimum:
        return f"Value must be at least {minimum}"
    if maximum is not None and value > maximum:
        return f"Value must be at most {maximum}"
    return None


def _expected_type(question: Question):
    if isinstance(question.kind, ListQuestion):
        return _LIST_EXPECTED[question.kind.element_kind]
    if isinstance(question.kind, OneOfQuestion):
        return ChosenVariant
    if isinstance(question.kind, AnyOfQuestion):
        return ChosenVariants
    return _EXPECTED.get(type(question.kind))


def check_constraints(question: Question, value: ResponseValue) -> Optional[str]:
    """Built-in checks for a leaf or selection value. Returns an error message or None."""
    kind = question.kind
    expected = _expected_type(question)
    if expected is None:
        return f"{kind.kind_name} questions do not take answers"
    if not isinstance(value, expected):
        return f"Expected {expected.type_name}, got {value.type_name}"

    if isinstance(kind, (IntQuestion, FloatQuestion)):
        return _check_bounds(value.value, kind.min, kind.max)

    if isinstance(kind, ListQuestion):
        count = len(value.value)
        if kind.min_items is not None and count < kind.min_items:
            return f"At least {kind.min_items} items required"
        if kind.max_items is not None and count > kind.max_items:
            return f"At most {kind.max_items} items allowed"
        if kind.element_kind is not ListElementKind.STRING:
            for position, item in enumerate(value.value, start=1):
                error = _check_bounds(item, kind.min, kind.max)
                if error is not None:
                    return f"Item {position}: {error}"
        return None

    if isinstance(kind, (OneOfQuestion, AnyOfQuestion)):
        chosen = [value.value] if isinstance(value, ChosenVariant) else list(value.value)
        seen = set()
        for index in chosen:
            if index >= len(kind.variants):
                return f"Choice {index} is not a valid option"
            if index in seen:
                return f"Choice {index} selected more than once"
            seen.add(index)
    return None


def _as_response(question: Question, value: Any) -> ResponseValue:
    if isinstance(value, ResponseValue):
        return value
    if isinstance(question.kind, FloatQuestion) and isinstance(value, int) and not isinstance(value, bool):
        return FloatValue(value)
    if isinstance(question.kind, ListQuestion) and question.kind.element_kind is ListElementKind.FLOAT:
        return FloatList(value)
    return to_response_value(value)


def _prefixed(errors: Optional[Mapping[Any, str]], prefix: ResponsePath) -> Dict[ResponsePath, str]:
    return {prefix.join(ResponsePath.of(path)): message for path, message in (errors or {}).items()}


class SurveyValidator:
    """
    Validates candidate answers against one SurveyDefinition.

    Built from the full definition (assumed sites included) so that
    composite validators of records containing assumed fields still run.
    Every validator sees the collected answers overlaid with the assumed
    values, exactly as reconstruction will use them.
    """

    def __init__(self, definition: SurveyDefinition):
        from surveyform.overrides import assumed_responses

        self.definition = definition
        self.assumed = assumed_responses(definition)
        self._sites = {q.path: q for q in definition.iter_questions()}
        self._selections = definition.selection_sites()

    def question_for(self, path: Any) -> Question:
        """The leaf or selection site at `path`, raising StructuralMismatch when there is none."""
        key = ResponsePath.of(path)
        if key in self._selections:
            return self._selections[key]
        question = self._sites.get(key)
        if question is None or not question.is_leaf:
            raise StructuralMismatch(f"No question to answer at '{key}'")
        return question

    def view(self, responses: Optional[Responses] = None) -> Responses:
        """Collected `responses` with the assumed values laid over them."""
        merged = Responses() if responses is None else responses.copy()
        merged.extend(self.assumed)
        return merged

    def validate_field(self, path: Any, value: Any, responses: Optional[Responses] = None) -> Optional[str]:
        question = self.question_for(path)
        try:
            candidate = _as_response(question, value)
        except (TypeError, ValueError) as exc:
            return str(exc)

        error = check_constraints(question, candidate)
        if error is not None:
            return error

        if question.optional and isinstance(candidate, StringValue) and candidate.value == "":
            return None

        scoped = self.view(responses).filter_prefix(question.scope)
        for validator in question.validators:
            error = validator(candidate, scoped)
            if error:
                return error
        return None

    def check_field(self, path: Any, value: Any, responses: Optional[Responses] = None) -> None:
        """Like validate_field, but raises ValidationFailed instead of returning the message."""
        error = self.validate_field(path, value, responses)
        if error is not None:
            raise ValidationFailed(ResponsePath.of(path), error)

    def validate_all(self, responses: Responses) -> Dict[ResponsePath, str]:
        responses = self.view(responses)
        errors: Dict[ResponsePath, str] = {}
        if self.definition.validator is not None:
            errors.update(_prefixed(self.definition.validator(responses), ResponsePath()))
        for question in self.definition.questions:
            self._validate_site(question, responses, errors)
        return errors

    def _run(self, validator: Optional[Callable], prefix: ResponsePath, responses: Responses, errors) -> None:
        if validator is not None:
            errors.update(_prefixed(validator(responses.filter_prefix(prefix)), prefix))

    def _validate_site(self, question: Question, responses: Responses, errors: Dict[ResponsePath, str]) -> None:
        kind = question.kind
        if question.is_leaf:
            return
        if isinstance(kind, AllOfQuestion):
            self._run(kind.validator, question.path, responses, errors)
            for sub in kind.questions:
                self._validate_site(sub, responses, errors)
            return

        for index in self._chosen(question, responses):
            if index >= len(kind.variants):
                continue
            variant = kind.variants[index]
            if isinstance(variant.payload, AllOfQuestion):
                self._run(variant.payload.validator, question.path.child(index), responses, errors)
            for sub in variant.questions():
                self._validate_site(sub, responses, errors)

    def _chosen(self, question: Question, responses: Responses):
        choice = responses.get(question.selection_path)
        if isinstance(choice, ChosenVariant):
            return [choice.value]
        if isinstance(choice, ChosenVariants):
            return list(choice.value)
        return []


__all__ = ["SurveyValidator", "check_constraints"]
