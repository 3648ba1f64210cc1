"""
Reconstruction Engine: Responses -> typed value.

Walks the FULL definition (assumed sites included) depth-first, in the
same order the schema builder produced it:

    leaf     typed getter at the question's path, narrowed to the field width
    AllOf    target class built from its sub-questions
    OneOf    variant chosen at `path.selected_variant`, then its payload
    AnyOf    variants chosen at `path.selected_variants`, in selection order
    assumed  the assumed value, never read from Responses

Missing or mistyped entries raise StructuralMismatch; numbers that do not
fit their declared width raise CoercionError.
"""

import copy
import dataclasses
import logging
import pathlib
from enum import Enum
from typing import Any, List

from surveyform.declarations import NumericWidth
from surveyform.errors import CoercionError, StructuralMismatch
from surveyform.model import (
    AllOfQuestion,
    AnyOfQuestion,
    ConfirmQuestion,
    FloatQuestion,
    IntQuestion,
    ListElementKind,
    ListQuestion,
    OneOfQuestion,
    Question,
    SurveyDefinition,
    Variant,
)
from surveyform.paths import ResponsePath
from surveyform.responses import Responses
from surveyform.values import ChosenVariant, ChosenVariants, ResponseValue

logger = logging.getLogger(__name__)


def reconstruct(definition: SurveyDefinition, responses: Responses) -> Any:
    """Rebuild an instance of `definition.target` from collected responses."""
    target = definition.target
    if dataclasses.is_dataclass(target):
        result = _build(target, definition.questions, responses)
    elif definition.questions:
        result = _value(definition.questions[0], responses)
    else:
        raise StructuralMismatch(f"Definition for {target!r} has no questions")
    logger.debug(f"Reconstructed {type(result).__name__} from {len(responses)} responses")
    return result


def _build(target: Any, questions: List[Question], responses: Responses) -> Any:
    values = {q.path.last: _value(q, responses) for q in questions}
    if target is None:
        return values
    return target(**values)


def _value(question: Question, responses: Responses) -> Any:
    kind = question.kind
    if question.is_assumed:
        assumed = question.default.value
        if question.is_leaf:
            if assumed is None:
                return None
            return _leaf(question, assumed.value)
        if not isinstance(assumed, (ChosenVariant, ChosenVariants)):
            return copy.deepcopy(assumed)

    if question.is_leaf:
        if question.optional and not responses.has_value(question.path):
            return None
        return _leaf(question, _read_leaf(question, responses))

    if isinstance(kind, AllOfQuestion):
        return _build(kind.target, kind.questions, responses)

    if isinstance(kind, OneOfQuestion):
        index = _choice(question, responses)
        if index >= len(kind.variants):
            raise StructuralMismatch(
                f"Variant index {index} out of range at '{question.selection_path}' "
                f"({len(kind.variants)} variants)"
            )
        return _variant(kind.variants[index], responses)

    if isinstance(kind, AnyOfQuestion):
        indices = _choice(question, responses)
        if len(set(indices)) != len(indices):
            raise StructuralMismatch(f"Duplicate variant in selection at '{question.selection_path}'")
        items = []
        for index in indices:
            if index >= len(kind.variants):
                raise StructuralMismatch(
                    f"Variant index {index} out of range at '{question.selection_path}' "
                    f"({len(kind.variants)} variants)"
                )
            items.append(_variant(kind.variants[index], responses))
        return items

    raise StructuralMismatch(f"Cannot reconstruct {kind.kind_name} at '{question.path}'")


def _choice(question: Question, responses: Responses) -> Any:
    if question.is_assumed:
        return question.default.value.value
    if isinstance(question.kind, OneOfQuestion):
        return responses.get_chosen_variant(question.selection_path)
    return list(responses.get_chosen_variants(question.selection_path))


def _variant(variant: Variant, responses: Responses) -> Any:
    if variant.is_unit:
        if isinstance(variant.target, Enum):
            return variant.target
        return variant.target()
    if variant.is_newtype:
        return _build(variant.target, [variant.payload], responses)
    return _build(variant.target, variant.payload.questions, responses)


def _read_leaf(question: Question, responses: Responses) -> Any:
    kind = question.kind
    path = question.path
    if isinstance(kind, IntQuestion):
        return responses.get_int(path)
    if isinstance(kind, FloatQuestion):
        return responses.get_float(path)
    if isinstance(kind, ConfirmQuestion):
        return responses.get_bool(path)
    if isinstance(kind, ListQuestion):
        getter = {
            ListElementKind.STRING: responses.get_string_list,
            ListElementKind.INT: responses.get_int_list,
            ListElementKind.FLOAT: responses.get_float_list,
        }[kind.element_kind]
        return getter(path)
    return responses.get_string(path)


def _narrow(path: ResponsePath, value: Any, width: NumericWidth) -> Any:
    if width is None:
        return value
    try:
        return width.narrow(value)
    except ValueError as exc:
        raise CoercionError(path, value, width) from exc


def _leaf(question: Question, raw: Any) -> Any:
    if isinstance(raw, ResponseValue):
        raw = raw.value
    kind = question.kind
    if isinstance(kind, (IntQuestion, FloatQuestion)):
        return _narrow(question.path, raw, kind.width)
    if isinstance(kind, ListQuestion):
        return [_narrow(question.path, item, kind.width) for item in raw]
    if isinstance(question.target, type) and issubclass(question.target, pathlib.PurePath):
        return question.target(raw)
    return raw


__all__ = ["reconstruct"]
