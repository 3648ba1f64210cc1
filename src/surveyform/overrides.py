"""
Override layer: suggestions and assumptions on a built definition.

A suggestion pre-fills a site and leaves it editable. An assumption fixes
a site: the value is used verbatim and the site never reaches a backend.
When both are given for the same site, the assumption wins.

Values may target:
    - a leaf                 plain Python value (str, int, float, bool, Path, list)
    - a selection path       index, label, key, case class, Enum member or instance
    - a composite site       a typed instance (flattened for suggestions,
                             kept whole as the shadow for assumptions)
"""

import dataclasses
import logging
import pathlib
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from surveyform.defaults import DefaultValue
from surveyform.errors import SchemaError, ValidationFailed
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
    Variant,
)
from surveyform.paths import ResponsePath
from surveyform.responses import Responses
from surveyform.validation import check_constraints
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
)

logger = logging.getLogger(__name__)

_STRING_KINDS = (InputQuestion, MaskedQuestion, MultilineQuestion)
_LIST_VALUES = {
    ListElementKind.STRING: StringList,
    ListElementKind.INT: IntList,
    ListElementKind.FLOAT: FloatList,
}


def apply_overrides(
    definition: SurveyDefinition,
    suggestions: Optional[Mapping[Any, Any]] = None,
    assumptions: Optional[Mapping[Any, Any]] = None,
) -> SurveyDefinition:
    """
    Attach suggestions and assumptions to a freshly built definition.

    The definition is updated in place and returned. Suggestions are
    applied first so an assumption on the same site replaces them.

    Raises:
        SchemaError: a path does not exist, or a value does not fit its site
        ValidationFailed: an assumed leaf violates its declared bounds
    """
    sites = {q.path: q for q in definition.iter_questions()}
    selections = definition.selection_sites()

    for path, value in (suggestions or {}).items():
        _suggest(sites, selections, ResponsePath.of(path), value)
    for path, value in (assumptions or {}).items():
        _assume(sites, selections, ResponsePath.of(path), value)
    return definition


def _lookup(sites, selections, key: ResponsePath) -> Tuple[Optional[Question], Optional[Question]]:
    if key in selections:
        return None, selections[key]
    if key in sites:
        return sites[key], None
    raise SchemaError(f"No question at '{key}'")


def _suggest(sites, selections, key: ResponsePath, value: Any) -> None:
    question, selection = _lookup(sites, selections, key)
    if selection is not None:
        choice = choice_value(selection, value)
        selection.default = DefaultValue.suggested(choice)
        _set_kind_default(selection, choice)
        logger.debug(f"Suggested choice {choice.value} at '{key}'")
        return
    if value is None:
        return
    if question.is_leaf:
        question.default = DefaultValue.suggested(value_for_kind(question, value))
        logger.debug(f"Suggested {value!r} at '{key}'")
        return
    if _is_selection(question, value):
        _suggest(sites, selections, question.selection_path, value)
        return
    for path, leaf_value in flatten_instance(question, value):
        _suggest(sites, selections, path, leaf_value)


def _assume(sites, selections, key: ResponsePath, value: Any) -> None:
    question, selection = _lookup(sites, selections, key)
    if selection is not None:
        choice = choice_value(selection, value)
        selection.default = DefaultValue.assumed(choice)
        _set_kind_default(selection, choice)
        logger.debug(f"Assumed choice {choice.value} at '{key}'")
        return
    if question.is_leaf:
        if value is None:
            if not question.optional:
                raise SchemaError(f"Cannot assume None for required question '{key}'")
            question.default = DefaultValue.assumed(None)
            return
        response = value_for_kind(question, value)
        error = check_constraints(question, response)
        if error is not None:
            raise ValidationFailed(key, error)
        question.default = DefaultValue.assumed(response)
        logger.debug(f"Assumed {value!r} at '{key}'")
        return
    if _is_selection(question, value):
        _assume(sites, selections, question.selection_path, value)
        return
    _check_shadow(question, value)
    question.default = DefaultValue.assumed(value)
    logger.debug(f"Assumed {type(value).__name__} instance for '{key}'")


def _is_selector(value: Any) -> bool:
    if isinstance(value, (ChosenVariant, ChosenVariants, str, type)):
        return True
    return isinstance(value, int) and not isinstance(value, (bool, Enum))


def _is_selection(question: Question, value: Any) -> bool:
    """True when a value given for a OneOf/AnyOf site names the choice rather than carrying a typed instance."""
    if isinstance(question.kind, OneOfQuestion):
        return _is_selector(value)
    if isinstance(question.kind, AnyOfQuestion):
        if isinstance(value, ChosenVariants):
            return True
        items = list(value)
        return bool(items) and all(_is_selector(item) for item in items)
    return False


def _set_kind_default(question: Question, choice: ResponseValue) -> None:
    if isinstance(question.kind, OneOfQuestion):
        question.kind.default = choice.value
    else:
        question.kind.defaults = list(choice.value)


def _check_shadow(question: Question, value: Any) -> None:
    kind = question.kind
    if isinstance(kind, AllOfQuestion):
        if kind.target is not None and not isinstance(value, kind.target):
            raise SchemaError(f"Expected a {kind.target.__name__} for '{question.path}', got {value!r}")
    elif isinstance(kind, OneOfQuestion):
        variant_index(question, value)
    elif isinstance(kind, AnyOfQuestion):
        _item_indices(question, value)


# =========================================================================
# VALUE CONVERSION
# =========================================================================


def value_for_kind(question: Question, value: Any) -> ResponseValue:
    """
    Convert a plain Python value into the ResponseValue a leaf collects.

    Raises:
        SchemaError: the value cannot be stored at this leaf
    """
    kind = question.kind
    try:
        if isinstance(kind, _STRING_KINDS):
            if isinstance(value, pathlib.PurePath):
                value = str(value)
            return _expect(StringValue, value)
        if isinstance(kind, IntQuestion):
            return _expect(IntValue, value)
        if isinstance(kind, FloatQuestion):
            return _expect(FloatValue, value)
        if isinstance(kind, ConfirmQuestion):
            return _expect(BoolValue, value)
        if isinstance(kind, ListQuestion):
            return _expect(_LIST_VALUES[kind.element_kind], value)
    except (TypeError, ValueError) as exc:
        raise SchemaError(f"Cannot use {value!r} for '{question.path}': {exc}") from exc
    raise SchemaError(f"'{question.path}' is a {kind.kind_name} question and takes no plain value")


def _expect(value_type, value: Any) -> ResponseValue:
    if isinstance(value, ResponseValue):
        if not isinstance(value, value_type):
            raise TypeError(f"expected {value_type.type_name}, got {value.type_name}")
        return value
    return value_type(value)


def variant_index(question: Question, selector: Any) -> int:
    """
    Resolve a variant selector at a OneOf/AnyOf site to its index.

    Accepts an index, a ChosenVariant, a label or key string, a case
    class, an Enum member or an instance of a case class.
    """
    variants: List[Variant] = question.kind.variants
    if isinstance(selector, ChosenVariant):
        selector = selector.value
    if isinstance(selector, int) and not isinstance(selector, (bool, Enum)):
        if 0 <= selector < len(variants):
            return selector
        raise SchemaError(f"Variant index {selector} out of range at '{question.path}'")
    for index, variant in enumerate(variants):
        if isinstance(selector, str) and selector in (variant.label, variant.key):
            return index
        if selector is variant.target:
            return index
        if isinstance(variant.target, type) and type(selector) is variant.target:
            return index
    raise SchemaError(f"No variant matching {selector!r} at '{question.path}'")


def _item_indices(question: Question, items: Iterable[Any]) -> List[int]:
    indices = [variant_index(question, item) for item in items]
    if len(set(indices)) != len(indices):
        raise SchemaError(f"A multi-selection cannot repeat a variant at '{question.path}'")
    return indices


def choice_value(question: Question, value: Any) -> ResponseValue:
    """Selection value for a OneOf (ChosenVariant) or AnyOf (ChosenVariants) site."""
    if isinstance(question.kind, OneOfQuestion):
        return ChosenVariant(variant_index(question, value))
    if isinstance(value, ChosenVariants):
        _item_indices(question, value.value)
        return value
    return ChosenVariants(tuple(_item_indices(question, value)))


# =========================================================================
# FLATTENING
# =========================================================================


def flatten_instance(question: Question, value: Any) -> List[Tuple[ResponsePath, Any]]:
    """
    Flatten a typed value into (path, value) pairs for leaves and selections.

    Selection entries carry ChosenVariant / ChosenVariants, leaf entries
    carry the plain field value. Optional leaves holding None are skipped.
    """
    kind = question.kind
    if question.is_leaf:
        return [] if value is None else [(question.path, value)]

    pairs: List[Tuple[ResponsePath, Any]] = []
    if isinstance(kind, AllOfQuestion):
        for sub in kind.questions:
            pairs.extend(flatten_instance(sub, getattr(value, sub.path.last)))
    elif isinstance(kind, OneOfQuestion):
        index = variant_index(question, value)
        pairs.append((question.selection_path, ChosenVariant(index)))
        pairs.extend(_flatten_payload(kind.variants[index], value))
    elif isinstance(kind, AnyOfQuestion):
        items = list(value)
        indices = _item_indices(question, items)
        pairs.append((question.selection_path, ChosenVariants(tuple(indices))))
        for index, item in zip(indices, items):
            pairs.extend(_flatten_payload(kind.variants[index], item))
    return pairs


def _flatten_payload(variant: Variant, value: Any) -> List[Tuple[ResponsePath, Any]]:
    pairs: List[Tuple[ResponsePath, Any]] = []
    for sub in variant.questions():
        pairs.extend(flatten_instance(sub, getattr(value, sub.path.last)))
    return pairs


def assumed_responses(definition: SurveyDefinition) -> Responses:
    """
    The assumed values of a definition as a Responses store.

    Assumed leaves and selections are stored as-is; composite shadows are
    flattened into their leaf and selection entries. Validators read this
    overlay together with the collected answers, so an assumed site counts
    exactly like an answered one.
    """
    sites = {q.path: q for q in definition.iter_questions()}
    overlay = Responses()

    def visit(question: Question) -> None:
        default = question.default
        if default.is_assumed and default.value is not None:
            value = default.value
            if question.is_leaf:
                overlay.insert(question.path, value)
                return
            if not isinstance(value, (ChosenVariant, ChosenVariants)):
                for path, raw in flatten_instance(question, value):
                    if not isinstance(raw, ResponseValue):
                        raw = value_for_kind(sites[path], raw)
                    overlay.insert(path, raw)
                return
            overlay.insert(question.selection_path, value)
        for sub in question.children():
            visit(sub)

    for question in definition.questions:
        visit(question)
    return overlay


def flatten_definition(definition: SurveyDefinition, instance: Any) -> Dict[ResponsePath, Any]:
    """Flatten a whole typed instance against the root questions of a definition."""
    pairs: List[Tuple[ResponsePath, Any]] = []
    if dataclasses.is_dataclass(definition.target):
        for question in definition.questions:
            pairs.extend(flatten_instance(question, getattr(instance, question.path.last)))
    else:
        for question in definition.questions:
            pairs.extend(flatten_instance(question, instance))
    return dict(pairs)


__all__ = [
    "apply_overrides",
    "value_for_kind",
    "variant_index",
    "choice_value",
    "flatten_instance",
    "flatten_definition",
    "assumed_responses",
]
