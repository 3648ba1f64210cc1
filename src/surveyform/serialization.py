"""
Serialization helpers for survey definitions.

Renders a SurveyDefinition as a plain dict, JSON or YAML document, for
documentation generators and for inspecting what a type turns into.
Classes and callables are rendered by name, so the output is a
description of the survey, not something a definition can be rebuilt from.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List

import yaml

from surveyform.defaults import DefaultValue
from surveyform.model import (
    AllOfQuestion,
    AnyOfQuestion,
    FloatQuestion,
    IntQuestion,
    ListQuestion,
    MaskedQuestion,
    OneOfQuestion,
    Question,
    QuestionKind,
    SurveyDefinition,
    Variant,
)
from surveyform.values import ResponseValue


def _name(obj: Any) -> str | None:
    if obj is None:
        return None
    return getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None) or str(obj)


def _plain(value: Any) -> Any:
    if isinstance(value, ResponseValue):
        value = value.value
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return repr(value)


def default_to_dict(default: DefaultValue, masked: bool = False) -> Dict[str, Any] | None:
    if default.is_none:
        return None
    value = "***" if masked else _plain(default.value)
    return {"state": default.state.value, "value": value}


def variant_to_dict(v: Variant) -> Dict[str, Any]:
    payload: Any = None
    if isinstance(v.payload, AllOfQuestion):
        payload = [question_to_dict(q) for q in v.payload.questions]
    elif isinstance(v.payload, Question):
        payload = question_to_dict(v.payload)
    return {"label": v.label, "key": v.key, "target": _name(v.target), "payload": payload}


def kind_to_dict(kind: QuestionKind) -> Dict[str, Any]:
    d: Dict[str, Any] = {"type": kind.kind_name}
    if isinstance(kind, (IntQuestion, FloatQuestion)):
        d.update(min=kind.min, max=kind.max, width=None if kind.width is None else str(kind.width))
    elif isinstance(kind, ListQuestion):
        d.update(
            element=kind.element_kind.value,
            min=kind.min,
            max=kind.max,
            min_items=kind.min_items,
            max_items=kind.max_items,
            width=None if kind.width is None else str(kind.width),
        )
    elif isinstance(kind, MaskedQuestion):
        d["mask"] = kind.mask
    elif isinstance(kind, AllOfQuestion):
        d.update(
            target=_name(kind.target),
            validator=_name(kind.validator),
            questions=[question_to_dict(q) for q in kind.questions],
        )
    elif isinstance(kind, OneOfQuestion):
        d.update(default=kind.default, variants=[variant_to_dict(v) for v in kind.variants])
    elif isinstance(kind, AnyOfQuestion):
        d.update(defaults=list(kind.defaults), variants=[variant_to_dict(v) for v in kind.variants])
    return d


def question_to_dict(q: Question) -> Dict[str, Any]:
    return {
        "path": str(q.path),
        "ask": q.ask,
        "kind": kind_to_dict(q.kind),
        "default": default_to_dict(q.default, masked=isinstance(q.kind, MaskedQuestion)),
        "optional": q.optional,
        "validators": [_name(v) for v in q.validators],
    }


def definition_to_dict(d: SurveyDefinition) -> Dict[str, Any]:
    questions: List[Dict[str, Any]] = [question_to_dict(q) for q in d.questions]
    return {
        "target": _name(d.target),
        "prelude": d.prelude,
        "epilogue": d.epilogue,
        "validator": _name(d.validator),
        "questions": questions,
    }


def definition_to_json(d: SurveyDefinition) -> str:
    return json.dumps(definition_to_dict(d), sort_keys=True)


def definition_to_yaml(d: SurveyDefinition) -> str:
    return yaml.safe_dump(definition_to_dict(d), sort_keys=False)
