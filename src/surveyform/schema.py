"""
Question Schema Builder: Python types -> SurveyDefinition.

Walks a declared type and produces the question tree:

    str                      -> Input (Masked / Multiline via ask())
    pathlib.Path             -> Input, rebuilt as Path
    bool                     -> Confirm
    int / float              -> Int / Float (bounds via ask(), width via Annotated)
    list[str | int | float]  -> List
    list[<union>]            -> AnyOf
    Optional[<scalar>]       -> the scalar question, flagged optional
    dataclass                -> AllOf of its fields, in declaration order
    Enum / @one_of / Union   -> OneOf

Paths:
    record field       parent.field
    variant payload    parent.<variant index>.field
    selection          parent.selected_variant(s)

The builder is pure: it never looks at answers or overrides. Overrides
are applied afterwards by surveyform.overrides.
"""

import dataclasses
import logging
import pathlib
import types
from enum import Enum
from typing import Annotated, Any, Callable, List, Optional, Tuple, Union, get_args, get_origin, get_type_hints

from surveyform.analyzer import find_duplicate_paths
from surveyform.declarations import (
    AskSpec,
    NumericWidth,
    ask_spec,
    case_options,
    humanize,
    is_one_of,
    snake_case,
    survey_options,
    union_cases,
)
from surveyform.errors import SchemaError
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
from surveyform.paths import ROOT, ResponsePath

logger = logging.getLogger(__name__)

_UNION_ORIGINS = (Union, types.UnionType)
_LIST_ELEMENTS = {str: ListElementKind.STRING, int: ListElementKind.INT, float: ListElementKind.FLOAT}


def build_definition(target: Any) -> SurveyDefinition:
    """
    Build the full question tree for a dataclass or union type.

    Raises:
        SchemaError: the type (or one of its fields) cannot be surveyed,
            is recursive, or produces duplicate paths
    """
    options = survey_options(target)
    builder = _SchemaBuilder()

    if dataclasses.is_dataclass(target) and isinstance(target, type):
        inherited = [options.validate_fields] if options.validate_fields else []
        questions = builder.record(target, ROOT, inherited)
        validator = options.validate
    elif _union_members(target) is not None:
        prompt = options.prelude or humanize(getattr(target, "__name__", "choice"))
        site = builder.union(target, ROOT, prompt, ROOT, [])
        questions = [site]
        validator = options.validate
    else:
        raise SchemaError(f"Cannot build a survey from {target!r}: expected a dataclass or a union type")

    definition = SurveyDefinition(
        questions=questions,
        prelude=options.prelude,
        epilogue=options.epilogue,
        target=target,
        validator=validator,
    )

    duplicates = find_duplicate_paths(definition)
    if duplicates:
        raise SchemaError(f"Duplicate question paths: {', '.join(str(p) for p in duplicates)}")

    logger.debug(f"Built survey for {_name(target)}: {len(definition.leaves())} leaves")
    return definition


def _name(tp: Any) -> str:
    return getattr(tp, "__name__", repr(tp))


def _union_members(tp: Any) -> Optional[List[Any]]:
    """The cases of a union-like type (Enum members, @one_of subclasses, Union args), else None."""
    if isinstance(tp, type) and issubclass(tp, Enum):
        return list(tp)
    if is_one_of(tp):
        return union_cases(tp)
    if get_origin(tp) in _UNION_ORIGINS:
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) > 1 and all(isinstance(a, type) and dataclasses.is_dataclass(a) for a in args):
            return args
    return None


def _unwrap_optional(tp: Any) -> Tuple[Any, bool]:
    if get_origin(tp) in _UNION_ORIGINS:
        args = get_args(tp)
        if type(None) in args:
            rest = [a for a in args if a is not type(None)]
            if len(rest) == 1:
                return rest[0], True
            return Union[tuple(rest)], True
    return tp, False


def _unwrap_width(tp: Any) -> Tuple[Any, Optional[NumericWidth]]:
    if get_origin(tp) is Annotated:
        base, *extras = get_args(tp)
        width = next((e for e in extras if isinstance(e, NumericWidth)), None)
        return base, width
    return tp, None


def _check_width(width: Optional[NumericWidth], base: Any, path: ResponsePath) -> None:
    if width is not None and width.is_float != (base is float):
        raise SchemaError(f"Width {width} does not match type {_name(base)} at '{path}'")


class _SchemaBuilder:
    """Holds the recursion guard for one build."""

    def __init__(self):
        self._stack: List[Any] = []

    def _enter(self, tp: Any) -> None:
        if tp in self._stack:
            chain = " -> ".join(_name(t) for t in self._stack + [tp])
            raise SchemaError(f"Recursive type cannot be surveyed: {chain}")
        self._stack.append(tp)

    def _leave(self) -> None:
        self._stack.pop()

    # === Records ===

    def record(self, cls: type, base: ResponsePath, inherited: List[Callable]) -> List[Question]:
        """Questions for every init field of a dataclass, prefixed by `base`."""
        self._enter(cls)
        try:
            try:
                hints = get_type_hints(cls, include_extras=True)
            except NameError as exc:
                raise SchemaError(f"Cannot resolve annotations of {_name(cls)}") from exc

            questions = []
            for f in dataclasses.fields(cls):
                if not f.init:
                    continue
                spec = ask_spec(f)
                path = base.child(f.name)
                prompt = spec.prompt or humanize(f.name)
                questions.append(self.field(hints[f.name], path, prompt, spec, base, inherited))
            return questions
        finally:
            self._leave()

    def field(
        self,
        tp: Any,
        path: ResponsePath,
        prompt: str,
        spec: AskSpec,
        scope: ResponsePath,
        inherited: List[Callable],
    ) -> Question:
        """Build the question for one declared field type."""
        inner, optional = _unwrap_optional(tp)
        base, width = _unwrap_width(inner)
        validators = ([spec.validate] if spec.validate else []) + list(inherited)

        kind, target = self._leaf_kind(base, width, spec, path)
        if kind is not None:
            return Question(
                path=path,
                ask=prompt,
                kind=kind,
                validators=validators,
                optional=optional,
                scope=scope,
                target=target,
            )

        if optional:
            raise SchemaError(f"Optional is only supported for scalar fields, not {_name(base)} at '{path}'")

        if get_origin(base) is list:
            (element,) = get_args(base) or (Any,)
            if _union_members(element) is None:
                raise SchemaError(f"Unsupported list element type {_name(element)} at '{path}'")
            return self.union(element, path, prompt, scope, inherited, multi=True, validators=validators)

        if _union_members(base) is not None:
            return self.union(base, path, prompt, scope, inherited, validators=validators)

        if dataclasses.is_dataclass(base) and isinstance(base, type):
            options = survey_options(base)
            nested = list(inherited)
            if options.validate_fields:
                nested.append(options.validate_fields)
            questions = self.record(base, path, nested)
            return Question(
                path=path,
                ask=prompt,
                kind=AllOfQuestion(questions=questions, target=base, validator=options.validate),
                scope=scope,
                target=base,
            )

        raise SchemaError(f"Unsupported field type {_name(base)} at '{path}'")

    def _leaf_kind(self, base: Any, width: Optional[NumericWidth], spec: AskSpec, path: ResponsePath):
        _check_width(width, base, path)
        if base is str:
            if spec.mask:
                return MaskedQuestion(), str
            if spec.multiline:
                return MultilineQuestion(), str
            return InputQuestion(), str
        if isinstance(base, type) and issubclass(base, pathlib.PurePath):
            return InputQuestion(), base
        if base is bool:
            return ConfirmQuestion(), bool
        if base is int:
            return IntQuestion(min=spec.min, max=spec.max, width=width), int
        if base is float:
            return FloatQuestion(min=spec.min, max=spec.max, width=width), float
        if get_origin(base) is list:
            args = get_args(base)
            if len(args) == 1:
                element, element_width = _unwrap_width(args[0])
                if element in _LIST_ELEMENTS:
                    _check_width(element_width, element, path)
                    kind = ListQuestion(
                        element_kind=_LIST_ELEMENTS[element],
                        min=spec.min,
                        max=spec.max,
                        min_items=spec.min_items,
                        max_items=spec.max_items,
                        width=element_width,
                    )
                    return kind, list
        return None, None

    # === Unions ===

    def union(
        self,
        tp: Any,
        path: ResponsePath,
        prompt: str,
        scope: ResponsePath,
        inherited: List[Callable],
        multi: bool = False,
        validators: Optional[List[Callable]] = None,
    ) -> Question:
        """OneOf (or AnyOf when `multi`) over the cases of a union type."""
        self._enter(tp)
        try:
            variants = [self.variant(case, index, path, inherited) for index, case in enumerate(_union_members(tp))]
        finally:
            self._leave()

        if not variants:
            raise SchemaError(f"Union {_name(tp)} at '{path}' has no cases")
        kind = AnyOfQuestion(variants=variants) if multi else OneOfQuestion(variants=variants)
        logger.debug(f"{kind.kind_name} at '{path}' with {len(variants)} variants")
        return Question(path=path, ask=prompt, kind=kind, validators=list(validators or []), scope=scope, target=tp)

    def variant(self, case: Any, index: int, site: ResponsePath, inherited: List[Callable]) -> Variant:
        if isinstance(case, Enum):
            label = case.value if isinstance(case.value, str) else humanize(case.name)
            return Variant(label=label, key=snake_case(case.name), target=case)

        options = case_options(case)
        label = options.label or humanize(case.__name__)
        key = snake_case(case.__name__)
        base = site.child(index)

        if not dataclasses.is_dataclass(case):
            return Variant(label=label, key=key, target=case)
        fields = [f for f in dataclasses.fields(case) if f.init]
        if not fields:
            return Variant(label=label, key=key, target=case)

        nested = list(inherited)
        case_survey = survey_options(case)
        if case_survey.validate_fields:
            nested.append(case_survey.validate_fields)

        if options.newtype:
            if len(fields) != 1:
                raise SchemaError(f"Newtype case {case.__name__} must have exactly one field, found {len(fields)}")
            self._enter(case)
            try:
                try:
                    hints = get_type_hints(case, include_extras=True)
                except NameError as exc:
                    raise SchemaError(f"Cannot resolve annotations of {case.__name__}") from exc
                (only,) = fields
                spec = ask_spec(only)
                payload = self.field(hints[only.name], base.child(only.name), spec.prompt or label, spec, base, nested)
            finally:
                self._leave()
            return Variant(label=label, key=key, target=case, payload=payload)

        questions = self.record(case, base, nested)
        payload = AllOfQuestion(questions=questions, target=case, validator=case_survey.validate)
        return Variant(label=label, key=key, target=case, payload=payload)


__all__ = ["build_definition"]
