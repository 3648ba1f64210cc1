"""
Survey builder: overrides plus the run loop.

    profile = (
        Profile.builder()
        .suggest_name("Alice")
        .assume_address_country("UK")
        .suggest_status(lambda s: s.employed(lambda e: e.employer("ACME")))
        .run(ScriptedBackend(...))
    )

The builder only records two maps, ResponsePath -> suggested value and
ResponsePath -> assumed value. Named methods (`suggest_<field_path>`,
`assume_<field_path>`) and closure scopes are sugar over `suggest(path,
value)` and `assume(path, value)`.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from surveyform.config import create_backend
from surveyform.errors import WholeTreeValidationFailed
from surveyform.model import AllOfQuestion, AnyOfQuestion, OneOfQuestion, Question, SurveyDefinition, Variant
from surveyform.overrides import apply_overrides, flatten_definition
from surveyform.paths import ResponsePath
from surveyform.reconstruction import reconstruct
from surveyform.schema import build_definition
from surveyform.validation import SurveyValidator

logger = logging.getLogger(__name__)

SUGGEST = "suggest"
ASSUME = "assume"


def _is_closure(value: Any) -> bool:
    return callable(value) and not isinstance(value, type)


def _path_name(path: ResponsePath) -> str:
    return "_".join(str(s) for s in path)


class SurveyBuilder:
    """
    Collects suggestions and assumptions for one survey type, then runs it.

    Every method that records an override returns the builder, so calls chain.
    """

    def __init__(self, target: Any):
        self.target = target
        self._suggestions: Dict[ResponsePath, Any] = {}
        self._assumptions: Dict[ResponsePath, Any] = {}
        self._template = build_definition(target)
        self._names: Dict[str, List[Question]] = {}
        for question in self._template.iter_questions():
            if not question.path.is_empty():
                self._names.setdefault(_path_name(question.path), []).append(question)

    # === Generic overrides ===

    def _store(self, mode: str) -> Dict[ResponsePath, Any]:
        return self._suggestions if mode == SUGGEST else self._assumptions

    def _set(self, mode: str, path: Any, value: Any) -> "SurveyBuilder":
        self._store(mode)[ResponsePath.of(path)] = value
        return self

    def suggest(self, path: Any, value: Any) -> "SurveyBuilder":
        """Pre-fill the site at `path`; the user can still change it."""
        return self._set(SUGGEST, path, value)

    def assume(self, path: Any, value: Any) -> "SurveyBuilder":
        """Fix the site at `path`; it is never asked."""
        return self._set(ASSUME, path, value)

    def with_suggestions(self, instance: Any) -> "SurveyBuilder":
        """Suggest every field of an existing instance (e.g. to edit a saved record)."""
        self._suggestions.update(flatten_definition(self._template, instance))
        return self

    @property
    def suggestions(self) -> Dict[ResponsePath, Any]:
        return dict(self._suggestions)

    @property
    def assumptions(self) -> Dict[ResponsePath, Any]:
        return dict(self._assumptions)

    # === Named overrides ===

    def __getattr__(self, name: str) -> Callable[..., "SurveyBuilder"]:
        for mode in (SUGGEST, ASSUME):
            prefix = f"{mode}_"
            if name.startswith(prefix):
                matches = self.__dict__.get("_names", {}).get(name[len(prefix):], [])
                if len(matches) == 1:
                    question = matches[0]
                    return lambda value: self._apply(mode, question, value)
                if len(matches) > 1:
                    raise AttributeError(f"'{name}' is ambiguous: {', '.join(str(q.path) for q in matches)}")
        raise AttributeError(f"{type(self).__name__!s} has no attribute '{name}'")

    def _apply(self, mode: str, question: Question, value: Any) -> "SurveyBuilder":
        if _is_closure(value) and not question.is_leaf:
            value(_Scope(self, mode, question))
            return self
        return self._set(mode, question.path, value)

    def _select(self, mode: str, site: Question, key: Any) -> None:
        store = self._store(mode)
        if isinstance(site.kind, AnyOfQuestion):
            chosen = list(store.get(site.selection_path, []))
            if key not in chosen:
                chosen.append(key)
            store[site.selection_path] = chosen
        else:
            store[site.selection_path] = key

    # === Running ===

    def definition(self) -> SurveyDefinition:
        """A fresh full definition with the recorded overrides applied."""
        return apply_overrides(build_definition(self.target), self._suggestions, self._assumptions)

    def run(self, backend: Any = None) -> Any:
        """
        Collect answers with `backend` and rebuild the typed value.

        `backend` may be a SurveyBackend instance, a registered backend
        name, a RunConfig or a config mapping (see surveyform.config).
        """
        full = self.definition()
        visible = full.visible()
        validator = SurveyValidator(full)
        surface = create_backend(backend)

        name = getattr(self.target, "__name__", "survey")
        logger.info(f"Running {name} survey with the {surface.name} backend")
        checked = []

        def validate_all(responses):
            checked.append(True)
            return validator.validate_all(responses)

        responses = surface.collect(visible, validator.validate_field, validate_all)

        # Surfaces without all-at-once editing may never call validate_all
        if not checked:
            errors = validator.validate_all(responses)
            if errors:
                raise WholeTreeValidationFailed(errors)
        result = reconstruct(full, responses)
        logger.info(f"Completed {name} survey ({len(responses)} responses)")
        return result


class _Scope:
    """
    Closure helper for overriding fields of a composite site.

    On a record:  scope.<field>(value | closure)
    On a union:   scope.select_<case>(), scope.select(*cases),
                  scope.<case>(value | closure)  (selects the case too)
    """

    def __init__(self, builder: SurveyBuilder, mode: str, site: Question, questions: Optional[List[Question]] = None):
        self._builder = builder
        self._mode = mode
        self._site = site
        if questions is None:
            questions = site.kind.questions if isinstance(site.kind, AllOfQuestion) else []
        self._fields = {q.path.last: q for q in questions}

    def _variants(self) -> List[Variant]:
        if isinstance(self._site.kind, (OneOfQuestion, AnyOfQuestion)):
            return self._site.kind.variants
        return []

    def select(self, *cases: Any) -> "_Scope":
        for case in cases:
            self._builder._select(self._mode, self._site, case)
        return self

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._fields:
            question = self._fields[name]
            return lambda value: self._builder._apply(self._mode, question, value)

        variants = {v.key: v for v in self._variants()}
        if name.startswith("select_") and name[len("select_"):] in variants:
            key = name[len("select_"):]
            return lambda: self.select(key)
        if name in variants:
            return lambda value=None: self._case(variants[name], value)
        raise AttributeError(f"No field or case '{name}' at '{self._site.path}'")

    def _case(self, variant: Variant, value: Any) -> "_Scope":
        self.select(variant.key)
        if value is None:
            return self
        if variant.is_newtype:
            self._builder._apply(self._mode, variant.payload, value)
        elif variant.is_struct and _is_closure(value):
            value(_Scope(self._builder, self._mode, self._site, variant.payload.questions))
        else:
            raise TypeError(f"Case '{variant.key}' at '{self._site.path}' takes no value")
        return self


def builder(target: Any) -> SurveyBuilder:
    return SurveyBuilder(target)


__all__ = ["SurveyBuilder", "builder"]
