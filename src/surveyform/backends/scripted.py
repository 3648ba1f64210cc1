"""
Scripted backend: runs a survey from pre-recorded answers.

No terminal, no GUI. Answers come from a mapping (or a YAML document)
keyed by dotted path:

    name: Alice
    age:
      attempts: [200, 30]          # first candidate is rejected, second accepted
    status.selected_variant: Employed
    status.1.employer: ACME

Nested mappings are flattened, so `address: {street: Main St}` is the
same as `address.street: Main St`. A mapping with the single key
`attempts` is a queue of candidates for one path, tried in order the way
a user would retype after an error.

Choices may be given as a variant index, label or key. Text answers to
Int/Float/Confirm questions are parsed ("42", "2.5", "yes"); text answers to
list questions are split on commas ("MIT, Stanford").

Unscripted leaves accept their suggestion; unscripted optional leaves are
skipped; anything else raises SurfaceFailure. The CANCEL marker aborts
the run with Cancelled.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import yaml

from surveyform.errors import Cancelled, SchemaError, SurfaceFailure, ValidationFailed, WholeTreeValidationFailed
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
)
from surveyform.overrides import choice_value, value_for_kind
from surveyform.paths import ResponsePath
from surveyform.protocol import FieldValidator, SurveyBackend, TreeValidator
from surveyform.responses import Responses
from surveyform.values import ResponseValue

logger = logging.getLogger(__name__)

CANCEL = "<cancel>"
ATTEMPTS_KEY = "attempts"

_TRUE = {"y", "yes", "true", "1"}
_FALSE = {"n", "no", "false", "0"}
_LIST_ITEMS = {ListElementKind.STRING: str, ListElementKind.INT: int, ListElementKind.FLOAT: float}


def _flatten_script(data: Mapping[str, Any], prefix: str = "") -> Dict[str, List[Any]]:
    script: Dict[str, List[Any]] = {}
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            if set(value) == {ATTEMPTS_KEY}:
                script[path] = list(value[ATTEMPTS_KEY])
            else:
                script.update(_flatten_script(value, path))
        else:
            script[path] = [value]
    return script


def _parse_text(question: Question, raw: Any) -> Any:
    if not isinstance(raw, str):
        return raw
    text = raw.strip()
    kind = question.kind
    if isinstance(kind, IntQuestion):
        return int(text)
    if isinstance(kind, FloatQuestion):
        return float(text)
    if isinstance(kind, ConfirmQuestion):
        if text.lower() in _TRUE:
            return True
        if text.lower() in _FALSE:
            return False
        raise ValueError(f"Please answer yes or no, not {raw!r}")
    if isinstance(kind, ListQuestion):
        convert = _LIST_ITEMS[kind.element_kind]
        return [convert(item.strip()) for item in text.split(",") if item.strip()]
    return raw


class ScriptedBackend(SurveyBackend):
    """
    Non-interactive collection backend.

    Properties:
        rejections: (path, candidate, message) for every rejected candidate
        asked: Paths in the order they were answered
    """

    name = "scripted"

    def __init__(self, answers: Optional[Mapping[str, Any]] = None, script: Optional[str] = None):
        self._script: Dict[ResponsePath, List[Any]] = {}
        self.rejections: List[Tuple[ResponsePath, Any, str]] = []
        self.asked: List[ResponsePath] = []
        if script is not None:
            data = yaml.safe_load(script)
            if data is not None and not isinstance(data, Mapping):
                raise SurfaceFailure("A survey script must be a YAML mapping of path to answer")
            answers = {**(data or {}), **(answers or {})}
        for path, candidates in _flatten_script(answers or {}).items():
            self._script[ResponsePath.parse(path)] = candidates

    @classmethod
    def from_yaml(cls, text: str) -> "ScriptedBackend":
        return cls(script=text)

    def with_response(self, path: Any, value: Any) -> "ScriptedBackend":
        """Script a single answer for `path`."""
        self._script[ResponsePath.of(path)] = [value]
        return self

    def with_answers(self, path: Any, *candidates: Any) -> "ScriptedBackend":
        """Script several attempts for `path`; later ones are used after a rejection."""
        self._script[ResponsePath.of(path)] = list(candidates)
        return self

    def with_choice(self, path: Any, *selectors: Any) -> "ScriptedBackend":
        """
        Script the choice at a OneOf/AnyOf site, by index, label or key.

        One selector for a OneOf site; any number for an AnyOf site.
        """
        key = ResponsePath.of(path)
        self._script[key] = [selectors[0] if len(selectors) == 1 else list(selectors)]
        return self

    def cancel_at(self, path: Any) -> "ScriptedBackend":
        self._script[ResponsePath.of(path)] = [CANCEL]
        return self

    # === Collection ===

    def collect(
        self,
        definition: SurveyDefinition,
        validate: FieldValidator,
        validate_all: Optional[TreeValidator] = None,
    ) -> Responses:
        responses = Responses()
        self.rejections = []
        self.asked = []
        logger.info(f"Collecting {len(definition.leaves())} visible questions")

        for question in definition.questions:
            self._ask(question, responses, validate)

        if validate_all is not None:
            errors = validate_all(responses)
            if errors:
                raise WholeTreeValidationFailed(errors)
        return responses

    def _ask(self, question: Question, responses: Responses, validate: FieldValidator) -> None:
        kind = question.kind
        if isinstance(kind, AllOfQuestion):
            for sub in kind.questions:
                self._ask(sub, responses, validate)
            return

        if isinstance(kind, (OneOfQuestion, AnyOfQuestion)):
            choice = self._resolve(question, question.selection_path, responses, validate, self._choice_value)
            indices = [choice.value] if isinstance(kind, OneOfQuestion) else list(choice.value)
            for index in indices:
                for sub in kind.variants[index].questions():
                    self._ask(sub, responses, validate)
            return

        if question.is_leaf:
            self._resolve(question, question.path, responses, validate, self._leaf_value)

    @staticmethod
    def _leaf_value(question: Question, raw: Any) -> ResponseValue:
        return value_for_kind(question, _parse_text(question, raw))

    @staticmethod
    def _choice_value(question: Question, raw: Any) -> ResponseValue:
        # A lone selector at an AnyOf site picks one variant
        if isinstance(question.kind, AnyOfQuestion) and isinstance(raw, (str, int)):
            raw = [raw]
        return choice_value(question, raw)

    def _candidates(self, question: Question, path: ResponsePath) -> Optional[List[Any]]:
        for key in (path, question.path):
            if key in self._script:
                return self._script[key]
        if question.default.is_suggested:
            return [question.default.value]
        return None

    def _resolve(
        self,
        question: Question,
        path: ResponsePath,
        responses: Responses,
        validate: FieldValidator,
        convert: Callable[[Question, Any], ResponseValue],
    ) -> Optional[ResponseValue]:
        candidates = self._candidates(question, path)
        if candidates is None:
            if question.optional:
                logger.debug(f"Skipped optional '{path}'")
                return None
            raise SurfaceFailure(f"No scripted answer for '{path}' ({question.ask})")

        message = "no answer given"
        for raw in candidates:
            if isinstance(raw, str) and raw == CANCEL:
                raise Cancelled(f"Survey cancelled at '{path}'")
            if raw is None and question.optional:
                return None
            try:
                value = convert(question, raw)
            except (SchemaError, TypeError, ValueError) as exc:
                message = str(exc)
            else:
                error = validate(path, value, responses)
                if error is None:
                    responses.insert(path, value)
                    self.asked.append(path)
                    logger.debug(f"Accepted {raw!r} for '{path}'")
                    return value
                message = error
            self.rejections.append((path, raw, message))
            logger.debug(f"Rejected {raw!r} for '{path}': {message}")
        raise ValidationFailed(path, message)


__all__ = ["ScriptedBackend", "CANCEL"]
