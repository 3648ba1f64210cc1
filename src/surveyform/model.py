"""
Core Survey Model Objects

Defines the question tree that every other layer consumes.

These are plain data classes representing:
    - Question kinds (leaf inputs and composite AllOf/OneOf/AnyOf groups)
    - Variants (the cases of a tagged union)
    - Questions (a kind placed at a ResponsePath with a prompt)
    - SurveyDefinition (root container)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about terminals, GUIs or documents
        - Carry structure plus the metadata needed to validate and rebuild
        - Are produced by the schema builder, never hand-edited by backends
"""

from abc import ABC
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

from surveyform.defaults import NO_DEFAULT, DefaultValue
from surveyform.paths import ROOT, ResponsePath, Selection
from surveyform.values import ChosenVariant, ChosenVariants


class QuestionKind(ABC):
    """
    Base class for all question kinds.

    Leaf kinds collect exactly one ResponseValue at the question's path.
    Composite kinds (AllOf, OneOf, AnyOf) nest further questions.
    """

    kind_name = "Question"
    is_leaf = True


@dataclass
class InputQuestion(QuestionKind):
    """Single-line text input."""

    kind_name = "Input"


@dataclass
class MaskedQuestion(QuestionKind):
    """Hidden text input, for passwords and PINs."""

    mask: str = "*"
    kind_name = "Masked"


@dataclass
class MultilineQuestion(QuestionKind):
    """Multi-line text input (editor or textarea)."""

    kind_name = "Multiline"


@dataclass
class IntQuestion(QuestionKind):
    """
    Integer input with optional inclusive bounds.

    Properties:
        min, max: Inclusive bounds; None means unconstrained
        width: NumericWidth the reconstructed field narrows to (None = 64-bit)
    """

    min: Optional[int] = None
    max: Optional[int] = None
    width: Any = None
    kind_name = "Int"


@dataclass
class FloatQuestion(QuestionKind):
    """Floating-point input with optional inclusive bounds."""

    min: Optional[float] = None
    max: Optional[float] = None
    width: Any = None
    kind_name = "Float"


@dataclass
class ConfirmQuestion(QuestionKind):
    """Yes/no confirmation."""

    kind_name = "Confirm"


class ListElementKind(Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"


@dataclass
class ListQuestion(QuestionKind):
    """
    List of scalar values collected as one answer.

    Properties:
        element_kind: ListElementKind of every element
        min, max: Inclusive element bounds (numeric lists only)
        min_items, max_items: Optional constraints on the element count
        width: NumericWidth each element narrows to
    """

    element_kind: ListElementKind = ListElementKind.STRING
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    width: Any = None
    kind_name = "List"


@dataclass
class AllOfQuestion(QuestionKind):
    """
    A group of questions that are all answered (a record).

    Properties:
        questions: Sub-questions in field declaration order
        target: Class rebuilt from the answers (None for pure grouping)
        validator: Optional whole-record validator, Responses -> {path: message}
    """

    questions: List["Question"] = field(default_factory=list)
    target: Any = None
    validator: Optional[Callable] = None
    kind_name = "AllOf"
    is_leaf = False


@dataclass
class Variant:
    """
    One case of a tagged union.

    Properties:
        label: Text shown to the user
        key: Stable snake_case identifier (used by builders and scripts)
        target: Class or Enum member the case reconstructs to
        payload:
            None           unit case, nothing further to ask
            Question       newtype case, a single nested question
            AllOfQuestion  struct-like case, a group of nested questions
    """

    label: str
    key: str
    target: Any = None
    payload: Union[None, "Question", AllOfQuestion] = None

    @property
    def is_unit(self) -> bool:
        return self.payload is None

    @property
    def is_newtype(self) -> bool:
        return isinstance(self.payload, Question)

    @property
    def is_struct(self) -> bool:
        return isinstance(self.payload, AllOfQuestion)

    def questions(self) -> List["Question"]:
        """The payload as a flat list of questions (empty for unit cases)."""
        if self.payload is None:
            return []
        if isinstance(self.payload, AllOfQuestion):
            return list(self.payload.questions)
        return [self.payload]


@dataclass
class OneOfQuestion(QuestionKind):
    """Choose exactly one variant, then answer that variant's questions."""

    variants: List[Variant] = field(default_factory=list)
    default: Optional[int] = None
    kind_name = "OneOf"
    is_leaf = False


@dataclass
class AnyOfQuestion(QuestionKind):
    """Choose zero or more variants, then answer each chosen variant's questions."""

    variants: List[Variant] = field(default_factory=list)
    defaults: List[int] = field(default_factory=list)
    kind_name = "AnyOf"
    is_leaf = False


@dataclass
class Question:
    """
    A question kind placed at a site in the tree.

    Properties:
        path: Unique ResponsePath of this site
        ask: Prompt text
        kind: QuestionKind
        default: DefaultValue (none, suggested or assumed)
        validators: Per-leaf validators, (value, responses) -> Optional[str]
        optional: True when an absent answer reconstructs to None
        scope: Path of the enclosing record; validators see responses relative to it
        target: Python type of the reconstructed leaf (str, Path, int, ...)
    """

    path: ResponsePath
    ask: str
    kind: QuestionKind
    default: DefaultValue = NO_DEFAULT
    validators: List[Callable] = field(default_factory=list)
    optional: bool = False
    scope: ResponsePath = ROOT
    target: Any = None

    @property
    def is_assumed(self) -> bool:
        return self.default.is_assumed

    @property
    def is_leaf(self) -> bool:
        return self.kind.is_leaf

    @property
    def selection_path(self) -> Optional[ResponsePath]:
        """Where the choice of a OneOf/AnyOf site is stored, None for other kinds."""
        if isinstance(self.kind, OneOfQuestion):
            return self.path.child(Selection.VARIANT)
        if isinstance(self.kind, AnyOfQuestion):
            return self.path.child(Selection.VARIANTS)
        return None

    def children(self) -> List["Question"]:
        """Direct sub-questions, including every variant payload."""
        if isinstance(self.kind, AllOfQuestion):
            return list(self.kind.questions)
        if isinstance(self.kind, (OneOfQuestion, AnyOfQuestion)):
            nested: List[Question] = []
            for variant in self.kind.variants:
                nested.extend(variant.questions())
            return nested
        return []


def walk_questions(questions: Iterable[Question]) -> Iterator[Question]:
    """Depth-first, declaration-order walk over questions and all nested questions."""
    for question in questions:
        yield question
        yield from walk_questions(question.children())


@dataclass
class SurveyDefinition:
    """
    Root container for a survey.

    Presentation-agnostic: it can be rendered as a wizard, a form or a
    document. Backends receive the pruned `visible()` copy; the
    reconstruction engine walks the full tree.

    Properties:
        questions: Root questions in declaration order
        prelude: Optional message shown before the survey
        epilogue: Optional message shown after the survey
        target: Root type rebuilt by reconstruction
        validator: Optional whole-survey validator, Responses -> {path: message}

    INVARIANTS:
        - All leaf paths are distinct
        - Sub-question paths extend their parent's path
    """

    questions: List[Question] = field(default_factory=list)
    prelude: Optional[str] = None
    epilogue: Optional[str] = None
    target: Any = None
    validator: Optional[Callable] = None

    def iter_questions(self) -> Iterator[Question]:
        return walk_questions(self.questions)

    def leaves(self) -> List[Question]:
        return [q for q in self.iter_questions() if q.is_leaf]

    def get_question(self, path: Union[ResponsePath, str]) -> Optional[Question]:
        """
        Retrieve a question by path.

        Args:
            path: ResponsePath or dotted string

        Returns:
            Question object or None if not found
        """
        key = ResponsePath.of(path)
        for question in self.iter_questions():
            if question.path == key:
                return question
        return None

    def selection_sites(self) -> Dict[ResponsePath, Question]:
        """Map selection paths (`x.selected_variant(s)`) to their OneOf/AnyOf question."""
        return {
            q.selection_path: q
            for q in self.iter_questions()
            if q.selection_path is not None
        }

    def visible(self) -> "SurveyDefinition":
        """
        Copy of this definition with every assumed site pruned.

        This is the only tree handed to a collection backend.
        """
        pruned = [p for p in (_prune(q) for q in self.questions) if p is not None]
        return replace(self, questions=pruned)

    def is_empty(self) -> bool:
        return not self.questions

    def __len__(self) -> int:
        return len(self.questions)


def _prune_all(questions: Iterable[Question]) -> List[Question]:
    return [p for p in (_prune(q) for q in questions) if p is not None]


def _prune_variant(variant: Variant) -> Variant:
    if isinstance(variant.payload, AllOfQuestion):
        return replace(variant, payload=replace(variant.payload, questions=_prune_all(variant.payload.questions)))
    if isinstance(variant.payload, Question):
        return replace(variant, payload=_prune(variant.payload))
    return variant


def _group(question: Question, questions: List[Question]) -> Optional[Question]:
    if not questions:
        return None
    return Question(path=question.path, ask=question.ask, kind=AllOfQuestion(questions=questions), scope=question.scope)


def _chosen_payload(question: Question, variant: Variant, index: Optional[int] = None) -> List[Question]:
    if isinstance(variant.payload, AllOfQuestion):
        nested = _prune_all(variant.payload.questions)
        if index is None:
            return nested
        group = _group(replace(question, path=question.path.child(index), ask=variant.label), nested)
        return [group] if group is not None else []
    if isinstance(variant.payload, Question):
        pruned = _prune(variant.payload)
        return [pruned] if pruned is not None else []
    return []


def _prune(question: Question) -> Optional[Question]:
    kind = question.kind
    if question.is_assumed:
        value = question.default.value
        # An assumed choice fixes the variant but the payload is still asked.
        if isinstance(kind, OneOfQuestion) and isinstance(value, ChosenVariant):
            return _group(question, _chosen_payload(question, kind.variants[value.value]))
        if isinstance(kind, AnyOfQuestion) and isinstance(value, ChosenVariants):
            nested: List[Question] = []
            for index in value.value:
                nested.extend(_chosen_payload(question, kind.variants[index], index))
            return _group(question, nested)
        return None
    if isinstance(kind, AllOfQuestion):
        return replace(question, kind=replace(kind, questions=_prune_all(kind.questions)))
    if isinstance(kind, OneOfQuestion):
        return replace(question, kind=replace(kind, variants=[_prune_variant(v) for v in kind.variants]))
    if isinstance(kind, AnyOfQuestion):
        return replace(question, kind=replace(kind, variants=[_prune_variant(v) for v in kind.variants]))
    return question


__all__ = [
    "QuestionKind",
    "InputQuestion",
    "MaskedQuestion",
    "MultilineQuestion",
    "IntQuestion",
    "FloatQuestion",
    "ConfirmQuestion",
    "ListElementKind",
    "ListQuestion",
    "AllOfQuestion",
    "Variant",
    "OneOfQuestion",
    "AnyOfQuestion",
    "Question",
    "SurveyDefinition",
    "walk_questions",
]
