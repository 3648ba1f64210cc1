"""
Declaring surveys on ordinary Python types.

A survey is declared with standard dataclasses and enums plus three helpers:

    ask(...)      field metadata: prompt, bounds, masking, validators
    @survey(...)  type options: prelude, epilogue, composite validators
    @one_of       marks a base class whose subclasses are union cases

Example:

    @one_of
    class Status:
        pass

    @dataclass
    class Unemployed(Status):
        pass

    @dataclass
    class Employed(Status):
        employer: str = ask("Employer:")
        income: float = ask("Yearly income:", min=0)

    @survey(prelude="Welcome!")
    @dataclass
    class Profile:
        name: str = ask("What is your name?")
        age: UInt8 = ask("How old are you?", min=0, max=150)
        status: Status = ask("Employment status:")

Numeric widths are declared with the Annotated aliases below (UInt8,
Int32, Float32, ...). Plain `int` and `float` are 64-bit.
"""

import dataclasses
import math
import re
import struct
from dataclasses import dataclass
from typing import Annotated, Any, Callable, List, Optional, Union

ASK_KEY = "surveyform"


@dataclass(frozen=True)
class AskSpec:
    """
    Per-field survey metadata, stored in the dataclass field's metadata.

    Properties:
        prompt: Prompt text (defaults to the title-cased field name)
        min, max: Inclusive numeric bounds (elements, for lists)
        min_items, max_items: Element count bounds for list fields
        mask: Hide the input (passwords)
        multiline: Ask in an editor / textarea
        validate: Per-leaf validator, (value, responses) -> Optional[str]
    """

    prompt: Optional[str] = None
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    mask: bool = False
    multiline: bool = False
    validate: Optional[Callable] = None


EMPTY_ASK = AskSpec()


def ask(
    prompt: Optional[str] = None,
    *,
    min: Optional[Union[int, float]] = None,
    max: Optional[Union[int, float]] = None,
    min_items: Optional[int] = None,
    max_items: Optional[int] = None,
    mask: bool = False,
    multiline: bool = False,
    validate: Optional[Callable] = None,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
) -> Any:
    """Declare a survey field. Returns a `dataclasses.field` carrying an AskSpec."""
    spec = AskSpec(
        prompt=prompt,
        min=min,
        max=max,
        min_items=min_items,
        max_items=max_items,
        mask=mask,
        multiline=multiline,
        validate=validate,
    )
    return dataclasses.field(default=default, default_factory=default_factory, metadata={ASK_KEY: spec})


def ask_spec(f: dataclasses.Field) -> AskSpec:
    return f.metadata.get(ASK_KEY, EMPTY_ASK)


# =========================================================================
# TYPE OPTIONS
# =========================================================================


@dataclass(frozen=True)
class SurveyOptions:
    """
    Type-level options set by @survey.

    Properties:
        prelude: Message shown before the survey (root type only)
        epilogue: Message shown after the survey (root type only)
        validate: Whole-record validator, Responses -> {path: message}
        validate_fields: Validator applied to every leaf of this record,
            in addition to the leaf's own validator
    """

    prelude: Optional[str] = None
    epilogue: Optional[str] = None
    validate: Optional[Callable] = None
    validate_fields: Optional[Callable] = None


def survey(
    cls: Optional[type] = None,
    *,
    prelude: Optional[str] = None,
    epilogue: Optional[str] = None,
    validate: Optional[Callable] = None,
    validate_fields: Optional[Callable] = None,
):
    """
    Attach survey options to a dataclass, enum or union base.

    Also adds `builder()` and `survey_definition()` class methods.
    Usable bare (`@survey`) or with arguments (`@survey(prelude=...)`).
    """

    def wrap(target: type) -> type:
        target.__survey_options__ = SurveyOptions(
            prelude=prelude,
            epilogue=epilogue,
            validate=validate,
            validate_fields=validate_fields,
        )
        target.builder = classmethod(_builder_for)
        target.survey_definition = classmethod(_definition_for)
        return target

    if cls is not None:
        return wrap(cls)
    return wrap


def survey_options(cls: Any) -> SurveyOptions:
    options = getattr(cls, "__dict__", {}).get("__survey_options__")
    return options if options is not None else SurveyOptions()


def _builder_for(cls):
    from surveyform.builder import SurveyBuilder

    return SurveyBuilder(cls)


def _definition_for(cls):
    from surveyform.schema import build_definition

    return build_definition(cls)


# =========================================================================
# TAGGED UNIONS
# =========================================================================


@dataclass(frozen=True)
class CaseOptions:
    """Options passed as class keywords to a union case: `class Cheque(Payment, label=..., newtype=True)`."""

    label: Optional[str] = None
    newtype: bool = False


def one_of(cls: type) -> type:
    """
    Mark `cls` as a tagged union.

    Every direct subclass becomes a case, in definition order. A case
    with no fields is a unit case; `newtype=True` marks a single-field
    case whose payload is asked directly; any other case is struct-like.
    """
    cls.__survey_cases__ = []

    def __init_subclass__(sub, label=None, newtype=False, **kwargs):
        super(cls, sub).__init_subclass__(**kwargs)
        sub.__survey_case__ = CaseOptions(label=label, newtype=newtype)
        if cls in sub.__bases__:
            cls.__survey_cases__.append(sub)

    cls.__init_subclass__ = classmethod(__init_subclass__)
    return cls


def is_one_of(tp: Any) -> bool:
    return isinstance(tp, type) and "__survey_cases__" in tp.__dict__


def union_cases(tp: type) -> List[type]:
    return list(tp.__dict__["__survey_cases__"])


def case_options(case: type) -> CaseOptions:
    options = case.__dict__.get("__survey_case__")
    return options if options is not None else CaseOptions()


# =========================================================================
# NUMERIC WIDTHS
# =========================================================================


@dataclass(frozen=True)
class NumericWidth:
    """
    Storage width of a reconstructed numeric field.

    narrow() returns the value unchanged when it is exactly representable
    and raises ValueError otherwise. It never truncates or wraps.
    """

    name: str
    bits: int
    is_float: bool = False
    signed: bool = True

    @property
    def lower(self) -> int:
        return -(2 ** (self.bits - 1)) if self.signed else 0

    @property
    def upper(self) -> int:
        return 2 ** (self.bits - 1) - 1 if self.signed else 2 ** self.bits - 1

    def narrow(self, value: Union[int, float]) -> Union[int, float]:
        if not self.is_float:
            if not self.lower <= value <= self.upper:
                raise ValueError(f"{value} is outside [{self.lower}, {self.upper}]")
            return value
        if self.bits == 64 or math.isnan(value):
            return value
        try:
            narrowed = struct.unpack("<f", struct.pack("<f", value))[0]
        except OverflowError as exc:
            raise ValueError(f"{value} overflows {self.name}") from exc
        if narrowed != value:
            raise ValueError(f"{value} is not exactly representable as {self.name}")
        return narrowed

    def __str__(self) -> str:
        return self.name


I8 = NumericWidth("i8", 8)
I16 = NumericWidth("i16", 16)
I32 = NumericWidth("i32", 32)
I64 = NumericWidth("i64", 64)
U8 = NumericWidth("u8", 8, signed=False)
U16 = NumericWidth("u16", 16, signed=False)
U32 = NumericWidth("u32", 32, signed=False)
U64 = NumericWidth("u64", 64, signed=False)
F32 = NumericWidth("f32", 32, is_float=True)
F64 = NumericWidth("f64", 64, is_float=True)

Int8 = Annotated[int, I8]
Int16 = Annotated[int, I16]
Int32 = Annotated[int, I32]
Int64 = Annotated[int, I64]
UInt8 = Annotated[int, U8]
UInt16 = Annotated[int, U16]
UInt32 = Annotated[int, U32]
UInt64 = Annotated[int, U64]
Float32 = Annotated[float, F32]
Float64 = Annotated[float, F64]


# =========================================================================
# NAMING
# =========================================================================

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """TechLead -> tech_lead, HONEY_OAT -> honey_oat."""
    return _CAMEL_RE.sub("_", name).lower()


def humanize(name: str) -> str:
    """years_at_level -> Years At Level, TechLead -> Tech Lead."""
    words = [w for w in snake_case(name).split("_") if w]
    return " ".join(w[:1].upper() + w[1:] for w in words)


__all__ = [
    "AskSpec",
    "ask",
    "ask_spec",
    "SurveyOptions",
    "survey",
    "survey_options",
    "CaseOptions",
    "one_of",
    "is_one_of",
    "union_cases",
    "case_options",
    "NumericWidth",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Float32",
    "Float64",
    "snake_case",
    "humanize",
]
