"""
Response values.

Every collected answer is stored as a ResponseValue, a small tagged union
of immutable dataclasses. Numbers are always carried at full width
(signed 64-bit integers, doubles); narrowing to a field's declared width
happens only during reconstruction.

ARCHITECTURAL RULE:
    Values are structure only. They do not know which question they
    answer, and they do not validate bounds. That is the job of the
    validation engine.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Any, Tuple

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class ResponseValue(ABC):
    """
    Base class for all collected values.

    Subclasses expose the raw Python value as `.value` and a stable
    `type_name` for error messages.
    """

    type_name = "Value"
    value: Any


def _check_int64(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Expected an integer, got {value!r}")
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(f"Integer {value} does not fit in 64 bits")
    return value


def _check_index(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Variant index must be a non-negative integer, got {value!r}")
    return value


def _sequence(value: Any, what: str) -> Tuple[Any, ...]:
    # A bare string is iterable but never a list of answers
    if isinstance(value, (str, bytes)):
        raise TypeError(f"Expected a list of {what}, got {value!r}")
    return tuple(value)


@dataclass(frozen=True)
class StringValue(ResponseValue):
    """Answer to an Input, Masked or Multiline question."""

    value: str
    type_name = "String"

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise TypeError(f"Expected a string, got {self.value!r}")


@dataclass(frozen=True)
class IntValue(ResponseValue):
    """Answer to an Int question, always a signed 64-bit integer."""

    value: int
    type_name = "Int"

    def __post_init__(self):
        _check_int64(self.value)


@dataclass(frozen=True)
class FloatValue(ResponseValue):
    """Answer to a Float question, always a double."""

    value: float
    type_name = "Float"

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise TypeError(f"Expected a number, got {self.value!r}")
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class BoolValue(ResponseValue):
    """Answer to a Confirm question."""

    value: bool
    type_name = "Bool"

    def __post_init__(self):
        if not isinstance(self.value, bool):
            raise TypeError(f"Expected a bool, got {self.value!r}")


@dataclass(frozen=True)
class ChosenVariant(ResponseValue):
    """Index of the variant chosen at a OneOf site."""

    value: int
    type_name = "ChosenVariant"

    def __post_init__(self):
        _check_index(self.value)


@dataclass(frozen=True)
class ChosenVariants(ResponseValue):
    """Indices chosen at an AnyOf site, in the order the user picked them."""

    value: Tuple[int, ...]
    type_name = "ChosenVariants"

    def __post_init__(self):
        object.__setattr__(self, "value", tuple(_check_index(i) for i in _sequence(self.value, "variant indices")))


@dataclass(frozen=True)
class StringList(ResponseValue):
    """Answer to a list-input question over strings."""

    value: Tuple[str, ...]
    type_name = "StringList"

    def __post_init__(self):
        items = _sequence(self.value, "strings")
        for item in items:
            if not isinstance(item, str):
                raise TypeError(f"Expected strings, got {item!r}")
        object.__setattr__(self, "value", items)


@dataclass(frozen=True)
class IntList(ResponseValue):
    """Answer to a list-input question over integers."""

    value: Tuple[int, ...]
    type_name = "IntList"

    def __post_init__(self):
        object.__setattr__(self, "value", tuple(_check_int64(i) for i in _sequence(self.value, "integers")))


@dataclass(frozen=True)
class FloatList(ResponseValue):
    """Answer to a list-input question over floats."""

    value: Tuple[float, ...]
    type_name = "FloatList"

    def __post_init__(self):
        items = []
        for item in _sequence(self.value, "numbers"):
            if isinstance(item, bool) or not isinstance(item, (int, float)):
                raise TypeError(f"Expected numbers, got {item!r}")
            items.append(float(item))
        object.__setattr__(self, "value", tuple(items))


def to_response_value(value: Any) -> ResponseValue:
    """
    Wrap a plain Python value into the matching ResponseValue.

    Lists are typed by their elements; an empty list becomes an empty
    StringList. Variant choices cannot be inferred from plain values, so
    ChosenVariant/ChosenVariants must be constructed explicitly.
    """
    if isinstance(value, ResponseValue):
        return value
    if isinstance(value, bool):
        return BoolValue(value)
    if isinstance(value, int):
        return IntValue(value)
    if isinstance(value, float):
        return FloatValue(value)
    if isinstance(value, str):
        return StringValue(value)
    if isinstance(value, (list, tuple)):
        items = list(value)
        if all(isinstance(i, str) for i in items):
            return StringList(items)
        if all(isinstance(i, int) and not isinstance(i, bool) for i in items):
            return IntList(items)
        if all(isinstance(i, (int, float)) and not isinstance(i, bool) for i in items):
            return FloatList(items)
    raise TypeError(f"Cannot convert {value!r} to a response value")


__all__ = [
    "ResponseValue",
    "StringValue",
    "IntValue",
    "FloatValue",
    "BoolValue",
    "ChosenVariant",
    "ChosenVariants",
    "StringList",
    "IntList",
    "FloatList",
    "to_response_value",
    "INT64_MIN",
    "INT64_MAX",
]
