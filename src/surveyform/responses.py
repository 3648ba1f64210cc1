"""
The flat answer store filled by a collection backend.

Responses maps ResponsePath -> ResponseValue. Nested fields are not
stored as nested dicts: `address.street` is a single key. Insertion order
is irrelevant to reconstruction.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Tuple, Type, Union

from surveyform.errors import MissingResponse, ResponseTypeMismatch
from surveyform.paths import ResponsePath
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

PathLike = Union[ResponsePath, str]


class Responses:
    """
    Collected answers keyed by ResponsePath.

    Typed getters raise MissingResponse or ResponseTypeMismatch, both of
    which are StructuralMismatch errors: a well-behaved backend never
    produces a store that trips them.
    """

    def __init__(self, values: Optional[Dict[PathLike, Any]] = None):
        self._values: Dict[ResponsePath, ResponseValue] = {}
        for path, value in (values or {}).items():
            self.insert(path, value)

    def insert(self, path: PathLike, value: Any) -> None:
        self._values[ResponsePath.of(path)] = to_response_value(value)

    def get(self, path: PathLike) -> Optional[ResponseValue]:
        return self._values.get(ResponsePath.of(path))

    def remove(self, path: PathLike) -> Optional[ResponseValue]:
        return self._values.pop(ResponsePath.of(path), None)

    def extend(self, other: Responses) -> None:
        self._values.update(other._values)

    def filter_prefix(self, prefix: ResponsePath) -> Responses:
        """
        Return the responses beneath `prefix`, with the prefix removed from their keys.

        Example:
            {"address.street": "Main St", "name": "Alice"}.filter_prefix("address")
            -> {"street": "Main St"}
        """
        filtered = Responses()
        for path, value in self._values.items():
            stripped = path.strip_prefix(prefix)
            if stripped is not None and not stripped.is_empty():
                filtered._values[stripped] = value
        return filtered

    def has_value(self, path: PathLike) -> bool:
        """False when the path is missing or holds an empty string (a skipped optional field)."""
        value = self.get(path)
        if value is None:
            return False
        if isinstance(value, StringValue):
            return value.value != ""
        return True

    # === Typed accessors ===

    def _typed(self, path: PathLike, expected: Type[ResponseValue]) -> Any:
        key = ResponsePath.of(path)
        value = self._values.get(key)
        if value is None:
            raise MissingResponse(key)
        if not isinstance(value, expected):
            raise ResponseTypeMismatch(key, expected.type_name, value.type_name)
        return value.value

    def get_string(self, path: PathLike) -> str:
        return self._typed(path, StringValue)

    def get_int(self, path: PathLike) -> int:
        return self._typed(path, IntValue)

    def get_float(self, path: PathLike) -> float:
        return self._typed(path, FloatValue)

    def get_bool(self, path: PathLike) -> bool:
        return self._typed(path, BoolValue)

    def get_chosen_variant(self, path: PathLike) -> int:
        return self._typed(path, ChosenVariant)

    def get_chosen_variants(self, path: PathLike) -> Tuple[int, ...]:
        return self._typed(path, ChosenVariants)

    def get_string_list(self, path: PathLike) -> Tuple[str, ...]:
        return self._typed(path, StringList)

    def get_int_list(self, path: PathLike) -> Tuple[int, ...]:
        return self._typed(path, IntList)

    def get_float_list(self, path: PathLike) -> Tuple[float, ...]:
        return self._typed(path, FloatList)

    # === Container protocol ===

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (ResponsePath, str)):
            return False
        return ResponsePath.of(path) in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[ResponsePath]:
        return iter(self._values)

    def items(self):
        return self._values.items()

    def copy(self) -> Responses:
        duplicate = Responses()
        duplicate._values = dict(self._values)
        return duplicate

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Responses):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        body = ", ".join(f"{path}={value.value!r}" for path, value in sorted(self._values.items()))
        return f"Responses({body})"


__all__ = ["Responses", "PathLike"]
