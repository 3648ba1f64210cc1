"""
Hierarchical addresses for question sites.

A ResponsePath is an immutable sequence of segments:

    - field names (str) for record fields
    - variant indices (int) beneath OneOf/AnyOf sites
    - Selection sentinels for "which variant(s) were chosen"

Examples:
    ResponsePath("address", "street")                 -> address.street
    ResponsePath("payment", Selection.VARIANT)        -> payment.selected_variant
    ResponsePath("toppings", 2, "extra")              -> toppings.2.extra

Paths are keys in the Responses store, so they are hashable and compare
by their segment sequence only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Iterator, Optional, Tuple, Union


class Selection(Enum):
    """Sentinel segments addressing the choice made at a OneOf/AnyOf site."""

    VARIANT = "selected_variant"
    VARIANTS = "selected_variants"

    def __str__(self) -> str:
        return self.value


Segment = Union[str, int, Selection]

SEPARATOR = "."


def _segment_key(segment: Segment) -> Tuple[int, Union[str, int]]:
    if isinstance(segment, Selection):
        return (2, segment.value)
    if isinstance(segment, int):
        return (1, segment)
    return (0, segment)


def _check_segment(segment: Segment) -> Segment:
    if isinstance(segment, bool):
        raise TypeError(f"Invalid path segment: {segment!r}")
    if isinstance(segment, (Selection, int)):
        return segment
    if isinstance(segment, str):
        if not segment or SEPARATOR in segment:
            raise ValueError(f"Invalid path segment: {segment!r}")
        return segment
    raise TypeError(f"Invalid path segment: {segment!r}")


@total_ordering
@dataclass(frozen=True, init=False)
class ResponsePath:
    """
    Ordered, immutable sequence of segments locating one question site.

    Properties:
        segments: Tuple of field names, variant indices and Selection sentinels

    IMPORTANT:
        The path type does not know whether a path exists in a schema.
        Uniqueness of paths within a schema is checked by the schema builder.
    """

    segments: Tuple[Segment, ...]

    def __init__(self, *segments: Segment):
        object.__setattr__(self, "segments", tuple(_check_segment(s) for s in segments))

    @classmethod
    def parse(cls, text: str) -> ResponsePath:
        """
        Parse the canonical dotted form back into a path.

        Digits become variant indices, "selected_variant(s)" become
        Selection sentinels, everything else is a field name.
        """
        if not text:
            return cls()
        segments = []
        for part in text.split(SEPARATOR):
            if part.isdigit():
                segments.append(int(part))
            elif part == Selection.VARIANT.value:
                segments.append(Selection.VARIANT)
            elif part == Selection.VARIANTS.value:
                segments.append(Selection.VARIANTS)
            else:
                segments.append(part)
        return cls(*segments)

    @classmethod
    def of(cls, value: Union[str, ResponsePath, Tuple[Segment, ...]]) -> ResponsePath:
        """Coerce a path, dotted string or segment tuple into a ResponsePath."""
        if isinstance(value, ResponsePath):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, tuple):
            return cls(*value)
        raise TypeError(f"Cannot build a ResponsePath from {value!r}")

    def child(self, segment: Segment) -> ResponsePath:
        """Return a new path extended by one segment."""
        return ResponsePath(*self.segments, segment)

    def join(self, other: ResponsePath) -> ResponsePath:
        """Return a new path with all of `other`'s segments appended."""
        return ResponsePath(*self.segments, *other.segments)

    @property
    def parent(self) -> ResponsePath:
        return ResponsePath(*self.segments[:-1])

    @property
    def last(self) -> Optional[Segment]:
        return self.segments[-1] if self.segments else None

    def is_empty(self) -> bool:
        return not self.segments

    def startswith(self, prefix: ResponsePath) -> bool:
        return self.segments[: len(prefix.segments)] == prefix.segments

    def strip_prefix(self, prefix: ResponsePath) -> Optional[ResponsePath]:
        """Remove `prefix` from the front of this path, or return None if it does not match."""
        if not self.startswith(prefix):
            return None
        return ResponsePath(*self.segments[len(prefix.segments):])

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __lt__(self, other: ResponsePath) -> bool:
        if not isinstance(other, ResponsePath):
            return NotImplemented
        return [_segment_key(s) for s in self.segments] < [_segment_key(s) for s in other.segments]

    def __str__(self) -> str:
        return SEPARATOR.join(str(s) for s in self.segments)

    def __repr__(self) -> str:
        return f"ResponsePath({str(self)!r})"


ROOT = ResponsePath()


__all__ = ["ResponsePath", "Selection", "Segment", "ROOT"]
