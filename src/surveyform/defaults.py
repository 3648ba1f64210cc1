"""
Per-site pre-seeding state.

A question site is in exactly one of three states:

    NONE       the user must answer
    SUGGESTED  the value is shown pre-filled and can be edited
    ASSUMED    the site (and everything beneath it) is never shown;
               the value is used verbatim during reconstruction

For leaves and selection sites the value is a ResponseValue. For a
composite site that is assumed as a whole, the value is the typed Python
object itself (the "shadow" of the elided subtree).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class DefaultState(Enum):
    NONE = "none"
    SUGGESTED = "suggested"
    ASSUMED = "assumed"


@dataclass(frozen=True)
class DefaultValue:
    """
    Immutable pre-seeding state of one question site.

    Properties:
        state: DefaultState
        value: The suggested/assumed value (None when state is NONE)
    """

    state: DefaultState = DefaultState.NONE
    value: Any = None

    @classmethod
    def none(cls) -> "DefaultValue":
        return cls()

    @classmethod
    def suggested(cls, value: Any) -> "DefaultValue":
        return cls(DefaultState.SUGGESTED, value)

    @classmethod
    def assumed(cls, value: Any) -> "DefaultValue":
        return cls(DefaultState.ASSUMED, value)

    @property
    def is_none(self) -> bool:
        return self.state is DefaultState.NONE

    @property
    def is_suggested(self) -> bool:
        return self.state is DefaultState.SUGGESTED

    @property
    def is_assumed(self) -> bool:
        return self.state is DefaultState.ASSUMED

    def get(self) -> Optional[Any]:
        """The suggested or assumed value, or None."""
        return self.value


NO_DEFAULT = DefaultValue()


__all__ = ["DefaultState", "DefaultValue", "NO_DEFAULT"]
