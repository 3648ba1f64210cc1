"""
Collection Protocol: the contract between a survey and a presentation surface.

A backend receives the visible definition and two callbacks and returns a
complete Responses store. It must:

    - visit every leaf of the definition it was given
    - resolve a OneOf/AnyOf selection (validated at its selection path)
      before asking that selection's payload
    - call `validate` on each candidate and ask again on a message,
      without revisiting leaves already accepted
    - store AnyOf payload answers beneath the chosen variant's index
    - call `validate_all` once, after all leaves are collected, when given
    - raise Cancelled on abort and never return a partial store

Backends never see assumed sites and never rebuild typed values.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from surveyform.model import SurveyDefinition
from surveyform.paths import ResponsePath
from surveyform.responses import Responses

FieldValidator = Callable[[ResponsePath, Any, Responses], Optional[str]]
TreeValidator = Callable[[Responses], Dict[ResponsePath, str]]


class SurveyBackend(ABC):
    """Base class for all collection backends."""

    name = "backend"

    @abstractmethod
    def collect(
        self,
        definition: SurveyDefinition,
        validate: FieldValidator,
        validate_all: Optional[TreeValidator] = None,
    ) -> Responses:
        """
        Collect answers for every question of `definition`.

        Raises:
            Cancelled: the user or the surface aborted
            WholeTreeValidationFailed: composite rules failed and the
                surface cannot ask again
            SurfaceFailure: the surface itself failed
        """
        raise NotImplementedError


__all__ = ["SurveyBackend", "FieldValidator", "TreeValidator"]
