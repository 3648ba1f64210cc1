"""
Error taxonomy for surveyform.

Every failure raised by the package derives from SurveyError, so callers
of a survey run can catch one type. The subclasses separate three very
different situations:

    - The user or surface gave up (Cancelled)
    - The user gave an answer we refuse (ValidationFailed,
      WholeTreeValidationFailed); recoverable by asking again
    - The schema, the store and the backend disagree (StructuralMismatch,
      CoercionError, SchemaError); these are bugs, not user errors
"""

from typing import Any, Dict, Optional


class SurveyError(Exception):
    """Base class for all surveyform errors."""
    pass


class Cancelled(SurveyError):
    """Raised when the user or the presentation surface aborts a collection."""

    def __init__(self, message: str = "Survey cancelled by user"):
        super().__init__(message)


class ValidationFailed(SurveyError):
    """
    A single candidate value was rejected.

    Properties:
        path: ResponsePath of the rejected leaf
        message: Human-readable reason, suitable for showing next to the field
    """

    def __init__(self, path: Any, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Validation failed for '{path}': {message}")


class WholeTreeValidationFailed(SurveyError):
    """
    One or more composite rules failed after all leaves were collected.

    Properties:
        errors: Mapping of ResponsePath to message, one entry per failing field
    """

    def __init__(self, errors: Dict[Any, str]):
        self.errors = dict(errors)
        details = "; ".join(f"{path}: {msg}" for path, msg in sorted(self.errors.items(), key=lambda kv: str(kv[0])))
        super().__init__(f"Survey validation failed: {details}")


class StructuralMismatch(SurveyError):
    """
    The response store does not fit the schema.

    Always an internal invariant violation (usually a backend bug),
    never the result of well-formed user input.
    """
    pass


class MissingResponse(StructuralMismatch):
    """Raised when a required path has no entry in the response store."""

    def __init__(self, path: Any):
        self.path = path
        super().__init__(f"Missing response for path: {path}")


class ResponseTypeMismatch(StructuralMismatch):
    """Raised when the stored value at a path has the wrong kind."""

    def __init__(self, path: Any, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"Type mismatch at path '{path}': expected {expected}, got {actual}")


class CoercionError(SurveyError):
    """Raised when a collected number cannot be represented in the target field's width."""

    def __init__(self, path: Any, value: Any, width: Any):
        self.path = path
        self.value = value
        self.width = width
        super().__init__(f"Value {value!r} at '{path}' does not fit in {width}")


class SurfaceFailure(SurveyError):
    """
    Opaque failure of the presentation surface (I/O, rendering, bad script).

    Backends raise this with `raise SurfaceFailure(...) from exc` so the
    original cause stays attached.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class SchemaError(SurveyError):
    """Raised when a type cannot be turned into a survey, or an override does not fit it."""
    pass


__all__ = [
    "SurveyError",
    "Cancelled",
    "ValidationFailed",
    "WholeTreeValidationFailed",
    "StructuralMismatch",
    "MissingResponse",
    "ResponseTypeMismatch",
    "CoercionError",
    "SurfaceFailure",
    "SchemaError",
]
