# src/hrtpk/errors.py
"""
Errors raised by the engine.

Everything derives from ValueError so callers that only guard against bad
numbers keep working. Each error remembers which field (and, for dose
collections, which dose) was at fault so the form layer can point at it.
"""
from typing import Any, Optional


class HrtPkError(ValueError):
    """Base class for all engine errors."""

    code = "HRTPK_ERROR"

    def __init__(self, message: str, *, field: Optional[str] = None,
                 dose_index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.dose_index = dose_index

    def __str__(self) -> str:
        if self.dose_index is None:
            return self.message
        return f"dose #{self.dose_index}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "field": self.field,
            "dose_index": self.dose_index,
        }


class InvalidInputError(HrtPkError):
    """A value is out of its domain (weight, mass, theta, timestamps...)."""

    code = "INVALID_INPUT"


class UnsupportedConfigurationError(HrtPkError):
    """No kinetic model exists for the requested route/compound pair."""

    code = "UNSUPPORTED_CONFIGURATION"


class NotConvertibleError(UnsupportedConfigurationError):
    """The compound has no estradiol equivalent."""

    code = "NOT_CONVERTIBLE"
