"""
Error handling for cbind.

Translation errors are fatal: they signal that the upstream parser handed
over something the lowering engine cannot represent, so a pass that raises
one produces no partial result.
"""

from __future__ import annotations

from typing import Optional

from .ir.c_types import SourceLocation


# =============================================================================
# Error Codes
# =============================================================================

CBIND_ERROR_INTERNAL = 1
CBIND_ERROR_PARSE = 10
CBIND_ERROR_CONFIG = 20
CBIND_ERROR_UNKNOWN_TYPE_KIND = 30
CBIND_ERROR_MISSING_ENUM_VALUE = 31

_ERROR_MESSAGES = {
    CBIND_ERROR_INTERNAL: "Internal error",
    CBIND_ERROR_PARSE: "Parse error",
    CBIND_ERROR_CONFIG: "Invalid configuration",
    CBIND_ERROR_UNKNOWN_TYPE_KIND: "Unknown type kind",
    CBIND_ERROR_MISSING_ENUM_VALUE: "Enumerator has no value",
}


class TranslationError(Exception):
    """
    Base exception for all cbind errors.

    Carries an error code and, when known, the source location of the
    offending declaration.
    """

    code = CBIND_ERROR_INTERNAL

    def __init__(self, message: Optional[str] = None, location: Optional[SourceLocation] = None):
        if message is None:
            message = _ERROR_MESSAGES[self.code]
        self.message = message
        self.location = location
        if location is not None:
            super().__init__(f"{location}: {message}")
        else:
            super().__init__(message)


class ParseError(TranslationError):
    """The C parser reported error diagnostics."""
    code = CBIND_ERROR_PARSE


class ConfigError(TranslationError):
    """A configuration value is not recognized."""
    code = CBIND_ERROR_CONFIG


class UnknownTypeKindError(TranslationError):
    """A type classifies outside the closed set of lowerable kinds."""
    code = CBIND_ERROR_UNKNOWN_TYPE_KIND


class MissingEnumValueError(TranslationError):
    """An enumerator reached lowering without a resolved value."""
    code = CBIND_ERROR_MISSING_ENUM_VALUE
