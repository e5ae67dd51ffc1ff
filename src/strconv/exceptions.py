"""
Conversion-specific exception classes.
"""
import sqlite3

import psycopg


class ConversionError(Exception):
    """Base class for all string conversion errors.

    Carries the diagnostic name of the offending type and, where one exists,
    the offending input text.
    """

    def __init__(self, message: str, type_name: str | None = None,
                 text: str | None = None) -> None:
        super().__init__(message)
        self.type_name = type_name
        self.text = text


class ConversionSyntaxError(ConversionError):
    """Text does not match the grammar of the target type.
    """


class RangeError(ConversionError):
    """Value is syntactically valid but outside the target type's range.
    """


class BufferOverrun(ConversionError):
    """Destination buffer may not be large enough for the value.
    """


class NullConversion(ConversionError):
    """Null value rendered as text, or null text read into a non-null type.
    """


class AmbiguousDispatch(ConversionError):
    """More than one descriptor applies to the same type.
    """


class UnsupportedType(ConversionError):
    """No descriptor applies to the type.
    """


def syntax_error(type_name: str, text: str, reason: str | None = None) -> ConversionSyntaxError:
    message = f"Could not convert '{text}' to {type_name}"
    if reason:
        message = f'{message}: {reason}'
    return ConversionSyntaxError(message, type_name, text)


def range_error(type_name: str, text: str) -> RangeError:
    return RangeError(f"Value '{text}' is out of range for {type_name}",
                      type_name, text)


def null_conversion(type_name: str) -> NullConversion:
    return NullConversion(f'Attempt to convert null to {type_name}', type_name)


DataError = (
    psycopg.DataError,
    sqlite3.DataError,
    ConversionError,
    )
