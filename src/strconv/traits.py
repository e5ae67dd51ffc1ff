"""
Conversion descriptors for primitive types.

Each descriptor converts one Python type to and from the text PostgreSQL
emits and accepts. Parsing is strict: only what the server produces is
accepted, with no surrounding whitespace, no leading ``+``, no hex or octal,
no thousands separators.

Descriptors are stateless. Resolve them through ``strconv.resolve`` rather
than instantiating them per call.
"""
import datetime
import decimal
import logging
import math
import re
from typing import Any

import dateutil.parser
import numpy as np
import pandas as pd

from strconv.buffer import BufferWindow, constant_view
from strconv.config import get_options
from strconv.exceptions import NullConversion, null_conversion, range_error
from strconv.exceptions import syntax_error
from strconv.naming import type_name

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r'-?[0-9]+')
_NUMBER = re.compile(r'-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][-+]?[0-9]+)?')
_HEX = re.compile(r'(?:[0-9a-fA-F]{2})*')
_NONZERO = re.compile(r'[1-9]')

_isoparser = dateutil.parser.isoparser()


def encode_text(text: str, type_name: str) -> bytes:
    """Encode text with the configured encoding.

    Raises ConversionSyntaxError for text the encoding cannot represent.
    """
    encoding = get_options().encoding
    try:
        return text.encode(encoding)
    except UnicodeEncodeError as e:
        raise syntax_error(type_name, text, f'not representable in {encoding}: {e.reason}') from e


class StringTraits:
    """Base conversion descriptor.

    Subclass and override ``to_string`` and ``from_string`` to support a new
    type, then register an instance with ``strconv.register``. Override
    ``has_null``, ``is_null`` and ``null`` if the type has a null value of
    its own, and ``size_buffer`` if a cheaper upper bound exists.

    ``from_string`` receives text that is never the null marker and returns
    the converted value. ``current`` is the caller's existing value; mutable
    handles may update it in place, everything else ignores it.
    """

    python_type: Any = None

    def __init__(self, tp: Any = None) -> None:
        self.tp = self.python_type if tp is None else tp
        self.name = type_name(self.tp)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.name})'

    def has_null(self) -> bool:
        return False

    def is_null(self, value: Any) -> bool:
        return False

    def null(self) -> Any:
        raise null_conversion(self.name)

    def to_string(self, value: Any) -> str:
        raise NotImplementedError('Subclasses must implement to_string method')

    def from_string(self, text: str, current: Any = None) -> Any:
        raise NotImplementedError('Subclasses must implement from_string method')

    def load(self, text: str | None, current: Any = None) -> Any:
        """Convert field text that may be the null marker ``None``."""
        if text is None:
            if not self.has_null():
                raise NullConversion(f'Attempt to read null into {self.name}', self.name)
            return self.null()
        return self.from_string(text, current)

    def render(self, value: Any) -> str | None:
        """Return the text of ``value``, or None if the value is null."""
        if self.has_null() and self.is_null(value):
            return None
        if value is None:
            raise null_conversion(self.name)
        return self.to_string(value)

    def size_buffer(self, value: Any) -> int:
        """Upper bound on the bytes ``into_buf`` needs, trailing zero included."""
        if self.has_null() and self.is_null(value):
            return 0
        return len(encode_text(self.to_string(value), self.name)) + 1

    def into_buf(self, window: BufferWindow, value: Any) -> memoryview:
        """Write the non-null ``value`` into ``window``."""
        window.reserve(self.size_buffer(value), self.name)
        return window.write(encode_text(self.to_string(value), self.name))


class BoolTraits(StringTraits):
    """Booleans: ``true``/``false`` out; ``t``/``f`` and ``1``/``0`` also in."""

    python_type = bool

    _TRUE = frozenset({'true', 't', '1'})
    _FALSE = frozenset({'false', 'f', '0'})
    _VIEWS = {True: constant_view(b'true'), False: constant_view(b'false')}

    def from_string(self, text, current=None):
        lowered = text.lower()
        if lowered in self._TRUE:
            return self.tp(True)
        if lowered in self._FALSE:
            return self.tp(False)
        raise syntax_error(self.name, text, 'not a boolean')

    def to_string(self, value):
        return 'true' if value else 'false'

    def size_buffer(self, value):
        return 6

    def into_buf(self, window, value):
        return self._VIEWS[bool(value)]


class IntegerTraits(StringTraits):
    """Integers, bounded by the range of fixed-width numpy types.

    Plain ``int`` is unbounded. Digits beyond the interpreter's int/str
    conversion limit go through ``Decimal``, which has no such limit.
    """

    python_type = int

    def __init__(self, tp=None):
        super().__init__(tp)
        if self.tp is int:
            self.min = self.max = None
            self._estimate = None
        else:
            info = np.iinfo(self.tp)
            self.min, self.max = int(info.min), int(info.max)
            self._estimate = max(len(str(self.min)), len(str(self.max))) + 1

    def from_string(self, text, current=None):
        if not _INTEGER.fullmatch(text):
            raise syntax_error(self.name, text, 'not an integer')
        try:
            value = int(text)
        except ValueError:
            # past sys.get_int_max_str_digits()
            value = int(decimal.Decimal(text))
        if self.min is not None and not self.min <= value <= self.max:
            raise range_error(self.name, text)
        return self.tp(value)

    def to_string(self, value):
        try:
            return str(int(value))
        except ValueError:
            return format(decimal.Decimal(int(value)), 'f')

    def size_buffer(self, value):
        if self._estimate is not None:
            return self._estimate
        return int(value).bit_length() // 3 + 3


class FloatTraits(StringTraits):
    """Binary floating point, including ``NaN`` and ``Infinity``."""

    python_type = float

    _SPECIAL = {
        'nan': math.nan,
        'infinity': math.inf,
        '-infinity': -math.inf,
        'inf': math.inf,
        '-inf': -math.inf,
    }

    def __init__(self, tp=None):
        super().__init__(tp)
        info = np.finfo(self.tp)
        digits = math.ceil((info.nmant + 1) * math.log10(2)) + 1
        # sign, point, 'e-308', trailing zero
        self._estimate = digits + 8

    def from_string(self, text, current=None):
        special = self._SPECIAL.get(text.lower())
        if special is not None:
            return self.tp(special)
        if not _NUMBER.fullmatch(text):
            raise syntax_error(self.name, text, 'not a number')
        value = float(text)
        with np.errstate(over='ignore'):
            result = self.tp(value)
        if math.isinf(result):
            raise range_error(self.name, text)
        if result == 0 and _NONZERO.search(text.lower().partition('e')[0]):
            raise range_error(self.name, text)
        return result

    def to_string(self, value):
        if math.isnan(value):
            return 'NaN'
        if math.isinf(value):
            return 'Infinity' if value > 0 else '-Infinity'
        if isinstance(value, float):
            return repr(float(value))
        return str(self.tp(value))

    def size_buffer(self, value):
        return self._estimate


class DecimalTraits(StringTraits):
    """Arbitrary precision ``numeric`` values, always in positional notation."""

    python_type = decimal.Decimal

    _SPECIAL = {'NaN': 'NaN', 'Infinity': 'Infinity', '-Infinity': '-Infinity'}

    def from_string(self, text, current=None):
        if text not in self._SPECIAL and not _NUMBER.fullmatch(text):
            raise syntax_error(self.name, text, 'not a number')
        return decimal.Decimal(text)

    def to_string(self, value):
        if value.is_nan():
            return 'NaN'
        if value.is_infinite():
            return 'Infinity' if value > 0 else '-Infinity'
        return format(value, 'f')

    def size_buffer(self, value):
        if not value.is_finite():
            return 10
        _, digits, exponent = value.as_tuple()
        # sign, leading zero, point, trailing zero
        return len(digits) + abs(exponent) + 4


class StrTraits(StringTraits):
    """Text passes through unchanged."""

    python_type = str

    def from_string(self, text, current=None):
        return text

    def to_string(self, value):
        return value

    def size_buffer(self, value):
        return 4 * len(value) + 1


class BytesTraits(StringTraits):
    """Binary data in ``bytea`` hex format: ``\\x0102ff``."""

    python_type = bytes

    def from_string(self, text, current=None):
        if not text.startswith('\\x') or not _HEX.fullmatch(text, 2):
            raise syntax_error(self.name, text, 'not hex-escaped binary data')
        return bytes.fromhex(text[2:])

    def to_string(self, value):
        return '\\x' + bytes(value).hex()

    def size_buffer(self, value):
        return 2 * len(value) + 3


class DateTraits(StringTraits):
    """ISO 8601 dates: ``2023-05-15``."""

    python_type = datetime.date

    def from_string(self, text, current=None):
        try:
            return _isoparser.parse_isodate(text)
        except (ValueError, OverflowError) as e:
            raise syntax_error(self.name, text, str(e)) from e

    def to_string(self, value):
        return value.isoformat()

    def size_buffer(self, value):
        return 11


class TimeTraits(StringTraits):
    """ISO 8601 times: ``14:30:45.250000``."""

    python_type = datetime.time

    def from_string(self, text, current=None):
        try:
            return _isoparser.parse_isotime(text)
        except (ValueError, OverflowError) as e:
            raise syntax_error(self.name, text, str(e)) from e

    def to_string(self, value):
        return value.isoformat()

    def size_buffer(self, value):
        # 14:30:45.250000+05:30:15.000001
        return 32


class DateTimeTraits(StringTraits):
    """Timestamps as the server prints them: ``2023-05-15 14:30:45+02:00``."""

    python_type = datetime.datetime

    def from_string(self, text, current=None):
        try:
            return _isoparser.isoparse(text)
        except (ValueError, OverflowError) as e:
            raise syntax_error(self.name, text, str(e)) from e

    def to_string(self, value):
        return value.isoformat(sep=' ')

    def size_buffer(self, value):
        # 2023-05-15 14:30:45.250000+05:30:15.000001
        return 43


class TimestampTraits(StringTraits):
    """Pandas timestamps, with ``NaT`` as their own null value."""

    python_type = pd.Timestamp

    def has_null(self):
        return True

    def is_null(self, value):
        return value is None or pd.isna(value)

    def null(self):
        return pd.NaT

    def from_string(self, text, current=None):
        try:
            value = pd.Timestamp(text)
        except (ValueError, OverflowError) as e:
            raise syntax_error(self.name, text, str(e)) from e
        if pd.isna(value):
            raise syntax_error(self.name, text, 'not a timestamp')
        return value

    def to_string(self, value):
        if self.is_null(value):
            raise null_conversion(self.name)
        return value.isoformat(sep=' ')

    def size_buffer(self, value):
        if self.is_null(value):
            return 0
        # 2023-05-15 14:30:45.123456789+05:30:15.000001
        return 46


def builtin_traits() -> list[StringTraits]:
    """Return the descriptors for every primitive type supported out of the box."""
    return [
        BoolTraits(),
        BoolTraits(np.bool_),
        IntegerTraits(),
        *(IntegerTraits(tp) for tp in (np.int8, np.int16, np.int32, np.int64,
                                       np.uint8, np.uint16, np.uint32, np.uint64)),
        FloatTraits(),
        *(FloatTraits(tp) for tp in (np.float16, np.float32, np.float64)),
        DecimalTraits(),
        StrTraits(),
        BytesTraits(),
        DateTraits(),
        TimeTraits(),
        DateTimeTraits(),
        TimestampTraits(),
        ]
