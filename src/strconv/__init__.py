"""
String conversion between Python values and PostgreSQL text.

Every supported type has exactly one conversion descriptor, resolved from its
type annotation and cached:

- Primitives: bool, int, numpy fixed-width integers and floats, float,
  Decimal, str, bytes, date, time, datetime, pandas Timestamp
- Enums: through their underlying integer
- Optional-like wrappers: ``X | None`` and handles such as ``Ref[X]``
- Containers and tuples: array literals and row literals

Conversions can be called as:
- to_string(value) / from_string(text, tp): allocating, convenient
- to_buf(window, value): writes into a caller-owned buffer
"""
__version__ = '0.1.0'

from strconv.adapters import AdapterRegistry, get_adapter_registry
from strconv.buffer import BufferWindow
from strconv.capabilities import inner_type, is_container, is_derefable
from strconv.capabilities import is_optional, is_tuple
from strconv.config import ConversionOptions
from strconv.conversion import from_string, has_null, is_null, null
from strconv.conversion import pack_params, size_buffer, to_buf, to_string
from strconv.enums import EnumTraits
from strconv.exceptions import AmbiguousDispatch, BufferOverrun
from strconv.exceptions import ConversionError, ConversionSyntaxError, DataError
from strconv.exceptions import NullConversion, RangeError, UnsupportedType
from strconv.naming import type_name
from strconv.registry import enum_conversion, register, resolve
from strconv.traits import StringTraits
from strconv.wrappers import Ref

adapter_registry = get_adapter_registry()

__all__ = [
    'to_string',
    'from_string',
    'to_buf',
    'size_buffer',
    'pack_params',
    'has_null',
    'is_null',
    'null',
    'resolve',
    'register',
    'enum_conversion',
    'type_name',
    'is_derefable',
    'is_optional',
    'is_tuple',
    'is_container',
    'inner_type',
    'StringTraits',
    'EnumTraits',
    'Ref',
    'BufferWindow',
    'ConversionOptions',
    'AdapterRegistry',
    'get_adapter_registry',
    'ConversionError',
    'ConversionSyntaxError',
    'RangeError',
    'BufferOverrun',
    'NullConversion',
    'AmbiguousDispatch',
    'UnsupportedType',
    'DataError',
]
