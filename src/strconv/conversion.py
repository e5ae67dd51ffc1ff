"""
Value <-> text conversion entry points.

These functions are what a result-row accessor and a query-parameter binder
call. Each resolves the descriptor for a type and delegates to it; the type
defaults to ``type(value)`` when omitted, and an untyped ``None`` is null.

Usage:
    # Reading a field; None is the null marker
    count = from_string(b'42', numpy.int32)
    maybe = from_string(None, int | None)

    # Writing a parameter
    text = to_string(Colour.BLUE)

    # Writing into a caller-owned buffer
    buf = bytearray(size_buffer(12345))
    view = to_buf(BufferWindow(buf), 12345)
"""
import logging
from collections.abc import Iterable, Sequence
from typing import Any

from strconv.buffer import BufferWindow
from strconv.config import get_options
from strconv.exceptions import null_conversion, syntax_error
from strconv.naming import type_name
from strconv.registry import resolve
from strconv.traits import StringTraits

logger = logging.getLogger(__name__)

Text = str | bytes | bytearray | memoryview


def as_text(data: Text, type_name: str) -> str:
    """Decode field data to ``str`` using the configured encoding.

    Raises ConversionSyntaxError, naming the target type, for bytes that are
    not valid in that encoding.
    """
    if isinstance(data, str):
        return data
    encoding = get_options().encoding
    try:
        return bytes(data).decode(encoding)
    except UnicodeDecodeError as e:
        text = bytes(data).decode(encoding, errors='backslashreplace')
        raise syntax_error(type_name, text, f'invalid {encoding} data: {e.reason}') from e


def _traits(value: Any, tp: Any) -> StringTraits | None:
    """Resolve the descriptor for a value; None for an untyped ``None``."""
    if tp is None:
        if value is None:
            return None
        tp = type(value)
    return resolve(tp)


def _null(traits: StringTraits | None, value: Any) -> bool:
    if traits is None:
        return True
    return traits.has_null() and traits.is_null(value)


def has_null(tp: Any) -> bool:
    """Does ``tp`` have a null value of its own?"""
    return resolve(tp).has_null()


def is_null(value: Any, tp: Any = None) -> bool:
    """Is ``value`` the null value of ``tp``?"""
    return _null(_traits(value, tp), value)


def null(tp: Any) -> Any:
    """Return the null value of ``tp``; raises NullConversion if it has none."""
    return resolve(tp).null()


def from_string(text: Text | None, tp: Any, current: Any = None) -> Any:
    """Convert field text to a value of ``tp``.

    ``None`` text is the null marker: it yields the null value of ``tp``, or
    raises NullConversion if ``tp`` has none. ``current`` is an existing
    value that mutable handles update in place.
    """
    traits = resolve(tp)
    if text is None:
        return traits.load(None)
    return traits.load(as_text(text, traits.name), current)


def to_string(value: Any, tp: Any = None) -> str:
    """Represent ``value`` as text the database understands.

    Raises NullConversion if ``value`` is null.
    """
    traits = _traits(value, tp)
    if traits is None:
        raise null_conversion(type_name(type(None)))
    text = traits.render(value)
    if text is None:
        raise null_conversion(traits.name)
    return text


def size_buffer(value: Any, tp: Any = None) -> int:
    """Upper bound on the bytes ``to_buf`` needs for ``value``.

    Includes the trailing zero byte; zero for a null value.
    """
    traits = _traits(value, tp)
    if _null(traits, value):
        return 0
    if value is None:
        raise null_conversion(traits.name)
    return traits.size_buffer(value)


def to_buf(window: BufferWindow, value: Any, tp: Any = None) -> memoryview | None:
    """Write ``value`` into ``window`` and return a read-only view of the text.

    Returns None for a null value. Otherwise the byte after the view is a
    zero byte. The view may lie outside the window for types with constant
    representations.

    Raises BufferOverrun, before writing anything, if the window may be too
    small.
    """
    traits = _traits(value, tp)
    if _null(traits, value):
        return None
    if value is None:
        raise null_conversion(traits.name)
    return traits.into_buf(window, value)


def pack_params(values: Sequence[Any],
                types: Iterable[Any] | None = None) -> tuple[bytearray, list[memoryview | None]]:
    """Format parameters into one buffer sized from the per-type estimates.

    Args:
        values: Parameter values
        types: Optional type per value; defaults to the type of each value

    Returns
        The combined buffer and one view (or None for null) per value
    """
    types = [None] * len(values) if types is None else list(types)
    if len(types) != len(values):
        raise ValueError(f'Got {len(types)} types for {len(values)} values')
    sizes = [size_buffer(value, tp) for value, tp in zip(values, types)]
    buffer = bytearray(sum(sizes))
    window = BufferWindow(buffer)
    views = []
    for value, tp, size in zip(values, types, sizes):
        here, window = window.split(size)
        views.append(to_buf(here, value, tp))
    logger.debug(f'Packed {len(values)} parameters into {len(buffer)} bytes')
    return buffer, views
