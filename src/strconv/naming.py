"""
Human-readable type names for diagnostics.
"""
import types
import typing
from typing import Any

from strconv.cache import Cache

TYPE_NAMES = 'type_names'


def _format(tp: Any) -> str:
    if tp is type(None):
        return 'None'
    origin = typing.get_origin(tp)
    if origin in {typing.Union, types.UnionType}:
        return ' | '.join(_format(arg) for arg in typing.get_args(tp))
    if origin is not None:
        args = typing.get_args(tp)
        inner = ', '.join(_format(arg) for arg in args) if args else '()'
        return f'{_format(origin)}[{inner}]'
    if isinstance(tp, type):
        module = tp.__module__
        if module in {'builtins', '__main__'}:
            return tp.__qualname__
        if module.startswith('numpy'):
            return f'numpy.{tp.__name__}'
        return f'{module}.{tp.__qualname__}'
    if tp is Ellipsis:
        return '...'
    return repr(tp).replace('typing.', '')


def type_name(tp: Any) -> str:
    """Return the diagnostic name of a type annotation.

    >>> type_name(int)
    'int'
    >>> type_name(list[int | None])
    'list[int | None]'
    """
    try:
        return Cache.get_instance().get_or_insert(TYPE_NAMES, tp, lambda: _format(tp))
    except TypeError:
        return _format(tp)
