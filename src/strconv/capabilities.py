"""
Structural capability detection for type annotations.

Types never declare these capabilities. A class is optional-like when it
provides ``deref()`` and a truth test, container-like when it is iterable,
and tuple-like when its arity is fixed by the annotation. The predicates
only look at annotations and classes, never at values.

>>> is_optional(int | None)
True
>>> is_tuple(tuple[int, str]), is_container(tuple[int, ...])
(True, True)
>>> is_container(tuple[int, str])
False
"""
import collections.abc
import inspect
import types
import typing
from typing import Any, Protocol, TypeVar, runtime_checkable

T_co = TypeVar('T_co', covariant=True)
T_contra = TypeVar('T_contra', contravariant=True)

_UNION_TYPES = (typing.Union, types.UnionType)
_NONE_TYPE = type(None)


@runtime_checkable
class SupportsDeref(Protocol[T_co]):
    """Anything with a single-value dereference."""

    def deref(self) -> T_co: ...


@runtime_checkable
class SupportsAssign(Protocol[T_contra]):
    """A mutable handle whose held value can be replaced in place."""

    def set(self, value: T_contra) -> None: ...


def origin_class(tp: Any) -> Any:
    """Return the class behind a (possibly parameterized) annotation."""
    return typing.get_origin(tp) or tp


def takes_none(tp: Any) -> bool:
    """Is ``tp`` an ``X | None`` union, whose null marker is ``None``?"""
    return typing.get_origin(tp) in _UNION_TYPES and _NONE_TYPE in typing.get_args(tp)


def is_tuple(tp: Any) -> bool:
    """Does ``tp`` have a fixed number of elements known from the annotation?"""
    if typing.get_origin(tp) is tuple:
        args = typing.get_args(tp)
        return not (len(args) == 2 and args[1] is Ellipsis)
    return isinstance(tp, type) and issubclass(tp, tuple) and hasattr(tp, '_fields')


def is_derefable(tp: Any) -> bool:
    """Does ``tp`` support a single-value dereference?"""
    if takes_none(tp):
        return True
    if is_tuple(tp):
        return False
    cls = origin_class(tp)
    return isinstance(cls, type) and issubclass(cls, SupportsDeref)


def is_optional(tp: Any) -> bool:
    """Should ``tp`` be treated as an optional-value wrapper?

    Requires a dereference plus an explicit truth test telling whether a
    value is present.
    """
    if takes_none(tp):
        return True
    if not is_derefable(tp):
        return False
    return getattr(origin_class(tp), '__bool__', None) is not None


def is_container(tp: Any) -> bool:
    """Is ``tp`` an iterable of variable length?"""
    if is_tuple(tp):
        return False
    cls = origin_class(tp)
    return isinstance(cls, type) and issubclass(cls, collections.abc.Iterable)


def is_assignable(tp: Any) -> bool:
    """Can a present value of ``tp`` be updated in place?"""
    cls = origin_class(tp)
    return isinstance(cls, type) and issubclass(cls, SupportsAssign)


def takes_no_args(tp: Any) -> bool:
    """Can ``tp`` be constructed empty, like a zero address?"""
    cls = origin_class(tp)
    if not isinstance(cls, type):
        return False
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return False
    try:
        signature.bind()
    except TypeError:
        return False
    return True


def inner_type(tp: Any) -> Any:
    """Return the type held by an optional-like or container-like type.

    Returns None when the annotation does not say.
    """
    args = typing.get_args(tp)
    if takes_none(tp):
        rest = tuple(arg for arg in args if arg is not _NONE_TYPE)
        return rest[0] if len(rest) == 1 else typing.Union[rest]
    if typing.get_origin(tp) is tuple and len(args) == 2 and args[1] is Ellipsis:
        return args[0]
    if args:
        return args[0] if len(args) == 1 else None
    cls = origin_class(tp)
    deref = getattr(cls, 'deref', None)
    if deref is None or is_container(tp):
        return None
    try:
        hint = typing.get_type_hints(deref).get('return')
    except (NameError, TypeError):
        return None
    if hint is None or isinstance(hint, TypeVar):
        return None
    return hint


def tuple_types(tp: Any) -> tuple | None:
    """Return the element types of a tuple-like type, in order."""
    if typing.get_origin(tp) is tuple:
        return typing.get_args(tp)
    if tp is tuple:
        return None
    hints = typing.get_type_hints(tp)
    if not all(name in hints for name in tp._fields):
        return None
    return tuple(hints[name] for name in tp._fields)
