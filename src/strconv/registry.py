"""
Resolution of type annotations to conversion descriptors.

``TraitRegistry.resolve`` maps an annotation to exactly one descriptor, in
this order:

1. an explicit user registration
2. the builtin primitive descriptors, by exact type
3. the enum adapter, for ``Enum`` subclasses with integer values
4. the wrapper adapters: optional-like, then tuple-like, then container-like

Builtin primitives match by exact type before the structural conditions, so
``str`` is never treated as a container, and an ``IntEnum`` is never treated
as an ``int``. Resolutions are cached process-wide and never
change once made.
"""
import logging
import threading
from typing import Any

from strconv.cache import Cache
from strconv.capabilities import inner_type, is_container, is_optional
from strconv.capabilities import is_tuple, tuple_types
from strconv.enums import EnumTraits, is_enum
from strconv.exceptions import AmbiguousDispatch, UnsupportedType
from strconv.naming import type_name
from strconv.traits import StringTraits, builtin_traits
from strconv.wrappers import ArrayTraits, CompositeTraits, OptionalTraits

logger = logging.getLogger(__name__)

RESOLVED = 'resolved_traits'


class TraitRegistry:
    """Registry of conversion descriptors.

    Thread-safe singleton. Registration belongs at import time, before any
    conversion of the registered type.
    """

    _instance = None
    _lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> 'TraitRegistry':
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def __init__(self) -> None:
        self._builtin: dict[Any, StringTraits] = {t.tp: t for t in builtin_traits()}
        self._user: dict[Any, StringTraits] = {}

    def register(self, tp: Any, traits: StringTraits) -> StringTraits:
        """Register an explicit descriptor for ``tp``.

        Raises AmbiguousDispatch if ``tp`` already has a descriptor, either
        builtin, registered, or already resolved structurally.
        """
        name = type_name(tp)
        with self._lock:
            if tp in self._builtin:
                raise AmbiguousDispatch(
                    f'{name} already has a builtin string conversion', name)
            if tp in self._user:
                raise AmbiguousDispatch(
                    f'{name} already has a registered string conversion: '
                    f'{self._user[tp]!r}', name)
            if Cache.get_instance().contains(RESOLVED, tp):
                raise AmbiguousDispatch(
                    f'{name} was already converted through an adapter; '
                    f'register its conversion before first use', name)
            self._user[tp] = traits
        logger.info(f'Registered string conversion for {name}: {traits!r}')
        return traits

    def is_registered(self, tp: Any) -> bool:
        return tp in self._user or tp in self._builtin

    def resolve(self, tp: Any) -> StringTraits:
        """Return the descriptor for ``tp``."""
        try:
            hash(tp)
        except TypeError as e:
            raise UnsupportedType(f'Unhashable type annotation {tp!r}', repr(tp)) from e
        return Cache.get_instance().get_or_insert(RESOLVED, tp, lambda: self._build(tp))

    def _build(self, tp: Any) -> StringTraits:
        name = type_name(tp)
        traits = self._user.get(tp)
        if traits is not None:
            return traits
        if tp in self._builtin:
            return self._builtin[tp]
        if is_enum(tp):
            traits = self._enum(tp)
        elif is_optional(tp):
            traits = OptionalTraits(tp, self._inner(tp))
        elif is_tuple(tp):
            fields = tuple_types(tp)
            if fields is None:
                raise UnsupportedType(f'No field types known for {name}', name)
            traits = CompositeTraits(tp, [self.resolve(field) for field in fields])
        elif is_container(tp):
            inner = self._inner(tp)
            traits = ArrayTraits(tp, inner, nested=isinstance(inner, ArrayTraits))
        else:
            raise UnsupportedType(f'No string conversion for {name}', name)
        logger.debug(f'Resolved {name} to {traits!r}')
        return traits

    def _inner(self, tp: Any) -> StringTraits:
        inner = inner_type(tp)
        if inner is None:
            name = type_name(tp)
            raise UnsupportedType(
                f'Cannot tell what {name} holds; parameterize it, e.g. {name}[int]', name)
        return self.resolve(inner)

    def _enum(self, tp: Any) -> EnumTraits:
        return EnumTraits(tp, self.resolve(int))


def get_registry() -> TraitRegistry:
    return TraitRegistry.get_instance()


def register(tp: Any, traits: StringTraits) -> StringTraits:
    """Register an explicit descriptor for ``tp``."""
    return get_registry().register(tp, traits)


def resolve(tp: Any) -> StringTraits:
    """Return the descriptor for ``tp``."""
    return get_registry().resolve(tp)


def enum_conversion(underlying: Any = int, traits: type[EnumTraits] = EnumTraits):
    """Class decorator declaring the string conversion of an enum.

    Converts through the descriptor of ``underlying``, e.g. ``numpy.int16``
    for an enum stored in a ``smallint`` column. Raises RangeError if a
    member value does not fit that type.

    >>> import enum
    >>> @enum_conversion()
    ... class Weather(enum.Enum):
    ...     HOT = 0
    ...     COLD = 1
    >>> resolve(Weather).to_string(Weather.COLD)
    '1'
    """
    def decorator(cls):
        if not is_enum(cls):
            raise TypeError(f'enum_conversion applies to Enum subclasses, not {cls!r}')
        register(cls, traits(cls, resolve(underlying)))
        return cls
    return decorator

