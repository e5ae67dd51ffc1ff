"""
Descriptors for enumerations.

An enum converts through the descriptor of its underlying integer type, so
``Colour.BLUE`` with value 2 is written as ``2``. There is no null: an enum
has no "invalid member" to stand for one. Subclass ``EnumTraits`` and
override ``has_null``, ``is_null`` and ``null`` to declare one.
"""
import enum
import logging

from strconv.exceptions import UnsupportedType, range_error
from strconv.traits import StringTraits

logger = logging.getLogger(__name__)


class EnumTraits(StringTraits):
    """Descriptor converting an enum through its underlying integer descriptor."""

    def __init__(self, tp, underlying: StringTraits):
        super().__init__(tp)
        self.underlying = underlying
        low = getattr(underlying, 'min', None)
        high = getattr(underlying, 'max', None)
        for member in tp:
            if not isinstance(member.value, int):
                raise UnsupportedType(
                    f'{self.name} has non-integer values; register a descriptor for it',
                    self.name)
            if low is not None and not low <= member.value <= high:
                raise range_error(self.name, str(member.value))

    def from_string(self, text, current=None):
        value = self.underlying.from_string(text)
        try:
            return self.tp(int(value))
        except ValueError as e:
            raise range_error(self.name, text) from e

    def to_string(self, value):
        return self.underlying.to_string(self.underlying.tp(self.tp(value).value))

    def size_buffer(self, value):
        return self.underlying.size_buffer(self.underlying.tp(self.tp(value).value))


def is_enum(tp) -> bool:
    return isinstance(tp, type) and issubclass(tp, enum.Enum)
