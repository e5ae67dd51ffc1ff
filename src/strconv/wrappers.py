"""
Descriptors synthesized for wrapper types.

- OptionalTraits: ``X | None`` and any class with ``deref()`` and a truth
  test, such as ``Ref``
- ArrayTraits: variable-length iterables, as PostgreSQL array literals
- CompositeTraits: fixed-arity tuples and NamedTuples, as row literals

Each is built from the descriptors of the wrapped types, so one adapter
covers every wrapper of a given shape.
"""
import logging
from typing import Any, Generic, TypeVar

from strconv.buffer import BufferWindow
from strconv.capabilities import is_assignable, origin_class, takes_no_args
from strconv.capabilities import takes_none
from strconv.config import get_options
from strconv.exceptions import null_conversion, syntax_error
from strconv.traits import StringTraits

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Ref(Generic[T]):
    """A mutable owning handle that is either empty or holds one value.

    ``Ref()`` is the empty handle. Reading into a present handle replaces
    its value in place instead of allocating a new handle.

    >>> r = Ref(5)
    >>> r.set(6)
    >>> r.deref(), bool(Ref())
    (6, False)
    """

    __slots__ = ('_value', '_present')

    def __init__(self, *value: T) -> None:
        if len(value) > 1:
            raise TypeError(f'Ref takes at most one value, got {len(value)}')
        self._present = bool(value)
        self._value = value[0] if value else None

    def __bool__(self) -> bool:
        return self._present

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Ref):
            return NotImplemented
        return (self._present, self._value) == (other._present, other._value)

    def __hash__(self):
        return hash((self._present, self._value))

    def __repr__(self) -> str:
        return f'Ref({self._value!r})' if self._present else 'Ref()'

    def deref(self) -> T:
        if not self._present:
            raise ValueError('Dereferencing an empty Ref')
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._present = True


def deref(tp: Any, value: Any) -> Any:
    """Return the value held by a present optional-like ``value``."""
    if takes_none(tp):
        return value
    return value.deref()


def make_optional(tp: Any, value: Any) -> Any:
    """Construct an optional-like ``tp`` holding ``value``.

    ``X | None`` holds the value itself; classes with a ``make`` factory
    (shared handles) use it; other classes are called directly.
    """
    if takes_none(tp):
        return value
    cls = origin_class(tp)
    factory = getattr(cls, 'make', None)
    if callable(factory):
        return factory(value)
    return cls(value)


def null_value(tp: Any, inner: StringTraits) -> Any:
    """Return the canonical null of an optional-like ``tp``.

    ==========================  ==========================================
    ``X | None``                ``None``
    constructible empty         ``cls()``, the zero handle
    anything else               the inner null, lifted into the wrapper
    ==========================  ==========================================
    """
    if takes_none(tp):
        return None
    if takes_no_args(tp):
        return origin_class(tp)()
    return make_optional(tp, inner.null())


class OptionalTraits(StringTraits):
    """Descriptor for optional-like types, built on the inner descriptor."""

    def __init__(self, tp, inner: StringTraits):
        super().__init__(tp)
        self.inner = inner
        self._assignable = is_assignable(tp)

    def has_null(self):
        return True

    def is_null(self, value):
        if takes_none(self.tp):
            if value is None:
                return True
        elif not value:
            return True
        return self.inner.has_null() and self.inner.is_null(deref(self.tp, value))

    def null(self):
        return null_value(self.tp, self.inner)

    def from_string(self, text, current=None):
        present = current is not None and not takes_none(self.tp) and bool(current)
        scratch = self.inner.from_string(
            text, deref(self.tp, current) if present else None)
        if present and self._assignable:
            current.set(scratch)
            return current
        return make_optional(self.tp, scratch)

    def to_string(self, value):
        if self.is_null(value):
            raise null_conversion(self.name)
        return self.inner.to_string(deref(self.tp, value))

    def size_buffer(self, value):
        if self.is_null(value):
            return 0
        return self.inner.size_buffer(deref(self.tp, value))

    def into_buf(self, window: BufferWindow, value):
        if self.is_null(value):
            raise null_conversion(self.name)
        return self.inner.into_buf(window, deref(self.tp, value))


def _needs_quotes(text: str, specials: str) -> bool:
    return text == '' or any(c in specials or c.isspace() for c in text)


def _escape(text: str) -> str:
    return '"' + text.replace('\\', '\\\\').replace('"', '\\"') + '"'


class ArrayTraits(StringTraits):
    """PostgreSQL array literals: ``{1,2,NULL}``, ``{"a b","c"}``, ``{{1},{2}}``.

    Elements that are arrays themselves are written unquoted. Null elements
    are written as ``NULL``.
    """

    def __init__(self, tp, inner: StringTraits, nested: bool = False):
        super().__init__(tp)
        self.inner = inner
        self.nested = nested

    def _build(self, items: list) -> Any:
        cls = origin_class(self.tp)
        if isinstance(cls, type) and not getattr(cls, '__abstractmethods__', None):
            return cls(items)
        return items

    def to_string(self, value):
        delimiter = get_options().array_delimiter
        specials = '{}"\\' + delimiter
        parts = []
        for item in value:
            text = self.inner.render(item)
            if text is None:
                parts.append('NULL')
            elif self.nested:
                parts.append(text)
            elif _needs_quotes(text, specials) or text.upper() == 'NULL':
                parts.append(_escape(text))
            else:
                parts.append(text)
        return '{' + delimiter.join(parts) + '}'

    def from_string(self, text, current=None):
        delimiter = get_options().array_delimiter
        if not text.startswith('{'):
            raise syntax_error(self.name, text, "array must start with '{'")
        items = []
        pos = 1
        if text.startswith('}', pos):
            pos += 1
        else:
            while True:
                element, pos = self._scan_element(text, pos, delimiter)
                items.append(self.inner.load(element))
                if text.startswith(delimiter, pos):
                    pos += 1
                elif text.startswith('}', pos):
                    pos += 1
                    break
                else:
                    raise syntax_error(self.name, text, f'unexpected character at {pos}')
        if pos != len(text):
            raise syntax_error(self.name, text, 'trailing characters after array')
        return self._build(items)

    def _scan_element(self, text: str, pos: int, delimiter: str) -> tuple[str | None, int]:
        """Return the text of the element starting at ``pos`` and the position after it."""
        if text.startswith('{', pos):
            depth = 0
            quoted = False
            start = pos
            while pos < len(text):
                c = text[pos]
                if quoted:
                    if c == '\\':
                        pos += 1
                    elif c == '"':
                        quoted = False
                elif c == '"':
                    quoted = True
                elif c == '{':
                    depth += 1
                elif c == '}':
                    depth -= 1
                    if depth == 0:
                        return text[start:pos + 1], pos + 1
                pos += 1
            raise syntax_error(self.name, text, 'unterminated nested array')
        if text.startswith('"', pos):
            return _scan_quoted(self.name, text, pos)
        start = pos
        while pos < len(text) and text[pos] not in (delimiter, '}'):
            if text[pos] in '{"\\':
                raise syntax_error(self.name, text, f'unexpected character at {pos}')
            pos += 1
        element = text[start:pos]
        if element == '':
            raise syntax_error(self.name, text, f'empty element at {start}')
        if element.upper() == 'NULL':
            return None, pos
        return element, pos


def _scan_quoted(name: str, text: str, pos: int) -> tuple[str, int]:
    """Read a double-quoted string starting at ``pos``.

    Backslash escapes the next character; a doubled quote is a literal quote.
    """
    out = []
    pos += 1
    while pos < len(text):
        c = text[pos]
        if c == '\\':
            if pos + 1 >= len(text):
                break
            out.append(text[pos + 1])
            pos += 2
        elif c == '"':
            if text.startswith('"', pos + 1):
                out.append('"')
                pos += 2
            else:
                return ''.join(out), pos + 1
        else:
            out.append(c)
            pos += 1
    raise syntax_error(name, text, 'unterminated quoted string')


class CompositeTraits(StringTraits):
    """Row literals for fixed-arity tuples: ``(1,"a b",)``.

    An empty field is null; an empty string is written as ``""``.
    """

    def __init__(self, tp, fields: list[StringTraits]):
        super().__init__(tp)
        self.fields = fields

    def _build(self, values: list) -> Any:
        cls = origin_class(self.tp)
        if cls is tuple:
            return tuple(values)
        return cls(*values)

    def to_string(self, value):
        if len(value) != len(self.fields):
            raise syntax_error(self.name, repr(value),
                               f'expected {len(self.fields)} fields, got {len(value)}')
        parts = []
        for traits, item in zip(self.fields, value):
            text = traits.render(item)
            if text is None:
                parts.append('')
            elif _needs_quotes(text, '(),"\\'):
                parts.append('"' + text.replace('\\', '\\\\').replace('"', '""') + '"')
            else:
                parts.append(text)
        return '(' + ','.join(parts) + ')'

    def from_string(self, text, current=None):
        if not (text.startswith('(') and text.endswith(')')) or len(text) < 2:
            raise syntax_error(self.name, text, 'row must be enclosed in parentheses')
        values = []
        pos = 1
        for index, traits in enumerate(self.fields):
            if index:
                if not text.startswith(',', pos):
                    raise syntax_error(self.name, text, f'expected {len(self.fields)} fields')
                pos += 1
            field, pos = self._scan_field(text, pos)
            values.append(traits.load(field))
        if pos != len(text) - 1:
            raise syntax_error(self.name, text, f'expected {len(self.fields)} fields')
        return self._build(values)

    def _scan_field(self, text: str, pos: int) -> tuple[str | None, int]:
        end = len(text) - 1
        if pos == end or text[pos] == ',':
            return None, pos
        out = []
        while pos < end and text[pos] != ',':
            c = text[pos]
            if c == '"':
                quoted, pos = _scan_quoted(self.name, text, pos)
                out.append(quoted)
            elif c == '\\' and pos + 1 < end:
                out.append(text[pos + 1])
                pos += 2
            else:
                out.append(c)
                pos += 1
        return ''.join(out), pos
