"""
Caller-owned buffer windows for the allocation-free formatting path.
"""
import logging

from strconv.exceptions import BufferOverrun

logger = logging.getLogger(__name__)


class BufferWindow:
    """A writable byte range ``[begin, end)`` inside a caller's bytearray.

    The window never owns the buffer. Views returned by ``write`` stay valid
    as long as the caller leaves that part of the buffer alone.
    """

    __slots__ = ('buffer', 'begin', 'end')

    def __init__(self, buffer: bytearray, begin: int = 0, end: int | None = None) -> None:
        if end is None:
            end = len(buffer)
        if not 0 <= begin <= end <= len(buffer):
            raise ValueError(f'Invalid window [{begin}, {end}) over {len(buffer)} bytes')
        self.buffer = buffer
        self.begin = begin
        self.end = end

    def __len__(self) -> int:
        return self.end - self.begin

    def __repr__(self) -> str:
        return f'BufferWindow(begin={self.begin}, end={self.end})'

    def reserve(self, estimate: int, type_name: str) -> None:
        """Raise BufferOverrun if ``estimate`` bytes may not fit."""
        if estimate > len(self):
            raise BufferOverrun(
                f'Could not convert {type_name} to string: buffer too small. '
                f'Need up to {estimate} bytes, have {len(self)}.', type_name)

    def write(self, data: bytes) -> memoryview:
        """Copy ``data`` plus a trailing zero byte to the start of the window.

        Returns a read-only view of ``data`` inside the buffer.
        """
        stop = self.begin + len(data)
        if stop + 1 > self.end:
            raise BufferOverrun(
                f'Buffer too small for {len(data) + 1} bytes, have {len(self)}.')
        self.buffer[self.begin:stop] = data
        self.buffer[stop] = 0
        return memoryview(self.buffer)[self.begin:stop].toreadonly()

    def split(self, size: int) -> tuple['BufferWindow', 'BufferWindow']:
        """Cut the window into a leading window of ``size`` bytes and the rest."""
        cut = min(self.begin + size, self.end)
        return (BufferWindow(self.buffer, self.begin, cut),
                BufferWindow(self.buffer, cut, self.end))


def constant_view(text: bytes) -> memoryview:
    """Return a view over a constant that carries its own trailing zero.

    Used by types whose representation never needs the caller's buffer.
    """
    return memoryview(text + b'\x00')[:len(text)].toreadonly()
