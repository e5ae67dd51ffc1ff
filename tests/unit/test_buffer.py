"""
Tests for formatting into caller-owned buffers.
"""
import datetime
import decimal

import numpy as np
import pandas as pd
import pytest
from strconv import BufferOverrun, BufferWindow, ConversionOptions, ConversionSyntaxError
from strconv import NullConversion, Ref, pack_params, size_buffer, to_buf, to_string

LATEST_OFFSET = datetime.timezone(
    -datetime.timedelta(hours=23, minutes=59, seconds=59, microseconds=999999))


class TestToBuf:

    def test_writes_text_and_trailing_zero(self):
        buf = bytearray(b'\xaa' * 16)
        view = to_buf(BufferWindow(buf), 12345)
        assert bytes(view) == b'12345'
        assert buf[5] == 0
        assert buf[6:] == b'\xaa' * 10

    def test_view_is_read_only(self):
        view = to_buf(BufferWindow(bytearray(16)), 'abc')
        assert view.readonly
        with pytest.raises(TypeError):
            view[0] = 0

    def test_writes_at_window_start(self):
        buf = bytearray(16)
        view = to_buf(BufferWindow(buf, 4, 16), np.int16(-7))
        assert bytes(view) == b'-7'
        assert buf[4:7] == b'-7\x00'
        assert buf[:4] == bytes(4)

    def test_null_writes_nothing(self):
        buf = bytearray(b'\xaa' * 8)
        assert to_buf(BufferWindow(buf), None, int | None) is None
        assert to_buf(BufferWindow(buf), Ref(), Ref[int]) is None
        assert to_buf(BufferWindow(buf), None) is None
        assert buf == b'\xaa' * 8

    def test_null_into_non_null_type(self):
        with pytest.raises(NullConversion):
            to_buf(BufferWindow(bytearray(8)), None, int)

    def test_wrapped_value_written_through_inner(self):
        view = to_buf(BufferWindow(bytearray(8)), Ref(42), Ref[int])
        assert bytes(view) == b'42'

    def test_array_value(self):
        view = to_buf(BufferWindow(bytearray(32)), [1, None, 3], list[int | None])
        assert bytes(view) == b'{1,NULL,3}'

    def test_text_outside_encoding(self):
        """Test that text the configured encoding cannot hold is rejected unwritten"""
        ConversionOptions.set_instance(ConversionOptions(encoding='latin-1'))
        buf = bytearray(b'\xaa' * 16)
        with pytest.raises(ConversionSyntaxError) as exc:
            to_buf(BufferWindow(buf), '€')
        assert exc.value.type_name == 'str'
        assert buf == b'\xaa' * 16
        with pytest.raises(ConversionSyntaxError):
            size_buffer(['a', '€'], list[str])
        assert bytes(to_buf(BufferWindow(buf), 'café')) == b'caf\xe9'

    def test_encoded_text(self):
        buf = bytearray(32)
        view = to_buf(BufferWindow(buf), 'héllo')
        assert bytes(view).decode() == 'héllo'
        assert buf[len('héllo'.encode())] == 0


class TestOverrun:
    """Overruns are detected before anything is written"""

    @pytest.mark.parametrize(('value', 'tp'), [
        (12345, None),
        (np.int8(1), None),
        ('a longer piece of text', None),
        (b'\x00\x01', None),
        (2.5, float),
    ])
    def test_buffer_untouched(self, value, tp):
        buf = bytearray(b'\xaa' * 4)
        with pytest.raises(BufferOverrun) as exc:
            to_buf(BufferWindow(buf), value, tp)
        assert exc.value.type_name
        assert buf == b'\xaa' * 4

    def test_window_end_is_respected(self):
        buf = bytearray(b'\xaa' * 32)
        with pytest.raises(BufferOverrun):
            to_buf(BufferWindow(buf, 0, 3), 'abcdef')
        assert buf == b'\xaa' * 32

    def test_estimate_fits_exactly(self):
        value = -(2 ** 63)
        buf = bytearray(size_buffer(value))
        assert bytes(to_buf(BufferWindow(buf), value)) == str(value).encode()


class TestConstantViews:
    """Booleans never need the caller's buffer"""

    @pytest.mark.parametrize(('value', 'text'), [(True, b'true'), (False, b'false'),
                                                  (np.True_, b'true')])
    def test_view_outside_window(self, value, text):
        buf = bytearray(b'\xaa' * 8)
        view = to_buf(BufferWindow(buf), value)
        assert bytes(view) == text
        assert view.obj is not buf
        assert view.obj[len(view)] == 0
        assert buf == b'\xaa' * 8

    def test_empty_window(self):
        assert bytes(to_buf(BufferWindow(bytearray()), True)) == b'true'


class TestWindow:

    def test_split(self):
        window = BufferWindow(bytearray(10), 2)
        head, rest = window.split(3)
        assert (head.begin, head.end) == (2, 5)
        assert (rest.begin, rest.end) == (5, 10)

    def test_split_is_clamped(self):
        head, rest = BufferWindow(bytearray(4)).split(10)
        assert len(head) == 4
        assert len(rest) == 0

    @pytest.mark.parametrize(('begin', 'end'), [(-1, 2), (3, 2), (0, 5)])
    def test_invalid_bounds(self, begin, end):
        with pytest.raises(ValueError):
            BufferWindow(bytearray(4), begin, end)


class TestSizeBuffer:

    def test_null_needs_nothing(self):
        assert size_buffer(None) == 0
        assert size_buffer(None, int | None) == 0
        assert size_buffer(Ref(), Ref[str]) == 0

    @pytest.mark.parametrize('value', [0, -1, 10 ** 40, -(10 ** 40), 'üñí', b'\xff' * 3,
                                       1.5e-300, np.uint64(2 ** 64 - 1), True, 10 ** 5000],
                             ids=lambda v: type(v).__name__)
    def test_estimate_covers_text(self, value):
        buf = bytearray(size_buffer(value))
        view = to_buf(BufferWindow(buf), value)
        assert len(view) < max(len(buf), 6)

    @pytest.mark.parametrize(('short', 'longest'), [
        (datetime.time(0, 0), datetime.time(23, 59, 59, 999999, tzinfo=LATEST_OFFSET)),
        (datetime.datetime(2023, 1, 1),
         datetime.datetime(9999, 12, 31, 23, 59, 59, 999999, tzinfo=LATEST_OFFSET)),
        (pd.Timestamp('2023-01-01'),
         pd.Timestamp('2023-05-15 14:30:45.123456789',
                      tz=datetime.timezone(-datetime.timedelta(hours=9, minutes=30)))),
    ])
    def test_temporal_estimates_are_constant(self, short, longest):
        """Test that temporal estimates are fixed bounds covering the longest text"""
        assert size_buffer(short) == size_buffer(longest)
        assert len(to_string(longest)) + 1 <= size_buffer(longest)
        buf = bytearray(size_buffer(longest))
        assert bytes(to_buf(BufferWindow(buf), longest)).decode() == to_string(longest)

    @pytest.mark.parametrize('value', ['0E-10', '-123.45', '1E+5', '0.001', '-0.00',
                                       '12345678901234567890.5', 'NaN', '-Infinity'])
    def test_decimal_estimate_covers_text(self, value):
        value = decimal.Decimal(value)
        assert len(to_string(value)) + 1 <= size_buffer(value)


class TestPackParams:

    def test_views_per_parameter(self):
        buf, views = pack_params([1, None, 'a b', True, Ref(2.5)],
                                 [None, int | None, None, None, Ref[float]])
        assert bytes(views[0]) == b'1'
        assert views[1] is None
        assert bytes(views[2]) == b'a b'
        assert bytes(views[3]) == b'true'
        assert bytes(views[4]) == b'2.5'
        assert len(buf) == sum(size_buffer(v, t) for v, t in
                               zip([1, None, 'a b', True, Ref(2.5)],
                                   [None, int | None, None, None, Ref[float]]))

    def test_views_share_the_buffer(self):
        buf, views = pack_params([10, 'x'])
        assert views[0].obj is buf
        assert views[1].obj is buf

    def test_types_default_to_value_types(self):
        _, views = pack_params([np.int32(-5), b'\x01'])
        assert [bytes(v) for v in views] == [b'-5', b'\\x01']

    def test_mismatched_types(self):
        with pytest.raises(ValueError):
            pack_params([1, 2], [int])
