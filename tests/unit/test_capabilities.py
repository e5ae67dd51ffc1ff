"""
Tests for structural capability detection.
"""
import collections
import collections.abc
import typing
from typing import NamedTuple

import pytest
from strconv import Ref, inner_type, is_container, is_derefable, is_optional
from strconv import is_tuple
from strconv.capabilities import is_assignable, takes_no_args, takes_none
from strconv.capabilities import tuple_types


class Point(NamedTuple):
    x: int
    y: int


class Handle:
    """An optional-like class nobody told the framework about"""

    def __init__(self, value: float) -> None:
        self.value = value

    def __bool__(self) -> bool:
        return self.value is not None

    def deref(self) -> float:
        return self.value


class DerefOnly:
    """Dereferenceable but without a presence test"""

    def deref(self) -> int:
        return 1


class TestPredicates:

    @pytest.mark.parametrize('tp', [int | None, typing.Optional[str], Ref[int], Handle])
    def test_optional_like(self, tp):
        assert is_derefable(tp)
        assert is_optional(tp)

    def test_derefable_without_truth_test_is_not_optional(self):
        assert is_derefable(DerefOnly)
        assert not is_optional(DerefOnly)

    @pytest.mark.parametrize('tp', [int, str, list[int], tuple[int, str], Point])
    def test_not_optional(self, tp):
        assert not is_optional(tp)

    @pytest.mark.parametrize('tp', [tuple[int, str], tuple[()], tuple[int], Point])
    def test_fixed_arity_is_tuple_not_container(self, tp):
        assert is_tuple(tp)
        assert not is_container(tp)
        assert not is_derefable(tp)

    @pytest.mark.parametrize('tp', [list[int], set[str], frozenset[int], tuple[int, ...],
                                    collections.deque[int], collections.abc.Sequence[int],
                                    tuple, list])
    def test_variable_length_is_container(self, tp):
        assert is_container(tp)
        assert not is_tuple(tp)

    @pytest.mark.parametrize('tp', [int, float, None, type(None)])
    def test_scalars_are_neither(self, tp):
        assert not is_container(tp)
        assert not is_tuple(tp)
        assert not is_derefable(tp)

    def test_union_without_none_is_not_optional(self):
        assert not takes_none(int | str)
        assert not is_optional(int | str)


class TestInnerType:

    def test_from_type_arguments(self):
        assert inner_type(int | None) is int
        assert inner_type(typing.Optional[bytes]) is bytes
        assert inner_type(Ref[str]) is str
        assert inner_type(list[float]) is float
        assert inner_type(tuple[int, ...]) is int
        assert inner_type(Ref[Ref[int]]) == Ref[int]

    def test_from_deref_annotation(self):
        assert inner_type(Handle) is float
        assert inner_type(DerefOnly) is int

    def test_unknown(self):
        assert inner_type(Ref) is None
        assert inner_type(list) is None
        assert inner_type(dict[str, int]) is None

    def test_multi_type_union(self):
        assert typing.get_args(inner_type(int | str | None)) == (int, str)

    def test_tuple_types(self):
        assert tuple_types(tuple[int, str]) == (int, str)
        assert tuple_types(Point) == (int, int)
        assert tuple_types(collections.namedtuple('Bare', 'a b')) is None


class TestShapes:

    def test_ref_is_assignable_and_constructible_empty(self):
        assert is_assignable(Ref[int])
        assert takes_no_args(Ref[int])

    def test_handle_needs_a_value(self):
        assert not is_assignable(Handle)
        assert not takes_no_args(Handle)

    def test_union_takes_none(self):
        assert takes_none(int | None)
        assert not takes_none(Ref[int])
