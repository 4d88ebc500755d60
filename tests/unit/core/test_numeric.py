"""Tests for integral helpers."""

import pytest

from bramble.core.numeric import IntKind, clamp, quot, sign


class TestQuot:
    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [(13, 2, 6), (-13, 2, -6), (13, -2, -6), (-13, -2, 6), (0, 5, 0), (1, 2, 0), (-1, 2, 0)],
    )
    def test_truncates_toward_zero(self, a: int, b: int, expected: int) -> None:
        assert quot(a, b) == expected


class TestClamp:
    def test_within(self) -> None:
        assert clamp(0, 10, 5) == 5

    def test_outside(self) -> None:
        assert clamp(0, 10, -3) == 0
        assert clamp(0, 10, 42) == 10

    def test_reversed_bounds(self) -> None:
        assert clamp(10, 0, 42) == 10
        assert clamp(10, 0, -3) == 0
        assert clamp(10, 0, 5) == 5


class TestSign:
    def test_sign(self) -> None:
        assert [sign(-3), sign(0), sign(7), sign(-0.5)] == [-1, 0, 1, -1]


class TestIntKind:
    @pytest.mark.parametrize(
        ("kind", "lo", "hi"),
        [
            (IntKind.INT8, -128, 127),
            (IntKind.INT16, -32768, 32767),
            (IntKind.INT32, -(2**31), 2**31 - 1),
            (IntKind.INT64, -(2**63), 2**63 - 1),
            (IntKind.UINT8, 0, 255),
            (IntKind.UINT16, 0, 65535),
            (IntKind.UINT32, 0, 2**32 - 1),
            (IntKind.UINT64, 0, 2**64 - 1),
        ],
    )
    def test_bounds(self, kind: IntKind, lo: int, hi: int) -> None:
        assert (kind.min_value, kind.max_value) == (lo, hi)
        assert kind.contains(lo)
        assert kind.contains(hi)
        assert not kind.contains(lo - 1)
        assert not kind.contains(hi + 1)
