"""Integral helpers shared by ranges and shrinkers.

Python integers are unbounded, so nothing here can overflow. Fixed-width
integer kinds exist only to describe bounds (e.g. the full int32 range) and
to let callers test behaviour at the extremes of those types.
"""

from __future__ import annotations

from enum import StrEnum


class IntKind(StrEnum):
    """Fixed-width integer kinds with well-known bounds."""

    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"

    @property
    def bits(self) -> int:
        return int(self.value.removeprefix("u").removeprefix("int"))

    @property
    def signed(self) -> bool:
        return not self.value.startswith("u")

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    def contains(self, n: int) -> bool:
        return self.min_value <= n <= self.max_value


def sign(n: int | float) -> int:
    if n > 0:
        return 1
    if n < 0:
        return -1
    return 0


def quot(a: int, b: int) -> int:
    """Integer division truncating toward zero.

    ``//`` floors, which would make halving a negative number drift away
    from zero (-13 // 2 == -7). Shrinking needs -13 -> -6.
    """
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def clamp[T: (int, float)](x: T, y: T, n: T) -> T:
    """Truncate ``n`` so it stays within the bounds ``x`` and ``y``.

    The bounds may be given in either order.
    """
    if x > y:
        return min(x, max(y, n))
    return min(y, max(x, n))
