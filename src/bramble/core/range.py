"""Size-dependent bounds for numeric generation.

A Range describes the bounds of a number to generate, which may or may not
depend on the size parameter, together with an origin inside those bounds.
As the size goes toward 0 the bounds collapse toward the origin, and when a
generated number is shrunk it shrinks toward the origin.

Three shapes are provided:

- constant: bounds ignore the size.
- linear: bounds grow proportionally with size/99.
- exponential: bounds grow on a logarithmic curve, so small sizes stay small
  while large sizes quickly reach edge magnitudes (e.g. type extremes).

Reversed bounds (lo > hi) are accepted; ``bounds`` reports them in the order
given and ``lower_bound``/``upper_bound`` normalise them.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from bramble.contracts.errors import RangeError
from bramble.core.numeric import IntKind, clamp, quot, sign
from bramble.core.size import MAX_SIZE, Size
from bramble.core.size import clamp as clamp_size

# exp() overflows a double just above this exponent
_MAX_EXP = 709.0


def _default_origin[N: (int, float)](lo: N, hi: N) -> N:
    """Origin for ranges built without an explicit one.

    Zero when zero lies within the bounds, otherwise ``lo``.
    """
    zero = type(lo)(0)
    if min(lo, hi) <= zero <= max(lo, hi):
        return zero
    return lo


def _check_origin(z: object, x: object, y: object) -> None:
    try:
        inside = min(x, y) <= z <= max(x, y)  # type: ignore[type-var, operator]
    except TypeError:
        inside = False
    if not inside:
        raise RangeError(z, x, y)


# =============================================================================
# Scaling
# =============================================================================


def scale_linear(size: Size, z: int, n: int) -> int:
    """Scale an integral linearly with the size parameter.

    The offset from the origin is truncated toward the origin.
    """
    sz = clamp_size(size)
    return z + quot((n - z) * sz, MAX_SIZE)


def scale_exponential(lo: int, hi: int, size: Size, z: int, n: int) -> int:
    """Scale an integral exponentially with the size parameter.

    Computes ``z + sign(d) * ((|d| + 1) ** (size / 99) - 1)`` in the log
    domain, then clamps into ``[lo, hi]``.
    """
    sz = clamp_size(size)
    d = n - z
    if sz == MAX_SIZE or d == 0:
        return clamp(lo, hi, n)
    exponent = (sz / MAX_SIZE) * math.log(abs(d) + 1)
    if exponent >= _MAX_EXP:
        return clamp(lo, hi, n)
    magnitude = min(abs(d), round(math.expm1(exponent)))
    return clamp(lo, hi, z + sign(d) * magnitude)


def scale_linear_float(size: Size, z: float, n: float) -> float:
    k = clamp_size(size) / MAX_SIZE
    # Interpolated form never computes n - z, which may overflow.
    return z * (1.0 - k) + n * k


def scale_exponential_float(lo: float, hi: float, size: Size, z: float, n: float) -> float:
    sz = clamp_size(size)
    if sz == MAX_SIZE or n == z:
        return clamp(lo, hi, n)
    d = n - z
    if math.isinf(d):
        # Only opposite signs overflow, where |n - z| == |n| + |z|.
        log_span = math.log(abs(n) / 2 + abs(z) / 2) + math.log(2)
    else:
        log_span = math.log1p(abs(d))
    exponent = (sz / MAX_SIZE) * log_span
    magnitude = math.inf if exponent >= _MAX_EXP else math.expm1(exponent)
    return clamp(lo, hi, z + sign(d) * magnitude)


# =============================================================================
# Range
# =============================================================================


@dataclass(frozen=True, slots=True)
class Range[T]:
    """Bounds as a function of size, plus the origin to shrink toward.

    Attributes:
        origin: Value generation collapses toward and shrinking targets.
        bounds_fn: Maps a size to the (x, y) bounds for that size.
    """

    origin: T
    bounds_fn: Callable[[Size], tuple[T, T]]

    def bounds(self, size: Size) -> tuple[T, T]:
        """Get the extents of the range for a given size."""
        return self.bounds_fn(size)

    def lower_bound(self, size: Size) -> T:
        x, y = self.bounds(size)
        return min(x, y)  # type: ignore[type-var]

    def upper_bound(self, size: Size) -> T:
        x, y = self.bounds(size)
        return max(x, y)  # type: ignore[type-var]

    def map[U](self, f: Callable[[T], U]) -> Range[U]:
        bounds_fn = self.bounds_fn

        def mapped(size: Size) -> tuple[U, U]:
            x, y = bounds_fn(size)
            return f(x), f(y)

        return Range(f(self.origin), mapped)

    # -------------------------------------------------------------------------
    # Constant
    # -------------------------------------------------------------------------

    @staticmethod
    def singleton(x: T) -> Range[T]:
        """A range which represents a constant single value."""
        return Range(x, lambda _: (x, x))

    @staticmethod
    def constant_from(z: int, x: int, y: int) -> Range[int]:
        """A range unaffected by size, with an explicit origin."""
        _check_origin(z, x, y)
        return Range(z, lambda _: (x, y))

    @staticmethod
    def constant(x: int, y: int) -> Range[int]:
        """A range unaffected by size; origin 0 if within bounds, else ``x``."""
        return Range.constant_from(_default_origin(x, y), x, y)

    @staticmethod
    def constant_bounded(kind: IntKind) -> Range[int]:
        """The full range of a fixed-width integer kind, origin 0."""
        return Range.constant_from(0, kind.min_value, kind.max_value)

    # -------------------------------------------------------------------------
    # Linear
    # -------------------------------------------------------------------------

    @staticmethod
    def linear_from(z: int, x: int, y: int) -> Range[int]:
        """A range whose bounds scale linearly from ``z`` with the size."""
        _check_origin(z, x, y)

        def bounds(size: Size) -> tuple[int, int]:
            return clamp(x, y, scale_linear(size, z, x)), clamp(x, y, scale_linear(size, z, y))

        return Range(z, bounds)

    @staticmethod
    def linear(x: int, y: int) -> Range[int]:
        return Range.linear_from(_default_origin(x, y), x, y)

    @staticmethod
    def linear_bounded(kind: IntKind) -> Range[int]:
        return Range.linear_from(0, kind.min_value, kind.max_value)

    # -------------------------------------------------------------------------
    # Exponential
    # -------------------------------------------------------------------------

    @staticmethod
    def exponential_from(z: int, x: int, y: int) -> Range[int]:
        """A range whose bounds scale exponentially from ``z`` with the size."""
        _check_origin(z, x, y)

        def bounds(size: Size) -> tuple[int, int]:
            return scale_exponential(x, y, size, z, x), scale_exponential(x, y, size, z, y)

        return Range(z, bounds)

    @staticmethod
    def exponential(x: int, y: int) -> Range[int]:
        return Range.exponential_from(_default_origin(x, y), x, y)

    @staticmethod
    def exponential_bounded(kind: IntKind) -> Range[int]:
        return Range.exponential_from(0, kind.min_value, kind.max_value)

    # -------------------------------------------------------------------------
    # Fractional
    # -------------------------------------------------------------------------

    @staticmethod
    def constant_float_from(z: float, x: float, y: float) -> Range[float]:
        _check_origin(z, x, y)
        return Range(z, lambda _: (x, y))

    @staticmethod
    def constant_float(x: float, y: float) -> Range[float]:
        return Range.constant_float_from(_default_origin(float(x), float(y)), x, y)

    @staticmethod
    def linear_float_from(z: float, x: float, y: float) -> Range[float]:
        _check_origin(z, x, y)

        def bounds(size: Size) -> tuple[float, float]:
            return clamp(x, y, scale_linear_float(size, z, x)), clamp(x, y, scale_linear_float(size, z, y))

        return Range(z, bounds)

    @staticmethod
    def linear_float(x: float, y: float) -> Range[float]:
        return Range.linear_float_from(_default_origin(float(x), float(y)), x, y)

    @staticmethod
    def exponential_float_from(z: float, x: float, y: float) -> Range[float]:
        _check_origin(z, x, y)

        def bounds(size: Size) -> tuple[float, float]:
            return scale_exponential_float(x, y, size, z, x), scale_exponential_float(x, y, size, z, y)

        return Range(z, bounds)

    @staticmethod
    def exponential_float(x: float, y: float) -> Range[float]:
        return Range.exponential_float_from(_default_origin(float(x), float(y)), x, y)
