"""Property tests for ranges: bounds stay inside the extremes at every size."""

from collections.abc import Callable

import pytest
from hypothesis import given

from bramble.core.range import Range
from bramble.core.size import MAX_SIZE, MIN_SIZE
from tests.strategies.core import int_bounds, sizes
from tests.strategies.settings import STANDARD_SETTINGS

CONSTRUCTORS: dict[str, Callable[[int, int, int], Range[int]]] = {
    "constant": Range.constant_from,
    "linear": Range.linear_from,
    "exponential": Range.exponential_from,
}


@pytest.mark.parametrize("name", sorted(CONSTRUCTORS))
class TestIntegralRanges:
    @STANDARD_SETTINGS
    @given(bounds=int_bounds(), size=sizes)
    def test_bounds_contained(self, name: str, bounds: tuple[int, int, int], size: int) -> None:
        origin, x, y = bounds
        lo, hi = CONSTRUCTORS[name](origin, x, y).bounds(size)
        for b in (lo, hi):
            assert min(x, y) <= b <= max(x, y)

    @STANDARD_SETTINGS
    @given(bounds=int_bounds(), size=sizes)
    def test_origin_between_bounds(self, name: str, bounds: tuple[int, int, int], size: int) -> None:
        origin, x, y = bounds
        lo, hi = CONSTRUCTORS[name](origin, x, y).bounds(size)
        assert min(lo, hi) <= origin <= max(lo, hi)

    @STANDARD_SETTINGS
    @given(bounds=int_bounds())
    def test_full_extent_at_max_size(self, name: str, bounds: tuple[int, int, int]) -> None:
        origin, x, y = bounds
        assert CONSTRUCTORS[name](origin, x, y).bounds(MAX_SIZE) == (x, y)


class TestScalingMonotonic:
    @STANDARD_SETTINGS
    @given(bounds=int_bounds())
    def test_linear_grows_with_size(self, bounds: tuple[int, int, int]) -> None:
        origin, x, y = bounds
        r = Range.linear_from(origin, x, y)
        widths = [abs(r.bounds(s)[1] - r.bounds(s)[0]) for s in range(MIN_SIZE, MAX_SIZE + 1)]
        assert widths == sorted(widths)

    @STANDARD_SETTINGS
    @given(bounds=int_bounds())
    def test_exponential_grows_with_size(self, bounds: tuple[int, int, int]) -> None:
        origin, x, y = bounds
        r = Range.exponential_from(origin, x, y)
        widths = [abs(r.bounds(s)[1] - r.bounds(s)[0]) for s in range(MIN_SIZE, MAX_SIZE + 1)]
        assert widths == sorted(widths)
