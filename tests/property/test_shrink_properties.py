"""Property tests for shrinkers and the shrink search."""

from functools import partial

import pytest
from hypothesis import given
from hypothesis import strategies as st

from bramble.contracts import PropertyConfig, RecheckData
from bramble.core import shrink
from bramble.core.range import Range
from bramble.core.seed import Seed
from bramble.engine import gen, prop, recheck, report
from tests.strategies.core import seeds, sizes, small_ints, u64s
from tests.strategies.settings import DETERMINISM_SETTINGS, SLOW_SETTINGS, STANDARD_SETTINGS


class TestTowards:
    @STANDARD_SETTINGS
    @given(destination=small_ints, x=small_ints)
    def test_candidates_strictly_closer(self, destination: int, x: int) -> None:
        candidates = list(shrink.towards(destination, x))
        assert all(abs(c - destination) < abs(x - destination) for c in candidates)
        assert len(candidates) == len(set(candidates))

    @STANDARD_SETTINGS
    @given(destination=small_ints, x=small_ints)
    def test_destination_first(self, destination: int, x: int) -> None:
        candidates = list(shrink.towards(destination, x))
        if x == destination:
            assert candidates == []
        else:
            assert candidates[0] == destination

    @STANDARD_SETTINGS
    @given(destination=small_ints, x=small_ints, threshold=small_ints)
    def test_greedy_walk_finds_boundary(self, destination: int, x: int, threshold: int) -> None:
        """Shrinking ``x >= threshold`` from above lands exactly on the boundary."""
        if not destination < threshold <= x:
            return
        current = x
        seen = {current}
        while True:
            step = next((c for c in shrink.towards(destination, current) if c >= threshold), None)
            if step is None:
                break
            assert step not in seen
            seen.add(step)
            current = step
        assert current == threshold


class TestListShrinks:
    @STANDARD_SETTINGS
    @given(xs=st.lists(st.integers(), max_size=20))
    def test_list_candidates_are_shorter(self, xs: list[int]) -> None:
        candidates = list(shrink.list_(xs))
        assert all(len(c) < len(xs) for c in candidates)
        if xs:
            assert candidates[0] == []

    @STANDARD_SETTINGS
    @given(xs=st.lists(small_ints, max_size=10))
    def test_elems_keeps_length(self, xs: list[int]) -> None:
        assert all(len(c) == len(xs) for c in shrink.elems(partial(shrink.towards, 0), xs))


@pytest.mark.slow
class TestShrinkSearch:
    @SLOW_SETTINGS
    @given(root=u64s, threshold=st.integers(min_value=1, max_value=1000))
    def test_threshold_counterexample_is_minimal(self, root: int, threshold: int) -> None:
        p = prop.for_all(gen.integral(Range.constant(0, 1000)), lambda x: x < threshold)
        result = report(p, PropertyConfig(seed=root, tests=200, size=99))
        if result.failure is not None:
            assert result.failure.shrunk == threshold

    @SLOW_SETTINGS
    @given(root=u64s)
    def test_shrink_path_replays(self, root: int) -> None:
        p = prop.for_all(gen.list_of(Range.linear(0, 10), gen.integral(Range.constant(0, 9))), lambda xs: sum(xs) < 10)
        result = report(p, PropertyConfig(seed=root))
        if result.failure is not None:
            rechecked = recheck(p, result.failure.recheck)
            assert rechecked.failure is not None
            assert rechecked.failure.shrunk == result.failure.shrunk


class TestRecheckToken:
    @DETERMINISM_SETTINGS
    @given(size=sizes, seed=seeds, path=st.lists(st.integers(min_value=0, max_value=50), max_size=12))
    def test_serialize_then_parse(self, size: int, seed: Seed, path: list[int]) -> None:
        data = RecheckData(size, seed, tuple(path))
        assert RecheckData.parse(data.serialize()) == data
