# src/bramble/engine/random.py
"""Random: a pure function of (seed, size).

The layer beneath generators. A Random carries no state of its own; every
composition that runs two sub-computations splits the seed first, so the two
never share randomness and any value can be reproduced from (seed, size).
"""

from __future__ import annotations

from collections.abc import Callable

from bramble.core.range import Range
from bramble.core.seed import Seed
from bramble.core.size import Size


class Random[T]:
    """A deterministic computation from (seed, size) to a value."""

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[Seed, Size], T]) -> None:
        self._fn = fn

    def run(self, seed: Seed, size: Size) -> T:
        return self._fn(seed, size)

    @staticmethod
    def constant(x: T) -> Random[T]:
        return Random(lambda _seed, _size: x)

    @staticmethod
    def delay(f: Callable[[], Random[T]]) -> Random[T]:
        """Defer building the Random until it runs (for recursion)."""
        return Random(lambda seed, size: f().run(seed, size))

    @staticmethod
    def sized(f: Callable[[Size], Random[T]]) -> Random[T]:
        """Build a Random that depends on the size parameter."""
        return Random(lambda seed, size: f(size).run(seed, size))

    def resize(self, size: Size) -> Random[T]:
        """Run with ``size`` instead of the ambient size."""
        return Random(lambda seed, _size: self.run(seed, size))

    def map[U](self, f: Callable[[T], U]) -> Random[U]:
        return Random(lambda seed, size: f(self.run(seed, size)))

    def bind[U](self, f: Callable[[T], Random[U]]) -> Random[U]:
        def run(seed: Seed, size: Size) -> U:
            seed1, seed2 = seed.split()
            return f(self.run(seed1, size)).run(seed2, size)

        return Random(run)

    def try_finally(self, after: Callable[[], None]) -> Random[T]:
        """Call ``after`` once this Random has run, even if it raised."""

        def run(seed: Seed, size: Size) -> T:
            try:
                return self.run(seed, size)
            finally:
                after()

        return Random(run)

    def replicate(self, n: int) -> Random[list[T]]:
        """Run ``n`` times, each on its own split of the seed."""

        def run(seed: Seed, size: Size) -> list[T]:
            values: list[T] = []
            for _ in range(n):
                element_seed, seed = seed.split()
                values.append(self.run(element_seed, size))
            return values

        return Random(run)

    @staticmethod
    def integral(range_: Range[int]) -> Random[int]:
        """Uniform integer within the range's bounds at the current size."""

        def run(seed: Seed, size: Size) -> int:
            lo, hi = range_.bounds(size)
            x, _ = seed.next_int(lo, hi)
            return x

        return Random(run)

    @staticmethod
    def floating(range_: Range[float]) -> Random[float]:
        def run(seed: Seed, size: Size) -> float:
            lo, hi = range_.bounds(size)
            x, _ = seed.next_float(lo, hi)
            return x

        return Random(run)
