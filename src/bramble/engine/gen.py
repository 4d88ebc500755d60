# src/bramble/engine/gen.py
"""Generators with integrated shrinking.

A Gen produces, from a seed and a size, a random value together with the lazy
tree of its shrinks. Because every combinator transforms the tree alongside
the value, composite generators shrink for free: ``integral(r).map(f)``
shrinks exactly like ``integral(r)``, with ``f`` applied to every candidate.

Usage:
    from bramble.core.range import Range
    from bramble.engine import gen

    pairs = gen.zip(gen.integral(Range.linear(0, 100)), gen.boolean)
    names = gen.string(Range.linear(1, 8), gen.lower)

    @gen.build
    def sorted_pair():
        lo = yield gen.integral(Range.linear(0, 100))
        hi = yield gen.integral(Range.linear_from(lo, lo, 200))
        return lo, hi

Generators are pure: running one twice with the same (seed, size) yields
identical trees. Misuse that can be detected up front (an empty ``choice``,
non-positive total weight) raises at construction time.
"""

from __future__ import annotations

import functools
import sys
from collections import deque
from collections.abc import Callable, Generator, Iterable, Sequence
from typing import Any, TextIO

from bramble.contracts.errors import GenDiscard, PropertyUsageError
from bramble.core import shrink as shrinks
from bramble.core.numeric import IntKind
from bramble.core.range import Range
from bramble.core.seed import Seed
from bramble.core.size import MAX_SIZE, Size, halve
from bramble.core.size import clamp as clamp_size
from bramble.core.tree import Tree
from bramble.engine.random import Random

DEFAULT_FILTER_TRIES = 100

# Surrogate code points cannot appear in well-formed text.
_SURROGATE_START = 0xD800
_SURROGATE_COUNT = 0x800
_MAX_CODE_POINT = 0x10FFFF


class Gen[T]:
    """A generator of values of type T and their shrink trees."""

    __slots__ = ("random",)

    def __init__(self, random: Random[Tree[T]]) -> None:
        self.random = random

    def run(self, seed: Seed, size: Size) -> Tree[T]:
        return self.random.run(seed, size)

    # -------------------------------------------------------------------------
    # Functor / monad
    # -------------------------------------------------------------------------

    def map_tree[U](self, f: Callable[[Tree[T]], Tree[U]]) -> Gen[U]:
        return Gen(self.random.map(f))

    def map[U](self, f: Callable[[T], U]) -> Gen[U]:
        return self.map_tree(lambda tree: tree.map(f))

    def bind[U](self, f: Callable[[T], Gen[U]]) -> Gen[U]:
        """Sequence a dependent generator.

        The seed is split once: this generator runs on the first half and
        every continuation (for the value and for each of its shrinks) runs
        on the second half, so a shrunk outer value re-generates the inner
        value from the same randomness.
        """

        def run(seed: Seed, size: Size) -> Tree[U]:
            seed1, seed2 = seed.split()
            return self.run(seed1, size).bind(lambda x: f(x).run(seed2, size))

        return Gen(Random(run))

    # -------------------------------------------------------------------------
    # Size
    # -------------------------------------------------------------------------

    def resize(self, size: Size) -> Gen[T]:
        """Use ``size`` instead of the runtime size."""
        return Gen(self.random.resize(size))

    def scale(self, f: Callable[[Size], Size]) -> Gen[T]:
        """Adjust the size parameter by transforming it with ``f``."""
        return sized(lambda n: self.resize(f(n)))

    # -------------------------------------------------------------------------
    # Shrinking
    # -------------------------------------------------------------------------

    def no_shrink(self) -> Gen[T]:
        """Prevent this generator from shrinking."""
        return self.map_tree(lambda tree: tree.prune())

    def shrink(self, f: Callable[[T], Iterable[T]]) -> Gen[T]:
        """Apply an additional shrinker to every generated tree."""
        return self.map_tree(lambda tree: tree.expand(f))

    def try_finally(self, after: Callable[[], None]) -> Gen[T]:
        """Call ``after`` once the root of the tree has been generated.

        Shrinks are produced lazily and are not covered.
        """
        return Gen(self.random.try_finally(after))

    # -------------------------------------------------------------------------
    # Conditional
    # -------------------------------------------------------------------------

    def _try_filter_tree(self, predicate: Callable[[T], bool], max_tries: int) -> Random[Tree[T] | None]:
        if max_tries <= 0:
            raise ValueError(f"max_tries must be positive, got {max_tries}")

        def run(seed: Seed, size: Size) -> Tree[T] | None:
            for attempt in range(max_tries):
                attempt_seed, seed = seed.split()
                # Each retry grows the size (up to MAX_SIZE), widening the space the predicate sees.
                tree = self.run(attempt_seed, clamp_size(max(1, size) + attempt))
                if predicate(tree.outcome):
                    return tree.filter(predicate)
            return None

        return Random(run)

    def filter(self, predicate: Callable[[T], bool], max_tries: int = DEFAULT_FILTER_TRIES) -> Gen[T]:
        """Generate a value satisfying ``predicate``.

        Resamples with fresh seeds and a growing size up to ``max_tries``
        times; every shrink is filtered so it keeps satisfying the predicate.

        Raises:
            GenDiscard: At run time, when the retry budget is exhausted. The
                runner counts the trial as a discard rather than a failure.
        """
        attempt = self._try_filter_tree(predicate, max_tries)

        def run(seed: Seed, size: Size) -> Tree[T]:
            tree = attempt.run(seed, size)
            if tree is None:
                raise GenDiscard(max_tries)
            return tree

        return Gen(Random(run))

    def try_filter(self, predicate: Callable[[T], bool], max_tries: int = DEFAULT_FILTER_TRIES) -> Gen[T | None]:
        """Like ``filter``, but produce ``None`` when the retry budget runs out."""
        attempt = self._try_filter_tree(predicate, max_tries)

        def run(seed: Seed, size: Size) -> Tree[T | None]:
            tree = attempt.run(seed, size)
            if tree is None:
                return Tree.singleton(None)
            return tree  # type: ignore[return-value]

        return Gen(Random(run))


# =============================================================================
# Primitives
# =============================================================================


def constant[T](x: T) -> Gen[T]:
    """Always generate ``x``; never shrinks."""
    return Gen(Random.constant(Tree.singleton(x)))


def delay[T](f: Callable[[], Gen[T]]) -> Gen[T]:
    """Defer construction of a generator until it runs."""
    return Gen(Random.delay(lambda: f().random))


def sized[T](f: Callable[[Size], Gen[T]]) -> Gen[T]:
    """Construct a generator that depends on the size parameter."""
    return Gen(Random.sized(lambda n: f(n).random))


def create[T](shrink: Callable[[T], Iterable[T]], random: Random[T]) -> Gen[T]:
    """Lift a Random into a Gen whose shrinks are unfolded from ``shrink``."""
    return Gen(random.map(lambda x: Tree.unfold(x, shrink)))


def integral(range_: Range[int]) -> Gen[int]:
    """Uniform integer within ``range_``, shrinking toward its origin."""
    return create(functools.partial(shrinks.towards, range_.origin), Random.integral(range_))


def floating(range_: Range[float]) -> Gen[float]:
    """Float within ``range_``, shrinking toward its origin."""
    return create(functools.partial(shrinks.towards_float, range_.origin), Random.floating(range_))


# =============================================================================
# Applicative
# =============================================================================


def zip[A, B](gx: Gen[A], gy: Gen[B]) -> Gen[tuple[A, B]]:
    """Generate both values from independent splits of the seed.

    The pair shrinks the first component, then the second; neither shrink
    disturbs the other component.
    """

    def run(seed: Seed, size: Size) -> Tree[tuple[A, B]]:
        seed1, seed2 = seed.split()
        return gx.run(seed1, size).zip(gy.run(seed2, size))

    return Gen(Random(run))


def zip3[A, B, C](gx: Gen[A], gy: Gen[B], gz: Gen[C]) -> Gen[tuple[A, B, C]]:
    return zip(zip(gx, gy), gz).map(lambda p: (p[0][0], p[0][1], p[1]))


def zip4[A, B, C, D](gx: Gen[A], gy: Gen[B], gz: Gen[C], gw: Gen[D]) -> Gen[tuple[A, B, C, D]]:
    return zip(zip3(gx, gy, gz), gw).map(lambda p: (*p[0], p[1]))


def apply[A, B](gf: Gen[Callable[[A], B]], gx: Gen[A]) -> Gen[B]:
    return zip(gf, gx).map(lambda p: p[0](p[1]))


def map2[A, B, R](f: Callable[[A, B], R], gx: Gen[A], gy: Gen[B]) -> Gen[R]:
    return zip(gx, gy).map(lambda p: f(*p))


def map3[A, B, C, R](f: Callable[[A, B, C], R], gx: Gen[A], gy: Gen[B], gz: Gen[C]) -> Gen[R]:
    return zip3(gx, gy, gz).map(lambda p: f(*p))


def map4[A, B, C, D, R](f: Callable[[A, B, C, D], R], gx: Gen[A], gy: Gen[B], gz: Gen[C], gw: Gen[D]) -> Gen[R]:
    return zip4(gx, gy, gz, gw).map(lambda p: f(*p))


def pair[T](g: Gen[T]) -> Gen[tuple[T, T]]:
    return zip(g, g)


def triple[T](g: Gen[T]) -> Gen[tuple[T, T, T]]:
    return zip3(g, g, g)


# =============================================================================
# Choice
# =============================================================================


def _require_non_empty(name: str, xs: Sequence[Any]) -> None:
    if not xs:
        raise ValueError(f"'{name}' must have at least one element")


def item[T](xs: Iterable[T]) -> Gen[T]:
    """Pick one of ``xs`` uniformly; shrinks toward earlier elements."""
    items = tuple(xs)
    _require_non_empty("xs", items)
    return integral(Range.constant(0, len(items) - 1)).map(items.__getitem__)


def choice[T](gens: Iterable[Gen[T]]) -> Gen[T]:
    """Pick one of ``gens`` uniformly; shrinks toward earlier generators."""
    options = tuple(gens)
    _require_non_empty("gens", options)
    return integral(Range.constant(0, len(options) - 1)).bind(options.__getitem__)


def frequency[T](weighted: Iterable[tuple[int, Gen[T]]]) -> Gen[T]:
    """Pick a generator with probability proportional to its weight.

    Shrinks toward the first entry regardless of weights.
    """
    options = tuple(weighted)
    _require_non_empty("weighted", options)
    if any(w < 0 for w, _ in options):
        raise ValueError("frequency weights must be non-negative")
    total = sum(w for w, _ in options)
    if total <= 0:
        raise ValueError(f"frequency weights must sum to a positive total, got {total}")

    def pick(n: int) -> Gen[T]:
        for weight, g in options:
            if n <= weight:
                return g
            n -= weight
        raise AssertionError("unreachable: n is drawn from [1, total]")

    return integral(Range.constant(1, total)).bind(pick)


def choice_rec[T](nonrecursive: Iterable[Gen[T]], recursive: Iterable[Gen[T]]) -> Gen[T]:
    """Choice for recursive structures.

    Picking a recursive generator halves the size; once the size is 1 or
    less only non-recursive generators are chosen, so recursion terminates.
    """
    base = tuple(nonrecursive)
    _require_non_empty("nonrecursive", base)
    recs = tuple(recursive)

    def choose(n: Size) -> Gen[T]:
        if n <= 1:
            return choice(base)
        return choice(base + tuple(g.scale(halve) for g in recs))

    return sized(choose)


def some[T](g: Gen[T | None], max_tries: int = DEFAULT_FILTER_TRIES) -> Gen[T]:
    """Run an optional generator until it produces a value."""
    return g.filter(lambda x: x is not None, max_tries)  # type: ignore[return-value]


def option[T](g: Gen[T]) -> Gen[T | None]:
    """Generate ``None`` part of the time, less often as size grows."""
    return sized(lambda n: frequency([(2, constant(None)), (1 + n, g)]))


# =============================================================================
# Collections
# =============================================================================


def list_of[T](range_: Range[int], g: Gen[T]) -> Gen[list[T]]:
    """Generate a list whose length is drawn from ``range_``.

    Shrinks by removing chunks of elements (toward the shortest allowed
    length) before shrinking individual elements.
    """

    def run(seed: Seed, size: Size) -> Tree[list[T]]:
        length_seed, elements_seed = seed.split()
        length = Random.integral(range_).run(length_seed, size)
        trees = g.random.replicate(length).run(elements_seed, size)
        minimum = range_.lower_bound(size)
        return shrinks.sequence_list(trees).filter(lambda xs: len(xs) >= minimum)

    return Gen(Random(run))


def sequence[T](gens: Iterable[Gen[T]]) -> Gen[list[T]]:
    """Run each generator on its own split of the seed and collect the values.

    The list keeps its length while shrinking; elements shrink one at a time,
    left to right.
    """
    items = tuple(gens)

    def run(seed: Seed, size: Size) -> Tree[list[T]]:
        trees: list[Tree[T]] = []
        for g in items:
            element_seed, seed = seed.split()
            trees.append(g.run(element_seed, size))
        return shrinks.sequence_elems(trees)

    return Gen(Random(run))


def traverse[A, B](f: Callable[[A], Gen[B]], xs: Iterable[A]) -> Gen[list[B]]:
    """``sequence`` over the generators ``f`` builds from each of ``xs``."""
    return sequence(f(x) for x in xs)


def array_of[T](range_: Range[int], g: Gen[T]) -> Gen[tuple[T, ...]]:
    return list_of(range_, g).map(tuple)


def seq_of[T](range_: Range[int], g: Gen[T]) -> Gen[deque[T]]:
    """Like ``list_of`` but producing a deque.

    Every shrink candidate re-reads its outcome, so the result is a
    re-iterable container rather than a one-shot iterator.
    """
    return list_of(range_, g).map(deque)


# =============================================================================
# Characters and strings
# =============================================================================


def char(lo: str, hi: str) -> Gen[str]:
    """Character between ``lo`` and ``hi`` inclusive, shrinking toward ``lo``."""
    return integral(Range.constant_from(ord(lo), ord(lo), ord(hi))).map(chr)


def _skip_surrogates(n: int) -> str:
    return chr(n if n < _SURROGATE_START else n + _SURROGATE_COUNT)


digit = char("0", "9")
lower = char("a", "z")
upper = char("A", "Z")
ascii = char("\x00", "\x7f")
latin1 = char("\x00", "\xff")
# Maps a contiguous range onto every code point except the surrogates.
unicode = integral(Range.constant(0, _MAX_CODE_POINT - _SURROGATE_COUNT)).map(_skip_surrogates)
alpha = choice([lower, upper])
alpha_num = choice([lower, upper, digit])


def string(range_: Range[int], g: Gen[str]) -> Gen[str]:
    """String whose length is drawn from ``range_``, characters from ``g``."""
    return list_of(range_, g).map("".join)


# =============================================================================
# Booleans and bounded integers
# =============================================================================

boolean = item([False, True])


def _bounded(kind: IntKind) -> Callable[..., Gen[int]]:
    def generator(range_: Range[int] | None = None) -> Gen[int]:
        r = Range.linear_bounded(kind) if range_ is None else range_
        lo, hi = r.lower_bound(MAX_SIZE), r.upper_bound(MAX_SIZE)
        if not (kind.contains(lo) and kind.contains(hi)):
            raise ValueError(f"Range [{lo}, {hi}] does not fit in {kind}")
        return integral(r)

    generator.__name__ = generator.__qualname__ = kind.value
    generator.__doc__ = f"Integer representable as {kind}; defaults to a linear range over the whole type."
    return generator


int8 = _bounded(IntKind.INT8)
int16 = _bounded(IntKind.INT16)
int32 = _bounded(IntKind.INT32)
int64 = _bounded(IntKind.INT64)
uint8 = _bounded(IntKind.UINT8)
uint16 = _bounded(IntKind.UINT16)
uint32 = _bounded(IntKind.UINT32)
uint64 = _bounded(IntKind.UINT64)


# =============================================================================
# Generator-function sugar
# =============================================================================


def build[**P, T](fn: Callable[P, Generator[Gen[Any], Any, T]]) -> Callable[P, Gen[T]]:
    """Turn a generator function that yields Gens into a Gen factory.

    Each ``yield g`` binds ``g`` and resumes with its value. The function is
    replayed from the start for every bind, so it must be free of side
    effects.
    """

    @functools.wraps(fn)
    def factory(*args: P.args, **kwargs: P.kwargs) -> Gen[T]:
        def step(values: tuple[Any, ...]) -> Gen[T]:
            steps = fn(*args, **kwargs)
            try:
                request = steps.send(None)
                for value in values:
                    request = steps.send(value)
            except StopIteration as stop:
                return constant(stop.value)
            if not isinstance(request, Gen):
                steps.close()
                raise PropertyUsageError(f"@gen.build functions must yield Gen instances, got {type(request).__name__}")
            return request.bind(lambda x: step((*values, x)))

        return delay(lambda: step(()))

    return factory


# =============================================================================
# Sampling
# =============================================================================


def sample_tree[T](g: Gen[T], size: Size = 10, count: int = 10, seed: Seed | None = None) -> list[Tree[T]]:
    """Run ``g`` ``count`` times at ``size`` and return the trees."""
    root = Seed.random() if seed is None else seed
    return g.random.replicate(count).run(root, size)


def sample[T](g: Gen[T], size: Size = 10, count: int = 10, seed: Seed | None = None) -> list[T]:
    return [tree.outcome for tree in sample_tree(g, size, count, seed)]


def generate_tree[T](g: Gen[T], seed: Seed | None = None) -> Tree[T]:
    """Run ``g`` once at size 30; use ``resize`` for another size."""
    return g.run(Seed.random() if seed is None else seed, 30)


def print_sample(
    g: Gen[Any],
    seed: Seed | None = None,
    file: TextIO | None = None,
    *,
    size: Size = 10,
    count: int = 5,
) -> None:
    """Print ``count`` samples at ``size`` with their immediate shrinks."""
    out = sys.stdout if file is None else file
    for tree in sample_tree(g, size, count, seed):
        print("=== Outcome ===", file=out)
        print(repr(tree.outcome), file=out)
        print("=== Shrinks ===", file=out)
        for child in tree.children():
            print(repr(child.outcome), file=out)
        print(".", file=out)
