"""Shrink candidate functions.

Each function lazily yields candidates that are "smaller" than its input,
best (most aggressive) candidate first. Generators combine them with
``Tree.unfold`` to build shrink trees.

    >>> list(towards(0, 100))
    [0, 50, 75, 88, 94, 97, 99]
    >>> list(list_([1, 2, 3]))
    [[], [2, 3], [1, 3], [1, 2]]
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Iterator, Sequence

from bramble.core.numeric import quot
from bramble.core.tree import Tree


def halves(n: int) -> Iterator[int]:
    """Progressive halving of an integral, truncating toward zero.

    >>> list(halves(-26))
    [-26, -13, -6, -3, -1]
    """
    while n != 0:
        yield n
        n = quot(n, 2)


def towards(destination: int, x: int) -> Iterator[int]:
    """Shrink an integral by edging toward ``destination``.

    The destination comes first; every candidate is strictly closer to it
    than ``x`` and no value repeats.
    """
    if destination == x:
        return
    yield destination
    for h in halves(x - destination):
        y = x - h
        if y != destination:
            yield y


def towards_float(destination: float, x: float) -> Iterator[float]:
    """Shrink a float by edging toward ``destination``.

    Stops once subtracting the remaining step no longer changes ``x``.
    """
    if destination == x:
        return
    diff = x - destination
    if not math.isfinite(diff):
        # NaN, infinities and overflowing spans only shrink to the destination.
        yield destination
        return
    while True:
        y = x - diff
        if y == x:
            return
        yield y
        diff /= 2.0


def removes[T](k: int, xs: Sequence[T]) -> Iterator[list[T]]:
    """Every way of removing one consecutive chunk of ``k`` elements.

    >>> list(removes(2, [1, 2, 3, 4, 5, 6]))
    [[3, 4, 5, 6], [1, 2, 5, 6], [1, 2, 3, 4]]
    """
    if k <= 0:
        return
    items = list(xs)
    n = len(items)
    for start in range(0, n - k + 1, k):
        yield items[:start] + items[start + k :]


def list_[T](xs: Sequence[T]) -> Iterator[list[T]]:
    """Shrink a list toward the empty list, removing ever smaller chunks.

    The empty list is always tried first.
    """
    for k in halves(len(xs)):
        yield from removes(k, xs)


def elems[T](shrink: Callable[[T], Iterable[T]], xs: Sequence[T]) -> Iterator[list[T]]:
    """Shrink one element at a time, left to right."""
    items = list(xs)
    for i, x in enumerate(items):
        for y in shrink(x):
            yield [*items[:i], y, *items[i + 1 :]]


def sequence[T](merge: Callable[[list[Tree[T]]], Iterable[list[Tree[T]]]], trees: Sequence[Tree[T]]) -> Tree[list[T]]:
    """Turn a list of trees into a tree of lists.

    ``merge`` decides which lists of trees are the shrinks of ``trees``.
    """
    items = list(trees)
    return Tree(
        [t.outcome for t in items],
        lambda: (sequence(merge, candidate) for candidate in merge(items)),
    )


def _list_and_elems[T](trees: list[Tree[T]]) -> Iterator[list[Tree[T]]]:
    yield from list_(trees)
    yield from elems(Tree.children, trees)


def _elems_only[T](trees: list[Tree[T]]) -> Iterator[list[Tree[T]]]:
    return elems(Tree.children, trees)


def sequence_list[T](trees: Sequence[Tree[T]]) -> Tree[list[T]]:
    """Tree of lists that shrinks both the length and the elements.

    Every removal candidate is offered before any element is shrunk.
    """
    return sequence(_list_and_elems, trees)


def sequence_elems[T](trees: Sequence[Tree[T]]) -> Tree[list[T]]:
    """Tree of lists that shrinks the elements only; the length is fixed."""
    return sequence(_elems_only, trees)
