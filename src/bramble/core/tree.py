"""Lazy rose trees of shrink candidates.

A Tree holds a generated value (the root) and a lazily produced sequence of
child trees, each child a "smaller" candidate with its own shrinks. The
children are described by a thunk and re-evaluated on every traversal, so an
unvisited subtree costs nothing and shrink trees of unbounded size are fine
as long as nobody walks all of them.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from itertools import chain

from bramble.contracts.errors import GenDiscard


def _no_children() -> Iterable[Tree]:
    return ()


class Tree[T]:
    """A value plus a lazily evaluated forest of shrinks.

    Trees are immutable; every combinator returns a new tree and nothing is
    materialised until ``children()`` is iterated.
    """

    __slots__ = ("_children", "outcome")

    def __init__(self, outcome: T, children: Callable[[], Iterable[Tree[T]]] = _no_children) -> None:
        self.outcome = outcome
        self._children = children

    def __repr__(self) -> str:
        return f"Tree({self.outcome!r})"

    def children(self) -> Iterator[Tree[T]]:
        """Iterate the immediate shrinks, re-evaluating the thunk."""
        return iter(self._children())

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @staticmethod
    def singleton(x: T) -> Tree[T]:
        return Tree(x)

    @staticmethod
    def unfold(x: T, shrink: Callable[[T], Iterable[T]]) -> Tree[T]:
        """Build a tree from a seed value and a shrink function.

        ``shrink(x)`` is only called when the children of ``x`` are walked.
        """
        return Tree(x, lambda: (Tree.unfold(y, shrink) for y in shrink(x)))

    @staticmethod
    def join(tree: Tree[Tree[T]]) -> Tree[T]:
        return tree.bind(lambda inner: inner)

    # -------------------------------------------------------------------------
    # Combinators
    # -------------------------------------------------------------------------

    def map[U](self, f: Callable[[T], U]) -> Tree[U]:
        return Tree(f(self.outcome), lambda: (child.map(f) for child in self.children()))

    def bind[U](self, f: Callable[[T], Tree[U]]) -> Tree[U]:
        """Monadic bind.

        The result's root is ``f(self.outcome).outcome``. Its children are the
        outer shrinks (each of this tree's children bound through ``f``)
        followed by the inner tree's own children.
        """
        inner = f(self.outcome)

        def children() -> Iterator[Tree[U]]:
            for child in self.children():
                try:
                    bound = child.bind(f)
                except GenDiscard:
                    # No value could be generated for this candidate; drop it.
                    continue
                yield bound
            yield from inner.children()

        return Tree(inner.outcome, children)

    def zip[U](self, other: Tree[U]) -> Tree[tuple[T, U]]:
        """Applicative product of two independent trees.

        Shrinks the left component first (right held fixed), then the right
        component (left held fixed). Unlike ``bind``, a shrink of either side
        never discards progress made on the other.
        """

        def children() -> Iterator[Tree[tuple[T, U]]]:
            left = (child.zip(other) for child in self.children())
            right = (self.zip(child) for child in other.children())
            return chain(left, right)

        return Tree((self.outcome, other.outcome), children)

    def expand(self, shrink: Callable[[T], Iterable[T]]) -> Tree[T]:
        """Add extra shrinks from ``shrink`` after the existing children, at every node."""

        def children() -> Iterator[Tree[T]]:
            existing = (child.expand(shrink) for child in self.children())
            extra = (Tree.unfold(y, shrink) for y in shrink(self.outcome))
            return chain(existing, extra)

        return Tree(self.outcome, children)

    def filter(self, predicate: Callable[[T], bool]) -> Tree[T]:
        """Drop every descendant whose value fails ``predicate``.

        The root is kept unconditionally; callers that need the root to
        satisfy the predicate must check it themselves.
        """
        return Tree(
            self.outcome,
            lambda: (child.filter(predicate) for child in self.children() if predicate(child.outcome)),
        )

    def add_child(self, child: Tree[T]) -> Tree[T]:
        """Prepend ``child`` to the immediate shrinks."""
        return Tree(self.outcome, lambda: chain((child,), self.children()))

    def add_child_value(self, x: T) -> Tree[T]:
        return self.add_child(Tree.singleton(x))

    def prune(self, depth: int = 0) -> Tree[T]:
        """Cut the tree below ``depth`` levels of children."""
        if depth <= 0:
            return Tree(self.outcome)
        return Tree(self.outcome, lambda: (child.prune(depth - 1) for child in self.children()))

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def depth(self) -> int:
        """Length of the longest path to a leaf. Forces the whole tree."""
        return max((child.depth() + 1 for child in self.children()), default=0)

    def iter_outcomes(self) -> Iterator[T]:
        """Pre-order walk of every value in the tree."""
        yield self.outcome
        for child in self.children():
            yield from child.iter_outcomes()

    def child(self, index: int) -> Tree[T]:
        """Return the ``index``-th immediate shrink.

        Raises:
            IndexError: If the tree has fewer children.
        """
        if index < 0:
            raise IndexError(f"child index must be non-negative, got {index}")
        for i, child in enumerate(self.children()):
            if i == index:
                return child
        raise IndexError(f"tree has no child at index {index}")

    def follow(self, path: Sequence[int]) -> Tree[T]:
        """Walk down the tree by child indices."""
        node = self
        for index in path:
            node = node.child(index)
        return node

    def render_lines(self, max_depth: int | None = 1) -> list[str]:
        """Render the tree as box-drawing lines, one value per line.

        By default only the root and its immediate shrinks are shown. Pass
        ``max_depth=None`` to walk every level, which can take combinatorially
        long on collection trees.
        """
        lines = [str(self.outcome)]
        if max_depth is not None and max_depth <= 0:
            return lines
        next_depth = None if max_depth is None else max_depth - 1
        rendered = [child.render_lines(next_depth) for child in self.children()]
        for i, child_lines in enumerate(rendered):
            last = i == len(rendered) - 1
            first_prefix, rest_prefix = (" └-", "    ") if last else (" ├-", " |  ")
            lines.append(first_prefix + child_lines[0])
            lines.extend(rest_prefix + line for line in child_lines[1:])
        return lines

    def render(self, max_depth: int | None = 1) -> str:
        return "\n".join(self.render_lines(max_depth))
