"""The size parameter.

Tests are parameterized by the size of the randomly generated data; the
meaning of size depends on the particular generator. Ranges use it to scale
their bounds, recursive generators halve it to guarantee termination.
"""

from __future__ import annotations

from typing import TypeAlias

Size: TypeAlias = int

MIN_SIZE: Size = 0
MAX_SIZE: Size = 99


def clamp(n: int) -> Size:
    """Clamp an arbitrary integer into [MIN_SIZE, MAX_SIZE]."""
    return max(MIN_SIZE, min(MAX_SIZE, n))


def next_size(size: Size) -> Size:
    """Size used for the trial after ``size``; wraps 99 back to 0."""
    return (size + 1) % (MAX_SIZE + 1)


def halve(size: Size) -> Size:
    return size // 2


def normalized(size: Size) -> float:
    """Size as a fraction of MAX_SIZE, in [0.0, 1.0]."""
    return clamp(size) / MAX_SIZE
