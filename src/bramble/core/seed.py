"""Splittable pseudo-random seed (SplitMix64).

A port of "Fast Splittable Pseudorandom Number Generators" (Steele, Lea,
Flood; OOPSLA 2014), following SplittableRandom.java.

Not cryptographic. Any seed can be split into two independent seeds
deterministically; every generator decision point splits instead of sharing
a mutable RNG, so a run is replayable from (seed, size) alone.

All words are unsigned 64-bit; arithmetic is reduced modulo 2**64.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

_MASK64 = (1 << 64) - 1

# The odd integer closest to 2**64 / phi, used to derive the gamma of root
# seeds (seeds not produced by splitting an existing one).
GOLDEN_GAMMA = 0x9E3779B97F4A7C15


def _mix64(x: int) -> int:
    y = ((x ^ (x >> 33)) * 0xFF51AFD7ED558CCD) & _MASK64
    z = ((y ^ (y >> 33)) * 0xC4CEB9FE1A85EC53) & _MASK64
    return z ^ (z >> 33)


def _mix64_variant13(x: int) -> int:
    y = ((x ^ (x >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
    z = ((y ^ (y >> 27)) * 0x94D049BB133111EB) & _MASK64
    return z ^ (z >> 31)


def _mix_gamma(x: int) -> int:
    y = _mix64_variant13(x) | 1
    # Gammas with too few bit transitions produce visibly correlated streams.
    if (y ^ (y >> 1)).bit_count() < 24:
        return y ^ 0xAAAAAAAAAAAAAAAA
    return y


@dataclass(frozen=True, slots=True)
class Seed:
    """Immutable splittable random seed.

    Attributes:
        value: Current state word.
        gamma: Increment word. Always odd (guarantees full period).
    """

    value: int
    gamma: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= _MASK64:
            raise ValueError(f"Seed value must be an unsigned 64-bit integer, got {self.value}")
        if not 0 <= self.gamma <= _MASK64:
            raise ValueError(f"Seed gamma must be an unsigned 64-bit integer, got {self.gamma}")
        if self.gamma % 2 == 0:
            raise ValueError(f"Seed gamma must be odd, got {self.gamma}")

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_u64(cls, n: int) -> Seed:
        """Create a seed deterministically from any integer.

        The integer is reduced to 64 bits. The result is bit-identical
        across runs and platforms for the same ``n``.
        """
        n &= _MASK64
        return cls._mixed(n, (n + GOLDEN_GAMMA) & _MASK64)

    @classmethod
    def random(cls) -> Seed:
        """Create a seed from system entropy."""
        return cls.from_u64(int.from_bytes(os.urandom(8), "little"))

    @classmethod
    def parse(cls, text: str) -> Seed:
        """Parse the ``"<value>_<gamma>"`` form produced by ``str(seed)``.

        Raises:
            ValueError: If the text is not two decimal words or the gamma is even.
        """
        parts = text.strip().split("_")
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            raise ValueError(f"Expected '<value>_<gamma>', got {text!r}")
        return cls(int(parts[0]), int(parts[1]))

    @classmethod
    def _mixed(cls, value: int, gamma: int) -> Seed:
        return cls(_mix64(value), _mix_gamma(gamma))

    def __str__(self) -> str:
        return f"{self.value}_{self.gamma}"

    # -------------------------------------------------------------------------
    # Drawing
    # -------------------------------------------------------------------------

    def _next(self) -> tuple[int, Seed]:
        v = (self.value + self.gamma) & _MASK64
        return v, Seed(v, self.gamma)

    def next_u64(self) -> tuple[int, Seed]:
        """Return the next pseudo-random 64-bit word and the advanced seed."""
        v, seed = self._next()
        return _mix64(v), seed

    def split(self) -> tuple[Seed, Seed]:
        """Derive two independent seeds from this one."""
        value, seed1 = self._next()
        gamma, seed2 = seed1._next()
        return seed2, Seed._mixed(value, gamma)

    def next_bounded(self, bound: int) -> tuple[int, Seed]:
        """Draw uniformly from ``[0, bound]`` without modulo bias.

        Bounds wider than 64 bits are served by concatenating several words.
        Draws that fall in the incomplete final block are rejected.
        """
        if bound < 0:
            raise ValueError(f"bound must be non-negative, got {bound}")
        span = bound + 1
        words = max(1, (bound.bit_length() + 63) // 64)
        total = 1 << (64 * words)
        limit = total - (total % span)
        seed = self
        while True:
            x = 0
            for _ in range(words):
                w, seed = seed.next_u64()
                x = (x << 64) | w
            if x < limit:
                return x % span, seed

    def next_int(self, lo: int, hi: int) -> tuple[int, Seed]:
        """Draw uniformly from the inclusive range between ``lo`` and ``hi``."""
        if lo > hi:
            lo, hi = hi, lo
        x, seed = self.next_bounded(hi - lo)
        return lo + x, seed

    def next_float(self, lo: float, hi: float) -> tuple[float, Seed]:
        """Draw a float between ``lo`` and ``hi`` from 53 random bits.

        Scales around the midpoint so that spans wider than the largest
        float (e.g. -max..max) never overflow to infinity.
        """
        if lo > hi:
            lo, hi = hi, lo
        x, seed = self.next_u64()
        unit = (x >> 11) * (1.0 / (1 << 53))
        mid = 0.5 * lo + 0.5 * hi
        half = 0.5 * hi - 0.5 * lo
        value = mid + half * (2.0 * unit - 1.0)
        return min(hi, max(lo, value)), seed
