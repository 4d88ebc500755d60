"""Tests for the size parameter helpers."""

from bramble.core.size import MAX_SIZE, MIN_SIZE, clamp, halve, next_size, normalized


class TestSize:
    def test_bounds(self) -> None:
        assert (MIN_SIZE, MAX_SIZE) == (0, 99)

    def test_clamp(self) -> None:
        assert clamp(-5) == 0
        assert clamp(50) == 50
        assert clamp(1000) == 99

    def test_next_size_wraps(self) -> None:
        assert next_size(0) == 1
        assert next_size(98) == 99
        assert next_size(99) == 0

    def test_halve(self) -> None:
        assert halve(99) == 49
        assert halve(1) == 0

    def test_normalized(self) -> None:
        assert normalized(0) == 0.0
        assert normalized(99) == 1.0
        assert normalized(200) == 1.0
