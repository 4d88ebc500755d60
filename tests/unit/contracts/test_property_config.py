"""Tests for PropertyConfig."""

import pytest
from pydantic import ValidationError

from bramble.contracts import PropertyConfig


class TestPropertyConfig:
    def test_defaults(self) -> None:
        config = PropertyConfig()
        assert config.tests == 100
        assert config.shrinks == 1000
        assert config.max_discard_ratio == 1.0
        assert config.size is None
        assert config.seed is None

    def test_frozen(self) -> None:
        config = PropertyConfig()
        with pytest.raises(ValidationError):
            config.tests = 5  # type: ignore[misc]

    def test_extra_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            PropertyConfig(filter_tries=3)  # type: ignore[call-arg]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"tests": 0},
            {"shrinks": -1},
            {"max_discard_ratio": 0},
            {"size": 100},
            {"size": -1},
            {"seed": -1},
            {"seed": 1 << 64},
        ],
    )
    def test_rejects_invalid(self, kwargs: dict[str, int]) -> None:
        with pytest.raises(ValidationError):
            PropertyConfig(**kwargs)  # type: ignore[arg-type]

    def test_discard_limit(self) -> None:
        assert PropertyConfig(tests=100).discard_limit == 100
        assert PropertyConfig(tests=10, max_discard_ratio=2.5).discard_limit == 25
        assert PropertyConfig(tests=1, max_discard_ratio=0.1).discard_limit == 1

    def test_with_helpers_return_new_instances(self) -> None:
        config = PropertyConfig()
        assert config.with_tests(5).tests == 5
        assert config.with_shrinks(3).shrinks == 3
        assert config.without_shrinks().shrinks == 0
        assert config.with_seed(99).seed == 99
        assert config.with_size(12).size == 12
        assert config.tests == 100

    def test_with_helpers_validate(self) -> None:
        with pytest.raises(ValidationError):
            PropertyConfig().with_tests(0)
