"""Configuration contracts.

PropertyConfig controls how many trials a property runs, how hard the shrink
search works and where the run starts. Uses Pydantic for validation with a
frozen (immutable) model; the ``with_*`` helpers return modified copies.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field

from bramble.core.size import MAX_SIZE, MIN_SIZE

_U64_MAX = (1 << 64) - 1


class PropertyConfig(BaseModel):
    """Settings for evaluating a single property."""

    model_config = {"frozen": True, "extra": "forbid"}

    tests: int = Field(
        default=100,
        gt=0,
        description="Number of successful trials required for the property to pass",
    )
    shrinks: int | None = Field(
        default=1000,
        ge=0,
        description="Maximum number of shrink steps after a failure (None for no limit)",
    )
    max_discard_ratio: float = Field(
        default=1.0,
        gt=0,
        description="Discards allowed per required test before the run gives up",
    )
    size: int | None = Field(
        default=None,
        ge=MIN_SIZE,
        le=MAX_SIZE,
        description="Size of the first trial (defaults to 0)",
    )
    seed: int | None = Field(
        default=None,
        ge=0,
        le=_U64_MAX,
        description="Root seed as an unsigned 64-bit integer (random when unset)",
    )

    @property
    def discard_limit(self) -> int:
        """Number of discards after which the run gives up."""
        return max(1, math.ceil(self.max_discard_ratio * self.tests))

    def with_tests(self, tests: int) -> PropertyConfig:
        return self.model_validate({**self.model_dump(), "tests": tests})

    def with_shrinks(self, shrinks: int) -> PropertyConfig:
        return self.model_validate({**self.model_dump(), "shrinks": shrinks})

    def without_shrinks(self) -> PropertyConfig:
        """Disable shrinking entirely; failures report the original counterexample."""
        return self.with_shrinks(0)

    def with_seed(self, seed: int) -> PropertyConfig:
        return self.model_validate({**self.model_dump(), "seed": seed})

    def with_size(self, size: int) -> PropertyConfig:
        return self.model_validate({**self.model_dump(), "size": size})
