"""Tests for properties with asynchronous bodies."""

import asyncio
from functools import partial

import pytest

from bramble.contracts import PropertyConfig, PropertyUsageError, ReportStatus
from bramble.core import shrink
from bramble.core.range import Range
from bramble.engine import gen, prop
from bramble.engine.random import Random
from bramble.engine.runner import check_async, recheck, recheck_async, report, report_async

seventy_three = gen.create(partial(shrink.towards, 0), Random.constant(73))


async def below_fifty(x: int) -> bool:
    await asyncio.sleep(0)
    return x < 50


class TestSyncDriver:
    def test_async_body_passes(self, config: PropertyConfig) -> None:
        async def body(x: int) -> None:
            await asyncio.sleep(0)

        result = report(prop.for_all(gen.integral(Range.linear(0, 10)), body), config.with_tests(20))
        assert result.status == ReportStatus.OK
        assert result.tests == 20

    def test_async_body_shrinks(self, config: PropertyConfig) -> None:
        result = report(prop.for_all(seventy_three, below_fifty), config)
        assert result.failure is not None
        assert result.failure.shrunk == 50
        assert result.failure.shrinks == 4
        assert result.failure.journal == ("50",)

    def test_rejected_inside_running_loop(self, config: PropertyConfig) -> None:
        async def run() -> None:
            report(prop.for_all(seventy_three, below_fifty), config)

        with pytest.raises(PropertyUsageError, match="report_async"):
            asyncio.run(run())


class TestAsyncDriver:
    def test_report_async(self, config: PropertyConfig) -> None:
        result = asyncio.run(report_async(prop.for_all(seventy_three, below_fifty), config))
        assert result.failure is not None
        assert result.failure.shrunk == 50

    def test_sync_property_on_async_driver(self, config: PropertyConfig) -> None:
        result = asyncio.run(report_async(prop.for_all(gen.boolean, lambda _: True), config))
        assert result.status == ReportStatus.OK

    def test_check_async(self, config: PropertyConfig) -> None:
        result = asyncio.run(check_async(prop.for_all(seventy_three, below_fifty), config))
        assert result.status == ReportStatus.FAILED

    def test_recheck_async(self, config: PropertyConfig) -> None:
        p = prop.for_all(seventy_three, below_fifty)
        token = report(p, config).failure.token  # type: ignore[union-attr]
        result = asyncio.run(recheck_async(p, token))
        assert result.failure is not None
        assert result.failure.shrunk == 50
        assert recheck(p, token).failure.shrunk == 50  # type: ignore[union-attr]


class TestAsyncOutcomes:
    def test_exception_falsifies(self, config: PropertyConfig) -> None:
        async def body(x: int) -> None:
            raise ValueError(f"bad {x}")

        result = report(prop.for_all(seventy_three, body), config)
        assert result.failure is not None
        assert result.failure.shrunk == 0
        assert result.failure.error is not None
        assert result.failure.error["exception"] == "bad 0"

    def test_map_and_filter_apply_after_await(self, config: PropertyConfig) -> None:
        async def body(x: int) -> int:
            return x

        p = prop.for_all(gen.constant(3), body)
        assert report(p.filter(lambda v: v > 5), config).status == ReportStatus.GAVE_UP
        assert report(p.map(lambda v: v * 2), config).status == ReportStatus.OK

    def test_resolving_to_property_rejected(self, config: PropertyConfig) -> None:
        async def body(x: int) -> object:
            return prop.success()

        with pytest.raises(PropertyUsageError):
            report(prop.for_all(gen.constant(1), body), config)
