# src/bramble/engine/__init__.py
"""Engine: generators, properties and the runner.

Example:
    from bramble.core.range import Range
    from bramble.engine import check, gen, prop

    report = check(prop.for_all(gen.integral(Range.linear(0, 100)), lambda x: x < 50))
    print(report.render())
"""

from bramble.engine import gen
from bramble.engine import property as prop
from bramble.engine.gen import Gen
from bramble.engine.journal import Journal
from bramble.engine.outcome import Discard, Failure, Outcome, Success
from bramble.engine.property import PendingResult, Property, Result, for_all
from bramble.engine.random import Random
from bramble.engine.runner import (
    CancellationToken,
    check,
    check_async,
    recheck,
    recheck_async,
    report,
    report_async,
)

__all__ = [
    "CancellationToken",
    "Discard",
    "Failure",
    "Gen",
    "Journal",
    "Outcome",
    "PendingResult",
    "Property",
    "Random",
    "Result",
    "Success",
    "check",
    "check_async",
    "for_all",
    "gen",
    "prop",
    "recheck",
    "recheck_async",
    "report",
    "report_async",
]
