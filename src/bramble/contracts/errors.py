"""Error and captured-exception contracts.

Exceptions raised at construction time (usage errors) and the payload
schema used to record exceptions captured while a property runs.
"""

from __future__ import annotations

import traceback as traceback_module
from typing import TYPE_CHECKING, NotRequired, TypedDict

if TYPE_CHECKING:
    from bramble.contracts.report import Report


class CapturedError(TypedDict):
    """Schema for exceptions captured during property evaluation.

    Used by the runner for predicate exceptions (which become failures) and
    for generator faults (which abort the run).
    """

    exception: str  # String representation of the exception
    type: str  # Exception class name (e.g., "ZeroDivisionError")
    traceback: NotRequired[str]  # Optional full traceback


def capture_error(error: BaseException, *, with_traceback: bool = True) -> CapturedError:
    """Build a CapturedError payload from an exception."""
    captured: CapturedError = {
        "exception": str(error),
        "type": type(error).__name__,
    }
    if with_traceback:
        captured["traceback"] = "".join(traceback_module.format_exception(error))
    return captured


class BrambleError(Exception):
    """Base class for errors raised by bramble itself."""


class RangeError(BrambleError, ValueError):
    """Raised when a Range is constructed with an origin outside its bounds."""

    def __init__(self, origin: object, lo: object, hi: object) -> None:
        self.origin = origin
        self.lo = lo
        self.hi = hi
        super().__init__(f"Range origin {origin!r} must lie within the bounds [{lo!r}, {hi!r}]")


class RecheckTokenError(BrambleError, ValueError):
    """Raised when a recheck token cannot be parsed."""

    def __init__(self, token: str, reason: str) -> None:
        self.token = token
        self.reason = reason
        super().__init__(f"Invalid recheck token {token!r}: {reason}")


class PropertyUsageError(BrambleError, TypeError):
    """Raised when a property or generator is used in an unsupported way.

    Examples: binding onto an asynchronous predicate result, or running an
    asynchronous property synchronously from inside a running event loop.
    """


class GenDiscard(BrambleError):
    """Control flow signal: a generator could not produce a value.

    This is NOT a failure. ``Gen.filter`` raises it when its retry budget is
    exhausted; the runner counts the trial as a discard and moves on.

    Attributes:
        tries: Number of sampling attempts made before giving up.
    """

    def __init__(self, tries: int) -> None:
        self.tries = tries
        super().__init__(f"Generator discarded the trial after {tries} attempts")


class PropertyFailedError(BrambleError, AssertionError):
    """Raised by ``Report.raise_for_status`` when a property did not pass.

    Subclasses AssertionError so that test frameworks report it as a test
    failure rather than an error.
    """

    def __init__(self, report: Report) -> None:
        self.report = report
        super().__init__(report.render())
