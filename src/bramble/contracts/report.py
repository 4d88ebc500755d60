# src/bramble/contracts/report.py
"""Report contracts: the verdict of a property run and how to replay it.

A Report is produced once per ``report``/``check``/``recheck`` call. Failures
carry a RecheckData whose token form is stable and compact enough to paste
into a CLI or a log search:

    <size>_<seed value>_<seed gamma>[_<i:j:k>]

The optional last part is the shrink path (child indices from the original
counterexample down to the shrunk one), which lets ``recheck`` jump straight
to the minimal counterexample instead of searching again.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bramble.contracts.enums import ReportStatus
from bramble.contracts.errors import CapturedError, PropertyFailedError, RecheckTokenError
from bramble.core.seed import Seed
from bramble.core.size import MAX_SIZE, MIN_SIZE, Size

_SEPARATOR = "_"
_PATH_SEPARATOR = ":"


@dataclass(frozen=True, slots=True)
class RecheckData:
    """Everything needed to replay one trial exactly.

    Attributes:
        size: Size the trial ran at.
        seed: Loop seed before the trial's split.
        path: Shrink path (child indices) to the shrunk counterexample.
    """

    size: Size
    seed: Seed
    path: tuple[int, ...] = ()

    def serialize(self) -> str:
        parts = [str(self.size), str(self.seed.value), str(self.seed.gamma)]
        if self.path:
            parts.append(_PATH_SEPARATOR.join(str(i) for i in self.path))
        return _SEPARATOR.join(parts)

    def __str__(self) -> str:
        return self.serialize()

    @classmethod
    def parse(cls, token: str) -> RecheckData:
        """Parse a token produced by ``serialize``.

        Raises:
            RecheckTokenError: If the token is malformed.
        """
        parts = token.strip().split(_SEPARATOR)
        if len(parts) not in (3, 4):
            raise RecheckTokenError(token, "expected '<size>_<value>_<gamma>[_<path>]'")
        if not all(p.isdigit() for p in parts[:3]):
            raise RecheckTokenError(token, "size and seed words must be decimal integers")
        size = int(parts[0])
        if not MIN_SIZE <= size <= MAX_SIZE:
            raise RecheckTokenError(token, f"size must be between {MIN_SIZE} and {MAX_SIZE}, got {size}")
        try:
            seed = Seed(int(parts[1]), int(parts[2]))
        except ValueError as exc:
            raise RecheckTokenError(token, str(exc)) from exc
        path: tuple[int, ...] = ()
        if len(parts) == 4:
            indices = parts[3].split(_PATH_SEPARATOR)
            if not all(i.isdigit() for i in indices):
                raise RecheckTokenError(token, "shrink path must be ':'-separated child indices")
            path = tuple(int(i) for i in indices)
        return cls(size, seed, path)

    def without_path(self) -> RecheckData:
        return RecheckData(self.size, self.seed)


@dataclass(frozen=True, slots=True)
class FailureData:
    """Details of a falsified property.

    Attributes:
        recheck: Replay data for the failing trial, including the shrink path.
        shrinks: Number of successful shrink steps taken.
        original: Input(s) of the first failing trial.
        shrunk: Input(s) after shrinking.
        journal: Rendered journal of the shrunk counterexample.
        error: Exception that falsified the shrunk counterexample, if any.
        shrink_truncated: True if shrinking stopped before reaching a local
            minimum (shrink limit or cancellation).
        shrink_error: Exception raised by a generator while expanding shrinks.
            Shrinking stopped at the last failing candidate.
    """

    recheck: RecheckData
    shrinks: int
    original: Any
    shrunk: Any
    journal: tuple[str, ...] = ()
    error: CapturedError | None = None
    shrink_truncated: bool = False
    shrink_error: CapturedError | None = None

    @property
    def shrink_path(self) -> tuple[int, ...]:
        return self.recheck.path

    @property
    def token(self) -> str:
        return self.recheck.serialize()


@dataclass(frozen=True, slots=True)
class GeneratorFault:
    """A generator raised while producing a trial's input.

    Attributes:
        error: The captured exception.
        recheck: Replay data for the trial that faulted.
    """

    error: CapturedError
    recheck: RecheckData


def _plural(n: int, noun: str) -> str:
    return f"1 {noun}" if n == 1 else f"{n} {noun}s"


def _and(n: int, noun: str) -> str:
    return "" if n == 0 else f" and {_plural(n, noun)}"


@dataclass(frozen=True, slots=True)
class Report:
    """Verdict of a property run.

    Attributes:
        tests: Trials that counted toward the test limit (the failing one included).
        discards: Trials that were discarded.
        status: Final status.
        failure: Present when status is FAILED.
        fault: Present when status is GENERATOR_ERROR.
    """

    tests: int
    discards: int
    status: ReportStatus
    failure: FailureData | None = None
    fault: GeneratorFault | None = None

    @property
    def passed(self) -> bool:
        return self.status == ReportStatus.OK

    @property
    def shrinks(self) -> int:
        return 0 if self.failure is None else self.failure.shrinks

    def render(self) -> str:
        """Plain-text summary, one line for a pass and a block for a failure."""
        match self.status:
            case ReportStatus.OK:
                return f"+++ OK, passed {_plural(self.tests, 'test')}."
            case ReportStatus.GAVE_UP:
                return f"*** Gave up after {_plural(self.discards, 'discard')}, passed {_plural(self.tests, 'test')}."
            case ReportStatus.CANCELLED:
                return f"*** Cancelled after {_plural(self.tests, 'test')}{_and(self.discards, 'discard')}."
            case ReportStatus.GENERATOR_ERROR:
                return self._render_fault()
            case ReportStatus.FAILED:
                return self._render_failure()

    def _render_failure(self) -> str:
        failure = self.failure
        if failure is None:
            raise ValueError("FAILED report has no failure data")
        lines = [
            f"*** Failed! Falsifiable (after {_plural(self.tests, 'test')}"
            f"{_and(failure.shrinks, 'shrink')}{_and(self.discards, 'discard')}):"
        ]
        lines.extend(failure.journal)
        if failure.shrink_error is not None:
            lines.append(
                f"Shrinking stopped early: generator raised {failure.shrink_error['type']}: {failure.shrink_error['exception']}"
            )
        elif failure.shrink_truncated:
            lines.append("Shrinking stopped early; the counterexample may not be minimal.")
        lines.append("This failure can be reproduced with the recheck token:")
        lines.append(f"> {failure.token}")
        return "\n".join(lines)

    def _render_fault(self) -> str:
        fault = self.fault
        if fault is None:
            raise ValueError("GENERATOR_ERROR report has no fault data")
        return "\n".join(
            [
                f"*** Generator error (after {_plural(self.tests, 'test')}{_and(self.discards, 'discard')}):",
                f"{fault.error['type']}: {fault.error['exception']}",
                "The faulting trial can be replayed with the recheck token:",
                f"> {fault.recheck.serialize()}",
            ]
        )

    def raise_for_status(self) -> None:
        """Raise PropertyFailedError unless the property passed."""
        if not self.passed:
            raise PropertyFailedError(self)
