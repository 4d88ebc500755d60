# src/bramble/engine/runner.py
"""Property runner: the trial loop and the shrink search.

State machine per run:

    Running --Discard--> Running (fresh split seed, bounded by the discard limit)
    Running --Success x tests--> Passed
    Running --Failure--> Shrinking --> Failed
    Running --too many discards--> GaveUp
    Running --generator raised--> GeneratorError
    Running --cancel.is_set()--> Cancelled

The loop and the search are written once, as generators that yield pending
(awaitable) evaluations and receive completed ones. The synchronous entry
points resolve each pending evaluation on a private event loop; the ``*_async``
entry points await them on the caller's loop. Generation itself is always
synchronous.

Shrinking is greedy and depth-first: take the first failing child, recurse,
and stop when no child fails (a local minimum), when the shrink limit is
reached, or when cancellation is signalled.
"""

from __future__ import annotations

import asyncio
from collections.abc import Generator
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from bramble.contracts.config import PropertyConfig
from bramble.contracts.enums import ReportStatus
from bramble.contracts.errors import CapturedError, GenDiscard, PropertyUsageError, capture_error
from bramble.contracts.report import FailureData, GeneratorFault, RecheckData, Report
from bramble.core.seed import Seed
from bramble.core.size import MIN_SIZE, Size, next_size
from bramble.core.tree import Tree
from bramble.engine.journal import Journal
from bramble.engine.outcome import Discard, Failure
from bramble.engine.property import Evaluation, PendingResult, Property, Result

logger = structlog.get_logger(__name__)


class CancellationToken(Protocol):
    """Anything with an ``is_set()`` method, e.g. threading.Event or asyncio.Event."""

    def is_set(self) -> bool: ...


type _Steps[R] = Generator[PendingResult[Any], Result[Any], R]


@dataclass(frozen=True, slots=True)
class _Shrunk:
    node: Tree[Evaluation[Any]]
    result: Result[Any]
    path: tuple[int, ...]
    truncated: bool = False
    error: CapturedError | None = None


def _cancelled(cancel: CancellationToken | None) -> bool:
    return cancel is not None and cancel.is_set()


def _inputs(journal: Journal) -> Any:
    """Counterexample input(s): the lone generated value, or a tuple of them."""
    values = journal.generated_values()
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return values


def _evaluate(node: Tree[Evaluation[Any]]) -> _Steps[Result[Any]]:
    evaluation = node.outcome
    if isinstance(evaluation, PendingResult):
        return (yield evaluation)
    return evaluation


# =============================================================================
# Shrink search
# =============================================================================


def _shrink(
    root: Tree[Evaluation[Any]],
    result: Result[Any],
    limit: int | None,
    cancel: CancellationToken | None,
) -> _Steps[_Shrunk]:
    node = root
    path: list[int] = []
    while True:
        if limit is not None and len(path) >= limit:
            return _Shrunk(node, result, tuple(path), truncated=True)
        if _cancelled(cancel):
            logger.info("shrink_cancelled", shrinks=len(path))
            return _Shrunk(node, result, tuple(path), truncated=True)
        try:
            for index, child in enumerate(node.children()):
                child_result = yield from _evaluate(child)
                if isinstance(child_result.outcome, Failure):
                    node, result = child, child_result
                    path.append(index)
                    logger.debug("shrink_step", shrinks=len(path), child_index=index)
                    break
            else:
                return _Shrunk(node, result, tuple(path))
        except PropertyUsageError:
            raise
        except Exception as exc:
            # The last failing node is still a valid counterexample.
            logger.warning("shrink_generator_error", shrinks=len(path), error_type=type(exc).__name__, error=str(exc))
            return _Shrunk(node, result, tuple(path), error=capture_error(exc))


def _follow(root: Tree[Evaluation[Any]], path: tuple[int, ...]) -> _Steps[_Shrunk | None]:
    """Replay a recorded shrink path; None if it no longer leads to a failure."""
    try:
        node = root.follow(path)
    except PropertyUsageError:
        raise
    except Exception as exc:
        logger.info("recheck_path_unusable", path=list(path), error_type=type(exc).__name__)
        return None
    result = yield from _evaluate(node)
    if not isinstance(result.outcome, Failure):
        logger.info("recheck_path_not_failing", path=list(path))
        return None
    return _Shrunk(node, result, path)


def _failure_data(trial: RecheckData, original: Result[Any], shrunk: _Shrunk) -> FailureData:
    outcome = shrunk.result.outcome
    return FailureData(
        recheck=RecheckData(trial.size, trial.seed, shrunk.path),
        shrinks=len(shrunk.path),
        original=_inputs(original.journal),
        shrunk=_inputs(shrunk.result.journal),
        journal=tuple(shrunk.result.journal.messages()),
        error=outcome.error if isinstance(outcome, Failure) else None,
        shrink_truncated=shrunk.truncated,
        shrink_error=shrunk.error,
    )


# =============================================================================
# Trial loop
# =============================================================================


def _root_seed(config: PropertyConfig) -> Seed:
    return Seed.random() if config.seed is None else Seed.from_u64(config.seed)


def _run_steps(
    prop: Property[Any],
    config: PropertyConfig,
    cancel: CancellationToken | None,
) -> _Steps[Report]:
    seed = _root_seed(config)
    size: Size = MIN_SIZE if config.size is None else config.size
    discard_limit = config.discard_limit
    tests = 0
    discards = 0
    logger.debug("property_run_started", seed=str(seed), size=size, tests=config.tests)

    while True:
        if tests >= config.tests:
            return Report(tests, discards, ReportStatus.OK)
        if discards >= discard_limit:
            return Report(tests, discards, ReportStatus.GAVE_UP)
        if _cancelled(cancel):
            return Report(tests, discards, ReportStatus.CANCELLED)

        trial = RecheckData(size, seed)
        trial_seed, next_seed = seed.split()
        try:
            tree = prop.gen.run(trial_seed, size)
        except GenDiscard:
            tree = None
        except PropertyUsageError:
            raise
        except Exception as exc:
            return Report(tests, discards, ReportStatus.GENERATOR_ERROR, fault=GeneratorFault(capture_error(exc), trial))

        if tree is None:
            discards += 1
        else:
            result = yield from _evaluate(tree)
            match result.outcome:
                case Failure():
                    tests += 1
                    shrunk = yield from _shrink(tree, result, config.shrinks, cancel)
                    return Report(tests, discards, ReportStatus.FAILED, failure=_failure_data(trial, result, shrunk))
                case Discard():
                    discards += 1
                case _:
                    tests += 1

        seed, size = next_seed, next_size(size)


def _recheck_steps(prop: Property[Any], trial: RecheckData, config: PropertyConfig) -> _Steps[Report]:
    trial_seed, _ = trial.seed.split()
    try:
        tree = prop.gen.run(trial_seed, trial.size)
    except GenDiscard:
        return Report(0, 1, ReportStatus.GAVE_UP)
    except PropertyUsageError:
        raise
    except Exception as exc:
        return Report(0, 0, ReportStatus.GENERATOR_ERROR, fault=GeneratorFault(capture_error(exc), trial.without_path()))

    result = yield from _evaluate(tree)
    match result.outcome:
        case Failure():
            shrunk = None
            if trial.path:
                shrunk = yield from _follow(tree, trial.path)
            if shrunk is None:
                shrunk = yield from _shrink(tree, result, config.shrinks, None)
            return Report(1, 0, ReportStatus.FAILED, failure=_failure_data(trial, result, shrunk))
        case Discard():
            return Report(0, 1, ReportStatus.GAVE_UP)
        case _:
            return Report(1, 0, ReportStatus.OK)


# =============================================================================
# Drivers
# =============================================================================


def _resolve_blocking(pending: PendingResult[Any]) -> Result[Any]:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(pending.resolve())
    pending.close()
    raise PropertyUsageError(
        "Property has an asynchronous body but was run synchronously inside a running event loop; "
        "use report_async/check_async/recheck_async instead"
    )


def _drive[R](steps: _Steps[R]) -> R:
    try:
        request = next(steps)
        while True:
            request = steps.send(_resolve_blocking(request))
    except StopIteration as stop:
        return stop.value
    finally:
        steps.close()


async def _drive_async[R](steps: _Steps[R]) -> R:
    try:
        request = next(steps)
        while True:
            request = steps.send(await request.resolve())
    except StopIteration as stop:
        return stop.value
    finally:
        steps.close()


def _as_recheck_data(token: str | RecheckData | tuple[Size, Seed]) -> RecheckData:
    if isinstance(token, RecheckData):
        return token
    if isinstance(token, str):
        return RecheckData.parse(token)
    size, seed = token
    return RecheckData(size, seed)


def _log_report(report: Report, name: str | None) -> None:
    log = logger.bind(property=name) if name is not None else logger
    match report.status:
        case ReportStatus.OK:
            log.info("property_passed", tests=report.tests, discards=report.discards)
        case ReportStatus.FAILED if report.failure is not None:
            log.warning(
                "property_failed",
                tests=report.tests,
                discards=report.discards,
                shrinks=report.failure.shrinks,
                shrunk=repr(report.failure.shrunk),
                recheck=report.failure.token,
                shrink_truncated=report.failure.shrink_truncated,
            )
        case ReportStatus.GAVE_UP:
            log.warning("property_gave_up", tests=report.tests, discards=report.discards)
        case ReportStatus.GENERATOR_ERROR if report.fault is not None:
            log.error(
                "generator_error",
                tests=report.tests,
                error_type=report.fault.error["type"],
                error=report.fault.error["exception"],
                recheck=report.fault.recheck.serialize(),
            )
        case _:
            log.info("property_cancelled", tests=report.tests, discards=report.discards)


# =============================================================================
# Public API
# =============================================================================


def report(
    prop: Property[Any],
    config: PropertyConfig | None = None,
    *,
    cancel: CancellationToken | None = None,
) -> Report:
    """Run ``prop`` and return its Report.

    Asynchronous bodies are awaited on a private event loop.

    Raises:
        PropertyUsageError: If the property misuses an asynchronous result,
            or has an asynchronous body and an event loop is already running.
    """
    return _drive(_run_steps(prop, config or PropertyConfig(), cancel))


async def report_async(
    prop: Property[Any],
    config: PropertyConfig | None = None,
    *,
    cancel: CancellationToken | None = None,
) -> Report:
    """Run ``prop``, awaiting asynchronous bodies on the current event loop."""
    return await _drive_async(_run_steps(prop, config or PropertyConfig(), cancel))


def check(
    prop: Property[Any],
    config: PropertyConfig | None = None,
    *,
    cancel: CancellationToken | None = None,
    name: str | None = None,
) -> Report:
    """Run ``prop``, log the verdict, and return the Report.

    Call ``raise_for_status()`` on the result to turn a failure into a test
    failure.
    """
    result = report(prop, config, cancel=cancel)
    _log_report(result, name)
    return result


async def check_async(
    prop: Property[Any],
    config: PropertyConfig | None = None,
    *,
    cancel: CancellationToken | None = None,
    name: str | None = None,
) -> Report:
    result = await report_async(prop, config, cancel=cancel)
    _log_report(result, name)
    return result


def recheck(
    prop: Property[Any],
    token: str | RecheckData | tuple[Size, Seed],
    config: PropertyConfig | None = None,
) -> Report:
    """Replay a single trial from a recheck token or (size, seed).

    A token carrying a shrink path jumps straight to the shrunk
    counterexample; if the path no longer leads to a failure (the property
    changed), the shrink search runs again from the replayed trial.

    Raises:
        RecheckTokenError: If ``token`` is a malformed string.
    """
    result = _drive(_recheck_steps(prop, _as_recheck_data(token), config or PropertyConfig()))
    _log_report(result, None)
    return result


async def recheck_async(
    prop: Property[Any],
    token: str | RecheckData | tuple[Size, Seed],
    config: PropertyConfig | None = None,
) -> Report:
    result = await _drive_async(_recheck_steps(prop, _as_recheck_data(token), config or PropertyConfig()))
    _log_report(result, None)
    return result
