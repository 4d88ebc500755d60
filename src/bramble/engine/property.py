# src/bramble/engine/property.py
"""Properties: generators of (journal, outcome) evaluations.

A Property is a Gen whose values are evaluations of the property body, so it
inherits integrated shrinking: shrinking the generated inputs re-evaluates the
body on each candidate.

Usage:
    from bramble.core.range import Range
    from bramble.engine import gen, prop

    reverse_twice = prop.for_all(
        gen.list_of(Range.linear(0, 50), gen.integral(Range.constant(0, 9))),
        lambda xs: list(reversed(list(reversed(xs)))) == xs,
    )

    @prop.build
    def sum_is_commutative():
        x = yield gen.integral(Range.linear(-100, 100))
        y = yield gen.integral(Range.linear(-100, 100))
        return x + y == y + x

Bodies may return ``bool``, ``None`` (success), another Property, or an
awaitable of ``bool``/``None``. Exceptions raised by a body, including
AssertionError, falsify the property and are captured for the report.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Awaitable, Callable, Generator
from contextlib import AbstractContextManager
from typing import Any

from bramble.contracts.errors import PropertyUsageError, capture_error
from bramble.core.seed import Seed
from bramble.core.size import Size
from bramble.core.tree import Tree
from bramble.engine import gen as gens
from bramble.engine.gen import Gen
from bramble.engine.journal import EntryKind, Journal
from bramble.engine.outcome import Discard, Failure, Outcome, Success, filter_outcome, map_outcome
from bramble.engine.random import Random


def _exception_journal(error: Exception) -> Journal:
    return Journal.delayed(lambda: f"{type(error).__name__}: {error}", EntryKind.EXCEPTION)


class Result[T]:
    """A completed evaluation."""

    __slots__ = ("journal", "outcome")

    def __init__(self, journal: Journal, outcome: Outcome[T]) -> None:
        self.journal = journal
        self.outcome = outcome

    def __repr__(self) -> str:
        return f"Result({self.outcome!r})"

    @staticmethod
    def of_exception(journal: Journal, error: Exception) -> Result[Any]:
        return Result(journal.append(_exception_journal(error)), Failure(capture_error(error)))

    def prepend(self, journal: Journal) -> Result[T]:
        return Result(journal.append(self.journal), self.outcome)


class PendingResult[T]:
    """An evaluation still waiting on an awaitable predicate.

    Pending results can be mapped and prefixed with journal entries, but not
    bound: the runner is the only place that awaits them.
    """

    __slots__ = ("_awaitable", "_steps", "journal")

    def __init__(
        self,
        journal: Journal,
        awaitable: Awaitable[Any],
        steps: tuple[Callable[[Result[Any]], Result[Any]], ...] = (),
    ) -> None:
        self.journal = journal
        self._awaitable = awaitable
        self._steps = steps

    def __repr__(self) -> str:
        return f"PendingResult({self._awaitable!r})"

    def prepend(self, journal: Journal) -> PendingResult[T]:
        return PendingResult(journal.append(self.journal), self._awaitable, self._steps)

    def then[U](self, step: Callable[[Result[T]], Result[U]]) -> PendingResult[U]:
        return PendingResult(self.journal, self._awaitable, (*self._steps, step))

    async def resolve(self) -> Result[T]:
        """Await the predicate and convert its value into a Result."""
        try:
            value = await self._awaitable
            if isinstance(value, Property) or inspect.isawaitable(value):
                raise PropertyUsageError("Asynchronous property bodies must resolve to bool or None")
            result: Result[Any] = _result_of_value(value).prepend(self.journal)
        except PropertyUsageError:
            raise
        except Exception as exc:
            result = Result.of_exception(self.journal, exc)
        for step in self._steps:
            result = step(result)
        return result

    def close(self) -> None:
        """Release an awaitable that will never be awaited."""
        if inspect.iscoroutine(self._awaitable):
            self._awaitable.close()


type Evaluation[T] = Result[T] | PendingResult[T]


def _result_of_value(value: object) -> Result[Any]:
    if value is None:
        return Result(Journal.empty(), Success(None))
    if isinstance(value, bool):
        return Result(Journal.empty(), Success(None) if value else Failure())
    return Result(Journal.empty(), Success(value))


def _map_result[T, U](f: Callable[[T], U], result: Result[T]) -> Result[U]:
    try:
        return Result(result.journal, map_outcome(f, result.outcome))
    except PropertyUsageError:
        raise
    except Exception as exc:
        return Result.of_exception(result.journal, exc)


def _prepend(journal: Journal, evaluation: Evaluation[Any]) -> Evaluation[Any]:
    return evaluation.prepend(journal)


class Property[T]:
    """A generator of property evaluations."""

    __slots__ = ("gen",)

    def __init__(self, gen: Gen[Evaluation[T]]) -> None:
        self.gen = gen

    def map[U](self, f: Callable[[T], U]) -> Property[U]:
        """Transform the success value; exceptions from ``f`` falsify the property."""

        def step(evaluation: Evaluation[T]) -> Evaluation[U]:
            if isinstance(evaluation, PendingResult):
                return evaluation.then(functools.partial(_map_result, f))
            return _map_result(f, evaluation)

        return Property(self.gen.map(step))

    def bind[U](self, k: Callable[[T], Property[U]]) -> Property[U]:
        """Continue with ``k`` on success; failures and discards short-circuit.

        Raises:
            PropertyUsageError: At run time, if this property's evaluation is
                asynchronous. Awaitable results can only end a property.
        """

        def continuation(evaluation: Evaluation[T]) -> Gen[Evaluation[U]]:
            if isinstance(evaluation, PendingResult):
                evaluation.close()
                raise PropertyUsageError("Cannot bind onto an asynchronous property result; awaitables may only end a property")
            match evaluation.outcome:
                case Success(value):
                    try:
                        following = k(value)
                    except PropertyUsageError:
                        raise
                    except Exception as exc:
                        return gens.constant(Result.of_exception(evaluation.journal, exc))
                    return following.gen.map(functools.partial(_prepend, evaluation.journal))
                case _:
                    return gens.constant(Result(evaluation.journal, evaluation.outcome))

        return Property(self.gen.bind(continuation))

    def filter(self, predicate: Callable[[T], bool]) -> Property[T]:
        """Discard evaluations whose success value fails ``predicate``."""

        def keep(result: Result[T]) -> Result[T]:
            try:
                return Result(result.journal, filter_outcome(predicate, result.outcome))
            except PropertyUsageError:
                raise
            except Exception as exc:
                return Result.of_exception(result.journal, exc)

        def step(evaluation: Evaluation[T]) -> Evaluation[T]:
            if isinstance(evaluation, PendingResult):
                return evaluation.then(keep)
            return keep(evaluation)

        return Property(self.gen.map(step))

    # Alias matching the query-style name used by property builders.
    where = filter


# =============================================================================
# Constructors
# =============================================================================


def of_outcome[T](outcome: Outcome[T]) -> Property[T]:
    return Property(gens.constant(Result(Journal.empty(), outcome)))


def success[T](value: T = None) -> Property[T]:  # type: ignore[assignment]
    return of_outcome(Success(value))


def failure() -> Property[None]:
    return of_outcome(Failure())


def discard() -> Property[None]:
    return of_outcome(Discard())


def of_bool(condition: bool) -> Property[None]:
    return success() if condition else failure()


def counterexample(message: str | Callable[[], str]) -> Property[None]:
    """Attach a message to the journal; shown only if the trial fails."""
    journal = Journal.delayed(message) if callable(message) else Journal.singleton(message)
    return Property(gens.constant(Result(journal, Success(None))))


def delay[T](f: Callable[[], Property[T]]) -> Property[T]:
    return Property(gens.delay(lambda: f().gen))


def try_finally[T](p: Property[T], after: Callable[[], None]) -> Property[T]:
    """Call ``after`` once each trial of ``p`` has been generated, even if it raised.

    The body runs while the trial is generated, so ``after`` sees it finish
    for the original input. Shrink candidates are evaluated later and are not
    covered, nor is an asynchronous body, which is awaited afterwards.
    """
    return Property(p.gen.try_finally(after))


def using[R, T](acquire: Callable[[], AbstractContextManager[R]], k: Callable[[R], Property[T]]) -> Property[T]:
    """Enter ``acquire()`` for each trial and continue with ``k`` on its value.

    The context manager is exited on the same schedule as ``try_finally``.
    An exception raised by ``k`` falsifies the property.
    """

    def run(seed: Seed, size: Size) -> Tree[Evaluation[T]]:
        with acquire() as resource:
            try:
                following = k(resource)
            except PropertyUsageError:
                raise
            except Exception as exc:
                return Tree.singleton(Result.of_exception(Journal.empty(), exc))
            return following.gen.run(seed, size)

    return Property(Gen(Random(run)))


def of_value(value: object) -> Property[Any]:
    """Interpret a body's return value as a property."""
    if isinstance(value, Property):
        return value
    if inspect.isawaitable(value):
        return Property(gens.constant(PendingResult(Journal.empty(), value)))
    return Property(gens.constant(_result_of_value(value)))


def for_all[T](g: Gen[T], body: Callable[[T], object]) -> Property[Any]:
    """Check ``body`` against values drawn from ``g``.

    Each generated value is recorded in the journal, so it appears in the
    failure report and is available as the counterexample input.
    """

    def prepend(x: T) -> Gen[Evaluation[Any]]:
        journal = Journal.generated(x)
        try:
            following = of_value(body(x))
        except PropertyUsageError:
            raise
        except Exception as exc:
            return gens.constant(Result.of_exception(journal, exc))
        return following.gen.map(functools.partial(_prepend, journal))

    return Property(g.bind(prepend))


def for_all_value[T](g: Gen[T]) -> Property[T]:
    """A property that succeeds with every generated value."""
    return for_all(g, success)


def build[**P](fn: Callable[P, Generator[Gen[Any] | Property[Any], Any, object]]) -> Callable[P, Property[Any]]:
    """Turn a generator function into a Property factory.

    ``yield g`` draws from a Gen (recorded like ``for_all``); ``yield p``
    binds a Property. The return value is interpreted like a ``for_all``
    body. The function is replayed from the start for every bind, so it must
    be free of side effects other than its assertions.
    """

    @functools.wraps(fn)
    def factory(*args: P.args, **kwargs: P.kwargs) -> Property[Any]:
        def step(values: tuple[Any, ...]) -> Property[Any]:
            steps = fn(*args, **kwargs)
            try:
                request = steps.send(None)
                for value in values:
                    request = steps.send(value)
            except StopIteration as stop:
                return of_value(stop.value)

            def resume(x: Any) -> Property[Any]:
                return step((*values, x))

            if isinstance(request, Gen):
                return for_all(request, resume)
            if isinstance(request, Property):
                return request.bind(resume)
            steps.close()
            raise PropertyUsageError(f"@prop.build functions must yield Gen or Property instances, got {type(request).__name__}")

        # Run the first step inside bind so exceptions before the first yield falsify.
        return success().bind(lambda _: step(()))

    return factory
