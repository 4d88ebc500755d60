"""Outcome of evaluating a property once."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from bramble.contracts.errors import CapturedError


@dataclass(frozen=True, slots=True)
class Success[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Failure:
    """The property was falsified.

    Attributes:
        error: The exception that falsified it, if any (None for a plain
            ``False`` result or an explicit ``failure()``).
    """

    error: CapturedError | None = None


@dataclass(frozen=True, slots=True)
class Discard:
    """The trial produced no usable input and does not count."""


type Outcome[T] = Success[T] | Failure | Discard


def is_failure(outcome: Outcome[object]) -> bool:
    return isinstance(outcome, Failure)


def map_outcome[T, U](f: Callable[[T], U], outcome: Outcome[T]) -> Outcome[U]:
    match outcome:
        case Success(value):
            return Success(f(value))
        case _:
            return outcome


def filter_outcome[T](predicate: Callable[[T], bool], outcome: Outcome[T]) -> Outcome[T]:
    """Turn a success whose value fails ``predicate`` into a discard."""
    match outcome:
        case Success(value) if not predicate(value):
            return Discard()
        case _:
            return outcome
