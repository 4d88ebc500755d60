# src/bramble/engine/journal.py
"""Journal: side-channel messages accumulated while a property runs.

Entries are rendered lazily, so annotating a property costs nothing unless
the trial ends up in a failure report.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class EntryKind(StrEnum):
    """What a journal entry records.

    Values:
        GENERATED: A value drawn by ``for_all``; also the counterexample input
        ANNOTATION: A message attached with ``counterexample``
        EXCEPTION: An exception captured from a predicate or continuation
    """

    GENERATED = "generated"
    ANNOTATION = "annotation"
    EXCEPTION = "exception"


_NO_VALUE: Any = object()


@dataclass(frozen=True, slots=True)
class JournalEntry:
    kind: EntryKind
    render: Callable[[], str]
    value: Any = _NO_VALUE

    @property
    def has_value(self) -> bool:
        return self.value is not _NO_VALUE


@dataclass(frozen=True, slots=True)
class Journal:
    """Immutable, ordered sequence of journal entries."""

    entries: tuple[JournalEntry, ...] = ()

    @staticmethod
    def empty() -> Journal:
        return _EMPTY

    @staticmethod
    def singleton(message: str, kind: EntryKind = EntryKind.ANNOTATION) -> Journal:
        return Journal((JournalEntry(kind, lambda: message),))

    @staticmethod
    def delayed(render: Callable[[], str], kind: EntryKind = EntryKind.ANNOTATION) -> Journal:
        return Journal((JournalEntry(kind, render),))

    @staticmethod
    def generated(value: Any) -> Journal:
        """Record a generated input, rendered with ``repr``."""
        return Journal((JournalEntry(EntryKind.GENERATED, lambda: repr(value), value),))

    @staticmethod
    def concat(journals: Iterable[Journal]) -> Journal:
        return Journal(tuple(entry for journal in journals for entry in journal.entries))

    def append(self, other: Journal) -> Journal:
        if not other.entries:
            return self
        if not self.entries:
            return other
        return Journal(self.entries + other.entries)

    def messages(self) -> list[str]:
        """Render every entry, in order."""
        return [entry.render() for entry in self.entries]

    def generated_values(self) -> tuple[Any, ...]:
        """Values recorded by ``for_all``, outermost first."""
        return tuple(entry.value for entry in self.entries if entry.kind is EntryKind.GENERATED and entry.has_value)

    def __len__(self) -> int:
        return len(self.entries)


_EMPTY = Journal()
