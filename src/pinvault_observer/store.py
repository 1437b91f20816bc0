"""In-process pattern store: pattern -> subscriber entries, ranked matching."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from pinvault_observer.patterns import Pattern


@dataclass(frozen=True)
class StoreEntry:
    """One stored value under a pattern."""

    pattern: Pattern
    data: Any
    index: int


@dataclass(frozen=True)
class Match:
    """A stored entry that matched a triggered name."""

    pattern: Pattern
    data: Any
    index: int
    specificity: int


class PatternStore:
    """Indexes entries by pattern key. Insertion indexes are never reused."""

    def __init__(self) -> None:
        self._buckets: dict[str, list[StoreEntry]] = {}
        self._next_index = 0

    def add(self, pattern: Pattern, data: Any) -> int:
        """Store data under pattern. Returns the entry's insertion index."""
        index = self._next_index
        self._next_index += 1
        self._buckets.setdefault(pattern.key, []).append(StoreEntry(pattern, data, index))
        return index

    def remove(self, pattern: Pattern, data: Any = None) -> int:
        """Remove the entry holding data under pattern, or all of them. Returns count removed."""
        bucket = self._buckets.get(pattern.key)
        if not bucket:
            return 0
        if data is None:
            del self._buckets[pattern.key]
            return len(bucket)
        kept = [e for e in bucket if e.data is not data]
        removed = len(bucket) - len(kept)
        if kept:
            self._buckets[pattern.key] = kept
        else:
            del self._buckets[pattern.key]
        return removed

    def get(self, pattern: Pattern | None = None, match_all: bool = True) -> list[StoreEntry]:
        """Entries stored under exactly pattern; every entry when pattern is None and match_all."""
        if pattern is None:
            return list(self) if match_all else []
        return list(self._buckets.get(pattern.key, ()))

    def match(self, name: Pattern) -> list[Match]:
        """Entries whose pattern matches name: most specific first, then earliest bound."""
        found: list[Match] = []
        for entry in self:
            specificity = entry.pattern.match(name)
            if specificity is not None:
                found.append(Match(entry.pattern, entry.data, entry.index, specificity))
        found.sort(key=lambda m: (-m.specificity, m.index))
        return found

    def __iter__(self) -> Iterator[StoreEntry]:
        for bucket in self._buckets.values():
            yield from bucket

    def __len__(self) -> int:
        return sum(len(b) for b in self._buckets.values())

    def __bool__(self) -> bool:
        return bool(self._buckets)
