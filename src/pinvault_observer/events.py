"""Subscriber entries and the event descriptor handed to callbacks."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pinvault_observer.patterns import Pattern, join_segments


@dataclass(eq=False)
class SubscriberEntry:
    """One subscription. Compared by identity so the store can remove it exactly."""

    callback: Callable[..., Any]
    context: Any
    ctx: Any  # context if given, else the owning observable
    pattern: Pattern


class StopSignal:
    """Stop flag shared by every match of a single trigger call."""

    __slots__ = ("stopped",)

    def __init__(self) -> None:
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


@dataclass
class MatchedEvent:
    """Passed as first argument to every subscriber callback."""

    value: Pattern
    matched: Any
    specificity: int
    index: int
    context: Any
    delimiter: str | None = None
    _signal: StopSignal = field(default_factory=StopSignal, repr=False)

    def stop(self) -> None:
        """Skip every not-yet-run invocation from the same trigger call."""
        self._signal.stop()

    @property
    def stopped(self) -> bool:
        return self._signal.stopped

    @property
    def name(self) -> Any:
        """Triggered name as given: delimited string, plain name or mapping."""
        return join_segments(self.value, self.delimiter)
