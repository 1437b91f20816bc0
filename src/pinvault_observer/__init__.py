"""pinvault-observer: pattern-matched, deferred observer events for any object."""

from .bootstrap import configure, setup_logging
from .core.constants import WILDCARD
from .core.errors import (
    InvalidCallbackError,
    InvalidPatternError,
    ObserverConfigurationError,
    ObserverError,
    SchedulerUnavailableError,
)
from .events import MatchedEvent
from .observable import Observable
from .patterns import KeyValuePattern, NameSegments, NameToken
from .scheduling import LoopScheduler, QueueScheduler, get_scheduler, set_scheduler
from .store import PatternStore

__version__ = "0.3.0"

__all__ = [
    "WILDCARD",
    "InvalidCallbackError",
    "InvalidPatternError",
    "KeyValuePattern",
    "LoopScheduler",
    "MatchedEvent",
    "NameSegments",
    "NameToken",
    "Observable",
    "ObserverConfigurationError",
    "ObserverError",
    "PatternStore",
    "QueueScheduler",
    "SchedulerUnavailableError",
    "configure",
    "get_scheduler",
    "set_scheduler",
    "setup_logging",
]
