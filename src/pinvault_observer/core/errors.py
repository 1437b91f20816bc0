"""Observer domain exceptions."""

from __future__ import annotations


class ObserverError(Exception):
    """Base for observer domain errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_error = original_error


class InvalidCallbackError(ObserverError, TypeError):
    """Callback was given but is not callable."""


class InvalidPatternError(ObserverError, TypeError):
    """Event name/pattern is not a string, sequence or mapping."""


class SchedulerUnavailableError(ObserverError, RuntimeError):
    """No event loop available to defer subscriber invocations onto."""


class ObserverConfigurationError(ObserverError):
    """Config validation or load failure."""
