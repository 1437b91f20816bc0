"""Observable capability: subscribe, unsubscribe, trigger and IoC listening.

Host classes opt in by inheriting ``Observable``:

    class Model(Observable):
        observer_delimiter = ":"

    model = Model()
    model.on({"buzz": 2}, lambda ev: print("buzz"))
    model.on({"fizz": 1}, lambda ev: print("fizz"))
    model.on({"fizz": 1, "buzz": 2}, lambda ev: print("fizzbuzz"))
    model.trigger({"foo": 3, "fizz": 1, "buzz": 2})  # fizzbuzz, buzz, fizz

Callbacks never run inside ``trigger``; each match is deferred onto the
scheduler, most specific pattern first, then in binding order.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger

from pinvault_observer.config import cfg
from pinvault_observer.core.errors import InvalidCallbackError, InvalidPatternError
from pinvault_observer.events import MatchedEvent, StopSignal, SubscriberEntry
from pinvault_observer.ids import listen_ids
from pinvault_observer.patterns import Pattern, join_segments, normalize_name
from pinvault_observer.scheduling import Scheduler, get_scheduler
from pinvault_observer.store import PatternStore


class _Once:
    """Self-removing callback adapter used by ``once``.

    Keeps the original callback on ``.callback`` so ``off(name, original)``
    still finds it.
    """

    def __init__(self, owner: Observable, name: Any, callback: Callable[..., Any], context: Any) -> None:
        self.owner = owner
        self.name = name
        self.callback = callback
        self.context = context
        self._ran = False
        self._result: Any = None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self._ran:
            return self._result
        self._ran = True
        self.owner.off(self.name, self)
        if isinstance(self.context, Observable):
            self.context._forget_if_idle(self.owner)
        self._result = self.callback(*args, **kwargs)
        return self._result


def _same_callback(stored: Callable[..., Any], callback: Callable[..., Any]) -> bool:
    # == rather than `is`: bound methods are re-created on every attribute access
    if stored == callback:
        return True
    return isinstance(stored, _Once) and stored.callback == callback


class Observable:
    """Turns the host into a publisher of named or structured events."""

    # None falls back to cfg.observer_delimiter; False or "" disables splitting.
    observer_delimiter: str | bool | None = None
    # None falls back to the process default scheduler.
    scheduler: Scheduler | None = None
    # Receives exceptions raised by subscriber callbacks.
    on_observer_error: Callable[[BaseException], Any] | None = None

    _observers: PatternStore | None = None
    _listening_to: dict[str, Observable] | None = None
    _listen_id: str | None = None

    def _delimiter(self) -> str | None:
        delimiter = self.observer_delimiter
        if delimiter is None:
            return cfg.observer_delimiter
        if isinstance(delimiter, str) and delimiter:
            return delimiter
        return None

    def _normalize(self, name: Any) -> Pattern | None:
        return normalize_name(name, self._delimiter())

    def on(self, name: Any, callback: Callable[..., Any] | None = None, context: Any = None) -> Observable:
        """Bind callback to events matching name. Returns self."""
        if callback is None:
            return self
        if not callable(callback):
            raise InvalidCallbackError(
                f"Callback for {name!r} is not callable: {type(callback).__name__}",
                code="invalid_callback",
                details={"type": type(callback).__name__},
            )
        pattern = self._normalize(name)
        if pattern is None:
            raise InvalidPatternError("on() requires an event name", code="missing_pattern")
        if self._observers is None:
            self._observers = PatternStore()
        entry = SubscriberEntry(
            callback=callback,
            context=context,
            ctx=context if context is not None else self,
            pattern=pattern,
        )
        index = self._observers.add(pattern, entry)
        logger.debug("Subscribed {!r} to {} (index={})", callback, pattern, index)
        return self

    def once(self, name: Any, callback: Callable[..., Any] | None = None, context: Any = None) -> Observable:
        """Bind callback for a single invocation; it unbinds itself on first call."""
        if callback is None:
            return self
        if not callable(callback):
            raise InvalidCallbackError(
                f"Callback for {name!r} is not callable: {type(callback).__name__}",
                code="invalid_callback",
                details={"type": type(callback).__name__},
            )
        return self.on(name, _Once(self, name, callback, context), context)

    def off(self, name: Any = None, callback: Callable[..., Any] | None = None, context: Any = None) -> Observable:
        """Remove subscriptions.

        No arguments drops everything. Only a name drops every subscription
        bound to exactly that name. With a callback or context, drops the
        subscriptions (under name, or anywhere) whose callback or context
        matches either one.
        """
        store = self._observers
        if store is None:
            return self
        if name is None and callback is None and context is None:
            self._observers = None
            logger.debug("Dropped all subscriptions on {!r}", self)
            return self

        pattern = self._normalize(name)
        removed = 0
        if callback is None and context is None:
            removed = store.remove(pattern)
        else:
            for entry in store.get(pattern, match_all=True):
                sub: SubscriberEntry = entry.data
                if (callback is not None and _same_callback(sub.callback, callback)) or (
                    context is not None and sub.context is context
                ):
                    removed += store.remove(entry.pattern, sub)

        if not store:
            self._observers = None
        if removed:
            target = pattern if pattern is not None else "all patterns"
            logger.debug("Unsubscribed {} subscription(s) from {}", removed, target)
        return self

    def trigger(self, name: Any, *args: Any, **kwargs: Any) -> Observable:
        """Schedule every subscription matching name. Callbacks get (event, *args, **kwargs)."""
        store = self._observers
        if store is None:
            return self
        delimiter = self._delimiter()
        value = normalize_name(name, delimiter)
        if value is None:
            raise InvalidPatternError("trigger() requires an event name", code="missing_pattern")

        matches = store.match(value)
        if not matches:
            logger.debug("No subscribers matched {}", value)
            return self

        scheduler = self.scheduler if self.scheduler is not None else get_scheduler()
        signal = StopSignal()
        for match in matches:
            sub: SubscriberEntry = match.data
            event = MatchedEvent(
                value=value,
                matched=join_segments(match.pattern, delimiter),
                specificity=match.specificity,
                index=match.index,
                context=sub.ctx,
                delimiter=delimiter,
                _signal=signal,
            )
            scheduler.defer(functools.partial(self._invoke, signal, sub.callback, event, args, kwargs))
        return self

    def _invoke(
        self,
        signal: StopSignal,
        callback: Callable[..., Any],
        event: MatchedEvent,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        if signal.stopped:
            return
        try:
            callback(event, *args, **kwargs)
        except Exception as exc:
            hook = self.on_observer_error
            if hook is not None:
                try:
                    hook(exc)
                except Exception as hook_exc:
                    logger.exception("Observer error hook failed on {!r}: {}", exc, hook_exc)
            elif cfg.log_subscriber_errors:
                logger.exception("Subscriber {!r} for {!r} raised: {}", callback, event.name, exc)

    # Inversion-of-control versions of `on` and `once`: tell *this* object to
    # listen to another one while keeping track of what it listens to.

    def listen_to(self, source: Observable, name: Any, callback: Callable[..., Any] | None = None) -> Observable:
        return self._listen(source, "on", name, callback)

    def listen_to_once(self, source: Observable, name: Any, callback: Callable[..., Any] | None = None) -> Observable:
        return self._listen(source, "once", name, callback)

    def _listen(
        self,
        source: Observable,
        implementation: str,
        name: Any,
        callback: Callable[..., Any] | None,
    ) -> Observable:
        if callback is None and isinstance(name, Mapping):
            callback = self
        if callback is None:
            return self
        getattr(source, implementation)(name, callback, self)

        if source._listen_id is None:
            source._listen_id = listen_ids.next_id()
        if self._listening_to is None:
            self._listening_to = {}
        self._listening_to[source._listen_id] = source
        return self

    def stop_listening(
        self,
        source: Observable | None = None,
        name: Any = None,
        callback: Callable[..., Any] | None = None,
    ) -> Observable:
        """Remove subscriptions this object placed via listen_to, on source or on everyone."""
        listening_to = self._listening_to
        if not listening_to:
            return self

        full_stop = name is None and callback is None
        if source is not None:
            scope = {source._listen_id: source}
        else:
            scope = dict(listening_to)

        for listen_id, obj in scope.items():
            obj.off(name, callback, self)
            if full_stop or not obj._has_listener(self):
                listening_to.pop(listen_id, None)
        return self

    def _has_listener(self, listener: Any) -> bool:
        store = self._observers
        if store is None:
            return False
        return any(entry.data.context is listener for entry in store)

    def _forget_if_idle(self, source: Observable) -> None:
        if self._listening_to and source._listen_id in self._listening_to and not source._has_listener(self):
            del self._listening_to[source._listen_id]
