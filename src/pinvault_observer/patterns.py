"""Event name patterns: opaque names, delimited segment paths and key/value maps.

A raw event name is resolved once into one of three variants:

    NameToken("save")                  # plain name, delimiter disabled
    NameSegments(("model", "save"))    # "model:save" with delimiter ":"
    KeyValuePattern({"type": "save"})  # structured name

Each variant can match a triggered name (itself normalized the same way) and
reports how specific the match is. Higher specificity dispatches first.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

from pinvault_observer.core.constants import WILDCARD
from pinvault_observer.core.errors import InvalidPatternError


def _typed(value: Any) -> tuple[str, str]:
    # type name keeps 1 and "1" apart; nested maps are ordered like the outer one
    if isinstance(value, Mapping):
        return (type(value).__qualname__, repr(_typed_items(value)))
    return (type(value).__qualname__, repr(value))


def _typed_items(items: Mapping[Any, Any]) -> tuple[tuple[tuple[str, str], tuple[str, str]], ...]:
    return tuple(sorted((_typed(k), _typed(v)) for k, v in items.items()))


def _serialize(tag: str, parts: Any) -> str:
    return repr((tag, parts))


class _PatternBase:
    __slots__ = ()

    @property
    def key(self) -> str:
        """Stable serialized form used for exact store lookups."""
        raise NotImplementedError

    @property
    def raw(self) -> Any:
        """Plain Python value of the pattern."""
        raise NotImplementedError

    def match(self, target: Pattern) -> int | None:
        """Return specificity when this pattern matches target, else None."""
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _PatternBase):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


class NameToken(_PatternBase):
    """Opaque event name. The wildcard name matches any name at specificity 0."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    @property
    def key(self) -> str:
        return _serialize("name", _typed(self.name))

    @property
    def raw(self) -> str:
        return self.name

    def match(self, target: Pattern) -> int | None:
        if self.name == WILDCARD:
            return 0
        if isinstance(target, NameToken) and target.name == self.name:
            return 1
        return None

    def __repr__(self) -> str:
        return f"NameToken({self.name!r})"


class NameSegments(_PatternBase):
    """Hierarchical name split on a delimiter; matches any name it is a prefix of."""

    __slots__ = ("segments",)

    def __init__(self, segments: tuple[Any, ...]) -> None:
        self.segments = tuple(segments)

    @property
    def key(self) -> str:
        return _serialize("segments", tuple(_typed(s) for s in self.segments))

    @property
    def raw(self) -> tuple[Any, ...]:
        return self.segments

    def match(self, target: Pattern) -> int | None:
        if not isinstance(target, NameSegments):
            return None
        if len(self.segments) > len(target.segments):
            return None
        specificity = 0
        for ours, theirs in zip(self.segments, target.segments):
            if ours == WILDCARD:
                continue
            if ours != theirs:
                return None
            specificity += 1
        return specificity

    def __repr__(self) -> str:
        return f"NameSegments({self.segments!r})"


class KeyValuePattern(_PatternBase):
    """Structured name. Every key must be present in the triggered map.

    Concrete values must be equal and count one point each; wildcard values
    only require the key. The empty map matches anything at specificity 0.
    """

    __slots__ = ("items",)

    def __init__(self, items: Mapping[Any, Any]) -> None:
        self.items = dict(items)

    @property
    def key(self) -> str:
        return _serialize("map", _typed_items(self.items))

    @property
    def raw(self) -> dict[Any, Any]:
        return dict(self.items)

    def match(self, target: Pattern) -> int | None:
        if not self.items:
            return 0
        if not isinstance(target, KeyValuePattern):
            return None
        specificity = 0
        for k, v in self.items.items():
            if k not in target.items:
                return None
            if v == WILDCARD:
                continue
            if target.items[k] != v:
                return None
            specificity += 1
        return specificity

    def __repr__(self) -> str:
        return f"KeyValuePattern({self.items!r})"


Pattern = Union[NameToken, NameSegments, KeyValuePattern]


def normalize_name(name: Any, delimiter: str | None = None) -> Pattern | None:
    """Resolve a raw event name into a pattern variant. None stays None."""
    if name is None or isinstance(name, _PatternBase):
        return name
    if isinstance(name, str):
        if delimiter:
            return NameSegments(tuple(name.split(delimiter)))
        return NameToken(name)
    if isinstance(name, Mapping):
        return KeyValuePattern(name)
    if isinstance(name, (list, tuple)):
        return NameSegments(tuple(name))
    raise InvalidPatternError(
        f"Unsupported event name type: {type(name).__name__}",
        code="invalid_pattern",
        details={"type": type(name).__name__},
    )


def join_segments(pattern: Pattern | None, delimiter: str | None = None) -> Any:
    """Inverse of normalize_name for display: rebuild 'a:b:c' from segments."""
    if isinstance(pattern, NameSegments) and delimiter:
        return delimiter.join(str(s) for s in pattern.segments)
    if pattern is None:
        return None
    return pattern.raw
