"""Process-wide unique id tokens."""

from __future__ import annotations

import itertools

from pinvault_observer.core.constants import LISTEN_ID_PREFIX


class IdCounter:
    """Monotonic counter handing out '<prefix><n>' tokens. Never reuses a value."""

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix
        self._counter = itertools.count(1)

    def next_id(self) -> str:
        return f"{self.prefix}{next(self._counter)}"

    def reset(self) -> None:
        """Restart numbering (tests only; tokens already handed out may repeat)."""
        self._counter = itertools.count(1)


listen_ids = IdCounter(LISTEN_ID_PREFIX)
