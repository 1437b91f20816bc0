"""Shared constants."""

from __future__ import annotations

from typing import Final

# Matches any value at a mapping key, or any single segment of a delimited name.
WILDCARD: Final = "*"

LISTEN_ID_PREFIX: Final = "l"
