"""Time-bounded cache for chain reads.

The cache is an explicit object handed to the readers that use it, never
module state, so tests can inject a fake clock and inspect contents.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable
from typing import Any, Final


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


# Distinguishes "not cached" from a cached None (e.g. "no pool for this pair")
MISSING: Final = _Missing()


class TtlCache:
    """Key/value cache whose entries expire ttl_seconds after being set.

    A ttl of zero or less disables storage entirely, which makes every
    lookup a miss without callers needing a separate code path.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self, key: Hashable) -> Any:
        """Return the cached value, or MISSING if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return MISSING
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return MISSING
        return value

    def set(self, key: Hashable, value: Any) -> None:
        if not self.enabled:
            return
        self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["TtlCache", "MISSING"]
