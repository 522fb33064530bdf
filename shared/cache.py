"""
Process-local TTL cache for configuration values.

Each running function instance keeps its own cache. There is no cross-instance
invalidation; a value changed in the parameter store is picked up by an
instance once its cached copy is older than the TTL.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from shared.logging import get_logger


@dataclass
class CacheEntry:
    """A cached value and the time it was fetched."""
    value: Any
    fetched_at: float


class TTLCache:
    """Cache keyed by configuration name with a fixed time-to-live."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self.logger = get_logger("shared.cache")

    def get(self, name: str) -> Optional[Any]:
        """Return the cached value for name, or None if missing or expired."""
        entry = self._entries.get(name)
        if entry is None:
            return None

        if self._clock() - entry.fetched_at >= self.ttl_seconds:
            return None

        return entry.value

    def set(self, name: str, value: Any) -> None:
        self._entries[name] = CacheEntry(value=value, fetched_at=self._clock())

    def get_or_load(self, name: str, loader: Callable[[], Any]) -> Any:
        """Return the cached value, calling loader to refresh it when stale.

        Loader exceptions propagate and leave any previous entry untouched.
        """
        value = self.get(name)
        if value is not None:
            return value

        value = loader()
        self.set(name, value)
        self.logger.debug("Cache refreshed", name=name, ttl_seconds=self.ttl_seconds)
        return value

    def invalidate(self, name: str) -> None:
        self._entries.pop(name, None)

    def clear(self) -> None:
        """Clear all cached values."""
        self._entries.clear()
