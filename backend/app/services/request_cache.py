"""Small TTL cache for expensive request results."""
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass
class _CacheItem:
    data: Any
    stored_at: float
    ttl: float


class RequestCache:
    """Expired entries are dropped on read and swept on every write."""

    def __init__(self, default_ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._items: dict[str, _CacheItem] = {}
        self._lock = threading.Lock()

    def _sweep(self, now: float) -> None:
        expired = [key for key, item in self._items.items() if now - item.stored_at > item.ttl]
        for key in expired:
            del self._items[key]

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        """Store ``data`` under ``key``. Expired entries are dropped first."""
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._items[key] = _CacheItem(
                data=data,
                stored_at=now,
                ttl=self.default_ttl if ttl is None else ttl,
            )

    def get(self, key: str) -> Any:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            if self._clock() - item.stored_at > item.ttl:
                del self._items[key]
                return None
            return item.data

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
