"""
In-process TTL cache for provider quotes. One instance is shared by all
ingredient tasks and injected into the reconciler.
Expiry is fixed at write time; reads never extend it.
"""

import threading
import time
from typing import Callable, Generic, Optional, TypeVar

from platecost.logging import get_logger
from platecost.services.catalog.location import normalize_location
from platecost.services.catalog.matcher import normalize_key

logger = get_logger(__name__)

T = TypeVar("T")


def cache_key(provider: str, ingredient_name: str, location: Optional[str]) -> str:
    return f"{provider}|{normalize_key(ingredient_name)}|{normalize_location(location)}"


class PriceCache(Generic[T]):
    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 2048,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max(1, max_entries)
        self._clock = clock
        # key -> (expires_at, value); insertion order == write order
        self._entries: dict[str, tuple[float, T]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            hit = self._entries.get(key)
            if hit is None:
                return None
            expires_at, value = hit
            if self._clock() >= expires_at:
                return None
            return value

    def set(self, key: str, value: T) -> None:
        with self._lock:
            now = self._clock()
            self._sweep_locked(now)
            self._entries.pop(key, None)
            while len(self._entries) >= self._max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = (now + self._ttl, value)

    def evict_expired(self) -> int:
        with self._lock:
            removed = self._sweep_locked(self._clock())
        if removed:
            logger.info("price_cache.evicted count=%s", removed)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _sweep_locked(self, now: float) -> int:
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for k in expired:
            del self._entries[k]
        return len(expired)
