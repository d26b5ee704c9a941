"""Time-bounded result cache keyed by target URL."""

import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from core.request_types import CacheKind

DEFAULT_TTL = 300.0


def cache_key(url: str) -> str:
    """Canonical cache key for a target URL."""
    return f"proxy:{url}"


@dataclass(frozen=True)
class CacheEntry:
    """A cached HTML or JSON payload."""

    key: str
    kind: CacheKind
    payload: str
    inserted_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now - self.inserted_at >= self.ttl


class MemoryResultCache:
    """In-process cache with a single TTL for every entry.

    Expired entries are dropped lazily on read and on listing. ``clock`` is
    injectable so tests can move time forward deterministically.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._lock = Lock()
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expired(self._clock()):
                del self._entries[key]
                return None
            return entry

    def put(self, key: str, kind: CacheKind, payload: str) -> CacheEntry:
        """Store ``payload``, replacing any previous entry and restarting its TTL."""
        entry = CacheEntry(key, CacheKind(kind), payload, self._clock(), self.ttl)
        with self._lock:
            self._entries[key] = entry
        return entry

    def list_keys(self) -> list[str]:
        with self._lock:
            now = self._clock()
            for key in [k for k, e in self._entries.items() if e.expired(now)]:
                del self._entries[key]
            return list(self._entries)
