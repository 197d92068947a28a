"""Simple cache abstractions."""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL in seconds."""

    def set_no_expiry(self, key: str, value: object) -> None:
        """Store a cached value that never expires."""

    def remove(self, key: str) -> None:
        """Drop a cached value if present."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime | None


class InMemoryCache(Cache):
    """Process-local cache shared by concurrent requests.

    Entries are lost on restart. Lookups never extend an entry's lifetime.
    Expired entries are dropped when read, and swept on writes at most once
    per `sweep_interval_seconds`.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        sweep_interval_seconds: int = 60,
    ) -> None:
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._sweep_interval = timedelta(seconds=sweep_interval_seconds)
        self._next_sweep: datetime | None = None

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at is not None and self._clock() >= entry.expires_at:
                self._entries.pop(key, None)
                return None
            return entry.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL."""
        now = self._clock()
        expires_at = now + timedelta(seconds=ttl_seconds)
        with self._lock:
            self._sweep_expired(now)
            self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def set_no_expiry(self, key: str, value: object) -> None:
        """Store a cached value without expiry."""
        with self._lock:
            self._entries[key] = _CacheEntry(value=value, expires_at=None)

    def remove(self, key: str) -> None:
        """Remove a cached value; missing keys are ignored."""
        with self._lock:
            self._entries.pop(key, None)

    def _sweep_expired(self, now: datetime) -> None:
        # caller holds the lock
        if self._next_sweep is not None and now < self._next_sweep:
            return
        expired = [
            key
            for key, entry in self._entries.items()
            if entry.expires_at is not None and now >= entry.expires_at
        ]
        for key in expired:
            del self._entries[key]
        self._next_sweep = now + self._sweep_interval

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
