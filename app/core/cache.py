"""
Generic in-memory cache with TTL support.
Thread-safe and suitable for L1 caching of catalog lookups.
Expiry is checked on every read, so an expired entry is never served.
"""
import time
from abc import ABC, abstractmethod
from threading import Lock
from typing import Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

Clock = Callable[[], float]


class CacheInterface(ABC, Generic[T]):
    """Abstract interface for cache implementations."""

    @abstractmethod
    def get(self, key: str) -> Optional[T]:
        """Get value by key, returns None if not found or expired."""
        pass

    @abstractmethod
    def set(self, key: str, value: T, ttl_seconds: Optional[float] = None) -> None:
        """Set value with optional TTL."""
        pass


class CacheEntry(Generic[T]):
    """Single cache entry with expiration tracking."""

    def __init__(self, value: T, expires_at: Optional[float]) -> None:
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: float) -> bool:
        """Check if entry has expired at the given instant."""
        if self.expires_at is None:
            return False
        return now >= self.expires_at


class InMemoryCache(CacheInterface[T]):
    """
    Thread-safe in-memory cache with TTL support.

    The clock is injectable so tests can move time forward explicitly
    instead of sleeping.

    Usage:
        cache: CacheInterface[CatalogItem] = InMemoryCache(default_ttl_seconds=3600)
        cache.set("movie:550", item)
        item = cache.get("movie:550")
    """

    def __init__(
        self,
        default_ttl_seconds: Optional[float] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._store: Dict[str, CacheEntry[T]] = {}
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self._lock = Lock()

    def get(self, key: str) -> Optional[T]:
        """Get value by key, returns None if not found or expired."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._store[key]
                return None
            return entry.value

    def set(self, key: str, value: T, ttl_seconds: Optional[float] = None) -> None:
        """Set value with optional TTL. Last writer wins on the same key."""
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        expires_at = self._clock() + ttl if ttl is not None else None
        with self._lock:
            self._store[key] = CacheEntry(value, expires_at)

    def size(self) -> int:
        """Return number of entries (including possibly expired)."""
        with self._lock:
            return len(self._store)
