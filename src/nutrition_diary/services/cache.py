"""TTL cache in front of food lookups."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

DEFAULT_TTL_SECONDS = 24 * 60 * 60


class Cache(Protocol):
    """Cache interface for lookup results."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object) -> None:
        """Store a value, replacing any existing entry."""


@dataclass
class CacheEntry:
    key: str
    value: object
    stored_at: datetime


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class LookupCache(Cache):
    """In-memory cache with lazy TTL expiry.

    Entries are only evicted when a stale key is read. Concurrent writers
    are not coordinated; the last ``set`` for a key wins.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object) -> None:
        """Store a value stamped with the current time."""
        self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())

    def __len__(self) -> int:
        return len(self._entries)


def search_cache_key(query: str, page_size: int, page_number: int) -> str:
    """Cache key for a search page."""
    return f"fdc:search:{query.lower()}:{page_size}:{page_number}"


def food_cache_key(source_id: str) -> str:
    """Cache key for a food detail lookup."""
    return f"fdc:food:{source_id}"
