"""
In-Memory TTL Cache

Key/value store with per-entry expiry and bounded size with
least-recently-used eviction. Lifetimes are passed per call so each data
category keeps its own freshness:
- Current observations: 5 minutes (RAWS updates every 15-60 min)
- Station metadata: 1 hour (rarely changes)
- Historical data: 24 hours (archival, doesn't change)
- NWS alerts: 5 minutes (time-sensitive)

Every operation is synchronous and never awaits, so under asyncio each call
is atomic with respect to other in-flight requests.
"""

import asyncio
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastmcp.utilities.logging import get_logger


@dataclass
class CacheEntry:
    key: str
    value: Any
    created_at: float
    last_accessed: float
    expires_at: float
    hits: int = 0

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLCache:
    """
    LRU-bounded cache with per-entry time-to-live.

    Entries are kept in access order: the first entry of the ordered dict
    is always the least recently accessed.
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            max_size: Maximum number of stored entries
            default_ttl: Lifetime in seconds when set() gets no ttl
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self.logger = get_logger(self.__class__.__name__)
        self.max_size = max_size
        self.default_ttl = default_ttl
        self._clock = clock
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()

        self.logger.debug(
            f"Cache initialized (max_size={max_size}, default_ttl={default_ttl}s)"
        )

    def get(self, key: str) -> Optional[Any]:
        """
        Get a live value.

        Returns:
            The cached value, or None if missing or expired
        """
        entry = self._store.get(key)
        if entry is None:
            self.logger.debug(f"Cache miss: {key}")
            return None

        now = self._clock()
        if entry.is_expired(now):
            self.logger.debug(f"Cache expired: {key}")
            del self._store[key]
            return None

        entry.hits += 1
        entry.last_accessed = now
        self._store.move_to_end(key)
        self.logger.debug(f"Cache hit: {key} (age {now - entry.created_at:.1f}s)")
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """
        Store a value, replacing any existing entry for the key.

        At capacity the least recently accessed entry is evicted first,
        unless the key is already present.
        """
        if key not in self._store and len(self._store) >= self.max_size:
            self._evict_lru()

        now = self._clock()
        lifetime = self.default_ttl if ttl is None else ttl
        self._store[key] = CacheEntry(
            key=key,
            value=value,
            created_at=now,
            last_accessed=now,
            expires_at=now + lifetime,
        )
        self._store.move_to_end(key)
        self.logger.debug(f"Cache set: {key} (ttl {lifetime}s, size {len(self._store)})")

    def has(self, key: str) -> bool:
        """True if the key holds a live entry. Does not count as an access."""
        entry = self._store.get(key)
        if entry is None:
            return False
        if entry.is_expired(self._clock()):
            del self._store[key]
            return False
        return True

    def delete(self, key: str) -> bool:
        deleted = self._store.pop(key, None) is not None
        if deleted:
            self.logger.debug(f"Cache delete: {key}")
        return deleted

    def clear(self) -> None:
        size = len(self._store)
        self._store.clear()
        self.logger.info(f"Cache cleared ({size} entries removed)")

    def stats(self) -> dict:
        now = self._clock()
        entries = list(self._store.values())
        expired = sum(1 for entry in entries if entry.is_expired(now))
        return {
            "size": len(entries),
            "max_size": self.max_size,
            "hits": sum(entry.hits for entry in entries),
            "active": len(entries) - expired,
            "expired": expired,
        }

    def purge_expired(self) -> int:
        """
        Remove every expired entry.

        Returns:
            int: Number of entries removed
        """
        now = self._clock()
        expired_keys = [key for key, entry in self._store.items() if entry.is_expired(now)]
        for key in expired_keys:
            del self._store[key]

        if expired_keys:
            self.logger.debug(
                f"Cache cleanup removed {len(expired_keys)}, {len(self._store)} remaining"
            )
        return len(expired_keys)

    async def run_cleanup(self, interval: float) -> None:
        """Sweep expired entries every `interval` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            self.purge_expired()

    def _evict_lru(self) -> None:
        if not self._store:
            return
        key, _ = self._store.popitem(last=False)
        self.logger.debug(f"Cache LRU eviction: {key}")

    def __len__(self) -> int:
        return len(self._store)
