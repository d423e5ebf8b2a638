"""
In-memory TTL cache for upstream payloads.
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from shared.logging import get_logger


DEFAULT_TTL = 300


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class ResponseCache:
    """Key/value cache with per-entry expiry and hit/miss counters.

    Expiry is enforced on read; ``purge_expired`` lets a periodic sweep
    reclaim entries nobody reads again. All mutation happens under one
    lock, so readers see either the old or the new entry for a key.
    """

    def __init__(self, default_ttl: int = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self.logger = get_logger("coc-proxy.cache")

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.expires_at <= now:
                del self._entries[key]
                entry = None
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store value, replacing any existing entry for key."""
        effective_ttl = self.default_ttl if ttl is None else ttl
        if effective_ttl <= 0:
            raise ValueError("ttl must be positive")
        entry = CacheEntry(value=value, expires_at=self._clock() + effective_ttl)
        with self._lock:
            self._entries[key] = entry
        self.logger.debug("Cached value", key=key, ttl=effective_ttl)

    def keys(self) -> List[str]:
        """Keys of all unexpired entries."""
        now = self._clock()
        with self._lock:
            return [key for key, entry in self._entries.items() if entry.expires_at > now]

    def __len__(self) -> int:
        return len(self.keys())

    def stats(self) -> Dict[str, int]:
        now = self._clock()
        with self._lock:
            live = sum(1 for entry in self._entries.values() if entry.expires_at > now)
            return {"hits": self._hits, "misses": self._misses, "keys": live}

    def flush_all(self) -> int:
        """Drop every entry; returns how many live entries were removed."""
        now = self._clock()
        with self._lock:
            removed = sum(1 for entry in self._entries.values() if entry.expires_at > now)
            self._entries.clear()
        self.logger.info("Cache flushed", keys_cleared=removed)
        return removed

    def purge_expired(self) -> int:
        """Delete expired entries; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
            for key in expired:
                del self._entries[key]
        if expired:
            self.logger.debug("Purged expired entries", count=len(expired))
        return len(expired)
