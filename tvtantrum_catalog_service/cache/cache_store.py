"""In-memory TTL cache used by the catalog read path."""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class CacheKeys:
    """Key prefixes.

    Everything that may contain a show lives under ``lists:`` so that one
    pattern invalidation covers it after any admin write.
    """

    LISTS = "lists:"
    SHOW_LIST = "lists:shows:"
    FEATURED_SHOW = "lists:featured"
    POPULAR_SHOWS = "lists:popular:"
    SEARCH_RESULTS = "lists:search:"
    SIMILAR_SHOWS = "lists:similar:"
    UNIQUE_THEMES = "lists:unique-themes"
    CATEGORIES = "lists:categories:"
    ACTIVE_CATEGORIES = "lists:categories:active"
    ALL_CATEGORIES = "lists:categories:all"
    CATEGORY_SHOWS = "lists:categories:shows:"
    RESEARCH = "lists:research:"

    SHOW_BY_ID = "show:id:"
    RESEARCH_BY_ID = "research:id:"

    REFERENCE = "ref:"
    THEMES = "ref:themes"
    PLATFORMS = "ref:platforms"


class CacheTTL:
    """Freshness windows in seconds, picked by how often admins touch the data."""

    REFERENCE = 3600
    LIST = 1800
    DETAIL = 600
    SEARCH = 300
    DYNAMIC = 60


def make_key(prefix: str, *parts) -> str:
    """Join a prefix and key parts, e.g. ``make_key(CacheKeys.SHOW_BY_ID, 7)``."""
    if not parts:
        return prefix
    return prefix + ":".join(str(part) for part in parts)


@dataclass
class _Entry:
    value: Any
    expires_at: float


class CacheStore:
    """
    Thread-safe key/value store with per-entry TTL and a capacity bound.

    Values are stored by reference. Callers must not mutate what ``get``
    returns; copy first if a modified version is needed.

    Expired entries stay invisible to ``get`` but are kept until the next
    sweep so ``get_stale`` can serve them when storage is down.
    """

    def __init__(
            self,
            max_entries: int = 50000,
            default_ttl: int = CacheTTL.LIST,
            check_period: int = 300,
            clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize the cache.

        Args:
            max_entries: Upper bound on stored entries
            default_ttl: TTL used when ``set`` gets none
            check_period: Seconds between expired-entry sweeps
            clock: Monotonic time source (tests inject a fake one)
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.max_entries = max_entries
        self.default_ttl = default_ttl
        self.check_period = check_period
        self._clock = clock or time.monotonic
        self._entries: "OrderedDict[str, _Entry]" = OrderedDict()
        self._lock = threading.RLock()
        self._last_sweep = self._clock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._generation = 0

    @property
    def generation(self) -> int:
        """Counter bumped by every invalidate and clear."""
        with self._lock:
            return self._generation

    def get(self, key: str) -> Any | None:
        """Return the fresh value for key, or None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.expires_at <= self._clock():
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def get_stale(self, key: str) -> Any | None:
        """Return the value for key even if it has expired but not been swept."""
        with self._lock:
            entry = self._entries.get(key)
            return entry.value if entry is not None else None

    def set(
            self,
            key: str,
            value: Any,
            ttl: Optional[int] = None,
            generation: Optional[int] = None
    ) -> bool:
        """
        Store value under key, replacing any previous entry.

        Args:
            key: Cache key
            value: Value to store
            ttl: Seconds the entry stays fresh (default: default_ttl)
            generation: If given, store only when no invalidation happened
                since this ``generation`` was read

        Returns:
            True if the value was stored
        """
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug(f"Not caching '{key}': invalidated while loading")
                return False

            now = self._clock()
            if now - self._last_sweep >= self.check_period:
                self._sweep(now)

            self._entries.pop(key, None)
            if len(self._entries) >= self.max_entries:
                self._make_room(now)
            self._entries[key] = _Entry(value=value, expires_at=now + ttl)
        return True

    def invalidate(self, key_or_pattern: str, pattern: bool = False) -> int:
        """
        Remove an exact key, or every key containing the pattern.

        Args:
            key_or_pattern: Exact key, or substring when pattern=True
            pattern: Treat the argument as a substring pattern

        Returns:
            Number of entries removed
        """
        with self._lock:
            self._generation += 1
            if not pattern:
                return 1 if self._entries.pop(key_or_pattern, None) is not None else 0

            doomed = [key for key in self._entries if key_or_pattern in key]
            for key in doomed:
                del self._entries[key]

        if doomed:
            logger.debug(f"Invalidated {len(doomed)} cache entries matching '{key_or_pattern}'")
        return len(doomed)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._generation += 1
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def stats(self) -> dict:
        """Counters for monitoring endpoints."""
        with self._lock:
            return {
                "keys": len(self._entries),
                "max_entries": self.max_entries,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def _sweep(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        self._last_sweep = now
        if expired:
            logger.debug(f"Swept {len(expired)} expired cache entries")

    def _make_room(self, now: float) -> None:
        self._sweep(now)
        # Oldest-set entries sit at the front
        while len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)
            self._evictions += 1
