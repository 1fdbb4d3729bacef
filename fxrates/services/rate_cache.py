"""In-process read-through cache for exchange rate reads.

Only the two hottest read shapes are cached: the full collection and single
rates by id. Filtered and aggregate queries always go to the store.

Every entry has two expiry bounds, an absolute TTL counted from insertion and
a sliding idle timeout counted from the last hit. An entry is live only while
both bounds hold.

Writers must invalidate the affected keys after mutating the store. Loads
that were already running when their key was invalidated still return their
result to their own caller, but the result is not installed in the cache, so
a read that starts after ``invalidate`` returns never sees pre-write data.

The cache must never fail a request. Internal faults are logged and treated
as a miss; a fault while invalidating drops every entry.
"""

import itertools
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheKeys:
    """Key scheme for cached rate reads."""

    RATES = "rates"
    ALL_RATES = "rates:all"

    @staticmethod
    def rate(rate_id: int) -> str:
        """Key for a single rate looked up by id."""
        return f"{CacheKeys.RATES}:{rate_id}"

    @staticmethod
    def entity_kind(key: str) -> str:
        """Entity kind a key belongs to (the part before the first colon)."""
        return key.split(":", 1)[0]


@dataclass
class CacheEntry:
    """A cached value with its expiry bookkeeping."""

    value: Any
    inserted_at: float
    last_access: float

    def is_live(self, now: float, absolute_ttl: float, sliding_ttl: float) -> bool:
        return now - self.inserted_at < absolute_ttl and now - self.last_access < sliding_ttl


class RateCache:
    """Thread-safe read-through cache with absolute and sliding expiry.

    Example:
        cache = RateCache(absolute_ttl=300, sliding_ttl=120)
        rates = cache.get_or_load(CacheKeys.ALL_RATES, repository.find_all)
        ...
        cache.invalidate(CacheKeys.ALL_RATES)
    """

    def __init__(
        self,
        absolute_ttl: float = 300.0,
        sliding_ttl: float = 120.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if absolute_ttl <= 0 or sliding_ttl <= 0:
            raise ValueError("Cache TTLs must be positive")

        self.absolute_ttl = absolute_ttl
        self.sliding_ttl = sliding_ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry] = {}
        # key -> tickets of loads in flight; invalidation drops the whole set
        self._inflight: dict[str, set[int]] = {}
        self._tickets = itertools.count(1)
        self._hits = 0
        self._misses = 0
        self._next_sweep = clock() + sliding_ttl

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        """Return the live entry for ``key`` or compute, store and return it.

        Exceptions raised by ``loader`` propagate and nothing is cached.
        """
        try:
            hit, value, ticket = self._lookup(key)
        except Exception as e:
            logger.warning(f"Rate cache lookup failed for {key}, reading through: {e}")
            hit, value, ticket = False, None, None

        if hit:
            return value

        try:
            value = loader()
        except Exception:
            if ticket is not None:
                self._release(key, ticket)
            raise

        if ticket is not None:
            try:
                self._store(key, value, ticket)
            except Exception as e:
                logger.warning(f"Rate cache store failed for {key}: {e}")

        return value

    def invalidate(self, key: str) -> None:
        """Remove ``key`` and void any load of it still in flight. Idempotent."""
        try:
            with self._lock:
                self._entries.pop(key, None)
                self._inflight.pop(key, None)
        except Exception as e:
            logger.warning(f"Rate cache invalidation failed for {key}, dropping all entries: {e}")
            self._reset()
            return
        logger.debug(f"Rate cache invalidated {key}")

    def invalidate_all_for(self, entity_kind: str) -> None:
        """Remove every key of ``entity_kind``, collection and single-record keys alike."""
        try:
            with self._lock:
                for key in [k for k in self._entries if CacheKeys.entity_kind(k) == entity_kind]:
                    del self._entries[key]
                for key in [k for k in self._inflight if CacheKeys.entity_kind(k) == entity_kind]:
                    del self._inflight[key]
        except Exception as e:
            logger.warning(
                f"Rate cache invalidation failed for kind {entity_kind}, dropping all entries: {e}"
            )
            self._reset()
            return
        logger.debug(f"Rate cache invalidated all {entity_kind} entries")

    def purge_expired(self) -> int:
        """Drop dead entries. Returns how many were removed."""
        with self._lock:
            return self._purge_locked(self._clock())

    def clear(self) -> None:
        """Drop every entry and void all in-flight loads."""
        with self._lock:
            self._entries.clear()
            self._inflight.clear()

    def stats(self) -> dict[str, int]:
        """Hit/miss counters and current entry count."""
        with self._lock:
            return {"hits": self._hits, "misses": self._misses, "entries": len(self._entries)}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _lookup(self, key: str) -> tuple[bool, Any, int | None]:
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is not None:
                if entry.is_live(now, self.absolute_ttl, self.sliding_ttl):
                    entry.last_access = now
                    self._hits += 1
                    logger.debug(f"Rate cache hit: {key}")
                    return True, entry.value, None
                del self._entries[key]

            self._misses += 1
            ticket = next(self._tickets)
            self._inflight.setdefault(key, set()).add(ticket)
            logger.debug(f"Rate cache miss: {key}")
            return False, None, ticket

    def _store(self, key: str, value: Any, ticket: int) -> None:
        with self._lock:
            if not self._take_ticket(key, ticket):
                logger.debug(f"Discarding load of {key} invalidated while in flight")
                return
            now = self._clock()
            self._entries[key] = CacheEntry(value=value, inserted_at=now, last_access=now)
            if now >= self._next_sweep:
                self._purge_locked(now)

    def _release(self, key: str, ticket: int) -> None:
        try:
            with self._lock:
                self._take_ticket(key, ticket)
        except Exception as e:
            logger.warning(f"Rate cache release failed for {key}: {e}")

    def _take_ticket(self, key: str, ticket: int) -> bool:
        tickets = self._inflight.get(key)
        if not tickets or ticket not in tickets:
            return False
        tickets.discard(ticket)
        if not tickets:
            del self._inflight[key]
        return True

    def _purge_locked(self, now: float) -> int:
        expired = [
            key
            for key, entry in self._entries.items()
            if not entry.is_live(now, self.absolute_ttl, self.sliding_ttl)
        ]
        for key in expired:
            del self._entries[key]
        self._next_sweep = now + self.sliding_ttl
        if expired:
            logger.debug(f"Rate cache purged {len(expired)} expired entries")
        return len(expired)

    def _reset(self) -> None:
        # Used when the lock or maps are unusable; plain rebinding needs neither
        self._entries = {}
        self._inflight = {}
