"""TTL-bounded read-through cache for ledger lookups and aggregate queries.

One instance is built per application by the container and shared by every
request. Values live in a plain dict keyed by namespaced strings
(``balance:<wallet>``, ``transactions:<wallet>:<suffix>``, ...). Only
single-key operations are performed, so no lock is needed inside one event
loop.
"""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Union

from identity_server.core.config import CacheSettings

logger = logging.getLogger(__name__)

WALLET_NAMESPACES = ("balance", "transactions", "tokens", "profile")
NETWORK_STATUS_KEY = "network:status"

ComputeFn = Callable[[], Union[Any, Awaitable[Any]]]


def cache_key(namespace: str, wallet_key: str, *suffix: Any) -> str:
    parts = [namespace, wallet_key, *(str(part) for part in suffix)]
    return ":".join(parts)


@dataclass(slots=True)
class CacheStats:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0

    def as_dict(self) -> dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "sets": self.sets, "deletes": self.deletes}


class CacheService:
    def __init__(
        self,
        settings: CacheSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or CacheSettings()
        self._clock = clock
        self._store: dict[str, tuple[Any, float]] = {}
        self._stats = CacheStats()
        self._next_purge = clock() + self.settings.check_period

    def get(self, key: str) -> Any | None:
        entry = self._store.get(key)
        if entry is None:
            self._stats.misses += 1
            logger.debug("Cache miss: %s", key)
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._store[key]
            self._stats.misses += 1
            logger.debug("Cache expired: %s", key)
            return None
        self._stats.hits += 1
        logger.debug("Cache hit: %s", key)
        return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl = self.settings.balance_ttl if ttl is None else ttl
        now = self._clock()
        if now >= self._next_purge:
            self.purge_expired()
        self._store[key] = (value, now + ttl)
        self._stats.sets += 1
        logger.debug("Cache set: %s (TTL: %ss)", key, ttl)

    def delete(self, key: str) -> bool:
        removed = self._store.pop(key, None) is not None
        if removed:
            self._stats.deletes += 1
        return removed

    def delete_many(self, keys: Iterable[str]) -> int:
        return sum(1 for key in list(keys) if self.delete(key))

    def has(self, key: str) -> bool:
        entry = self._store.get(key)
        return entry is not None and self._clock() < entry[1]

    def keys(self) -> list[str]:
        self.purge_expired()
        return list(self._store)

    def get_ttl(self, key: str) -> float | None:
        """Seconds left before ``key`` expires, or None when absent."""
        entry = self._store.get(key)
        if entry is None:
            return None
        remaining = entry[1] - self._clock()
        return remaining if remaining > 0 else None

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._store.items() if now >= expires_at]
        for key in expired:
            del self._store[key]
        self._next_purge = now + self.settings.check_period
        if expired:
            logger.debug("Purged %d expired cache entries", len(expired))
        return len(expired)

    def flush(self) -> None:
        self._store.clear()
        logger.info("Cache flushed")

    def stats(self) -> dict[str, int]:
        data = self._stats.as_dict()
        self.purge_expired()
        data["keys"] = len(self._store)
        return data

    async def get_or_compute(self, key: str, ttl: float, compute: ComputeFn) -> Any:
        """Return the cached value for ``key`` or compute, store and return it.

        Concurrent misses on the same key may each call ``compute``; the last
        write wins. ``None`` results are returned but not stored.
        """
        value = self.get(key)
        if value is not None:
            return value

        logger.debug("Fetching data for cache key: %s", key)
        value = compute()
        if inspect.isawaitable(value):
            value = await value
        if value is not None:
            self.set(key, value, ttl)
        return value

    def invalidate(self, wallet_key: str) -> int:
        """Drop every wallet-scoped entry for ``wallet_key``."""
        exact = {f"{namespace}:{wallet_key}" for namespace in WALLET_NAMESPACES}
        prefixes = tuple(f"{key}:" for key in exact)
        doomed = [key for key in self._store if key in exact or key.startswith(prefixes)]
        count = self.delete_many(doomed)
        logger.debug("Invalidated %d cache entries for %s", count, wallet_key)
        return count


__all__ = ["CacheService", "CacheStats", "WALLET_NAMESPACES", "NETWORK_STATUS_KEY", "cache_key"]
