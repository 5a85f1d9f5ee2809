"""Short-lived memoization of fetched data and derived results."""

import logging
import shutil
import tempfile
import time
from collections.abc import Callable
from enum import Enum
from typing import Any

import diskcache

logger = logging.getLogger(__name__)


class CacheKey(str, Enum):
    """One key per cached artifact."""

    SENTIMENT = "sentiment"
    PRICE_HISTORY = "price_history"
    LONG_PRICE_HISTORY = "long_price_history"
    PI_CYCLE = "pi_cycle"


class MarketCache:
    """
    TTL cache for one process.

    Backed by a diskcache store in a private temporary directory that is
    removed on close, so nothing survives the run. Expiry is judged against
    the injected clock: a value written at T is served for reads before
    T + ttl and is absent from T + ttl on.
    """

    def __init__(
        self,
        ttl: float = 300.0,
        clock: Callable[[], float] = time.time,
        directory: str | None = None,
    ):
        self._owns_directory = directory is None
        if directory is None:
            directory = tempfile.mkdtemp(prefix="crypto-signal-cache-")
        self.directory = directory
        self.cache: diskcache.Cache = diskcache.Cache(directory)
        self.ttl = ttl
        self._clock = clock

    def set(self, key: CacheKey, value: Any) -> None:
        """Store value under key; it expires ttl seconds from now."""
        entry = {"value": value, "stored_at": self._clock()}
        self.cache.set(key.value, entry, expire=self.ttl)

    def get(self, key: CacheKey) -> Any | None:
        """
        Get a cached value.

        Args:
            key: Cache key

        Returns:
            Cached value, or None if missing or expired
        """
        entry = self.cache.get(key.value)
        if entry is None:
            return None
        if self._clock() >= entry["stored_at"] + self.ttl:
            self.cache.delete(key.value)
            return None
        logger.debug(f"cache hit: {key.value}")
        return entry["value"]

    def __contains__(self, key: CacheKey) -> bool:
        return self.get(key) is not None

    def clear(self) -> None:
        """Clear all cached data."""
        self.cache.clear()

    def close(self) -> None:
        """Close the store and remove its directory if this cache created it."""
        self.cache.close()
        if self._owns_directory:
            shutil.rmtree(self.directory, ignore_errors=True)
