"""Data layer: caching and request pacing. Feed access lives in crypto_signal.data.feeds."""

from crypto_signal.data.cache import CacheKey, MarketCache
from crypto_signal.data.pacing import RequestPacer, Upstream

__all__ = [
    "CacheKey",
    "MarketCache",
    "RequestPacer",
    "Upstream",
]
