"""Explicit per-run context: settings, cache, HTTP session, pacing."""

import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import requests

from crypto_signal import VERSION
from crypto_signal.config import Settings
from crypto_signal.data.cache import MarketCache
from crypto_signal.data.pacing import RequestPacer, Upstream


@dataclass
class RunContext:
    """
    Everything a fetch or compute call needs, passed in explicitly.

    Use `RunContext.create(settings)` as a context manager so the session,
    executor and cache directory are released when the run ends.
    """

    settings: Settings
    cache: MarketCache
    session: requests.Session
    executor: ThreadPoolExecutor
    pacers: dict[Upstream, RequestPacer] = field(default_factory=dict)
    clock: Callable[[], float] = time.time

    @classmethod
    def create(
        cls,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ) -> "RunContext":
        session = requests.Session()
        session.headers.update(
            {"Accept": "application/json", "User-Agent": f"crypto-signal/{VERSION}"}
        )
        if settings.proxies:
            session.proxies.update(settings.proxies)
            # Environment proxy variables must not override the configured one
            session.trust_env = False

        return cls(
            settings=settings,
            cache=MarketCache(ttl=settings.cache_ttl, clock=clock),
            session=session,
            # One worker per concurrent fetch: sentiment, primary and long history
            executor=ThreadPoolExecutor(max_workers=3),
            pacers={
                upstream: RequestPacer(settings.request_interval) for upstream in Upstream
            },
            clock=clock,
        )

    def pacer(self, upstream: Upstream) -> RequestPacer:
        if upstream not in self.pacers:
            self.pacers[upstream] = RequestPacer(self.settings.request_interval)
        return self.pacers[upstream]

    def close(self) -> None:
        self.session.close()
        self.executor.shutdown(wait=False, cancel_futures=True)
        self.cache.close()

    def __enter__(self) -> "RunContext":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
