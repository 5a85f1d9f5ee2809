"""Minimum-interval request pacing per upstream."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from enum import Enum


class Upstream(str, Enum):
    """Remote feeds, each paced independently."""

    SENTIMENT = "sentiment"
    PRICE = "price"


class RequestPacer:
    """
    Gate that spaces successive requests by at least `interval` seconds.

    Call `await pacer.wait()` immediately before each request to the upstream
    the pacer belongs to. The first request passes straight through.
    Clock and sleep are injectable so the gate can be tested without timers.
    """

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if interval < 0:
            raise ValueError(f"interval must be >= 0, got {interval}")
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None
        self._lock: asyncio.Lock | None = None

    def delay_for(self, now: float) -> float:
        """Seconds a request issued at `now` must wait."""
        if self._last is None:
            return 0.0
        return max(0.0, self._last + self.interval - now)

    async def wait(self) -> float:
        """
        Wait until the next request may be sent.

        Returns:
            Seconds waited
        """
        # Created lazily so the lock binds to the running loop
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            now = self._clock()
            delay = self.delay_for(now)
            if delay > 0:
                await self._sleep(delay)
            self._last = now + delay
            return delay
