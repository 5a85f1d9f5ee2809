"""Pytest configuration and fixtures."""

from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pytest
import requests

from crypto_signal.config import Settings
from crypto_signal.context import RunContext
from crypto_signal.data.cache import MarketCache
from crypto_signal.models import PriceSeries

START_MS = 1_672_531_200_000  # 2023-01-01T00:00:00Z
DAY_MS = 86_400_000


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload: Any, status_code: int = 200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    """
    Routes GETs to canned responses.

    `sentiment` answers the fear-and-greed URL; `prices` maps the requested
    `days` to a response. A route holding an exception raises it.
    """

    def __init__(self, sentiment: Any = None, prices: dict[int, Any] | None = None):
        self.sentiment = sentiment
        self.prices = prices or {}
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, params=None, headers=None, timeout=None) -> FakeResponse:
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if "fear-and-greed" in url:
            route = self.sentiment
        else:
            route = self.prices.get(params["days"])
        if route is None:
            raise requests.ConnectionError(f"no route for {url} {params}")
        if isinstance(route, Exception):
            raise route
        return route

    def close(self) -> None:
        pass


def sentiment_payload(value: int = 15, classification: str = "Extreme fear") -> dict[str, Any]:
    """fear-and-greed/latest response body."""
    return {
        "data": {
            "value": value,
            "value_classification": classification,
            "update_time": "2024-01-02T03:04:05.000Z",
        },
        "status": {"error_code": "0"},
    }


def market_chart_payload(closes: list[float], volumes: list[float] | None = None) -> dict[str, Any]:
    """market_chart response body with one point per day."""
    if volumes is None:
        volumes = [1e9 + i * 1e6 for i in range(len(closes))]
    return {
        "prices": [[START_MS + i * DAY_MS, c] for i, c in enumerate(closes)],
        "market_caps": [[START_MS + i * DAY_MS, c * 1e7] for i, c in enumerate(closes)],
        "total_volumes": [[START_MS + i * DAY_MS, v] for i, v in enumerate(volumes)],
    }


def rising_closes(n: int, start: float = 100.0) -> list[float]:
    return [start + i for i in range(n)]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Settings with pacing disabled."""
    return Settings(api_key="test-key", request_interval=0.0)


@pytest.fixture
def fake_session() -> FakeSession:
    """Session answering every feed with healthy data."""
    return FakeSession(
        sentiment=FakeResponse(sentiment_payload()),
        prices={
            200: FakeResponse(market_chart_payload(rising_closes(201))),
            365: FakeResponse(market_chart_payload(rising_closes(366))),
        },
    )


@pytest.fixture
def ctx(settings: Settings, fake_session: FakeSession, clock: FakeClock) -> Iterator[RunContext]:
    """Run context wired to the fake session and clock."""
    context = RunContext(
        settings=settings,
        cache=MarketCache(ttl=settings.cache_ttl, clock=clock),
        session=fake_session,
        executor=ThreadPoolExecutor(max_workers=3),
        clock=clock,
    )
    yield context
    context.close()


@pytest.fixture
def sample_price_series() -> PriceSeries:
    """Sample 30-point series for indicator testing."""
    closes = [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5,
              107.0, 108.0, 107.5, 109.0, 110.0, 109.5, 111.0, 112.0, 111.5, 113.0,
              114.0, 113.5, 115.0, 116.0, 115.5, 117.0, 118.0, 117.5, 119.0, 120.0]
    return PriceSeries(closes=tuple(closes), volumes=tuple([1_000_000.0] * len(closes)))
