"""Tests for building and releasing the per-run context."""

from pathlib import Path

import pytest

from conftest import FakeClock
from crypto_signal import VERSION
from crypto_signal.config import Settings
from crypto_signal.context import RunContext
from crypto_signal.data.cache import CacheKey
from crypto_signal.data.pacing import RequestPacer, Upstream

PROXY = "http://127.0.0.1:7890"


@pytest.fixture
def created():
    contexts = []

    def _create(settings: Settings, **kwargs) -> RunContext:
        ctx = RunContext.create(settings, **kwargs)
        contexts.append(ctx)
        return ctx

    yield _create
    for ctx in contexts:
        ctx.close()


class TestRunContext:
    """Tests for RunContext.create."""

    def test_proxy_applied_to_both_schemes(self, created) -> None:
        ctx = created(Settings(proxy_url=PROXY))

        assert ctx.session.proxies == {"http": PROXY, "https": PROXY}
        assert ctx.session.trust_env is False

    def test_no_proxy(self, created) -> None:
        ctx = created(Settings())

        assert ctx.session.proxies == {}
        assert ctx.session.trust_env is True

    def test_session_headers(self, created) -> None:
        ctx = created(Settings())

        assert ctx.session.headers["User-Agent"] == f"crypto-signal/{VERSION}"
        assert ctx.session.headers["Accept"] == "application/json"

    def test_one_pacer_per_upstream(self, created) -> None:
        ctx = created(Settings(request_interval=2.5))

        assert set(ctx.pacers) == set(Upstream)
        assert all(p.interval == 2.5 for p in ctx.pacers.values())
        assert ctx.pacer(Upstream.PRICE) is ctx.pacers[Upstream.PRICE]
        assert ctx.pacers[Upstream.PRICE] is not ctx.pacers[Upstream.SENTIMENT]

    def test_cache_follows_settings_and_clock(self, created) -> None:
        clock = FakeClock()
        ctx = created(Settings(cache_ttl=60.0), clock=clock)
        ctx.cache.set(CacheKey.SENTIMENT, "reading")

        clock.advance(59.0)
        assert ctx.cache.get(CacheKey.SENTIMENT) == "reading"
        clock.advance(1.0)
        assert ctx.cache.get(CacheKey.SENTIMENT) is None
        assert ctx.clock is clock

    def test_missing_pacer_created_lazily(self) -> None:
        with RunContext.create(Settings(request_interval=0.5)) as ctx:
            ctx.pacers.clear()

            pacer = ctx.pacer(Upstream.SENTIMENT)

            assert isinstance(pacer, RequestPacer)
            assert pacer.interval == 0.5

    def test_close_removes_cache_directory(self) -> None:
        with RunContext.create(Settings()) as ctx:
            directory = Path(ctx.cache.directory)
            assert directory.exists()

        assert not directory.exists()
