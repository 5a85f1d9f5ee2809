"""Tests for settings loading."""

import pytest

from crypto_signal.config import DEFAULT_PRICE_URL, Settings

ENV_VARS = [
    "COINMARKETCAP_API_KEY",
    "PROXY_URL",
    "CACHE_TTL",
    "REQUEST_TIMEOUT",
    "REQUEST_INTERVAL",
    "COIN_ID",
    "VS_CURRENCY",
    "PRICE_DAYS",
    "PI_CYCLE_DAYS",
    "REPORT_TZ",
    "LOG_LEVEL",
    "SENTIMENT_URL",
    "PRICE_URL",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettingsFromEnv:
    """Tests for Settings.from_env."""

    def test_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = Settings.from_env(load_env_file=False)

        assert settings.api_key == ""
        assert settings.proxy_url is None
        assert settings.proxies == {}
        assert settings.cache_ttl == 300.0
        assert settings.request_timeout == 10.0
        assert settings.price_days == 200
        assert settings.pi_cycle_days == 365
        assert settings.report_tz == "UTC"
        assert settings.price_url == DEFAULT_PRICE_URL

    def test_overrides(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("COINMARKETCAP_API_KEY", "abc")
        clean_env.setenv("PROXY_URL", "http://127.0.0.1:7890")
        clean_env.setenv("CACHE_TTL", "60")
        clean_env.setenv("REQUEST_TIMEOUT", "2.5")
        clean_env.setenv("COIN_ID", "Ethereum")
        clean_env.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env(load_env_file=False)

        assert settings.api_key == "abc"
        assert settings.proxies == {
            "http": "http://127.0.0.1:7890",
            "https": "http://127.0.0.1:7890",
        }
        assert settings.cache_ttl == 60.0
        assert settings.request_timeout == 2.5
        assert settings.coin_id == "ethereum"
        assert settings.log_level == "DEBUG"

    def test_dotenv_file(self, clean_env: pytest.MonkeyPatch, tmp_path) -> None:
        (tmp_path / ".env").write_text("COINMARKETCAP_API_KEY=from-file\n", encoding="utf-8")
        clean_env.chdir(tmp_path)

        try:
            assert Settings.from_env().api_key == "from-file"
        finally:
            clean_env.delenv("COINMARKETCAP_API_KEY", raising=False)

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("CACHE_TTL", "soon"),
            ("CACHE_TTL", "0"),
            ("CACHE_TTL", "nan"),
            ("REQUEST_INTERVAL", "inf"),
            ("REQUEST_TIMEOUT", "-inf"),
            ("REQUEST_TIMEOUT", "-1"),
            ("PRICE_DAYS", "1.5"),
            ("REPORT_TZ", "Mars/Olympus"),
            ("COIN_ID", "bit coin"),
        ],
    )
    def test_invalid_values(self, clean_env: pytest.MonkeyPatch, name: str, value: str) -> None:
        clean_env.setenv(name, value)

        with pytest.raises(ValueError):
            Settings.from_env(load_env_file=False)


class TestSettingsValidation:
    """Tests for Settings construction."""

    @pytest.mark.parametrize("field", ["cache_ttl", "request_timeout", "request_interval"])
    def test_non_finite_rejected(self, field: str) -> None:
        with pytest.raises(ValueError, match="finite"):
            Settings(**{field: float("nan")})

    def test_empty_proxy_is_none(self) -> None:
        settings = Settings(proxy_url="")

        assert settings.proxy_url is None
        assert settings.proxies == {}
