"""Runtime settings loaded from the environment."""

import math
import os
from dataclasses import dataclass

import pytz
from dotenv import find_dotenv, load_dotenv

from crypto_signal.utils.validators import HistoryParams

DEFAULT_SENTIMENT_URL = "https://pro-api.coinmarketcap.com/v3/fear-and-greed/latest"
DEFAULT_PRICE_URL = "https://api.coingecko.com/api/v3/coins/{coin_id}/market_chart"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'") from None
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got '{raw}'")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from None


@dataclass(frozen=True)
class Settings:
    """Immutable run configuration."""

    api_key: str = ""
    proxy_url: str | None = None
    cache_ttl: float = 300.0
    request_timeout: float = 10.0
    request_interval: float = 1.0
    coin_id: str = "bitcoin"
    vs_currency: str = "usd"
    price_days: int = 200
    pi_cycle_days: int = 365
    report_tz: str = "UTC"
    log_level: str = "INFO"
    sentiment_url: str = DEFAULT_SENTIMENT_URL
    price_url: str = DEFAULT_PRICE_URL

    def __post_init__(self) -> None:
        for name, value in (
            ("CACHE_TTL", self.cache_ttl),
            ("REQUEST_TIMEOUT", self.request_timeout),
            ("REQUEST_INTERVAL", self.request_interval),
        ):
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")
        if self.cache_ttl <= 0:
            raise ValueError(f"CACHE_TTL must be positive, got {self.cache_ttl}")
        if self.request_timeout <= 0:
            raise ValueError(f"REQUEST_TIMEOUT must be positive, got {self.request_timeout}")
        if self.request_interval < 0:
            raise ValueError(f"REQUEST_INTERVAL must be >= 0, got {self.request_interval}")
        if self.price_days < 1 or self.pi_cycle_days < 1:
            raise ValueError("PRICE_DAYS and PI_CYCLE_DAYS must be >= 1")
        try:
            pytz.timezone(self.report_tz)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown REPORT_TZ '{self.report_tz}'") from None

        object.__setattr__(self, "proxy_url", self.proxy_url or None)
        object.__setattr__(self, "coin_id", self.coin_id.lower().strip())
        object.__setattr__(self, "vs_currency", self.vs_currency.lower().strip())
        object.__setattr__(self, "log_level", self.log_level.upper().strip())

        # Raises ValueError on malformed ids
        HistoryParams(coin_id=self.coin_id, vs_currency=self.vs_currency, days=self.price_days)

    @property
    def proxies(self) -> dict[str, str]:
        """requests-style proxy mapping (empty when no proxy is configured)."""
        if not self.proxy_url:
            return {}
        return {"http": self.proxy_url, "https": self.proxy_url}

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """
        Build settings from environment variables.

        A .env file in the working directory is loaded first (existing
        variables win).

        Raises:
            ValueError: If a variable holds an invalid value
        """
        if load_env_file:
            load_dotenv(find_dotenv(usecwd=True))

        return cls(
            api_key=os.environ.get("COINMARKETCAP_API_KEY", ""),
            proxy_url=os.environ.get("PROXY_URL", "").strip() or None,
            cache_ttl=_env_float("CACHE_TTL", 300.0),
            request_timeout=_env_float("REQUEST_TIMEOUT", 10.0),
            request_interval=_env_float("REQUEST_INTERVAL", 1.0),
            coin_id=os.environ.get("COIN_ID", "bitcoin"),
            vs_currency=os.environ.get("VS_CURRENCY", "usd"),
            price_days=_env_int("PRICE_DAYS", 200),
            pi_cycle_days=_env_int("PI_CYCLE_DAYS", 365),
            report_tz=os.environ.get("REPORT_TZ", "UTC"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            sentiment_url=os.environ.get("SENTIMENT_URL", DEFAULT_SENTIMENT_URL),
            price_url=os.environ.get("PRICE_URL", DEFAULT_PRICE_URL),
        )
