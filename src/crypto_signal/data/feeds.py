"""Async access to the sentiment and price history feeds."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import pandas as pd
import requests

from crypto_signal.context import RunContext
from crypto_signal.data.cache import CacheKey
from crypto_signal.data.pacing import Upstream
from crypto_signal.models import (
    Classification,
    FailureReason,
    Outcome,
    PriceSeries,
    SentimentReading,
    Unavailable,
)
from crypto_signal.utils.series import frame_to_series, standardize_market_chart
from crypto_signal.utils.validators import HistoryParams

logger = logging.getLogger(__name__)


class MalformedPayloadError(ValueError):
    """Raised when an upstream response lacks required fields or has bad types."""


@dataclass(frozen=True)
class MarketData:
    """Outcomes of the three concurrent fetches of one run."""

    sentiment: Outcome[SentimentReading]
    prices: Outcome[PriceSeries]
    long_prices: Outcome[PriceSeries]


async def _get_json(
    ctx: RunContext,
    upstream: Upstream,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    """
    Paced GET returning decoded JSON. The blocking call runs in the executor.

    Raises:
        requests.RequestException: On transport failure, timeout or HTTP error status
        MalformedPayloadError: If the body is not JSON
    """
    await ctx.pacer(upstream).wait()

    def _fetch() -> Any:
        response = ctx.session.get(
            url,
            params=params,
            headers=headers,
            timeout=ctx.settings.request_timeout,
        )
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            raise MalformedPayloadError(f"response is not JSON: {e}") from e

    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(ctx.executor, _fetch)


def parse_sentiment(payload: Any) -> SentimentReading:
    """
    Parse a fear-and-greed/latest response.

    Raises:
        MalformedPayloadError: If data.value, data.value_classification or
            data.update_time is missing or invalid
    """
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        raise MalformedPayloadError("sentiment payload has no 'data' object")

    missing = [k for k in ("value", "value_classification", "update_time") if data.get(k) is None]
    if missing:
        raise MalformedPayloadError(f"sentiment payload missing {', '.join(missing)}")

    try:
        value = int(float(data["value"]))
        classification = Classification.parse(data["value_classification"])
        observed_at = pd.Timestamp(data["update_time"])
        if observed_at.tzinfo is None:
            observed_at = observed_at.tz_localize("UTC")
        return SentimentReading(
            value=value,
            classification=classification,
            observed_at=observed_at.tz_convert("UTC").to_pydatetime(),
        )
    except (TypeError, ValueError) as e:
        raise MalformedPayloadError(f"invalid sentiment payload: {e}") from e


def parse_market_chart(payload: Any) -> PriceSeries:
    """
    Parse a market_chart response into a PriceSeries.

    Raises:
        MalformedPayloadError: If prices/total_volumes are missing or unusable
    """
    try:
        return frame_to_series(standardize_market_chart(payload))
    except (TypeError, ValueError) as e:
        raise MalformedPayloadError(f"invalid market_chart payload: {e}") from e


async def fetch_sentiment(ctx: RunContext) -> Outcome[SentimentReading]:
    """
    Fetch the latest Fear & Greed reading.

    Returns:
        SentimentReading, or Unavailable on network failure or a malformed payload
    """
    cached = ctx.cache.get(CacheKey.SENTIMENT)
    if cached is not None:
        return cached

    if not ctx.settings.api_key:
        logger.warning("COINMARKETCAP_API_KEY is not set; the sentiment feed will likely reject the request")

    try:
        payload = await _get_json(
            ctx,
            Upstream.SENTIMENT,
            ctx.settings.sentiment_url,
            headers={"X-CMC_PRO_API_KEY": ctx.settings.api_key},
        )
        reading = parse_sentiment(payload)
    except MalformedPayloadError as e:
        logger.warning(f"fetch_sentiment: {e}")
        return Unavailable(FailureReason.MALFORMED_PAYLOAD, str(e))
    except requests.RequestException as e:
        logger.warning(f"fetch_sentiment: request failed: {e}")
        return Unavailable(FailureReason.NETWORK_ERROR, str(e))

    ctx.cache.set(CacheKey.SENTIMENT, reading)
    return reading


async def fetch_price_history(
    ctx: RunContext,
    days: int,
    key: CacheKey = CacheKey.PRICE_HISTORY,
) -> Outcome[PriceSeries]:
    """
    Fetch daily close/volume history.

    Args:
        ctx: Run context
        days: Number of days of history to request
        key: Cache slot for this window

    Returns:
        PriceSeries, or Unavailable on network failure or a malformed payload
    """
    cached = ctx.cache.get(key)
    if cached is not None:
        return cached

    params = HistoryParams(
        coin_id=ctx.settings.coin_id,
        vs_currency=ctx.settings.vs_currency,
        days=days,
    )
    operation_name = f"fetch_price_history({params.describe()})"

    try:
        payload = await _get_json(
            ctx,
            Upstream.PRICE,
            ctx.settings.price_url.format(coin_id=params.coin_id),
            params=params.to_query(),
        )
        series = parse_market_chart(payload)
    except MalformedPayloadError as e:
        logger.warning(f"{operation_name}: {e}")
        return Unavailable(FailureReason.MALFORMED_PAYLOAD, str(e))
    except requests.RequestException as e:
        logger.warning(f"{operation_name}: request failed: {e}")
        return Unavailable(FailureReason.NETWORK_ERROR, str(e))

    logger.debug(f"{operation_name}: {len(series)} points")
    ctx.cache.set(key, series)
    return series


async def fetch_market_data(ctx: RunContext) -> MarketData:
    """
    Fetch sentiment, primary history and the long Pi Cycle history concurrently.

    The two history windows stay separate requests.
    """
    sentiment, prices, long_prices = await asyncio.gather(
        fetch_sentiment(ctx),
        fetch_price_history(ctx, ctx.settings.price_days, CacheKey.PRICE_HISTORY),
        fetch_price_history(ctx, ctx.settings.pi_cycle_days, CacheKey.LONG_PRICE_HISTORY),
    )
    return MarketData(sentiment=sentiment, prices=prices, long_prices=long_prices)
