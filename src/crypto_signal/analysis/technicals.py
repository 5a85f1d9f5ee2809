"""Indicator wrappers: one value object or Unavailable per indicator."""

import logging
import math

import pandas as pd

from crypto_signal.models import (
    BollingerResult,
    FailureReason,
    IndicatorSet,
    MacdResult,
    ObvResult,
    Outcome,
    PiCycleResult,
    PriceSeries,
    Unavailable,
    VwapResult,
    is_available,
)
from crypto_signal.utils.indicators import (
    calculate_bollinger_bands,
    calculate_macd,
    calculate_obv,
    calculate_rsi,
    calculate_sma,
    calculate_vwap,
)

logger = logging.getLogger(__name__)

PI_CYCLE_FAST = 111
PI_CYCLE_SLOW = 350
PI_CYCLE_MULTIPLIER = 2.0


def _insufficient(name: str, needed: int, got: int) -> Unavailable:
    logger.warning(f"{name}: need at least {needed} points, got {got}")
    return Unavailable(FailureReason.INSUFFICIENT_DATA, f"need {needed} points, got {got}")


def _degenerate(name: str, detail: str) -> Unavailable:
    logger.warning(f"{name}: {detail}")
    return Unavailable(FailureReason.NUMERIC_DEGENERACY, detail)


def _last(series: pd.Series) -> float | None:
    """Last value as a finite float, or None."""
    if len(series) == 0:
        return None
    value = series.iloc[-1]
    if pd.isna(value) or not math.isfinite(value):
        return None
    return float(value)


def compute_sma(series: PriceSeries, period: int) -> Outcome[float]:
    """Mean of exactly the last `period` closes."""
    name = f"SMA({period})"
    if len(series) < period:
        return _insufficient(name, period, len(series))

    # Only the window itself enters the rolling sum
    value = _last(calculate_sma(series.close_series().tail(period), period))
    if value is None:
        return _degenerate(name, "non-finite result")
    return value


def compute_rsi(series: PriceSeries, period: int = 14) -> Outcome[float]:
    """Most recent Wilder RSI value."""
    name = f"RSI({period})"
    if len(series) < period + 1:
        return _insufficient(name, period + 1, len(series))

    value = _last(calculate_rsi(series.close_series(), period))
    if value is None:
        # Flat window: no gains and no losses
        return _degenerate(name, "no price movement in window")
    return value


def compute_macd(
    series: PriceSeries,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> Outcome[MacdResult]:
    name = f"MACD({fast},{slow},{signal})"
    needed = slow + signal - 1
    if len(series) < needed:
        return _insufficient(name, needed, len(series))

    macd = calculate_macd(series.close_series(), fast, slow, signal)
    macd_line = _last(macd["macd_line"])
    signal_line = _last(macd["signal_line"])
    histogram = _last(macd["histogram"])
    if macd_line is None or signal_line is None or histogram is None:
        return _degenerate(name, "non-finite result")

    return MacdResult(
        macd_line=macd_line,
        signal_line=signal_line,
        histogram=histogram,
        trend="bullish" if histogram > 0 else "bearish",
    )


def compute_bollinger(
    series: PriceSeries,
    period: int = 20,
    std_dev: float = 2.0,
) -> Outcome[BollingerResult]:
    """
    Bollinger Bands at the last close.

    Position is overbought above the upper band, oversold below the lower
    band, neutral otherwise. Bandwidth is (upper - lower) / middle * 100.
    """
    name = f"Bollinger({period},{std_dev:g})"
    if len(series) < period:
        return _insufficient(name, period, len(series))

    bands = calculate_bollinger_bands(series.close_series(), period, std_dev)
    upper = _last(bands["upper"])
    middle = _last(bands["middle"])
    lower = _last(bands["lower"])
    if upper is None or middle is None or lower is None:
        return _degenerate(name, "non-finite result")
    if middle == 0:
        return _degenerate(name, "middle band is zero")

    close = series.latest_close
    if close > upper:
        position = "overbought"
    elif close < lower:
        position = "oversold"
    else:
        position = "neutral"

    return BollingerResult(
        upper=upper,
        middle=middle,
        lower=lower,
        bandwidth_percent=(upper - lower) / middle * 100,
        position=position,
    )


def compute_obv(series: PriceSeries) -> Outcome[ObvResult]:
    """On-Balance Volume; rising if the latest value exceeds the previous one."""
    if len(series) < 2:
        return _insufficient("OBV", 2, len(series))

    obv = calculate_obv(series.close_series(), series.volume_series())
    current = _last(obv)
    previous = _last(obv.iloc[:-1])
    if current is None or previous is None:
        return _degenerate("OBV", "non-finite result")

    return ObvResult(value=current, trend="rising" if current > previous else "falling")


def compute_vwap(series: PriceSeries) -> Outcome[VwapResult]:
    """VWAP over the whole series and where the last close sits against it."""
    if len(series) < 1:
        return _insufficient("VWAP", 1, 0)

    vwap = calculate_vwap(series.close_series(), series.volume_series())
    if vwap is None:
        return _degenerate("VWAP", "total volume is zero")
    if not math.isfinite(vwap):
        return _degenerate("VWAP", "non-finite result")

    return VwapResult(value=vwap, position="above" if series.latest_close > vwap else "below")


def compute_pi_cycle(series: PriceSeries) -> Outcome[PiCycleResult]:
    """
    Pi Cycle Top indicator.

    Flags a top when SMA(111) has reached twice SMA(350). Needs at least
    350 daily closes.
    """
    fast = compute_sma(series, PI_CYCLE_FAST)
    slow = compute_sma(series, PI_CYCLE_SLOW)
    if not is_available(slow):
        return slow
    if not is_available(fast):
        return fast

    sma350x2 = slow * PI_CYCLE_MULTIPLIER
    return PiCycleResult(
        sma111=fast,
        sma350x2=sma350x2,
        is_top=fast >= sma350x2,
        as_of=series.as_of,
    )


def compute_indicators(
    prices: PriceSeries,
    pi_cycle: Outcome[PiCycleResult],
) -> IndicatorSet:
    """
    Compute every indicator from the primary history.

    Args:
        prices: Primary daily history
        pi_cycle: Pi Cycle outcome, computed separately from the long history

    Returns:
        IndicatorSet with an Unavailable in place of any failed indicator
    """
    return IndicatorSet(
        rsi=compute_rsi(prices),
        macd=compute_macd(prices),
        bollinger=compute_bollinger(prices),
        obv=compute_obv(prices),
        vwap=compute_vwap(prices),
        sma50=compute_sma(prices, 50),
        sma200=compute_sma(prices, 200),
        pi_cycle=pi_cycle,
    )
