"""Technical indicator calculations."""

import numpy as np
import pandas as pd


def calculate_sma(prices: pd.Series, period: int) -> pd.Series:
    """Rolling mean of the last `period` daily closes; NaN until the window fills."""
    return prices.rolling(window=period, min_periods=period).mean()


def calculate_ema(prices: pd.Series, period: int) -> pd.Series:
    """Recursive EMA with smoothing 2 / (period + 1), seeded from the first value."""
    return prices.ewm(span=period, adjust=False, min_periods=period).mean()


def calculate_rsi(prices: pd.Series, period: int = 14) -> pd.Series:
    """
    Calculate Relative Strength Index.

    Wilder's method: the first average gain/loss is the simple mean of the
    first `period` moves, later values use Wilder smoothing (alpha = 1/period).

    Args:
        prices: Price series (typically close prices)
        period: RSI period (default: 14)

    Returns:
        RSI series (0-100 scale), NaN until `period` moves are available
    """
    rsi = pd.Series(np.nan, index=prices.index, dtype="float64")
    if len(prices) <= period:
        return rsi

    delta = prices.diff()
    gain = delta.clip(lower=0.0)
    loss = (-delta).clip(lower=0.0)

    # Seed at the period-th move, then smooth forward
    seeded_gain = gain.iloc[period:].copy()
    seeded_loss = loss.iloc[period:].copy()
    seeded_gain.iloc[0] = gain.iloc[1 : period + 1].mean()
    seeded_loss.iloc[0] = loss.iloc[1 : period + 1].mean()

    avg_gain = seeded_gain.ewm(alpha=1 / period, adjust=False).mean()
    avg_loss = seeded_loss.ewm(alpha=1 / period, adjust=False).mean()

    rs = avg_gain / avg_loss
    values = 100 - (100 / (1 + rs))

    # avg_loss of 0 with gains present
    values = values.replace([np.inf, -np.inf], 100)
    rsi.iloc[period:] = values.to_numpy()

    return rsi


def calculate_macd(
    prices: pd.Series,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> dict[str, pd.Series]:
    """
    MACD line, signal line and histogram.

    The line is EMA(fast) - EMA(slow) of the closes; the signal line is an
    EMA(signal) of that line, so it is NaN for the first slow + signal - 2
    points.

    Returns:
        Dict with 'macd_line', 'signal_line', 'histogram' series
    """
    macd_line = calculate_ema(prices, fast) - calculate_ema(prices, slow)
    signal_line = calculate_ema(macd_line, signal)

    return {
        "macd_line": macd_line,
        "signal_line": signal_line,
        "histogram": macd_line - signal_line,
    }


def calculate_bollinger_bands(
    prices: pd.Series,
    period: int = 20,
    std_dev: float = 2.0,
) -> dict[str, pd.Series]:
    """
    Calculate Bollinger Bands.

    The band width uses the population standard deviation of each window.

    Args:
        prices: Price series (typically close prices)
        period: Window length (default: 20)
        std_dev: Band distance in standard deviations (default: 2)

    Returns:
        Dict with 'upper', 'middle', 'lower' series
    """
    middle = calculate_sma(prices, period)
    sigma = prices.rolling(window=period, min_periods=period).std(ddof=0)

    return {
        "upper": middle + std_dev * sigma,
        "middle": middle,
        "lower": middle - std_dev * sigma,
    }


def calculate_obv(prices: pd.Series, volume: pd.Series) -> pd.Series:
    """
    Calculate On-Balance Volume.

    Volume is added on up closes, subtracted on down closes and ignored on
    unchanged closes. The series starts at 0.

    Args:
        prices: Close price series
        volume: Volume series aligned with prices

    Returns:
        OBV series
    """
    direction = np.sign(prices.diff()).fillna(0.0)
    return (direction * volume).cumsum()


def calculate_vwap(prices: pd.Series, volume: pd.Series) -> float | None:
    """
    Calculate Volume-Weighted Average Price over the whole window.

    Args:
        prices: Close price series
        volume: Volume series aligned with prices

    Returns:
        VWAP, or None if total volume is zero or inputs are empty
    """
    if len(prices) == 0 or len(prices) != len(volume):
        return None

    total_volume = volume.sum()
    if pd.isna(total_volume) or total_volume == 0:
        return None

    return float((prices * volume).sum() / total_volume)
