"""Weighted aggregation of sentiment and indicators into a recommendation."""

import operator

from crypto_signal.models import (
    IndicatorSet,
    Outcome,
    Recommendation,
    SentimentReading,
    SignalScore,
    is_available,
)
from crypto_signal.utils.validators import check_rule, check_rule_expr

# Score deltas per rule
SENTIMENT_EXTREME_WEIGHT = 2.0
SENTIMENT_WEIGHT = 1.0
RSI_WEIGHT = 1.0
MACD_WEIGHT = 1.0
BOLLINGER_WEIGHT = 1.0
OBV_WEIGHT = 0.5
VWAP_WEIGHT = 0.5
SMA_CROSS_WEIGHT = 0.8
PI_CYCLE_TOP_PENALTY = 1.5

# Rule thresholds
SENTIMENT_EXTREME_FEAR = 20
SENTIMENT_FEAR = 40
SENTIMENT_GREED = 60
SENTIMENT_EXTREME_GREED = 80
RSI_OVERSOLD = 30
RSI_OVERBOUGHT = 70

# Recommendation buckets; thresholds are exclusive
STRONG_BUY_ABOVE = 2.3
BUY_ABOVE = 0.7
SELL_BELOW = -0.7
STRONG_SELL_BELOW = -2.3


def _present(value: object) -> object | None:
    """Map Unavailable to None so nullable rule helpers skip it."""
    return value if is_available(value) else None


def recommend(score: float) -> Recommendation:
    """
    Bucket a score into a recommendation.

    Buckets partition the score axis: (2.3, inf) strong buy, (0.7, 2.3] buy,
    [-0.7, 0.7] hold, [-2.3, -0.7) sell, (-inf, -2.3) strong sell.
    """
    if score > STRONG_BUY_ABOVE:
        return Recommendation.STRONG_BUY
    if score > BUY_ABOVE:
        return Recommendation.BUY
    if score < STRONG_SELL_BELOW:
        return Recommendation.STRONG_SELL
    if score < SELL_BELOW:
        return Recommendation.SELL
    return Recommendation.HOLD


def aggregate_signals(
    sentiment: Outcome[SentimentReading] | None,
    indicators: IndicatorSet,
) -> SignalScore:
    """
    Combine sentiment and indicators into a score and recommendation.

    Each present input votes independently with a fixed weight; absent or
    Unavailable inputs contribute nothing. Rules are evaluated in a fixed
    order and every rule that fires appends a description to the signals.

    Args:
        sentiment: Latest Fear & Greed reading (may be Unavailable)
        indicators: Indicator outcomes for the run

    Returns:
        SignalScore with score, recommendation and triggered signals
    """
    score = 0.0
    signals: list[str] = []

    def vote(delta: float, message: str) -> None:
        nonlocal score
        score += delta
        signals.append(f"{message} ({delta:+g})")

    # Sentiment: first matching band only
    reading = _present(sentiment)
    if reading is not None:
        value = reading.value
        if value < SENTIMENT_EXTREME_FEAR:
            vote(SENTIMENT_EXTREME_WEIGHT, f"Extreme fear in sentiment index ({value})")
        elif value < SENTIMENT_FEAR:
            vote(SENTIMENT_WEIGHT, f"Fear in sentiment index ({value})")
        elif value > SENTIMENT_EXTREME_GREED:
            vote(-SENTIMENT_EXTREME_WEIGHT, f"Extreme greed in sentiment index ({value})")
        elif value > SENTIMENT_GREED:
            vote(-SENTIMENT_WEIGHT, f"Greed in sentiment index ({value})")

    rsi = _present(indicators.rsi)
    if check_rule(rsi, RSI_OVERSOLD, operator.lt):
        vote(RSI_WEIGHT, f"RSI oversold ({rsi:.2f})")
    elif check_rule(rsi, RSI_OVERBOUGHT, operator.gt):
        vote(-RSI_WEIGHT, f"RSI overbought ({rsi:.2f})")

    macd = _present(indicators.macd)
    if macd is not None:
        if macd.histogram > 0:
            vote(MACD_WEIGHT, f"MACD histogram positive ({macd.histogram:.2f})")
        else:
            vote(-MACD_WEIGHT, f"MACD histogram non-positive ({macd.histogram:.2f})")

    bollinger = _present(indicators.bollinger)
    if bollinger is not None:
        if bollinger.position == "oversold":
            vote(BOLLINGER_WEIGHT, "Price below lower Bollinger band")
        elif bollinger.position == "overbought":
            vote(-BOLLINGER_WEIGHT, "Price above upper Bollinger band")

    obv = _present(indicators.obv)
    if obv is not None:
        if obv.trend == "rising":
            vote(OBV_WEIGHT, "On-balance volume rising")
        else:
            vote(-OBV_WEIGHT, "On-balance volume falling")

    vwap = _present(indicators.vwap)
    if vwap is not None:
        if vwap.position == "above":
            vote(VWAP_WEIGHT, "Price above VWAP")
        else:
            vote(-VWAP_WEIGHT, "Price below VWAP")

    sma50 = _present(indicators.sma50)
    sma200 = _present(indicators.sma200)
    if check_rule_expr(sma50, sma200, operator.gt):
        vote(SMA_CROSS_WEIGHT, "SMA50 above SMA200 (golden cross)")
    elif check_rule_expr(sma50, sma200, operator.lt):
        vote(-SMA_CROSS_WEIGHT, "SMA50 below SMA200 (death cross)")

    pi_cycle = _present(indicators.pi_cycle)
    if pi_cycle is not None and pi_cycle.is_top:
        vote(-PI_CYCLE_TOP_PENALTY, "Pi Cycle Top triggered (SMA111 >= 2x SMA350)")

    # Drop float accumulation noise (e.g. 6.800000000000001)
    score = round(score, 4)

    return SignalScore(
        score=score,
        recommendation=recommend(score),
        signals=tuple(signals),
    )
