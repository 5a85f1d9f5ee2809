"""Utility modules."""

from crypto_signal.utils.indicators import (
    calculate_bollinger_bands,
    calculate_ema,
    calculate_macd,
    calculate_obv,
    calculate_rsi,
    calculate_sma,
    calculate_vwap,
)
from crypto_signal.utils.series import frame_to_series, standardize_market_chart
from crypto_signal.utils.validators import HistoryParams, check_rule, check_rule_expr

__all__ = [
    "calculate_bollinger_bands",
    "calculate_ema",
    "calculate_macd",
    "calculate_obv",
    "calculate_rsi",
    "calculate_sma",
    "calculate_vwap",
    "frame_to_series",
    "standardize_market_chart",
    "HistoryParams",
    "check_rule",
    "check_rule_expr",
]
