"""Indicator wrapping and signal aggregation."""

from crypto_signal.analysis.signal import aggregate_signals, recommend
from crypto_signal.analysis.technicals import compute_indicators, compute_pi_cycle

__all__ = [
    "aggregate_signals",
    "compute_indicators",
    "compute_pi_cycle",
    "recommend",
]
