"""Value objects shared by the fetch, indicator, and scoring layers."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import TypeVar, Union

import pandas as pd

T = TypeVar("T")


class FailureReason(str, Enum):
    """Why a fetch or computation produced no value."""

    NETWORK_ERROR = "network_error"
    MALFORMED_PAYLOAD = "malformed_payload"
    INSUFFICIENT_DATA = "insufficient_data"
    NUMERIC_DEGENERACY = "numeric_degeneracy"


@dataclass(frozen=True)
class Unavailable:
    """Failure variant returned in place of a value."""

    reason: FailureReason
    detail: str = ""

    def __str__(self) -> str:
        return f"{self.reason.value}: {self.detail}" if self.detail else self.reason.value


# A value, or the reason it could not be produced
Outcome = Union[T, Unavailable]


def is_available(value: object) -> bool:
    """True if value is present (neither None nor Unavailable)."""
    return value is not None and not isinstance(value, Unavailable)


class Classification(str, Enum):
    """Fear & Greed bucket reported by the sentiment feed."""

    EXTREME_FEAR = "extreme-fear"
    FEAR = "fear"
    NEUTRAL = "neutral"
    GREED = "greed"
    EXTREME_GREED = "extreme-greed"

    @classmethod
    def parse(cls, text: str) -> "Classification":
        """
        Parse upstream classification text.

        Accepts "Extreme fear", "EXTREME_GREED", "extreme-greed" and similar.

        Raises:
            ValueError: If text does not name a known bucket
        """
        normalized = "-".join(str(text).strip().lower().replace("_", " ").split())
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown sentiment classification '{text}'") from None

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


class Recommendation(str, Enum):
    """Five-level discrete recommendation."""

    STRONG_BUY = "strong-buy"
    BUY = "buy"
    HOLD = "hold"
    SELL = "sell"
    STRONG_SELL = "strong-sell"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").upper()


@dataclass(frozen=True)
class SentimentReading:
    """Latest Fear & Greed reading."""

    value: int
    classification: Classification
    observed_at: datetime

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 100:
            raise ValueError(f"Sentiment value {self.value} outside 0-100")


@dataclass(frozen=True)
class PriceSeries:
    """
    Daily close/volume history in chronological ascending order.

    closes, volumes and timestamps always have the same length.
    """

    closes: tuple[float, ...]
    volumes: tuple[float, ...]
    timestamps: tuple[datetime, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "closes", tuple(float(c) for c in self.closes))
        object.__setattr__(self, "volumes", tuple(float(v) for v in self.volumes))
        object.__setattr__(self, "timestamps", tuple(self.timestamps))

        if len(self.closes) != len(self.volumes):
            raise ValueError(
                f"closes and volumes differ in length: {len(self.closes)} != {len(self.volumes)}"
            )
        if self.timestamps and len(self.timestamps) != len(self.closes):
            raise ValueError(
                f"timestamps and closes differ in length: "
                f"{len(self.timestamps)} != {len(self.closes)}"
            )

    def __len__(self) -> int:
        return len(self.closes)

    @property
    def latest_close(self) -> float | None:
        return self.closes[-1] if self.closes else None

    @property
    def latest_volume(self) -> float | None:
        return self.volumes[-1] if self.volumes else None

    @property
    def as_of(self) -> date | None:
        """Date of the most recent point, if timestamps are known."""
        return self.timestamps[-1].date() if self.timestamps else None

    def close_series(self) -> pd.Series:
        return pd.Series(self.closes, dtype="float64")

    def volume_series(self) -> pd.Series:
        return pd.Series(self.volumes, dtype="float64")


@dataclass(frozen=True)
class MacdResult:
    macd_line: float
    signal_line: float
    histogram: float
    trend: str  # bullish | bearish


@dataclass(frozen=True)
class BollingerResult:
    upper: float
    middle: float
    lower: float
    bandwidth_percent: float
    position: str  # overbought | oversold | neutral


@dataclass(frozen=True)
class ObvResult:
    value: float
    trend: str  # rising | falling


@dataclass(frozen=True)
class VwapResult:
    value: float
    position: str  # above | below (last close relative to VWAP)


@dataclass(frozen=True)
class PiCycleResult:
    """Pi Cycle Top comparison: SMA(111) against 2 x SMA(350)."""

    sma111: float
    sma350x2: float
    is_top: bool
    as_of: date | None


@dataclass(frozen=True)
class IndicatorSet:
    """All indicator outcomes for one run. Any field may be Unavailable."""

    rsi: Outcome[float]
    macd: Outcome[MacdResult]
    bollinger: Outcome[BollingerResult]
    obv: Outcome[ObvResult]
    vwap: Outcome[VwapResult]
    sma50: Outcome[float]
    sma200: Outcome[float]
    pi_cycle: Outcome[PiCycleResult]


@dataclass(frozen=True)
class SignalScore:
    """Aggregated score, its recommendation and the rules that fired."""

    score: float
    recommendation: Recommendation
    signals: tuple[str, ...]
