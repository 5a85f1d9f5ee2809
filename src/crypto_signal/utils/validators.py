"""Validation utilities and parameter classes."""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

_ID_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")


@dataclass(frozen=True)
class HistoryParams:
    """Immutable price history request parameters."""

    coin_id: str
    vs_currency: str
    days: int
    interval: str = "daily"

    def __post_init__(self) -> None:
        # Normalize ids: lowercase, strip whitespace, validate
        coin_id = self.coin_id.lower().strip()
        vs_currency = self.vs_currency.lower().strip()

        if not _ID_PATTERN.match(coin_id):
            raise ValueError(f"Invalid coin id '{self.coin_id}'")
        if not _ID_PATTERN.match(vs_currency):
            raise ValueError(f"Invalid quote currency '{self.vs_currency}'")
        if int(self.days) < 1:
            raise ValueError(f"days must be >= 1, got {self.days}")

        object.__setattr__(self, "coin_id", coin_id)
        object.__setattr__(self, "vs_currency", vs_currency)
        object.__setattr__(self, "days", int(self.days))

    def to_query(self) -> dict[str, Any]:
        """Query parameters for the market_chart endpoint."""
        return {
            "vs_currency": self.vs_currency,
            "days": self.days,
            "interval": self.interval,
        }

    def describe(self) -> str:
        return f"{self.coin_id}/{self.vs_currency}/{self.days}d"


def check_rule(
    value: float | None,
    threshold: float,
    comparator: Callable[[float, float], bool],
) -> bool | None:
    """
    Compare an optional indicator value against a fixed threshold.

    Returns None when the value is missing, so an absent indicator never
    reads as a failed rule.
    """
    if value is None:
        return None
    return comparator(value, threshold)


def check_rule_expr(
    left: float | None,
    right: float | None,
    comparator: Callable[[float, float], bool],
) -> bool | None:
    """Compare two optional indicator values; None if either is missing."""
    if left is None or right is None:
        return None
    return comparator(left, right)
