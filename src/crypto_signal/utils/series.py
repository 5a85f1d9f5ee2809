"""Normalization of upstream price/volume payloads."""

from typing import Any

import pandas as pd

from crypto_signal.models import PriceSeries


def points_to_frame(points: Any, column: str) -> pd.DataFrame:
    """
    Convert a list of [timestamp_ms, value] pairs into a two-column DataFrame.

    Raises:
        ValueError: If points is empty or not a list of pairs
    """
    if not isinstance(points, list) or not points:
        raise ValueError(f"'{column}' must be a non-empty list of [timestamp, value] pairs")
    if any(not isinstance(p, (list, tuple)) or len(p) != 2 for p in points):
        raise ValueError(f"'{column}' contains entries that are not [timestamp, value] pairs")

    df = pd.DataFrame(points, columns=["timestamp", column])
    df["timestamp"] = pd.to_numeric(df["timestamp"], errors="coerce")
    df[column] = pd.to_numeric(df[column], errors="coerce")
    return df


def standardize_market_chart(payload: Any) -> pd.DataFrame:
    """
    Standardize a market_chart payload to a consistent schema.

    Output columns (always, in this order): date, close, volume.
    Rows are joined on timestamp, sorted ascending, deduplicated, and
    rows with missing numbers are dropped.

    Raises:
        ValueError: If required fields are missing or nothing survives the join
    """
    if not isinstance(payload, dict):
        raise ValueError("market_chart payload is not an object")

    prices = points_to_frame(payload.get("prices"), "close")
    volumes = points_to_frame(payload.get("total_volumes"), "volume")

    df = prices.merge(volumes, on="timestamp", how="inner")
    df = df.dropna()
    df = df.drop_duplicates(subset="timestamp", keep="last")
    df = df.sort_values("timestamp").reset_index(drop=True)

    if df.empty:
        raise ValueError("market_chart prices and volumes share no usable timestamps")

    df["date"] = pd.to_datetime(df["timestamp"], unit="ms", utc=True)
    return df[["date", "close", "volume"]]


def frame_to_series(df: pd.DataFrame) -> PriceSeries:
    """Convert a standardized frame to an immutable PriceSeries."""
    return PriceSeries(
        closes=tuple(df["close"].tolist()),
        volumes=tuple(df["volume"].tolist()),
        timestamps=tuple(ts.to_pydatetime() for ts in df["date"]),
    )
