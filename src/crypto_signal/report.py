"""Report generation: fetch, compute, score, render, export."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from time import perf_counter

import pytz

from crypto_signal.analysis.signal import aggregate_signals
from crypto_signal.analysis.technicals import compute_indicators, compute_pi_cycle
from crypto_signal.context import RunContext
from crypto_signal.data.cache import CacheKey
from crypto_signal.data.feeds import fetch_market_data
from crypto_signal.models import (
    IndicatorSet,
    Outcome,
    PiCycleResult,
    PriceSeries,
    SentimentReading,
    SignalScore,
    Unavailable,
    is_available,
)

logger = logging.getLogger(__name__)

REPORT_PATH = Path("output") / "signal_report.txt"

_LABEL_WIDTH = 17


@dataclass(frozen=True)
class Report:
    """Everything rendered for one run."""

    coin_id: str
    vs_currency: str
    generated_at: datetime
    sentiment: SentimentReading
    prices: PriceSeries
    indicators: IndicatorSet
    score: SignalScore
    output_path: Path | None = None


def resolve_pi_cycle(ctx: RunContext, long_prices: Outcome[PriceSeries]) -> Outcome[PiCycleResult]:
    """Pi Cycle from cache, else from the long history (cached on success)."""
    cached = ctx.cache.get(CacheKey.PI_CYCLE)
    if cached is not None:
        return cached

    if not is_available(long_prices):
        logger.warning(f"Pi Cycle unavailable: long price history missing ({long_prices})")
        return long_prices

    result = compute_pi_cycle(long_prices)
    if is_available(result):
        ctx.cache.set(CacheKey.PI_CYCLE, result)
    return result


def _line(label: str, value: str) -> str:
    return f"{label + ':':<{_LABEL_WIDTH}}{value}"


def _na(outcome: object) -> str:
    if isinstance(outcome, Unavailable):
        return f"N/A ({outcome.reason.value})"
    return "N/A"


def _num(value: float, decimals: int = 2) -> str:
    return f"{value:,.{decimals}f}"


def _rsi_label(rsi: float) -> str:
    if rsi < 30:
        return "oversold"
    if rsi > 70:
        return "overbought"
    return "neutral"


def render_report(report: Report, tz: str = "UTC") -> str:
    """
    Render the report as sectioned plain text.

    The same string is printed and written to the report file, so both
    carry identical numbers.
    """
    zone = pytz.timezone(tz)
    currency = report.vs_currency.upper()
    ind = report.indicators
    sentiment = report.sentiment
    prices = report.prices

    def stamp(moment: datetime) -> str:
        return moment.astimezone(zone).strftime("%Y-%m-%d %H:%M:%S %Z")

    lines = [
        f"==== Crypto Signal Report: {report.coin_id.upper()}/{currency} ====",
        _line("Generated", stamp(report.generated_at)),
        "",
        "[Market Sentiment]",
        _line("Index value", f"{sentiment.value} ({sentiment.classification.label})"),
        _line("Observed at", stamp(sentiment.observed_at)),
        "",
        "[Technical Indicators]",
        _line("Latest price", f"{_num(prices.latest_close)} {currency}"),
        _line("Latest volume", f"{_num(prices.latest_volume / 1e9)}B {currency}"),
    ]

    if is_available(ind.rsi):
        lines.append(_line("RSI(14)", f"{_num(ind.rsi)} -> {_rsi_label(ind.rsi)}"))
    else:
        lines.append(_line("RSI(14)", _na(ind.rsi)))

    if is_available(ind.macd):
        m = ind.macd
        lines.append(
            _line(
                "MACD(12,26,9)",
                f"line {_num(m.macd_line)} / signal {_num(m.signal_line)} / "
                f"histogram {_num(m.histogram)} -> {m.trend}",
            )
        )
    else:
        lines.append(_line("MACD(12,26,9)", _na(ind.macd)))

    if is_available(ind.bollinger):
        b = ind.bollinger
        lines.append(
            _line(
                "Bollinger(20,2)",
                f"upper {_num(b.upper)} / middle {_num(b.middle)} / lower {_num(b.lower)} / "
                f"bandwidth {_num(b.bandwidth_percent)}% -> {b.position}",
            )
        )
    else:
        lines.append(_line("Bollinger(20,2)", _na(ind.bollinger)))

    if is_available(ind.obv):
        lines.append(_line("OBV", f"{_num(ind.obv.value, 0)} -> {ind.obv.trend}"))
    else:
        lines.append(_line("OBV", _na(ind.obv)))

    if is_available(ind.vwap):
        lines.append(_line("VWAP", f"{_num(ind.vwap.value)} -> price {ind.vwap.position}"))
    else:
        lines.append(_line("VWAP", _na(ind.vwap)))

    for label, value in (("SMA(50)", ind.sma50), ("SMA(200)", ind.sma200)):
        lines.append(_line(label, _num(value) if is_available(value) else _na(value)))

    lines += ["", "[Pi Cycle Top]"]
    if is_available(ind.pi_cycle):
        pc = ind.pi_cycle
        lines += [
            _line("SMA(111)", _num(pc.sma111)),
            _line("2x SMA(350)", _num(pc.sma350x2)),
            _line("State", "TOP SIGNAL" if pc.is_top else "no top signal"),
            _line("As of", pc.as_of.isoformat() if pc.as_of else "unknown"),
        ]
    else:
        lines.append(_line("State", _na(ind.pi_cycle)))

    score = report.score
    lines += [
        "",
        "[Recommendation]",
        _line("Score", f"{score.score:+.2f}"),
        _line("Action", score.recommendation.label),
        "Signals:",
    ]
    if score.signals:
        lines += [f"  - {s}" for s in score.signals]
    else:
        lines.append("  - none triggered")

    return "\n".join(lines) + "\n"


def write_report(text: str, output_path: Path = REPORT_PATH) -> Path:
    """
    Write rendered text as UTF-8, replacing any previous report.

    Raises:
        OSError: If the file cannot be written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8")
    return output_path


async def generate_report(ctx: RunContext, output_path: Path = REPORT_PATH) -> Report | None:
    """
    Run one full report cycle.

    Sentiment and the primary price history are required; without either,
    an error is logged and no report is produced. Every other indicator is
    optional and renders as N/A when unavailable.

    Args:
        ctx: Run context
        output_path: Where to write the text report

    Returns:
        The Report (output_path None if the file could not be written),
        or None if required data was missing
    """
    start_time = perf_counter()
    settings = ctx.settings

    data = await fetch_market_data(ctx)

    missing = [
        f"{name} ({outcome})"
        for name, outcome in (("sentiment", data.sentiment), ("price history", data.prices))
        if not is_available(outcome)
    ]
    if missing:
        logger.error(f"Cannot generate report, data fetch failed: {', '.join(missing)}")
        return None

    pi_cycle = resolve_pi_cycle(ctx, data.long_prices)
    indicators = compute_indicators(data.prices, pi_cycle)
    score = aggregate_signals(data.sentiment, indicators)

    report = Report(
        coin_id=settings.coin_id,
        vs_currency=settings.vs_currency,
        generated_at=datetime.fromtimestamp(ctx.clock(), tz=pytz.utc),
        sentiment=data.sentiment,
        prices=data.prices,
        indicators=indicators,
        score=score,
    )

    text = render_report(report, settings.report_tz)
    print(text, end="")

    try:
        written = write_report(text, output_path)
    except OSError as e:
        logger.error(f"Failed to write report to {output_path}: {e}")
        return report

    duration_ms = (perf_counter() - start_time) * 1000
    logger.info(
        f"Report written to {written} ({score.recommendation.value}, "
        f"score {score.score:+.2f}, {duration_ms:.0f} ms)"
    )
    return replace(report, output_path=written)
