"""Technical indicators over a bar series.

SMA is a standalone ring-buffer class with O(1) per update; the series
functions below stream closes through it. Every function converts
Decimal -> float and datetime -> Unix seconds at the boundary, validates
the series, and returns a frozen result tagged with its IndicatorKind.

A series shorter than the lookback is not an error: the result simply has
no points for the prefix that is not yet computable.
"""

from __future__ import annotations

import inspect
import math
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from stockdash.errors import InvalidInputError
from stockdash.market.types import BandSet, IndicatorPoint, Series, validate_series
from stockdash.utils.time import to_unix_seconds

log = structlog.get_logger()


class IndicatorKind(str, Enum):
    """Tag carried by every indicator result."""

    SMA = "sma"
    EMA = "ema"
    WMA = "wma"
    BOLLINGER = "bollinger"
    RSI = "rsi"
    ATR = "atr"
    MACD = "macd"
    STOCHASTIC = "stochastic"
    OBV = "obv"


class SMA:
    """Simple Moving Average via ring buffer with running sum. O(1) per update.

    Note: Running-sum approach may accumulate negligible float drift over very
    long series (100K+ updates). Acceptable for chart overlays.
    """

    __slots__ = ("_buf", "_period", "_sum")

    def __init__(self, period: int) -> None:
        _check_period(period)
        self._period = period
        self._buf: deque[float] = deque(maxlen=period)
        self._sum: float = 0.0

    def update(self, value: float) -> None:
        """Add a value. Evicts oldest if at capacity."""
        if len(self._buf) == self._period:
            self._sum -= self._buf[0]
        self._buf.append(value)
        self._sum += value

    @property
    def value(self) -> float | None:
        """Current SMA, or None if not warm."""
        if len(self._buf) < self._period:
            return None
        return self._sum / self._period

    @property
    def window(self) -> tuple[float, ...]:
        """Values currently in the buffer, oldest first."""
        return tuple(self._buf)

    @property
    def is_warm(self) -> bool:
        """True when buffer has enough values for a valid SMA."""
        return len(self._buf) >= self._period


# --- Tagged results ---


@dataclass(frozen=True)
class LineIndicator:
    """Single-line indicator (SMA, EMA, WMA, RSI, ATR, OBV)."""

    kind: IndicatorKind
    period: int
    points: tuple[IndicatorPoint, ...]

    def __len__(self) -> int:
        return len(self.points)

    @property
    def values(self) -> list[float]:
        return [p.value for p in self.points]

    @property
    def latest(self) -> float | None:
        """Most recent value, or None if nothing is computable yet."""
        return self.points[-1].value if self.points else None


@dataclass(frozen=True)
class BandIndicator:
    """Bollinger Bands result."""

    period: int
    multiplier: float
    bands: BandSet
    kind: IndicatorKind = IndicatorKind.BOLLINGER

    def __len__(self) -> int:
        return len(self.bands)


@dataclass(frozen=True)
class MacdIndicator:
    """MACD line, signal line and histogram.

    The MACD line starts on the slow EMA's first timestamp; signal and
    histogram start signal_period points later.
    """

    fast_period: int
    slow_period: int
    signal_period: int
    macd: tuple[IndicatorPoint, ...]
    signal: tuple[IndicatorPoint, ...]
    histogram: tuple[IndicatorPoint, ...]
    kind: IndicatorKind = IndicatorKind.MACD

    def __len__(self) -> int:
        return len(self.signal)


@dataclass(frozen=True)
class StochasticIndicator:
    """Slow %K and %D lines. %D starts d_period - 1 points after %K."""

    k_period: int
    k_smoothing: int
    d_period: int
    k: tuple[IndicatorPoint, ...]
    d: tuple[IndicatorPoint, ...]
    kind: IndicatorKind = IndicatorKind.STOCHASTIC

    def __len__(self) -> int:
        return len(self.d)


IndicatorResult = LineIndicator | BandIndicator | MacdIndicator | StochasticIndicator


# --- Helpers ---


def _check_period(period: int) -> None:
    if isinstance(period, bool) or not isinstance(period, int) or period < 1:
        raise InvalidInputError(f"Indicator period must be an int >= 1, got {period}")


def _prepare(series: Series) -> tuple[list[int], list[float]]:
    """Validate the series and split it into chart times and float closes."""
    validate_series(series)
    times = [to_unix_seconds(bar.timestamp) for bar in series]
    closes = [float(bar.close) for bar in series]  # Decimal -> float at boundary
    return times, closes


def _ema_values(values: Sequence[float], period: int) -> list[float]:
    """EMA recurrence over raw values.

    Seed is the mean of the first ``period`` values and is not emitted;
    result[k] corresponds to values[period + k].
    """
    if len(values) <= period:
        return []
    alpha = 2 / (period + 1)
    ema = sum(values[:period]) / period
    out: list[float] = []
    for value in values[period:]:
        ema = (value - ema) * alpha + ema
        out.append(ema)
    return out


def _rolling_means(values: Sequence[float], period: int) -> list[float]:
    """Trailing means via the SMA ring buffer; len(values) - period + 1 items."""
    window = SMA(period)
    out: list[float] = []
    for value in values:
        window.update(value)
        if window.is_warm:
            out.append(window.value)  # type: ignore[arg-type]
    return out


def _points(times: Sequence[int], values: Sequence[float]) -> tuple[IndicatorPoint, ...]:
    """Pair values with the trailing len(values) timestamps."""
    offset = len(times) - len(values)
    return tuple(
        IndicatorPoint(time=times[offset + i], value=v) for i, v in enumerate(values)
    )


# --- Moving-average family ---


def sma(series: Series, period: int) -> LineIndicator:
    """Simple moving average of closes. n - period + 1 points."""
    _check_period(period)
    times, closes = _prepare(series)
    values = _rolling_means(closes, period)
    return LineIndicator(IndicatorKind.SMA, period, _points(times, values))


def ema(series: Series, period: int) -> LineIndicator:
    """Exponential moving average of closes, SMA-seeded. n - period points.

    multiplier = 2 / (period + 1); ema[i] = (close[i] - ema[i-1]) * m + ema[i-1].
    The seed (SMA of the first ``period`` closes) is not emitted.
    """
    _check_period(period)
    times, closes = _prepare(series)
    return LineIndicator(
        IndicatorKind.EMA, period, _points(times, _ema_values(closes, period))
    )


def wma(series: Series, period: int) -> LineIndicator:
    """Linearly weighted moving average (weights 1..period, newest heaviest)."""
    _check_period(period)
    times, closes = _prepare(series)
    weight_sum = period * (period + 1) / 2
    values = [
        sum(price * (w + 1) for w, price in enumerate(closes[i - period + 1 : i + 1]))
        / weight_sum
        for i in range(period - 1, len(closes))
    ]
    return LineIndicator(IndicatorKind.WMA, period, _points(times, values))


def bollinger_bands(
    series: Series,
    period: int = 20,
    multiplier: float = 2.0,
) -> BandIndicator:
    """Bollinger Bands: SMA middle +/- multiplier population std-devs."""
    _check_period(period)
    if multiplier < 0:
        raise InvalidInputError(f"Band multiplier must be >= 0, got {multiplier}")
    times, closes = _prepare(series)

    window = SMA(period)
    upper: list[float] = []
    middle: list[float] = []
    lower: list[float] = []
    for close in closes:
        window.update(close)
        mean = window.value
        if mean is None:
            continue
        # Population variance: divide by period, not period - 1
        variance = sum((x - mean) ** 2 for x in window.window) / period
        width = multiplier * math.sqrt(variance)
        middle.append(mean)
        upper.append(mean + width)
        lower.append(mean - width)

    return BandIndicator(
        period=period,
        multiplier=multiplier,
        bands=BandSet(
            upper=_points(times, upper),
            middle=_points(times, middle),
            lower=_points(times, lower),
        ),
    )


# --- Momentum / volatility ---


def rsi(series: Series, period: int = 14) -> LineIndicator:
    """Relative Strength Index over the trailing ``period`` close changes.

    RSI is 100 when there were no losses in the window, 50 when the
    window was completely flat. n - period points.
    """
    _check_period(period)
    times, closes = _prepare(series)
    changes = [b - a for a, b in zip(closes, closes[1:])]
    values: list[float] = []
    for i in range(period, len(closes)):
        window = changes[i - period : i]
        gains = sum(c for c in window if c > 0)
        losses = -sum(c for c in window if c < 0)
        if losses == 0:
            values.append(50.0 if gains == 0 else 100.0)
            continue
        rs = (gains / period) / (losses / period)
        values.append(100 - 100 / (1 + rs))
    return LineIndicator(IndicatorKind.RSI, period, _points(times, values))


def atr(series: Series, period: int = 14) -> LineIndicator:
    """Average True Range with Wilder smoothing. n - period points.

    The first value is the plain mean of the first ``period`` true ranges,
    stamped on bar ``period``.
    """
    _check_period(period)
    validate_series(series)
    times = [to_unix_seconds(bar.timestamp) for bar in series]
    true_ranges = [
        max(
            float(cur.high - cur.low),
            abs(float(cur.high - prev.close)),
            abs(float(cur.low - prev.close)),
        )
        for prev, cur in zip(series, series[1:])
    ]
    if len(true_ranges) < period:
        return LineIndicator(IndicatorKind.ATR, period, ())

    value = sum(true_ranges[:period]) / period
    values = [value]
    for tr in true_ranges[period:]:
        value = (value * (period - 1) + tr) / period
        values.append(value)
    return LineIndicator(IndicatorKind.ATR, period, _points(times, values))


def macd(
    series: Series,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MacdIndicator:
    """MACD = EMA(fast) - EMA(slow); signal = EMA(signal_period) of MACD."""
    for p in (fast_period, slow_period, signal_period):
        _check_period(p)
    if fast_period >= slow_period:
        raise InvalidInputError(
            f"MACD fast period ({fast_period}) must be below slow ({slow_period})"
        )
    times, closes = _prepare(series)

    fast = _ema_values(closes, fast_period)
    slow = _ema_values(closes, slow_period)
    # Align on the slow EMA: both lists end on the last bar
    lag = len(fast) - len(slow)
    macd_values = [f - s for f, s in zip(fast[lag:], slow)]
    signal_values = _ema_values(macd_values, signal_period)
    hist_lag = len(macd_values) - len(signal_values)
    hist_values = [m - s for m, s in zip(macd_values[hist_lag:], signal_values)]

    return MacdIndicator(
        fast_period=fast_period,
        slow_period=slow_period,
        signal_period=signal_period,
        macd=_points(times, macd_values),
        signal=_points(times, signal_values),
        histogram=_points(times, hist_values),
    )


def stochastic(
    series: Series,
    k_period: int = 14,
    k_smoothing: int = 3,
    d_period: int = 3,
) -> StochasticIndicator:
    """Slow stochastic oscillator (%K smoothed, %D = SMA of slow %K).

    Raw %K is 50 when the lookback's high equals its low.
    """
    for p in (k_period, k_smoothing, d_period):
        _check_period(p)
    validate_series(series)
    times = [to_unix_seconds(bar.timestamp) for bar in series]
    raw_k: list[float] = []
    for i in range(k_period - 1, len(series)):
        window = series[i - k_period + 1 : i + 1]
        highest = float(max(bar.high for bar in window))
        lowest = float(min(bar.low for bar in window))
        close = float(series[i].close)
        if highest > lowest:
            raw_k.append((close - lowest) / (highest - lowest) * 100)
        else:
            raw_k.append(50.0)
    slow_k = _rolling_means(raw_k, k_smoothing)
    slow_d = _rolling_means(slow_k, d_period)
    return StochasticIndicator(
        k_period=k_period,
        k_smoothing=k_smoothing,
        d_period=d_period,
        k=_points(times, slow_k),
        d=_points(times, slow_d),
    )


def obv(series: Series) -> LineIndicator:
    """On-Balance Volume, one point per bar.

    Starts at the first bar's volume; each later bar adds its volume on an
    up close, subtracts it on a down close, and carries it on a flat one.
    """
    validate_series(series)
    times = [to_unix_seconds(bar.timestamp) for bar in series]
    if not series:
        return LineIndicator(IndicatorKind.OBV, 1, ())
    running = series[0].volume
    values = [float(running)]
    for prev, cur in zip(series, series[1:]):
        if cur.close > prev.close:
            running += cur.volume
        elif cur.close < prev.close:
            running -= cur.volume
        values.append(float(running))
    return LineIndicator(IndicatorKind.OBV, 1, _points(times, values))


_CALCULATORS: dict[IndicatorKind, Callable[..., IndicatorResult]] = {
    IndicatorKind.SMA: sma,
    IndicatorKind.EMA: ema,
    IndicatorKind.WMA: wma,
    IndicatorKind.BOLLINGER: bollinger_bands,
    IndicatorKind.RSI: rsi,
    IndicatorKind.ATR: atr,
    IndicatorKind.MACD: macd,
    IndicatorKind.STOCHASTIC: stochastic,
    IndicatorKind.OBV: obv,
}


def compute_indicator(
    kind: IndicatorKind | str,
    series: Series,
    **params: Any,
) -> IndicatorResult:
    """Dispatch to the calculator for ``kind`` with keyword parameters."""
    try:
        kind = IndicatorKind(kind)
    except ValueError as e:
        raise InvalidInputError(f"Unknown indicator: {kind}") from e
    calculator = _CALCULATORS[kind]
    try:
        inspect.signature(calculator).bind(series, **params)
    except TypeError as e:
        raise InvalidInputError(f"Bad parameters for {kind.value}: {e}") from e
    result = calculator(series, **params)
    log.debug(
        "indicator_computed",
        kind=kind.value,
        bar_count=len(series),
        point_count=len(result),
        **params,
    )
    return result
