"""Indicator interpretation: latest values -> -2..+2 signal with a reason.

Thresholds are the ones the dashboard has always displayed (RSI 30/40/60/70,
Bollinger position 0.2/0.8, ATR 3%/5% of price, volume ratio 0.5/1.5/2.0,
stochastic 20/30/70/80, OBV change 5%/10%, 52-week position 0.1/0.3/0.7/0.9).
technical_summary() runs whatever the available history supports and skips
the rest.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from stockdash.config import IndicatorConfig
from stockdash.engine.indicators import (
    atr,
    bollinger_bands,
    macd,
    obv,
    rsi,
    sma,
    stochastic,
)
from stockdash.market.types import Series

log = structlog.get_logger()


@dataclass(frozen=True)
class IndicatorSignal:
    """Interpreted indicator reading."""

    name: str
    value: float
    signal: int
    interpretation: str
    details: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class TechnicalSummary:
    """All computable signals for a series plus the composite verdict."""

    signals: tuple[IndicatorSignal, ...]
    composite_signal: str
    confidence: int
    warnings: tuple[str, ...]
    atr_percent: float | None = None

    def get(self, name: str) -> IndicatorSignal | None:
        for s in self.signals:
            if s.name == name:
                return s
        return None


def interpret_rsi(value: float) -> IndicatorSignal:
    if value >= 70:
        signal, text = -2, f"Overbought ({value:.2f}) - potential sell signal"
    elif value >= 60:
        signal = -1
        text = f"Approaching overbought ({value:.2f}) - consider taking profits"
    elif value <= 30:
        signal, text = 2, f"Oversold ({value:.2f}) - potential buy signal"
    elif value <= 40:
        signal = 1
        text = f"Approaching oversold ({value:.2f}) - potential buying opportunity"
    else:
        signal, text = 0, f"Neutral ({value:.2f}) - no clear signal"
    return IndicatorSignal("rsi", value, signal, text)


def interpret_moving_averages(
    price: float,
    ma_fast: float,
    ma_mid: float,
    ma_slow: float,
    prev_ma_mid: float | None = None,
    prev_ma_slow: float | None = None,
) -> IndicatorSignal:
    """Golden/death cross of mid over slow first, then price vs. all three."""
    has_prev = prev_ma_mid is not None and prev_ma_slow is not None
    if has_prev and ma_mid > ma_slow and prev_ma_mid <= prev_ma_slow:  # type: ignore[operator]
        signal, text = 2, "Golden Cross detected - strong bullish signal"
    elif has_prev and ma_mid < ma_slow and prev_ma_mid >= prev_ma_slow:  # type: ignore[operator]
        signal, text = -2, "Death Cross detected - strong bearish signal"
    elif price > ma_fast and price > ma_mid and price > ma_slow:
        signal, text = 2, "Price above all moving averages - strong uptrend"
    elif price < ma_fast and price < ma_mid and price < ma_slow:
        signal, text = -2, "Price below all moving averages - strong downtrend"
    elif price > ma_mid and price > ma_slow:
        signal, text = 1, "Price above long-term averages - uptrend"
    elif price < ma_mid and price < ma_slow:
        signal, text = -1, "Price below long-term averages - downtrend"
    else:
        signal, text = 0, "Mixed moving average signals"
    return IndicatorSignal(
        "moving_averages",
        price,
        signal,
        text,
        details={"fast": ma_fast, "mid": ma_mid, "slow": ma_slow, "price": price},
    )


def interpret_bollinger(
    price: float,
    upper: float,
    middle: float,
    lower: float,
) -> IndicatorSignal:
    width = upper - lower
    position = (price - lower) / width if width > 0 else 0.5
    if price <= lower:
        signal, text = 2, "Price at or below lower band - oversold, potential buy"
    elif price >= upper:
        signal, text = -2, "Price at or above upper band - overbought, potential sell"
    elif position < 0.2:
        signal, text = 1, "Price near lower band - approaching oversold"
    elif position > 0.8:
        signal, text = -1, "Price near upper band - approaching overbought"
    else:
        signal, text = 0, "Price within normal range"
    return IndicatorSignal(
        "bollinger_bands",
        position,
        signal,
        text,
        details={"upper": upper, "middle": middle, "lower": lower, "price": price},
    )


def interpret_macd(
    macd_value: float,
    signal_value: float,
    prev_macd: float | None = None,
    prev_signal: float | None = None,
) -> IndicatorSignal:
    histogram = macd_value - signal_value
    has_prev = prev_macd is not None and prev_signal is not None
    if has_prev and macd_value > signal_value and prev_macd <= prev_signal:  # type: ignore[operator]
        signal, text = 2, "Bullish crossover - strong buy signal"
    elif has_prev and macd_value < signal_value and prev_macd >= prev_signal:  # type: ignore[operator]
        signal, text = -2, "Bearish crossover - strong sell signal"
    elif macd_value > signal_value and histogram > 0:
        signal, text = 1, "Positive momentum - bullish"
    elif macd_value < signal_value and histogram < 0:
        signal, text = -1, "Negative momentum - bearish"
    else:
        signal, text = 0, "Neutral - no clear trend"
    return IndicatorSignal(
        "macd",
        macd_value,
        signal,
        text,
        details={"macd": macd_value, "signal": signal_value, "histogram": histogram},
    )


def interpret_atr(atr_value: float, price: float) -> IndicatorSignal:
    atr_percent = atr_value / price * 100
    if atr_percent > 5:
        signal = -1
        text = f"High volatility ({atr_percent:.2f}%) - risky conditions"
    elif atr_percent > 3:
        signal, text = 0, f"Moderate volatility ({atr_percent:.2f}%)"
    else:
        signal = 1
        text = f"Low volatility ({atr_percent:.2f}%) - stable conditions"
    return IndicatorSignal(
        "atr",
        atr_value,
        signal,
        text,
        details={"atr": atr_value, "atr_percent": atr_percent},
    )


def interpret_volume(current: float, average: float) -> IndicatorSignal:
    ratio = current / average
    pct = ratio * 100
    if ratio >= 2.0:
        signal = 2
        text = f"Extremely high volume ({pct:.0f}% of average) - significant interest"
    elif ratio >= 1.5:
        signal = 1
        text = f"Above average volume ({pct:.0f}% of average) - increased activity"
    elif ratio <= 0.5:
        signal, text = -1, f"Low volume ({pct:.0f}% of average) - weak conviction"
    else:
        signal, text = 0, f"Normal volume ({pct:.0f}% of average)"
    return IndicatorSignal(
        "volume",
        ratio,
        signal,
        text,
        details={"current": current, "average": average, "ratio": ratio},
    )


def interpret_stochastic(slow_k: float, slow_d: float) -> IndicatorSignal:
    """Both lines must agree for the strong readings; %K alone for the mild ones."""
    reading = f"K: {slow_k:.2f}, D: {slow_d:.2f}"
    if slow_k <= 20 and slow_d <= 20:
        signal, text = 2, f"Oversold ({reading}) - potential buy signal"
    elif slow_k >= 80 and slow_d >= 80:
        signal, text = -2, f"Overbought ({reading}) - potential sell signal"
    elif slow_k <= 30:
        signal, text = 1, f"Approaching oversold ({reading})"
    elif slow_k >= 70:
        signal, text = -1, f"Approaching overbought ({reading})"
    else:
        signal, text = 0, f"Neutral ({reading})"
    return IndicatorSignal(
        "stochastic",
        slow_k,
        signal,
        text,
        details={"slow_k": slow_k, "slow_d": slow_d},
    )


def interpret_obv(current: float, change_percent: float) -> IndicatorSignal:
    if change_percent > 10:
        signal, text = 2, "Strong money flow into stock - bullish"
    elif change_percent > 5:
        signal, text = 1, "Positive money flow - mildly bullish"
    elif change_percent < -10:
        signal, text = -2, "Strong money flow out of stock - bearish"
    elif change_percent < -5:
        signal, text = -1, "Negative money flow - mildly bearish"
    else:
        signal, text = 0, "Neutral money flow"
    return IndicatorSignal(
        "obv",
        current,
        signal,
        text,
        details={"obv": current, "change_percent": change_percent},
    )


def interpret_range_position(price: float, low: float, high: float) -> IndicatorSignal:
    """Where price sits in its 52-week low..high range (0 = low, 1 = high)."""
    width = high - low
    position = (price - low) / width if width > 0 else 0.5
    pct = position * 100
    if position <= 0.1:
        signal = 2
        text = f"Near 52-week low ({pct:.1f}% of range) - potential value opportunity"
    elif position <= 0.3:
        signal, text = 1, f"In lower third of 52-week range ({pct:.1f}%)"
    elif position >= 0.9:
        signal = -2
        text = f"Near 52-week high ({pct:.1f}% of range) - potentially overextended"
    elif position >= 0.7:
        signal, text = -1, f"In upper third of 52-week range ({pct:.1f}%)"
    else:
        signal, text = 0, f"Mid-range ({pct:.1f}% of 52-week range)"
    return IndicatorSignal(
        "fifty_two_week",
        position,
        signal,
        text,
        details={"price": price, "low": low, "high": high, "position": position},
    )


def composite_label(mean_signal: float) -> str:
    if mean_signal >= 1:
        return "strong_buy"
    if mean_signal >= 0.3:
        return "buy"
    if mean_signal <= -1:
        return "strong_sell"
    if mean_signal <= -0.3:
        return "sell"
    return "hold"


def _last_two(values: list[float]) -> tuple[float | None, float | None]:
    if not values:
        return None, None
    prev = values[-2] if len(values) >= 2 else None
    return values[-1], prev


def technical_summary(
    series: Series,
    config: IndicatorConfig | None = None,
) -> TechnicalSummary:
    """Interpret every indicator the series is long enough for."""
    cfg = config or IndicatorConfig()
    signals: list[IndicatorSignal] = []
    warnings: list[str] = []
    atr_percent: float | None = None

    if not series:
        return TechnicalSummary((), "hold", 0, ("No price history available",))
    price = float(series[-1].close)

    rsi_now, _ = _last_two(rsi(series, cfg.rsi_period).values)
    if rsi_now is not None:
        signals.append(interpret_rsi(rsi_now))
        if rsi_now >= 70:
            warnings.append(f"RSI overbought at {rsi_now:.1f}")

    fast_now, _ = _last_two(sma(series, cfg.sma_fast).values)
    mid_now, mid_prev = _last_two(sma(series, cfg.sma_mid).values)
    slow_now, slow_prev = _last_two(sma(series, cfg.sma_slow).values)
    if fast_now is not None and mid_now is not None and slow_now is not None:
        ma_signal = interpret_moving_averages(
            price, fast_now, mid_now, slow_now, mid_prev, slow_prev
        )
        signals.append(ma_signal)
        if ma_signal.interpretation.startswith("Death Cross"):
            warnings.append("Death Cross: 50-day average crossed below 200-day")
    else:
        warnings.append(
            f"Only {len(series)} bars: {cfg.sma_slow}-period average not yet computable"
        )

    bands = bollinger_bands(
        series, cfg.bollinger_period, cfg.bollinger_multiplier
    ).bands
    if len(bands):
        bb_signal = interpret_bollinger(
            price, bands.upper[-1].value, bands.middle[-1].value, bands.lower[-1].value
        )
        signals.append(bb_signal)
        if bb_signal.signal == -2:
            warnings.append("Price trading above the upper Bollinger Band")

    macd_result = macd(series, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal)
    if macd_result.signal:
        macd_lag = len(macd_result.macd) - len(macd_result.signal)
        macd_values = [p.value for p in macd_result.macd[macd_lag:]]
        signal_values = [p.value for p in macd_result.signal]
        macd_now, macd_prev = _last_two(macd_values)
        signal_now, signal_prev = _last_two(signal_values)
        signals.append(
            interpret_macd(macd_now, signal_now, macd_prev, signal_prev)  # type: ignore[arg-type]
        )

    atr_now, _ = _last_two(atr(series, cfg.atr_period).values)
    if atr_now is not None:
        atr_signal = interpret_atr(atr_now, price)
        signals.append(atr_signal)
        atr_percent = atr_signal.details["atr_percent"]
        if atr_percent > 5:
            warnings.append(f"High volatility: ATR is {atr_percent:.2f}% of price")

    if len(series) > cfg.volume_period:
        previous = series[-cfg.volume_period - 1 : -1]
        average = sum(bar.volume for bar in previous) / cfg.volume_period
        if average > 0:
            volume_signal = interpret_volume(float(series[-1].volume), average)
            signals.append(volume_signal)
            if volume_signal.signal == -1:
                warnings.append(
                    f"Low volume: {volume_signal.value * 100:.0f}% of the "
                    f"{cfg.volume_period}-bar average"
                )

    stoch = stochastic(
        series, cfg.stochastic_k, cfg.stochastic_smoothing, cfg.stochastic_d
    )
    if stoch.d:
        signals.append(interpret_stochastic(stoch.k[-1].value, stoch.d[-1].value))

    obv_values = obv(series).values
    if len(obv_values) > cfg.obv_lookback:
        obv_now = obv_values[-1]
        obv_then = obv_values[-1 - cfg.obv_lookback]
        if obv_then != 0:
            change = (obv_now - obv_then) / abs(obv_then) * 100
            signals.append(interpret_obv(obv_now, change))

    if len(series) >= cfg.range_period:
        year = series[-cfg.range_period :]
        signals.append(
            interpret_range_position(
                price,
                float(min(bar.low for bar in year)),
                float(max(bar.high for bar in year)),
            )
        )

    if signals:
        mean_signal = sum(s.signal for s in signals) / len(signals)
    else:
        mean_signal = 0.0
    summary = TechnicalSummary(
        signals=tuple(signals),
        composite_signal=composite_label(mean_signal),
        confidence=round(min(abs(mean_signal), 2) / 2 * 100),
        warnings=tuple(warnings),
        atr_percent=atr_percent,
    )
    log.debug(
        "technical_summary",
        bar_count=len(series),
        signal_count=len(signals),
        composite=summary.composite_signal,
    )
    return summary
