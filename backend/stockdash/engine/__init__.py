"""Engine layer: indicator calculation and interpretation."""

from stockdash.engine.indicators import (
    SMA,
    BandIndicator,
    IndicatorKind,
    IndicatorResult,
    LineIndicator,
    MacdIndicator,
    StochasticIndicator,
    atr,
    bollinger_bands,
    compute_indicator,
    ema,
    macd,
    obv,
    rsi,
    sma,
    stochastic,
    wma,
)
from stockdash.engine.signals import IndicatorSignal, TechnicalSummary, technical_summary

__all__ = [
    "SMA",
    "BandIndicator",
    "IndicatorKind",
    "IndicatorResult",
    "IndicatorSignal",
    "LineIndicator",
    "MacdIndicator",
    "StochasticIndicator",
    "TechnicalSummary",
    "atr",
    "bollinger_bands",
    "compute_indicator",
    "ema",
    "macd",
    "obv",
    "rsi",
    "sma",
    "stochastic",
    "technical_summary",
    "wma",
]
