"""Market data value objects shared across the engine.

Frozen dataclasses only. Bar prices use Decimal (never float); indicator
output is float, keyed by Unix seconds.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from stockdash.errors import InvalidInputError


@dataclass(frozen=True)
class Bar:
    """OHLCV bar (candlestick) data."""

    symbol: str
    timestamp: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: int


Series = Sequence[Bar]


@dataclass(frozen=True)
class IndicatorPoint:
    """One indicator sample. time is Unix seconds, matching the bar it ends on."""

    time: int
    value: float


@dataclass(frozen=True)
class BandSet:
    """Volatility envelope: three point sequences aligned by timestamp."""

    upper: tuple[IndicatorPoint, ...]
    middle: tuple[IndicatorPoint, ...]
    lower: tuple[IndicatorPoint, ...]

    def __len__(self) -> int:
        return len(self.middle)


def validate_bar(bar: Bar) -> None:
    """Raise InvalidInputError if the bar's prices or volume are inconsistent."""
    zero = Decimal("0")
    prices = (bar.open, bar.high, bar.low, bar.close)
    if not all(p.is_finite() for p in prices):
        raise InvalidInputError(
            f"Bar at {bar.timestamp.isoformat()} has a non-finite price"
        )
    if min(prices) <= zero:
        raise InvalidInputError(
            f"Bar at {bar.timestamp.isoformat()} has a non-positive price"
        )
    if bar.volume < 0:
        raise InvalidInputError(
            f"Bar at {bar.timestamp.isoformat()} has negative volume {bar.volume}"
        )
    body_high = max(bar.open, bar.close)
    body_low = min(bar.open, bar.close)
    if not (bar.high >= body_high and body_low >= bar.low):
        raise InvalidInputError(
            f"Bar at {bar.timestamp.isoformat()} violates high >= open/close >= low"
        )


def validate_series(bars: Series) -> None:
    """Check that a series is strictly increasing by timestamp.

    Duplicate timestamps count as non-increasing. Each bar is also checked
    with validate_bar(). An empty series is valid.
    """
    prev: datetime | None = None
    for bar in bars:
        validate_bar(bar)
        if prev is not None and bar.timestamp <= prev:
            raise InvalidInputError(
                f"Series is not strictly increasing: {bar.timestamp.isoformat()} "
                f"follows {prev.isoformat()}"
            )
        prev = bar.timestamp
