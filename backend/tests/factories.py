"""Shared test factories for creating domain objects.

Provides make_bar(), make_series() and make_request() with sensible
defaults so tests can focus on the values they care about.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from stockdash.market.types import Bar
from stockdash.risk.position_sizer import PositionSizingRequest

# Default timestamp: a regular trading day, 16:00 ET close (21:00 UTC)
_DEFAULT_TIMESTAMP = datetime(2026, 2, 10, 21, 0, tzinfo=UTC)


def make_bar(
    *,
    symbol: str = "AAPL",
    timestamp: datetime = _DEFAULT_TIMESTAMP,
    open: Decimal = Decimal("150.00"),
    high: Decimal = Decimal("151.00"),
    low: Decimal = Decimal("149.00"),
    close: Decimal = Decimal("150.50"),
    volume: int = 1000,
) -> Bar:
    """Create a Bar with sensible defaults."""
    return Bar(
        symbol=symbol,
        timestamp=timestamp,
        open=open,
        high=high,
        low=low,
        close=close,
        volume=volume,
    )


def make_series(
    closes: Sequence[float | int | str | Decimal],
    *,
    symbol: str = "AAPL",
    start: datetime = _DEFAULT_TIMESTAMP,
    step: timedelta = timedelta(days=1),
    spread: Decimal = Decimal("0.01"),
) -> list[Bar]:
    """Create a daily series from closes.

    Each bar opens at the previous close; high/low sit ``spread`` (as a
    fraction) outside the body so every bar is a valid OHLC bar.
    """
    bars: list[Bar] = []
    prev: Decimal | None = None
    for i, raw in enumerate(closes):
        close = Decimal(str(raw))
        open_ = prev if prev is not None else close
        bars.append(
            Bar(
                symbol=symbol,
                timestamp=start + step * i,
                open=open_,
                high=max(open_, close) * (1 + spread),
                low=min(open_, close) * (1 - spread),
                close=close,
                volume=1000 + i,
            )
        )
        prev = close
    return bars


def make_request(
    *,
    capital: str = "10000",
    risk_per_trade: str = "0.02",
    entry_price: str = "50",
    stop_loss: str = "47.50",
    available_cash: str = "5000",
    target_price: str | None = None,
    symbol: str = "AAPL",
) -> PositionSizingRequest:
    """Create a PositionSizingRequest with sensible defaults."""
    return PositionSizingRequest(
        capital=Decimal(capital),
        risk_per_trade=Decimal(risk_per_trade),
        entry_price=Decimal(entry_price),
        stop_loss=Decimal(stop_loss),
        available_cash=Decimal(available_cash),
        target_price=Decimal(target_price) if target_price is not None else None,
        symbol=symbol,
    )
