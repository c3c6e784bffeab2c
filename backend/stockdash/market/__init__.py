"""Market data value objects and loaders."""

from stockdash.market.types import (
    BandSet,
    Bar,
    IndicatorPoint,
    Series,
    validate_series,
)

__all__ = [
    "BandSet",
    "Bar",
    "IndicatorPoint",
    "Series",
    "validate_series",
]
