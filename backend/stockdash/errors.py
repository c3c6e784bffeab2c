"""Engine error hierarchy.

All package exceptions inherit from StockDashError, enabling clean
exception handling at the CLI and API boundary.
"""

from __future__ import annotations


class StockDashError(Exception):
    """Base exception for all stockdash errors."""


class InvalidInputError(StockDashError, ValueError):
    """Malformed or degenerate input (zero stop distance, bad series, ...).

    Deterministic: retrying with the same input fails the same way.
    """


class DataLoadError(StockDashError):
    """Bar data could not be read or parsed.

    Stores the source path and the offending line number when known.
    """

    def __init__(self, source: str, message: str, line: int | None = None) -> None:
        self.source = source
        self.line = line
        self.message = message
        where = f"{source}:{line}" if line is not None else source
        super().__init__(f"Cannot load bars from {where}: {message}")
