"""CSV bar loader -- turns an exported OHLCV file into a validated Series.

Accepts the column names market-data providers export (``datetime`` or
``timestamp``, ``open``, ``high``, ``low``, ``close``, ``volume`` and an
optional ``symbol``). Providers often return newest-first, so rows are
sorted oldest-first and de-duplicated by timestamp (last row wins).
"""

from __future__ import annotations

import csv
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

import structlog

from stockdash.errors import DataLoadError, InvalidInputError
from stockdash.market.types import Bar, validate_series
from stockdash.utils.time import from_unix_seconds, parse_timestamp

log = structlog.get_logger()

_TIME_COLUMNS = ("datetime", "timestamp", "date", "time")
_PRICE_COLUMNS = ("open", "high", "low", "close")


def load_bars(path: str | Path, symbol: str = "") -> list[Bar]:
    """Read bars from a CSV file, oldest first.

    Raises DataLoadError if the file is missing, a required column is
    absent, a row cannot be parsed or holds a non-finite number, or the
    bars fail validate_series.
    """
    source = str(path)
    try:
        with open(path, newline="", encoding="utf-8") as fh:
            reader = csv.DictReader(fh)
            fieldnames = [name.strip().lower() for name in reader.fieldnames or []]
            reader.fieldnames = fieldnames
            time_column = _pick_time_column(source, fieldnames)
            missing = [c for c in (*_PRICE_COLUMNS, "volume") if c not in fieldnames]
            if missing:
                raise DataLoadError(source, f"missing columns: {', '.join(missing)}")

            by_time: dict[datetime, Bar] = {}
            # Header is line 1
            for line, row in enumerate(reader, start=2):
                bar = _row_to_bar(source, line, row, time_column, symbol)
                by_time[bar.timestamp] = bar
    except FileNotFoundError as e:
        raise DataLoadError(source, "file not found") from e

    bars = sorted(by_time.values(), key=lambda b: b.timestamp)
    try:
        validate_series(bars)
    except InvalidInputError as e:
        raise DataLoadError(source, str(e)) from e

    log.debug(
        "bars_loaded",
        source=source,
        bar_count=len(bars),
        symbol=bars[0].symbol if bars else symbol,
    )
    return bars


def _pick_time_column(source: str, fieldnames: list[str]) -> str:
    for name in _TIME_COLUMNS:
        if name in fieldnames:
            return name
    raise DataLoadError(source, "no datetime/timestamp column")


def _row_to_bar(
    source: str,
    line: int,
    row: dict[str, str],
    time_column: str,
    symbol: str,
) -> Bar:
    try:
        raw_time = row[time_column].strip()
        if raw_time.isdigit():
            timestamp = from_unix_seconds(int(raw_time))
        else:
            timestamp = parse_timestamp(raw_time)
        prices = {name: Decimal(row[name].strip()) for name in _PRICE_COLUMNS}
        raw_volume = Decimal(row["volume"].strip() or "0")
    except (KeyError, ValueError, InvalidOperation, AttributeError) as e:
        raise DataLoadError(source, f"unparseable row ({e})", line=line) from e

    for name, value in (*prices.items(), ("volume", raw_volume)):
        if not value.is_finite():
            raise DataLoadError(source, f"non-finite {name} ({value})", line=line)
    volume = int(raw_volume)

    return Bar(
        symbol=(row.get("symbol") or symbol).strip().upper(),
        timestamp=timestamp,
        volume=volume,
        **prices,
    )
