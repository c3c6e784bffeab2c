"""Shared test fixtures for stockdash."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from stockdash.market.types import Bar
from tests.factories import make_series


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep STOCKDASH_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("STOCKDASH_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop handlers bound to streams captured by an earlier test."""
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


@pytest.fixture
def trending_series() -> list[Bar]:
    """260 daily bars (over a trading year) drifting upward with some wobble."""
    closes = [f"{100 + i * 0.4 + ((i % 5) - 2) * 0.3:.2f}" for i in range(260)]
    return make_series(closes)


@pytest.fixture
def bars_csv(tmp_path: Path) -> Path:
    """A small newest-first CSV export, as data providers return it."""
    path = tmp_path / "bars.csv"
    rows = ["datetime,open,high,low,close,volume"]
    closes = [10, 11, 12, 13, 14]
    for day, close in reversed(list(enumerate(closes, start=2))):
        rows.append(
            f"2026-02-{day:02d},{close - 0.5},{close + 1},{close - 1},{close},1000"
        )
    path.write_text("\n".join(rows) + "\n", encoding="utf-8")
    return path
