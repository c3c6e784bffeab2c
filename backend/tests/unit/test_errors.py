"""Tests for the error hierarchy."""

from __future__ import annotations

from stockdash.errors import DataLoadError, InvalidInputError, StockDashError


class TestErrorHierarchy:
    def test_invalid_input_is_package_error(self) -> None:
        assert issubclass(InvalidInputError, StockDashError)

    def test_invalid_input_is_value_error(self) -> None:
        assert issubclass(InvalidInputError, ValueError)

    def test_data_load_error_is_package_error(self) -> None:
        assert issubclass(DataLoadError, StockDashError)


class TestDataLoadError:
    def test_message_with_line(self) -> None:
        err = DataLoadError("bars.csv", "bad price", line=7)
        assert err.source == "bars.csv"
        assert err.line == 7
        assert str(err) == "Cannot load bars from bars.csv:7: bad price"

    def test_message_without_line(self) -> None:
        err = DataLoadError("bars.csv", "file not found")
        assert err.line is None
        assert str(err) == "Cannot load bars from bars.csv: file not found"
