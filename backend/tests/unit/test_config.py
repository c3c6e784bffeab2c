"""Tests for configuration system."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from stockdash.config import AppConfig, IndicatorConfig, RiskConfig, ScenarioConfig


class TestDefaultConfig:
    def test_default_config_loads(self) -> None:
        config = AppConfig()
        assert config.log_level == "INFO"
        assert config.log_format == "console"
        assert config.indicators.bollinger_period == 20
        assert config.indicators.bollinger_multiplier == 2.0

    def test_documented_thresholds(self) -> None:
        config = AppConfig()
        assert config.risk.concentration_threshold_pct == Decimal("25")
        assert config.risk.default_risk_per_trade == Decimal("0.02")
        assert config.scenario.best_case_multiple == Decimal("3.0")
        assert config.scenario.expected_case_multiple == Decimal("1.5")
        assert config.scenario.win_probability == Decimal("0.5")

    def test_extended_indicator_defaults(self) -> None:
        ind = AppConfig().indicators
        assert (ind.stochastic_k, ind.stochastic_smoothing, ind.stochastic_d) == (
            14,
            3,
            3,
        )
        assert ind.volume_period == 20
        assert ind.obv_lookback == 20
        assert ind.range_period == 252

    def test_money_fields_are_decimal(self) -> None:
        config = AppConfig()
        assert isinstance(config.risk.risk_tolerance_pct, Decimal)
        assert isinstance(config.scenario.best_case_multiple, Decimal)


class TestValidation:
    def test_risk_fraction_above_one(self) -> None:
        with pytest.raises(ValidationError):
            RiskConfig(default_risk_per_trade=Decimal("1.5"))

    def test_expected_multiple_above_best(self) -> None:
        with pytest.raises(ValidationError, match="expected_case_multiple"):
            ScenarioConfig(
                best_case_multiple=Decimal("1"), expected_case_multiple=Decimal("2")
            )

    def test_sma_ordering(self) -> None:
        with pytest.raises(ValidationError, match="fast < mid < slow"):
            IndicatorConfig(sma_fast=60, sma_mid=50, sma_slow=200)

    def test_macd_ordering(self) -> None:
        with pytest.raises(ValidationError, match="macd_fast"):
            IndicatorConfig(macd_fast=30, macd_slow=26)

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig(log_level="LOUD")

    def test_log_level_normalized(self) -> None:
        assert AppConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_format(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig(log_format="xml")


class TestEnvOverrides:
    def test_nested_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STOCKDASH_RISK__CONCENTRATION_THRESHOLD_PCT", "20")
        assert AppConfig().risk.concentration_threshold_pct == Decimal("20")

    def test_scenario_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STOCKDASH_SCENARIO__WIN_PROBABILITY", "0.4")
        assert AppConfig().scenario.win_probability == Decimal("0.4")

    def test_top_level_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STOCKDASH_LOG_FORMAT", "JSON")
        assert AppConfig().log_format == "json"
