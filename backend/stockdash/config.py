"""Pydantic Settings configuration models.

3-tier config hierarchy (lowest to highest priority):
1. Pydantic defaults (in code below)
2. .env file (loaded by Pydantic Settings)
3. Environment variables (e.g., STOCKDASH_RISK__CONCENTRATION_THRESHOLD_PCT=20)

Thresholds default to the values the dashboard has always shown:
25% single-position concentration, 2% risk per trade, a 3x best-case /
1.5x expected-case reward multiple.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
VALID_LOG_FORMATS = frozenset({"console", "json"})


class RiskConfig(BaseModel):
    """Position-sizing warning thresholds."""

    default_risk_per_trade: Decimal = Field(
        default=Decimal("0.02"),
        gt=Decimal("0"),
        le=Decimal("1"),
    )
    # Percent of capital in one position before warning
    concentration_threshold_pct: Decimal = Field(
        default=Decimal("25"),
        gt=Decimal("0"),
        le=Decimal("100"),
    )
    # Percentage points of capital tolerated above the requested risk
    risk_tolerance_pct: Decimal = Field(
        default=Decimal("0.01"),
        ge=Decimal("0"),
        le=Decimal("1"),
    )
    # Risk percent above which a trade is flagged as aggressive
    high_risk_pct: Decimal = Field(
        default=Decimal("3"),
        gt=Decimal("0"),
        le=Decimal("100"),
    )


class ScenarioConfig(BaseModel):
    """Reward multiples and win probability used by scenario analysis.

    Multiples are expressed in units of the stop distance (R).
    """

    best_case_multiple: Decimal = Field(
        default=Decimal("3.0"),
        gt=Decimal("0"),
        le=Decimal("20"),
    )
    expected_case_multiple: Decimal = Field(
        default=Decimal("1.5"),
        gt=Decimal("0"),
        le=Decimal("20"),
    )
    win_probability: Decimal = Field(
        default=Decimal("0.5"),
        ge=Decimal("0"),
        le=Decimal("1"),
    )

    @model_validator(mode="after")
    def validate_multiples(self) -> ScenarioConfig:
        if self.expected_case_multiple > self.best_case_multiple:
            raise ValueError(
                "expected_case_multiple must not exceed best_case_multiple, got "
                f"{self.expected_case_multiple} > {self.best_case_multiple}"
            )
        return self


class IndicatorConfig(BaseModel):
    """Default lookbacks for the technical summary."""

    sma_fast: int = Field(default=20, ge=2, le=100)
    sma_mid: int = Field(default=50, ge=5, le=200)
    sma_slow: int = Field(default=200, ge=20, le=500)
    bollinger_period: int = Field(default=20, ge=2, le=200)
    bollinger_multiplier: float = Field(default=2.0, gt=0.0, le=5.0)
    rsi_period: int = Field(default=14, ge=2, le=100)
    atr_period: int = Field(default=14, ge=2, le=100)
    macd_fast: int = Field(default=12, ge=2, le=50)
    macd_slow: int = Field(default=26, ge=5, le=100)
    macd_signal: int = Field(default=9, ge=2, le=50)
    stochastic_k: int = Field(default=14, ge=2, le=100)
    stochastic_smoothing: int = Field(default=3, ge=1, le=20)
    stochastic_d: int = Field(default=3, ge=1, le=20)
    # Bars averaged for the volume ratio, excluding the latest bar
    volume_period: int = Field(default=20, ge=2, le=200)
    # OBV change is measured against the value this many bars back
    obv_lookback: int = Field(default=20, ge=1, le=200)
    # One trading year of daily bars
    range_period: int = Field(default=252, ge=20, le=1000)

    @model_validator(mode="after")
    def validate_ordering(self) -> IndicatorConfig:
        if not self.sma_fast < self.sma_mid < self.sma_slow:
            raise ValueError(
                "SMA periods must satisfy fast < mid < slow, got "
                f"{self.sma_fast}/{self.sma_mid}/{self.sma_slow}"
            )
        if self.macd_fast >= self.macd_slow:
            raise ValueError(
                f"macd_fast must be below macd_slow, got "
                f"{self.macd_fast} >= {self.macd_slow}"
            )
        return self


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Env var examples:
        STOCKDASH_LOG_LEVEL=DEBUG
        STOCKDASH_SCENARIO__BEST_CASE_MULTIPLE=2.5
        STOCKDASH_INDICATORS__RSI_PERIOD=9
    """

    model_config = SettingsConfigDict(
        env_prefix="STOCKDASH_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    risk: RiskConfig = RiskConfig()
    scenario: ScenarioConfig = ScenarioConfig()
    indicators: IndicatorConfig = IndicatorConfig()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got {v}"
            )
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {sorted(VALID_LOG_FORMATS)}, got {v}"
            )
        return v
