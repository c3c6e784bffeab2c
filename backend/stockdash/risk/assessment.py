"""Deterministic risk assessment built on top of position sizing.

Combines a PositionSizingResult with an optional TechnicalSummary into a
risk level, risk metrics, advice and capital-preservation notes.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

import structlog

from stockdash.config import AppConfig
from stockdash.engine.signals import TechnicalSummary
from stockdash.risk.position_sizer import (
    BindingConstraint,
    PositionSizer,
    PositionSizingRequest,
    PositionSizingResult,
)

log = structlog.get_logger()

_HUNDRED = Decimal("100")

# Probability-of-profit adjustment (percentage points) per composite verdict,
# expressed for a long setup.
_COMPOSITE_ADJUSTMENT = {
    "strong_buy": Decimal("10"),
    "buy": Decimal("5"),
    "hold": Decimal("0"),
    "sell": Decimal("-5"),
    "strong_sell": Decimal("-10"),
}

# Neutral score when no ATR reading is available
_DEFAULT_VOLATILITY_SCORE = 50


class RiskLevel(str, Enum):
    VERY_LOW = "very_low"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


@dataclass(frozen=True)
class RiskMetrics:
    risk_reward_ratio: Decimal
    probability_of_profit: Decimal
    expected_value: Decimal
    volatility_score: int


@dataclass(frozen=True)
class RiskAssessment:
    position_sizing: PositionSizingResult
    risk_level: RiskLevel
    risk_metrics: RiskMetrics
    warnings: tuple[str, ...]
    advice: tuple[str, ...]
    capital_preservation: tuple[str, ...]
    technical: TechnicalSummary | None = None


def volatility_score(summary: TechnicalSummary | None) -> int:
    """Map ATR as a percent of price onto 0-100 (5% or more scores 100)."""
    if summary is None or summary.atr_percent is None:
        return _DEFAULT_VOLATILITY_SCORE
    return min(100, max(0, round(summary.atr_percent * 20)))


def classify_risk(
    sizing: PositionSizingResult,
    risk_reward: Decimal,
    vol_score: int,
    config: AppConfig,
) -> RiskLevel:
    """Score risk %, concentration, volatility and reward/risk into a level."""
    risk_cfg = config.risk
    points = 0
    if sizing.risk_percentage > risk_cfg.high_risk_pct:
        points += 2
    elif sizing.risk_percentage > config.risk.default_risk_per_trade * _HUNDRED:
        points += 1
    if sizing.position_percentage > risk_cfg.concentration_threshold_pct:
        points += 2
    elif sizing.position_percentage > risk_cfg.concentration_threshold_pct / 2:
        points += 1
    if vol_score >= 80:
        points += 2
    elif vol_score >= 60:
        points += 1
    if risk_reward < 1:
        points += 1

    if points == 0:
        return RiskLevel.VERY_LOW
    if points == 1:
        return RiskLevel.LOW
    if points == 2:
        return RiskLevel.MODERATE
    if points <= 4:
        return RiskLevel.HIGH
    return RiskLevel.VERY_HIGH


def _probability_of_profit(
    request: PositionSizingRequest,
    summary: TechnicalSummary | None,
    config: AppConfig,
) -> Decimal:
    base = config.scenario.win_probability * _HUNDRED
    if summary is not None:
        adjustment = _COMPOSITE_ADJUSTMENT.get(summary.composite_signal, Decimal("0"))
        base += adjustment if request.is_long else -adjustment
    return min(_HUNDRED, max(Decimal("0"), base))


def _advice(
    request: PositionSizingRequest,
    sizing: PositionSizingResult,
    risk_reward: Decimal,
    config: AppConfig,
) -> list[str]:
    advice: list[str] = []
    if request.risk_per_trade > config.risk.default_risk_per_trade:
        advice.append("Most professional traders risk 1-2% of their account per trade")
    if sizing.position_percentage > config.risk.concentration_threshold_pct:
        advice.append(
            "Never allocate more than 20-25% of your portfolio to a single position"
        )
    if risk_reward < 2:
        advice.append(
            f"Reward-to-risk is {risk_reward:.1f}:1; look for setups offering "
            "at least 2:1"
        )
    if sizing.binding_constraint is BindingConstraint.CASH:
        advice.append(
            f"Available cash caps this trade at {sizing.max_shares} shares, "
            "below what the risk budget allows"
        )
    advice.append(
        f"Enter the stop-loss order at ${request.stop_loss:,.2f} together "
        "with the entry"
    )
    return advice


def _capital_preservation(
    request: PositionSizingRequest,
    sizing: PositionSizingResult,
) -> list[str]:
    expected_price = sizing.scenarios.expected_case.price
    return [
        f"Keep the hard stop at ${request.stop_loss:,.2f} and never widen it",
        f"Take partial profits near ${expected_price:,.2f} and trail the "
        "stop to breakeven",
        f"Cap the loss on this trade at ${sizing.risk_amount:,.2f} "
        f"({sizing.risk_percentage:.2f}% of capital)",
    ]


def assess_risk(
    request: PositionSizingRequest,
    summary: TechnicalSummary | None = None,
    config: AppConfig | None = None,
) -> RiskAssessment:
    """Size the trade and classify its risk. Raises InvalidInputError."""
    cfg = config or AppConfig()
    sizing = PositionSizer(cfg.risk, cfg.scenario).calculate(request)

    stop_distance = sizing.stop_loss_distance.dollars
    best = sizing.scenarios.best_case
    risk_reward = abs(best.price - request.entry_price) / stop_distance
    vol_score = volatility_score(summary)

    metrics = RiskMetrics(
        risk_reward_ratio=risk_reward,
        probability_of_profit=_probability_of_profit(request, summary, cfg),
        expected_value=sizing.scenarios.expected_case.amount,
        volatility_score=vol_score,
    )
    level = classify_risk(sizing, risk_reward, vol_score, cfg)

    warnings = list(sizing.warnings)
    if summary is not None:
        warnings.extend(summary.warnings)

    log.info(
        "risk_assessed",
        symbol=request.symbol or None,
        risk_level=level.value,
        shares=sizing.recommended_shares,
        warning_count=len(warnings),
    )
    return RiskAssessment(
        position_sizing=sizing,
        risk_level=level,
        risk_metrics=metrics,
        warnings=tuple(warnings),
        advice=tuple(_advice(request, sizing, risk_reward, cfg)),
        capital_preservation=tuple(_capital_preservation(request, sizing)),
        technical=summary,
    )
