"""Position sizing calculator -- pure Decimal math, no I/O.

Calculates how many shares to buy from the risk budget and stop distance,
capped by available cash, then projects best/expected/worst outcomes.
Advisory conditions become warning strings; only degenerate input raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, Inexact, localcontext
from enum import Enum

import structlog

from stockdash.config import RiskConfig, ScenarioConfig
from stockdash.errors import InvalidInputError

log = structlog.get_logger()

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
_EXACT_PRECISION = 100
_NUMERIC_FIELDS = (
    "capital",
    "risk_per_trade",
    "entry_price",
    "stop_loss",
    "available_cash",
    "target_price",
)


class BindingConstraint(str, Enum):
    """Which limit determined the share count."""

    RISK = "risk"
    CASH = "cash"


@dataclass(frozen=True)
class PositionSizingRequest:
    """Trade setup to size. risk_per_trade is a fraction (0.02 = 2%)."""

    capital: Decimal
    risk_per_trade: Decimal
    entry_price: Decimal
    stop_loss: Decimal
    available_cash: Decimal
    target_price: Decimal | None = None
    symbol: str = ""

    @classmethod
    def from_values(
        cls,
        capital: object,
        risk_per_trade: object,
        entry_price: object,
        stop_loss: object,
        available_cash: object,
        target_price: object | None = None,
        symbol: str = "",
    ) -> PositionSizingRequest:
        """Build a request from ints, floats or strings via their str() form."""
        try:
            return cls(
                capital=Decimal(str(capital)),
                risk_per_trade=Decimal(str(risk_per_trade)),
                entry_price=Decimal(str(entry_price)),
                stop_loss=Decimal(str(stop_loss)),
                available_cash=Decimal(str(available_cash)),
                target_price=(
                    Decimal(str(target_price)) if target_price is not None else None
                ),
                symbol=symbol.upper(),
            )
        except ArithmeticError as e:
            raise InvalidInputError(f"Non-numeric sizing input: {e}") from e

    @property
    def is_long(self) -> bool:
        return self.entry_price > self.stop_loss


@dataclass(frozen=True)
class StopLossDistance:
    dollars: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class Scenario:
    """Projected outcome. amount is signed: profit > 0, loss < 0."""

    amount: Decimal
    percentage: Decimal
    price: Decimal
    description: str


@dataclass(frozen=True)
class ScenarioAnalysis:
    best_case: Scenario
    expected_case: Scenario
    worst_case: Scenario


@dataclass(frozen=True)
class PositionSizingResult:
    """Result of position size calculation.

    Percentages are of capital, except stop_loss_distance.percentage which
    is of the entry price.
    """

    recommended_shares: int
    recommended_dollar_amount: Decimal
    risk_amount: Decimal
    risk_percentage: Decimal
    max_shares: int
    position_percentage: Decimal
    stop_loss_distance: StopLossDistance
    max_risk_amount: Decimal
    binding_constraint: BindingConstraint
    scenarios: ScenarioAnalysis
    warnings: tuple[str, ...] = ()


def validate_request(request: PositionSizingRequest) -> None:
    """Raise InvalidInputError for a request that cannot be sized."""
    for name in _NUMERIC_FIELDS:
        value = getattr(request, name)
        if value is not None and not value.is_finite():
            raise InvalidInputError(f"{name} must be a finite number, got {value}")
    if request.capital <= _ZERO:
        raise InvalidInputError(f"Capital must be positive, got {request.capital}")
    if not _ZERO < request.risk_per_trade <= Decimal("1"):
        raise InvalidInputError(
            f"Risk per trade must be in (0, 1], got {request.risk_per_trade}"
        )
    if request.entry_price <= _ZERO:
        raise InvalidInputError(
            f"Entry price must be positive, got {request.entry_price}"
        )
    if request.stop_loss <= _ZERO:
        raise InvalidInputError(f"Stop loss must be positive, got {request.stop_loss}")
    if request.available_cash < _ZERO:
        raise InvalidInputError(
            f"Available cash must not be negative, got {request.available_cash}"
        )
    if request.entry_price == request.stop_loss:
        raise InvalidInputError(
            "Stop distance is zero: entry price equals stop loss "
            f"({request.entry_price})"
        )
    target = request.target_price
    if target is not None:
        if request.is_long and target <= request.entry_price:
            raise InvalidInputError(
                f"Target {target} must be above entry {request.entry_price} "
                "for a long setup"
            )
        if not request.is_long and target >= request.entry_price:
            raise InvalidInputError(
                f"Target {target} must be below entry {request.entry_price} "
                "for a short setup"
            )


class PositionSizer:
    """Calculate position size and scenarios from a trade setup.

    All math in Decimal. Truncates to whole shares (conservative).
    """

    def __init__(
        self,
        risk_config: RiskConfig | None = None,
        scenario_config: ScenarioConfig | None = None,
    ) -> None:
        self._risk = risk_config or RiskConfig()
        self._scenario = scenario_config or ScenarioConfig()

    def calculate(self, request: PositionSizingRequest) -> PositionSizingResult:
        """Size the position. Raises InvalidInputError on degenerate input."""
        validate_request(request)

        # The caps must be exact: any rounding here can overshoot them
        try:
            with localcontext() as ctx:
                ctx.prec = _EXACT_PRECISION
                ctx.traps[Inexact] = True
                stop_distance = abs(request.entry_price - request.stop_loss)
                max_risk = request.capital * request.risk_per_trade
                theoretical_shares = int(max_risk // stop_distance)
                max_shares = int(request.available_cash // request.entry_price)
        except ArithmeticError as e:
            raise InvalidInputError(f"Sizing input out of range: {e}") from e
        shares = max(min(theoretical_shares, max_shares), 0)
        binding = (
            BindingConstraint.CASH
            if max_shares < theoretical_shares
            else BindingConstraint.RISK
        )

        dollar_amount = shares * request.entry_price
        risk_amount = shares * stop_distance
        risk_pct = risk_amount / request.capital * _HUNDRED
        position_pct = dollar_amount / request.capital * _HUNDRED

        scenarios = self._scenarios(request, shares, stop_distance, risk_amount)
        warnings = self._warnings(
            request, shares, theoretical_shares, max_shares, risk_pct, position_pct
        )

        log.debug(
            "position_sized",
            symbol=request.symbol or None,
            shares=shares,
            binding=binding.value,
            risk_pct=str(risk_pct),
            warning_count=len(warnings),
        )

        return PositionSizingResult(
            recommended_shares=shares,
            recommended_dollar_amount=dollar_amount,
            risk_amount=risk_amount,
            risk_percentage=risk_pct,
            max_shares=max_shares,
            position_percentage=position_pct,
            stop_loss_distance=StopLossDistance(
                dollars=stop_distance,
                percentage=stop_distance / request.entry_price * _HUNDRED,
            ),
            max_risk_amount=max_risk,
            binding_constraint=binding,
            scenarios=scenarios,
            warnings=tuple(warnings),
        )

    def _scenarios(
        self,
        request: PositionSizingRequest,
        shares: int,
        stop_distance: Decimal,
        risk_amount: Decimal,
    ) -> ScenarioAnalysis:
        cfg = self._scenario
        direction = Decimal("1") if request.is_long else Decimal("-1")
        entry = request.entry_price

        if request.target_price is not None:
            best_price = request.target_price
            best_reward = abs(best_price - entry)
            best_text = (
                f"Price reaches the ${best_price:,.2f} target "
                f"({best_reward / stop_distance:.1f}x the stop distance)"
            )
        else:
            best_reward = cfg.best_case_multiple * stop_distance
            best_price = entry + direction * best_reward
            best_text = (
                f"Price moves {cfg.best_case_multiple}x the stop distance "
                f"in your favor to ${best_price:,.2f}"
            )
        best_amount = shares * best_reward

        win_amount = shares * cfg.expected_case_multiple * stop_distance
        p = cfg.win_probability
        expected_amount = p * win_amount - (Decimal("1") - p) * risk_amount
        expected_price = entry + direction * cfg.expected_case_multiple * stop_distance
        expected_text = (
            f"{p * _HUNDRED:.0f}% chance of a {cfg.expected_case_multiple}x gain "
            f"to ${expected_price:,.2f}, otherwise stopped out"
        )

        def pct(amount: Decimal) -> Decimal:
            return amount / request.capital * _HUNDRED

        return ScenarioAnalysis(
            best_case=Scenario(best_amount, pct(best_amount), best_price, best_text),
            expected_case=Scenario(
                expected_amount, pct(expected_amount), expected_price, expected_text
            ),
            worst_case=Scenario(
                -risk_amount,
                pct(-risk_amount),
                request.stop_loss,
                "Stop-loss triggered at full risk",
            ),
        )

    def _warnings(
        self,
        request: PositionSizingRequest,
        shares: int,
        theoretical_shares: int,
        max_shares: int,
        risk_pct: Decimal,
        position_pct: Decimal,
    ) -> list[str]:
        cfg = self._risk
        warnings: list[str] = []
        limit_pct = request.risk_per_trade * _HUNDRED

        if risk_pct > limit_pct + cfg.risk_tolerance_pct:
            warnings.append(
                f"Risk of {risk_pct:.2f}% exceeds the {limit_pct:.2f}% "
                "risk-per-trade limit"
            )
        if position_pct > cfg.concentration_threshold_pct:
            warnings.append(
                f"This position represents {position_pct:.1f}% of your account, "
                f"more than {cfg.concentration_threshold_pct}%. Consider reducing "
                "position size to maintain diversification"
            )
        if shares == 0:
            if theoretical_shares == 0:
                warnings.append(
                    "Position too small to size: risk budget "
                    f"${request.capital * request.risk_per_trade:,.2f} does not "
                    "cover one share at this stop distance"
                )
            elif max_shares == 0:
                warnings.append(
                    "Position too small to size: available cash "
                    f"${request.available_cash:,.2f} does not cover one share"
                )
        return warnings


def compute_sizing(
    request: PositionSizingRequest,
    risk_config: RiskConfig | None = None,
    scenario_config: ScenarioConfig | None = None,
) -> PositionSizingResult:
    """Size a position with the given (or default) configuration."""
    return PositionSizer(risk_config, scenario_config).calculate(request)
