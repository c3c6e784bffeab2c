"""Tests for PositionSizer -- pure Decimal math position sizing."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from stockdash.config import RiskConfig, ScenarioConfig
from stockdash.errors import InvalidInputError
from stockdash.risk.position_sizer import (
    BindingConstraint,
    PositionSizer,
    PositionSizingRequest,
    compute_sizing,
)
from tests.factories import make_request


class TestWorkedExample:
    """capital 10000, 2% risk, entry 50, stop 47.50, cash 5000."""

    def test_sizing_fields(self) -> None:
        result = compute_sizing(make_request())
        assert result.stop_loss_distance.dollars == Decimal("2.50")
        assert result.stop_loss_distance.percentage == Decimal("5")
        assert result.max_risk_amount == Decimal("200")
        assert result.max_shares == 100
        assert result.recommended_shares == 80
        assert result.recommended_dollar_amount == Decimal("4000")
        assert result.risk_amount == Decimal("200")
        assert result.risk_percentage == Decimal("2.0")
        assert result.position_percentage == Decimal("40")
        assert result.binding_constraint is BindingConstraint.RISK

    def test_over_concentration_warning(self) -> None:
        result = compute_sizing(make_request())
        assert len(result.warnings) == 1
        assert "40.0% of your account" in result.warnings[0]
        assert "25%" in result.warnings[0]

    def test_no_warning_below_threshold(self) -> None:
        config = RiskConfig(concentration_threshold_pct=Decimal("50"))
        assert compute_sizing(make_request(), config).warnings == ()


class TestScenarios:
    def test_default_multiples(self) -> None:
        scenarios = compute_sizing(make_request()).scenarios
        # best: 80 shares * 3 * 2.50
        assert scenarios.best_case.amount == Decimal("600")
        assert scenarios.best_case.price == Decimal("57.50")
        assert scenarios.best_case.percentage == Decimal("6")
        # expected: 0.5 * (80 * 1.5 * 2.50) - 0.5 * 200
        assert scenarios.expected_case.amount == Decimal("50")
        assert scenarios.expected_case.price == Decimal("53.75")
        # worst: full stop-loss
        assert scenarios.worst_case.amount == Decimal("-200")
        assert scenarios.worst_case.percentage == Decimal("-2")
        assert scenarios.worst_case.price == Decimal("47.50")
        assert scenarios.worst_case.description == "Stop-loss triggered at full risk"

    def test_descriptions_name_assumptions(self) -> None:
        scenarios = compute_sizing(make_request()).scenarios
        assert "3.0x" in scenarios.best_case.description
        assert "50% chance" in scenarios.expected_case.description
        assert "1.5x" in scenarios.expected_case.description

    def test_target_price_overrides_best_multiple(self) -> None:
        result = compute_sizing(make_request(target_price="55"))
        assert result.scenarios.best_case.amount == Decimal("400")
        assert result.scenarios.best_case.price == Decimal("55")
        assert "2.0x the stop distance" in result.scenarios.best_case.description

    def test_short_setup_projects_downward(self) -> None:
        request = make_request(entry_price="50", stop_loss="52.50")
        scenarios = compute_sizing(request).scenarios
        assert scenarios.best_case.price == Decimal("42.50")
        assert scenarios.best_case.amount > 0
        assert scenarios.worst_case.price == Decimal("52.50")

    def test_custom_scenario_config(self) -> None:
        config = ScenarioConfig(
            best_case_multiple=Decimal("2"),
            expected_case_multiple=Decimal("1"),
            win_probability=Decimal("0.6"),
        )
        scenarios = compute_sizing(make_request(), scenario_config=config).scenarios
        assert scenarios.best_case.amount == Decimal("400")
        # 0.6 * 200 - 0.4 * 200
        assert scenarios.expected_case.amount == Decimal("40")


class TestCashCap:
    def test_cash_is_binding(self) -> None:
        result = compute_sizing(make_request(available_cash="1000"))
        assert result.recommended_shares == 20
        assert result.max_shares == 20
        assert result.risk_amount == Decimal("50")
        assert result.binding_constraint is BindingConstraint.CASH

    def test_zero_cash_warns_not_raises(self) -> None:
        result = compute_sizing(make_request(available_cash="0"))
        assert result.recommended_shares == 0
        assert any("available cash" in w for w in result.warnings)

    def test_risk_budget_too_small(self) -> None:
        result = compute_sizing(
            make_request(capital="1000", risk_per_trade="0.01", stop_loss="35")
        )
        # budget 10 / stop distance 15 -> 0 shares
        assert result.recommended_shares == 0
        assert result.risk_percentage == Decimal("0")
        assert any("risk budget" in w for w in result.warnings)

    def test_cash_cap_holds_beyond_context_precision(self) -> None:
        # 29 significant digits: a rounded quotient would read 3.000...
        cash = Decimal("2.9999999999999999999999999999")
        request = PositionSizingRequest(
            capital=Decimal("100"),
            risk_per_trade=Decimal("1"),
            entry_price=Decimal("1"),
            stop_loss=Decimal("0.5"),
            available_cash=cash,
        )
        result = compute_sizing(request)
        assert result.recommended_shares == 2
        assert result.recommended_shares * request.entry_price <= cash
        assert result.binding_constraint is BindingConstraint.CASH

    def test_risk_cap_holds_beyond_context_precision(self) -> None:
        request = PositionSizingRequest(
            capital=Decimal("2.9999999999999999999999999999"),
            risk_per_trade=Decimal("1"),
            entry_price=Decimal("2"),
            stop_loss=Decimal("1"),
            available_cash=Decimal("100"),
        )
        result = compute_sizing(request)
        assert result.recommended_shares == 2
        assert result.risk_amount <= request.capital

    def test_truncates_to_whole_shares(self) -> None:
        result = compute_sizing(make_request(stop_loss="49.27", available_cash="50000"))
        # 200 / 0.73 = 273.97 -> 273
        assert result.recommended_shares == 273
        assert result.risk_percentage < Decimal("2")


class TestInvalidInput:
    def test_entry_equals_stop(self) -> None:
        with pytest.raises(InvalidInputError, match="Stop distance is zero"):
            compute_sizing(make_request(stop_loss="50"))

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("capital", "0"),
            ("capital", "-100"),
            ("risk_per_trade", "0"),
            ("risk_per_trade", "1.5"),
            ("entry_price", "0"),
            ("stop_loss", "-1"),
            ("available_cash", "-1"),
        ],
    )
    def test_degenerate_fields(self, field: str, value: str) -> None:
        with pytest.raises(InvalidInputError):
            compute_sizing(make_request(**{field: value}))

    def test_target_on_wrong_side(self) -> None:
        with pytest.raises(InvalidInputError, match="above entry"):
            compute_sizing(make_request(target_price="45"))

    @pytest.mark.parametrize("value", ["nan", "NaN", "Infinity", "-inf", "sNaN"])
    @pytest.mark.parametrize("field", ["capital", "entry_price", "available_cash"])
    def test_non_finite_fields(self, field: str, value: str) -> None:
        with pytest.raises(InvalidInputError, match="finite"):
            compute_sizing(make_request(**{field: value}))

    def test_non_finite_target(self) -> None:
        with pytest.raises(InvalidInputError, match="target_price"):
            compute_sizing(make_request(target_price="Infinity"))

    def test_from_values_rejects_garbage(self) -> None:
        with pytest.raises(InvalidInputError, match="Non-numeric"):
            PositionSizingRequest.from_values("abc", "0.02", "50", "47.5", "5000")


class TestFromValues:
    def test_floats_go_through_str(self) -> None:
        request = PositionSizingRequest.from_values(10000, 0.02, 50, 47.5, 5000.0)
        assert request.risk_per_trade == Decimal("0.02")
        assert request.stop_loss == Decimal("47.5")

    def test_symbol_uppercased(self) -> None:
        request = PositionSizingRequest.from_values(1, 0.01, 2, 1, 1, symbol="tsla")
        assert request.symbol == "TSLA"


class TestPurity:
    def test_idempotent(self) -> None:
        sizer = PositionSizer()
        request = make_request()
        assert sizer.calculate(request) == sizer.calculate(request)

    def test_result_is_frozen(self) -> None:
        result = compute_sizing(make_request())
        with pytest.raises(FrozenInstanceError):
            result.recommended_shares = 1  # type: ignore[misc]

    def test_money_fields_are_decimal(self) -> None:
        result = compute_sizing(make_request())
        assert isinstance(result.recommended_shares, int)
        assert isinstance(result.recommended_dollar_amount, Decimal)
        assert isinstance(result.risk_amount, Decimal)
        assert isinstance(result.risk_percentage, Decimal)


money = st.decimals(
    min_value=Decimal("1"),
    max_value=Decimal("100000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
fractions = st.decimals(
    min_value=Decimal("0.001"), max_value=Decimal("0.05"), places=3
)


class TestInvariants:
    @given(
        capital=money,
        risk=fractions,
        entry=money,
        stop=money,
        cash=st.decimals(min_value=Decimal("0"), max_value=Decimal("100000"), places=2),
    )
    @settings(max_examples=200)
    def test_cash_and_risk_invariants(
        self,
        capital: Decimal,
        risk: Decimal,
        entry: Decimal,
        stop: Decimal,
        cash: Decimal,
    ) -> None:
        if entry == stop:
            return
        request = PositionSizingRequest(capital, risk, entry, stop, cash)
        result = compute_sizing(request)

        assert result.recommended_shares >= 0
        assert result.recommended_shares * entry <= cash
        assert result.risk_amount == result.recommended_shares * abs(entry - stop)
        assert result.risk_percentage == result.risk_amount / capital * 100
        assert result.risk_percentage <= risk * 100
        assert not any("exceeds" in w for w in result.warnings)
        if result.recommended_shares == 0:
            assert any("too small" in w for w in result.warnings)
