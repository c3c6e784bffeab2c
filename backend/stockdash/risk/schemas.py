"""JSON response models for the risk-assessment route.

Field names follow the dashboard's camelCase wire shape
(positionSizing.recommendedShares, scenarioAnalysis.worstCase.loss, ...).
Decimal values are emitted as JSON numbers.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from stockdash.risk.assessment import RiskAssessment
from stockdash.risk.position_sizer import PositionSizingResult, Scenario


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, mode="json")


def _num(value: Decimal) -> float:
    return float(value)


class StopLossDistanceOut(_CamelModel):
    dollars: float
    percentage: float


class PositionSizingOut(_CamelModel):
    recommended_shares: int
    recommended_dollar_amount: float
    risk_amount: float
    risk_percentage: float
    max_shares: int
    position_percentage: float
    stop_loss_distance: StopLossDistanceOut

    @classmethod
    def from_result(cls, result: PositionSizingResult) -> PositionSizingOut:
        return cls(
            recommended_shares=result.recommended_shares,
            recommended_dollar_amount=_num(result.recommended_dollar_amount),
            risk_amount=_num(result.risk_amount),
            risk_percentage=_num(result.risk_percentage),
            max_shares=result.max_shares,
            position_percentage=_num(result.position_percentage),
            stop_loss_distance=StopLossDistanceOut(
                dollars=_num(result.stop_loss_distance.dollars),
                percentage=_num(result.stop_loss_distance.percentage),
            ),
        )


class ProfitCaseOut(_CamelModel):
    profit: float
    percentage: float
    description: str

    @classmethod
    def from_scenario(cls, scenario: Scenario) -> ProfitCaseOut:
        return cls(
            profit=_num(scenario.amount),
            percentage=_num(scenario.percentage),
            description=scenario.description,
        )


class LossCaseOut(_CamelModel):
    """Worst case. loss and percentage are reported as positive magnitudes."""

    loss: float
    percentage: float
    description: str

    @classmethod
    def from_scenario(cls, scenario: Scenario) -> LossCaseOut:
        return cls(
            loss=_num(abs(scenario.amount)),
            percentage=_num(abs(scenario.percentage)),
            description=scenario.description,
        )


class ScenarioAnalysisOut(_CamelModel):
    best_case: ProfitCaseOut
    expected_case: ProfitCaseOut
    worst_case: LossCaseOut

    @classmethod
    def from_result(cls, result: PositionSizingResult) -> ScenarioAnalysisOut:
        scenarios = result.scenarios
        return cls(
            best_case=ProfitCaseOut.from_scenario(scenarios.best_case),
            expected_case=ProfitCaseOut.from_scenario(scenarios.expected_case),
            worst_case=LossCaseOut.from_scenario(scenarios.worst_case),
        )


class RiskMetricsOut(_CamelModel):
    risk_reward_ratio: float
    probability_of_profit: float
    expected_value: float
    volatility_score: int


class SizingResponse(_CamelModel):
    """Sizing-only payload: positionSizing, scenarioAnalysis and warnings."""

    position_sizing: PositionSizingOut
    scenario_analysis: ScenarioAnalysisOut
    warnings: list[str]

    @classmethod
    def from_result(cls, result: PositionSizingResult) -> SizingResponse:
        return cls(
            position_sizing=PositionSizingOut.from_result(result),
            scenario_analysis=ScenarioAnalysisOut.from_result(result),
            warnings=list(result.warnings),
        )


class RiskAssessmentResponse(_CamelModel):
    position_sizing: PositionSizingOut
    risk_level: str
    risk_metrics: RiskMetricsOut
    scenario_analysis: ScenarioAnalysisOut
    warnings: list[str]
    advice: list[str]
    capital_preservation: list[str]

    @classmethod
    def from_assessment(cls, assessment: RiskAssessment) -> RiskAssessmentResponse:
        sizing = assessment.position_sizing
        metrics = assessment.risk_metrics
        return cls(
            position_sizing=PositionSizingOut.from_result(sizing),
            risk_level=assessment.risk_level.value,
            risk_metrics=RiskMetricsOut(
                risk_reward_ratio=_num(metrics.risk_reward_ratio),
                probability_of_profit=_num(metrics.probability_of_profit),
                expected_value=_num(metrics.expected_value),
                volatility_score=metrics.volatility_score,
            ),
            scenario_analysis=ScenarioAnalysisOut.from_result(sizing),
            warnings=list(assessment.warnings),
            advice=list(assessment.advice),
            capital_preservation=list(assessment.capital_preservation),
        )
