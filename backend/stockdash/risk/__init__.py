"""Risk package: position sizing, scenario analysis, risk assessment."""

from stockdash.risk.assessment import RiskAssessment, RiskLevel, assess_risk
from stockdash.risk.position_sizer import (
    PositionSizer,
    PositionSizingRequest,
    PositionSizingResult,
    compute_sizing,
)

__all__ = [
    "PositionSizer",
    "PositionSizingRequest",
    "PositionSizingResult",
    "RiskAssessment",
    "RiskLevel",
    "assess_risk",
    "compute_sizing",
]
