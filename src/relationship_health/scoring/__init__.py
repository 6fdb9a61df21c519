"""Pure scoring functions: health score, trend and risk classification."""

from relationship_health.scoring.calculator import (
    EXISTING_SCORE_WEIGHT,
    FREQUENCY_WEIGHT,
    NEUTRAL_PRIOR_SCORE,
    RESPONSE_WEIGHT,
    SENTIMENT_WEIGHT,
    HealthScoreResult,
    calculate_health_score,
    frequency_factor,
    response_factor,
    sentiment_factor,
)
from relationship_health.scoring.risk import RiskAssessment, RiskFactor, classify_risk
from relationship_health.scoring.trend import TREND_BAND, classify_trend

__all__ = [
    "EXISTING_SCORE_WEIGHT",
    "FREQUENCY_WEIGHT",
    "HealthScoreResult",
    "NEUTRAL_PRIOR_SCORE",
    "RESPONSE_WEIGHT",
    "RiskAssessment",
    "RiskFactor",
    "SENTIMENT_WEIGHT",
    "TREND_BAND",
    "calculate_health_score",
    "classify_risk",
    "classify_trend",
    "frequency_factor",
    "response_factor",
    "sentiment_factor",
]
