"""Risk factor classification for a relationship."""

from __future__ import annotations

from dataclasses import dataclass, field

from relationship_health.core.types import RiskFactorsData, RiskLevel

_RANK: dict[RiskLevel, int] = {"low": 0, "medium": 1, "high": 2}

LOW_SCORE = 40
MODERATE_SCORE = 60
SLOW_RESPONSE_HOURS = 48
NEGATIVE_SENTIMENT = -0.3
LOW_FREQUENCY = 0.5


@dataclass(frozen=True)
class RiskFactor:
    """A single contributing risk."""

    description: str
    severity: RiskLevel


@dataclass
class RiskAssessment:
    """Overall risk with the factors that produced it."""

    overall_risk: RiskLevel = "low"
    factors: list[RiskFactor] = field(default_factory=list)

    def escalate(self, level: RiskLevel) -> None:
        """Raise overall risk to ``level``; never lowers it."""
        if _RANK[level] > _RANK[self.overall_risk]:
            self.overall_risk = level

    def add(self, description: str, severity: RiskLevel) -> None:
        """Record a contributing factor."""
        self.factors.append(RiskFactor(description=description, severity=severity))

    def to_dict(self) -> RiskFactorsData:
        """Serialize for storage on a health score."""
        return {
            "overall_risk": self.overall_risk,
            "factors": [
                {"description": f.description, "severity": f.severity} for f in self.factors
            ],
        }


def _fmt(value: float) -> str:
    return f"{value:g}" if float(value).is_integer() else f"{value:.2f}"


def classify_risk(
    health_score: float,
    response_time: float | None = None,
    sentiment: float | None = None,
    frequency: float = 0.0,
) -> RiskAssessment:
    """Classify relationship risk.

    Args:
        health_score: Current health score.
        response_time: Response time in hours, if known.
        sentiment: Sentiment in [-1, 1], if known.
        frequency: Interactions per week.

    Returns:
        Risk assessment. Low frequency adds a factor without escalating.
    """
    risk = RiskAssessment()

    if health_score < LOW_SCORE:
        risk.escalate("high")
        risk.add(f"Low health score: {_fmt(health_score)}", "high")
    elif health_score < MODERATE_SCORE:
        risk.escalate("medium")
        risk.add(f"Low health score: {_fmt(health_score)}", "medium")

    if response_time is not None and response_time > SLOW_RESPONSE_HOURS:
        risk.escalate("medium")
        risk.add(f"Slow response time: {_fmt(response_time)}h", "medium")

    if sentiment is not None and sentiment < NEGATIVE_SENTIMENT:
        risk.escalate("medium")
        risk.add(f"Negative sentiment: {_fmt(sentiment)}", "high")

    if frequency < LOW_FREQUENCY:
        risk.add(f"Low email frequency: {_fmt(frequency)}/week", "low")

    return risk
