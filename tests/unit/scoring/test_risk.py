"""Tests for relationship risk classification."""

from __future__ import annotations

from relationship_health.scoring.risk import RiskAssessment, RiskFactor, classify_risk


class TestRiskAssessment:
    """Tests for RiskAssessment."""

    def test_escalate_never_lowers(self) -> None:
        """Test escalation is monotonic."""
        risk = RiskAssessment()
        risk.escalate("high")
        risk.escalate("medium")
        risk.escalate("low")
        assert risk.overall_risk == "high"

    def test_to_dict(self) -> None:
        """Test serialization for storage."""
        risk = RiskAssessment()
        risk.escalate("medium")
        risk.add("Slow response time: 50h", "medium")
        assert risk.to_dict() == {
            "overall_risk": "medium",
            "factors": [{"description": "Slow response time: 50h", "severity": "medium"}],
        }


class TestClassifyRisk:
    """Tests for classify_risk."""

    def test_healthy(self) -> None:
        """Test a healthy, frequent contact has no factors."""
        risk = classify_risk(85, response_time=2, sentiment=0.5, frequency=3)
        assert risk.overall_risk == "low"
        assert risk.factors == []

    def test_low_score_is_high_risk(self) -> None:
        """Test scores under 40."""
        risk = classify_risk(35, frequency=1)
        assert risk.overall_risk == "high"
        assert risk.factors == [RiskFactor("Low health score: 35", "high")]

    def test_moderate_score_is_medium_risk(self) -> None:
        """Test scores from 40 up to 60."""
        risk = classify_risk(43, frequency=1)
        assert risk.overall_risk == "medium"
        assert risk.factors == [RiskFactor("Low health score: 43", "medium")]

    def test_slow_response(self) -> None:
        """Test response times over 48 hours."""
        risk = classify_risk(70, response_time=50, frequency=1)
        assert risk.overall_risk == "medium"
        assert risk.factors == [RiskFactor("Slow response time: 50h", "medium")]

    def test_response_exactly_48_hours(self) -> None:
        """Test the slow response threshold is exclusive."""
        risk = classify_risk(70, response_time=48, frequency=1)
        assert risk.factors == []

    def test_negative_sentiment_factor_is_high_severity(self) -> None:
        """Test negative sentiment escalates to medium with a high factor."""
        risk = classify_risk(70, sentiment=-0.5, frequency=1)
        assert risk.overall_risk == "medium"
        assert risk.factors == [RiskFactor("Negative sentiment: -0.50", "high")]

    def test_low_frequency_does_not_escalate(self) -> None:
        """Test low frequency only adds a factor."""
        risk = classify_risk(70, frequency=1 / 52)
        assert risk.overall_risk == "low"
        assert risk.factors == [RiskFactor("Low email frequency: 0.02/week", "low")]

    def test_high_score_risk_survives_other_factors(self) -> None:
        """Test later medium factors do not lower high risk."""
        risk = classify_risk(30, response_time=80, sentiment=-0.9, frequency=0)
        assert risk.overall_risk == "high"
        assert [f.severity for f in risk.factors] == ["high", "medium", "high", "low"]
        assert risk.factors[-1].description == "Low email frequency: 0/week"
