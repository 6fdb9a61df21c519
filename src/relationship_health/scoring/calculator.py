"""Health score calculation.

The score is a weighted blend of the previous score and three interaction
factors. The previous score carries 60% of the weight, which damps the
effect of any single interaction.
"""

from __future__ import annotations

from dataclasses import dataclass

from relationship_health.core.types import ScoreBreakdown

EXISTING_SCORE_WEIGHT = 0.6
RESPONSE_WEIGHT = 0.25
SENTIMENT_WEIGHT = 0.10
FREQUENCY_WEIGHT = 0.05

NEUTRAL_PRIOR_SCORE = 50.0

# (upper bound in hours, points)
_RESPONSE_STEPS: tuple[tuple[float, float], ...] = (
    (2, 40),
    (6, 35),
    (24, 30),
    (48, 20),
    (72, 10),
)

# (lower bound in emails/week, points)
_FREQUENCY_STEPS: tuple[tuple[float, float], ...] = (
    (5, 30),
    (3, 25),
    (1, 20),
    (0.5, 15),
)
_FREQUENCY_FLOOR = 5.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def response_factor(response_time_hours: float | None) -> float:
    """Points (0-40) for how quickly responses happen."""
    if response_time_hours is None:
        return 0.0
    for bound, points in _RESPONSE_STEPS:
        if response_time_hours <= bound:
            return float(points)
    return 0.0


def sentiment_factor(sentiment_score: float) -> float:
    """Points (0-30) for sentiment in [-1, 1]."""
    return _clamp((sentiment_score + 1) * 15, 0.0, 30.0)


def frequency_factor(emails_per_week: float) -> float:
    """Points (5-30) for contact frequency."""
    for bound, points in _FREQUENCY_STEPS:
        if emails_per_week >= bound:
            return float(points)
    return _FREQUENCY_FLOOR


@dataclass(frozen=True)
class HealthScoreResult:
    """Result of a health score calculation."""

    score: float
    breakdown: ScoreBreakdown


def calculate_health_score(
    response_time_avg: float | None = None,
    sentiment_score: float | None = None,
    email_frequency: float | None = None,
    existing_score: float | None = None,
) -> HealthScoreResult:
    """Calculate a smoothed health score.

    Missing inputs fall back to their defaults: no response time scores 0
    points, sentiment and frequency default to 0, and the previous score
    defaults to the neutral prior of 50. The function never raises.

    Args:
        response_time_avg: Response time in hours.
        sentiment_score: Sentiment in [-1, 1].
        email_frequency: Interactions per week.
        existing_score: Previous health score.

    Returns:
        Score in [0, 100] and its breakdown.
    """
    sentiment = 0.0 if sentiment_score is None else sentiment_score
    frequency = 0.0 if email_frequency is None else email_frequency
    base = NEUTRAL_PRIOR_SCORE if existing_score is None else existing_score

    response_points = response_factor(response_time_avg)
    sentiment_points = sentiment_factor(sentiment)
    frequency_points = frequency_factor(frequency)

    final = _clamp(
        base * EXISTING_SCORE_WEIGHT
        + response_points * RESPONSE_WEIGHT
        + sentiment_points * SENTIMENT_WEIGHT
        + frequency_points * FREQUENCY_WEIGHT,
        0.0,
        100.0,
    )

    return HealthScoreResult(
        score=final,
        breakdown=ScoreBreakdown(
            response_factor=response_points,
            sentiment_factor=sentiment_points,
            frequency_factor=frequency_points,
            base_score=base,
            final_score=final,
        ),
    )
