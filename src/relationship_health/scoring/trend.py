"""Relationship trend classification."""

from __future__ import annotations

from relationship_health.core.types import RelationshipTrend

# Score changes within this band count as noise.
TREND_BAND = 5.0
CRITICAL_THRESHOLD = 40.0


def classify_trend(new_score: float, previous_score: float | None) -> RelationshipTrend:
    """Label the trajectory between two consecutive scores.

    Args:
        new_score: Freshly calculated score.
        previous_score: Stored score, or None on first interaction.

    Returns:
        ``critical`` only for a decline that lands below 40.
    """
    if previous_score is None:
        return "stable"
    if new_score > previous_score + TREND_BAND:
        return "improving"
    if new_score < previous_score - TREND_BAND:
        if new_score < CRITICAL_THRESHOLD:
            return "critical"
        return "declining"
    return "stable"
