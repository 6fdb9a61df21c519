"""Predictive response insights for a contact."""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from relationship_health.core.contacts import parse_contact
from relationship_health.core.errors import PersistenceError
from relationship_health.core.types import RiskLevel
from relationship_health.models.health_score import HealthScore
from relationship_health.models.response_pattern import ResponsePattern
from relationship_health.repositories.health_score import HealthScoreRepository
from relationship_health.schemas.insight import PredictiveInsight
from relationship_health.services.pattern_learner import ResponsePatternLearner

logger = structlog.get_logger(__name__)

DEFAULT_RESPONSE_HOURS = 24.0
DEFAULT_CONFIDENCE = 0.5
MIN_PATTERN_CONFIDENCE = 0.5
BEST_TIME_CONFIDENCE = 0.6
BEST_TIME_MAX_HOURS = 24.0
MAX_BEST_TIMES = 5
MAX_RECOMMENDATIONS = 5


def mean_response_time(patterns: Sequence[ResponsePattern]) -> float | None:
    """Mean of the bucket averages, None when there are no buckets."""
    if not patterns:
        return None
    return sum(p.avg_response_time for p in patterns) / len(patterns)


def best_response_times(patterns: Sequence[ResponsePattern]) -> list[str]:
    """Favorable response windows in first-found order.

    Args:
        patterns: Buckets, most confident first.

    Returns:
        Up to five distinct slot labels such as ``Tuesday 3 PM``.
    """
    slots: list[str] = []
    for pattern in patterns:
        if (
            pattern.avg_response_time <= BEST_TIME_MAX_HOURS
            and pattern.confidence_score >= BEST_TIME_CONFIDENCE
        ):
            label = pattern.slot_label
            if label not in slots:
                slots.append(label)
        if len(slots) == MAX_BEST_TIMES:
            break
    return slots


def assess_response_risk(patterns: Sequence[ResponsePattern]) -> RiskLevel:
    """Risk that responses to this domain run late.

    Uses the mean response time and the confidence of the first (most
    confident) bucket. Without any bucket the risk is medium.
    """
    mean = mean_response_time(patterns)
    if mean is None:
        return "medium"
    confidence = patterns[0].confidence_score
    if mean > 48 and confidence > 0.7:
        return "high"
    if mean > 24 and confidence > 0.6:
        return "medium"
    return "low"


def contact_recommendations(
    record: HealthScore | None,
    domain_patterns: Sequence[ResponsePattern],
) -> list[str]:
    """Free-text suggestions for a contact.

    Args:
        record: Stored health score for the contact, if any.
        domain_patterns: Every bucket for the contact's domain.

    Returns:
        At most five suggestions.
    """
    suggestions: list[str] = []
    if record is not None:
        if record.health_score < 50:
            suggestions.append("Consider reaching out to improve the relationship")
            suggestions.append("Review recent communication patterns")
        if record.response_time_avg > 24:
            suggestions.append("Aim to respond within 24 hours for better satisfaction")
        if record.sentiment_score < 0:
            suggestions.append("Focus on more positive and engaging communication")

    mean = mean_response_time(domain_patterns)
    if mean is not None and mean > 48:
        suggestions.append("Set up email notifications for faster responses")

    return suggestions[:MAX_RECOMMENDATIONS]


class PredictiveInsightGenerator:
    """Builds predictive insights from learned patterns and health scores."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize generator with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self._learner = ResponsePatternLearner(session)
        self._scores = HealthScoreRepository(session)

    async def generate(self, user_id: UUID, contact_email: str) -> PredictiveInsight:
        """Predict how and when to respond to a contact.

        Args:
            user_id: User UUID.
            contact_email: Contact address.

        Returns:
            Insight recomputed from the current store. A store failure
            degrades to the default insight flagged ``degraded``.

        Raises:
            ValidationError: If the contact email is malformed.
        """
        contact = parse_contact(contact_email)
        try:
            domain_patterns = await self._learner.patterns_for_domain(user_id, contact.domain)
            record = await self._scores.get(user_id, contact.email)
        except PersistenceError as e:
            await logger.awarning(
                "predictive_insight_unavailable",
                user_id=str(user_id),
                contact_email=contact.email,
                error=str(e),
            )
            return PredictiveInsight(degraded=True)

        # Store order is confidence descending, so filtering keeps it
        qualifying = [p for p in domain_patterns if p.confidence_score >= MIN_PATTERN_CONFIDENCE]
        mean = mean_response_time(qualifying)

        return PredictiveInsight(
            optimal_response_time=DEFAULT_RESPONSE_HOURS if mean is None else mean,
            confidence_score=qualifying[0].confidence_score if qualifying else DEFAULT_CONFIDENCE,
            best_times_to_respond=best_response_times(qualifying),
            risk_assessment=assess_response_risk(qualifying),
            recommendations=contact_recommendations(record, domain_patterns),
        )
