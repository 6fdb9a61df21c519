"""Combined predictive intelligence view for a user."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from relationship_health.core.errors import PersistenceError
from relationship_health.repositories.health_score import HealthScoreRepository
from relationship_health.repositories.recommendation import RecommendationRepository
from relationship_health.repositories.response_pattern import ResponsePatternRepository
from relationship_health.schemas.health import HealthScoreResponse
from relationship_health.schemas.insight import (
    DomainPerformance,
    HighRiskContact,
    IntelligenceOverview,
    UserInsights,
)
from relationship_health.schemas.pattern import ResponsePatternResponse
from relationship_health.schemas.recommendation import RecommendationResponse
from relationship_health.services.health_score_service import summarize_health

logger = structlog.get_logger(__name__)

OVERVIEW_PATTERN_LIMIT = 20
MAX_BEST_DOMAINS = 10
HIGH_RISK_SCORE = 50


def domain_performance(patterns: Sequence[ResponsePatternResponse]) -> list[DomainPerformance]:
    """Per-domain mean response time and confidence, fastest first."""
    by_domain: dict[str, list[ResponsePatternResponse]] = defaultdict(list)
    for pattern in patterns:
        by_domain[pattern.contact_domain].append(pattern)

    performance = [
        DomainPerformance(
            domain=domain,
            avg_response_time=sum(p.avg_response_time for p in items) / len(items),
            confidence=sum(p.confidence_score for p in items) / len(items),
        )
        for domain, items in by_domain.items()
    ]
    performance.sort(key=lambda d: (d.avg_response_time, d.domain))
    return performance[:MAX_BEST_DOMAINS]


def build_user_insights(
    scores: Sequence[HealthScoreResponse],
    patterns: Sequence[ResponsePatternResponse],
) -> UserInsights:
    """User-level figures over health scores and top patterns."""
    analytics = summarize_health(scores)
    average_response = (
        sum(p.avg_response_time for p in patterns) / len(patterns) if patterns else 0.0
    )
    return UserInsights(
        total_contacts=analytics.total_contacts,
        average_health_score=analytics.average_health_score,
        average_response_time=average_response,
        critical_relationships=analytics.critical_relationships,
        improving_relationships=analytics.improving_relationships,
        best_response_domains=domain_performance(patterns),
        high_risk_contacts=[
            HighRiskContact(email=s.contact_email, score=s.health_score, trend=s.relationship_trend)
            for s in scores
            if s.relationship_trend == "declining" or s.health_score < HIGH_RISK_SCORE
        ],
    )


class IntelligenceService:
    """Service for the predictive intelligence overview."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self._scores = HealthScoreRepository(session)
        self._patterns = ResponsePatternRepository(session)
        self._recommendations = RecommendationRepository(session)

    async def get_overview(
        self, user_id: UUID, *, now: datetime | None = None
    ) -> IntelligenceOverview:
        """Combine recommendations, health analytics and learned patterns.

        Args:
            user_id: User UUID.
            now: Reference time for recommendation expiry.

        Returns:
            The overview. A store failure degrades to an empty overview
            flagged ``degraded``.
        """
        now = now or datetime.now(UTC)
        try:
            recommendations = await self._recommendations.list_active(user_id, now)
            records = await self._scores.list_by_user(user_id)
            top_patterns = await self._patterns.list_by_user(
                user_id, limit=OVERVIEW_PATTERN_LIMIT
            )
        except PersistenceError as e:
            await logger.awarning(
                "intelligence_overview_unavailable", user_id=str(user_id), error=str(e)
            )
            return IntelligenceOverview(degraded=True)

        scores = [HealthScoreResponse.model_validate(r) for r in records]
        patterns = [ResponsePatternResponse.model_validate(p) for p in top_patterns]
        return IntelligenceOverview(
            recommendations=[RecommendationResponse.model_validate(r) for r in recommendations],
            health_analytics=summarize_health(scores),
            patterns=patterns,
            user_insights=build_user_insights(scores, patterns),
        )
