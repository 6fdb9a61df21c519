"""Health score service: turns interaction events into relationship health."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from relationship_health.core.contacts import parse_contact
from relationship_health.core.errors import PersistenceError
from relationship_health.models.health_score import HealthScore
from relationship_health.models.recommendation import PredictiveRecommendation
from relationship_health.repositories.health_score import HealthScoreRepository
from relationship_health.repositories.interaction import InteractionRepository
from relationship_health.repositories.recommendation import RecommendationRepository
from relationship_health.schemas.health import (
    ContactInsights,
    HealthAnalytics,
    HealthScoreListResponse,
    HealthScoreResponse,
    InteractionCreate,
    ScoreBreakdownResponse,
)
from relationship_health.schemas.insight import ContactHealthSummary
from relationship_health.schemas.recommendation import RecommendationResponse
from relationship_health.scoring import (
    HealthScoreResult,
    calculate_health_score,
    classify_risk,
    classify_trend,
)
from relationship_health.services.pattern_learner import ResponsePatternLearner

logger = structlog.get_logger(__name__)

MAX_SUGGESTED_ACTIONS = 5


def summarize_health(scores: Sequence[HealthScoreResponse]) -> HealthAnalytics:
    """Aggregate analytics over a user's health scores.

    An empty input yields all-zero analytics.
    """
    if not scores:
        return HealthAnalytics()
    return HealthAnalytics(
        total_contacts=len(scores),
        average_health_score=sum(s.health_score for s in scores) / len(scores),
        critical_relationships=sum(1 for s in scores if s.relationship_trend == "critical"),
        improving_relationships=sum(1 for s in scores if s.relationship_trend == "improving"),
        declining_relationships=sum(1 for s in scores if s.relationship_trend == "declining"),
    )


def new_contact_insights() -> ContactInsights:
    """Guidance for a contact with no recorded history."""
    return ContactInsights(
        relationship_status="New Contact",
        suggested_actions=[
            "Send a friendly response to establish relationship",
            "Track response time for future insights",
        ],
        risk_level="low",
    )


def build_contact_insights(
    record: HealthScore | None,
    recommendations: Sequence[PredictiveRecommendation] = (),
) -> ContactInsights:
    """Summarize a contact's status, risk and next actions.

    Args:
        record: Stored health score, or None for an unknown contact.
        recommendations: Active recommendations about the contact.

    Returns:
        Contact insights with at most five suggested actions.
    """
    if record is None:
        return new_contact_insights()

    score = record.health_score
    actions: list[str] = []
    if score >= 80:
        status, risk = "Excellent", "low"
        actions.append("Maintain current engagement level")
    elif score >= 60:
        status, risk = "Good", "low"
        actions.append("Consider increasing communication frequency")
    elif score >= 40:
        status, risk = "Needs Attention", "medium"
        actions.append("Reach out to re-engage the contact")
        actions.append("Review recent interactions for issues")
    else:
        status, risk = "At Risk", "high"
        actions.append("Immediate outreach recommended")
        actions.append("Consider offering additional value or support")

    if record.relationship_trend == "declining":
        risk = "high" if risk == "high" else "medium"
        actions.append("Investigate reasons for declining relationship")
    elif record.relationship_trend == "improving":
        actions.append("Continue current successful approach")

    for rec in recommendations:
        if rec.priority_level in ("high", "critical"):
            actions.append(rec.action_required)

    return ContactInsights(
        relationship_status=status,
        suggested_actions=actions[:MAX_SUGGESTED_ACTIONS],
        risk_level=risk,
    )


class HealthScoreService:
    """Service for recording interactions and reading relationship health.

    Callers that consume events at-least-once must skip already-processed
    classification ids themselves; this service does not de-duplicate.
    """

    def __init__(self, session: AsyncSession, *, frequency_window_days: int = 365) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
            frequency_window_days: Trailing window for the weekly frequency.
        """
        self._scores = HealthScoreRepository(session)
        self._interactions = InteractionRepository(session)
        self._recommendations = RecommendationRepository(session)
        self._learner = ResponsePatternLearner(session)
        self._window = timedelta(days=frequency_window_days)
        self._weeks_in_window = max(1, round(frequency_window_days / 7))

    async def record_interaction(
        self,
        user_id: UUID,
        data: InteractionCreate,
        *,
        now: datetime | None = None,
    ) -> HealthScoreResponse:
        """Update a contact's health score from one interaction.

        The interaction, the health score and the response pattern bucket
        are written in one transaction against the locked score row, so
        concurrent interactions with a contact are applied one after the
        other and an error means none of them was stored.

        Args:
            user_id: User UUID.
            data: Interaction details.
            now: Time the interaction is logged. Defaults to now (UTC).

        Returns:
            The stored health score with the breakdown of this calculation.

        Raises:
            ValidationError: If the contact email is missing or malformed.
            PersistenceError: If the interaction could not be recorded.
        """
        contact = parse_contact(data.contact_email)
        now = now or datetime.now(UTC)

        response_time = (
            None if data.response_time_hours is None else max(0.0, data.response_time_hours)
        )
        sentiment = (
            None if data.sentiment_score is None else max(-1.0, min(1.0, data.sentiment_score))
        )

        interaction = await self._interactions.add(
            user_id,
            contact.email,
            occurred_at=now,
            classification_id=data.classification_id,
            response_time_hours=response_time,
            sentiment_score=sentiment,
        )

        calculations: list[HealthScoreResult] = []

        async def build(previous: HealthScore | None) -> dict[str, Any]:
            recent = await self._interactions.count_since(
                user_id, contact.email, now - self._window
            )
            email_frequency = recent / self._weeks_in_window
            prior_score = None if previous is None else float(previous.health_score)

            result = calculate_health_score(
                response_time_avg=response_time,
                sentiment_score=sentiment,
                email_frequency=email_frequency,
                existing_score=prior_score,
            )
            calculations.append(result)
            # Trend and risk use the stored integer so critical always means < 40
            stored_score = int(round(result.score))
            risk = classify_risk(stored_score, response_time, sentiment, email_frequency)

            if response_time is None:
                response_time_avg = previous.response_time_avg if previous else 0.0
            else:
                response_time_avg = response_time
                await self._learner.observe(
                    user_id, contact.domain, response_time, observed_at=now
                )
            if sentiment is None:
                sentiment_score = previous.sentiment_score if previous else 0.0
            else:
                sentiment_score = sentiment

            return {
                "contact_name": contact.display_name,
                "health_score": stored_score,
                "response_time_avg": response_time_avg,
                "sentiment_score": sentiment_score,
                "email_frequency": email_frequency,
                "last_interaction": now,
                "relationship_trend": classify_trend(stored_score, prior_score),
                "risk_factors": risk.to_dict(),
                "updated_at": now,
            }

        record = await self._scores.upsert(user_id, contact.email, build, pending=[interaction])

        await logger.ainfo(
            "health_score_recorded",
            user_id=str(user_id),
            contact_email=contact.email,
            health_score=record.health_score,
            trend=record.relationship_trend,
            overall_risk=record.overall_risk,
            classification_id=data.classification_id,
            attempts=len(calculations),
        )

        response = HealthScoreResponse.model_validate(record)
        return response.model_copy(
            update={"breakdown": ScoreBreakdownResponse(**calculations[-1].breakdown)}
        )

    async def get_health_scores(self, user_id: UUID) -> HealthScoreListResponse:
        """Get all health scores for a user with analytics.

        A store failure degrades to an empty result flagged ``degraded``.

        Args:
            user_id: User UUID.

        Returns:
            Scores ordered by health descending, plus analytics.
        """
        try:
            records = await self._scores.list_by_user(user_id)
        except PersistenceError as e:
            await logger.awarning("health_scores_unavailable", user_id=str(user_id), error=str(e))
            return HealthScoreListResponse(degraded=True)

        scores = [HealthScoreResponse.model_validate(r) for r in records]
        return HealthScoreListResponse(scores=scores, analytics=summarize_health(scores))

    async def get_health_score(
        self, user_id: UUID, contact_email: str
    ) -> HealthScoreResponse | None:
        """Get the health score for one contact.

        A store failure is logged and reads as an unknown contact.

        Raises:
            ValidationError: If the contact email is malformed.
        """
        contact = parse_contact(contact_email)
        try:
            record = await self._scores.get(user_id, contact.email)
        except PersistenceError as e:
            await logger.awarning(
                "health_score_unavailable",
                user_id=str(user_id),
                contact_email=contact.email,
                error=str(e),
            )
            return None
        return None if record is None else HealthScoreResponse.model_validate(record)

    async def get_contact_summary(
        self,
        user_id: UUID,
        from_email: str,
        *,
        now: datetime | None = None,
    ) -> ContactHealthSummary:
        """Health view for the sender of an email.

        Args:
            user_id: User UUID.
            from_email: Sender, bare or in ``Name <address>`` form.
            now: Reference time for recommendation expiry.

        Returns:
            Stored health, active recommendations and insights. A store
            failure degrades to the new-contact view flagged ``degraded``.

        Raises:
            ValidationError: If the sender address is malformed.
        """
        contact = parse_contact(from_email)
        now = now or datetime.now(UTC)
        try:
            record = await self._scores.get(user_id, contact.email)
            recommendations = await self._recommendations.list_active(
                user_id, now, contact_email=contact.email
            )
        except PersistenceError as e:
            await logger.awarning(
                "contact_summary_unavailable",
                user_id=str(user_id),
                contact_email=contact.email,
                error=str(e),
            )
            return ContactHealthSummary(insights=new_contact_insights(), degraded=True)

        return ContactHealthSummary(
            health_score=None if record is None else HealthScoreResponse.model_validate(record),
            recommendations=[RecommendationResponse.model_validate(r) for r in recommendations],
            insights=build_contact_insights(record, recommendations),
        )
