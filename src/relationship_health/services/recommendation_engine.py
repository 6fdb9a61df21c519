"""Recommendation engine: emits, lists and transitions recommendations.

Lifecycle::

    pending -> acknowledged -> dismissed
    pending -> dismissed

Acknowledge and dismiss are idempotent and nothing leaves ``dismissed``.
Expiry is never stored; expired recommendations are filtered at read time.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from relationship_health.core.errors import PersistenceError, RecommendationNotFoundError
from relationship_health.models.health_score import HealthScore
from relationship_health.models.recommendation import PredictiveRecommendation
from relationship_health.models.response_pattern import ResponsePattern
from relationship_health.repositories.health_score import HealthScoreRepository
from relationship_health.repositories.recommendation import RecommendationRepository
from relationship_health.repositories.response_pattern import ResponsePatternRepository
from relationship_health.schemas.health import RiskFactorResponse
from relationship_health.schemas.recommendation import (
    ClientOutreachDetails,
    GenerationSummary,
    OptimalResponseTimeDetails,
    RecommendationCreate,
    RecommendationListResponse,
    RecommendationResponse,
    RelationshipImprovementDetails,
    RiskMitigationDetails,
)
from relationship_health.services.insight_generator import (
    MIN_PATTERN_CONFIDENCE,
    best_response_times,
    mean_response_time,
)

logger = structlog.get_logger(__name__)

RISK_SCORE = 40
OUTREACH_SCORE = 60
NEGATIVE_SENTIMENT = -0.3
LOW_FREQUENCY = 0.5
SLOW_DOMAIN_HOURS = 48.0


def _name(record: HealthScore) -> str:
    return record.contact_name or record.contact_email


def _risk_factors(record: HealthScore) -> list[RiskFactorResponse]:
    factors = (record.risk_factors or {}).get("factors", [])
    return [RiskFactorResponse.model_validate(f) for f in factors]


def recommendations_for_contact(
    record: HealthScore,
    now: datetime,
    *,
    outreach_after_days: int = 14,
) -> list[RecommendationCreate]:
    """Recommendations warranted by one contact's health score.

    Args:
        record: Stored health score.
        now: Reference time for inactivity.
        outreach_after_days: Silence that triggers an outreach suggestion.

    Returns:
        Zero or more recommendations without expiry set.
    """
    name = _name(record)
    score = record.health_score
    trend = record.relationship_trend
    items: list[RecommendationCreate] = []

    if trend == "critical" or score < RISK_SCORE:
        factors = _risk_factors(record)
        summary = "; ".join(f.description for f in factors) or f"health score {score}"
        items.append(
            RecommendationCreate(
                recommendation_type="risk_mitigation",
                contact_email=record.contact_email,
                title=f"Relationship with {name} is at risk",
                description=f"Health score is {score} ({trend}). Contributing factors: {summary}.",
                confidence_score=0.85 if trend == "critical" else 0.75,
                priority_level="critical" if trend == "critical" else "high",
                action_required=f"Reach out to {name} personally to address open concerns",
                expected_impact="Stops further decline before the relationship is lost",
                implementation_steps=[
                    "Review the last few threads for unresolved requests",
                    "Reply to any outstanding messages today",
                    "Offer a short call to realign on expectations",
                ],
                details=RiskMitigationDetails(
                    contact_email=record.contact_email,
                    health_score=score,
                    relationship_trend=trend,
                    risk_factors=factors,
                ),
            )
        )

    if trend == "declining" or record.sentiment_score < NEGATIVE_SENTIMENT:
        reason = "is declining" if trend == "declining" else "shows negative sentiment"
        items.append(
            RecommendationCreate(
                recommendation_type="relationship_improvement",
                contact_email=record.contact_email,
                title=f"Improve engagement with {name}",
                description=f"The relationship with {name} {reason} (health score {score}).",
                confidence_score=0.7,
                priority_level="high" if trend == "declining" else "medium",
                action_required=f"Send {name} a constructive, positive follow-up",
                expected_impact="Reverses the downward trend in health score",
                implementation_steps=[
                    "Acknowledge any recent friction directly",
                    "Lead with progress or value delivered",
                ],
                details=RelationshipImprovementDetails(
                    contact_email=record.contact_email,
                    health_score=score,
                    sentiment_score=record.sentiment_score,
                    relationship_trend=trend,
                ),
            )
        )

    days_silent: int | None = None
    if record.last_interaction is not None:
        days_silent = max(0, (now - record.last_interaction).days)
    inactive = days_silent is not None and days_silent >= outreach_after_days
    infrequent = record.email_frequency < LOW_FREQUENCY and score < OUTREACH_SCORE
    if inactive or infrequent:
        description = (
            f"No interaction with {name} for {days_silent} days."
            if inactive
            else f"Contact with {name} is infrequent ({record.email_frequency:.2f} emails/week)."
        )
        items.append(
            RecommendationCreate(
                recommendation_type="client_outreach",
                contact_email=record.contact_email,
                title=f"Check in with {name}",
                description=description,
                confidence_score=0.6,
                priority_level="high" if score < OUTREACH_SCORE else "medium",
                action_required=f"Send {name} a check-in email",
                expected_impact="Keeps the relationship warm and raises contact frequency",
                details=ClientOutreachDetails(
                    contact_email=record.contact_email,
                    health_score=score,
                    days_since_last_interaction=days_silent,
                    email_frequency=record.email_frequency,
                ),
            )
        )

    return items


def recommendation_for_domain(
    contact_domain: str, patterns: Iterable[ResponsePattern]
) -> RecommendationCreate | None:
    """Response timing recommendation for a domain, if patterns support one.

    Args:
        contact_domain: Domain the patterns belong to.
        patterns: Buckets, most confident first.

    Returns:
        A recommendation, or None when there is nothing to suggest.
    """
    qualifying = [p for p in patterns if p.confidence_score >= MIN_PATTERN_CONFIDENCE]
    mean = mean_response_time(qualifying)
    if mean is None:
        return None

    best = best_response_times(qualifying)
    details = OptimalResponseTimeDetails(
        contact_domain=contact_domain,
        optimal_response_hours=round(mean, 2),
        best_times_to_respond=best,
    )
    confidence = qualifying[0].confidence_score

    if mean > SLOW_DOMAIN_HOURS:
        return RecommendationCreate(
            recommendation_type="optimal_response_time",
            contact_domain=contact_domain,
            title=f"Responses to {contact_domain} are running slow",
            description=f"Average response time to {contact_domain} is {mean:.1f} hours.",
            confidence_score=confidence,
            priority_level="medium",
            action_required=f"Set up notifications for mail from {contact_domain}",
            expected_impact="Brings response time under two days",
            details=details,
        )
    if best:
        return RecommendationCreate(
            recommendation_type="optimal_response_time",
            contact_domain=contact_domain,
            title=f"Best times to reply to {contact_domain}",
            description=f"Replies to {contact_domain} land best around: {', '.join(best)}.",
            confidence_score=confidence,
            priority_level="low",
            action_required=f"Schedule replies to {contact_domain} for {best[0]}",
            expected_impact="Faster turnaround on threads with this domain",
            details=details,
        )
    return None


class RecommendationEngine:
    """Service for predictive recommendations."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        ttl_days: int = 7,
        outreach_after_days: int = 14,
    ) -> None:
        """Initialize engine with database session.

        Args:
            session: Async SQLAlchemy session.
            ttl_days: Lifetime of generated recommendations.
            outreach_after_days: Silence that triggers an outreach suggestion.
        """
        self._repo = RecommendationRepository(session)
        self._scores = HealthScoreRepository(session)
        self._patterns = ResponsePatternRepository(session)
        self._ttl = timedelta(days=ttl_days)
        self._outreach_after_days = outreach_after_days

    async def generate(self, user_id: UUID, *, now: datetime | None = None) -> GenerationSummary:
        """Scan health scores and patterns and emit new recommendations.

        A candidate is skipped when an unexpired recommendation of the same
        type and target exists in any status.

        Args:
            user_id: User UUID.
            now: Reference time. Defaults to now (UTC).

        Returns:
            Created recommendations and scan counts.

        Raises:
            PersistenceError: If the store cannot be read or written.
        """
        now = now or datetime.now(UTC)
        records = await self._scores.list_by_user(user_id)
        domains = await self._patterns.list_domains(user_id)
        existing = {
            (r.recommendation_type, r.target) for r in await self._repo.list_unexpired(user_id, now)
        }

        candidates: list[RecommendationCreate] = []
        for record in records:
            candidates.extend(
                recommendations_for_contact(
                    record, now, outreach_after_days=self._outreach_after_days
                )
            )
        for domain in domains:
            item = recommendation_for_domain(
                domain, await self._patterns.list_by_domain(user_id, domain)
            )
            if item is not None:
                candidates.append(item)

        fresh: list[RecommendationCreate] = []
        skipped = 0
        for item in candidates:
            key = (item.recommendation_type, item.contact_email or item.contact_domain)
            if key in existing:
                skipped += 1
                continue
            existing.add(key)
            fresh.append(item.model_copy(update={"expires_at": now + self._ttl}))

        created = await self._repo.create_many(user_id, fresh)
        await logger.ainfo(
            "recommendations_generated",
            user_id=str(user_id),
            created=len(created),
            skipped_existing=skipped,
        )
        return GenerationSummary(
            created=[RecommendationResponse.model_validate(r) for r in created],
            skipped_existing=skipped,
            contacts_scanned=len(records),
            domains_scanned=len(domains),
        )

    async def list_recommendations(
        self, user_id: UUID, *, now: datetime | None = None
    ) -> RecommendationListResponse:
        """List active recommendations.

        Dismissed and expired recommendations are excluded. A store failure
        degrades to an empty list flagged ``degraded``.

        Args:
            user_id: User UUID.
            now: Reference time for expiry.

        Returns:
            Recommendations ordered by priority then confidence.
        """
        now = now or datetime.now(UTC)
        try:
            records = await self._repo.list_active(user_id, now)
        except PersistenceError as e:
            await logger.awarning(
                "recommendations_unavailable", user_id=str(user_id), error=str(e)
            )
            return RecommendationListResponse(degraded=True)

        return RecommendationListResponse(
            recommendations=[RecommendationResponse.model_validate(r) for r in records],
            total=len(records),
        )

    async def acknowledge(
        self,
        recommendation_id: UUID,
        user_id: UUID | None = None,
        *,
        now: datetime | None = None,
    ) -> RecommendationResponse:
        """Acknowledge a pending recommendation.

        Any other status is left unchanged.

        Args:
            recommendation_id: Recommendation ID.
            user_id: Optional user UUID to scope the lookup.
            now: Acknowledgement time.

        Returns:
            The recommendation after the transition.

        Raises:
            RecommendationNotFoundError: If the recommendation does not exist.
            PersistenceError: If the store cannot be read or written.
        """
        recommendation = await self._get(recommendation_id, user_id)
        if recommendation.is_pending:
            recommendation.status = "acknowledged"
            recommendation.acknowledged_at = now or datetime.now(UTC)
            recommendation = await self._repo.save(recommendation)
            await logger.ainfo(
                "recommendation_acknowledged", recommendation_id=str(recommendation_id)
            )
        return RecommendationResponse.model_validate(recommendation)

    async def dismiss(
        self, recommendation_id: UUID, user_id: UUID | None = None
    ) -> RecommendationResponse:
        """Dismiss a pending or acknowledged recommendation.

        Args:
            recommendation_id: Recommendation ID.
            user_id: Optional user UUID to scope the lookup.

        Returns:
            The recommendation after the transition.

        Raises:
            RecommendationNotFoundError: If the recommendation does not exist.
            PersistenceError: If the store cannot be read or written.
        """
        recommendation = await self._get(recommendation_id, user_id)
        if recommendation.is_pending or recommendation.is_acknowledged:
            recommendation.status = "dismissed"
            recommendation = await self._repo.save(recommendation)
            await logger.ainfo("recommendation_dismissed", recommendation_id=str(recommendation_id))
        return RecommendationResponse.model_validate(recommendation)

    async def _get(
        self, recommendation_id: UUID, user_id: UUID | None
    ) -> PredictiveRecommendation:
        recommendation = await self._repo.get_by_id(recommendation_id, user_id)
        if recommendation is None:
            raise RecommendationNotFoundError(recommendation_id)
        return recommendation
