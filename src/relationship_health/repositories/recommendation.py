"""Recommendation repository for database operations."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import case, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from relationship_health.models.recommendation import (
    ACTIVE_STATUSES,
    PRIORITY_RANK,
    PredictiveRecommendation,
)
from relationship_health.repositories.base import store_operation
from relationship_health.schemas.recommendation import RecommendationCreate


class RecommendationRepository:
    """Repository for predictive recommendation database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def create_many(
        self, user_id: UUID, items: Sequence[RecommendationCreate]
    ) -> list[PredictiveRecommendation]:
        """Create recommendations in a single commit.

        Args:
            user_id: User UUID.
            items: Recommendation creation data.

        Returns:
            Created recommendations.
        """
        if not items:
            return []
        records = [
            PredictiveRecommendation(
                user_id=user_id,
                status="pending",
                **item.model_dump(exclude={"details"}),
                details=item.details.model_dump(mode="json"),
            )
            for item in items
        ]
        async with store_operation(self.session, "create_recommendations"):
            self.session.add_all(records)
            await self.session.commit()
            for record in records:
                await self.session.refresh(record)
        return records

    async def get_by_id(
        self, recommendation_id: UUID, user_id: UUID | None = None
    ) -> PredictiveRecommendation | None:
        """Get recommendation by ID.

        Args:
            recommendation_id: Recommendation ID.
            user_id: Optional user UUID to scope query.

        Returns:
            Recommendation if found, None otherwise.
        """
        conditions = [PredictiveRecommendation.id == recommendation_id]
        if user_id is not None:
            conditions.append(PredictiveRecommendation.user_id == user_id)

        async with store_operation(self.session, "get_recommendation"):
            result = await self.session.execute(select(PredictiveRecommendation).where(*conditions))
            return result.scalar_one_or_none()

    async def list_active(
        self,
        user_id: UUID,
        now: datetime,
        *,
        contact_email: str | None = None,
    ) -> list[PredictiveRecommendation]:
        """List pending and acknowledged recommendations that have not expired.

        Args:
            user_id: User UUID.
            now: Reference time for expiry.
            contact_email: Optional contact filter.

        Returns:
            Recommendations ordered by priority then confidence.
        """
        priority_order = case(PRIORITY_RANK, value=PredictiveRecommendation.priority_level, else_=0)
        conditions = [
            PredictiveRecommendation.user_id == user_id,
            PredictiveRecommendation.status.in_(ACTIVE_STATUSES),
            or_(
                PredictiveRecommendation.expires_at.is_(None),
                PredictiveRecommendation.expires_at > now,
            ),
        ]
        if contact_email is not None:
            conditions.append(PredictiveRecommendation.contact_email == contact_email)

        async with store_operation(self.session, "list_active_recommendations"):
            result = await self.session.execute(
                select(PredictiveRecommendation)
                .where(*conditions)
                .order_by(
                    priority_order.desc(),
                    PredictiveRecommendation.confidence_score.desc(),
                    PredictiveRecommendation.created_at.desc(),
                )
            )
            return list(result.scalars().all())

    async def list_unexpired(self, user_id: UUID, now: datetime) -> list[PredictiveRecommendation]:
        """List every recommendation that has not expired, in any status.

        Args:
            user_id: User UUID.
            now: Reference time for expiry.

        Returns:
            Unexpired recommendations.
        """
        async with store_operation(self.session, "list_unexpired_recommendations"):
            result = await self.session.execute(
                select(PredictiveRecommendation).where(
                    PredictiveRecommendation.user_id == user_id,
                    or_(
                        PredictiveRecommendation.expires_at.is_(None),
                        PredictiveRecommendation.expires_at > now,
                    ),
                )
            )
            return list(result.scalars().all())

    async def save(self, recommendation: PredictiveRecommendation) -> PredictiveRecommendation:
        """Commit changes to a recommendation.

        Args:
            recommendation: Modified recommendation.

        Returns:
            The refreshed recommendation.
        """
        async with store_operation(self.session, "update_recommendation"):
            await self.session.commit()
            await self.session.refresh(recommendation)
            return recommendation
