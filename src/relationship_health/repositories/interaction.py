"""Interaction log repository for database operations."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from relationship_health.models.interaction import InteractionRecord
from relationship_health.repositories.base import store_operation


class InteractionRepository:
    """Repository for the contact interaction log."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def add(
        self,
        user_id: UUID,
        contact_email: str,
        *,
        occurred_at: datetime,
        classification_id: str | None = None,
        response_time_hours: float | None = None,
        sentiment_score: float | None = None,
    ) -> InteractionRecord:
        """Stage an interaction in the current transaction.

        The row is flushed so trailing-window counts include it, but not
        committed; the caller commits it together with the health score.

        Returns:
            The staged interaction.
        """
        record = InteractionRecord(
            user_id=user_id,
            contact_email=contact_email,
            classification_id=classification_id,
            response_time_hours=response_time_hours,
            sentiment_score=sentiment_score,
            occurred_at=occurred_at,
        )
        async with store_operation(self.session, "add_interaction"):
            self.session.add(record)
            await self.session.flush()
        return record

    async def count_since(self, user_id: UUID, contact_email: str, since: datetime) -> int:
        """Count interactions with a contact since a point in time.

        Args:
            user_id: User UUID.
            contact_email: Normalized contact email.
            since: Start of the trailing window.

        Returns:
            Number of interactions in the window.
        """
        async with store_operation(self.session, "count_interactions"):
            result = await self.session.execute(
                select(func.count())
                .select_from(InteractionRecord)
                .where(
                    InteractionRecord.user_id == user_id,
                    InteractionRecord.contact_email == contact_email,
                    InteractionRecord.occurred_at >= since,
                )
            )
            return result.scalar() or 0

    async def has_classification(self, user_id: UUID, classification_id: str) -> bool:
        """Check if an interaction for a classification id was recorded.

        Args:
            user_id: User UUID.
            classification_id: Id of the upstream classification.

        Returns:
            True if at least one interaction carries the id.
        """
        async with store_operation(self.session, "find_classification"):
            result = await self.session.execute(
                select(func.count())
                .select_from(InteractionRecord)
                .where(
                    InteractionRecord.user_id == user_id,
                    InteractionRecord.classification_id == classification_id,
                )
            )
            return (result.scalar() or 0) > 0
