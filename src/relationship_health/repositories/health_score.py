"""Health score repository for database operations."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from relationship_health.models.health_score import HealthScore
from relationship_health.repositories.base import store_operation

logger = structlog.get_logger(__name__)

# Computes column values from the locked row, or None for a new contact
ScoreBuilder = Callable[[HealthScore | None], Awaitable[dict[str, Any]]]


class HealthScoreRepository:
    """Repository for health score database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def get(self, user_id: UUID, contact_email: str) -> HealthScore | None:
        """Get the health score for a contact.

        Args:
            user_id: User UUID.
            contact_email: Normalized contact email.

        Returns:
            Health score if found, None otherwise.
        """
        async with store_operation(self.session, "get_health_score"):
            result = await self.session.execute(
                select(HealthScore).where(
                    HealthScore.user_id == user_id,
                    HealthScore.contact_email == contact_email,
                )
            )
            return result.scalar_one_or_none()

    async def list_by_user(self, user_id: UUID) -> list[HealthScore]:
        """List all health scores for a user, healthiest first.

        Args:
            user_id: User UUID.

        Returns:
            Health scores ordered by score descending.
        """
        async with store_operation(self.session, "list_health_scores"):
            result = await self.session.execute(
                select(HealthScore)
                .where(HealthScore.user_id == user_id)
                .order_by(HealthScore.health_score.desc(), HealthScore.contact_email)
            )
            return list(result.scalars().all())

    async def upsert(
        self,
        user_id: UUID,
        contact_email: str,
        build: ScoreBuilder,
        pending: Sequence[object] = (),
    ) -> HealthScore:
        """Insert or update the health score for a contact in one commit.

        The stored row is read with ``FOR UPDATE`` and handed to ``build``,
        which returns the column values to write. Concurrent writers for the
        same contact therefore compute from each other's results. A
        concurrent first insert surfaces as an IntegrityError; the
        transaction is then rolled back and rebuilt once against the row
        the other writer stored.

        Args:
            user_id: User UUID.
            contact_email: Normalized contact email.
            build: Computes new values from the locked row (None if absent).
                It may stage further rows in the same transaction.
            pending: Extra rows committed in the same transaction. They are
                flushed before ``build`` runs.

        Returns:
            The stored health score.

        Raises:
            PersistenceError: If the write fails or the retry cannot resolve it.
        """
        async with store_operation(self.session, "upsert_health_score"):
            try:
                return await self._write(user_id, contact_email, build, pending)
            except IntegrityError:
                await self.session.rollback()
                await logger.awarning(
                    "health_score_upsert_conflict",
                    user_id=str(user_id),
                    contact_email=contact_email,
                )
                return await self._write(user_id, contact_email, build, pending)

    async def _write(
        self,
        user_id: UUID,
        contact_email: str,
        build: ScoreBuilder,
        pending: Sequence[object],
    ) -> HealthScore:
        for row in pending:
            self.session.add(row)
        await self.session.flush()

        result = await self.session.execute(
            select(HealthScore)
            .where(
                HealthScore.user_id == user_id,
                HealthScore.contact_email == contact_email,
            )
            .with_for_update()
        )
        record = result.scalar_one_or_none()
        values = await build(record)
        if record is None:
            record = HealthScore(user_id=user_id, contact_email=contact_email, **values)
            self.session.add(record)
        else:
            for key, value in values.items():
                setattr(record, key, value)

        # Nothing is committed unless every step above succeeded
        await self.session.flush()
        await self.session.refresh(record)
        await self.session.commit()
        return record
