"""Response pattern repository for database operations."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from relationship_health.models.response_pattern import ResponsePattern
from relationship_health.repositories.base import store_operation


class ResponsePatternRepository:
    """Repository for response pattern buckets."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def get_bucket(
        self,
        user_id: UUID,
        contact_domain: str,
        day_of_week: int,
        time_of_day: int,
        *,
        for_update: bool = False,
    ) -> ResponsePattern | None:
        """Get a single bucket.

        Args:
            for_update: Lock the row until the current transaction ends.

        Returns:
            Pattern if the bucket has been observed, None otherwise.
        """
        stmt = select(ResponsePattern).where(
            ResponsePattern.user_id == user_id,
            ResponsePattern.contact_domain == contact_domain,
            ResponsePattern.day_of_week == day_of_week,
            ResponsePattern.time_of_day == time_of_day,
        )
        if for_update:
            stmt = stmt.with_for_update()
        async with store_operation(self.session, "get_response_pattern"):
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

    async def add(self, pattern: ResponsePattern) -> ResponsePattern:
        """Stage a new bucket in the current transaction.

        The row is flushed but not committed.

        Args:
            pattern: Pattern to insert.

        Returns:
            The staged pattern.

        Raises:
            IntegrityError: If another writer created the same bucket; the
                caller is expected to roll back and retry its transaction.
        """
        async with store_operation(
            self.session, "add_response_pattern", passthrough=(IntegrityError,)
        ):
            self.session.add(pattern)
            await self.session.flush()
            return pattern

    async def list_by_domain(
        self,
        user_id: UUID,
        contact_domain: str,
        *,
        min_confidence: float | None = None,
    ) -> list[ResponsePattern]:
        """List buckets for a domain, most confident first.

        Ties are ordered by weekday then hour so results are deterministic.

        Args:
            user_id: User UUID.
            contact_domain: Contact domain.
            min_confidence: Optional lower bound on confidence.

        Returns:
            Matching patterns.
        """
        conditions = [
            ResponsePattern.user_id == user_id,
            ResponsePattern.contact_domain == contact_domain,
        ]
        if min_confidence is not None:
            conditions.append(ResponsePattern.confidence_score >= min_confidence)

        async with store_operation(self.session, "list_domain_patterns"):
            result = await self.session.execute(
                select(ResponsePattern)
                .where(*conditions)
                .order_by(
                    ResponsePattern.confidence_score.desc(),
                    ResponsePattern.day_of_week,
                    ResponsePattern.time_of_day,
                )
            )
            return list(result.scalars().all())

    async def list_by_user(self, user_id: UUID, *, limit: int = 50) -> list[ResponsePattern]:
        """List a user's buckets across all domains, most confident first.

        Args:
            user_id: User UUID.
            limit: Maximum number of results.

        Returns:
            Patterns ordered by confidence.
        """
        async with store_operation(self.session, "list_user_patterns"):
            result = await self.session.execute(
                select(ResponsePattern)
                .where(ResponsePattern.user_id == user_id)
                .order_by(
                    ResponsePattern.confidence_score.desc(),
                    ResponsePattern.contact_domain,
                    ResponsePattern.day_of_week,
                    ResponsePattern.time_of_day,
                )
                .limit(limit)
            )
            return list(result.scalars().all())

    async def list_domains(self, user_id: UUID) -> list[str]:
        """List the distinct domains a user has patterns for.

        Args:
            user_id: User UUID.

        Returns:
            Domains in alphabetical order.
        """
        async with store_operation(self.session, "list_pattern_domains"):
            result = await self.session.execute(
                select(ResponsePattern.contact_domain)
                .where(ResponsePattern.user_id == user_id)
                .distinct()
                .order_by(ResponsePattern.contact_domain)
            )
            return list(result.scalars().all())
