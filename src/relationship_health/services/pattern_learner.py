"""Online learning of per-domain response time patterns.

Each bucket is keyed by (user, contact domain, weekday, hour) of the moment
a response is logged, not of the original message. Buckets hold an
exponential moving average with a fixed learning rate and a confidence that
grows by a fixed step per observation. Old observations never decay.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from relationship_health.models.response_pattern import ResponsePattern
from relationship_health.repositories.response_pattern import ResponsePatternRepository
from relationship_health.schemas.pattern import ResponsePatternResponse

logger = structlog.get_logger(__name__)

LEARNING_RATE = 0.1
CONFIDENCE_STEP = LEARNING_RATE * 0.1
INITIAL_CONFIDENCE = 0.5


def bucket_for(moment: datetime) -> tuple[int, int]:
    """Map a timestamp to its (day_of_week, hour) bucket, Sunday = 0."""
    return (moment.weekday() + 1) % 7, moment.hour


def apply_observation(pattern: ResponsePattern, response_time: float) -> None:
    """Fold one observation into an existing bucket."""
    pattern.avg_response_time = (
        pattern.avg_response_time * (1 - LEARNING_RATE) + response_time * LEARNING_RATE
    )
    pattern.confidence_score = min(1.0, pattern.confidence_score + CONFIDENCE_STEP)
    pattern.response_count = pattern.response_count + 1


class ResponsePatternLearner:
    """Maintains response pattern buckets."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize learner with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self._repo = ResponsePatternRepository(session)

    async def observe(
        self,
        user_id: UUID,
        contact_domain: str,
        response_time: float,
        observed_at: datetime | None = None,
    ) -> ResponsePattern:
        """Stage one response time observation in the current transaction.

        The bucket row is locked and changed but not committed; the caller
        commits it together with the interaction that produced it.

        Args:
            user_id: User UUID.
            contact_domain: Domain of the contact responded to.
            response_time: Response time in hours.
            observed_at: When the response was logged. Defaults to now (UTC).

        Returns:
            The updated or newly created bucket.

        Raises:
            PersistenceError: If the store cannot be read or written.
            IntegrityError: If a concurrent writer created the same bucket.
        """
        moment = observed_at or datetime.now(UTC)
        day_of_week, hour = bucket_for(moment)
        response_time = max(0.0, response_time)

        pattern = await self._repo.get_bucket(
            user_id, contact_domain, day_of_week, hour, for_update=True
        )
        if pattern is not None:
            apply_observation(pattern, response_time)
            return pattern

        pattern = await self._repo.add(
            ResponsePattern(
                user_id=user_id,
                contact_domain=contact_domain,
                day_of_week=day_of_week,
                time_of_day=hour,
                avg_response_time=response_time,
                response_count=1,
                confidence_score=INITIAL_CONFIDENCE,
            )
        )
        await logger.adebug(
            "response_pattern_created",
            user_id=str(user_id),
            contact_domain=contact_domain,
            day_of_week=day_of_week,
            time_of_day=hour,
        )
        return pattern

    async def patterns_for_domain(
        self,
        user_id: UUID,
        contact_domain: str,
        *,
        min_confidence: float | None = None,
    ) -> list[ResponsePattern]:
        """Buckets for a domain, most confident first."""
        return await self._repo.list_by_domain(
            user_id, contact_domain, min_confidence=min_confidence
        )

    async def list_patterns(
        self, user_id: UUID, *, limit: int = 50
    ) -> list[ResponsePatternResponse]:
        """A user's most confident buckets across domains.

        Args:
            user_id: User UUID.
            limit: Maximum number of buckets.

        Returns:
            Pattern responses ordered by confidence.
        """
        patterns = await self._repo.list_by_user(user_id, limit=limit)
        return [ResponsePatternResponse.model_validate(p) for p in patterns]
