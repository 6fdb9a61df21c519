"""Shared helpers for repositories."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from relationship_health.core.errors import PersistenceError

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def store_operation(
    session: AsyncSession,
    operation: str,
    passthrough: tuple[type[SQLAlchemyError], ...] = (),
) -> AsyncGenerator[None, None]:
    """Translate ORM failures into PersistenceError.

    The session is rolled back so it stays usable for the caller.

    Args:
        session: Session the operation runs on.
        operation: Name reported in the error.
        passthrough: Errors re-raised untouched and without a rollback,
            for callers that retry the whole transaction.

    Raises:
        PersistenceError: If the wrapped block raises SQLAlchemyError.
    """
    try:
        yield
    except passthrough:
        raise
    except SQLAlchemyError as e:
        try:
            await session.rollback()
        except SQLAlchemyError as rollback_error:
            await logger.awarning(
                "rollback_failed", operation=operation, error=str(rollback_error)
            )
        raise PersistenceError(operation, e) from e
