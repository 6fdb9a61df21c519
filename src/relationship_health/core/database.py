"""Async database engine and session management."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from relationship_health.core.config import Config

logger = structlog.get_logger(__name__)

# Type alias for session factory
SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class Database:
    """Owns the async engine and hands out sessions."""

    def __init__(self, config: Config) -> None:
        """Initialize database wrapper.

        Args:
            config: Application configuration.
        """
        self._config = config
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_connected(self) -> bool:
        """Check if the engine has been created."""
        return self._engine is not None

    async def connect(self) -> None:
        """Create the engine and session factory."""
        if self._engine is not None:
            return
        self._engine = create_async_engine(self._config.async_database_url, pool_pre_ping=True)
        self._sessionmaker = async_sessionmaker(self._engine, expire_on_commit=False)
        await logger.ainfo("database_engine_created")

    async def disconnect(self) -> None:
        """Dispose the engine."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        await logger.ainfo("database_engine_disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Open a session.

        Yields:
            AsyncSession bound to the engine.

        Raises:
            RuntimeError: If connect() has not been called.
        """
        if self._sessionmaker is None:
            raise RuntimeError("Database not connected")
        async with self._sessionmaker() as session:
            yield session
