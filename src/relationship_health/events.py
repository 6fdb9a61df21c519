"""In-process interaction events.

Classification completion publishes ``InteractionObserved``; the health
scoring subscriber turns each event into a recorded interaction.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import structlog

from relationship_health.core.database import SessionFactory
from relationship_health.repositories.interaction import InteractionRepository
from relationship_health.schemas.health import InteractionCreate
from relationship_health.services.health_score_service import HealthScoreService

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InteractionObserved:
    """An email from a contact was classified."""

    user_id: UUID
    contact_email: str
    response_time_hours: float | None = None
    sentiment_score: float | None = None
    classification_id: str | None = None
    observed_at: datetime | None = None

    def to_interaction(self) -> InteractionCreate:
        """Convert to the health service input."""
        return InteractionCreate(
            contact_email=self.contact_email,
            response_time_hours=self.response_time_hours,
            sentiment_score=self.sentiment_score,
            classification_id=self.classification_id,
        )


EventHandler = Callable[[InteractionObserved], Awaitable[None]]


class InteractionEventBus:
    """Fan-out of interaction events to async handlers.

    Handlers run sequentially in subscription order. A handler error stops
    delivery and propagates to the publisher.
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        """Add a handler for interaction events."""
        self._handlers.append(handler)

    async def publish(self, event: InteractionObserved) -> None:
        """Deliver an event to every handler."""
        for handler in self._handlers:
            await handler(event)


def subscribe_health_scoring(
    bus: InteractionEventBus,
    session_factory: SessionFactory,
    *,
    frequency_window_days: int = 365,
) -> EventHandler:
    """Register the health scoring subscriber on a bus.

    Events whose classification id is already in the interaction log are
    skipped, so redelivered events are not counted twice.

    Args:
        bus: Event bus to subscribe to.
        session_factory: Opens a session per event.
        frequency_window_days: Trailing window for the weekly frequency.

    Returns:
        The registered handler.
    """

    async def handle(event: InteractionObserved) -> None:
        async with session_factory() as session:
            if event.classification_id is not None:
                seen = await InteractionRepository(session).has_classification(
                    event.user_id, event.classification_id
                )
                if seen:
                    await logger.ainfo(
                        "interaction_event_skipped",
                        user_id=str(event.user_id),
                        classification_id=event.classification_id,
                    )
                    return
            service = HealthScoreService(session, frequency_window_days=frequency_window_days)
            await service.record_interaction(
                event.user_id, event.to_interaction(), now=event.observed_at
            )

    bus.subscribe(handle)
    return handle
