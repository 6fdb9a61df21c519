"""Interaction log model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, Index, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from relationship_health.models.base import Base


class InteractionRecord(Base):
    """One observed interaction with a contact.

    Backs the trailing-window frequency count and lets event subscribers
    recognise classification ids that were already processed.
    """

    __tablename__ = "contact_interactions"
    __table_args__ = (
        Index(
            "ix_contact_interactions_user_contact_time",
            "user_id",
            "contact_email",
            "occurred_at",
        ),
        Index("ix_contact_interactions_user_classification", "user_id", "classification_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    contact_email: Mapped[str] = mapped_column(String, nullable=False)
    classification_id: Mapped[str | None] = mapped_column(String, nullable=True)
    response_time_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    sentiment_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"InteractionRecord(contact={self.contact_email!r}, at={self.occurred_at})"
