"""Predictive recommendation model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Float, String, func
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from relationship_health.models.base import Base

PRIORITY_RANK = {"critical": 4, "high": 3, "medium": 2, "low": 1}
ACTIVE_STATUSES = ("pending", "acknowledged")


class PredictiveRecommendation(Base):
    """Expiring, actionable recommendation for a user."""

    __tablename__ = "predictive_recommendations"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    recommendation_type: Mapped[str] = mapped_column(String, nullable=False)
    contact_email: Mapped[str | None] = mapped_column(String, nullable=True)
    contact_domain: Mapped[str | None] = mapped_column(String, nullable=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    confidence_score: Mapped[float] = mapped_column(Float, default=0.5, server_default="0.5")
    priority_level: Mapped[str] = mapped_column(String, default="medium", server_default="medium")
    action_required: Mapped[str] = mapped_column(String, nullable=False)
    expected_impact: Mapped[str | None] = mapped_column(String, nullable=True)
    implementation_steps: Mapped[list[str] | None] = mapped_column(ARRAY(String), nullable=True)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    status: Mapped[str] = mapped_column(
        String, default="pending", server_default="pending", index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    acknowledged_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @property
    def is_pending(self) -> bool:
        """Check if recommendation is pending."""
        return self.status == "pending"

    @property
    def is_acknowledged(self) -> bool:
        """Check if recommendation is acknowledged."""
        return self.status == "acknowledged"

    @property
    def is_dismissed(self) -> bool:
        """Check if recommendation is dismissed."""
        return self.status == "dismissed"

    @property
    def priority_rank(self) -> int:
        """Sort key for priority, critical highest."""
        return PRIORITY_RANK.get(self.priority_level, 0)

    def is_expired(self, now: datetime) -> bool:
        """Check if the recommendation has expired at ``now``."""
        return self.expires_at is not None and self.expires_at <= now

    @property
    def target(self) -> str | None:
        """Contact email or domain the recommendation is about."""
        return self.contact_email or self.contact_domain

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"PredictiveRecommendation(id={self.id}, type={self.recommendation_type!r}, "
            f"status={self.status!r})"
        )
