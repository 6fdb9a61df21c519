"""Health score model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Float, Integer, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from relationship_health.models.base import Base


class HealthScore(Base):
    """Relationship health for one (user, contact) pair."""

    __tablename__ = "client_health_scores"
    __table_args__ = (
        UniqueConstraint("user_id", "contact_email", name="uq_client_health_scores_user_contact"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    contact_email: Mapped[str] = mapped_column(String, nullable=False)
    contact_name: Mapped[str | None] = mapped_column(String, nullable=True)
    company: Mapped[str | None] = mapped_column(String, nullable=True)
    health_score: Mapped[int] = mapped_column(Integer, default=50, server_default="50")
    response_time_avg: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    sentiment_score: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    email_frequency: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    last_interaction: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    relationship_trend: Mapped[str] = mapped_column(
        String, default="stable", server_default="stable"
    )
    risk_factors: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def contact_domain(self) -> str:
        """Domain part of the contact email."""
        return self.contact_email.rpartition("@")[2].lower()

    @property
    def is_critical(self) -> bool:
        """Check if the relationship is classified critical."""
        return self.relationship_trend == "critical"

    @property
    def overall_risk(self) -> str:
        """Overall risk level from the stored risk factors."""
        if not self.risk_factors:
            return "low"
        return str(self.risk_factors.get("overall_risk", "low"))

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"HealthScore(contact={self.contact_email!r}, score={self.health_score}, "
            f"trend={self.relationship_trend!r})"
        )
