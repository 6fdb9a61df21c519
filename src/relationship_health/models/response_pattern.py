"""Response pattern model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Float, Integer, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from relationship_health.models.base import Base

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class ResponsePattern(Base):
    """Learned response time for one (user, domain, weekday, hour) bucket.

    ``day_of_week`` counts from Sunday = 0.
    """

    __tablename__ = "response_patterns"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "contact_domain",
            "day_of_week",
            "time_of_day",
            name="uq_response_patterns_user_domain_day_time",
        ),
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_day_of_week"),
        CheckConstraint("time_of_day >= 0 AND time_of_day <= 23", name="ck_time_of_day"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    contact_domain: Mapped[str] = mapped_column(String, nullable=False, index=True)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    time_of_day: Mapped[int] = mapped_column(Integer, nullable=False)
    avg_response_time: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    response_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    confidence_score: Mapped[float] = mapped_column(Float, default=0.5, server_default="0.5")
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
    def slot_label(self) -> str:
        """Human-readable slot, e.g. ``Tuesday 3 PM``."""
        return f"{WEEKDAY_NAMES[self.day_of_week]} {hour_label(self.time_of_day)}"

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"ResponsePattern(domain={self.contact_domain!r}, day={self.day_of_week}, "
            f"hour={self.time_of_day}, avg={self.avg_response_time:.2f}, "
            f"confidence={self.confidence_score:.2f})"
        )


def hour_label(hour: int) -> str:
    """Render an hour of day on the 12-hour clock."""
    if hour == 0:
        return "12 AM"
    if hour < 12:
        return f"{hour} AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM"
