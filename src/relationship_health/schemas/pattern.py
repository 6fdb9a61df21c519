"""Response pattern Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ResponsePatternResponse(BaseModel):
    """Schema for a learned response pattern bucket."""

    id: UUID | None = None
    user_id: UUID
    contact_domain: str
    day_of_week: int = Field(ge=0, le=6)
    time_of_day: int = Field(ge=0, le=23)
    avg_response_time: float
    response_count: int = Field(ge=0)
    confidence_score: float = Field(ge=0.0, le=1.0)
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
