"""Health score Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from relationship_health.core.types import RelationshipTrend, RiskLevel


class InteractionCreate(BaseModel):
    """Schema for an observed interaction with a contact."""

    contact_email: str = Field(..., description="Bare address or 'Name <address>'")
    response_time_hours: float | None = None
    sentiment_score: float | None = None
    classification_id: str | None = None


class RiskFactorResponse(BaseModel):
    """Schema for a single risk factor."""

    description: str
    severity: RiskLevel


class RiskFactorsResponse(BaseModel):
    """Schema for the risk factors stored on a health score."""

    overall_risk: RiskLevel = "low"
    factors: list[RiskFactorResponse] = Field(default_factory=list)


class ScoreBreakdownResponse(BaseModel):
    """Schema for the health score breakdown."""

    response_factor: float
    sentiment_factor: float
    frequency_factor: float
    base_score: float
    final_score: float


class HealthScoreResponse(BaseModel):
    """Schema for health score response."""

    id: UUID | None = None
    user_id: UUID
    contact_email: str
    contact_name: str | None = None
    company: str | None = None
    health_score: int = Field(ge=0, le=100)
    response_time_avg: float = 0.0
    sentiment_score: float = 0.0
    email_frequency: float = 0.0
    last_interaction: datetime | None = None
    relationship_trend: RelationshipTrend = "stable"
    risk_factors: RiskFactorsResponse | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    breakdown: ScoreBreakdownResponse | None = None

    model_config = ConfigDict(from_attributes=True)


class HealthAnalytics(BaseModel):
    """Schema for aggregate health analytics."""

    total_contacts: int = 0
    average_health_score: float = 0.0
    critical_relationships: int = 0
    improving_relationships: int = 0
    declining_relationships: int = 0


class HealthScoreListResponse(BaseModel):
    """Schema for a user's health scores with analytics."""

    scores: list[HealthScoreResponse] = Field(default_factory=list)
    analytics: HealthAnalytics = Field(default_factory=HealthAnalytics)
    degraded: bool = False


class ContactInsights(BaseModel):
    """Schema for at-a-glance guidance about one contact."""

    relationship_status: str
    suggested_actions: list[str] = Field(default_factory=list, max_length=5)
    risk_level: RiskLevel = "low"
