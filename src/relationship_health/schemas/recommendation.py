"""Recommendation Pydantic schemas.

Each recommendation type carries its own details model; the union is
discriminated on ``recommendation_type``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from relationship_health.core.types import (
    PriorityLevel,
    RecommendationStatus,
    RecommendationType,
    RelationshipTrend,
)
from relationship_health.schemas.health import RiskFactorResponse


class OptimalResponseTimeDetails(BaseModel):
    """Context for a response timing recommendation."""

    recommendation_type: Literal["optimal_response_time"] = "optimal_response_time"
    contact_domain: str
    optimal_response_hours: float
    best_times_to_respond: list[str] = Field(default_factory=list)


class ClientOutreachDetails(BaseModel):
    """Context for an outreach recommendation."""

    recommendation_type: Literal["client_outreach"] = "client_outreach"
    contact_email: str
    health_score: int
    days_since_last_interaction: int | None = None
    email_frequency: float = 0.0


class RelationshipImprovementDetails(BaseModel):
    """Context for a relationship improvement recommendation."""

    recommendation_type: Literal["relationship_improvement"] = "relationship_improvement"
    contact_email: str
    health_score: int
    sentiment_score: float
    relationship_trend: RelationshipTrend


class RiskMitigationDetails(BaseModel):
    """Context for a risk mitigation recommendation."""

    recommendation_type: Literal["risk_mitigation"] = "risk_mitigation"
    contact_email: str
    health_score: int
    relationship_trend: RelationshipTrend
    risk_factors: list[RiskFactorResponse] = Field(default_factory=list)


RecommendationDetails = Annotated[
    OptimalResponseTimeDetails
    | ClientOutreachDetails
    | RelationshipImprovementDetails
    | RiskMitigationDetails,
    Field(discriminator="recommendation_type"),
]


class RecommendationCreate(BaseModel):
    """Schema for creating a recommendation."""

    recommendation_type: RecommendationType
    contact_email: str | None = None
    contact_domain: str | None = None
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    confidence_score: float = Field(default=0.5, ge=0.0, le=1.0)
    priority_level: PriorityLevel = "medium"
    action_required: str = Field(..., min_length=1)
    expected_impact: str | None = None
    implementation_steps: list[str] | None = None
    details: RecommendationDetails
    expires_at: datetime | None = None

    @model_validator(mode="after")
    def _details_match_type(self) -> RecommendationCreate:
        if self.details.recommendation_type != self.recommendation_type:
            raise ValueError(
                f"details are for {self.details.recommendation_type}, "
                f"not {self.recommendation_type}"
            )
        return self


class RecommendationResponse(BaseModel):
    """Schema for recommendation response."""

    id: UUID
    user_id: UUID
    recommendation_type: RecommendationType
    contact_email: str | None = None
    contact_domain: str | None = None
    title: str
    description: str
    confidence_score: float
    priority_level: PriorityLevel
    action_required: str
    expected_impact: str | None = None
    implementation_steps: list[str] | None = None
    details: RecommendationDetails | None = None
    status: RecommendationStatus
    created_at: datetime | None = None
    expires_at: datetime | None = None
    acknowledged_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class RecommendationListResponse(BaseModel):
    """Schema for the active recommendations of a user."""

    recommendations: list[RecommendationResponse] = Field(default_factory=list)
    total: int = 0
    degraded: bool = False


class GenerationSummary(BaseModel):
    """Schema for the outcome of a recommendation sweep."""

    created: list[RecommendationResponse] = Field(default_factory=list)
    skipped_existing: int = 0
    contacts_scanned: int = 0
    domains_scanned: int = 0
