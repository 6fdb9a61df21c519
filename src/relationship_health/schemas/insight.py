"""Predictive insight Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from relationship_health.core.types import RelationshipTrend, RiskLevel
from relationship_health.schemas.health import (
    ContactInsights,
    HealthAnalytics,
    HealthScoreResponse,
)
from relationship_health.schemas.pattern import ResponsePatternResponse
from relationship_health.schemas.recommendation import RecommendationResponse


class PredictiveInsight(BaseModel):
    """Schema for response guidance about one contact. Never persisted."""

    optimal_response_time: float = 24.0
    confidence_score: float = 0.5
    best_times_to_respond: list[str] = Field(default_factory=list, max_length=5)
    risk_assessment: RiskLevel = "medium"
    recommendations: list[str] = Field(default_factory=list, max_length=5)
    degraded: bool = False


class ContactHealthSummary(BaseModel):
    """Schema for the health view of an email sender."""

    health_score: HealthScoreResponse | None = None
    recommendations: list[RecommendationResponse] = Field(default_factory=list)
    insights: ContactInsights
    degraded: bool = False


class DomainPerformance(BaseModel):
    """Schema for per-domain response performance."""

    domain: str
    avg_response_time: float
    confidence: float


class HighRiskContact(BaseModel):
    """Schema for a contact that needs attention."""

    email: str
    score: int
    trend: RelationshipTrend


class UserInsights(BaseModel):
    """Schema for user-level intelligence figures."""

    total_contacts: int = 0
    average_health_score: float = 0.0
    average_response_time: float = 0.0
    critical_relationships: int = 0
    improving_relationships: int = 0
    best_response_domains: list[DomainPerformance] = Field(default_factory=list)
    high_risk_contacts: list[HighRiskContact] = Field(default_factory=list)


class IntelligenceOverview(BaseModel):
    """Schema for the combined predictive intelligence view."""

    recommendations: list[RecommendationResponse] = Field(default_factory=list)
    health_analytics: HealthAnalytics = Field(default_factory=HealthAnalytics)
    patterns: list[ResponsePatternResponse] = Field(default_factory=list)
    user_insights: UserInsights = Field(default_factory=UserInsights)
    degraded: bool = False
