"""Pydantic schemas for engine inputs and outputs."""

from relationship_health.schemas.health import (
    ContactInsights,
    HealthAnalytics,
    HealthScoreListResponse,
    HealthScoreResponse,
    InteractionCreate,
    RiskFactorResponse,
    RiskFactorsResponse,
    ScoreBreakdownResponse,
)
from relationship_health.schemas.insight import (
    ContactHealthSummary,
    DomainPerformance,
    HighRiskContact,
    IntelligenceOverview,
    PredictiveInsight,
    UserInsights,
)
from relationship_health.schemas.pattern import ResponsePatternResponse
from relationship_health.schemas.recommendation import (
    ClientOutreachDetails,
    GenerationSummary,
    OptimalResponseTimeDetails,
    RecommendationCreate,
    RecommendationDetails,
    RecommendationListResponse,
    RecommendationResponse,
    RelationshipImprovementDetails,
    RiskMitigationDetails,
)

__all__ = [
    "ClientOutreachDetails",
    "ContactHealthSummary",
    "ContactInsights",
    "DomainPerformance",
    "GenerationSummary",
    "HealthAnalytics",
    "HealthScoreListResponse",
    "HealthScoreResponse",
    "HighRiskContact",
    "IntelligenceOverview",
    "InteractionCreate",
    "OptimalResponseTimeDetails",
    "PredictiveInsight",
    "RecommendationCreate",
    "RecommendationDetails",
    "RecommendationListResponse",
    "RecommendationResponse",
    "RelationshipImprovementDetails",
    "ResponsePatternResponse",
    "RiskFactorResponse",
    "RiskFactorsResponse",
    "RiskMitigationDetails",
    "ScoreBreakdownResponse",
    "UserInsights",
]
