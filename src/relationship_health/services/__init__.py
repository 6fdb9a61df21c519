"""Service layer for relationship health and predictive intelligence."""

from relationship_health.services.health_score_service import (
    HealthScoreService,
    build_contact_insights,
    summarize_health,
)
from relationship_health.services.insight_generator import PredictiveInsightGenerator
from relationship_health.services.intelligence_service import IntelligenceService
from relationship_health.services.pattern_learner import ResponsePatternLearner
from relationship_health.services.recommendation_engine import RecommendationEngine

__all__ = [
    "HealthScoreService",
    "IntelligenceService",
    "PredictiveInsightGenerator",
    "RecommendationEngine",
    "ResponsePatternLearner",
    "build_contact_insights",
    "summarize_health",
]
