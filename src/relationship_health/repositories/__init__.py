"""Repository classes for data access."""

from relationship_health.repositories.health_score import HealthScoreRepository
from relationship_health.repositories.interaction import InteractionRepository
from relationship_health.repositories.recommendation import RecommendationRepository
from relationship_health.repositories.response_pattern import ResponsePatternRepository

__all__ = [
    "HealthScoreRepository",
    "InteractionRepository",
    "RecommendationRepository",
    "ResponsePatternRepository",
]
