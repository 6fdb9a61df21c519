"""SQLAlchemy models for relationship health."""

from relationship_health.models.base import Base
from relationship_health.models.health_score import HealthScore
from relationship_health.models.interaction import InteractionRecord
from relationship_health.models.recommendation import PredictiveRecommendation
from relationship_health.models.response_pattern import ResponsePattern

__all__ = [
    "Base",
    "HealthScore",
    "InteractionRecord",
    "PredictiveRecommendation",
    "ResponsePattern",
]
