"""Shared type definitions."""

from __future__ import annotations

from typing import Literal, TypedDict

RelationshipTrend = Literal["improving", "stable", "declining", "critical"]
RiskLevel = Literal["low", "medium", "high"]
PriorityLevel = Literal["low", "medium", "high", "critical"]
RecommendationType = Literal[
    "optimal_response_time",
    "client_outreach",
    "relationship_improvement",
    "risk_mitigation",
]
RecommendationStatus = Literal["pending", "acknowledged", "implemented", "dismissed"]


class ScoreBreakdown(TypedDict):
    """Health score components."""

    response_factor: float
    sentiment_factor: float
    frequency_factor: float
    base_score: float
    final_score: float


class RiskFactorData(TypedDict):
    """A single risk factor as stored on a health score."""

    description: str
    severity: RiskLevel


class RiskFactorsData(TypedDict):
    """Risk factor document stored on a health score."""

    overall_risk: RiskLevel
    factors: list[RiskFactorData]

