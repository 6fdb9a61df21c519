"""Tests for the recommendation engine."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest

from relationship_health.core.errors import PersistenceError, RecommendationNotFoundError
from relationship_health.models.health_score import HealthScore
from relationship_health.models.recommendation import PredictiveRecommendation
from relationship_health.models.response_pattern import ResponsePattern
from relationship_health.schemas.recommendation import RecommendationCreate
from relationship_health.services.recommendation_engine import (
    RecommendationEngine,
    recommendation_for_domain,
    recommendations_for_contact,
)

NOW = datetime(2026, 3, 3, 15, 0, tzinfo=UTC)
USER_ID = uuid.uuid4()


def make_record(health_score: int = 80, trend: str = "stable", **overrides: Any) -> HealthScore:
    """Build a fully populated health score row."""
    values: dict[str, Any] = {
        "user_id": USER_ID,
        "contact_email": "jane.doe@acme.com",
        "contact_name": "Jane Doe",
        "health_score": health_score,
        "response_time_avg": 4.0,
        "sentiment_score": 0.2,
        "email_frequency": 2.0,
        "last_interaction": NOW - timedelta(days=1),
        "relationship_trend": trend,
        "risk_factors": {"overall_risk": "low", "factors": []},
    }
    values.update(overrides)
    return HealthScore(**values)


def make_pattern(avg: float, confidence: float, day: int = 2, hour: int = 15) -> ResponsePattern:
    """Build a response pattern bucket for acme.com."""
    return ResponsePattern(
        user_id=USER_ID,
        contact_domain="acme.com",
        day_of_week=day,
        time_of_day=hour,
        avg_response_time=avg,
        response_count=3,
        confidence_score=confidence,
    )


def make_recommendation(status: str = "pending", **overrides: Any) -> PredictiveRecommendation:
    """Build a fully populated recommendation row."""
    values: dict[str, Any] = {
        "id": uuid.uuid4(),
        "user_id": USER_ID,
        "recommendation_type": "client_outreach",
        "contact_email": "jane.doe@acme.com",
        "title": "Check in with Jane Doe",
        "description": "No interaction with Jane Doe for 20 days.",
        "confidence_score": 0.6,
        "priority_level": "medium",
        "action_required": "Send Jane Doe a check-in email",
        "status": status,
        "details": {
            "recommendation_type": "client_outreach",
            "contact_email": "jane.doe@acme.com",
            "health_score": 75,
        },
        "created_at": NOW,
        "expires_at": NOW + timedelta(days=7),
    }
    values.update(overrides)
    return PredictiveRecommendation(**values)


def _stored(
    user_id: uuid.UUID, items: Sequence[RecommendationCreate]
) -> list[PredictiveRecommendation]:
    return [
        PredictiveRecommendation(
            id=uuid.uuid4(),
            user_id=user_id,
            status="pending",
            created_at=NOW,
            **item.model_dump(exclude={"details"}),
            details=item.details.model_dump(mode="json"),
        )
        for item in items
    ]


@pytest.fixture
def engine() -> RecommendationEngine:
    """Create engine with mock session."""
    return RecommendationEngine(AsyncMock())


class TestRecommendationsForContact:
    """Tests for recommendations_for_contact."""

    def test_healthy_contact(self) -> None:
        """Test a healthy, active contact needs nothing."""
        assert recommendations_for_contact(make_record(), NOW) == []

    def test_critical_trend(self) -> None:
        """Test critical decline yields critical risk mitigation."""
        record = make_record(
            35,
            "critical",
            risk_factors={
                "overall_risk": "high",
                "factors": [{"description": "Low health score: 35", "severity": "high"}],
            },
        )
        items = recommendations_for_contact(record, NOW)

        assert [i.recommendation_type for i in items] == ["risk_mitigation"]
        item = items[0]
        assert item.priority_level == "critical"
        assert item.confidence_score == 0.85
        assert item.contact_email == "jane.doe@acme.com"
        assert "Low health score: 35" in item.description
        assert item.details.recommendation_type == "risk_mitigation"
        assert item.details.risk_factors[0].severity == "high"

    def test_low_score_without_critical_trend(self) -> None:
        """Test a low but steady score yields high-priority mitigation."""
        items = recommendations_for_contact(make_record(38), NOW)
        assert items[0].recommendation_type == "risk_mitigation"
        assert items[0].priority_level == "high"

    def test_declining(self) -> None:
        """Test declining relationships get high-priority improvement."""
        items = recommendations_for_contact(make_record(45, "declining"), NOW)
        assert [i.recommendation_type for i in items] == ["relationship_improvement"]
        assert items[0].priority_level == "high"

    def test_negative_sentiment(self) -> None:
        """Test negative sentiment gets medium-priority improvement."""
        items = recommendations_for_contact(make_record(70, sentiment_score=-0.5), NOW)
        assert [i.recommendation_type for i in items] == ["relationship_improvement"]
        assert items[0].priority_level == "medium"

    def test_inactive_contact(self) -> None:
        """Test silence past the threshold yields outreach."""
        record = make_record(75, last_interaction=NOW - timedelta(days=20))
        items = recommendations_for_contact(record, NOW)

        assert [i.recommendation_type for i in items] == ["client_outreach"]
        item = items[0]
        assert item.priority_level == "medium"
        assert item.description == "No interaction with Jane Doe for 20 days."
        assert item.details.days_since_last_interaction == 20

    def test_inactivity_threshold_configurable(self) -> None:
        """Test the outreach threshold."""
        record = make_record(75, last_interaction=NOW - timedelta(days=20))
        assert recommendations_for_contact(record, NOW, outreach_after_days=30) == []

    def test_infrequent_low_score_contact(self) -> None:
        """Test infrequent contact below 60 yields high-priority outreach."""
        record = make_record(50, email_frequency=0.1, last_interaction=None)
        items = recommendations_for_contact(record, NOW)

        assert [i.recommendation_type for i in items] == ["client_outreach"]
        assert items[0].priority_level == "high"
        assert items[0].details.days_since_last_interaction is None


class TestRecommendationForDomain:
    """Tests for recommendation_for_domain."""

    def test_favorable_windows(self) -> None:
        """Test fast, confident buckets yield a low-priority timing tip."""
        patterns = [make_pattern(3, 0.8), make_pattern(5, 0.7, day=1)]
        item = recommendation_for_domain("acme.com", patterns)

        assert item is not None
        assert item.recommendation_type == "optimal_response_time"
        assert item.priority_level == "low"
        assert item.contact_domain == "acme.com"
        assert item.confidence_score == 0.8
        assert item.details.best_times_to_respond == ["Tuesday 3 PM", "Monday 3 PM"]
        assert item.details.optimal_response_hours == 4.0

    def test_slow_domain(self) -> None:
        """Test slow domains yield a medium-priority tip."""
        item = recommendation_for_domain("acme.com", [make_pattern(60, 0.7)])

        assert item is not None
        assert item.priority_level == "medium"
        assert item.details.best_times_to_respond == []

    def test_low_confidence_ignored(self) -> None:
        """Test unconfident buckets yield nothing."""
        assert recommendation_for_domain("acme.com", [make_pattern(3, 0.4)]) is None

    def test_nothing_to_suggest(self) -> None:
        """Test moderate response times without good windows yield nothing."""
        assert recommendation_for_domain("acme.com", [make_pattern(30, 0.9)]) is None


class TestGenerate:
    """Tests for RecommendationEngine.generate."""

    def test_init(self) -> None:
        """Test engine initialization."""
        engine = RecommendationEngine(AsyncMock(), ttl_days=3, outreach_after_days=30)
        assert engine._ttl == timedelta(days=3)
        assert engine._outreach_after_days == 30

    @pytest.mark.asyncio
    async def test_generate(self, engine: RecommendationEngine) -> None:
        """Test new recommendations expire after the TTL."""
        with (
            patch.object(
                engine._scores, "list_by_user", return_value=[make_record(35, "critical")]
            ),
            patch.object(engine._patterns, "list_domains", return_value=["acme.com"]),
            patch.object(engine._patterns, "list_by_domain", return_value=[make_pattern(3, 0.8)]),
            patch.object(engine._repo, "list_unexpired", return_value=[]),
            patch.object(engine._repo, "create_many", side_effect=_stored) as mock_create,
        ):
            summary = await engine.generate(USER_ID, now=NOW)

        items = mock_create.call_args.args[1]
        assert [i.recommendation_type for i in items] == [
            "risk_mitigation",
            "optimal_response_time",
        ]
        assert all(i.expires_at == NOW + timedelta(days=7) for i in items)
        assert len(summary.created) == 2
        assert summary.created[0].status == "pending"
        assert summary.skipped_existing == 0
        assert summary.contacts_scanned == 1
        assert summary.domains_scanned == 1

    @pytest.mark.asyncio
    async def test_generate_skips_existing(self, engine: RecommendationEngine) -> None:
        """Test unexpired advice of the same type and target is not re-issued."""
        dismissed = make_recommendation(
            "dismissed", recommendation_type="risk_mitigation", contact_email="jane.doe@acme.com"
        )
        with (
            patch.object(
                engine._scores, "list_by_user", return_value=[make_record(35, "critical")]
            ),
            patch.object(engine._patterns, "list_domains", return_value=[]),
            patch.object(engine._repo, "list_unexpired", return_value=[dismissed]),
            patch.object(engine._repo, "create_many", side_effect=_stored) as mock_create,
        ):
            summary = await engine.generate(USER_ID, now=NOW)

        assert mock_create.call_args.args[1] == []
        assert summary.created == []
        assert summary.skipped_existing == 1

    @pytest.mark.asyncio
    async def test_generate_store_failure(self, engine: RecommendationEngine) -> None:
        """Test store failures propagate."""
        with patch.object(
            engine._scores, "list_by_user", side_effect=PersistenceError("list_health_scores")
        ):
            with pytest.raises(PersistenceError):
                await engine.generate(USER_ID, now=NOW)


class TestListRecommendations:
    """Tests for RecommendationEngine.list_recommendations."""

    @pytest.mark.asyncio
    async def test_list(self, engine: RecommendationEngine) -> None:
        """Test listing active recommendations."""
        recs = [make_recommendation(priority_level="high"), make_recommendation("acknowledged")]
        with patch.object(engine._repo, "list_active", return_value=recs) as mock_list:
            result = await engine.list_recommendations(USER_ID, now=NOW)

        mock_list.assert_called_once_with(USER_ID, NOW)
        assert result.total == 2
        assert result.recommendations[0].priority_level == "high"
        assert result.degraded is False

    @pytest.mark.asyncio
    async def test_list_degraded(self, engine: RecommendationEngine) -> None:
        """Test a store failure degrades to an empty list."""
        with patch.object(
            engine._repo,
            "list_active",
            side_effect=PersistenceError("list_active_recommendations"),
        ):
            result = await engine.list_recommendations(USER_ID, now=NOW)

        assert result.recommendations == []
        assert result.total == 0
        assert result.degraded is True


class TestLifecycle:
    """Tests for acknowledge and dismiss."""

    @pytest.mark.asyncio
    async def test_acknowledge_pending(self, engine: RecommendationEngine) -> None:
        """Test acknowledging records the time."""
        rec = make_recommendation()
        with (
            patch.object(engine._repo, "get_by_id", return_value=rec),
            patch.object(engine._repo, "save", side_effect=lambda r: r) as mock_save,
        ):
            result = await engine.acknowledge(rec.id, USER_ID, now=NOW)

        assert result.status == "acknowledged"
        assert result.acknowledged_at == NOW
        mock_save.assert_called_once_with(rec)

    @pytest.mark.asyncio
    async def test_acknowledge_is_idempotent(self, engine: RecommendationEngine) -> None:
        """Test acknowledging twice keeps the first timestamp."""
        rec = make_recommendation("acknowledged", acknowledged_at=NOW)
        with (
            patch.object(engine._repo, "get_by_id", return_value=rec),
            patch.object(engine._repo, "save") as mock_save,
        ):
            result = await engine.acknowledge(rec.id, now=NOW + timedelta(hours=1))

        assert result.acknowledged_at == NOW
        mock_save.assert_not_called()

    @pytest.mark.asyncio
    async def test_dismiss_acknowledged(self, engine: RecommendationEngine) -> None:
        """Test acknowledged recommendations can be dismissed."""
        rec = make_recommendation("acknowledged")
        with (
            patch.object(engine._repo, "get_by_id", return_value=rec),
            patch.object(engine._repo, "save", side_effect=lambda r: r),
        ):
            result = await engine.dismiss(rec.id)

        assert result.status == "dismissed"

    @pytest.mark.asyncio
    async def test_dismiss_then_acknowledge_stays_dismissed(
        self, engine: RecommendationEngine
    ) -> None:
        """Test nothing leaves the dismissed state."""
        rec = make_recommendation()
        with (
            patch.object(engine._repo, "get_by_id", return_value=rec),
            patch.object(engine._repo, "save", side_effect=lambda r: r) as mock_save,
        ):
            await engine.dismiss(rec.id)
            result = await engine.acknowledge(rec.id)
            again = await engine.dismiss(rec.id)

        assert result.status == "dismissed"
        assert result.acknowledged_at is None
        assert again.status == "dismissed"
        mock_save.assert_called_once()

    @pytest.mark.asyncio
    async def test_implemented_is_terminal(self, engine: RecommendationEngine) -> None:
        """Test implemented recommendations are not changed."""
        rec = make_recommendation("implemented")
        with (
            patch.object(engine._repo, "get_by_id", return_value=rec),
            patch.object(engine._repo, "save") as mock_save,
        ):
            assert (await engine.acknowledge(rec.id)).status == "implemented"
            assert (await engine.dismiss(rec.id)).status == "implemented"

        mock_save.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_id(self, engine: RecommendationEngine) -> None:
        """Test unknown recommendations raise."""
        rec_id = uuid.uuid4()
        with patch.object(engine._repo, "get_by_id", return_value=None) as mock_get:
            with pytest.raises(RecommendationNotFoundError) as exc_info:
                await engine.dismiss(rec_id, USER_ID)

        mock_get.assert_called_once_with(rec_id, USER_ID)
        assert exc_info.value.recommendation_id == rec_id
