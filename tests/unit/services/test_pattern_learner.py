"""Tests for the response pattern learner."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from relationship_health.core.errors import PersistenceError
from relationship_health.models.response_pattern import ResponsePattern
from relationship_health.services.pattern_learner import (
    CONFIDENCE_STEP,
    INITIAL_CONFIDENCE,
    LEARNING_RATE,
    ResponsePatternLearner,
    apply_observation,
    bucket_for,
)

# Tuesday 15:00 UTC
TUESDAY_3PM = datetime(2026, 3, 3, 15, 0, tzinfo=UTC)


@pytest.fixture
def mock_session() -> AsyncMock:
    """Create a mock async session."""
    return AsyncMock()


@pytest.fixture
def learner(mock_session: AsyncMock) -> ResponsePatternLearner:
    """Create learner with mock session."""
    return ResponsePatternLearner(mock_session)


def _bucket(avg: float, confidence: float = 0.5, count: int = 1) -> ResponsePattern:
    return ResponsePattern(
        id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        contact_domain="acme.com",
        day_of_week=2,
        time_of_day=15,
        avg_response_time=avg,
        response_count=count,
        confidence_score=confidence,
    )


class TestBucketFor:
    """Tests for bucket_for."""

    def test_tuesday(self) -> None:
        """Test weekday and hour."""
        assert bucket_for(TUESDAY_3PM) == (2, 15)

    def test_sunday_is_zero(self) -> None:
        """Test weeks start on Sunday."""
        assert bucket_for(datetime(2026, 3, 1, 0, 30, tzinfo=UTC)) == (0, 0)

    def test_saturday_is_six(self) -> None:
        """Test the last day of the week."""
        assert bucket_for(datetime(2026, 3, 7, 23, 59, tzinfo=UTC)) == (6, 23)


class TestApplyObservation:
    """Tests for apply_observation."""

    def test_ema_update(self) -> None:
        """Test one EMA step."""
        pattern = _bucket(10.0, confidence=0.5, count=3)
        apply_observation(pattern, 20.0)
        assert pattern.avg_response_time == pytest.approx(11.0)
        assert pattern.confidence_score == pytest.approx(0.51)
        assert pattern.response_count == 4

    def test_confidence_capped(self) -> None:
        """Test confidence never exceeds 1."""
        pattern = _bucket(10.0, confidence=0.995)
        apply_observation(pattern, 10.0)
        assert pattern.confidence_score == 1.0
        apply_observation(pattern, 10.0)
        assert pattern.confidence_score == 1.0

    def test_constants(self) -> None:
        """Test learning constants."""
        assert LEARNING_RATE == 0.1
        assert CONFIDENCE_STEP == pytest.approx(0.01)
        assert INITIAL_CONFIDENCE == 0.5


class TestResponsePatternLearner:
    """Tests for ResponsePatternLearner."""

    def test_init(self, mock_session: AsyncMock) -> None:
        """Test learner initialization."""
        learner = ResponsePatternLearner(mock_session)
        assert learner._repo.session is mock_session

    @pytest.mark.asyncio
    async def test_first_observation_creates_bucket(
        self, learner: ResponsePatternLearner, mock_session: AsyncMock
    ) -> None:
        """Test a new bucket starts at the observation with confidence 0.5."""
        user_id = uuid.uuid4()
        with (
            patch.object(learner._repo, "get_bucket", return_value=None) as mock_get,
            patch.object(learner._repo, "add", side_effect=lambda p: p) as mock_add,
        ):
            pattern = await learner.observe(user_id, "acme.com", 3.5, observed_at=TUESDAY_3PM)

        mock_get.assert_called_once_with(user_id, "acme.com", 2, 15, for_update=True)
        mock_add.assert_called_once()
        assert pattern.avg_response_time == 3.5
        assert pattern.response_count == 1
        assert pattern.confidence_score == 0.5
        assert (pattern.day_of_week, pattern.time_of_day) == (2, 15)
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_existing_bucket_updated(
        self, learner: ResponsePatternLearner, mock_session: AsyncMock
    ) -> None:
        """Test a locked bucket gets an EMA step and is left for the caller to commit."""
        existing = _bucket(10.0)
        with (
            patch.object(learner._repo, "get_bucket", return_value=existing),
            patch.object(learner._repo, "add") as mock_add,
        ):
            pattern = await learner.observe(
                existing.user_id, "acme.com", 0.0, observed_at=TUESDAY_3PM
            )

        mock_add.assert_not_called()
        assert pattern is existing
        assert pattern.avg_response_time == pytest.approx(9.0)
        assert pattern.response_count == 2
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_converges_after_ten_observations(self, learner: ResponsePatternLearner) -> None:
        """Test ten identical observations land within 5% of the true value."""
        true_value = 4.0
        bucket = _bucket(4.4)
        with patch.object(learner._repo, "get_bucket", return_value=bucket):
            for _ in range(10):
                await learner.observe(bucket.user_id, "acme.com", true_value, TUESDAY_3PM)

        assert abs(bucket.avg_response_time - true_value) / true_value < 0.05
        assert bucket.confidence_score == pytest.approx(0.6)
        assert bucket.response_count == 11

    @pytest.mark.asyncio
    async def test_negative_response_time_clamped(self, learner: ResponsePatternLearner) -> None:
        """Test negative response times count as zero."""
        with (
            patch.object(learner._repo, "get_bucket", return_value=None),
            patch.object(learner._repo, "add", side_effect=lambda p: p),
        ):
            pattern = await learner.observe(uuid.uuid4(), "acme.com", -2.0, TUESDAY_3PM)

        assert pattern.avg_response_time == 0.0

    @pytest.mark.asyncio
    async def test_concurrent_create_propagates(self, learner: ResponsePatternLearner) -> None:
        """Test a duplicate bucket surfaces for the enclosing transaction to retry."""
        with (
            patch.object(learner._repo, "get_bucket", return_value=None),
            patch.object(
                learner._repo,
                "add",
                side_effect=IntegrityError("INSERT", {}, Exception("duplicate key")),
            ),
        ):
            with pytest.raises(IntegrityError):
                await learner.observe(uuid.uuid4(), "acme.com", 2.0, TUESDAY_3PM)

    @pytest.mark.asyncio
    async def test_store_failure_raises(self, learner: ResponsePatternLearner) -> None:
        """Test read failures raise PersistenceError."""
        with patch.object(
            learner._repo, "get_bucket", side_effect=PersistenceError("get_response_pattern")
        ):
            with pytest.raises(PersistenceError, match="get_response_pattern"):
                await learner.observe(uuid.uuid4(), "acme.com", 2.0, TUESDAY_3PM)

    @pytest.mark.asyncio
    async def test_list_patterns(self, learner: ResponsePatternLearner) -> None:
        """Test patterns are returned as response schemas."""
        bucket = _bucket(3.0, confidence=0.8)
        with patch.object(learner._repo, "list_by_user", return_value=[bucket]) as mock_list:
            result = await learner.list_patterns(bucket.user_id, limit=5)

        mock_list.assert_called_once_with(bucket.user_id, limit=5)
        assert len(result) == 1
        assert result[0].contact_domain == "acme.com"
        assert result[0].confidence_score == 0.8

    @pytest.mark.asyncio
    async def test_patterns_for_domain(self, learner: ResponsePatternLearner) -> None:
        """Test domain listing passes the confidence filter through."""
        user_id = uuid.uuid4()
        with patch.object(learner._repo, "list_by_domain", return_value=[]) as mock_list:
            await learner.patterns_for_domain(user_id, "acme.com", min_confidence=0.5)

        mock_list.assert_called_once_with(user_id, "acme.com", min_confidence=0.5)
