"""relationship_health

Revision ID: 20261019
Revises:
Create Date: 2026-10-19 09:00:00

Create relationship health tables: per-contact health scores, learned
response pattern buckets, the contact interaction log and predictive
recommendations.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = "20261019"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create relationship health tables."""

    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    # client_health_scores - One row per user x contact
    op.create_table(
        "client_health_scores",
        sa.Column(
            "id",
            UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("contact_email", sa.String, nullable=False),
        sa.Column("contact_name", sa.String),
        sa.Column("company", sa.String),
        sa.Column("health_score", sa.Integer, server_default="50"),
        sa.Column("response_time_avg", sa.Float, server_default="0"),
        sa.Column("sentiment_score", sa.Float, server_default="0"),
        sa.Column("email_frequency", sa.Float, server_default="0"),
        sa.Column("last_interaction", sa.TIMESTAMP(timezone=True)),
        sa.Column("relationship_trend", sa.String, server_default="stable"),
        sa.Column("risk_factors", JSONB),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint(
            "user_id", "contact_email", name="uq_client_health_scores_user_contact"
        ),
    )
    op.create_index("ix_client_health_scores_user_id", "client_health_scores", ["user_id"])

    # response_patterns - One bucket per user x domain x weekday x hour
    op.create_table(
        "response_patterns",
        sa.Column(
            "id",
            UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("contact_domain", sa.String, nullable=False),
        sa.Column("day_of_week", sa.Integer, nullable=False),
        sa.Column("time_of_day", sa.Integer, nullable=False),
        sa.Column("avg_response_time", sa.Float, server_default="0"),
        sa.Column("response_count", sa.Integer, server_default="0"),
        sa.Column("confidence_score", sa.Float, server_default="0.5"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint(
            "user_id",
            "contact_domain",
            "day_of_week",
            "time_of_day",
            name="uq_response_patterns_user_domain_day_time",
        ),
        sa.CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_day_of_week"),
        sa.CheckConstraint("time_of_day >= 0 AND time_of_day <= 23", name="ck_time_of_day"),
    )
    op.create_index("ix_response_patterns_user_id", "response_patterns", ["user_id"])
    op.create_index("ix_response_patterns_contact_domain", "response_patterns", ["contact_domain"])

    # contact_interactions - Trailing-window log for email frequency
    op.create_table(
        "contact_interactions",
        sa.Column(
            "id",
            UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("contact_email", sa.String, nullable=False),
        sa.Column("classification_id", sa.String),
        sa.Column("response_time_hours", sa.Float),
        sa.Column("sentiment_score", sa.Float),
        sa.Column("occurred_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_contact_interactions_user_contact_time",
        "contact_interactions",
        ["user_id", "contact_email", "occurred_at"],
    )
    op.create_index(
        "ix_contact_interactions_user_classification",
        "contact_interactions",
        ["user_id", "classification_id"],
    )

    # predictive_recommendations - Expiring advice with a one-way lifecycle
    op.create_table(
        "predictive_recommendations",
        sa.Column(
            "id",
            UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("recommendation_type", sa.String, nullable=False),
        sa.Column("contact_email", sa.String),
        sa.Column("contact_domain", sa.String),
        sa.Column("title", sa.String, nullable=False),
        sa.Column("description", sa.String, nullable=False),
        sa.Column("confidence_score", sa.Float, server_default="0.5"),
        sa.Column("priority_level", sa.String, server_default="medium"),
        sa.Column("action_required", sa.String, nullable=False),
        sa.Column("expected_impact", sa.String),
        sa.Column("implementation_steps", ARRAY(sa.String)),
        sa.Column("details", JSONB),
        sa.Column("status", sa.String, server_default="pending"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True)),
        sa.Column("acknowledged_at", sa.TIMESTAMP(timezone=True)),
    )
    op.create_index(
        "ix_predictive_recommendations_user_id", "predictive_recommendations", ["user_id"]
    )
    op.create_index(
        "ix_predictive_recommendations_status", "predictive_recommendations", ["status"]
    )
    op.create_index(
        "ix_predictive_recommendations_expires_at", "predictive_recommendations", ["expires_at"]
    )


def downgrade() -> None:
    """Drop relationship health tables."""
    op.drop_table("predictive_recommendations")
    op.drop_table("contact_interactions")
    op.drop_table("response_patterns")
    op.drop_table("client_health_scores")
