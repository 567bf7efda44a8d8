"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates:
- user
- city, activity (catalog)
- trip, itinerary_day, scheduled_activity, trip_budget
- shared_trip
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Enums are stored as VARCHAR (non-native), matching the ORM models
ENUM_LENGTH = 32


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "user",
        sa.Column("user_id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        _timestamp("created_at"),
        sa.UniqueConstraint("email", name="uq_user_email"),
    )

    op.create_table(
        "city",
        sa.Column("city_id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("country", sa.Text(), nullable=False),
        sa.Column("continent", sa.Text(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("avg_daily_cost", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.Text(), nullable=False),
        sa.Column("popularity_score", sa.Integer(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.UniqueConstraint("name", "country", name="uq_city_name_country"),
    )

    op.create_table(
        "activity",
        sa.Column("activity_id", sa.Uuid(), primary_key=True),
        sa.Column("city_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(ENUM_LENGTH), nullable=False),
        sa.Column("estimated_cost", sa.Numeric(10, 2), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["city_id"], ["city.city_id"]),
    )
    op.create_index("idx_activity_city", "activity", ["city_id"])

    op.create_table(
        "trip",
        sa.Column("trip_id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("total_budget", sa.Numeric(12, 2), nullable=True),
        sa.Column("cover_photo_url", sa.Text(), nullable=True),
        sa.Column("status", sa.String(ENUM_LENGTH), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["user_id"], ["user.user_id"]),
    )
    op.create_index("idx_trip_user_updated", "trip", ["user_id", "updated_at"])

    op.create_table(
        "itinerary_day",
        sa.Column("day_id", sa.Uuid(), primary_key=True),
        sa.Column("trip_id", sa.Uuid(), nullable=False),
        sa.Column("city_id", sa.Uuid(), nullable=False),
        sa.Column("day_number", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["trip_id"], ["trip.trip_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["city_id"], ["city.city_id"]),
        sa.UniqueConstraint("trip_id", "day_number", name="uq_day_trip_number"),
    )

    op.create_table(
        "scheduled_activity",
        sa.Column("scheduled_id", sa.Uuid(), primary_key=True),
        sa.Column("day_id", sa.Uuid(), nullable=False),
        sa.Column("activity_id", sa.Uuid(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("custom_notes", sa.Text(), nullable=True),
        sa.Column("custom_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["day_id"], ["itinerary_day.day_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["activity_id"], ["activity.activity_id"]),
    )
    op.create_index("idx_scheduled_day_order", "scheduled_activity", ["day_id", "order_index"])

    op.create_table(
        "trip_budget",
        sa.Column("allocation_id", sa.Uuid(), primary_key=True),
        sa.Column("trip_id", sa.Uuid(), nullable=False),
        sa.Column("category", sa.String(ENUM_LENGTH), nullable=False),
        sa.Column("allocated_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("spent_amount", sa.Numeric(12, 2), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["trip_id"], ["trip.trip_id"], ondelete="CASCADE"),
        sa.UniqueConstraint("trip_id", "category", name="uq_budget_trip_category"),
    )

    op.create_table(
        "shared_trip",
        sa.Column("share_id", sa.Uuid(), primary_key=True),
        sa.Column("trip_id", sa.Uuid(), nullable=False),
        sa.Column("shared_by_id", sa.Uuid(), nullable=False),
        sa.Column("shared_with_id", sa.Uuid(), nullable=True),
        sa.Column("public_slug", sa.Text(), nullable=False),
        sa.Column("permission", sa.String(ENUM_LENGTH), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["trip_id"], ["trip.trip_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["shared_by_id"], ["user.user_id"]),
        sa.ForeignKeyConstraint(["shared_with_id"], ["user.user_id"]),
        sa.UniqueConstraint("public_slug", name="uq_shared_trip_slug"),
    )
    op.create_index("idx_share_trip", "shared_trip", ["trip_id"])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_index("idx_share_trip", table_name="shared_trip")
    op.drop_table("shared_trip")
    op.drop_table("trip_budget")
    op.drop_index("idx_scheduled_day_order", table_name="scheduled_activity")
    op.drop_table("scheduled_activity")
    op.drop_table("itinerary_day")
    op.drop_index("idx_trip_user_updated", table_name="trip")
    op.drop_table("trip")
    op.drop_index("idx_activity_city", table_name="activity")
    op.drop_table("activity")
    op.drop_table("city")
    op.drop_table("user")
