"""Initial schema

Revision ID: 001
Revises:
Create Date: 2025-10-01

Creates the itinerary tables:
- trips, trip_days, trip_places
- ai_trip_plans
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    # trips table
    op.create_table(
        "trips",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("destination", sa.Text(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("traveler_type", sa.Text(), nullable=False),
        sa.Column("budget", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_trips_user_created", "trips", ["user_id", "created_at"])

    # trip_days table
    op.create_table(
        "trip_days",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("trip_id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("day_number", sa.Integer(), nullable=False),
        sa.Column("subheading", sa.Text(), nullable=True),
        sa.Column("total_distance", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("total_duration", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["trip_id"], ["trips.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("trip_id", "day_number", name="uq_trip_days_number"),
    )
    op.create_index("idx_trip_days_trip", "trip_days", ["trip_id"])

    # trip_places table (no unique position constraint: bulk rewrites pass
    # through transient duplicates)
    op.create_table(
        "trip_places",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("trip_day_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("image_url", sa.Text(), server_default="", nullable=False),
        sa.Column("hours", sa.Text(), server_default="", nullable=False),
        sa.Column("cost", sa.Numeric(12, 2), server_default=sa.text("0"), nullable=False),
        sa.Column("notes", sa.Text(), server_default="", nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("duration", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("visited", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("distance_to_next", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("time_to_next", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["trip_day_id"], ["trip_days.id"], ondelete="CASCADE"),
        sa.CheckConstraint("position >= 0", name="ck_trip_places_position"),
        sa.CheckConstraint("cost >= 0", name="ck_trip_places_cost"),
    )
    op.create_index("idx_trip_places_day_position", "trip_places", ["trip_day_id", "position"])

    # ai_trip_plans table
    op.create_table(
        "ai_trip_plans",
        sa.Column("trip_plan_id", sa.Text(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("destination", sa.Text(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("budget", sa.Numeric(12, 2), nullable=False),
        sa.Column("travelers", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("itinerary", sa.JSON(), nullable=False),
        sa.Column("total_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("suggestions", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_ai_trip_plans_user", "ai_trip_plans", ["user_id"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_ai_trip_plans_user", table_name="ai_trip_plans")
    op.drop_table("ai_trip_plans")
    op.drop_index("idx_trip_places_day_position", table_name="trip_places")
    op.drop_table("trip_places")
    op.drop_index("idx_trip_days_trip", table_name="trip_days")
    op.drop_table("trip_days")
    op.drop_index("idx_trips_user_created", table_name="trips")
    op.drop_table("trips")
