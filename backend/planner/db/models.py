"""SQLAlchemy ORM models for trips, days, places and generated plans."""

import datetime
import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TripRow(Base):
    """Trip table - user-owned travel plan."""

    __tablename__ = "trips"
    __table_args__ = (Index("idx_trips_user_created", "user_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    traveler_type: Mapped[str] = mapped_column(Text, nullable=False)
    # {total, spent, currency, by_category}
    budget: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    days: Mapped[list["TripDayRow"]] = relationship(
        "TripDayRow", back_populates="trip", cascade="all, delete-orphan"
    )


class TripDayRow(Base):
    """Trip day table - one row per calendar date of a trip."""

    __tablename__ = "trip_days"
    __table_args__ = (
        UniqueConstraint("trip_id", "day_number", name="uq_trip_days_number"),
        Index("idx_trip_days_trip", "trip_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trip_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    subheading: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_distance: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    trip: Mapped["TripRow"] = relationship("TripRow", back_populates="days")
    places: Mapped[list["TripPlaceRow"]] = relationship(
        "TripPlaceRow", back_populates="day", cascade="all, delete-orphan"
    )


class TripPlaceRow(Base):
    """Trip place table - ordered stops of a day.

    No unique constraint on (trip_day_id, position): positions are rewritten
    in bulk and pass through transient duplicates inside a transaction.
    """

    __tablename__ = "trip_places"
    __table_args__ = (
        Index("idx_trip_places_day_position", "trip_day_id", "position"),
        CheckConstraint("position >= 0", name="ck_trip_places_position"),
        CheckConstraint("cost >= 0", name="ck_trip_places_cost"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trip_day_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("trip_days.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    hours: Mapped[str] = mapped_column(Text, nullable=False, default="")
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    website: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    visited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    distance_to_next: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    time_to_next: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    day: Mapped["TripDayRow"] = relationship("TripDayRow", back_populates="places")


class TripPlanRow(Base):
    """Generated trip plan table - day list stored as JSON."""

    __tablename__ = "ai_trip_plans"
    __table_args__ = (Index("idx_ai_trip_plans_user", "user_id"),)

    trip_plan_id: Mapped[str] = mapped_column(Text, primary_key=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    budget: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    travelers: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    itinerary: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    total_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    suggestions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
