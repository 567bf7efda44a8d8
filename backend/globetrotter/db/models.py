"""SQLAlchemy ORM models for users, catalog, trips, budgets, shares and saved cities."""

import uuid
from datetime import date, datetime, time, timezone
from decimal import Decimal

from sqlalchemy import (
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    Time,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from backend.globetrotter.models.common import (
    ActivityCategory,
    BudgetCategory,
    SharePermission,
    TripStatus,
)


def utcnow() -> datetime:
    """Timezone-aware current time, used for row timestamps."""
    return datetime.now(timezone.utc)


def _enum(enum_cls: type, name: str) -> Enum:
    return Enum(enum_cls, name=name, native_enum=False, length=32)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class User(Base):
    """User table - trip owners and share recipients."""

    __tablename__ = "user"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str] = mapped_column(Text, nullable=False, default="en")
    currency: Mapped[str] = mapped_column(Text, nullable=False, default="USD")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    trips: Mapped[list["Trip"]] = relationship("Trip", back_populates="user")


class City(Base):
    """City table - read-only catalog."""

    __tablename__ = "city"
    __table_args__ = (UniqueConstraint("name", "country", name="uq_city_name_country"),)

    city_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    country: Mapped[str] = mapped_column(Text, nullable=False)
    continent: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    avg_daily_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(Text, nullable=False, default="USD")
    popularity_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Relationships
    activities: Mapped[list["Activity"]] = relationship("Activity", back_populates="city")


class Activity(Base):
    """Activity table - read-only catalog, belongs to a city."""

    __tablename__ = "activity"
    __table_args__ = (Index("idx_activity_city", "city_id"),)

    activity_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    city_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("city.city_id"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[ActivityCategory] = mapped_column(
        _enum(ActivityCategory, "activity_category"), nullable=False
    )
    estimated_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    city: Mapped["City"] = relationship("City", back_populates="activities")


class Trip(Base):
    """Trip table - owned by a single user."""

    __tablename__ = "trip"
    __table_args__ = (Index("idx_trip_user_updated", "user_id", "updated_at"),)

    trip_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("user.user_id"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_budget: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    cover_photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TripStatus] = mapped_column(
        _enum(TripStatus, "trip_status"), nullable=False, default=TripStatus.DRAFT
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="trips")
    days: Mapped[list["ItineraryDay"]] = relationship(
        "ItineraryDay",
        back_populates="trip",
        cascade="all, delete-orphan",
        order_by="ItineraryDay.day_number",
    )
    budgets: Mapped[list["TripBudget"]] = relationship(
        "TripBudget",
        back_populates="trip",
        cascade="all, delete-orphan",
        order_by=lambda: [TripBudget.created_at, TripBudget.category],
    )
    shares: Mapped[list["SharedTrip"]] = relationship(
        "SharedTrip", back_populates="trip", cascade="all, delete-orphan"
    )


class ItineraryDay(Base):
    """Itinerary day table - one row per trip day."""

    __tablename__ = "itinerary_day"
    __table_args__ = (UniqueConstraint("trip_id", "day_number", name="uq_day_trip_number"),)

    day_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trip_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("trip.trip_id", ondelete="CASCADE"), nullable=False
    )
    city_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("city.city_id"), nullable=False)
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    trip: Mapped["Trip"] = relationship("Trip", back_populates="days")
    city: Mapped["City"] = relationship("City")
    activities: Mapped[list["ScheduledActivity"]] = relationship(
        "ScheduledActivity",
        back_populates="day",
        cascade="all, delete-orphan",
        order_by="ScheduledActivity.order_index",
    )


class ScheduledActivity(Base):
    """Scheduled activity table - a catalog activity placed on a day."""

    __tablename__ = "scheduled_activity"
    __table_args__ = (Index("idx_scheduled_day_order", "day_id", "order_index"),)

    scheduled_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    day_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("itinerary_day.day_id", ondelete="CASCADE"), nullable=False
    )
    activity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("activity.activity_id"), nullable=False
    )
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    custom_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    custom_cost: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    day: Mapped["ItineraryDay"] = relationship("ItineraryDay", back_populates="activities")
    activity: Mapped["Activity"] = relationship("Activity")


class TripBudget(Base):
    """Trip budget table - one allocation per (trip, category)."""

    __tablename__ = "trip_budget"
    __table_args__ = (UniqueConstraint("trip_id", "category", name="uq_budget_trip_category"),)

    allocation_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trip_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("trip.trip_id", ondelete="CASCADE"), nullable=False
    )
    category: Mapped[BudgetCategory] = mapped_column(
        _enum(BudgetCategory, "budget_category"), nullable=False
    )
    allocated_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    spent_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    trip: Mapped["Trip"] = relationship("Trip", back_populates="budgets")


class SharedTrip(Base):
    """Shared trip table - public or user-targeted share links."""

    __tablename__ = "shared_trip"
    __table_args__ = (Index("idx_share_trip", "trip_id"),)

    share_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trip_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("trip.trip_id", ondelete="CASCADE"), nullable=False
    )
    shared_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("user.user_id"), nullable=False
    )
    shared_with_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("user.user_id"), nullable=True
    )
    public_slug: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    permission: Mapped[SharePermission] = mapped_column(
        _enum(SharePermission, "share_permission"),
        nullable=False,
        default=SharePermission.VIEW_ONLY,
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    trip: Mapped["Trip"] = relationship("Trip", back_populates="shares")
    shared_by: Mapped["User"] = relationship("User", foreign_keys=[shared_by_id])
    shared_with: Mapped["User | None"] = relationship("User", foreign_keys=[shared_with_id])


class SavedCity(Base):
    """Saved city table - a user's bookmarked catalog cities."""

    __tablename__ = "saved_city"
    __table_args__ = (Index("idx_saved_city_user_saved", "user_id", "saved_at"),)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("user.user_id", ondelete="CASCADE"), primary_key=True
    )
    city_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("city.city_id", ondelete="CASCADE"), primary_key=True
    )
    saved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
