"""Trip aggregate models - a trip with its itinerary days and budget rows."""

from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from backend.globetrotter.models.common import BudgetCategory, TripStatus


class ScheduledActivity(BaseModel):
    """A catalog activity placed on an itinerary day."""

    scheduled_id: UUID
    day_id: UUID
    activity_id: UUID
    start_time: time
    end_time: time
    custom_notes: str | None = None
    custom_cost: Decimal | None = None
    order_index: int = 0


class ItineraryDay(BaseModel):
    """Single day of a trip, anchored in one city."""

    day_id: UUID
    trip_id: UUID
    city_id: UUID
    day_number: int
    date: date
    notes: str | None = None
    order_index: int = 0
    activities: list[ScheduledActivity] = Field(default_factory=list)


class BudgetAllocation(BaseModel):
    """Per-category budget row of a trip."""

    allocation_id: UUID
    trip_id: UUID
    category: BudgetCategory
    allocated_amount: Decimal
    spent_amount: Decimal = Decimal("0")


class TripAggregate(BaseModel):
    """Trip with its ordered itinerary days and budget allocations."""

    trip_id: UUID
    user_id: UUID
    name: str
    description: str | None = None
    start_date: date
    end_date: date
    total_budget: Decimal | None = None
    cover_photo_url: str | None = None
    status: TripStatus = TripStatus.DRAFT
    days: list[ItineraryDay] = Field(default_factory=list)
    budgets: list[BudgetAllocation] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TripSummary(BaseModel):
    """Trip row for listings, without scheduled activities."""

    trip_id: UUID
    name: str
    description: str | None
    start_date: date
    end_date: date
    total_budget: Decimal | None
    cover_photo_url: str | None
    status: TripStatus
    day_count: int
    city_ids: list[UUID]
    updated_at: datetime | None
