"""Catalog models - cities and the activities offered in them."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from backend.globetrotter.models.common import ActivityCategory


class Activity(BaseModel):
    """Bookable activity in a city."""

    activity_id: UUID
    city_id: UUID
    name: str
    description: str | None = None
    category: ActivityCategory
    estimated_cost: Decimal
    duration_minutes: int
    rating: float = Field(..., ge=0, le=5)
    image_url: str | None = None


class City(BaseModel):
    """Destination city."""

    city_id: UUID
    name: str
    country: str
    continent: str
    image_url: str | None = None
    avg_daily_cost: Decimal
    currency: str = "USD"
    popularity_score: int = 0
    latitude: float | None = None
    longitude: float | None = None
    activity_count: int = 0


class CityDetail(City):
    """City with its top-rated activities."""

    activities: list[Activity] = Field(default_factory=list)
