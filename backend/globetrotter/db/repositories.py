"""Repository protocol interfaces for data access."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Protocol
from uuid import UUID

from backend.globetrotter.db.context import RequestContext
from backend.globetrotter.models.budget import ScheduledActivityCost
from backend.globetrotter.models.catalog import Activity, City, CityDetail
from backend.globetrotter.models.common import (
    ActivityCategory,
    BudgetCategory,
    SharePermission,
    TripStatus,
)
from backend.globetrotter.models.sharing import SharedTripRecord, UserProfile
from backend.globetrotter.models.trip import (
    BudgetAllocation,
    ItineraryDay,
    ScheduledActivity,
    TripAggregate,
    TripSummary,
)
from backend.globetrotter.models.user import UserAccount


@dataclass
class TripDraft:
    """Fields of a trip about to be created."""

    name: str
    start_date: date
    end_date: date
    description: str | None = None
    total_budget: Decimal | None = None
    cover_photo_url: str | None = None


@dataclass
class ScheduledActivityDraft:
    """Fields of an activity about to be scheduled on a day."""

    activity_id: UUID
    start_time: time
    end_time: time
    custom_notes: str | None = None
    custom_cost: Decimal | None = None


@dataclass
class Page:
    """Offset/limit window for listings."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class CityFilters:
    """Search filters for the city catalog."""

    search: str | None = None
    country: str | None = None
    continent: str | None = None
    min_cost: Decimal | None = None
    max_cost: Decimal | None = None
    sort_by: str = "name"


@dataclass
class ActivityFilters:
    """Search filters for the activity catalog."""

    city_id: UUID | None = None
    category: ActivityCategory | None = None
    min_cost: Decimal | None = None
    max_cost: Decimal | None = None
    min_rating: float | None = None


class TripRepository(Protocol):
    """Repository for trip aggregates, scoped to their owner."""

    async def list_trips(
        self, ctx: RequestContext, page: Page, status: TripStatus | None = None
    ) -> tuple[list[TripSummary], int]:
        """List the caller's trips, most recently updated first.

        Returns:
            Tuple of (trips on this page, total matching trips)
        """
        ...

    async def create_trip(self, ctx: RequestContext, draft: TripDraft) -> TripAggregate:
        """Create an empty DRAFT trip owned by the caller."""
        ...

    async def get_trip(self, trip_id: UUID, ctx: RequestContext) -> TripAggregate | None:
        """Load a fully populated trip.

        Args:
            trip_id: Trip ID
            ctx: Request context (enforces ownership)

        Returns:
            Trip aggregate or None if not found or not owned
        """
        ...

    async def owns_trip(self, trip_id: UUID, ctx: RequestContext) -> bool:
        """Whether the trip exists and belongs to the caller."""
        ...

    async def get_trip_unscoped(self, trip_id: UUID) -> TripAggregate | None:
        """Load a trip regardless of owner; callers must check permission first."""
        ...

    async def update_trip(
        self, trip_id: UUID, ctx: RequestContext, changes: dict[str, Any]
    ) -> TripAggregate | None:
        """Apply a partial update to an owned trip."""
        ...

    async def delete_trip(self, trip_id: UUID, ctx: RequestContext) -> bool:
        """Delete an owned trip and all of its children.

        Returns:
            True if a trip was deleted
        """
        ...

    async def save_aggregate(self, aggregate: TripAggregate) -> TripAggregate:
        """Persist a new trip with all of its children in a single transaction."""
        ...

    async def list_activity_costs(self, trip_id: UUID) -> list[ScheduledActivityCost]:
        """Cost inputs of every scheduled activity on the trip's days."""
        ...


class BudgetRepository(Protocol):
    """Repository for per-category budget allocations."""

    async def list_allocations(self, trip_id: UUID) -> list[BudgetAllocation]:
        """List a trip's allocations in creation order."""
        ...

    async def upsert_allocations(
        self, trip_id: UUID, amounts: Sequence[tuple[BudgetCategory, Decimal]]
    ) -> list[BudgetAllocation]:
        """Set allocated amounts, creating missing categories with zero spend.

        Returns:
            Every allocation of the trip after the update
        """
        ...

    async def update_allocation(
        self,
        trip_id: UUID,
        category: BudgetCategory,
        *,
        allocated_amount: Decimal | None = None,
        spent_amount: Decimal | None = None,
    ) -> BudgetAllocation | None:
        """Patch one category's amounts.

        Returns:
            Updated allocation or None if the category has no allocation
        """
        ...


class ItineraryRepository(Protocol):
    """Repository for itinerary days and their scheduled activities."""

    async def list_days(self, trip_id: UUID) -> list[ItineraryDay]:
        """List days ordered by day number, activities by order index."""
        ...

    async def day_number_taken(self, trip_id: UUID, day_number: int) -> bool:
        """Whether the trip already has a day with this number."""
        ...

    async def add_day(
        self, trip_id: UUID, city_id: UUID, day_number: int, day_date: date, notes: str | None
    ) -> ItineraryDay:
        """Append a day after the current last order index."""
        ...

    async def update_day(
        self, trip_id: UUID, day_id: UUID, changes: dict[str, Any]
    ) -> ItineraryDay | None:
        """Patch a day belonging to the trip."""
        ...

    async def delete_day(self, trip_id: UUID, day_id: UUID) -> bool:
        """Delete a day and its scheduled activities."""
        ...

    async def add_activity(
        self, trip_id: UUID, day_id: UUID, draft: ScheduledActivityDraft
    ) -> ScheduledActivity | None:
        """Schedule an activity at the end of a day.

        Returns:
            New scheduled activity or None if the day is not in the trip
        """
        ...

    async def update_activity(
        self, trip_id: UUID, scheduled_id: UUID, changes: dict[str, Any]
    ) -> ScheduledActivity | None:
        """Patch a scheduled activity belonging to the trip."""
        ...

    async def delete_activity(self, trip_id: UUID, scheduled_id: UUID) -> bool:
        """Remove a scheduled activity."""
        ...

    async def reorder(
        self,
        trip_id: UUID,
        days: Sequence[tuple[UUID, int]],
        activities: Sequence[tuple[UUID, int]],
    ) -> None:
        """Set order indexes; ids outside the trip are ignored."""
        ...


class ShareRepository(Protocol):
    """Repository for trip share links."""

    async def create_share(
        self,
        trip_id: UUID,
        ctx: RequestContext,
        *,
        public_slug: str,
        permission: SharePermission,
        shared_with_id: UUID | None,
        expires_at: datetime | None,
    ) -> SharedTripRecord:
        """Create a share link for a trip owned by the caller."""
        ...

    async def get_by_slug(self, public_slug: str) -> SharedTripRecord | None:
        """Resolve a share link by its public slug."""
        ...

    async def list_shares(self, trip_id: UUID) -> list[SharedTripRecord]:
        """List every share of a trip."""
        ...

    async def delete_share(self, trip_id: UUID, share_id: UUID) -> bool:
        """Revoke a share of the given trip."""
        ...


class UserRepository(Protocol):
    """Access to user accounts and their saved cities."""

    async def get_user(self, user_id: UUID) -> UserProfile | None:
        """Get a user's public profile."""
        ...

    async def find_by_email(self, email: str) -> UserProfile | None:
        """Look up a user by email address."""
        ...

    async def get_account(self, user_id: UUID) -> UserAccount | None:
        """Get the full account with trip and saved-city counts."""
        ...

    async def update_profile(self, user_id: UUID, changes: dict[str, Any]) -> UserAccount | None:
        """Apply a partial profile update."""
        ...

    async def delete_user(self, user_id: UUID) -> bool:
        """Delete the account together with its trips, shares and saved cities."""
        ...

    async def list_saved_cities(self, user_id: UUID) -> list[City]:
        """Saved cities, most recently saved first."""
        ...

    async def save_city(self, user_id: UUID, city_id: UUID) -> City | None:
        """Save a catalog city; None if it was already saved."""
        ...

    async def remove_saved_city(self, user_id: UUID, city_id: UUID) -> bool:
        """Remove a saved city; False if it was not saved."""
        ...


class CatalogRepository(Protocol):
    """Read-only access to cities and activities."""

    async def search_cities(self, filters: CityFilters, page: Page) -> tuple[list[City], int]:
        """Search cities with pagination."""
        ...

    async def popular_cities(self, limit: int) -> list[City]:
        """Most popular cities first."""
        ...

    async def get_city(self, city_id: UUID, activity_limit: int) -> CityDetail | None:
        """Get a city with its top-rated activities."""
        ...

    async def search_activities(
        self, filters: ActivityFilters, page: Page | None = None
    ) -> tuple[list[Activity], int]:
        """Search activities by rating, highest first; page None returns all."""
        ...

    async def get_activity(self, activity_id: UUID) -> Activity | None:
        """Get a single activity."""
        ...

    async def city_exists(self, city_id: UUID) -> bool:
        """Whether the city is in the catalog."""
        ...


@dataclass
class RetryAfter:
    """Rate limit retry-after information."""

    seconds: int


class RateLimiter(Protocol):
    """Rate limiter interface."""

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed
        """
        ...
