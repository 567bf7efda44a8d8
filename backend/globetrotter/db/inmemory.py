"""In-memory implementations of repository interfaces."""

import uuid
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from backend.globetrotter.db.context import RequestContext
from backend.globetrotter.db.repositories import Page, RetryAfter, TripDraft
from backend.globetrotter.models.budget import ScheduledActivityCost
from backend.globetrotter.models.common import BudgetCategory, TripStatus
from backend.globetrotter.models.trip import BudgetAllocation, TripAggregate, TripSummary


class InMemoryStore:
    """Trips shared by the in-memory repositories.

    Budget rows live on their trip aggregate, as they do in the database
    through the trip_budget foreign key.
    """

    def __init__(self) -> None:
        self.trips: dict[uuid.UUID, TripAggregate] = {}


class InMemoryTripRepository:
    """In-memory implementation of TripRepository.

    Activity costs are keyed by catalog activity_id, standing in for the
    catalog join the SQL repository performs.
    """

    def __init__(
        self,
        store: InMemoryStore | None = None,
        activity_costs: dict[uuid.UUID, Decimal] | None = None,
    ) -> None:
        self._trips = (store or InMemoryStore()).trips
        self._activity_costs = activity_costs or {}

    def _owned(self, trip_id: uuid.UUID, ctx: RequestContext) -> TripAggregate | None:
        trip = self._trips.get(trip_id)

        # Enforce ownership
        if trip is None or trip.user_id != ctx.user_id:
            return None

        return trip

    async def list_trips(
        self, ctx: RequestContext, page: Page, status: TripStatus | None = None
    ) -> tuple[list[TripSummary], int]:
        """List the caller's trips, most recently updated first."""
        trips = [
            t
            for t in self._trips.values()
            if t.user_id == ctx.user_id and (status is None or t.status == status)
        ]
        oldest = datetime.min.replace(tzinfo=timezone.utc)
        trips.sort(key=lambda t: t.updated_at or oldest, reverse=True)

        window = trips[page.offset : page.offset + page.limit]
        summaries = [
            TripSummary(
                trip_id=t.trip_id,
                name=t.name,
                description=t.description,
                start_date=t.start_date,
                end_date=t.end_date,
                total_budget=t.total_budget,
                cover_photo_url=t.cover_photo_url,
                status=t.status,
                day_count=len(t.days),
                city_ids=[d.city_id for d in t.days],
                updated_at=t.updated_at,
            )
            for t in window
        ]
        return summaries, len(trips)

    async def create_trip(self, ctx: RequestContext, draft: TripDraft) -> TripAggregate:
        """Create an empty DRAFT trip owned by the caller."""
        now = datetime.now(timezone.utc)
        trip = TripAggregate(
            trip_id=uuid.uuid4(),
            user_id=ctx.user_id,
            name=draft.name,
            description=draft.description,
            start_date=draft.start_date,
            end_date=draft.end_date,
            total_budget=draft.total_budget,
            cover_photo_url=draft.cover_photo_url,
            created_at=now,
            updated_at=now,
        )
        self._trips[trip.trip_id] = trip
        return trip.model_copy(deep=True)

    async def get_trip(self, trip_id: uuid.UUID, ctx: RequestContext) -> TripAggregate | None:
        """Load a fully populated trip owned by the caller."""
        trip = self._owned(trip_id, ctx)
        return trip.model_copy(deep=True) if trip else None

    async def owns_trip(self, trip_id: uuid.UUID, ctx: RequestContext) -> bool:
        """Whether the trip exists and belongs to the caller."""
        return self._owned(trip_id, ctx) is not None

    async def get_trip_unscoped(self, trip_id: uuid.UUID) -> TripAggregate | None:
        """Load a trip regardless of owner."""
        trip = self._trips.get(trip_id)
        return trip.model_copy(deep=True) if trip else None

    async def update_trip(
        self, trip_id: uuid.UUID, ctx: RequestContext, changes: dict[str, Any]
    ) -> TripAggregate | None:
        """Apply a partial update to an owned trip."""
        trip = self._owned(trip_id, ctx)
        if trip is None:
            return None

        updated = trip.model_copy(update={**changes, "updated_at": datetime.now(timezone.utc)})
        self._trips[trip_id] = updated
        return updated.model_copy(deep=True)

    async def delete_trip(self, trip_id: uuid.UUID, ctx: RequestContext) -> bool:
        """Delete an owned trip."""
        if self._owned(trip_id, ctx) is None:
            return False

        del self._trips[trip_id]
        return True

    async def save_aggregate(self, aggregate: TripAggregate) -> TripAggregate:
        """Store a new trip aggregate."""
        if aggregate.trip_id in self._trips:
            raise ValueError(f"Trip {aggregate.trip_id} already exists")

        now = datetime.now(timezone.utc)
        stored = aggregate.model_copy(deep=True, update={"created_at": now, "updated_at": now})
        self._trips[stored.trip_id] = stored
        return stored.model_copy(deep=True)

    async def list_activity_costs(self, trip_id: uuid.UUID) -> list[ScheduledActivityCost]:
        """Cost inputs of every scheduled activity on the trip's days."""
        trip = self._trips.get(trip_id)
        if trip is None:
            return []

        return [
            ScheduledActivityCost(
                custom_cost=act.custom_cost,
                estimated_cost=self._activity_costs.get(act.activity_id, Decimal("0")),
            )
            for day in trip.days
            for act in day.activities
        ]


class InMemoryBudgetRepository:
    """In-memory implementation of BudgetRepository over the shared trip store."""

    def __init__(self, store: InMemoryStore) -> None:
        self._trips = store.trips

    def _save_rows(self, trip_id: uuid.UUID, rows: list[BudgetAllocation]) -> None:
        trip = self._trips[trip_id]
        self._trips[trip_id] = trip.model_copy(update={"budgets": rows})

    async def list_allocations(self, trip_id: uuid.UUID) -> list[BudgetAllocation]:
        """List a trip's allocations in creation order."""
        trip = self._trips.get(trip_id)
        if trip is None:
            return []
        return [row.model_copy() for row in trip.budgets]

    async def upsert_allocations(
        self, trip_id: uuid.UUID, amounts: Sequence[tuple[BudgetCategory, Decimal]]
    ) -> list[BudgetAllocation]:
        """Set allocated amounts, creating missing categories with zero spend."""
        if trip_id not in self._trips:
            return []

        rows = await self.list_allocations(trip_id)
        by_category = {row.category: i for i, row in enumerate(rows)}

        for category, amount in amounts:
            if category in by_category:
                i = by_category[category]
                rows[i] = rows[i].model_copy(update={"allocated_amount": amount})
            else:
                rows.append(
                    BudgetAllocation(
                        allocation_id=uuid.uuid4(),
                        trip_id=trip_id,
                        category=category,
                        allocated_amount=amount,
                    )
                )
                by_category[category] = len(rows) - 1

        self._save_rows(trip_id, rows)
        return await self.list_allocations(trip_id)

    async def update_allocation(
        self,
        trip_id: uuid.UUID,
        category: BudgetCategory,
        *,
        allocated_amount: Decimal | None = None,
        spent_amount: Decimal | None = None,
    ) -> BudgetAllocation | None:
        """Patch one category's amounts."""
        rows = await self.list_allocations(trip_id)
        for i, row in enumerate(rows):
            if row.category != category:
                continue

            changes: dict[str, Decimal] = {}
            if allocated_amount is not None:
                changes["allocated_amount"] = allocated_amount
            if spent_amount is not None:
                changes["spent_amount"] = spent_amount

            rows[i] = row.model_copy(update=changes)
            self._save_rows(trip_id, rows)
            return rows[i].model_copy()

        return None


class InMemoryRateLimiter:
    """In-memory implementation of RateLimiter using fixed window."""

    def __init__(self, max_requests: int, window_seconds: int = 60) -> None:
        """Initialize rate limiter.

        Args:
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default 60)
        """
        self._max_requests = max_requests
        self._window = timedelta(seconds=window_seconds)
        self._windows: dict[str, tuple[datetime, int]] = {}

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available."""
        current = self._windows.get(key)

        # First request, or the previous window has elapsed
        if current is None or now >= current[0] + self._window:
            self._windows[key] = (now, 1)
            return None

        window_start, count = current
        if count >= self._max_requests:
            seconds_remaining = int((window_start + self._window - now).total_seconds())
            return RetryAfter(seconds=max(1, seconds_remaining))

        self._windows[key] = (window_start, count + 1)
        return None
