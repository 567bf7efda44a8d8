"""SQL implementations of repository interfaces."""

import uuid
from collections.abc import Sequence
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.globetrotter.db.context import RequestContext
from backend.globetrotter.db.models import Activity as ActivityDB
from backend.globetrotter.db.models import City as CityDB
from backend.globetrotter.db.models import ItineraryDay as ItineraryDayDB
from backend.globetrotter.db.models import SavedCity as SavedCityDB
from backend.globetrotter.db.models import ScheduledActivity as ScheduledActivityDB
from backend.globetrotter.db.models import SharedTrip as SharedTripDB
from backend.globetrotter.db.models import Trip as TripDB
from backend.globetrotter.db.models import TripBudget as TripBudgetDB
from backend.globetrotter.db.models import User as UserDB
from backend.globetrotter.db.queries import (
    TRIP_AGGREGATE_OPTIONS,
    query_owned_trips,
    query_trip_aggregate,
    query_trip_days,
)
from backend.globetrotter.db.repositories import (
    ActivityFilters,
    CityFilters,
    Page,
    ScheduledActivityDraft,
    TripDraft,
)
from backend.globetrotter.models.budget import ScheduledActivityCost
from backend.globetrotter.models.catalog import Activity, City, CityDetail
from backend.globetrotter.models.common import BudgetCategory, SharePermission, TripStatus
from backend.globetrotter.models.sharing import SharedTripRecord, UserProfile
from backend.globetrotter.models.trip import (
    BudgetAllocation,
    ItineraryDay,
    ScheduledActivity,
    TripAggregate,
    TripSummary,
)
from backend.globetrotter.models.user import UserAccount


def _aware(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_scheduled(row: ScheduledActivityDB) -> ScheduledActivity:
    return ScheduledActivity(
        scheduled_id=row.scheduled_id,
        day_id=row.day_id,
        activity_id=row.activity_id,
        start_time=row.start_time,
        end_time=row.end_time,
        custom_notes=row.custom_notes,
        custom_cost=row.custom_cost,
        order_index=row.order_index,
    )


def _to_day(row: ItineraryDayDB) -> ItineraryDay:
    return ItineraryDay(
        day_id=row.day_id,
        trip_id=row.trip_id,
        city_id=row.city_id,
        day_number=row.day_number,
        date=row.date,
        notes=row.notes,
        order_index=row.order_index,
        activities=[_to_scheduled(a) for a in row.activities],
    )


def _to_allocation(row: TripBudgetDB) -> BudgetAllocation:
    return BudgetAllocation(
        allocation_id=row.allocation_id,
        trip_id=row.trip_id,
        category=row.category,
        allocated_amount=row.allocated_amount,
        spent_amount=row.spent_amount,
    )


def _to_aggregate(row: TripDB) -> TripAggregate:
    return TripAggregate(
        trip_id=row.trip_id,
        user_id=row.user_id,
        name=row.name,
        description=row.description,
        start_date=row.start_date,
        end_date=row.end_date,
        total_budget=row.total_budget,
        cover_photo_url=row.cover_photo_url,
        status=row.status,
        days=[_to_day(d) for d in row.days],
        budgets=[_to_allocation(b) for b in row.budgets],
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _to_share(row: SharedTripDB) -> SharedTripRecord:
    return SharedTripRecord(
        share_id=row.share_id,
        trip_id=row.trip_id,
        shared_by_id=row.shared_by_id,
        shared_with_id=row.shared_with_id,
        public_slug=row.public_slug,
        permission=row.permission,
        expires_at=_aware(row.expires_at),
        created_at=_aware(row.created_at),
    )


def _to_activity(row: ActivityDB) -> Activity:
    return Activity(
        activity_id=row.activity_id,
        city_id=row.city_id,
        name=row.name,
        description=row.description,
        category=row.category,
        estimated_cost=row.estimated_cost,
        duration_minutes=row.duration_minutes,
        rating=row.rating,
        image_url=row.image_url,
    )


def _to_city(row: CityDB, activity_count: int) -> City:
    return City(
        city_id=row.city_id,
        name=row.name,
        country=row.country,
        continent=row.continent,
        image_url=row.image_url,
        avg_daily_cost=row.avg_daily_cost,
        currency=row.currency,
        popularity_score=row.popularity_score,
        latitude=row.latitude,
        longitude=row.longitude,
        activity_count=activity_count,
    )


def _activity_counts() -> Any:
    """Subquery of activity counts per city."""
    return (
        select(ActivityDB.city_id, func.count(ActivityDB.activity_id).label("n"))
        .group_by(ActivityDB.city_id)
        .subquery()
    )


class SqlTripRepository:
    """SQL implementation of TripRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _load(self, trip_id: uuid.UUID, ctx: RequestContext | None = None) -> TripDB | None:
        result = await self._session.execute(query_trip_aggregate(trip_id, ctx))
        return result.scalar_one_or_none()

    async def list_trips(
        self, ctx: RequestContext, page: Page, status: TripStatus | None = None
    ) -> tuple[list[TripSummary], int]:
        """List the caller's trips, most recently updated first."""
        stmt = query_owned_trips(ctx)
        if status is not None:
            stmt = stmt.where(TripDB.status == status)

        total = await self._session.scalar(select(func.count()).select_from(stmt.subquery()))

        result = await self._session.execute(
            stmt.options(selectinload(TripDB.days))
            .order_by(TripDB.updated_at.desc())
            .offset(page.offset)
            .limit(page.limit)
        )

        summaries = [
            TripSummary(
                trip_id=trip.trip_id,
                name=trip.name,
                description=trip.description,
                start_date=trip.start_date,
                end_date=trip.end_date,
                total_budget=trip.total_budget,
                cover_photo_url=trip.cover_photo_url,
                status=trip.status,
                day_count=len(trip.days),
                city_ids=[d.city_id for d in trip.days],
                updated_at=_aware(trip.updated_at),
            )
            for trip in result.scalars().all()
        ]
        return summaries, total or 0

    async def create_trip(self, ctx: RequestContext, draft: TripDraft) -> TripAggregate:
        """Create an empty DRAFT trip owned by the caller."""
        trip = TripDB(
            trip_id=uuid.uuid4(),
            user_id=ctx.user_id,
            name=draft.name,
            description=draft.description,
            start_date=draft.start_date,
            end_date=draft.end_date,
            total_budget=draft.total_budget,
            cover_photo_url=draft.cover_photo_url,
            status=TripStatus.DRAFT,
        )
        self._session.add(trip)
        await self._session.commit()

        loaded = await self._load(trip.trip_id)
        if loaded is None:
            raise RuntimeError(f"Trip {trip.trip_id} missing after commit")
        return _to_aggregate(loaded)

    async def get_trip(self, trip_id: uuid.UUID, ctx: RequestContext) -> TripAggregate | None:
        """Load a fully populated trip owned by the caller."""
        trip = await self._load(trip_id, ctx)
        return _to_aggregate(trip) if trip else None

    async def owns_trip(self, trip_id: uuid.UUID, ctx: RequestContext) -> bool:
        """Whether the trip exists and belongs to the caller."""
        count = await self._session.scalar(
            select(func.count())
            .select_from(TripDB)
            .where(TripDB.trip_id == trip_id, TripDB.user_id == ctx.user_id)
        )
        return bool(count)

    async def get_trip_unscoped(self, trip_id: uuid.UUID) -> TripAggregate | None:
        """Load a trip regardless of owner."""
        trip = await self._load(trip_id)
        return _to_aggregate(trip) if trip else None

    async def update_trip(
        self, trip_id: uuid.UUID, ctx: RequestContext, changes: dict[str, Any]
    ) -> TripAggregate | None:
        """Apply a partial update to an owned trip."""
        trip = await self._load(trip_id, ctx)
        if trip is None:
            return None

        for field, value in changes.items():
            setattr(trip, field, value)

        await self._session.commit()

        reloaded = await self._load(trip_id, ctx)
        return _to_aggregate(reloaded) if reloaded else None

    async def delete_trip(self, trip_id: uuid.UUID, ctx: RequestContext) -> bool:
        """Delete an owned trip; children cascade through the loaded relationships."""
        result = await self._session.execute(
            query_trip_aggregate(trip_id, ctx).options(selectinload(TripDB.shares))
        )
        trip = result.scalar_one_or_none()
        if trip is None:
            return False

        await self._session.delete(trip)
        await self._session.commit()
        return True

    async def save_aggregate(self, aggregate: TripAggregate) -> TripAggregate:
        """Persist a new trip with all of its children in a single transaction."""
        trip = TripDB(
            trip_id=aggregate.trip_id,
            user_id=aggregate.user_id,
            name=aggregate.name,
            description=aggregate.description,
            start_date=aggregate.start_date,
            end_date=aggregate.end_date,
            total_budget=aggregate.total_budget,
            cover_photo_url=aggregate.cover_photo_url,
            status=aggregate.status,
            days=[
                ItineraryDayDB(
                    day_id=day.day_id,
                    city_id=day.city_id,
                    day_number=day.day_number,
                    date=day.date,
                    notes=day.notes,
                    order_index=day.order_index,
                    activities=[
                        ScheduledActivityDB(
                            scheduled_id=act.scheduled_id,
                            activity_id=act.activity_id,
                            start_time=act.start_time,
                            end_time=act.end_time,
                            custom_notes=act.custom_notes,
                            custom_cost=act.custom_cost,
                            order_index=act.order_index,
                        )
                        for act in day.activities
                    ],
                )
                for day in aggregate.days
            ],
            budgets=[
                TripBudgetDB(
                    allocation_id=b.allocation_id,
                    category=b.category,
                    allocated_amount=b.allocated_amount,
                    spent_amount=b.spent_amount,
                )
                for b in aggregate.budgets
            ],
        )

        self._session.add(trip)
        try:
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

        loaded = await self._load(aggregate.trip_id)
        if loaded is None:
            raise RuntimeError(f"Trip {aggregate.trip_id} missing after commit")
        return _to_aggregate(loaded)

    async def list_activity_costs(self, trip_id: uuid.UUID) -> list[ScheduledActivityCost]:
        """Cost inputs of every scheduled activity on the trip's days."""
        result = await self._session.execute(
            select(ScheduledActivityDB.custom_cost, ActivityDB.estimated_cost)
            .join(ActivityDB, ActivityDB.activity_id == ScheduledActivityDB.activity_id)
            .join(ItineraryDayDB, ItineraryDayDB.day_id == ScheduledActivityDB.day_id)
            .where(ItineraryDayDB.trip_id == trip_id)
        )
        return [
            ScheduledActivityCost(custom_cost=custom, estimated_cost=estimated)
            for custom, estimated in result.all()
        ]


class SqlBudgetRepository:
    """SQL implementation of BudgetRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_allocations(self, trip_id: uuid.UUID) -> list[BudgetAllocation]:
        """List a trip's allocations in creation order, ties broken by category."""
        result = await self._session.execute(
            select(TripBudgetDB)
            .where(TripBudgetDB.trip_id == trip_id)
            .order_by(TripBudgetDB.created_at, TripBudgetDB.category)
            .execution_options(populate_existing=True)
        )
        return [_to_allocation(row) for row in result.scalars().all()]

    async def upsert_allocations(
        self, trip_id: uuid.UUID, amounts: Sequence[tuple[BudgetCategory, Decimal]]
    ) -> list[BudgetAllocation]:
        """Set allocated amounts, creating missing categories with zero spend."""
        categories = [category for category, _ in amounts]

        # Lock existing rows so a concurrent category patch cannot interleave
        result = await self._session.execute(
            select(TripBudgetDB)
            .where(TripBudgetDB.trip_id == trip_id, TripBudgetDB.category.in_(categories))
            .with_for_update()
        )
        existing = {row.category: row for row in result.scalars().all()}

        for category, amount in amounts:
            row = existing.get(category)
            if row is not None:
                row.allocated_amount = amount
            else:
                self._session.add(
                    TripBudgetDB(
                        allocation_id=uuid.uuid4(),
                        trip_id=trip_id,
                        category=category,
                        allocated_amount=amount,
                        spent_amount=Decimal("0"),
                    )
                )

        await self._session.commit()
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
        result = await self._session.execute(
            select(TripBudgetDB)
            .where(TripBudgetDB.trip_id == trip_id, TripBudgetDB.category == category)
            .with_for_update()
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None

        if allocated_amount is not None:
            row.allocated_amount = allocated_amount
        if spent_amount is not None:
            row.spent_amount = spent_amount

        await self._session.commit()
        return _to_allocation(row)


class SqlItineraryRepository:
    """SQL implementation of ItineraryRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_day(self, trip_id: uuid.UUID, day_id: uuid.UUID) -> ItineraryDayDB | None:
        result = await self._session.execute(
            query_trip_days(trip_id).where(ItineraryDayDB.day_id == day_id)
        )
        return result.scalar_one_or_none()

    async def _get_scheduled(
        self, trip_id: uuid.UUID, scheduled_id: uuid.UUID
    ) -> ScheduledActivityDB | None:
        result = await self._session.execute(
            select(ScheduledActivityDB)
            .join(ItineraryDayDB, ItineraryDayDB.day_id == ScheduledActivityDB.day_id)
            .where(
                ScheduledActivityDB.scheduled_id == scheduled_id,
                ItineraryDayDB.trip_id == trip_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_days(self, trip_id: uuid.UUID) -> list[ItineraryDay]:
        """List days ordered by day number, activities by order index."""
        result = await self._session.execute(query_trip_days(trip_id))
        return [_to_day(row) for row in result.scalars().all()]

    async def day_number_taken(self, trip_id: uuid.UUID, day_number: int) -> bool:
        """Whether the trip already has a day with this number."""
        count = await self._session.scalar(
            select(func.count())
            .select_from(ItineraryDayDB)
            .where(ItineraryDayDB.trip_id == trip_id, ItineraryDayDB.day_number == day_number)
        )
        return bool(count)

    async def add_day(
        self,
        trip_id: uuid.UUID,
        city_id: uuid.UUID,
        day_number: int,
        day_date: date,
        notes: str | None,
    ) -> ItineraryDay:
        """Append a day after the current last order index.

        Raises:
            sqlalchemy.exc.IntegrityError: If the day number was taken concurrently
        """
        max_order = await self._session.scalar(
            select(func.max(ItineraryDayDB.order_index)).where(ItineraryDayDB.trip_id == trip_id)
        )

        day = ItineraryDayDB(
            day_id=uuid.uuid4(),
            trip_id=trip_id,
            city_id=city_id,
            day_number=day_number,
            date=day_date,
            notes=notes,
            order_index=(max_order if max_order is not None else -1) + 1,
        )
        self._session.add(day)
        try:
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

        loaded = await self._get_day(trip_id, day.day_id)
        if loaded is None:
            raise RuntimeError(f"Day {day.day_id} missing after commit")
        return _to_day(loaded)

    async def update_day(
        self, trip_id: uuid.UUID, day_id: uuid.UUID, changes: dict[str, Any]
    ) -> ItineraryDay | None:
        """Patch a day belonging to the trip."""
        day = await self._get_day(trip_id, day_id)
        if day is None:
            return None

        for field, value in changes.items():
            setattr(day, field, value)
        await self._session.commit()

        reloaded = await self._get_day(trip_id, day_id)
        return _to_day(reloaded) if reloaded else None

    async def delete_day(self, trip_id: uuid.UUID, day_id: uuid.UUID) -> bool:
        """Delete a day and its scheduled activities."""
        day = await self._get_day(trip_id, day_id)
        if day is None:
            return False

        await self._session.delete(day)
        await self._session.commit()
        return True

    async def add_activity(
        self, trip_id: uuid.UUID, day_id: uuid.UUID, draft: ScheduledActivityDraft
    ) -> ScheduledActivity | None:
        """Schedule an activity at the end of a day."""
        day_exists = await self._session.scalar(
            select(func.count())
            .select_from(ItineraryDayDB)
            .where(ItineraryDayDB.day_id == day_id, ItineraryDayDB.trip_id == trip_id)
        )
        if not day_exists:
            return None

        max_order = await self._session.scalar(
            select(func.max(ScheduledActivityDB.order_index)).where(
                ScheduledActivityDB.day_id == day_id
            )
        )

        scheduled = ScheduledActivityDB(
            scheduled_id=uuid.uuid4(),
            day_id=day_id,
            activity_id=draft.activity_id,
            start_time=draft.start_time,
            end_time=draft.end_time,
            custom_notes=draft.custom_notes,
            custom_cost=draft.custom_cost,
            order_index=(max_order if max_order is not None else -1) + 1,
        )
        self._session.add(scheduled)
        await self._session.commit()
        return _to_scheduled(scheduled)

    async def update_activity(
        self, trip_id: uuid.UUID, scheduled_id: uuid.UUID, changes: dict[str, Any]
    ) -> ScheduledActivity | None:
        """Patch a scheduled activity belonging to the trip."""
        scheduled = await self._get_scheduled(trip_id, scheduled_id)
        if scheduled is None:
            return None

        for field, value in changes.items():
            setattr(scheduled, field, value)
        await self._session.commit()
        return _to_scheduled(scheduled)

    async def delete_activity(self, trip_id: uuid.UUID, scheduled_id: uuid.UUID) -> bool:
        """Remove a scheduled activity."""
        scheduled = await self._get_scheduled(trip_id, scheduled_id)
        if scheduled is None:
            return False

        await self._session.delete(scheduled)
        await self._session.commit()
        return True

    async def reorder(
        self,
        trip_id: uuid.UUID,
        days: Sequence[tuple[uuid.UUID, int]],
        activities: Sequence[tuple[uuid.UUID, int]],
    ) -> None:
        """Set order indexes; ids outside the trip are ignored."""
        for day_id, order_index in days:
            await self._session.execute(
                update(ItineraryDayDB)
                .where(ItineraryDayDB.day_id == day_id, ItineraryDayDB.trip_id == trip_id)
                .values(order_index=order_index)
            )

        trip_day_ids = select(ItineraryDayDB.day_id).where(ItineraryDayDB.trip_id == trip_id)
        for scheduled_id, order_index in activities:
            await self._session.execute(
                update(ScheduledActivityDB)
                .where(
                    ScheduledActivityDB.scheduled_id == scheduled_id,
                    ScheduledActivityDB.day_id.in_(trip_day_ids),
                )
                .values(order_index=order_index)
            )

        await self._session.commit()


class SqlShareRepository:
    """SQL implementation of ShareRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_share(
        self,
        trip_id: uuid.UUID,
        ctx: RequestContext,
        *,
        public_slug: str,
        permission: SharePermission,
        shared_with_id: uuid.UUID | None,
        expires_at: datetime | None,
    ) -> SharedTripRecord:
        """Create a share link for a trip owned by the caller."""
        share = SharedTripDB(
            share_id=uuid.uuid4(),
            trip_id=trip_id,
            shared_by_id=ctx.user_id,
            shared_with_id=shared_with_id,
            public_slug=public_slug,
            permission=permission,
            expires_at=expires_at,
        )
        self._session.add(share)
        await self._session.commit()
        return _to_share(share)

    async def get_by_slug(self, public_slug: str) -> SharedTripRecord | None:
        """Resolve a share link by its public slug."""
        result = await self._session.execute(
            select(SharedTripDB).where(SharedTripDB.public_slug == public_slug)
        )
        share = result.scalar_one_or_none()
        return _to_share(share) if share else None

    async def list_shares(self, trip_id: uuid.UUID) -> list[SharedTripRecord]:
        """List every share of a trip."""
        result = await self._session.execute(
            select(SharedTripDB)
            .where(SharedTripDB.trip_id == trip_id)
            .order_by(SharedTripDB.created_at)
        )
        return [_to_share(row) for row in result.scalars().all()]

    async def delete_share(self, trip_id: uuid.UUID, share_id: uuid.UUID) -> bool:
        """Revoke a share of the given trip."""
        result = await self._session.execute(
            select(SharedTripDB).where(
                SharedTripDB.share_id == share_id, SharedTripDB.trip_id == trip_id
            )
        )
        share = result.scalar_one_or_none()
        if share is None:
            return False

        await self._session.delete(share)
        await self._session.commit()
        return True


class SqlUserRepository:
    """SQL implementation of UserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_user(self, user_id: uuid.UUID) -> UserProfile | None:
        """Get a user's public profile."""
        user = await self._session.get(UserDB, user_id)
        return UserProfile(user_id=user.user_id, name=user.name) if user else None

    async def find_by_email(self, email: str) -> UserProfile | None:
        """Look up a user by email address (case-insensitive)."""
        result = await self._session.execute(
            select(UserDB).where(func.lower(UserDB.email) == email.lower())
        )
        user = result.scalar_one_or_none()
        return UserProfile(user_id=user.user_id, name=user.name) if user else None

    async def get_account(self, user_id: uuid.UUID) -> UserAccount | None:
        """Get the full account with trip and saved-city counts."""
        user = await self._session.get(UserDB, user_id, populate_existing=True)
        if user is None:
            return None

        trip_count = await self._session.scalar(
            select(func.count()).select_from(TripDB).where(TripDB.user_id == user_id)
        )
        saved_count = await self._session.scalar(
            select(func.count()).select_from(SavedCityDB).where(SavedCityDB.user_id == user_id)
        )
        return UserAccount(
            user_id=user.user_id,
            email=user.email,
            name=user.name,
            avatar_url=user.avatar_url,
            language=user.language,
            currency=user.currency,
            created_at=_aware(user.created_at),
            updated_at=_aware(user.updated_at),
            trip_count=trip_count or 0,
            saved_city_count=saved_count or 0,
        )

    async def update_profile(
        self, user_id: uuid.UUID, changes: dict[str, Any]
    ) -> UserAccount | None:
        """Apply a partial profile update."""
        user = await self._session.get(UserDB, user_id)
        if user is None:
            return None

        for field, value in changes.items():
            setattr(user, field, value)

        await self._session.commit()
        return await self.get_account(user_id)

    async def delete_user(self, user_id: uuid.UUID) -> bool:
        """Delete the account together with its trips, shares and saved cities."""
        user = await self._session.get(UserDB, user_id)
        if user is None:
            return False

        result = await self._session.execute(
            select(TripDB)
            .where(TripDB.user_id == user_id)
            .options(*TRIP_AGGREGATE_OPTIONS, selectinload(TripDB.shares))
        )
        for trip in result.scalars().all():
            await self._session.delete(trip)
        await self._session.flush()

        # Shares of other users' trips that name this user as recipient
        await self._session.execute(
            delete(SharedTripDB).where(
                or_(SharedTripDB.shared_by_id == user_id, SharedTripDB.shared_with_id == user_id)
            )
        )
        await self._session.execute(delete(SavedCityDB).where(SavedCityDB.user_id == user_id))
        await self._session.execute(delete(UserDB).where(UserDB.user_id == user_id))
        await self._session.commit()
        return True

    async def list_saved_cities(self, user_id: uuid.UUID) -> list[City]:
        """Saved cities, most recently saved first."""
        counts = _activity_counts()
        result = await self._session.execute(
            select(CityDB, func.coalesce(counts.c.n, 0))
            .join(SavedCityDB, SavedCityDB.city_id == CityDB.city_id)
            .outerjoin(counts, counts.c.city_id == CityDB.city_id)
            .where(SavedCityDB.user_id == user_id)
            .order_by(SavedCityDB.saved_at.desc(), CityDB.name)
        )
        return [_to_city(city, count) for city, count in result.all()]

    async def save_city(self, user_id: uuid.UUID, city_id: uuid.UUID) -> City | None:
        """Save a catalog city; None if it was already saved."""
        if await self._session.get(SavedCityDB, (user_id, city_id)) is not None:
            return None

        self._session.add(SavedCityDB(user_id=user_id, city_id=city_id))
        await self._session.commit()

        counts = _activity_counts()
        result = await self._session.execute(
            select(CityDB, func.coalesce(counts.c.n, 0))
            .outerjoin(counts, counts.c.city_id == CityDB.city_id)
            .where(CityDB.city_id == city_id)
        )
        city, count = result.one()
        return _to_city(city, count)

    async def remove_saved_city(self, user_id: uuid.UUID, city_id: uuid.UUID) -> bool:
        """Remove a saved city; False if it was not saved."""
        saved = await self._session.get(SavedCityDB, (user_id, city_id))
        if saved is None:
            return False

        await self._session.delete(saved)
        await self._session.commit()
        return True


class SqlCatalogRepository:
    """SQL implementation of CatalogRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _cities_with_counts(self, stmt: Any) -> list[City]:
        result = await self._session.execute(stmt)
        return [_to_city(city, count) for city, count in result.all()]

    async def search_cities(self, filters: CityFilters, page: Page) -> tuple[list[City], int]:
        """Search cities with pagination."""
        conditions = []
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(or_(CityDB.name.ilike(pattern), CityDB.country.ilike(pattern)))
        if filters.country:
            conditions.append(func.lower(CityDB.country) == filters.country.lower())
        if filters.continent:
            conditions.append(func.lower(CityDB.continent) == filters.continent.lower())
        if filters.min_cost is not None:
            conditions.append(CityDB.avg_daily_cost >= filters.min_cost)
        if filters.max_cost is not None:
            conditions.append(CityDB.avg_daily_cost <= filters.max_cost)

        total = await self._session.scalar(
            select(func.count()).select_from(CityDB).where(*conditions)
        )

        if filters.sort_by == "popularity":
            order = CityDB.popularity_score.desc()
        elif filters.sort_by == "cost":
            order = CityDB.avg_daily_cost.asc()
        else:
            order = CityDB.name.asc()

        counts = _activity_counts()
        cities = await self._cities_with_counts(
            select(CityDB, func.coalesce(counts.c.n, 0))
            .outerjoin(counts, counts.c.city_id == CityDB.city_id)
            .where(*conditions)
            .order_by(order)
            .offset(page.offset)
            .limit(page.limit)
        )
        return cities, total or 0

    async def popular_cities(self, limit: int) -> list[City]:
        """Most popular cities first."""
        counts = _activity_counts()
        return await self._cities_with_counts(
            select(CityDB, func.coalesce(counts.c.n, 0))
            .outerjoin(counts, counts.c.city_id == CityDB.city_id)
            .order_by(CityDB.popularity_score.desc())
            .limit(limit)
        )

    async def get_city(self, city_id: uuid.UUID, activity_limit: int) -> CityDetail | None:
        """Get a city with its top-rated activities."""
        counts = _activity_counts()
        cities = await self._cities_with_counts(
            select(CityDB, func.coalesce(counts.c.n, 0))
            .outerjoin(counts, counts.c.city_id == CityDB.city_id)
            .where(CityDB.city_id == city_id)
        )
        if not cities:
            return None

        activities, _ = await self.search_activities(
            ActivityFilters(city_id=city_id), Page(page=1, limit=activity_limit)
        )
        return CityDetail(**cities[0].model_dump(), activities=activities)

    async def search_activities(
        self, filters: ActivityFilters, page: Page | None = None
    ) -> tuple[list[Activity], int]:
        """Search activities by rating, highest first; page None returns all."""
        conditions = []
        if filters.city_id is not None:
            conditions.append(ActivityDB.city_id == filters.city_id)
        if filters.category is not None:
            conditions.append(ActivityDB.category == filters.category)
        if filters.min_cost is not None:
            conditions.append(ActivityDB.estimated_cost >= filters.min_cost)
        if filters.max_cost is not None:
            conditions.append(ActivityDB.estimated_cost <= filters.max_cost)
        if filters.min_rating is not None:
            conditions.append(ActivityDB.rating >= filters.min_rating)

        total = await self._session.scalar(
            select(func.count()).select_from(ActivityDB).where(*conditions)
        )

        stmt = (
            select(ActivityDB)
            .where(*conditions)
            .order_by(ActivityDB.rating.desc(), ActivityDB.name.asc())
        )
        if page is not None:
            stmt = stmt.offset(page.offset).limit(page.limit)

        result = await self._session.execute(stmt)
        return [_to_activity(row) for row in result.scalars().all()], total or 0

    async def get_activity(self, activity_id: uuid.UUID) -> Activity | None:
        """Get a single activity."""
        activity = await self._session.get(ActivityDB, activity_id)
        return _to_activity(activity) if activity else None

    async def city_exists(self, city_id: uuid.UUID) -> bool:
        """Whether the city is in the catalog."""
        return await self._session.get(CityDB, city_id) is not None
