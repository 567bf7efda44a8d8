"""Ownership-safe query helpers."""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.orm import selectinload

from backend.globetrotter.db.context import RequestContext
from backend.globetrotter.db.models import ItineraryDay, Trip

# Eager-load options for a full trip aggregate (async sessions cannot lazy load)
TRIP_AGGREGATE_OPTIONS = (
    selectinload(Trip.days).selectinload(ItineraryDay.activities),
    selectinload(Trip.budgets),
)


def query_owned_trips(ctx: RequestContext) -> Select[tuple[Trip]]:
    """Select trips with owner scoping enforced.

    Args:
        ctx: Request context with user_id

    Returns:
        Select filtered by user_id
    """
    return select(Trip).where(Trip.user_id == ctx.user_id)


def query_trip_aggregate(trip_id: UUID, ctx: RequestContext | None = None) -> Select[tuple[Trip]]:
    """Select one trip with days, scheduled activities and budgets eagerly loaded.

    Args:
        trip_id: Trip ID
        ctx: Request context; None skips owner scoping

    Returns:
        Select that refreshes already-loaded instances
    """
    stmt = select(Trip) if ctx is None else query_owned_trips(ctx)
    return (
        stmt.where(Trip.trip_id == trip_id)
        .options(*TRIP_AGGREGATE_OPTIONS)
        .execution_options(populate_existing=True)
    )


def query_trip_days(trip_id: UUID) -> Select[tuple[ItineraryDay]]:
    """Select a trip's days with scheduled activities, ordered by day number."""
    return (
        select(ItineraryDay)
        .where(ItineraryDay.trip_id == trip_id)
        .options(selectinload(ItineraryDay.activities))
        .order_by(ItineraryDay.day_number)
        .execution_options(populate_existing=True)
    )
