"""Trip duplication - deep copy of a trip aggregate under a new identity."""

import uuid
from collections.abc import Callable
from decimal import Decimal
from uuid import UUID

from backend.globetrotter.models.common import TripStatus
from backend.globetrotter.models.trip import (
    BudgetAllocation,
    ItineraryDay,
    ScheduledActivity,
    TripAggregate,
)

COPY_SUFFIX = " (Copy)"


def duplicate_trip(
    source: TripAggregate,
    new_owner_id: UUID,
    *,
    id_factory: Callable[[], UUID] = uuid.uuid4,
) -> TripAggregate:
    """Build an independent copy of a trip owned by new_owner_id.

    This is a pure function with no I/O or side effects.
    The source aggregate is never mutated.

    Args:
        source: Fully loaded trip (days with activities, budget rows)
        new_owner_id: Owner of the copy, same as or different from the source owner
        id_factory: Identity generator for every new row

    Returns:
        New TripAggregate with fresh ids on every row

    Copy rules:
        - Name gets COPY_SUFFIX, status is reset to DRAFT
        - Days and scheduled activities keep day_number, order_index and
          every scalar field; foreign keys point at the new parents
        - Budget rows keep category and allocated_amount; spent_amount is 0
        - created_at/updated_at are left for storage to assign
    """
    trip_id = id_factory()

    days: list[ItineraryDay] = []
    for day in source.days:
        day_id = id_factory()
        activities = [
            ScheduledActivity(
                scheduled_id=id_factory(),
                day_id=day_id,
                activity_id=act.activity_id,
                start_time=act.start_time,
                end_time=act.end_time,
                custom_notes=act.custom_notes,
                custom_cost=act.custom_cost,
                order_index=act.order_index,
            )
            for act in day.activities
        ]
        days.append(
            ItineraryDay(
                day_id=day_id,
                trip_id=trip_id,
                city_id=day.city_id,
                day_number=day.day_number,
                date=day.date,
                notes=day.notes,
                order_index=day.order_index,
                activities=activities,
            )
        )

    budgets = [
        BudgetAllocation(
            allocation_id=id_factory(),
            trip_id=trip_id,
            category=b.category,
            allocated_amount=b.allocated_amount,
            spent_amount=Decimal("0"),
        )
        for b in source.budgets
    ]

    return TripAggregate(
        trip_id=trip_id,
        user_id=new_owner_id,
        name=f"{source.name}{COPY_SUFFIX}",
        description=source.description,
        start_date=source.start_date,
        end_date=source.end_date,
        total_budget=source.total_budget,
        cover_photo_url=source.cover_photo_url,
        status=TripStatus.DRAFT,
        days=days,
        budgets=budgets,
    )
