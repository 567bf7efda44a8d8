"""Itinerary endpoints - days and scheduled activities of a trip."""

import datetime as dt
import logging
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError

from backend.globetrotter.api.auth import get_current_context
from backend.globetrotter.api.deps import CatalogDep, ItineraryDep, TripsDep, require_owned_trip
from backend.globetrotter.db.context import RequestContext
from backend.globetrotter.db.repositories import ScheduledActivityDraft
from backend.globetrotter.middleware.ratelimit import enforce_crud_quota
from backend.globetrotter.models.trip import ItineraryDay, ScheduledActivity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips/{trip_id}/itinerary", tags=["itinerary"])


class CreateDayRequest(BaseModel):
    """Request body for POST /days."""

    city_id: UUID
    day_number: int = Field(..., ge=1)
    date: dt.date
    notes: str | None = None


class UpdateDayRequest(BaseModel):
    """Request body for PATCH /days/{day_id}."""

    city_id: UUID | None = None
    date: dt.date | None = None
    notes: str | None = None


class CreateScheduledActivityRequest(BaseModel):
    """Request body for POST /days/{day_id}/activities."""

    activity_id: UUID
    start_time: dt.time = Field(..., description="HH:MM")
    end_time: dt.time = Field(..., description="HH:MM")
    custom_notes: str | None = None
    custom_cost: Decimal | None = Field(None, gt=0, decimal_places=2)


class UpdateScheduledActivityRequest(BaseModel):
    """Request body for PATCH /activities/{scheduled_id}."""

    start_time: dt.time | None = None
    end_time: dt.time | None = None
    custom_notes: str | None = None
    custom_cost: Decimal | None = Field(None, ge=0, decimal_places=2)
    order_index: int | None = Field(None, ge=0)


class OrderEntry(BaseModel):
    """New position of one day or scheduled activity."""

    id: UUID
    order_index: int = Field(..., ge=0)


class ReorderRequest(BaseModel):
    """Request body for PATCH /reorder."""

    days: list[OrderEntry] = Field(default_factory=list)
    activities: list[OrderEntry] = Field(default_factory=list)


def _without_nulls(changes: dict, nullable: set[str]) -> dict:
    return {k: v for k, v in changes.items() if v is not None or k in nullable}


@router.get("", response_model=list[ItineraryDay])
async def get_itinerary(
    trip_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    trips: TripsDep,
    itinerary: ItineraryDep,
) -> list[ItineraryDay]:
    """Get the trip's days ordered by day number, activities by order index."""
    await require_owned_trip(trip_id, ctx, trips)
    return await itinerary.list_days(trip_id)


@router.post("/days", response_model=ItineraryDay, status_code=status.HTTP_201_CREATED)
async def add_day(
    trip_id: UUID,
    request: CreateDayRequest,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
    itinerary: ItineraryDep,
    catalog: CatalogDep,
) -> ItineraryDay:
    """Add a day to the end of the itinerary.

    Raises:
        HTTPException: 404 for an unknown trip or city, 409 if the day number is taken
    """
    await require_owned_trip(trip_id, ctx, trips)

    if not await catalog.city_exists(request.city_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="City not found")

    if await itinerary.day_number_taken(trip_id, request.day_number):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Day {request.day_number} already exists",
        )

    try:
        return await itinerary.add_day(
            trip_id, request.city_id, request.day_number, request.date, request.notes
        )
    except IntegrityError as e:
        # Lost a race against a concurrent insert of the same day number
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Day {request.day_number} already exists",
        ) from e


@router.patch("/days/{day_id}", response_model=ItineraryDay)
async def update_day(
    trip_id: UUID,
    day_id: UUID,
    request: UpdateDayRequest,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
    itinerary: ItineraryDep,
    catalog: CatalogDep,
) -> ItineraryDay:
    """Change a day's city, date or notes."""
    await require_owned_trip(trip_id, ctx, trips)

    changes = _without_nulls(request.model_dump(exclude_unset=True), {"notes"})
    if "city_id" in changes and not await catalog.city_exists(changes["city_id"]):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="City not found")

    day = await itinerary.update_day(trip_id, day_id, changes)
    if day is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Day not found")
    return day


@router.delete("/days/{day_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_day(
    trip_id: UUID,
    day_id: UUID,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
    itinerary: ItineraryDep,
) -> Response:
    """Delete a day and everything scheduled on it."""
    await require_owned_trip(trip_id, ctx, trips)

    if not await itinerary.delete_day(trip_id, day_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Day not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/days/{day_id}/activities",
    response_model=ScheduledActivity,
    status_code=status.HTTP_201_CREATED,
)
async def add_activity(
    trip_id: UUID,
    day_id: UUID,
    request: CreateScheduledActivityRequest,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
    itinerary: ItineraryDep,
    catalog: CatalogDep,
) -> ScheduledActivity:
    """Schedule a catalog activity at the end of a day.

    Raises:
        HTTPException: 404 for an unknown trip, day or activity
    """
    await require_owned_trip(trip_id, ctx, trips)

    if await catalog.get_activity(request.activity_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")

    scheduled = await itinerary.add_activity(
        trip_id,
        day_id,
        ScheduledActivityDraft(
            activity_id=request.activity_id,
            start_time=request.start_time,
            end_time=request.end_time,
            custom_notes=request.custom_notes,
            custom_cost=request.custom_cost,
        ),
    )
    if scheduled is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Day not found")
    return scheduled


@router.patch("/activities/{scheduled_id}", response_model=ScheduledActivity)
async def update_activity(
    trip_id: UUID,
    scheduled_id: UUID,
    request: UpdateScheduledActivityRequest,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
    itinerary: ItineraryDep,
) -> ScheduledActivity:
    """Edit a scheduled activity's times, notes, cost override or position."""
    await require_owned_trip(trip_id, ctx, trips)

    changes = _without_nulls(
        request.model_dump(exclude_unset=True), {"custom_notes", "custom_cost"}
    )
    scheduled = await itinerary.update_activity(trip_id, scheduled_id, changes)
    if scheduled is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Scheduled activity not found"
        )
    return scheduled


@router.delete("/activities/{scheduled_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_activity(
    trip_id: UUID,
    scheduled_id: UUID,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
    itinerary: ItineraryDep,
) -> Response:
    """Remove an activity from the itinerary."""
    await require_owned_trip(trip_id, ctx, trips)

    if not await itinerary.delete_activity(trip_id, scheduled_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Scheduled activity not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/reorder", status_code=status.HTTP_204_NO_CONTENT)
async def reorder(
    trip_id: UUID,
    request: ReorderRequest,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
    itinerary: ItineraryDep,
) -> Response:
    """Bulk-update order indexes of days and scheduled activities."""
    await require_owned_trip(trip_id, ctx, trips)

    await itinerary.reorder(
        trip_id,
        [(entry.id, entry.order_index) for entry in request.days],
        [(entry.id, entry.order_index) for entry in request.activities],
    )
    logger.info(
        "Itinerary reordered",
        extra={
            "structured": {
                "trip_id": str(trip_id),
                "days": len(request.days),
                "activities": len(request.activities),
            }
        },
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
