"""Trip endpoints - CRUD and duplication."""

import logging
from datetime import date
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field, field_validator, model_validator

from backend.globetrotter.api.auth import get_current_context
from backend.globetrotter.api.deps import (
    PlanningDep,
    SettingsDep,
    TripsDep,
    make_page,
    total_pages,
)
from backend.globetrotter.db.context import RequestContext
from backend.globetrotter.db.repositories import TripDraft
from backend.globetrotter.middleware.ratelimit import enforce_crud_quota
from backend.globetrotter.models.common import TripStatus
from backend.globetrotter.models.trip import TripAggregate, TripSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])

# Columns that may be cleared with an explicit null
_NULLABLE_FIELDS = {"description", "total_budget", "cover_photo_url"}


def _check_photo_url(value: str | None) -> str | None:
    if value is not None and not value.startswith(("http://", "https://")):
        raise ValueError("cover_photo_url must be an http(s) URL")
    return value


class CreateTripRequest(BaseModel):
    """Request body for POST /trips."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    start_date: date
    end_date: date
    total_budget: Decimal | None = Field(None, gt=0, decimal_places=2)
    cover_photo_url: str | None = None

    @field_validator("cover_photo_url")
    @classmethod
    def check_photo_url(cls, value: str | None) -> str | None:
        return _check_photo_url(value)

    @model_validator(mode="after")
    def check_date_range(self) -> "CreateTripRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class UpdateTripRequest(BaseModel):
    """Request body for PATCH /trips/{trip_id}; only sent fields change."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    total_budget: Decimal | None = Field(None, gt=0, decimal_places=2)
    cover_photo_url: str | None = None
    status: TripStatus | None = None

    @field_validator("cover_photo_url")
    @classmethod
    def check_photo_url(cls, value: str | None) -> str | None:
        return _check_photo_url(value)


class TripListResponse(BaseModel):
    """Response for GET /trips."""

    trips: list[TripSummary]
    page: int
    limit: int
    total: int
    total_pages: int


@router.get("", response_model=TripListResponse)
async def list_trips(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    trips: TripsDep,
    settings: SettingsDep,
    trip_status: Annotated[TripStatus | None, Query(alias="status")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> TripListResponse:
    """List the caller's trips, most recently updated first."""
    window = make_page(page, limit, settings)
    items, total = await trips.list_trips(ctx, window, trip_status)

    return TripListResponse(
        trips=items,
        page=window.page,
        limit=window.limit,
        total=total,
        total_pages=total_pages(total, window.limit),
    )


@router.post("", response_model=TripAggregate, status_code=status.HTTP_201_CREATED)
async def create_trip(
    request: CreateTripRequest,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
) -> TripAggregate:
    """Create a new DRAFT trip."""
    trip = await trips.create_trip(
        ctx,
        TripDraft(
            name=request.name,
            description=request.description,
            start_date=request.start_date,
            end_date=request.end_date,
            total_budget=request.total_budget,
            cover_photo_url=request.cover_photo_url,
        ),
    )
    logger.info(
        "Trip created",
        extra={"structured": {"trip_id": str(trip.trip_id), "user_id": str(ctx.user_id)}},
    )
    return trip


@router.get("/{trip_id}", response_model=TripAggregate)
async def get_trip(
    trip_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    trips: TripsDep,
) -> TripAggregate:
    """Get a trip with its days, scheduled activities and budgets.

    Raises:
        HTTPException: 404 if not found or not owned
    """
    trip = await trips.get_trip(trip_id, ctx)
    if trip is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return trip


@router.patch("/{trip_id}", response_model=TripAggregate)
async def update_trip(
    trip_id: UUID,
    request: UpdateTripRequest,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
) -> TripAggregate:
    """Partially update a trip, including its status.

    Raises:
        HTTPException: 404 if not found, 400 if the resulting date range is inverted
    """
    existing = await trips.get_trip(trip_id, ctx)
    if existing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")

    changes = {
        field: value
        for field, value in request.model_dump(exclude_unset=True).items()
        if value is not None or field in _NULLABLE_FIELDS
    }

    start = changes.get("start_date", existing.start_date)
    end = changes.get("end_date", existing.end_date)
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must be on or after start_date",
        )

    if not changes:
        return existing

    trip = await trips.update_trip(trip_id, ctx, changes)
    if trip is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return trip


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(
    trip_id: UUID,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
) -> Response:
    """Delete a trip together with its itinerary, budgets and shares."""
    if not await trips.delete_trip(trip_id, ctx):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")

    logger.info(
        "Trip deleted",
        extra={"structured": {"trip_id": str(trip_id), "user_id": str(ctx.user_id)}},
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{trip_id}/duplicate", response_model=TripAggregate, status_code=status.HTTP_201_CREATED
)
async def duplicate_trip(
    trip_id: UUID,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    planning: PlanningDep,
) -> TripAggregate:
    """Duplicate one of the caller's trips as a new DRAFT.

    Raises:
        HTTPException: 404 if not found or not owned
    """
    copy = await planning.duplicate(trip_id, ctx)
    if copy is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return copy
