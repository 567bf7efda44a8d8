"""Budget endpoints - summary and per-category allocations."""

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from backend.globetrotter.api.auth import get_current_context
from backend.globetrotter.api.deps import BudgetsDep, PlanningDep, TripsDep, require_owned_trip
from backend.globetrotter.db.context import RequestContext
from backend.globetrotter.middleware.ratelimit import enforce_crud_quota
from backend.globetrotter.models.budget import BudgetSummary
from backend.globetrotter.models.common import BudgetCategory
from backend.globetrotter.models.trip import BudgetAllocation

router = APIRouter(prefix="/trips/{trip_id}/budget", tags=["budget"])


class AllocationInput(BaseModel):
    """Amount to allocate to one category."""

    category: BudgetCategory
    amount: Decimal = Field(..., gt=0, decimal_places=2)


class SetAllocationsRequest(BaseModel):
    """Request body for POST /trips/{trip_id}/budget."""

    allocations: list[AllocationInput] = Field(..., min_length=1)

    @field_validator("allocations")
    @classmethod
    def unique_categories(cls, value: list[AllocationInput]) -> list[AllocationInput]:
        seen: set[BudgetCategory] = set()
        for item in value:
            if item.category in seen:
                raise ValueError(f"Duplicate category: {item.category.value}")
            seen.add(item.category)
        return value


class UpdateAllocationRequest(BaseModel):
    """Request body for PATCH /trips/{trip_id}/budget/{category}."""

    allocated_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    spent_amount: Decimal | None = Field(None, ge=0, decimal_places=2)


@router.get("", response_model=BudgetSummary)
async def get_budget_summary(
    trip_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    planning: PlanningDep,
) -> BudgetSummary:
    """Get totals, per-category breakdown and over-budget warnings.

    Raises:
        HTTPException: 404 if not found or not owned
    """
    summary = await planning.budget_summary(trip_id, ctx)
    if summary is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return summary


@router.post("", response_model=list[BudgetAllocation])
async def set_allocations(
    trip_id: UUID,
    request: SetAllocationsRequest,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
    budgets: BudgetsDep,
) -> list[BudgetAllocation]:
    """Create or overwrite allocated amounts; spent amounts are kept."""
    await require_owned_trip(trip_id, ctx, trips)

    return await budgets.upsert_allocations(
        trip_id, [(item.category, item.amount) for item in request.allocations]
    )


@router.patch("/{category}", response_model=BudgetAllocation)
async def update_allocation(
    trip_id: UUID,
    category: BudgetCategory,
    request: UpdateAllocationRequest,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
    budgets: BudgetsDep,
) -> BudgetAllocation:
    """Update one category's allocated or spent amount.

    Raises:
        HTTPException: 404 if the trip or the category allocation is missing
    """
    await require_owned_trip(trip_id, ctx, trips)

    allocation = await budgets.update_allocation(
        trip_id,
        category,
        allocated_amount=request.allocated_amount,
        spent_amount=request.spent_amount,
    )
    if allocation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {category.value} allocation for this trip",
        )
    return allocation
