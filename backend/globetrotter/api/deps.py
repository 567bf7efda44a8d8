"""Per-request repository and service dependencies."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.globetrotter.config import Settings, get_settings
from backend.globetrotter.db.context import RequestContext
from backend.globetrotter.db.engine import get_session
from backend.globetrotter.db.repositories import Page, TripRepository
from backend.globetrotter.db.sql_repositories import (
    SqlBudgetRepository,
    SqlCatalogRepository,
    SqlItineraryRepository,
    SqlShareRepository,
    SqlTripRepository,
    SqlUserRepository,
)
from backend.globetrotter.planning.service import TripPlanningService

SessionDep = Annotated[AsyncSession, Depends(get_session)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_trip_repository(session: SessionDep) -> SqlTripRepository:
    return SqlTripRepository(session)


def get_budget_repository(session: SessionDep) -> SqlBudgetRepository:
    return SqlBudgetRepository(session)


def get_itinerary_repository(session: SessionDep) -> SqlItineraryRepository:
    return SqlItineraryRepository(session)


def get_share_repository(session: SessionDep) -> SqlShareRepository:
    return SqlShareRepository(session)


def get_user_repository(session: SessionDep) -> SqlUserRepository:
    return SqlUserRepository(session)


def get_catalog_repository(session: SessionDep) -> SqlCatalogRepository:
    return SqlCatalogRepository(session)


TripsDep = Annotated[SqlTripRepository, Depends(get_trip_repository)]
BudgetsDep = Annotated[SqlBudgetRepository, Depends(get_budget_repository)]
ItineraryDep = Annotated[SqlItineraryRepository, Depends(get_itinerary_repository)]
SharesDep = Annotated[SqlShareRepository, Depends(get_share_repository)]
UsersDep = Annotated[SqlUserRepository, Depends(get_user_repository)]
CatalogDep = Annotated[SqlCatalogRepository, Depends(get_catalog_repository)]


def get_planning_service(trips: TripsDep, budgets: BudgetsDep) -> TripPlanningService:
    """Build the planning service over the request's repositories."""
    return TripPlanningService(trips, budgets)


PlanningDep = Annotated[TripPlanningService, Depends(get_planning_service)]


async def require_owned_trip(trip_id: UUID, ctx: RequestContext, trips: TripRepository) -> None:
    """Raise 404 unless the trip exists and belongs to the caller."""
    if not await trips.owns_trip(trip_id, ctx):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")


def make_page(page: int, limit: int | None, settings: Settings) -> Page:
    """Clamp a requested page window to the configured maximum."""
    size = settings.default_page_size if limit is None else limit
    return Page(page=page, limit=min(size, settings.max_page_size))


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed for total rows (ceiling division)."""
    return (total + limit - 1) // limit if limit > 0 else 0
