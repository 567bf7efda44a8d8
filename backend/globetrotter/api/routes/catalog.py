"""Catalog endpoints - read-only cities and activities."""

from decimal import Decimal
from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from backend.globetrotter.api.deps import CatalogDep, SettingsDep, make_page, total_pages
from backend.globetrotter.db.repositories import ActivityFilters, CityFilters
from backend.globetrotter.models.catalog import Activity, City, CityDetail
from backend.globetrotter.models.common import ActivityCategory

cities_router = APIRouter(prefix="/cities", tags=["cities"])
activities_router = APIRouter(prefix="/activities", tags=["activities"])


class CityListResponse(BaseModel):
    """Response for GET /cities."""

    cities: list[City]
    page: int
    limit: int
    total: int
    total_pages: int


class ActivityListResponse(BaseModel):
    """Response for GET /activities."""

    activities: list[Activity]
    page: int
    limit: int
    total: int
    total_pages: int


@cities_router.get("", response_model=CityListResponse)
async def search_cities(
    catalog: CatalogDep,
    settings: SettingsDep,
    search: str | None = None,
    country: str | None = None,
    continent: str | None = None,
    min_cost: Annotated[Decimal | None, Query(ge=0)] = None,
    max_cost: Annotated[Decimal | None, Query(ge=0)] = None,
    sort_by: Literal["popularity", "cost", "name"] = "name",
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> CityListResponse:
    """Search cities by name or country, with cost and region filters."""
    window = make_page(page, limit, settings)
    cities, total = await catalog.search_cities(
        CityFilters(
            search=search,
            country=country,
            continent=continent,
            min_cost=min_cost,
            max_cost=max_cost,
            sort_by=sort_by,
        ),
        window,
    )
    return CityListResponse(
        cities=cities,
        page=window.page,
        limit=window.limit,
        total=total,
        total_pages=total_pages(total, window.limit),
    )


@cities_router.get("/popular", response_model=list[City])
async def popular_cities(catalog: CatalogDep, settings: SettingsDep) -> list[City]:
    """Most popular destinations."""
    return await catalog.popular_cities(settings.popular_cities_limit)


@cities_router.get("/{city_id}", response_model=CityDetail)
async def get_city(city_id: UUID, catalog: CatalogDep, settings: SettingsDep) -> CityDetail:
    """Get a city with its top-rated activities."""
    city = await catalog.get_city(city_id, settings.city_detail_activities_limit)
    if city is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="City not found")
    return city


@cities_router.get("/{city_id}/activities", response_model=list[Activity])
async def list_city_activities(
    city_id: UUID,
    catalog: CatalogDep,
    category: ActivityCategory | None = None,
    min_cost: Annotated[Decimal | None, Query(ge=0)] = None,
    max_cost: Annotated[Decimal | None, Query(ge=0)] = None,
    min_rating: Annotated[float | None, Query(ge=0, le=5)] = None,
) -> list[Activity]:
    """All activities in a city, highest rated first."""
    if not await catalog.city_exists(city_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="City not found")

    activities, _ = await catalog.search_activities(
        ActivityFilters(
            city_id=city_id,
            category=category,
            min_cost=min_cost,
            max_cost=max_cost,
            min_rating=min_rating,
        )
    )
    return activities


@activities_router.get("", response_model=ActivityListResponse)
async def search_activities(
    catalog: CatalogDep,
    settings: SettingsDep,
    city_id: UUID | None = None,
    category: ActivityCategory | None = None,
    min_cost: Annotated[Decimal | None, Query(ge=0)] = None,
    max_cost: Annotated[Decimal | None, Query(ge=0)] = None,
    min_rating: Annotated[float | None, Query(ge=0, le=5)] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> ActivityListResponse:
    """Search activities across cities, highest rated first."""
    window = make_page(page, limit, settings)
    activities, total = await catalog.search_activities(
        ActivityFilters(
            city_id=city_id,
            category=category,
            min_cost=min_cost,
            max_cost=max_cost,
            min_rating=min_rating,
        ),
        window,
    )
    return ActivityListResponse(
        activities=activities,
        page=window.page,
        limit=window.limit,
        total=total,
        total_pages=total_pages(total, window.limit),
    )


@activities_router.get("/{activity_id}", response_model=Activity)
async def get_activity(activity_id: UUID, catalog: CatalogDep) -> Activity:
    """Get a single activity."""
    activity = await catalog.get_activity(activity_id)
    if activity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    return activity
