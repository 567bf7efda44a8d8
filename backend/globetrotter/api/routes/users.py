"""Account endpoints - the caller's profile and saved cities."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field, field_validator

from backend.globetrotter.api.auth import get_current_context
from backend.globetrotter.api.deps import CatalogDep, UsersDep
from backend.globetrotter.db.context import RequestContext
from backend.globetrotter.middleware.ratelimit import enforce_crud_quota
from backend.globetrotter.models.catalog import City
from backend.globetrotter.models.user import UserAccount

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


class UpdateProfileRequest(BaseModel):
    """Request body for PATCH /users/me; only sent fields change."""

    name: str | None = Field(None, min_length=2, max_length=200)
    avatar_url: str | None = None
    language: str | None = Field(None, min_length=2, max_length=2)
    currency: str | None = Field(None, min_length=3, max_length=3)

    @field_validator("avatar_url")
    @classmethod
    def check_avatar_url(cls, value: str | None) -> str | None:
        if value is not None and not value.startswith(("http://", "https://")):
            raise ValueError("avatar_url must be an http(s) URL")
        return value


def _account_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.get("/me", response_model=UserAccount)
async def get_me(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    users: UsersDep,
) -> UserAccount:
    """Get the caller's account.

    Raises:
        HTTPException: 404 if the account no longer exists
    """
    account = await users.get_account(ctx.user_id)
    if account is None:
        raise _account_not_found()
    return account


@router.patch("/me", response_model=UserAccount)
async def update_me(
    request: UpdateProfileRequest,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    users: UsersDep,
) -> UserAccount:
    """Partially update the caller's profile; avatar_url may be cleared with null."""
    changes = {
        field: value
        for field, value in request.model_dump(exclude_unset=True).items()
        if value is not None or field == "avatar_url"
    }

    account = await users.update_profile(ctx.user_id, changes)
    if account is None:
        raise _account_not_found()
    return account


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_me(
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    users: UsersDep,
) -> Response:
    """Delete the caller's account with every trip, share and saved city."""
    if not await users.delete_user(ctx.user_id):
        raise _account_not_found()

    logger.info("User deleted", extra={"structured": {"user_id": str(ctx.user_id)}})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me/saved-cities", response_model=list[City])
async def list_saved_cities(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    users: UsersDep,
) -> list[City]:
    """List the caller's saved cities, most recently saved first."""
    return await users.list_saved_cities(ctx.user_id)


@router.post(
    "/me/saved-cities/{city_id}", response_model=City, status_code=status.HTTP_201_CREATED
)
async def save_city(
    city_id: UUID,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    users: UsersDep,
    catalog: CatalogDep,
) -> City:
    """Save a catalog city.

    Raises:
        HTTPException: 404 if the account or city is unknown, 409 if it is already saved
    """
    if await users.get_user(ctx.user_id) is None:
        raise _account_not_found()
    if not await catalog.city_exists(city_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="City not found")

    city = await users.save_city(ctx.user_id, city_id)
    if city is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="City already saved")
    return city


@router.delete("/me/saved-cities/{city_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_saved_city(
    city_id: UUID,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    users: UsersDep,
) -> Response:
    """Remove a saved city; removing one that is not saved still succeeds."""
    await users.remove_saved_city(ctx.user_id, city_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
