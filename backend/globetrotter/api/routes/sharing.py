"""Sharing endpoints - share links, shared trip view and copy-to-my-account."""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, EmailStr, Field

from backend.globetrotter.api.auth import get_current_context, get_optional_context
from backend.globetrotter.api.deps import (
    PlanningDep,
    SettingsDep,
    SharesDep,
    TripsDep,
    UsersDep,
    require_owned_trip,
)
from backend.globetrotter.db.context import RequestContext
from backend.globetrotter.middleware.ratelimit import enforce_crud_quota
from backend.globetrotter.models.common import SharePermission
from backend.globetrotter.models.sharing import SharedTripRecord, UserProfile
from backend.globetrotter.models.trip import TripAggregate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sharing", tags=["sharing"])


class CreateShareRequest(BaseModel):
    """Request body for POST /sharing/trips/{trip_id}/share."""

    permission: SharePermission = SharePermission.VIEW_ONLY
    shared_with_email: EmailStr | None = None
    expires_in_days: int | None = Field(None, gt=0)


class ShareResponse(BaseModel):
    """A share link and where to open it."""

    share_id: UUID
    trip_id: UUID
    public_slug: str
    share_url: str
    permission: SharePermission
    shared_with_id: UUID | None
    expires_at: datetime | None
    created_at: datetime | None


class SharedTripView(BaseModel):
    """Response for GET /sharing/{slug}."""

    trip: TripAggregate
    shared_by: UserProfile | None
    permission: SharePermission
    can_copy: bool


def _share_url(slug: str) -> str:
    return f"/shared/{slug}"


def _to_response(share: SharedTripRecord) -> ShareResponse:
    return ShareResponse(
        share_id=share.share_id,
        trip_id=share.trip_id,
        public_slug=share.public_slug,
        share_url=_share_url(share.public_slug),
        permission=share.permission,
        shared_with_id=share.shared_with_id,
        expires_at=share.expires_at,
        created_at=share.created_at,
    )


async def _resolve_share(
    slug: str, ctx: RequestContext | None, shares: SharesDep
) -> SharedTripRecord:
    """Look up a share link and check it is usable by the caller.

    Raises:
        HTTPException: 404 if missing, 410 if expired, 403 if restricted to another user
    """
    share = await shares.get_by_slug(slug)
    if share is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shared trip not found")

    if share.is_expired(datetime.now(timezone.utc)):
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="Share link has expired")

    if share.shared_with_id is not None and (ctx is None or ctx.user_id != share.shared_with_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="This trip was shared with another user"
        )

    return share


@router.post(
    "/trips/{trip_id}/share", response_model=ShareResponse, status_code=status.HTTP_201_CREATED
)
async def create_share(
    trip_id: UUID,
    request: CreateShareRequest,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
    shares: SharesDep,
    users: UsersDep,
    settings: SettingsDep,
) -> ShareResponse:
    """Create a share link for one of the caller's trips.

    Raises:
        HTTPException: 404 if the trip is not owned or the recipient email is unknown
    """
    await require_owned_trip(trip_id, ctx, trips)

    shared_with_id: UUID | None = None
    if request.shared_with_email:
        recipient = await users.find_by_email(request.shared_with_email)
        if recipient is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Recipient user not found"
            )
        shared_with_id = recipient.user_id

    expires_at = None
    if request.expires_in_days is not None:
        expires_at = datetime.now(timezone.utc) + timedelta(days=request.expires_in_days)

    share = await shares.create_share(
        trip_id,
        ctx,
        public_slug=secrets.token_hex(settings.share_slug_bytes),
        permission=request.permission,
        shared_with_id=shared_with_id,
        expires_at=expires_at,
    )
    logger.info(
        "Share created",
        extra={
            "structured": {
                "trip_id": str(trip_id),
                "share_id": str(share.share_id),
                "permission": share.permission.value,
                "restricted": shared_with_id is not None,
            }
        },
    )
    return _to_response(share)


@router.get("/trips/{trip_id}/shares", response_model=list[ShareResponse])
async def list_shares(
    trip_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    trips: TripsDep,
    shares: SharesDep,
) -> list[ShareResponse]:
    """List the share links of one of the caller's trips."""
    await require_owned_trip(trip_id, ctx, trips)
    return [_to_response(share) for share in await shares.list_shares(trip_id)]


@router.delete("/trips/{trip_id}/share/{share_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_share(
    trip_id: UUID,
    share_id: UUID,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
    shares: SharesDep,
) -> Response:
    """Revoke a share link."""
    await require_owned_trip(trip_id, ctx, trips)

    if not await shares.delete_share(trip_id, share_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Share not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{slug}", response_model=SharedTripView)
async def view_shared_trip(
    slug: str,
    ctx: Annotated[RequestContext | None, Depends(get_optional_context)],
    trips: TripsDep,
    shares: SharesDep,
    users: UsersDep,
) -> SharedTripView:
    """Open a shared trip; anonymous callers may view unrestricted links."""
    share = await _resolve_share(slug, ctx, shares)

    trip = await trips.get_trip_unscoped(share.trip_id)
    if trip is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shared trip not found")

    return SharedTripView(
        trip=trip,
        shared_by=await users.get_user(share.shared_by_id),
        permission=share.permission,
        can_copy=share.permission != SharePermission.VIEW_ONLY,
    )


@router.post("/{slug}/copy", response_model=TripAggregate, status_code=status.HTTP_201_CREATED)
async def copy_shared_trip(
    slug: str,
    ctx: Annotated[RequestContext, Depends(enforce_crud_quota)],
    trips: TripsDep,
    shares: SharesDep,
    planning: PlanningDep,
) -> TripAggregate:
    """Copy a shared trip into the caller's account as a new DRAFT.

    Raises:
        HTTPException: 404/410/403 as for viewing, and 403 for view-only links
    """
    share = await _resolve_share(slug, ctx, shares)

    if share.permission == SharePermission.VIEW_ONLY:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="This share does not allow copying"
        )

    source = await trips.get_trip_unscoped(share.trip_id)
    if source is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shared trip not found")

    return await planning.copy_aggregate(source, ctx)
