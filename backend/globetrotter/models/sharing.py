"""Share link models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from backend.globetrotter.models.common import SharePermission


class SharedTripRecord(BaseModel):
    """Share link for a trip."""

    share_id: UUID
    trip_id: UUID
    shared_by_id: UUID
    shared_with_id: UUID | None
    public_slug: str
    permission: SharePermission
    expires_at: datetime | None
    created_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        """Whether the link has passed its expiry at `now`."""
        return self.expires_at is not None and now > self.expires_at


class UserProfile(BaseModel):
    """Public view of a user."""

    user_id: UUID
    name: str
