"""User account models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class UserAccount(BaseModel):
    """The caller's own account, with profile preferences and usage counts."""

    user_id: UUID
    email: str
    name: str
    avatar_url: str | None = None
    language: str
    currency: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    trip_count: int = 0
    saved_city_count: int = 0
