"""Rate limiting dependencies for mutating routes."""

from datetime import datetime, timezone
from typing import Annotated

import redis
from fastapi import Depends, HTTPException, Request, status

from backend.globetrotter.api.auth import get_current_context
from backend.globetrotter.config import Settings
from backend.globetrotter.db.context import RequestContext
from backend.globetrotter.db.inmemory import InMemoryRateLimiter
from backend.globetrotter.db.repositories import RateLimiter
from backend.globetrotter.ratelimit import RedisRateLimiter, make_rate_limit_key

CRUD_BUCKET = "crud"


def create_rate_limiter(settings: Settings) -> RateLimiter:
    """Build the CRUD limiter: Redis when configured, in-process otherwise."""
    if settings.redis_url:
        return RedisRateLimiter(
            redis.Redis.from_url(settings.redis_url),
            max_requests=settings.crud_ops_per_min,
            window_seconds=settings.rate_limit_window_sec,
        )

    return InMemoryRateLimiter(
        max_requests=settings.crud_ops_per_min,
        window_seconds=settings.rate_limit_window_sec,
    )


def get_rate_limiter(request: Request) -> RateLimiter | None:
    """FastAPI dependency returning the app's limiter (None disables limiting)."""
    return getattr(request.app.state, "rate_limiter", None)


async def enforce_crud_quota(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    limiter: Annotated[RateLimiter | None, Depends(get_rate_limiter)],
) -> RequestContext:
    """Charge one CRUD operation against the caller's quota.

    Returns:
        The caller's context, so routes can depend on this instead of auth

    Raises:
        HTTPException: 429 with Retry-After when the quota is exhausted
    """
    if limiter is None:
        return ctx

    key = make_rate_limit_key(ctx, CRUD_BUCKET)
    retry_after = limiter.check_quota(key, datetime.now(timezone.utc))

    if retry_after is not None:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded",
            headers={"Retry-After": str(retry_after.seconds)},
        )

    return ctx
