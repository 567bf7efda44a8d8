"""Health check endpoints.

- /health: liveness, always ok while the process serves requests
- /healthz: readiness, checks DB and Redis connectivity
"""

from typing import Annotated, Any

import redis
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from backend.globetrotter.config import Settings, get_settings
from backend.globetrotter.db.engine import get_engine

router = APIRouter()


async def check_db(engine: AsyncEngine) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


async def check_redis(settings: Settings) -> tuple[bool, str]:
    """Check Redis connectivity.

    Returns:
        (is_ok, status_message)
    """
    if not settings.redis_url:
        return (True, "not_configured")

    try:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        client.ping()
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(
    engine: Annotated[AsyncEngine, Depends(get_engine)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, Any] | JSONResponse:
    """Readiness check.

    Returns:
        200 with component status if DB and Redis are reachable
        503 with the same body if either fails
    """
    db_ok, db_status = await check_db(engine)
    redis_ok, redis_status = await check_redis(settings)

    core_ok = db_ok and redis_ok
    body = {
        "status": "ok" if core_ok else "degraded",
        "components": {"db": db_status, "redis": redis_status},
    }

    if not core_ok:
        return JSONResponse(content=body, status_code=503)

    return body
