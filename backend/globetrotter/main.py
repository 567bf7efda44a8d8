"""FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.globetrotter.api.routes.budget import router as budget_router
from backend.globetrotter.api.routes.catalog import activities_router, cities_router
from backend.globetrotter.api.routes.health import router as health_router
from backend.globetrotter.api.routes.itinerary import router as itinerary_router
from backend.globetrotter.api.routes.metrics import router as metrics_router
from backend.globetrotter.api.routes.sharing import router as sharing_router
from backend.globetrotter.api.routes.trips import router as trips_router
from backend.globetrotter.api.routes.users import router as users_router
from backend.globetrotter.config import get_settings
from backend.globetrotter.db.engine import create_async_engine_from_settings, create_session_factory
from backend.globetrotter.middleware.ratelimit import create_rate_limiter

logger = logging.getLogger(__name__)

API_TITLE = "Globe Trotter API"
API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the engine and rate limiter for the lifetime of the app."""
    settings = get_settings()

    engine = create_async_engine_from_settings(settings)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.rate_limiter = create_rate_limiter(settings)
    logger.info("Application started", extra={"structured": {"redis": bool(settings.redis_url)}})

    try:
        yield
    finally:
        await engine.dispose()


def create_app() -> FastAPI:
    """Build the application with every router registered."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title=API_TITLE, version=API_VERSION, lifespan=lifespan)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(trips_router)
    app.include_router(itinerary_router)
    app.include_router(budget_router)
    app.include_router(sharing_router)
    app.include_router(cities_router)
    app.include_router(activities_router)
    app.include_router(users_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": API_TITLE, "version": API_VERSION}

    return app


app = create_app()
