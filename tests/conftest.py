"""Shared pytest fixtures for all test suites."""

import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass

import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backend.globetrotter.db.engine import create_session_factory, get_session
from backend.globetrotter.db.models import Activity, Base, City, User
from backend.globetrotter.db.seed_dev import DEV_USER_ID, seed_dev_data
from backend.globetrotter.main import create_app

OTHER_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000003")
OTHER_USER_EMAIL = "friend@example.com"


def auth(user_id: uuid.UUID) -> dict[str, str]:
    """Authorization header for the stub bearer auth."""
    return {"Authorization": f"Bearer {user_id}"}


@dataclass
class Catalog:
    """Ids of the seeded catalog, looked up by name."""

    cities: dict[str, uuid.UUID]
    activities: dict[str, uuid.UUID]


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the full schema.

    StaticPool keeps one connection so every session sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def catalog(session_factory: async_sessionmaker[AsyncSession]) -> Catalog:
    """Seed the dev user, a second user and the dev catalog."""
    async with session_factory() as session:
        await seed_dev_data(session)
        session.add(
            User(
                user_id=OTHER_USER_ID,
                email=OTHER_USER_EMAIL,
                name="Friend",
                password_hash="stub",
            )
        )
        await session.commit()

        cities = (await session.execute(select(City.name, City.city_id))).all()
        activities = (await session.execute(select(Activity.name, Activity.activity_id))).all()

    return Catalog(
        cities={name: city_id for name, city_id in cities},
        activities={name: activity_id for name, activity_id in activities},
    )


@pytest_asyncio.fixture
async def app(
    engine: AsyncEngine, session_factory: async_sessionmaker[AsyncSession]
) -> AsyncGenerator[FastAPI, None]:
    """App wired to the test engine; rate limiting is off unless a test installs a limiter."""
    app = create_app()
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.rate_limiter = None

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def dev_headers(catalog: Catalog) -> dict[str, str]:
    return auth(DEV_USER_ID)


@pytest_asyncio.fixture
async def other_headers(catalog: Catalog) -> dict[str, str]:
    return auth(OTHER_USER_ID)
