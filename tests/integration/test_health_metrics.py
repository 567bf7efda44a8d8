"""Integration tests for /health, /healthz and /metrics endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from backend.globetrotter.api.routes.health import check_db, check_redis
from backend.globetrotter.config import Settings


class TestHealthEndpoint:
    """Test /health and /healthz endpoints."""

    @pytest.mark.asyncio
    async def test_health_is_always_ok(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @pytest.mark.asyncio
    @patch("backend.globetrotter.api.routes.health.check_db", new_callable=AsyncMock)
    @patch("backend.globetrotter.api.routes.health.check_redis", new_callable=AsyncMock)
    async def test_healthz_returns_200_when_all_ok(
        self,
        mock_check_redis: AsyncMock,
        mock_check_db: AsyncMock,
        client: AsyncClient,
    ) -> None:
        """Test /healthz returns 200 when DB and Redis are healthy."""
        mock_check_db.return_value = (True, "ok")
        mock_check_redis.return_value = (True, "ok")

        response = await client.get("/healthz")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["components"] == {"db": "ok", "redis": "ok"}

    @pytest.mark.asyncio
    @patch("backend.globetrotter.api.routes.health.check_db", new_callable=AsyncMock)
    @patch("backend.globetrotter.api.routes.health.check_redis", new_callable=AsyncMock)
    async def test_healthz_returns_503_when_db_fails(
        self,
        mock_check_redis: AsyncMock,
        mock_check_db: AsyncMock,
        client: AsyncClient,
    ) -> None:
        """Test /healthz returns 503 when DB check fails."""
        mock_check_db.return_value = (False, "connection refused")
        mock_check_redis.return_value = (True, "ok")

        response = await client.get("/healthz")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["components"]["db"] == "connection refused"
        assert data["components"]["redis"] == "ok"

    @pytest.mark.asyncio
    @patch("backend.globetrotter.api.routes.health.check_db", new_callable=AsyncMock)
    @patch("backend.globetrotter.api.routes.health.check_redis", new_callable=AsyncMock)
    async def test_healthz_returns_503_when_redis_fails(
        self,
        mock_check_redis: AsyncMock,
        mock_check_db: AsyncMock,
        client: AsyncClient,
    ) -> None:
        """Test /healthz returns 503 when Redis check fails."""
        mock_check_db.return_value = (True, "ok")
        mock_check_redis.return_value = (False, "timeout")

        response = await client.get("/healthz")

        assert response.status_code == 503
        assert response.json()["components"]["redis"] == "timeout"

    @pytest.mark.asyncio
    async def test_check_db_against_test_engine(self, app: FastAPI) -> None:
        assert await check_db(app.state.engine) == (True, "ok")

    @pytest.mark.asyncio
    async def test_check_redis_not_configured(self) -> None:
        assert await check_redis(Settings(redis_url=None)) == (True, "not_configured")


class TestMetricsEndpoint:
    """Test /metrics endpoint."""

    @pytest.mark.asyncio
    async def test_metrics_returns_prometheus_format(self, client: AsyncClient) -> None:
        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert "# HELP" in response.text

    @pytest.mark.asyncio
    async def test_metrics_includes_planning_counters(self, client: AsyncClient) -> None:
        """Test /metrics includes the trip planning counters."""
        from backend.globetrotter.utils.metrics import PrometheusPlanningMetrics

        metrics = PrometheusPlanningMetrics()
        metrics.inc_duplication("share")
        metrics.record_summary(1)

        response = await client.get("/metrics")

        text = response.text
        assert 'trip_duplications_total{source="share"}' in text
        assert "budget_summaries_total" in text
        assert "budget_over_allocation_warnings_total" in text


class TestRootEndpoint:
    """Test root endpoint."""

    @pytest.mark.asyncio
    async def test_root_returns_api_info(self, client: AsyncClient) -> None:
        response = await client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Globe Trotter API"
        assert data["version"] == "0.1.0"
