"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - trip_duplications_total{source}
    - budget_summaries_total
    - budget_over_allocation_warnings_total
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
