"""Trip planning service - hosts budget aggregation and trip duplication."""

import logging
from uuid import UUID

from backend.globetrotter.db.context import RequestContext
from backend.globetrotter.db.repositories import BudgetRepository, TripRepository
from backend.globetrotter.models.budget import BudgetSummary
from backend.globetrotter.models.trip import TripAggregate
from backend.globetrotter.planning.budget import compute_budget_summary
from backend.globetrotter.planning.duplicate import duplicate_trip
from backend.globetrotter.utils.logging import StructuredTripLogger
from backend.globetrotter.utils.metrics import PrometheusPlanningMetrics

logger = logging.getLogger(__name__)


class TripPlanningService:
    """Loads trips through repositories and runs the pure planning functions.

    Repositories are passed in per request; the service holds no
    connection state of its own.
    """

    def __init__(
        self,
        trips: TripRepository,
        budgets: BudgetRepository,
        *,
        op_logger: StructuredTripLogger | None = None,
        metrics: PrometheusPlanningMetrics | None = None,
    ) -> None:
        self._trips = trips
        self._budgets = budgets
        self._log = op_logger or StructuredTripLogger()
        self._metrics = metrics or PrometheusPlanningMetrics()

    async def budget_summary(self, trip_id: UUID, ctx: RequestContext) -> BudgetSummary | None:
        """Compute the budget summary of an owned trip.

        Returns:
            BudgetSummary or None if the trip is absent or not owned
        """
        trip = await self._trips.get_trip(trip_id, ctx)
        if trip is None:
            self._log.log_operation(
                "budget_summary", ctx.user_id, trip_id, "not_found", error_reason="trip not found"
            )
            return None

        allocations = await self._budgets.list_allocations(trip_id)
        costs = await self._trips.list_activity_costs(trip_id)

        summary = compute_budget_summary(trip.total_budget, allocations, costs)

        self._metrics.record_summary(len(summary.over_budget_warnings))
        self._log.log_operation(
            "budget_summary",
            ctx.user_id,
            trip_id,
            "success",
            counts={
                "allocations": len(allocations),
                "activities": len(costs),
                "warnings": len(summary.over_budget_warnings),
            },
        )
        return summary

    async def duplicate(self, trip_id: UUID, ctx: RequestContext) -> TripAggregate | None:
        """Duplicate one of the caller's own trips.

        Returns:
            Persisted copy or None if the trip is absent or not owned
        """
        source = await self._trips.get_trip(trip_id, ctx)
        if source is None:
            self._log.log_operation(
                "duplicate", ctx.user_id, trip_id, "not_found", error_reason="trip not found"
            )
            return None

        return await self._persist_copy(source, ctx, source_label="owner")

    async def copy_aggregate(self, source: TripAggregate, ctx: RequestContext) -> TripAggregate:
        """Copy an already loaded and permission-checked trip into the caller's account."""
        return await self._persist_copy(source, ctx, source_label="share")

    async def _persist_copy(
        self, source: TripAggregate, ctx: RequestContext, source_label: str
    ) -> TripAggregate:
        copy = duplicate_trip(source, ctx.user_id)

        try:
            saved = await self._trips.save_aggregate(copy)
        except Exception as e:
            self._log.log_operation(
                "duplicate",
                ctx.user_id,
                source.trip_id,
                "error",
                error_reason=type(e).__name__,
            )
            raise

        self._metrics.inc_duplication(source_label)
        self._log.log_operation(
            "duplicate",
            ctx.user_id,
            source.trip_id,
            "success",
            new_trip_id=saved.trip_id,
            counts={
                "days": len(saved.days),
                "activities": sum(len(d.activities) for d in saved.days),
                "budgets": len(saved.budgets),
            },
        )
        logger.debug("Trip %s copied to %s via %s", source.trip_id, saved.trip_id, source_label)
        return saved
