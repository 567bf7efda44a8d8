"""Prometheus metrics for trip planning."""

from prometheus_client import Counter

trip_duplications_total = Counter(
    "trip_duplications_total",
    "Total trips duplicated",
    ["source"],
)

budget_summaries_total = Counter(
    "budget_summaries_total",
    "Total budget summaries computed",
)

budget_over_allocation_warnings_total = Counter(
    "budget_over_allocation_warnings_total",
    "Total over-budget category warnings emitted",
)


class PrometheusPlanningMetrics:
    """Prometheus-based planning metrics implementation."""

    def inc_duplication(self, source: str) -> None:
        """Increment duplication counter ("owner" or "share")."""
        trip_duplications_total.labels(source=source).inc()

    def record_summary(self, warnings: int) -> None:
        """Count a computed summary and the warnings it carried."""
        budget_summaries_total.inc()
        if warnings:
            budget_over_allocation_warnings_total.inc(warnings)
