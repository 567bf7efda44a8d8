"""Budget aggregation for a trip."""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from backend.globetrotter.models.budget import (
    BudgetSummary,
    CategoryBreakdown,
    ScheduledActivityCost,
)
from backend.globetrotter.models.common import ZERO
from backend.globetrotter.models.trip import BudgetAllocation

_CENT = Decimal("0.01")
_WHOLE = Decimal("1")


def activity_cost(scheduled: ScheduledActivityCost) -> Decimal:
    """Effective cost of a scheduled activity (custom override wins, even when 0)."""
    if scheduled.custom_cost is not None:
        return scheduled.custom_cost
    return scheduled.estimated_cost


def allocation_percentage(allocated: Decimal, total_allocated: Decimal) -> int:
    """Share of the total allocation, rounded half-up to a whole percent.

    Returns 0 when nothing is allocated at all.
    """
    if total_allocated <= 0:
        return 0
    ratio = allocated / total_allocated * 100
    return int(ratio.quantize(_WHOLE, rounding=ROUND_HALF_UP))


def format_over_budget_warning(category: str, overspend: Decimal) -> str:
    """Human-readable warning for an overspent category."""
    amount = overspend.quantize(_CENT, rounding=ROUND_HALF_UP)
    return f"{category} is over budget by ${amount}"


def compute_budget_summary(
    total_budget: Decimal | None,
    allocations: Sequence[BudgetAllocation],
    scheduled_activities: Sequence[ScheduledActivityCost],
) -> BudgetSummary:
    """Aggregate a trip's allocations and scheduled activity costs.

    This is a pure function with no I/O or side effects.

    Args:
        total_budget: Trip-level budget ceiling, echoed back unchanged
        allocations: Per-category allocations in display order
        scheduled_activities: Cost inputs of every activity on the trip's days

    Returns:
        BudgetSummary with totals, per-category breakdown (input order kept)
        and one warning per overspent category

    Activity costs are reported alongside the allocations but are not
    reconciled against them.
    """
    total_allocated = sum((a.allocated_amount for a in allocations), ZERO)
    total_spent = sum((a.spent_amount for a in allocations), ZERO)
    estimated = sum((activity_cost(s) for s in scheduled_activities), ZERO)

    breakdown: list[CategoryBreakdown] = []
    warnings: list[str] = []

    for allocation in allocations:
        over = allocation.spent_amount > allocation.allocated_amount
        breakdown.append(
            CategoryBreakdown(
                category=allocation.category,
                allocated=allocation.allocated_amount,
                spent=allocation.spent_amount,
                percentage=allocation_percentage(allocation.allocated_amount, total_allocated),
                is_over_budget=over,
            )
        )
        if over:
            warnings.append(
                format_over_budget_warning(
                    allocation.category.value,
                    allocation.spent_amount - allocation.allocated_amount,
                )
            )

    return BudgetSummary(
        total_budget=total_budget,
        total_allocated=total_allocated,
        total_spent=total_spent,
        remaining=total_allocated - total_spent,
        estimated_activity_costs=estimated,
        breakdown=breakdown,
        over_budget_warnings=warnings,
    )
