"""Budget summary models."""

from decimal import Decimal

from pydantic import BaseModel, Field

from backend.globetrotter.models.common import BudgetCategory


class ScheduledActivityCost(BaseModel):
    """Cost inputs of one scheduled activity.

    custom_cost overrides the catalog estimate when it is set.
    """

    custom_cost: Decimal | None = None
    estimated_cost: Decimal


class CategoryBreakdown(BaseModel):
    """Budget state of a single category."""

    category: BudgetCategory
    allocated: Decimal
    spent: Decimal
    percentage: int
    is_over_budget: bool


class BudgetSummary(BaseModel):
    """Aggregated budget view of a trip."""

    total_budget: Decimal | None
    total_allocated: Decimal
    total_spent: Decimal
    remaining: Decimal
    estimated_activity_costs: Decimal
    breakdown: list[CategoryBreakdown] = Field(default_factory=list)
    over_budget_warnings: list[str] = Field(default_factory=list)
