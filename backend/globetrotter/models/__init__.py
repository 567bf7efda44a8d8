"""Models package - re-exports for convenience."""

from backend.globetrotter.models.budget import (
    BudgetSummary,
    CategoryBreakdown,
    ScheduledActivityCost,
)
from backend.globetrotter.models.catalog import Activity, City, CityDetail
from backend.globetrotter.models.common import (
    ActivityCategory,
    BudgetCategory,
    Money,
    SharePermission,
    TripStatus,
)
from backend.globetrotter.models.sharing import SharedTripRecord, UserProfile
from backend.globetrotter.models.trip import (
    BudgetAllocation,
    ItineraryDay,
    ScheduledActivity,
    TripAggregate,
    TripSummary,
)
from backend.globetrotter.models.user import UserAccount

__all__ = [
    "Activity",
    "ActivityCategory",
    "BudgetAllocation",
    "BudgetCategory",
    "BudgetSummary",
    "CategoryBreakdown",
    "City",
    "CityDetail",
    "ItineraryDay",
    "Money",
    "ScheduledActivity",
    "ScheduledActivityCost",
    "SharePermission",
    "SharedTripRecord",
    "TripAggregate",
    "TripStatus",
    "TripSummary",
    "UserAccount",
    "UserProfile",
]
