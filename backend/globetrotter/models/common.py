"""Common types and enums shared across all models."""

from decimal import Decimal
from enum import Enum

# Monetary amounts are exact decimals with two fractional digits.
Money = Decimal

ZERO = Decimal("0")


class TripStatus(str, Enum):
    """Trip lifecycle status."""

    DRAFT = "DRAFT"
    PLANNING = "PLANNING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class BudgetCategory(str, Enum):
    """Budget allocation category."""

    TRANSPORT = "TRANSPORT"
    ACCOMMODATION = "ACCOMMODATION"
    FOOD = "FOOD"
    ACTIVITIES = "ACTIVITIES"
    SHOPPING = "SHOPPING"
    MISCELLANEOUS = "MISCELLANEOUS"


class ActivityCategory(str, Enum):
    """Catalog activity category."""

    SIGHTSEEING = "SIGHTSEEING"
    FOOD_TOUR = "FOOD_TOUR"
    ADVENTURE = "ADVENTURE"
    CULTURAL = "CULTURAL"
    RELAXATION = "RELAXATION"
    NIGHTLIFE = "NIGHTLIFE"
    SHOPPING = "SHOPPING"
    TRANSPORTATION = "TRANSPORTATION"


class SharePermission(str, Enum):
    """What a share link allows its holder to do."""

    VIEW_ONLY = "VIEW_ONLY"
    CAN_EDIT = "CAN_EDIT"
    CAN_COPY = "CAN_COPY"
