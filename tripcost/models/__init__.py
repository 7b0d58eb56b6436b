"""Models package - re-exports for convenience."""

from tripcost.models.common import ChangeType, ComponentKind, Money, PricingCategory, SignedMoney
from tripcost.models.history import (
    CategoryChange,
    ChangeDescriptor,
    ChangeRecord,
    PriceComparison,
    PricingHistory,
)
from tripcost.models.itinerary import Itinerary, ItineraryDay
from tripcost.models.pricing import CategoryBreakdown, CostBreakdown, DayPricing, PricingUpdate
from tripcost.models.schedule import DaySchedule, ScheduledActivity, TimeConflict
from tripcost.models.selection import (
    Accommodation,
    Activity,
    SelectedItems,
    Transportation,
    Travelers,
    TripContext,
)

__all__ = [
    # Common
    "Money",
    "SignedMoney",
    "PricingCategory",
    "ComponentKind",
    "ChangeType",
    # Selection
    "Accommodation",
    "Activity",
    "Transportation",
    "SelectedItems",
    "Travelers",
    "TripContext",
    # Itinerary
    "Itinerary",
    "ItineraryDay",
    # Pricing
    "CategoryBreakdown",
    "CostBreakdown",
    "DayPricing",
    "PricingUpdate",
    # History
    "ChangeDescriptor",
    "ChangeRecord",
    "PricingHistory",
    "CategoryChange",
    "PriceComparison",
    # Schedule
    "ScheduledActivity",
    "TimeConflict",
    "DaySchedule",
]
