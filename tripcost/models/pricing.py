"""Pricing models - computed cost snapshots."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from tripcost.models.common import Money, PricingCategory


class CategoryBreakdown(BaseModel):
    """Cost per category, all in one currency."""

    model_config = ConfigDict(frozen=True)

    accommodations: Money
    activities: Money
    transportation: Money
    meals: Money
    miscellaneous: Money

    def get(self, category: PricingCategory) -> Money:
        money: Money = getattr(self, category.value)
        return money

    def amounts(self) -> dict[str, float]:
        """Category name -> amount."""
        return {c.value: self.get(c).amount for c in PricingCategory}

    def total_amount(self) -> float:
        return sum(self.amounts().values())


class DayPricing(BaseModel):
    """Cost of a single calendar day."""

    model_config = ConfigDict(frozen=True)

    date: date
    total: Money
    breakdown: CategoryBreakdown


class CostBreakdown(BaseModel):
    """Raw cost engine output, expressed in the base currency."""

    total: Money
    by_category: CategoryBreakdown
    by_day: list[DayPricing]
    confidence: float = Field(..., ge=0, le=1)


class PricingUpdate(BaseModel):
    """One fully-computed snapshot of trip cost in a display currency.

    Invariants: total equals the sum of breakdown categories, and the sum of
    by_day totals equals total. Superseded, never mutated.
    """

    model_config = ConfigDict(frozen=True)

    total: Money
    breakdown: CategoryBreakdown
    by_day: list[DayPricing]
    confidence: float = Field(..., ge=0, le=1)
    timestamp: datetime

    @property
    def currency(self) -> str:
        return self.total.currency
