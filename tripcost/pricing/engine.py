"""Itinerary cost engine interface and the built-in estimate-based engine."""

from typing import Protocol

from tripcost.config import Settings, get_settings
from tripcost.currency.table import CurrencyTable
from tripcost.models.common import Money, PricingCategory
from tripcost.models.itinerary import Itinerary, ItineraryDay
from tripcost.models.pricing import CategoryBreakdown, CostBreakdown, DayPricing
from tripcost.models.selection import SelectedComponent


class ItineraryCostEngine(Protocol):
    """Turns a day-by-day itinerary into base-currency category subtotals."""

    async def calculate(self, itinerary: Itinerary) -> CostBreakdown:
        """Compute the cost breakdown of an itinerary.

        Args:
            itinerary: Days with their assigned components

        Returns:
            CostBreakdown in the engine's base currency, unrounded
        """
        ...


class DefaultCostEngine:
    """Engine pricing components from their own estimated costs.

    Per day: the assigned accommodation (or a placeholder nightly rate),
    activities, transportation legs, optional meal estimates per traveler and
    a miscellaneous percentage of the day's other costs.
    """

    def __init__(self, currency_table: CurrencyTable, settings: Settings | None = None) -> None:
        self._table = currency_table
        self._settings = settings or get_settings()

    async def calculate(self, itinerary: Itinerary) -> CostBreakdown:
        base = self._table.base_currency
        totals = {c: 0.0 for c in PricingCategory}
        by_day: list[DayPricing] = []
        confidences: list[float] = []

        for day in itinerary.days:
            day_costs = self._price_day(day, itinerary, confidences)
            for category, amount in day_costs.items():
                totals[category] += amount

            by_day.append(
                DayPricing(
                    date=day.date,
                    total=Money(amount=sum(day_costs.values()), currency=base),
                    breakdown=_breakdown(day_costs, base),
                )
            )

        confidence = (
            sum(confidences) / len(confidences)
            if confidences
            else self._settings.fallback_confidence
        )

        return CostBreakdown(
            total=Money(amount=sum(totals.values()), currency=base),
            by_category=_breakdown(totals, base),
            by_day=by_day,
            confidence=confidence,
        )

    def _price_day(
        self,
        day: ItineraryDay,
        itinerary: Itinerary,
        confidences: list[float],
    ) -> dict[PricingCategory, float]:
        costs = {c: 0.0 for c in PricingCategory}

        if day.accommodation is not None:
            costs[PricingCategory.accommodations] = self._table.to_base(
                day.accommodation.estimated_cost
            )
            confidences.append(self._confidence(day.accommodation))
        elif self._settings.placeholder_nightly_rate > 0:
            costs[PricingCategory.accommodations] = self._settings.placeholder_nightly_rate
            confidences.append(self._settings.fallback_confidence)

        for activity in day.activities:
            costs[PricingCategory.activities] += self._table.to_base(activity.estimated_cost)
            confidences.append(self._confidence(activity))

        for leg in day.transportation:
            costs[PricingCategory.transportation] += self._table.to_base(leg.estimated_cost)
            confidences.append(self._confidence(leg))

        if self._settings.include_meals:
            per_person = (
                self._settings.breakfast_cost
                + self._settings.lunch_cost
                + self._settings.dinner_cost
            )
            costs[PricingCategory.meals] = per_person * itinerary.travelers.total

        # Tips, local transport, shopping
        costs[PricingCategory.miscellaneous] = (
            sum(costs.values()) * self._settings.misc_percentage / 100
        )
        return costs

    def _confidence(self, component: SelectedComponent) -> float:
        if component.confidence is not None:
            return component.confidence
        return self._settings.estimated_confidence


def _breakdown(costs: dict[PricingCategory, float], currency: str) -> CategoryBreakdown:
    return CategoryBreakdown(
        **{c.value: Money(amount=costs[c], currency=currency) for c in PricingCategory}
    )
