"""Real-time pricing calculator with caching and currency conversion.

Implements calculate_pricing with:
- Deterministic content-based cache key (sorted ids, dates, travelers, currency)
- At most one computation per key within the TTL window
- Day-by-day itinerary construction handed to an ItineraryCostEngine
- Single conversion from base to display currency, rounding reconciled so
  categories and days add up to the total
- One generic error on failure, never retried
"""

import logging
import time
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from tripcost.config import Settings, get_settings
from tripcost.currency.table import CurrencyTable, build_currency_table
from tripcost.models.common import Money, PricingCategory
from tripcost.models.itinerary import Itinerary, ItineraryDay
from tripcost.models.pricing import CategoryBreakdown, CostBreakdown, DayPricing, PricingUpdate
from tripcost.models.selection import (
    Accommodation,
    Activity,
    SelectedItems,
    Transportation,
    TripContext,
)
from tripcost.pricing.cache import PricingCache
from tripcost.pricing.engine import DefaultCostEngine, ItineraryCostEngine

logger = logging.getLogger(__name__)


class PricingCalculationError(Exception):
    """Pricing could not be calculated."""

    pass


# Metrics interface (implemented by tripcost.utils.metrics)
class PricingMetrics:
    """Interface for pricing calculation metrics."""

    def record_latency(self, outcome: str, latency_ms: float) -> None:
        """Record calculation latency."""
        pass

    def inc_calculation(self, outcome: str) -> None:
        """Increment calculation counter."""
        pass

    def inc_cache_hit(self) -> None:
        """Increment cache hit counter."""
        pass

    def inc_stale_response(self) -> None:
        """Increment discarded stale response counter."""
        pass


# Logging interface (implemented by tripcost.utils.logging)
class PricingLogger:
    """Interface for structured pricing logs."""

    def log_calculation(
        self,
        cache_key: str,
        currency: str,
        outcome: str,
        latency_ms: float,
        *,
        session_id: str | None = None,
        trip_days: int = 0,
        item_count: int = 0,
        total_amount: float | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log one calculation request."""
        pass


class PricingCalculator:
    """Pricing calculator owned by a single planning session."""

    def __init__(
        self,
        engine: ItineraryCostEngine | None = None,
        currency_table: CurrencyTable | None = None,
        *,
        settings: Settings | None = None,
        cache: PricingCache | None = None,
        metrics: PricingMetrics | None = None,
        pricing_logger: PricingLogger | None = None,
        clock: Callable[[], datetime] | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize calculator.

        Args:
            engine: Cost engine (default: DefaultCostEngine over the table)
            currency_table: Currency table (default: built from settings)
            settings: Settings (default: get_settings())
            cache: Pricing cache (default: new cache with the settings TTL)
            metrics: Metrics recorder (optional, defaults to no-op)
            pricing_logger: Structured logger (optional, defaults to no-op)
            clock: Injectable clock for timestamps and cache freshness
            session_id: Owning session, attached to logs
        """
        self._settings = settings or get_settings()
        self._table = currency_table or build_currency_table(
            base_currency=self._settings.base_currency,
            unknown_policy=self._settings.unknown_currency_policy,
        )
        self._engine = engine or DefaultCostEngine(self._table, self._settings)
        self._cache = (
            cache if cache is not None else PricingCache(self._settings.pricing_cache_ttl_seconds)
        )
        self._metrics = metrics or PricingMetrics()
        self._logger = pricing_logger or PricingLogger()
        self._clock = clock or datetime.now
        self._session_id = session_id

    @property
    def currency_table(self) -> CurrencyTable:
        return self._table

    @property
    def cache(self) -> PricingCache:
        return self._cache

    @property
    def metrics(self) -> PricingMetrics:
        return self._metrics

    async def calculate_pricing(
        self,
        selected_items: SelectedItems,
        trip_context: TripContext,
        target_currency: str | None = None,
    ) -> PricingUpdate:
        """Calculate pricing for the selection, serving from cache when fresh.

        Args:
            selected_items: Accommodations, activities and transportation
            trip_context: Trip dates and travelers
            target_currency: Display currency (default: settings display currency)

        Returns:
            PricingUpdate in target_currency

        Raises:
            PricingCalculationError: Engine or conversion failure
        """
        start_time = time.monotonic()
        currency = target_currency or self._settings.default_display_currency
        cache_key = self._cache.make_key(selected_items, trip_context, currency)

        trip_shape = {
            "trip_days": (trip_context.end_date - trip_context.start_date).days + 1,
            "item_count": sum(len(ids) for ids in selected_items.sorted_ids()),
        }

        cached = self._cache.get(cache_key, self._clock())
        if cached is not None:
            self._metrics.inc_cache_hit()
            self._record(
                "cache_hit", cache_key, currency, start_time, cached.total.amount, **trip_shape
            )
            return cached

        try:
            itinerary = self.build_itinerary(selected_items, trip_context)
            cost_breakdown = await self._engine.calculate(itinerary)
            update = self._to_pricing_update(cost_breakdown, currency)
        except Exception as e:
            self._record(
                "error", cache_key, currency, start_time, None, type(e).__name__, **trip_shape
            )
            logger.error("Pricing calculation error: %s", e)
            raise PricingCalculationError("Failed to calculate pricing") from e

        self._cache.set(cache_key, update, self._clock())
        self._record("success", cache_key, currency, start_time, update.total.amount, **trip_shape)
        return update

    def _record(
        self,
        outcome: str,
        cache_key: str,
        currency: str,
        start_time: float,
        total_amount: float | None = None,
        error_reason: str | None = None,
        *,
        trip_days: int,
        item_count: int,
    ) -> None:
        elapsed_ms = (time.monotonic() - start_time) * 1000
        self._metrics.inc_calculation(outcome)
        self._metrics.record_latency(outcome, elapsed_ms)
        self._logger.log_calculation(
            cache_key,
            currency,
            outcome,
            elapsed_ms,
            session_id=self._session_id,
            trip_days=trip_days,
            item_count=item_count,
            total_amount=total_amount,
            error_reason=error_reason,
        )

    def build_itinerary(
        self, selected_items: SelectedItems, trip_context: TripContext
    ) -> Itinerary:
        """Lay the selection out over every day of the trip.

        Dated components land on their date (clamped into the trip range);
        undated activities and legs are spread round-robin by position.
        Accommodation is the stay covering the day, else the i-th undated
        accommodation clamped to the last, else None (placeholder rate).
        """
        days = trip_context.days()
        undated_stays = [
            a for a in selected_items.accommodations if a.check_in is None or a.check_out is None
        ]

        activities_by_day: list[list[Activity]] = [[] for _ in days]
        for index, activity in enumerate(selected_items.activities):
            activities_by_day[_day_index(activity.scheduled_date, index, days)].append(activity)

        legs_by_day: list[list[Transportation]] = [[] for _ in days]
        for index, leg in enumerate(selected_items.transportation):
            legs_by_day[_day_index(leg.travel_date, index, days)].append(leg)

        itinerary_days = [
            ItineraryDay(
                day_number=i + 1,
                date=day,
                accommodation=_accommodation_for(
                    selected_items.accommodations, undated_stays, day, i
                ),
                activities=activities_by_day[i],
                transportation=legs_by_day[i],
            )
            for i, day in enumerate(days)
        ]
        return Itinerary(days=itinerary_days, travelers=trip_context.travelers)

    def convert_update(self, update: PricingUpdate, target_currency: str) -> PricingUpdate:
        """Re-express an existing update in another currency.

        Keeps confidence and timestamp; same currency returns the update as is.
        """
        if update.currency == target_currency:
            return update

        cost = CostBreakdown(
            total=update.total,
            by_category=update.breakdown,
            by_day=update.by_day,
            confidence=update.confidence,
        )
        return self._to_pricing_update(cost, target_currency, timestamp=update.timestamp)

    def stats(self) -> dict[str, Any]:
        """Calculator statistics for diagnostics."""
        return {
            "cache_size": len(self._cache),
            "cache_ttl_seconds": self._cache.ttl_seconds,
            "base_currency": self._table.base_currency,
            "supported_currencies": self._table.supported_codes(),
        }

    def _to_pricing_update(
        self,
        cost: CostBreakdown,
        currency: str,
        timestamp: datetime | None = None,
    ) -> PricingUpdate:
        breakdown = self._convert_breakdown(cost.by_category, currency)
        days = [
            (day.date, self._convert_breakdown(day.breakdown, currency)) for day in cost.by_day
        ]
        days = self._reconcile_days(days, breakdown, currency)

        return PricingUpdate(
            total=Money(
                amount=self._sum(breakdown.amounts().values(), currency), currency=currency
            ),
            breakdown=breakdown,
            by_day=[
                DayPricing(
                    date=day,
                    total=Money(
                        amount=self._sum(day_breakdown.amounts().values(), currency),
                        currency=currency,
                    ),
                    breakdown=day_breakdown,
                )
                for day, day_breakdown in days
            ],
            confidence=cost.confidence,
            timestamp=timestamp or self._clock(),
        )

    def _convert_breakdown(self, breakdown: CategoryBreakdown, currency: str) -> CategoryBreakdown:
        converted = {}
        for category in PricingCategory:
            money = self._table.convert(breakdown.get(category), currency)
            converted[category.value] = Money(
                amount=self._table.round_amount(money.amount, currency), currency=currency
            )
        return CategoryBreakdown(**converted)

    def _reconcile_days(
        self,
        days: list[tuple[date, CategoryBreakdown]],
        breakdown: CategoryBreakdown,
        currency: str,
    ) -> list[tuple[date, CategoryBreakdown]]:
        """Push per-category rounding residuals onto the costliest day."""
        if not days:
            return days

        adjusted = [dict(day_breakdown.amounts()) for _, day_breakdown in days]
        for category, trip_amount in breakdown.amounts().items():
            residual = trip_amount - sum(a[category] for a in adjusted)
            if self._table.round_amount(residual, currency) == 0:
                continue
            target = max(range(len(adjusted)), key=lambda i: adjusted[i][category])
            adjusted[target][category] = self._table.round_amount(
                max(0.0, adjusted[target][category] + residual), currency
            )

        return [
            (
                day,
                CategoryBreakdown(
                    **{k: Money(amount=v, currency=currency) for k, v in amounts.items()}
                ),
            )
            for (day, _), amounts in zip(days, adjusted)
        ]

    def _sum(self, amounts: Any, currency: str) -> float:
        return self._table.round_amount(sum(amounts), currency)


def _day_index(scheduled: date | None, position: int, days: list[date]) -> int:
    if scheduled is None:
        return position % len(days)
    if scheduled <= days[0]:
        return 0
    if scheduled >= days[-1]:
        return len(days) - 1
    return (scheduled - days[0]).days


def _accommodation_for(
    accommodations: list[Accommodation],
    undated: list[Accommodation],
    day: date,
    index: int,
) -> Accommodation | None:
    for stay in accommodations:
        if stay.covers(day):
            return stay
    if undated:
        return undated[min(index, len(undated) - 1)]
    return None
