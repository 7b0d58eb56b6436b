"""Unit tests for the default itinerary cost engine."""

from datetime import date

import pytest

from tripcost.config import Settings
from tripcost.currency.table import CurrencyTable
from tripcost.models import (
    Accommodation,
    Activity,
    Itinerary,
    ItineraryDay,
    Money,
    Transportation,
    Travelers,
)
from tripcost.pricing.engine import DefaultCostEngine


def _day(
    n: int,
    accommodation: Accommodation | None = None,
    activities: list[Activity] | None = None,
    legs: list[Transportation] | None = None,
) -> ItineraryDay:
    return ItineraryDay(
        day_number=n,
        date=date(2025, 6, 9 + n),
        accommodation=accommodation,
        activities=activities or [],
        transportation=legs or [],
    )


HOTEL = Accommodation(id="h1", name="Hotel", estimated_cost=Money(amount=170, currency="EUR"))
MUSEUM = Activity(id="a1", name="Museum", estimated_cost=Money(amount=40, currency="USD"))
TRAIN = Transportation(
    id="t1", name="Train", estimated_cost=Money(amount=60, currency="USD"), confidence=0.95
)


@pytest.mark.asyncio
async def test_sums_components_in_base_currency(
    table: CurrencyTable, bare_settings: Settings
) -> None:
    engine = DefaultCostEngine(table, bare_settings)
    itinerary = Itinerary(
        days=[_day(1, HOTEL, [MUSEUM], [TRAIN])], travelers=Travelers(adults=2)
    )

    result = await engine.calculate(itinerary)

    assert result.total.currency == "USD"
    assert result.by_category.accommodations.amount == pytest.approx(200.0)
    assert result.by_category.activities.amount == pytest.approx(40.0)
    assert result.by_category.transportation.amount == pytest.approx(60.0)
    assert result.total.amount == pytest.approx(300.0)
    assert len(result.by_day) == 1
    assert result.by_day[0].total.amount == pytest.approx(300.0)


@pytest.mark.asyncio
async def test_placeholder_accommodation_and_misc(table: CurrencyTable) -> None:
    settings = Settings(placeholder_nightly_rate=100, misc_percentage=10, include_meals=False)
    engine = DefaultCostEngine(table, settings)
    itinerary = Itinerary(days=[_day(1, None, [MUSEUM]), _day(2)], travelers=Travelers())

    result = await engine.calculate(itinerary)

    assert result.by_day[0].breakdown.accommodations.amount == 100
    assert result.by_day[0].breakdown.miscellaneous.amount == pytest.approx(14.0)
    assert result.by_day[1].total.amount == pytest.approx(110.0)
    assert result.total.amount == pytest.approx(154.0 + 110.0)


@pytest.mark.asyncio
async def test_meals_scale_with_travelers(table: CurrencyTable) -> None:
    settings = Settings(placeholder_nightly_rate=0, misc_percentage=0, include_meals=True)
    engine = DefaultCostEngine(table, settings)
    itinerary = Itinerary(
        days=[_day(1), _day(2)], travelers=Travelers(adults=2, children=1, infants=0)
    )

    result = await engine.calculate(itinerary)

    # (15 + 25 + 40) per person per day
    assert result.by_category.meals.amount == pytest.approx(80 * 3 * 2)


@pytest.mark.asyncio
async def test_confidence_is_mean_of_components(
    table: CurrencyTable, bare_settings: Settings
) -> None:
    engine = DefaultCostEngine(table, bare_settings)
    itinerary = Itinerary(days=[_day(1, None, [MUSEUM], [TRAIN])], travelers=Travelers())

    result = await engine.calculate(itinerary)

    assert result.confidence == pytest.approx((0.70 + 0.95) / 2)


@pytest.mark.asyncio
async def test_empty_itinerary_uses_fallback_confidence(
    table: CurrencyTable, bare_settings: Settings
) -> None:
    engine = DefaultCostEngine(table, bare_settings)

    result = await engine.calculate(Itinerary(days=[_day(1)], travelers=Travelers()))

    assert result.total.amount == 0
    assert result.confidence == 0.5
