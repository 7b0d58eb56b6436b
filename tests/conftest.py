"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable
from datetime import date, datetime, timedelta

import pytest

from tripcost.config import Settings
from tripcost.currency.table import CurrencyTable, build_currency_table
from tripcost.models import CategoryBreakdown, DayPricing, Money, PricingUpdate


class FakeClock:
    """Manually advanced clock for cache TTL and timestamp tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 6, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def bare_settings() -> Settings:
    """Settings without placeholder accommodation or miscellaneous surcharge.

    With these, a trip costs exactly the sum of its selected items.
    """
    return Settings(placeholder_nightly_rate=0, misc_percentage=0, include_meals=False)


@pytest.fixture
def table() -> CurrencyTable:
    return build_currency_table()


@pytest.fixture
def make_update() -> Callable[..., PricingUpdate]:
    """Factory for single-day updates with the whole total under activities."""

    def _make(
        total: float,
        currency: str = "USD",
        accommodations: float = 0.0,
        timestamp: datetime | None = None,
    ) -> PricingUpdate:
        activities = total - accommodations
        breakdown = CategoryBreakdown(
            accommodations=Money(amount=accommodations, currency=currency),
            activities=Money(amount=activities, currency=currency),
            transportation=Money(amount=0, currency=currency),
            meals=Money(amount=0, currency=currency),
            miscellaneous=Money(amount=0, currency=currency),
        )
        return PricingUpdate(
            total=Money(amount=total, currency=currency),
            breakdown=breakdown,
            by_day=[
                DayPricing(
                    date=date(2025, 6, 10),
                    total=Money(amount=total, currency=currency),
                    breakdown=breakdown,
                )
            ],
            confidence=0.7,
            timestamp=timestamp or datetime(2025, 6, 1, 12, 0, 0),
        )

    return _make
