"""Unit tests for the planning session.

Tests cover:
1. Baseline and history recording through the session
2. Error surface (error string, never raised)
3. Stale response discarding
4. Currency switching, including a switch while a calculation is in flight
"""

import asyncio
from datetime import date

import pytest

from tests.conftest import FakeClock
from tripcost.config import Settings
from tripcost.currency.table import CurrencyTable, build_currency_table
from tripcost.history.tracker import PricingHistoryTracker
from tripcost.models import (
    Activity,
    ChangeDescriptor,
    ChangeType,
    CostBreakdown,
    Itinerary,
    Money,
    SelectedItems,
    TripContext,
)
from tripcost.planning.session import CONVERSION_ERROR, PlanningSession
from tripcost.pricing.calculator import PricingCalculator, PricingMetrics
from tripcost.pricing.engine import DefaultCostEngine

CONTEXT = TripContext(start_date=date(2025, 6, 10), end_date=date(2025, 6, 10))


def _selection(amount: float, currency: str = "EUR", id: str = "louvre") -> SelectedItems:
    return SelectedItems(
        activities=[
            Activity(id=id, name="Louvre", estimated_cost=Money(amount=amount, currency=currency))
        ]
    )


class RecordingMetrics(PricingMetrics):
    def __init__(self) -> None:
        self.stale = 0

    def inc_stale_response(self) -> None:
        self.stale += 1


class BrokenEngine:
    async def calculate(self, itinerary: Itinerary) -> CostBreakdown:
        raise RuntimeError("rate service unavailable")


class GatedEngine:
    """Holds one calculation (the first by default) until released."""

    def __init__(self, table: CurrencyTable, settings: Settings, hold_call: int = 1) -> None:
        self._inner = DefaultCostEngine(table, settings)
        self.release = asyncio.Event()
        self.hold_call = hold_call
        self.calls = 0

    async def calculate(self, itinerary: Itinerary) -> CostBreakdown:
        self.calls += 1
        if self.calls == self.hold_call:
            await self.release.wait()
        return await self._inner.calculate(itinerary)


def _session(
    table: CurrencyTable,
    settings: Settings,
    clock: FakeClock,
    engine: object | None = None,
    metrics: PricingMetrics | None = None,
    currency: str = "USD",
) -> PlanningSession:
    calculator = PricingCalculator(
        engine or DefaultCostEngine(table, settings),
        table,
        settings=settings,
        metrics=metrics,
        clock=clock,
    )
    return PlanningSession(
        calculator, PricingHistoryTracker(clock), session_id="s-1", currency=currency
    )


@pytest.fixture
def session(table: CurrencyTable, bare_settings: Settings, clock: FakeClock) -> PlanningSession:
    return _session(table, bare_settings, clock)


class TestCalculatePricing:
    """Test recalculation through the session."""

    @pytest.mark.asyncio
    async def test_first_calculation_sets_baseline(self, session: PlanningSession) -> None:
        pricing = await session.calculate_pricing(_selection(100), CONTEXT)

        assert pricing is not None
        assert pricing.total.amount == pytest.approx(117.65)
        assert session.current_pricing is pricing
        assert session.history.original is pricing
        assert session.history.changes == []
        assert not session.is_calculating
        assert session.error is None

    @pytest.mark.asyncio
    async def test_selection_change_is_recorded(
        self, session: PlanningSession, clock: FakeClock
    ) -> None:
        await session.calculate_pricing(_selection(1000, "USD"), CONTEXT)
        clock.advance(1)

        await session.calculate_pricing(
            _selection(850, "USD", id="orsay"),
            CONTEXT,
            ChangeDescriptor(change_type=ChangeType.modify, component_name="Musee d'Orsay"),
        )

        history = session.history
        assert history.original.total.amount == 1000
        assert history.current.total.amount == 850
        assert history.changes[0].price_difference.amount == -150
        assert history.changes[0].component_name == "Musee d'Orsay"

        comparison = session.get_price_comparison()
        assert comparison.total_difference.amount == -150
        assert comparison.percentage_change == pytest.approx(-15.0)

    @pytest.mark.asyncio
    async def test_engine_failure_becomes_error_string(
        self, table: CurrencyTable, bare_settings: Settings, clock: FakeClock
    ) -> None:
        session = _session(table, bare_settings, clock, engine=BrokenEngine())

        result = await session.calculate_pricing(_selection(100), CONTEXT)

        assert result is None
        assert session.error == "Failed to calculate pricing"
        assert not session.is_calculating
        assert session.current_pricing is None
        assert session.history is None

    @pytest.mark.asyncio
    async def test_successful_calculation_clears_previous_error(
        self, bare_settings: Settings, clock: FakeClock
    ) -> None:
        strict = build_currency_table(unknown_policy="strict")
        session = _session(strict, bare_settings, clock)
        session.change_currency("XYZ")
        assert session.error == CONVERSION_ERROR

        await session.calculate_pricing(_selection(100), CONTEXT)

        assert session.error is None

    @pytest.mark.asyncio
    async def test_stale_response_is_discarded(
        self, table: CurrencyTable, bare_settings: Settings, clock: FakeClock
    ) -> None:
        engine = GatedEngine(table, bare_settings)
        metrics = RecordingMetrics()
        session = _session(table, bare_settings, clock, engine=engine, metrics=metrics)

        slow = asyncio.create_task(session.calculate_pricing(_selection(100, "USD"), CONTEXT))
        await asyncio.sleep(0)
        assert session.is_calculating

        fast = await session.calculate_pricing(_selection(300, "USD", id="opera"), CONTEXT)
        engine.release.set()
        stale = await slow

        assert stale is None
        assert fast is not None
        assert session.current_pricing is fast
        assert session.current_pricing.total.amount == 300
        assert session.history.original is fast
        assert metrics.stale == 1
        assert not session.is_calculating


class TestChangeCurrency:
    """Test currency switching."""

    @pytest.mark.asyncio
    async def test_converts_current_pricing_and_history(self, session: PlanningSession) -> None:
        first = await session.calculate_pricing(_selection(100), CONTEXT)

        session.change_currency("EUR")

        assert session.selected_currency == "EUR"
        assert session.current_pricing.total.currency == "EUR"
        assert session.current_pricing.total.amount == pytest.approx(100.0)
        assert session.history.original is first
        assert session.history.original.total.currency == "USD"
        assert session.history.baseline.total == Money(amount=100.0, currency="EUR")
        assert session.get_price_comparison().total_difference.amount == 0
        assert session.error is None

    @pytest.mark.asyncio
    async def test_next_calculation_uses_new_currency(self, session: PlanningSession) -> None:
        await session.calculate_pricing(_selection(100, "USD"), CONTEXT)
        session.change_currency("GBP")

        pricing = await session.calculate_pricing(_selection(200, "USD", id="opera"), CONTEXT)

        assert pricing.total.currency == "GBP"
        assert pricing.total.amount == 146.0
        assert session.history.changes[0].price_difference.currency == "GBP"
        assert session.history.changes[0].price_difference.amount == 73.0

    @pytest.mark.asyncio
    async def test_in_flight_edit_survives_currency_switch(
        self, table: CurrencyTable, bare_settings: Settings, clock: FakeClock
    ) -> None:
        engine = GatedEngine(table, bare_settings, hold_call=2)
        metrics = RecordingMetrics()
        session = _session(table, bare_settings, clock, engine=engine, metrics=metrics)
        first = await session.calculate_pricing(_selection(100), CONTEXT)
        assert first.total.amount == pytest.approx(117.65)

        edit = asyncio.create_task(session.calculate_pricing(_selection(200, id="orsay"), CONTEXT))
        await asyncio.sleep(0)
        session.change_currency("EUR")

        assert session.is_calculating
        assert session.current_pricing.total == Money(amount=100.0, currency="EUR")

        engine.release.set()
        result = await edit

        assert result is not None
        assert result.total == Money(amount=200.0, currency="EUR")
        assert session.current_pricing is result
        assert not session.is_calculating
        assert session.error is None
        assert metrics.stale == 0
        history = session.history
        assert history.original is first
        assert history.changes[0].price_difference.amount == 100.0
        assert history.changes[0].price_difference.currency == "EUR"

    def test_change_without_pricing(self, session: PlanningSession) -> None:
        session.change_currency("JPY")

        assert session.selected_currency == "JPY"
        assert session.current_pricing is None

    @pytest.mark.asyncio
    async def test_unknown_currency_in_strict_mode(
        self, bare_settings: Settings, clock: FakeClock
    ) -> None:
        strict = build_currency_table(unknown_policy="strict")
        session = _session(strict, bare_settings, clock)
        pricing = await session.calculate_pricing(_selection(100, "USD"), CONTEXT)

        session.change_currency("XYZ")

        assert session.error == CONVERSION_ERROR
        assert session.selected_currency == "USD"
        assert session.current_pricing is pricing

    def test_state_lists_available_currencies(self, session: PlanningSession) -> None:
        state = session.state()

        assert state.session_id == "s-1"
        assert state.selected_currency == "USD"
        assert [c.code for c in state.available_currencies] == [
            "USD",
            "EUR",
            "GBP",
            "JPY",
            "CAD",
            "AUD",
        ]


class TestResetAndClear:
    """Test history reset and pricing clear."""

    @pytest.mark.asyncio
    async def test_reset_history_keeps_current(self, session: PlanningSession) -> None:
        pricing = await session.calculate_pricing(_selection(100), CONTEXT)

        session.reset_history()

        assert session.history is None
        assert session.get_price_comparison() is None
        assert session.current_pricing is pricing

    @pytest.mark.asyncio
    async def test_clear_pricing(self, session: PlanningSession) -> None:
        await session.calculate_pricing(_selection(100), CONTEXT)

        session.clear_pricing()

        state = session.state()
        assert state.current_pricing is None
        assert state.history is None
        assert state.error is None

    @pytest.mark.asyncio
    async def test_close_discards_in_flight_result(
        self, table: CurrencyTable, bare_settings: Settings, clock: FakeClock
    ) -> None:
        engine = GatedEngine(table, bare_settings)
        session = _session(table, bare_settings, clock, engine=engine)

        pending = asyncio.create_task(session.calculate_pricing(_selection(100), CONTEXT))
        await asyncio.sleep(0)
        session.close()
        assert len(session.calculator.cache) == 0
        engine.release.set()

        assert await pending is None
        assert session.current_pricing is None
