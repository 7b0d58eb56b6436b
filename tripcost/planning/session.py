"""Planning session - owns one calculator and one history tracker.

All calculator and conversion failures are turned into an `error` string on
the session state; nothing raised by the pricing core escapes to callers.
Every calculation carries a request token, and responses whose token is no
longer the latest issued are discarded.
"""

import itertools
import logging
import uuid
from dataclasses import dataclass

from pydantic import BaseModel

from tripcost.currency.table import CurrencyOption, UnknownCurrencyError
from tripcost.history.tracker import PricingHistoryTracker
from tripcost.models.history import ChangeDescriptor, PriceComparison, PricingHistory
from tripcost.models.pricing import PricingUpdate
from tripcost.models.selection import SelectedItems, TripContext
from tripcost.pricing.calculator import PricingCalculationError, PricingCalculator

logger = logging.getLogger(__name__)

CONVERSION_ERROR = "Failed to convert currency"


class CurrencyInfo(BaseModel):
    """Currency picker entry."""

    code: str
    symbol: str
    name: str
    rate: float

    @classmethod
    def from_option(cls, option: CurrencyOption) -> "CurrencyInfo":
        return cls(code=option.code, symbol=option.symbol, name=option.name, rate=option.rate)


class SessionState(BaseModel):
    """Snapshot of a session for display."""

    session_id: str
    current_pricing: PricingUpdate | None
    history: PricingHistory | None
    is_calculating: bool
    error: str | None
    selected_currency: str
    available_currencies: list[CurrencyInfo]


@dataclass(frozen=True)
class RequestToken:
    """Identifies one calculation request within a session."""

    value: int


class PlanningSession:
    """Pricing state of one trip-planning session."""

    def __init__(
        self,
        calculator: PricingCalculator | None = None,
        tracker: PricingHistoryTracker | None = None,
        *,
        session_id: str | None = None,
        currency: str | None = None,
    ) -> None:
        self.session_id = session_id or str(uuid.uuid4())
        self._calculator = calculator or PricingCalculator(session_id=self.session_id)
        self._tracker = tracker or PricingHistoryTracker()
        self._selected_currency = currency or self._calculator.currency_table.base_currency
        self._current_pricing: PricingUpdate | None = None
        self._is_calculating = False
        self._error: str | None = None
        self._token_counter = itertools.count(1)
        self._latest_token = RequestToken(0)

    @property
    def calculator(self) -> PricingCalculator:
        return self._calculator

    @property
    def current_pricing(self) -> PricingUpdate | None:
        return self._current_pricing

    @property
    def history(self) -> PricingHistory | None:
        return self._tracker.history

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def is_calculating(self) -> bool:
        return self._is_calculating

    @property
    def selected_currency(self) -> str:
        return self._selected_currency

    def state(self) -> SessionState:
        return SessionState(
            session_id=self.session_id,
            current_pricing=self._current_pricing,
            history=self._tracker.history,
            is_calculating=self._is_calculating,
            error=self._error,
            selected_currency=self._selected_currency,
            available_currencies=[
                CurrencyInfo.from_option(o) for o in self._calculator.currency_table.options()
            ],
        )

    def _issue_token(self) -> RequestToken:
        self._latest_token = RequestToken(next(self._token_counter))
        return self._latest_token

    def _is_latest(self, token: RequestToken) -> bool:
        return token == self._latest_token

    async def calculate_pricing(
        self,
        selected_items: SelectedItems,
        trip_context: TripContext,
        change: ChangeDescriptor | None = None,
    ) -> PricingUpdate | None:
        """Recalculate pricing and record it in the history.

        Args:
            selected_items: Current selection
            trip_context: Trip dates and travelers
            change: What triggered the recalculation

        Returns:
            The applied PricingUpdate, or None on failure or when the response
            was superseded by a newer request
        """
        token = self._issue_token()
        self._is_calculating = True
        self._error = None

        try:
            pricing = await self._calculator.calculate_pricing(
                selected_items, trip_context, self._selected_currency
            )
        except PricingCalculationError as e:
            if self._is_latest(token):
                self._is_calculating = False
                self._error = str(e)
            return None

        if not self._is_latest(token):
            self._calculator.metrics.inc_stale_response()
            logger.warning(
                "Discarding stale pricing response",
                extra={
                    "structured": {
                        "session_id": self.session_id,
                        "token": token.value,
                        "latest_token": self._latest_token.value,
                    }
                },
            )
            return None

        if pricing.currency != self._selected_currency:
            # Display currency switched while this request was in flight
            try:
                pricing = self._calculator.convert_update(pricing, self._selected_currency)
            except (UnknownCurrencyError, ValueError) as e:
                logger.error("Currency conversion error: %s", e)
                self._is_calculating = False
                self._error = CONVERSION_ERROR
                return None

        self._tracker.record_update(pricing, change)
        self._current_pricing = pricing
        self._is_calculating = False
        return pricing

    def change_currency(self, new_currency: str) -> None:
        """Switch display currency, converting current pricing and history.

        A calculation still in flight stays pending; its result is converted
        to the new currency when it arrives.
        """
        if new_currency == self._selected_currency:
            return

        table = self._calculator.currency_table

        try:
            table.rate(new_currency)
            converted = (
                self._calculator.convert_update(self._current_pricing, new_currency)
                if self._current_pricing is not None
                else None
            )
            self._tracker.reexpress(
                lambda update: self._calculator.convert_update(update, new_currency)
            )
        except (UnknownCurrencyError, ValueError) as e:
            logger.error("Currency conversion error: %s", e)
            self._error = CONVERSION_ERROR
            return

        self._selected_currency = new_currency
        self._current_pricing = converted
        self._error = None

    def get_price_comparison(self) -> PriceComparison | None:
        """Comparison between original and current pricing, None without history."""
        return self._tracker.comparison()

    def reset_history(self) -> None:
        self._tracker.reset_history()

    def clear_pricing(self) -> None:
        """Drop current pricing, history and error."""
        self._current_pricing = None
        self._tracker.reset_history()
        self._error = None

    def close(self) -> None:
        """Release session resources."""
        self._issue_token()
        self._calculator.cache.clear()
