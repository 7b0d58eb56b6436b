"""Pricing history tracking for one planning session.

History is append-only and diff-based: it keeps the first update as the
baseline, the latest update as current, and one change record per detected
total change.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from tripcost.currency.table import round_half_up
from tripcost.models.common import PricingCategory, SignedMoney
from tripcost.models.history import (
    CategoryChange,
    ChangeDescriptor,
    ChangeRecord,
    PriceComparison,
    PricingHistory,
)
from tripcost.models.pricing import PricingUpdate

logger = logging.getLogger(__name__)


class HistoryCurrencyMismatchError(Exception):
    """Update currency differs from the tracked history currency."""

    pass


def _percentage(difference: float, original: float) -> float:
    return (difference / original) * 100 if original > 0 else 0.0


def create_price_comparison(original: PricingUpdate, current: PricingUpdate) -> PriceComparison:
    """Compare two updates expressed in the same currency.

    Args:
        original: Baseline update
        current: Latest update

    Returns:
        PriceComparison with total and per-category deltas; percentages are 0
        where the original amount is 0
    """
    currency = current.total.currency
    total_diff = current.total.amount - original.total.amount

    category_changes: dict[str, CategoryChange] = {}
    for category in PricingCategory:
        current_amount = current.breakdown.get(category).amount
        original_amount = original.breakdown.get(category).amount
        diff = current_amount - original_amount
        category_changes[category.value] = CategoryChange(
            amount=SignedMoney(amount=round_half_up(diff), currency=currency),
            percentage=_percentage(diff, original_amount),
        )

    return PriceComparison(
        total_difference=SignedMoney(amount=round_half_up(total_diff), currency=currency),
        percentage_change=_percentage(total_diff, original.total.amount),
        category_changes=category_changes,
    )


class PricingHistoryTracker:
    """Records successive pricing updates of a session."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or datetime.now
        self._history: PricingHistory | None = None

    @property
    def history(self) -> PricingHistory | None:
        return self._history

    def record_update(
        self,
        update: PricingUpdate,
        change: ChangeDescriptor | None = None,
    ) -> PricingHistory:
        """Record a new update.

        The first update becomes the baseline. Later updates always become
        current; a change record is appended only when the total moved.

        Args:
            update: Newly computed pricing
            change: What triggered the recalculation (default: generic modify)

        Returns:
            The updated history

        Raises:
            HistoryCurrencyMismatchError: Update is in a different currency
        """
        if self._history is None:
            self._history = PricingHistory(original=update, current=update, changes=[])
            return self._history

        previous = self._history.current
        if previous.total.currency != update.total.currency:
            raise HistoryCurrencyMismatchError(
                f"history is in {previous.total.currency}, update is in {update.total.currency}"
            )

        changes = self._history.changes
        difference = update.total.amount - previous.total.amount
        if round_half_up(difference) != 0:
            descriptor = change or ChangeDescriptor()
            record = ChangeRecord(
                timestamp=self._clock(),
                change_type=descriptor.change_type,
                component=descriptor.component,
                component_name=descriptor.component_name,
                price_difference=SignedMoney(
                    amount=round_half_up(difference), currency=update.total.currency
                ),
                new_total=update.total,
            )
            changes = [*changes, record]
            logger.info(
                "Price change recorded: %s",
                descriptor.component_name,
                extra={
                    "structured": {
                        "change_type": descriptor.change_type.value,
                        "component": descriptor.component.value,
                        "price_difference": record.price_difference.amount,
                        "new_total": update.total.amount,
                    }
                },
            )

        self._history = self._history.model_copy(update={"current": update, "changes": changes})
        return self._history

    def reset_history(self) -> None:
        """Clear history; the next update starts a new baseline."""
        self._history = None

    def comparison(self) -> PriceComparison | None:
        """Compare the baseline with current, None without history."""
        if self._history is None:
            return None
        return create_price_comparison(self._history.baseline, self._history.current)

    def changes_newest_first(self) -> list[ChangeRecord]:
        """Change records sorted for display, latest first."""
        if self._history is None:
            return []
        return sorted(self._history.changes, key=lambda c: c.timestamp, reverse=True)

    def reexpress(
        self, convert_update: Callable[[PricingUpdate], PricingUpdate]
    ) -> PricingHistory | None:
        """Follow a display currency switch.

        Current pricing is converted so later updates diff against it. The
        original update and the recorded changes stay as they were; the
        original is re-expressed separately as `display_original`.

        Args:
            convert_update: Converts a PricingUpdate into the new currency

        Returns:
            Updated history, None without history
        """
        if self._history is None:
            return None

        current = convert_update(self._history.current)
        display_original = convert_update(self._history.original)
        if display_original is self._history.original:
            display_original = None

        self._history = self._history.model_copy(
            update={"current": current, "display_original": display_original}
        )
        return self._history
