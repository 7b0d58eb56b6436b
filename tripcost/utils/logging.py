"""Structured logging for pricing calculations."""

import logging
from typing import Any

logger = logging.getLogger(__name__)

# Anything not listed (error) is logged as a warning
_OUTCOME_LEVELS = {"success": logging.INFO, "cache_hit": logging.DEBUG}


class StructuredPricingLogger:
    """Structured logger for pricing calculations.

    Each record carries the trip shape (days, selected items) next to the
    outcome, so a slow or failing calculation can be tied to the size of the
    selection that caused it.
    """

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
        structured: dict[str, Any] = {
            "session_id": session_id,
            "cache_key": cache_key.removeprefix("pricing:")[:12],
            "currency": currency,
            "outcome": outcome,
            "trip_days": trip_days,
            "item_count": item_count,
            "latency_ms": round(latency_ms, 2),
        }
        if total_amount is not None:
            structured["total"] = total_amount
        if error_reason:
            structured["error_reason"] = error_reason

        logger.log(
            _OUTCOME_LEVELS.get(outcome, logging.WARNING),
            "Priced %d items over %d days in %s: %s",
            item_count,
            trip_days,
            currency,
            outcome,
            extra={"structured": structured},
        )
