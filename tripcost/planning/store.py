"""In-memory registry of planning sessions."""

import logging
import uuid

from tripcost.config import Settings, get_settings
from tripcost.currency.table import CurrencyTable, build_currency_table
from tripcost.planning.session import PlanningSession
from tripcost.pricing.calculator import PricingCalculator
from tripcost.utils.logging import StructuredPricingLogger
from tripcost.utils.metrics import PrometheusPricingMetrics

logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """No session with this id."""

    pass


class InMemorySessionStore:
    """Creates, looks up and discards planning sessions.

    Each session gets its own calculator and cache; only the read-only
    currency table is shared.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._table: CurrencyTable = build_currency_table(
            base_currency=self._settings.base_currency,
            unknown_policy=self._settings.unknown_currency_policy,
        )
        self._sessions: dict[str, PlanningSession] = {}

    @property
    def currency_table(self) -> CurrencyTable:
        return self._table

    def create(self, currency: str | None = None) -> PlanningSession:
        """Start a new session with Prometheus metrics and structured logs."""
        session_id = str(uuid.uuid4())
        calculator = PricingCalculator(
            currency_table=self._table,
            settings=self._settings,
            metrics=PrometheusPricingMetrics(),
            pricing_logger=StructuredPricingLogger(),
            session_id=session_id,
        )
        session = PlanningSession(
            calculator,
            session_id=session_id,
            currency=currency or self._settings.default_display_currency,
        )
        self._sessions[session_id] = session
        logger.info("Planning session started", extra={"structured": {"session_id": session_id}})
        return session

    def get(self, session_id: str) -> PlanningSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def delete(self, session_id: str) -> None:
        """End a session and drop its cache."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        session.close()
        logger.info("Planning session ended", extra={"structured": {"session_id": session_id}})

    def clear(self) -> None:
        """End all sessions (useful for testing)."""
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


_global_session_store: InMemorySessionStore | None = None


def get_session_store() -> InMemorySessionStore:
    """Get the process-wide session store instance."""
    global _global_session_store
    if _global_session_store is None:
        _global_session_store = InMemorySessionStore()
    return _global_session_store
