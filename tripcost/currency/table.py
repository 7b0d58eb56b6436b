"""Static currency table and conversion through the base currency.

Rates express the value of one unit of base currency in each currency, so
converting goes `amount / rate[from] * rate[to]`. The table never mutates
after construction and is shared by every calculation without locking.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Literal, TypeVar

from tripcost.models.common import Money, SignedMoney

logger = logging.getLogger(__name__)

M = TypeVar("M", Money, SignedMoney)

UnknownCurrencyPolicy = Literal["fallback", "strict"]


class UnknownCurrencyError(Exception):
    """Currency code is not in the table."""

    pass


def round_half_up(amount: float, digits: int = 2) -> float:
    """Round with ties away from zero (2.5 -> 3, 0.125 -> 0.13)."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class CurrencyOption:
    """Supported display currency."""

    code: str
    symbol: str
    name: str
    rate: float
    decimals: int = 2


CURRENCY_OPTIONS: tuple[CurrencyOption, ...] = (
    CurrencyOption(code="USD", symbol="$", name="US Dollar", rate=1.0),
    CurrencyOption(code="EUR", symbol="€", name="Euro", rate=0.85),
    CurrencyOption(code="GBP", symbol="£", name="British Pound", rate=0.73),
    CurrencyOption(code="JPY", symbol="¥", name="Japanese Yen", rate=110.0, decimals=0),
    CurrencyOption(code="CAD", symbol="C$", name="Canadian Dollar", rate=1.25),
    CurrencyOption(code="AUD", symbol="A$", name="Australian Dollar", rate=1.35),
)


class CurrencyTable:
    """Read-only currency table with conversion helpers."""

    def __init__(
        self,
        options: tuple[CurrencyOption, ...] = CURRENCY_OPTIONS,
        *,
        base_currency: str = "USD",
        unknown_policy: UnknownCurrencyPolicy = "fallback",
    ) -> None:
        """Initialize table.

        Args:
            options: Supported currencies; the base currency must have rate 1.0
            base_currency: Reference currency all rates are relative to
            unknown_policy: "fallback" treats unknown codes as rate 1.0,
                "strict" raises UnknownCurrencyError
        """
        self._by_code = MappingProxyType({o.code: o for o in options})
        self._base_currency = base_currency
        self._unknown_policy = unknown_policy

        base = self._by_code.get(base_currency)
        if base is None or base.rate != 1.0:
            raise ValueError(f"base currency {base_currency} must be in the table with rate 1.0")

    @property
    def base_currency(self) -> str:
        return self._base_currency

    def options(self) -> list[CurrencyOption]:
        return list(self._by_code.values())

    def supported_codes(self) -> list[str]:
        return list(self._by_code.keys())

    def is_supported(self, code: str) -> bool:
        return code in self._by_code

    def rate(self, code: str) -> float:
        """Rate for a currency, applying the unknown-currency policy."""
        option = self._by_code.get(code)
        if option is not None:
            return option.rate

        if self._unknown_policy == "strict":
            raise UnknownCurrencyError(f"Unsupported currency: {code}")

        logger.warning(
            "Unknown currency %s, converting at 1:1 with %s",
            code,
            self._base_currency,
            extra={"structured": {"currency": code, "policy": self._unknown_policy}},
        )
        return 1.0

    def decimals(self, code: str) -> int:
        option = self._by_code.get(code)
        return option.decimals if option is not None else 2

    def round_amount(self, amount: float, code: str) -> float:
        """Round to the currency's minor units (0 decimals for JPY)."""
        return round_half_up(amount, self.decimals(code))

    def convert_amount(self, amount: float, from_currency: str, to_currency: str) -> float:
        """Convert a raw amount without rounding."""
        if from_currency == to_currency:
            return amount
        return (amount / self.rate(from_currency)) * self.rate(to_currency)

    def to_base(self, money: Money | SignedMoney) -> float:
        """Unrounded amount in the base currency."""
        return self.convert_amount(money.amount, money.currency, self._base_currency)

    def convert(self, money: M, target_currency: str) -> M:
        """Convert money into target_currency.

        Same currency returns the input unchanged; otherwise the result is
        rounded to the target's minor units.
        """
        if money.currency == target_currency:
            return money

        converted = self.convert_amount(money.amount, money.currency, target_currency)
        return type(money)(
            amount=self.round_amount(converted, target_currency),
            currency=target_currency,
        )

    def format(self, money: Money | SignedMoney) -> str:
        """Human-readable amount with currency symbol."""
        option = self._by_code.get(money.currency)
        symbol = option.symbol if option is not None else f"{money.currency} "
        digits = self.decimals(money.currency)
        sign = "-" if money.amount < 0 else ""
        return f"{sign}{symbol}{abs(money.amount):,.{digits}f}"


def build_currency_table(
    base_currency: str = "USD",
    unknown_policy: UnknownCurrencyPolicy = "fallback",
) -> CurrencyTable:
    """Create a table over the built-in currency options."""
    return CurrencyTable(
        CURRENCY_OPTIONS, base_currency=base_currency, unknown_policy=unknown_policy
    )
