"""Currency table endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from tripcost.currency.table import UnknownCurrencyError
from tripcost.models.common import Money
from tripcost.planning.session import CurrencyInfo
from tripcost.planning.store import InMemorySessionStore, get_session_store

router = APIRouter(prefix="/currencies", tags=["currencies"])

StoreDep = Annotated[InMemorySessionStore, Depends(get_session_store)]


@router.get("", response_model=list[CurrencyInfo])
async def list_currencies(store: StoreDep) -> list[CurrencyInfo]:
    """Supported display currencies with rates relative to the base currency."""
    return [CurrencyInfo.from_option(o) for o in store.currency_table.options()]


@router.post("/convert", response_model=Money)
async def convert(amount: Money, target: str, store: StoreDep) -> Money:
    try:
        return store.currency_table.convert(amount, target)
    except UnknownCurrencyError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
