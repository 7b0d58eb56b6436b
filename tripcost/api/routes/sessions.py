"""Planning session endpoints - pricing, currency switching and history."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from tripcost.models.history import ChangeDescriptor, PriceComparison
from tripcost.models.selection import SelectedItems, TripContext
from tripcost.planning.session import PlanningSession, SessionState
from tripcost.planning.store import InMemorySessionStore, SessionNotFoundError, get_session_store

router = APIRouter(prefix="/sessions", tags=["sessions"])

StoreDep = Annotated[InMemorySessionStore, Depends(get_session_store)]


class CreateSessionRequest(BaseModel):
    """Request body for POST /sessions."""

    currency: str | None = Field(None, min_length=3, max_length=3, description="Display currency")


class CreateSessionResponse(BaseModel):
    """Response for POST /sessions."""

    session_id: str
    selected_currency: str


class PricingRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/pricing."""

    selected_items: SelectedItems
    trip_context: TripContext
    change: ChangeDescriptor | None = None


class CurrencyRequest(BaseModel):
    """Request body for PUT /sessions/{session_id}/currency."""

    currency: str = Field(..., min_length=1)


def _get_session(store: InMemorySessionStore, session_id: str) -> PlanningSession:
    try:
        return store.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post("", response_model=CreateSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(request: CreateSessionRequest, store: StoreDep) -> CreateSessionResponse:
    """Start a planning session with its own pricing cache and history."""
    session = store.create(currency=request.currency)
    return CreateSessionResponse(
        session_id=session.session_id, selected_currency=session.selected_currency
    )


@router.get("/{session_id}", response_model=SessionState)
async def get_session_state(session_id: str, store: StoreDep) -> SessionState:
    return _get_session(store, session_id).state()


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, store: StoreDep) -> Response:
    try:
        store.delete(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{session_id}/pricing", response_model=SessionState)
async def calculate_pricing(
    session_id: str, request: PricingRequest, store: StoreDep
) -> SessionState:
    """Recalculate pricing for the selection.

    Failures are reported in the `error` field of the returned state, not as
    an HTTP error.
    """
    session = _get_session(store, session_id)
    await session.calculate_pricing(request.selected_items, request.trip_context, request.change)
    return session.state()


@router.put("/{session_id}/currency", response_model=SessionState)
async def change_currency(
    session_id: str, request: CurrencyRequest, store: StoreDep
) -> SessionState:
    session = _get_session(store, session_id)
    session.change_currency(request.currency)
    return session.state()


@router.get("/{session_id}/comparison", response_model=PriceComparison)
async def get_price_comparison(session_id: str, store: StoreDep) -> PriceComparison:
    session = _get_session(store, session_id)
    comparison = session.get_price_comparison()
    if comparison is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No pricing history")
    return comparison


@router.delete("/{session_id}/history", status_code=status.HTTP_204_NO_CONTENT)
async def reset_history(session_id: str, store: StoreDep) -> Response:
    _get_session(store, session_id).reset_history()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{session_id}/pricing", status_code=status.HTTP_204_NO_CONTENT)
async def clear_pricing(session_id: str, store: StoreDep) -> Response:
    _get_session(store, session_id).clear_pricing()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
