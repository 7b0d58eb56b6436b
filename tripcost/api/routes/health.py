"""Health check endpoint."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from tripcost.planning.store import InMemorySessionStore, get_session_store

router = APIRouter()


@router.get("/health")
async def health(
    store: Annotated[InMemorySessionStore, Depends(get_session_store)],
) -> dict[str, Any]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running) with the open session count
    """
    return {"status": "ok", "sessions": len(store)}
