"""FastAPI application."""

from fastapi import FastAPI

from tripcost.api.routes.currencies import router as currencies_router
from tripcost.api.routes.health import router as health_router
from tripcost.api.routes.metrics import router as metrics_router
from tripcost.api.routes.schedule import router as schedule_router
from tripcost.api.routes.sessions import router as sessions_router

app = FastAPI(title="Trip Pricing API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(currencies_router)
app.include_router(sessions_router)
app.include_router(schedule_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Trip Pricing API", "version": "0.1.0"}
