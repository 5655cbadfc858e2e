"""Health check endpoint."""
from typing import Literal

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "degraded"]
    database: Literal["ready", "unavailable"]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Report whether startup finished with a working datastore.

    **Returns:**
    - `status`: "healthy", or "degraded" when database initialisation failed
    - `database`: "ready" or "unavailable"
    """
    db_ready = getattr(request.app.state, "db_ready", False)
    return HealthResponse(
        status="healthy" if db_ready else "degraded",
        database="ready" if db_ready else "unavailable",
    )
