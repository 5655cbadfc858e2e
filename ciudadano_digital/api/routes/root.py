"""
Root endpoint.

`GET /api` (with or without the trailing slash) identifies the service. The
path is fixed and does not follow the configured API prefix.
"""
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()

API_BANNER = "API de CIUDADANO DIGITAL"


@router.get("/api", response_class=PlainTextResponse)
@router.get("/api/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    """Plaintext identification string for clients and uptime probes."""
    return API_BANNER
