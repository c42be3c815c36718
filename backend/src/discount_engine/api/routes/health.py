"""
Health check endpoint.

Provides system health status for monitoring and load balancers.
"""

from fastapi import APIRouter, Request

from discount_engine import __version__
from discount_engine.api.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Check system health.

    Reports whether a database was set up at startup.
    """
    database = getattr(request.app.state, "database", None)

    return HealthResponse(
        status="healthy",
        version=__version__,
        database="connected" if database is not None else "unavailable",
    )
