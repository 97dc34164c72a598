"""Health and info routes."""
import asyncio

from fastapi import APIRouter, Request, Response

from models import HealthResponse
from routes.deps import get_app_state

router = APIRouter()


@router.get("/", include_in_schema=False)
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Rando Search API",
        "docs": "/docs",
        "health": "/health",
        "search": ["/v0/randos", "/v1/randos"]
    }


@router.get("/health", response_model=HealthResponse)
async def health(request: Request, response: Response):
    """
    Health check endpoint

    Returns 503 when MongoDB does not answer a ping
    """
    app_state = get_app_state(request)
    healthy = await asyncio.to_thread(app_state.is_database_healthy)
    if not healthy:
        response.status_code = 503

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        database=app_state.get_config().data.database
    )
