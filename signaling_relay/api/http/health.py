"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    connected_clients: int


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(request: Request) -> HealthResponse:
    """
    Report service status and current membership size.

    The relay has no external dependencies, so it is healthy whenever it
    can answer.

    Returns:
        HealthResponse: Status and number of connected clients.
    """
    snapshot = await request.app.state.signaling_router.registry.snapshot()
    return HealthResponse(status="healthy", connected_clients=snapshot.count)
